"""
Data model shared by every stage of the navigation synthesis engine.

Records come in from the scanner and are never modified. The tree types
(``CategoryNode`` / ``DocumentNode``) form a tagged variant: a parent owns
its ``children`` list outright, there are no back-pointers, so every pass
can recurse structurally without cycle guards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

LANGUAGES: Tuple[str, ...] = ("en", "es", "pt")

# Ordered sequence of normalized segment identifiers inside a section.
CanonicalPath = Tuple[str, ...]

# One value per locale; "" means "no translation", a missing key is a defect.
LocalizedValue = Dict[str, str]


def empty_localized() -> LocalizedValue:
    return {lang: "" for lang in LANGUAGES}


def first_available(value: Mapping[str, str]) -> str:
    """Return the first non-empty entry of a localized value, in locale order."""
    for lang in LANGUAGES:
        text = value.get(lang) or ""
        if text:
            return text
    return ""


@dataclass(frozen=True)
class Frontmatter:
    title: str = ""
    canonical_key: str = ""
    legacy_slug: Optional[str] = None
    order: Optional[float] = None
    status: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
    # an `order` value that was present but not a number
    rejected_order: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Frontmatter":
        """Build frontmatter from a parsed YAML mapping.

        ``canonicalKey`` is the linking key; ``slugEN`` is accepted as the
        older spelling of the same field.
        """
        known = {"title", "canonicalKey", "slugEN", "legacySlug", "order", "status"}
        canonical_key = data.get("canonicalKey") or data.get("slugEN") or ""
        order = data.get("order")
        rejected_order = None
        if isinstance(order, bool) or not isinstance(order, (int, float)):
            rejected_order = order
            order = None
        legacy_slug = data.get("legacySlug")
        return cls(
            title=str(data.get("title") or "").strip(),
            canonical_key=str(canonical_key).strip(),
            legacy_slug=str(legacy_slug).strip() if legacy_slug else None,
            order=order,
            status=str(data.get("status") or ""),
            rejected_order=rejected_order,
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class ContentRecord:
    """One physical markdown file, as produced by the scanner."""

    source_path: str
    relative_path: str
    language: str
    section: str
    directory_segments: Tuple[str, ...]
    file_name_stem: str
    frontmatter: Frontmatter
    body: str = ""


@dataclass
class DocumentNode:
    canonical_key: str
    localized_title: LocalizedValue = field(default_factory=empty_localized)
    localized_slug: LocalizedValue = field(default_factory=empty_localized)
    order: Optional[float] = None
    # locale -> source path of the variant; diagnostics only, never serialized
    sources: Dict[str, str] = field(default_factory=dict)

    def populated_locales(self) -> List[str]:
        return [lang for lang in LANGUAGES if self.localized_title.get(lang)]


@dataclass
class CategoryNode:
    canonical_path: CanonicalPath
    localized_name: LocalizedValue = field(default_factory=empty_localized)
    localized_slug: LocalizedValue = field(default_factory=empty_localized)
    order: Optional[float] = None
    children: List["Node"] = field(default_factory=list)

    @property
    def path_key(self) -> str:
        return "/".join(self.canonical_path)

    def documents(self) -> List[DocumentNode]:
        return [c for c in self.children if isinstance(c, DocumentNode)]

    def categories(self) -> List["CategoryNode"]:
        return [c for c in self.children if isinstance(c, CategoryNode)]


Node = Union[CategoryNode, DocumentNode]


@dataclass
class Section:
    id: str
    display_name: LocalizedValue
    slug_prefix: str
    categories: List[CategoryNode] = field(default_factory=list)


@dataclass
class NavigationTree:
    sections: List[Section] = field(default_factory=list)

    def section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None
