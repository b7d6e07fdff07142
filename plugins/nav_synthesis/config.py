"""
Static configuration for the navigation engine.

The bundled tables (sections, folder-name synonyms, acronyms) ship as JSON
next to this module. Users can point the plugin at their own JSON or YAML
files, which are layered on top of the bundled data. Everything handed to
the engine is immutable: tables are wrapped in ``MappingProxyType`` and the
configs are frozen dataclasses.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from plugins.nav_synthesis.diagnostics import NavigationConfigError, log
from plugins.nav_synthesis.models import LANGUAGES, LocalizedValue
from plugins.nav_synthesis.slugs import slugify

DATA_DIR = Path(__file__).parent

LAYOUTS = ("nested", "flat")
ORDERINGS = ("alphabetical", "order", "chronological")


@dataclass(frozen=True)
class SectionConfig:
    id: str
    display_name: Mapping[str, str]
    slug_prefix: str
    layout: str = "flat"
    ordering: str = "alphabetical"
    numbered_titles: bool = False
    category_key: Optional[str] = None

    @property
    def nested(self) -> bool:
        return self.layout == "nested"

    def localized_display_name(self) -> LocalizedValue:
        return {lang: str(self.display_name.get(lang) or "") for lang in LANGUAGES}

    @classmethod
    def default_for(cls, section_id: str) -> "SectionConfig":
        """Fallback used for sections found in content but absent from config."""
        title = section_id.replace("-", " ").replace("_", " ").strip()
        return cls(
            id=section_id,
            display_name=MappingProxyType({"en": title[:1].upper() + title[1:], "es": "", "pt": ""}),
            slug_prefix=section_id,
        )

    @classmethod
    def from_mapping(cls, section_id: str, data: Mapping[str, Any]) -> "SectionConfig":
        layout = data.get("layout", "flat")
        ordering = data.get("ordering", "alphabetical")
        if layout not in LAYOUTS:
            raise NavigationConfigError(
                f"section '{section_id}': unknown layout '{layout}' (expected one of {LAYOUTS})"
            )
        if ordering not in ORDERINGS:
            raise NavigationConfigError(
                f"section '{section_id}': unknown ordering '{ordering}' (expected one of {ORDERINGS})"
            )
        display_name = data.get("displayName") or {}
        if not isinstance(display_name, Mapping):
            raise NavigationConfigError(f"section '{section_id}': displayName must be an object")
        return cls(
            id=section_id,
            display_name=MappingProxyType({lang: str(display_name.get(lang, "")) for lang in LANGUAGES}),
            slug_prefix=str(data.get("slugPrefix") or section_id),
            layout=layout,
            ordering=ordering,
            numbered_titles=bool(data.get("numberedTitles", False)),
            category_key=data.get("categoryKey") or None,
        )


@dataclass(frozen=True)
class EngineConfig:
    sections: Mapping[str, SectionConfig] = field(default_factory=lambda: MappingProxyType({}))
    synonyms: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    acronyms: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    strict: bool = False
    prefer_legacy_slug: bool = False
    max_workers: int = 8

    def section(self, section_id: str) -> SectionConfig:
        return self.sections.get(section_id) or SectionConfig.default_for(section_id)

    def section_order(self) -> Tuple[str, ...]:
        return tuple(self.sections.keys())


def _read_table(path: Path) -> Dict[str, Any]:
    """Read a JSON or YAML configuration file into a dict."""
    if not path.exists():
        raise NavigationConfigError(f"configuration file not found at {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise NavigationConfigError(f"failed to parse configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise NavigationConfigError(f"configuration file {path} must contain an object")
    return data


def _string_table(data: Mapping[str, Any], key: str, path: Path, slug_keys: bool = False) -> Dict[str, str]:
    table = data.get(key, {})
    if not isinstance(table, Mapping):
        raise NavigationConfigError(f"'{key}' in {path} must be an object")
    if slug_keys:
        # Keys and values are compared against normalized segments.
        return {slugify(str(k)): slugify(str(v)) for k, v in table.items() if slugify(str(k))}
    return {str(k).strip().lower(): str(v) for k, v in table.items()}


def load_sections(path: Optional[Path] = None) -> Mapping[str, SectionConfig]:
    """Load section configs; a user file replaces bundled sections of the same id."""
    raw = dict(_read_table(DATA_DIR / "sections.json").get("sections", {}))
    if path is not None:
        user_sections = _read_table(path).get("sections", {})
        if not isinstance(user_sections, Mapping):
            raise NavigationConfigError(f"'sections' in {path} must be an object")
        raw.update(user_sections)
        log.info(f"[nav_synthesis] Loaded {len(user_sections)} section override(s) from {path}")
    return MappingProxyType(
        {section_id: SectionConfig.from_mapping(section_id, data) for section_id, data in raw.items()}
    )


def load_synonyms(path: Optional[Path] = None) -> Mapping[str, str]:
    """Load the localized folder-name synonym table, extended by an optional user file."""
    bundled = DATA_DIR / "synonyms.json"
    table = _string_table(_read_table(bundled), "synonyms", bundled, slug_keys=True)
    if path is not None:
        extra = _string_table(_read_table(path), "synonyms", path, slug_keys=True)
        table.update(extra)
        log.info(f"[nav_synthesis] Loaded {len(extra)} synonym(s) from {path}")
    return MappingProxyType(table)


def load_acronyms() -> Mapping[str, str]:
    bundled = DATA_DIR / "acronyms.json"
    return MappingProxyType(_string_table(_read_table(bundled), "acronyms", bundled))


def load_engine_config(
    sections_path: Optional[Path] = None,
    synonyms_path: Optional[Path] = None,
    strict: bool = False,
    prefer_legacy_slug: bool = False,
    max_workers: int = 8,
) -> EngineConfig:
    return EngineConfig(
        sections=load_sections(sections_path),
        synonyms=load_synonyms(synonyms_path),
        acronyms=load_acronyms(),
        strict=strict,
        prefer_legacy_slug=prefer_legacy_slug,
        max_workers=max(1, int(max_workers)),
    )
