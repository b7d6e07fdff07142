"""
Category Hierarchy Assembler.

Groups the records of one section by canonical path into category drafts.
Drafts live in an arena keyed by the full canonical path string, not by
object identity, so the same category reached from several languages is a
single entry. Drafts hold document *keys* only; ``materialize`` swaps them
for the linked ``DocumentNode`` objects once linking is done.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from plugins.nav_synthesis.canonical import CanonicalPathResolver, display_name_from_segment
from plugins.nav_synthesis.config import SectionConfig
from plugins.nav_synthesis.diagnostics import log
from plugins.nav_synthesis.models import (
    LANGUAGES,
    CanonicalPath,
    CategoryNode,
    ContentRecord,
    DocumentNode,
    Node,
    empty_localized,
    first_available,
)
from plugins.nav_synthesis.sidecar import SidecarReader


def path_key(path: Sequence[str]) -> str:
    return "/".join(path)


@dataclass
class CategoryDraft:
    canonical_path: CanonicalPath
    folder_names: Dict[str, str] = field(default_factory=dict)
    metadata_names: Dict[str, str] = field(default_factory=dict)
    metadata_orders: Dict[str, float] = field(default_factory=dict)
    child_keys: List[str] = field(default_factory=list)
    document_keys: List[str] = field(default_factory=list)

    def localized_name(self, acronyms: Mapping[str, str]) -> Dict[str, str]:
        name = empty_localized()
        for lang in LANGUAGES:
            name[lang] = self.metadata_names.get(lang) or self.folder_names.get(lang) or ""
        fallback = first_available(name) or display_name_from_segment(self.canonical_path[-1], acronyms)
        for lang in LANGUAGES:
            if not name[lang]:
                name[lang] = fallback
        return name

    def order(self) -> Optional[float]:
        for lang in LANGUAGES:
            if lang in self.metadata_orders:
                return self.metadata_orders[lang]
        return None


@dataclass
class SectionDraft:
    section_id: str
    arena: Dict[str, CategoryDraft] = field(default_factory=dict)
    root_keys: List[str] = field(default_factory=list)

    def get(self, canonical_path: Sequence[str]) -> Optional[CategoryDraft]:
        return self.arena.get(path_key(canonical_path))


def _section_root(record: ContentRecord) -> Optional[Path]:
    """Directory of the record's section for its language, derived from the source path."""
    if not record.source_path:
        return None
    directory = Path(record.source_path).parent
    for _ in record.directory_segments:
        directory = directory.parent
    return directory


class HierarchyAssembler:
    def __init__(
        self,
        resolver: CanonicalPathResolver,
        acronyms: Mapping[str, str],
        sidecars: Optional[SidecarReader] = None,
    ):
        self.resolver = resolver
        self.acronyms = acronyms
        self.sidecars = sidecars or SidecarReader()

    def _aligned_levels(
        self, record: ContentRecord, canonical: CanonicalPath
    ) -> List[Tuple[int, str, Optional[Path]]]:
        """
        Levels at which this record's own folders line up with the canonical
        path, as (depth, raw folder name, directory). A record whose folder
        depth differs from the canonical depth lends no names, since its
        folders would label the wrong categories.
        """
        own = self.resolver.segments_for(record)
        if len(own) != len(canonical):
            return []
        root = _section_root(record)
        levels = []
        for depth, segment in enumerate(own):
            directory = root.joinpath(*own[: depth + 1]) if root is not None else None
            levels.append((depth, segment, directory))
        return levels

    def build(self, section: SectionConfig, records: Sequence[ContentRecord]) -> SectionDraft:
        draft = SectionDraft(section_id=section.id)
        resolved = [(record, self.resolver.resolve(record)) for record in records]

        # Sidecars gate ordering, so they are all read before any draft is built.
        self.sidecars.prefetch(
            directory
            for record, canonical in resolved
            for _, _, directory in self._aligned_levels(record, canonical)
            if directory is not None
        )

        for record, canonical in resolved:
            aligned = {depth: (segment, directory) for depth, segment, directory in self._aligned_levels(record, canonical)}
            parent: Optional[CategoryDraft] = None

            for depth in range(len(canonical)):
                level_path = canonical[: depth + 1]
                key = path_key(level_path)
                category = draft.arena.get(key)
                if category is None:
                    category = CategoryDraft(canonical_path=level_path)
                    draft.arena[key] = category
                    if parent is None:
                        draft.root_keys.append(key)
                    else:
                        parent.child_keys.append(key)
                    log.debug(f"[nav_synthesis] Created category {section.id}/{key}")

                if depth in aligned:
                    segment, directory = aligned[depth]
                    category.folder_names.setdefault(
                        record.language, display_name_from_segment(segment, self.acronyms)
                    )
                    metadata = self.sidecars.get(directory) if directory is not None else None
                    if metadata is not None:
                        if metadata.name:
                            category.metadata_names.setdefault(record.language, metadata.name)
                        if metadata.order is not None:
                            category.metadata_orders.setdefault(record.language, metadata.order)
                parent = category

            canonical_key = record.frontmatter.canonical_key
            if parent is not None and canonical_key not in parent.document_keys:
                parent.document_keys.append(canonical_key)

        log.info(
            f"[nav_synthesis] Section '{section.id}': {len(draft.arena)} categories "
            f"({len(draft.root_keys)} top-level) from {len(records)} records"
        )
        return draft

    def materialize(self, draft: SectionDraft, documents: Mapping[str, DocumentNode]) -> List[CategoryNode]:
        """Build CategoryNodes from drafts, attaching linked documents by canonical key."""

        def build_node(key: str) -> CategoryNode:
            category = draft.arena[key]
            children: List[Node] = [build_node(child) for child in category.child_keys]
            children.extend(documents[k] for k in category.document_keys if k in documents)
            return CategoryNode(
                canonical_path=category.canonical_path,
                localized_name=category.localized_name(self.acronyms),
                order=category.order(),
                children=children,
            )

        return [build_node(key) for key in draft.root_keys]
