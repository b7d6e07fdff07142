"""
Cross-Language Document Linker.

Folds the per-language records of one section into multilingual document
nodes. Records are linked by their frontmatter canonical key only; titles
and folder names play no part in linking.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from plugins.nav_synthesis.diagnostics import DiagnosticLog, log
from plugins.nav_synthesis.models import LANGUAGES, ContentRecord, DocumentNode
from plugins.nav_synthesis.slugs import slugify


@dataclass
class LinkStats:
    linked: int = 0
    missing_translations: int = 0
    completeness: Dict[str, float] = field(default_factory=dict)


@dataclass
class LinkResult:
    # canonical key -> node, in first-appearance order
    documents: Dict[str, DocumentNode]
    stats: LinkStats


class CrossLanguageLinker:
    def __init__(self, prefer_legacy_slug: bool = False):
        self.prefer_legacy_slug = prefer_legacy_slug

    def slug_for(self, record: ContentRecord, diagnostics: DiagnosticLog) -> str:
        """Per-locale document slug, taken from the file name rather than the title."""
        file_slug = slugify(record.file_name_stem)
        legacy = slugify(record.frontmatter.legacy_slug or "")

        if self.prefer_legacy_slug and legacy:
            return legacy
        if not file_slug:
            return legacy
        if legacy and legacy != file_slug:
            diagnostics.warning(
                f"legacySlug '{legacy}' disagrees with file name slug '{file_slug}' "
                f"in {record.relative_path}; using the file name",
                path=record.source_path,
                language=record.language,
                legacy_slug=legacy,
                slug=file_slug,
            )
        return file_slug

    def link(self, records: Sequence[ContentRecord], diagnostics: DiagnosticLog) -> LinkResult:
        documents: Dict[str, DocumentNode] = {}

        for record in records:
            key = record.frontmatter.canonical_key
            node = documents.get(key)
            if node is None:
                node = DocumentNode(canonical_key=key)
                documents[key] = node

            lang = record.language
            if lang in node.sources:
                diagnostics.warning(
                    f"Duplicate '{key}' in {record.section}/{lang}: keeping {node.sources[lang]}, "
                    f"dropping {record.source_path}",
                    section=record.section,
                    language=lang,
                    canonical_key=key,
                    survivor=node.sources[lang],
                    casualty=record.source_path,
                )
                continue

            node.sources[lang] = record.source_path
            node.localized_title[lang] = record.frontmatter.title
            node.localized_slug[lang] = self.slug_for(record, diagnostics)

        # Order is taken in locale order, not input order.
        by_key: Dict[str, Dict[str, ContentRecord]] = {}
        for record in records:
            by_key.setdefault(record.frontmatter.canonical_key, {}).setdefault(record.language, record)
        for key, node in documents.items():
            for lang in LANGUAGES:
                record = by_key[key].get(lang)
                if record is not None and record.frontmatter.order is not None:
                    node.order = record.frontmatter.order
                    break

        stats = self._stats(list(documents.values()))
        log.debug(
            f"[nav_synthesis] Linked {len(records)} records into {stats.linked} documents "
            f"({stats.missing_translations} missing translations)"
        )
        return LinkResult(documents=documents, stats=stats)

    @staticmethod
    def _stats(nodes: List[DocumentNode]) -> LinkStats:
        stats = LinkStats(linked=len(nodes))
        for lang in LANGUAGES:
            present = sum(1 for node in nodes if node.localized_title.get(lang))
            stats.missing_translations += len(nodes) - present
            stats.completeness[lang] = round(100.0 * present / len(nodes), 1) if nodes else 0.0
        return stats
