"""
Navigation engine: runs the synthesis pipeline once per section and
validates the finished tree.

Per section the stages are, in order: resolve canonical paths, assemble
category drafts, link documents across languages, drop true duplicates,
materialize the tree, assign category slugs, merge siblings, make sibling
slugs distinct, order, and prune empty categories. Every run starts from
scratch; nothing is cached between calls to ``generate``.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from plugins.nav_synthesis.assembler import HierarchyAssembler
from plugins.nav_synthesis.canonical import CanonicalPathResolver
from plugins.nav_synthesis.config import EngineConfig, SectionConfig
from plugins.nav_synthesis.diagnostics import DiagnosticLog, NavigationInvariantError, log
from plugins.nav_synthesis.linker import CrossLanguageLinker, LinkStats
from plugins.nav_synthesis.merge import merge_siblings
from plugins.nav_synthesis.models import LANGUAGES, CategoryNode, ContentRecord, NavigationTree, Section
from plugins.nav_synthesis.ordering import order_nodes
from plugins.nav_synthesis.pruning import drop_true_duplicates, prune_empty
from plugins.nav_synthesis.sidecar import SidecarReader
from plugins.nav_synthesis.slugs import assign_category_slugs, resolve_sibling_slugs
from plugins.nav_synthesis.validator import StructuralValidator, ValidationResult


@dataclass
class GenerationResult:
    tree: NavigationTree
    diagnostics: DiagnosticLog
    validation: ValidationResult
    link_stats: Dict[str, LinkStats]

    def succeeded(self, strict: bool = False) -> bool:
        """False on validation errors; in strict mode warnings fail the run too."""
        if not self.validation.valid or self.diagnostics.errors:
            return False
        if strict and self.diagnostics.warnings:
            return False
        return True


def _sort_key(record: ContentRecord):
    lang_rank = LANGUAGES.index(record.language) if record.language in LANGUAGES else len(LANGUAGES)
    return (record.section, lang_rank, record.relative_path, record.source_path)


class NavigationEngine:
    def __init__(self, config: EngineConfig, validator: Optional[StructuralValidator] = None):
        self.config = config
        self.validator = validator or StructuralValidator()

    @staticmethod
    def accept(records: Iterable[ContentRecord], diagnostics: DiagnosticLog) -> List[ContentRecord]:
        """Drop records that cannot be placed in the tree, with a warning each."""
        accepted = []
        for record in records:
            if record.language not in LANGUAGES:
                diagnostics.warning(
                    f"Unsupported language '{record.language}' for {record.relative_path}",
                    path=record.source_path,
                    language=record.language,
                )
                continue
            if not record.frontmatter.title:
                diagnostics.warning(f"Missing title in {record.relative_path}", path=record.source_path)
                continue
            if not record.frontmatter.canonical_key:
                diagnostics.warning(f"Missing canonical key in {record.relative_path}", path=record.source_path)
                continue
            if record.frontmatter.rejected_order is not None:
                diagnostics.warning(
                    f"Ignoring non-numeric order {record.frontmatter.rejected_order!r} in {record.relative_path}",
                    path=record.source_path,
                    order=record.frontmatter.rejected_order,
                )
            accepted.append(record)
        return sorted(accepted, key=_sort_key)

    def section_ids(self, records: List[ContentRecord]) -> List[str]:
        present = {record.section for record in records}
        known = [section_id for section_id in self.config.section_order() if section_id in present]
        unknown = sorted(present - set(known))
        return known + unknown

    def build_section(
        self, section: SectionConfig, records: List[ContentRecord], diagnostics: DiagnosticLog
    ) -> Tuple[List[CategoryNode], LinkStats]:
        resolver = CanonicalPathResolver(self.config.synonyms, self.config.sections)
        resolver.index(records)
        assembler = HierarchyAssembler(resolver, self.config.acronyms, SidecarReader(self.config.max_workers))
        draft = assembler.build(section, records)

        linked = CrossLanguageLinker(self.config.prefer_legacy_slug).link(records, diagnostics)
        documents = drop_true_duplicates(section.id, linked.documents, diagnostics)

        nodes = assembler.materialize(draft, documents)
        nodes = assign_category_slugs(nodes, diagnostics)
        nodes = merge_siblings(nodes, diagnostics)
        nodes = resolve_sibling_slugs(nodes, diagnostics)
        nodes = order_nodes(section, nodes)
        nodes = prune_empty(nodes, diagnostics)
        return [node for node in nodes if isinstance(node, CategoryNode)], linked.stats

    def generate(self, records: Iterable[ContentRecord]) -> GenerationResult:
        diagnostics = DiagnosticLog()
        accepted = self.accept(records, diagnostics)

        by_section: Dict[str, List[ContentRecord]] = {}
        for record in accepted:
            by_section.setdefault(record.section, []).append(record)

        tree = NavigationTree()
        link_stats: Dict[str, LinkStats] = {}
        for section_id in self.section_ids(accepted):
            section = self.config.section(section_id)
            categories, stats = self.build_section(section, by_section[section_id], diagnostics)
            link_stats[section_id] = stats
            tree.sections.append(
                Section(
                    id=section.id,
                    display_name=section.localized_display_name(),
                    slug_prefix=section.slug_prefix,
                    categories=categories,
                )
            )

        validation = self.validator.validate(tree)
        if self.config.strict and not validation.valid:
            raise NavigationInvariantError(validation.errors)

        log.info(
            f"[nav_synthesis] Generated {len(tree.sections)} section(s) from {len(accepted)} records "
            f"with {len(diagnostics)} diagnostic(s)"
        )
        return GenerationResult(tree=tree, diagnostics=diagnostics, validation=validation, link_stats=link_stats)
