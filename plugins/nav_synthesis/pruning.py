from dataclasses import replace
from typing import Dict, List, Mapping, Tuple

from plugins.nav_synthesis.diagnostics import DiagnosticLog, log
from plugins.nav_synthesis.models import LANGUAGES, CategoryNode, DocumentNode, Node


def drop_true_duplicates(
    section_id: str, documents: Mapping[str, DocumentNode], diagnostics: DiagnosticLog
) -> Dict[str, DocumentNode]:
    """
    Enforce one document per (section, locale, slug).

    The first document in input order keeps a contested slot; every later
    one loses that locale's title and slug. A document left without any
    populated locale is removed. Returns a new key -> node mapping.
    """
    owners: Dict[Tuple[str, str], DocumentNode] = {}
    result: Dict[str, DocumentNode] = {}

    for key, node in documents.items():
        titles = dict(node.localized_title)
        slugs = dict(node.localized_slug)
        sources = dict(node.sources)
        for lang in LANGUAGES:
            slug = slugs.get(lang, "")
            if not slug:
                continue
            survivor = owners.get((lang, slug))
            if survivor is None:
                owners[(lang, slug)] = node
                continue
            diagnostics.warning(
                f"True duplicate in {section_id}/{lang} for slug '{slug}': keeping "
                f"{survivor.sources.get(lang, survivor.canonical_key)}, dropping "
                f"{node.sources.get(lang, node.canonical_key)}",
                section=section_id,
                language=lang,
                slug=slug,
                survivor=survivor.sources.get(lang, ""),
                casualty=node.sources.get(lang, ""),
            )
            titles[lang] = ""
            slugs[lang] = ""
            sources.pop(lang, None)

        pruned = replace(node, localized_title=titles, localized_slug=slugs, sources=sources)
        if not any(slugs.values()) and not any(titles.values()):
            log.debug(f"[nav_synthesis] Removed document '{key}' from {section_id}: no locale left")
            continue
        result[key] = pruned
    return result


def prune_empty(nodes: List[Node], diagnostics: DiagnosticLog) -> List[Node]:
    """Drop categories whose subtree holds no document, bottom-up."""
    result: List[Node] = []
    for node in nodes:
        if isinstance(node, DocumentNode):
            result.append(node)
            continue
        children = prune_empty(node.children, diagnostics)
        if not children:
            diagnostics.warning(f"Pruned empty category '{node.path_key}'", category=node.path_key)
            continue
        result.append(replace(node, children=children))
    return result
