"""
Category Merge Engine.

Categories built separately from different languages' folder names can
still describe the same entity once slugs exist. Siblings with the same
English slug are collapsed into one category here, recursively.
"""

from typing import Dict, List, Optional, Tuple

from plugins.nav_synthesis.diagnostics import DiagnosticLog, log
from plugins.nav_synthesis.models import LANGUAGES, CategoryNode, DocumentNode, Node


def _category_key(node: CategoryNode) -> Tuple[str, str]:
    slug = node.localized_slug.get("en", "")
    return ("slug", slug) if slug else ("path", node.path_key)


def _document_key(node: DocumentNode) -> Tuple[str, str]:
    slug = node.localized_slug.get("en", "")
    return ("slug", slug) if slug else ("key", node.canonical_key)


def _union(first: Dict[str, str], second: Dict[str, str]) -> Dict[str, str]:
    return {lang: first.get(lang) or second.get(lang) or "" for lang in LANGUAGES}


def _combine(first: CategoryNode, second: CategoryNode) -> CategoryNode:
    return CategoryNode(
        canonical_path=first.canonical_path,
        localized_name=_union(first.localized_name, second.localized_name),
        localized_slug=_union(first.localized_slug, second.localized_slug),
        order=first.order if first.order is not None else second.order,
        children=list(first.children) + list(second.children),
    )


def merge_siblings(nodes: List[Node], diagnostics: Optional[DiagnosticLog] = None) -> List[Node]:
    """
    Collapse sibling categories sharing an English slug and drop sibling
    documents sharing an English slug, keeping first-appearance order.

    Returns new node objects; the input list is left untouched. Merging an
    already merged list returns an equal list.
    """
    slots: List[Tuple[str, Tuple[str, str]]] = []
    categories: Dict[Tuple[str, str], CategoryNode] = {}
    documents: Dict[Tuple[str, str], DocumentNode] = {}

    for node in nodes:
        if isinstance(node, CategoryNode):
            key = _category_key(node)
            if key in categories:
                log.debug(
                    f"[nav_synthesis] Merging category {node.path_key} into {categories[key].path_key}"
                )
                categories[key] = _combine(categories[key], node)
            else:
                categories[key] = node
                slots.append(("category", key))
        else:
            key = _document_key(node)
            if key in documents:
                if diagnostics is not None:
                    diagnostics.warning(
                        f"Dropped document '{node.canonical_key}': sibling '{documents[key].canonical_key}' "
                        f"already uses slug '{key[1]}'",
                        survivor=documents[key].canonical_key,
                        casualty=node.canonical_key,
                        slug=key[1],
                    )
                continue
            documents[key] = node
            slots.append(("document", key))

    merged: List[Node] = []
    for kind, key in slots:
        if kind == "document":
            merged.append(documents[key])
            continue
        category = categories[key]
        merged.append(
            CategoryNode(
                canonical_path=category.canonical_path,
                localized_name=dict(category.localized_name),
                localized_slug=dict(category.localized_slug),
                order=category.order,
                children=merge_siblings(category.children, diagnostics),
            )
        )
    return merged
