import re
from dataclasses import replace
from pathlib import PurePath
from typing import List, Optional, Tuple

from plugins.nav_synthesis.config import SectionConfig
from plugins.nav_synthesis.models import LANGUAGES, CategoryNode, DocumentNode, Node, first_available

MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
NUMBER_PREFIX = re.compile(r"^\d+\.\s")


def display_key(node: Node) -> str:
    names = node.localized_name if isinstance(node, CategoryNode) else node.localized_title
    return (names.get("en") or first_available(names)).casefold()


def identity(node: Node) -> str:
    return node.path_key if isinstance(node, CategoryNode) else node.canonical_key


def alphabetical_key(node: Node) -> Tuple[str, str]:
    return (display_key(node), identity(node))


def bucket_value(node: CategoryNode) -> Optional[int]:
    """Numeric value of a year or month bucket; None when the segment is neither."""
    segment = node.canonical_path[-1] if node.canonical_path else ""
    if segment.isdigit():
        return int(segment)
    return MONTHS.get(segment)


def document_date(node: DocumentNode) -> Optional[str]:
    """``YYYY-MM-DD`` taken from the canonical key or any source file name."""
    candidates = [node.canonical_key] + [PurePath(p).stem for p in node.sources.values() if p]
    for candidate in candidates:
        match = DATE_PREFIX.match(candidate)
        if match:
            return "-".join(match.groups())
    return None


def _by_order(nodes: List[Node]) -> List[Node]:
    with_order = sorted((n for n in nodes if n.order is not None), key=lambda n: (n.order, alphabetical_key(n)))
    without = sorted((n for n in nodes if n.order is None), key=alphabetical_key)
    return with_order + without


def _chronological(nodes: List[Node]) -> List[Node]:
    categories = [n for n in nodes if isinstance(n, CategoryNode)]
    documents = [n for n in nodes if isinstance(n, DocumentNode)]

    buckets = [c for c in categories if bucket_value(c) is not None]
    unparsed = [c for c in categories if bucket_value(c) is None]
    buckets.sort(key=lambda c: (-bucket_value(c), c.path_key))
    unparsed.sort(key=alphabetical_key)

    dated = [d for d in documents if document_date(d)]
    undated = [d for d in documents if not document_date(d)]
    # Stable two-pass sort: identity ascending within a date, dates descending.
    dated.sort(key=identity)
    dated.sort(key=document_date, reverse=True)
    undated.sort(key=alphabetical_key)

    return buckets + unparsed + dated + undated


def number_titles(nodes: List[Node]) -> List[Node]:
    """Prefix each document title with its 1-based position among documents."""
    result: List[Node] = []
    position = 0
    for node in nodes:
        if isinstance(node, DocumentNode):
            position += 1
            titles = {}
            for lang in LANGUAGES:
                title = node.localized_title.get(lang, "")
                if title and not NUMBER_PREFIX.match(title):
                    title = f"{position}. {title}"
                titles[lang] = title
            node = replace(node, localized_title=titles)
        result.append(node)
    return result


class OrderingEngine:
    def __init__(self, section: SectionConfig):
        self.section = section

    def sort(self, nodes: List[Node]) -> List[Node]:
        if self.section.ordering == "order":
            return _by_order(nodes)
        if self.section.ordering == "chronological":
            return _chronological(nodes)
        return sorted(nodes, key=alphabetical_key)

    def apply(self, nodes: List[Node]) -> List[Node]:
        """Sort every sibling list recursively; returns new category nodes."""
        ordered: List[Node] = []
        for node in self.sort(list(nodes)):
            if isinstance(node, CategoryNode):
                node = replace(node, children=self.apply(node.children))
            ordered.append(node)
        if self.section.numbered_titles:
            ordered = number_titles(ordered)
        return ordered


def order_nodes(section: SectionConfig, nodes: List[Node]) -> List[Node]:
    return OrderingEngine(section).apply(nodes)
