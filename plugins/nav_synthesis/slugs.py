import re
import unicodedata
from dataclasses import replace
from typing import Iterable, List, Optional, Set

from plugins.nav_synthesis.diagnostics import DiagnosticLog
from plugins.nav_synthesis.models import (
    LANGUAGES,
    CategoryNode,
    DocumentNode,
    Node,
    empty_localized,
)

NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Appended to a category slug that collides with a document slug.
CATEGORY_SUFFIX = "-category"
MAX_SUFFIX_ATTEMPTS = 3


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str) -> str:
    """Lowercase ASCII slug: accents stripped, runs of other characters collapsed to '-'."""
    ascii_text = strip_accents(str(text or "")).lower()
    return NON_ALNUM.sub("-", ascii_text).strip("-")


def _document_slugs(nodes: Iterable[Node], lang: str) -> Set[str]:
    return {
        node.localized_slug.get(lang, "")
        for node in nodes
        if isinstance(node, DocumentNode) and node.localized_slug.get(lang)
    }


def _with_suffix(candidate: str, taken: Set[str]) -> Optional[str]:
    """Append the category suffix until the slug is free; None when attempts run out."""
    for _ in range(MAX_SUFFIX_ATTEMPTS):
        if candidate not in taken:
            return candidate
        candidate = f"{candidate}{CATEGORY_SUFFIX}"
    return candidate if candidate not in taken else None


def _category_base_slug(node: CategoryNode, lang: str) -> str:
    slug = slugify(node.localized_name.get(lang, ""))
    if not slug:
        slug = slugify(node.localized_name.get("en", ""))
    if not slug and node.canonical_path:
        slug = node.canonical_path[-1]
    return slug


def assign_category_slugs(nodes: List[Node], diagnostics: DiagnosticLog) -> List[Node]:
    """
    Derive a per-locale slug for every category from its localized name.

    A category slug must not shadow a document slug of the same locale,
    neither among its own documents nor among the documents next to it.
    On collision the literal ``-category`` suffix is appended, at most
    ``MAX_SUFFIX_ATTEMPTS`` times.
    """
    result: List[Node] = []
    for node in nodes:
        if isinstance(node, DocumentNode):
            result.append(node)
            continue

        children = assign_category_slugs(node.children, diagnostics)
        slugs = empty_localized()
        for lang in LANGUAGES:
            base = _category_base_slug(node, lang)
            if not base:
                continue
            taken = _document_slugs(children, lang) | _document_slugs(nodes, lang)
            resolved = _with_suffix(base, taken)
            if resolved is None:
                diagnostics.warning(
                    f"Could not find a free slug for category '{node.path_key}' in '{lang}' "
                    f"after {MAX_SUFFIX_ATTEMPTS} attempts",
                    category=node.path_key,
                    language=lang,
                    slug=base,
                )
                resolved = base
            slugs[lang] = resolved
        result.append(replace(node, localized_slug=slugs, children=children))
    return result


def resolve_sibling_slugs(nodes: List[Node], diagnostics: DiagnosticLog) -> List[Node]:
    """
    Make category slugs distinct among siblings, per locale.

    Runs after the merge pass, so English slugs are already unique among
    categories; other locales can still collide when two distinct
    categories share a translation, and merging can put a category next to
    a document of the same slug. The category that clashes takes the
    ``-category`` suffix.
    """
    result: List[Node] = []
    taken = {lang: _document_slugs(nodes, lang) for lang in LANGUAGES}
    claimed = {lang: set() for lang in LANGUAGES}

    for node in nodes:
        if isinstance(node, DocumentNode):
            result.append(node)
            continue

        slugs = dict(node.localized_slug)
        for lang in LANGUAGES:
            slug = slugs.get(lang, "")
            if not slug:
                continue
            if slug in claimed[lang] or slug in taken[lang]:
                resolved = _with_suffix(slug, claimed[lang] | taken[lang])
                if resolved is None:
                    diagnostics.warning(
                        f"Category slug '{slug}' in '{lang}' clashes with a sibling and no free suffix was found",
                        category=node.path_key,
                        language=lang,
                        slug=slug,
                    )
                    resolved = slug
                slug = resolved
                slugs[lang] = slug
            claimed[lang].add(slug)

        children = resolve_sibling_slugs(node.children, diagnostics)
        result.append(replace(node, localized_slug=slugs, children=children))
    return result
