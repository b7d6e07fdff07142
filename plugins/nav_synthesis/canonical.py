"""
Canonical Path Resolver.

Maps a record's directory segments to a language-independent canonical
path. When the same document exists in several languages, the folder
structure of a reference variant is used (English first, then Spanish,
then Portuguese), so all variants of one document land in the same
category. Every chosen segment goes through ``normalize_segment``, which
depends only on the segment text and the synonym table.
"""

import re
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from plugins.nav_synthesis.config import SectionConfig
from plugins.nav_synthesis.diagnostics import log
from plugins.nav_synthesis.models import LANGUAGES, CanonicalPath, ContentRecord
from plugins.nav_synthesis.slugs import slugify

UNCATEGORIZED = "uncategorized"
UNTITLED = "untitled"

WORD_SEPARATORS = re.compile(r"[-_\s]+")


def normalize_segment(text: str, synonyms: Mapping[str, str]) -> str:
    """Normalize one folder name into a canonical identifier.

    Lowercase, strip accents, collapse non-alphanumerics to ``-``, then map
    known localized names through the synonym table. Unknown names pass
    through normalized but unmapped.
    """
    normalized = slugify(text)
    if not normalized:
        return UNTITLED
    return synonyms.get(normalized, normalized)


def display_name_from_segment(text: str, acronyms: Mapping[str, str]) -> str:
    """Turn a raw folder name into a sentence-case display name.

    ``b2b-overview`` becomes ``B2B overview``; known acronyms keep their
    configured casing wherever they appear.
    """
    if not text or not text.strip():
        return "Uncategorized"

    whole = acronyms.get(WORD_SEPARATORS.sub("", text).lower())
    if whole:
        return whole

    words = [w for w in WORD_SEPARATORS.split(text.strip()) if w]
    processed = []
    for word in words:
        acronym = acronyms.get(word.lower())
        if acronym:
            processed.append(acronym)
        elif not processed:
            processed.append(word[:1].upper() + word[1:].lower())
        else:
            processed.append(word.lower())
    return " ".join(processed)


class CanonicalPathResolver:
    def __init__(self, synonyms: Mapping[str, str], sections: Mapping[str, SectionConfig]):
        self._synonyms = MappingProxyType(dict(synonyms))
        self._sections = sections
        # (section, canonical_key) -> language -> first record seen
        self._reference: Dict[Tuple[str, str], Dict[str, ContentRecord]] = {}

    def index(self, records: Iterable[ContentRecord]) -> None:
        """Register every record as a potential reference for its siblings in other languages."""
        self._reference = {}
        for record in records:
            key = (record.section, record.frontmatter.canonical_key)
            variants = self._reference.setdefault(key, {})
            variants.setdefault(record.language, record)

    def reference_for(self, record: ContentRecord) -> ContentRecord:
        """Return the variant whose folder layout defines the canonical path."""
        variants = self._reference.get((record.section, record.frontmatter.canonical_key), {})
        for lang in LANGUAGES:
            if lang in variants:
                return variants[lang]
        return record

    def _section(self, section_id: str) -> SectionConfig:
        return self._sections.get(section_id) or SectionConfig.default_for(section_id)

    def normalize(self, segment: str) -> str:
        return normalize_segment(segment, self._synonyms)

    def segments_for(self, record: ContentRecord) -> Tuple[str, ...]:
        """Raw (non-canonical) segments of a record, trimmed to the section layout."""
        segments = tuple(s for s in record.directory_segments if s)
        if not self._section(record.section).nested:
            segments = segments[:1]
        return segments

    def category_key(self, record: ContentRecord) -> Optional[str]:
        field_name = self._section(record.section).category_key
        if not field_name:
            return None
        value = record.frontmatter.extra.get(field_name)
        return str(value) if value else None

    def resolve(self, record: ContentRecord) -> CanonicalPath:
        reference = self.reference_for(record)
        segments = self.segments_for(reference)

        canonical = [self.normalize(segment) for segment in segments]
        override = self.category_key(reference)
        if override:
            if canonical:
                canonical[0] = self.normalize(override)
            else:
                canonical = [self.normalize(override)]
        if not canonical:
            canonical = [UNCATEGORIZED]

        path = tuple(canonical)
        if reference is not record:
            log.debug(
                f"[nav_synthesis] {record.relative_path} ({record.language}) uses "
                f"{reference.language} layout -> {'/'.join(path)}"
            )
        return path
