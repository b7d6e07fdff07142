import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml

from plugins.nav_synthesis.config import EngineConfig
from plugins.nav_synthesis.diagnostics import DiagnosticLog, log
from plugins.nav_synthesis.models import LANGUAGES, ContentRecord, Frontmatter

# Module scope regex variables

FM_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)

MARKDOWN_SUFFIXES = (".md", ".mdx")
PUBLISHED = "PUBLISHED"


@dataclass
class ScanStats:
    files: int = 0
    records: int = 0
    skipped: int = 0
    by_language: Dict[str, int] = field(default_factory=dict)
    by_section: Dict[str, int] = field(default_factory=dict)


@dataclass
class ScanResult:
    records: List[ContentRecord]
    diagnostics: DiagnosticLog
    stats: ScanStats


def split_front_matter(source_text: str) -> Tuple[dict, str]:
    """
    Return (front_matter_dict, body_text). If no FM, dict={} and body=source_text.
    Raises yaml.YAMLError when the front matter block is not valid YAML.
    """
    m = FM_PATTERN.match(source_text)
    if not m:
        return {}, source_text
    fm = yaml.safe_load(m.group(1)) or {}
    if not isinstance(fm, dict):
        fm = {}
    return fm, source_text[m.end() :]


def get_all_markdown_files(root_dir: Path) -> List[Path]:
    """Collect *.md|*.mdx below root_dir, sorted."""
    results = []
    for root, _, files in os.walk(root_dir):
        for file in files:
            if file.endswith(MARKDOWN_SUFFIXES):
                results.append(Path(root) / file)
    return sorted(results)


class ContentScanner:
    """
    Reads ``<content_dir>/<lang>/<section>/<dirs...>/<file>.md`` into
    content records. Only published files become records.
    """

    def __init__(
        self,
        content_dir: Path,
        config: EngineConfig,
        languages: Optional[Iterable[str]] = None,
        sections: Optional[Iterable[str]] = None,
    ):
        self.content_dir = Path(content_dir)
        self.config = config
        self.languages = [lang for lang in LANGUAGES if languages is None or lang in set(languages)]
        self.sections = set(sections) if sections else None

    def scan(self) -> ScanResult:
        if not self.content_dir.is_dir():
            raise FileNotFoundError(f"content directory not found at {self.content_dir}")

        diagnostics = DiagnosticLog()
        stats = ScanStats()
        records: List[ContentRecord] = []

        for lang in self.languages:
            lang_dir = self.content_dir / lang
            if not lang_dir.is_dir():
                diagnostics.warning(f"Language directory not found: {lang_dir}", language=lang)
                continue

            for section_dir in sorted(p for p in lang_dir.iterdir() if p.is_dir()):
                section_id = section_dir.name
                if self.sections is not None and section_id not in self.sections:
                    continue
                if section_id not in self.config.sections:
                    diagnostics.warning(
                        f"Skipping unknown section '{section_id}' in {lang}", language=lang, section=section_id
                    )
                    continue

                for md_path in get_all_markdown_files(section_dir):
                    stats.files += 1
                    record = self.read_record(md_path, lang, section_id, section_dir, diagnostics)
                    if record is None:
                        stats.skipped += 1
                        continue
                    records.append(record)
                    stats.records += 1
                    stats.by_language[lang] = stats.by_language.get(lang, 0) + 1
                    stats.by_section[section_id] = stats.by_section.get(section_id, 0) + 1

        log.info(
            f"[nav_synthesis] Scanned {stats.files} markdown files in {self.content_dir}: "
            f"{stats.records} records, {stats.skipped} skipped"
        )
        return ScanResult(records=records, diagnostics=diagnostics, stats=stats)

    def read_record(
        self, md_path: Path, lang: str, section_id: str, section_dir: Path, diagnostics: DiagnosticLog
    ) -> Optional[ContentRecord]:
        try:
            text = md_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            diagnostics.warning(f"Unable to read {md_path}: {e}", path=str(md_path))
            return None

        try:
            front_matter, body = split_front_matter(text)
        except yaml.YAMLError as e:
            diagnostics.warning(f"Unable to parse front matter in {md_path}: {e}", path=str(md_path))
            return None

        status = str(front_matter.get("status") or PUBLISHED).upper()
        if status != PUBLISHED:
            log.debug(f"[nav_synthesis] Skipping {md_path}: status {status}")
            return None

        relative = md_path.relative_to(self.content_dir)
        return ContentRecord(
            source_path=str(md_path),
            relative_path=relative.as_posix(),
            language=lang,
            section=section_id,
            directory_segments=md_path.parent.relative_to(section_dir).parts,
            file_name_stem=md_path.stem,
            frontmatter=Frontmatter.from_mapping(front_matter),
            body=body,
        )
