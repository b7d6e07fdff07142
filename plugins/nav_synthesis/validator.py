"""
Structural Validator.

Checks a serialized navigation payload without touching it: first against
the bundled JSON schema, then for sibling slug uniqueness, then for
translation coverage. Schema and invariant problems are errors; coverage
gaps are warnings. A tree built in memory is serialized first, so a tree
and a ``navigation.json`` read back from disk go through the same checks.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from plugins.nav_synthesis.diagnostics import NavigationInvariantError, log
from plugins.nav_synthesis.models import LANGUAGES, NavigationTree
from plugins.nav_synthesis.serializer import tree_to_dict

SCHEMA_FILE_PATH = Path(__file__).parent / "navigation.schema.json"

CATEGORY = "category"
DOCUMENT = "markdown"


@dataclass
class ValidationStats:
    total_categories: int = 0
    total_documents: int = 0
    language_coverage: Dict[str, int] = field(default_factory=lambda: {lang: 0 for lang in LANGUAGES})
    missing_translations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCategories": self.total_categories,
            "totalDocuments": self.total_documents,
            "languageCoverage": dict(self.language_coverage),
            "missingTranslations": self.missing_translations,
        }


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=ValidationStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "stats": self.stats.to_dict(),
        }


def _load_schema() -> Dict[str, Any]:
    with open(SCHEMA_FILE_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


# Payloads read from disk may be malformed; the schema check reports that,
# the walkers below only need to not fail on it.


def _children(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [node for node in value if isinstance(node, dict)]


def _localized(node: Dict[str, Any], key: str, lang: str) -> str:
    value = node.get(key)
    if isinstance(value, dict) and isinstance(value.get(lang), str):
        return value[lang]
    return ""


def _label(node: Dict[str, Any]) -> str:
    return _localized(node, "name", "en") or _localized(node, "slug", "en") or "(category)"


class StructuralValidator:
    def __init__(self, schema: Optional[Dict[str, Any]] = None):
        self.schema = schema if schema is not None else _load_schema()
        self._validator = jsonschema.Draft7Validator(self.schema)

    def schema_errors(self, payload: Any) -> List[str]:
        errors = []
        found = sorted(self._validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
        for error in found:
            path = ".".join(str(p) for p in error.absolute_path) or "root"
            errors.append(f"schema: {path}: {error.message}")
        return errors

    def sibling_errors(self, nodes: List[Dict[str, Any]], scope: str) -> List[str]:
        """Category slugs must differ from sibling categories and sibling documents, per locale."""
        errors = []
        categories = [n for n in nodes if n.get("type") == CATEGORY]
        documents = [n for n in nodes if n.get("type") == DOCUMENT]
        for lang in LANGUAGES:
            document_slugs = {_localized(d, "slug", lang) for d in documents} - {""}
            seen: Dict[str, str] = {}
            for category in categories:
                slug = _localized(category, "slug", lang)
                if not slug:
                    continue
                if slug in seen:
                    errors.append(
                        f"{scope}: sibling categories '{seen[slug]}' and '{_label(category)}' "
                        f"share {lang} slug '{slug}'"
                    )
                else:
                    seen[slug] = _label(category)
                if slug in document_slugs:
                    errors.append(
                        f"{scope}: category '{_label(category)}' shares {lang} slug '{slug}' "
                        f"with a sibling document"
                    )
        for category in categories:
            errors.extend(self.sibling_errors(_children(category.get("children")), f"{scope} > {_label(category)}"))
        return errors

    def _count(self, nodes: List[Dict[str, Any]], stats: ValidationStats) -> None:
        for node in nodes:
            if node.get("type") == DOCUMENT:
                stats.total_documents += 1
                for lang in LANGUAGES:
                    if _localized(node, "name", lang):
                        stats.language_coverage[lang] += 1
                    else:
                        stats.missing_translations += 1
            elif node.get("type") == CATEGORY:
                stats.total_categories += 1
                self._count(_children(node.get("children")), stats)

    def validate_payload(self, payload: Any) -> ValidationResult:
        """Validate a serialized ``{"navbar": [...]}`` navigation payload."""
        errors = self.schema_errors(payload)
        stats = ValidationStats()
        sections = _children(payload.get("navbar")) if isinstance(payload, dict) else []
        for section in sections:
            categories = _children(section.get("categories"))
            errors.extend(self.sibling_errors(categories, str(section.get("documentation") or "section")))
            self._count(categories, stats)

        warnings = []
        for lang in LANGUAGES:
            missing = stats.total_documents - stats.language_coverage[lang]
            if missing:
                warnings.append(f"{missing} document(s) missing a '{lang}' translation")

        result = ValidationResult(valid=not errors, errors=errors, warnings=warnings, stats=stats)
        for error in errors:
            log.error(f"[nav_synthesis] {error}")
        log.info(
            f"[nav_synthesis] Validation {'passed' if result.valid else 'failed'}: "
            f"{stats.total_categories} categories, {stats.total_documents} documents, "
            f"{len(errors)} error(s), {len(warnings)} warning(s)"
        )
        return result

    def validate(self, tree: NavigationTree) -> ValidationResult:
        return self.validate_payload(tree_to_dict(tree))

    def validate_file(self, path: Path, strict: bool = False) -> ValidationResult:
        """
        Validate an existing navigation.json. A missing file raises
        FileNotFoundError; unparseable JSON is reported as an error. With
        ``strict`` any error raises NavigationInvariantError.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"navigation file not found at {path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            log.error(f"[nav_synthesis] Failed to parse {path}: {e}")
            result = ValidationResult(valid=False, errors=[f"invalid JSON in {path}: {e}"])
        else:
            result = self.validate_payload(payload)

        if strict and not result.valid:
            raise NavigationInvariantError(result.errors)
        return result
