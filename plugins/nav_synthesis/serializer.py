"""
JSON serialization of the navigation tree and the markdown generation report.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, TYPE_CHECKING

from plugins.nav_synthesis.diagnostics import log
from plugins.nav_synthesis.models import LANGUAGES, CategoryNode, NavigationTree, Node

if TYPE_CHECKING:
    from plugins.nav_synthesis.engine import GenerationResult


def _localized(value: Dict[str, str]) -> Dict[str, str]:
    return {lang: str(value.get(lang) or "") for lang in LANGUAGES}


def node_to_dict(node: Node) -> Dict[str, Any]:
    if isinstance(node, CategoryNode):
        return {
            "name": _localized(node.localized_name),
            "slug": _localized(node.localized_slug),
            "origin": "",
            "type": "category",
            "children": [node_to_dict(child) for child in node.children],
        }
    return {
        "name": _localized(node.localized_title),
        "slug": _localized(node.localized_slug),
        "origin": "",
        "type": "markdown",
        "children": [],
    }


def tree_to_dict(tree: NavigationTree) -> Dict[str, Any]:
    return {
        "navbar": [
            {
                "documentation": section.id,
                "name": _localized(section.display_name),
                "slugPrefix": section.slug_prefix,
                "categories": [node_to_dict(category) for category in section.categories],
            }
            for section in tree.sections
        ]
    }


def write_navigation(tree: NavigationTree, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(tree_to_dict(tree), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    log.info(f"[nav_synthesis] Wrote navigation to {path}")
    return path


def build_report(result: "GenerationResult") -> str:
    """Render a markdown report of one generation run."""
    validation = result.validation
    stats = validation.stats
    lines: List[str] = ["# Navigation Generation Report", ""]

    lines += ["## Validation Summary", ""]
    lines.append(f"- **Status**: {'✅ Valid' if validation.valid else '❌ Invalid'}")
    lines.append(f"- **Errors**: {len(validation.errors)}")
    lines.append(f"- **Warnings**: {len(validation.warnings)}")
    lines.append(f"- **Diagnostics**: {len(result.diagnostics)}")
    lines.append("")

    lines += ["## Statistics", ""]
    lines.append(f"- **Sections**: {len(result.tree.sections)}")
    lines.append(f"- **Total Categories**: {stats.total_categories}")
    lines.append(f"- **Total Documents**: {stats.total_documents}")
    lines.append(f"- **Missing Translations**: {stats.missing_translations}")
    lines.append("")

    lines += ["## Language Coverage", ""]
    for lang in LANGUAGES:
        count = stats.language_coverage.get(lang, 0)
        percent = (100.0 * count / stats.total_documents) if stats.total_documents else 0.0
        lines.append(f"- **{lang.upper()}**: {count}/{stats.total_documents} ({percent:.1f}%)")
    lines.append("")

    if result.link_stats:
        lines += ["## Translation Completeness", ""]
        lines.append("| Section | Documents | " + " | ".join(lang.upper() for lang in LANGUAGES) + " |")
        lines.append("|---|---|" + "---|" * len(LANGUAGES))
        for section_id, link in result.link_stats.items():
            cells = " | ".join(f"{link.completeness.get(lang, 0.0):.1f}%" for lang in LANGUAGES)
            lines.append(f"| {section_id} | {link.linked} | {cells} |")
        lines.append("")

    if validation.errors:
        lines += ["## Errors", ""]
        lines += [f"- {error}" for error in validation.errors]
        lines.append("")

    if validation.warnings:
        lines += ["## Warnings", ""]
        lines += [f"- {warning}" for warning in validation.warnings]
        lines.append("")

    if len(result.diagnostics):
        lines += ["## Diagnostics", ""]
        lines += [f"- **{d.severity}**: {d.message}" for d in result.diagnostics.entries]
        lines.append("")

    return "\n".join(lines)
