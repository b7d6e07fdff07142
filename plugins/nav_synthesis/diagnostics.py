import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

log = logging.getLogger("mkdocs.plugins.nav_synthesis")

WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    severity: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class NavigationConfigError(Exception):
    """Raised when bundled or user-supplied configuration cannot be loaded."""


class NavigationInvariantError(Exception):
    """Raised in strict mode when the finished tree breaks a structural invariant."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        summary = "; ".join(self.errors[:5])
        if len(self.errors) > 5:
            summary += f" (+{len(self.errors) - 5} more)"
        super().__init__(f"navigation invariant violated: {summary}")


class DiagnosticLog:
    """
    Collects structured diagnostics for one generation run and mirrors
    each entry to the plugin logger at the matching level.
    """

    def __init__(self):
        self._entries: List[Diagnostic] = []

    def warning(self, message: str, **context: Any) -> Diagnostic:
        return self._record(Diagnostic(WARNING, message, context))

    def error(self, message: str, **context: Any) -> Diagnostic:
        return self._record(Diagnostic(ERROR, message, context))

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self._record(diagnostic, emit=False)

    def _record(self, diagnostic: Diagnostic, emit: bool = True) -> Diagnostic:
        self._entries.append(diagnostic)
        if emit:
            level = logging.ERROR if diagnostic.severity == ERROR else logging.WARNING
            log.log(level, f"[nav_synthesis] {diagnostic.message}")
        return diagnostic

    @property
    def entries(self) -> List[Diagnostic]:
        return list(self._entries)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._entries if d.severity == WARNING]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self._entries if d.severity == ERROR]

    def __len__(self) -> int:
        return len(self._entries)
