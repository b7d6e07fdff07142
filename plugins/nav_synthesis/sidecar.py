import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from plugins.nav_synthesis.diagnostics import log

METADATA_FILE = "metadata.json"
LEGACY_ORDER_FILE = "order.json"


@dataclass(frozen=True)
class CategoryMetadata:
    id: Optional[str] = None
    name: Optional[str] = None
    order: Optional[float] = None


def _as_order(value, path: Path) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        log.warning(f"[nav_synthesis] Ignoring non-numeric order {value!r} in sidecar {path}")
        return None
    return value


def _load_json(path: Path) -> Optional[dict]:
    """Read a sidecar file; absence is normal, malformed content is logged and skipped."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        log.warning(f"[nav_synthesis] Failed to parse sidecar {path}: {e}")
        return None
    except OSError as e:
        log.warning(f"[nav_synthesis] Unable to read sidecar {path}: {e}")
        return None
    if not isinstance(data, dict):
        log.warning(f"[nav_synthesis] Ignoring sidecar {path}: expected a JSON object")
        return None
    return data


def read_category_metadata(directory: Path) -> Optional[CategoryMetadata]:
    """
    Read ``metadata.json`` from a category directory, falling back to the
    legacy ``order.json``. Returns None when neither file provides anything.
    """
    data = _load_json(directory / METADATA_FILE)
    if data is not None:
        name = data.get("name")
        return CategoryMetadata(
            id=str(data["id"]) if data.get("id") else None,
            name=str(name).strip() if name and str(name).strip() else None,
            order=_as_order(data.get("order"), directory / METADATA_FILE),
        )

    legacy = _load_json(directory / LEGACY_ORDER_FILE)
    if legacy is not None:
        return CategoryMetadata(order=_as_order(legacy.get("order"), directory / LEGACY_ORDER_FILE))
    return None


class SidecarReader:
    """Reads category sidecars for a batch of directories in parallel.

    Each directory is read at most once per reader; the reads are
    independent and read-only, so they can run in any order.
    """

    def __init__(self, max_workers: int = 8):
        self.max_workers = max_workers
        self._cache: Dict[Path, Optional[CategoryMetadata]] = {}

    def prefetch(self, directories: Iterable[Path]) -> None:
        pending = sorted({d for d in directories if d not in self._cache})
        if not pending:
            return
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for directory, metadata in zip(pending, pool.map(read_category_metadata, pending)):
                self._cache[directory] = metadata
        found = sum(1 for d in pending if self._cache[d] is not None)
        log.debug(f"[nav_synthesis] Read sidecars for {len(pending)} directories ({found} with metadata)")

    def get(self, directory: Path) -> Optional[CategoryMetadata]:
        if directory not in self._cache:
            self._cache[directory] = read_category_metadata(directory)
        return self._cache[directory]
