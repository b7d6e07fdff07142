from pathlib import PurePosixPath

import pytest

from plugins.nav_synthesis.config import load_engine_config
from plugins.nav_synthesis.models import ContentRecord, Frontmatter


def build_record(relative_path, key=None, title=None, root="/content", **front_matter):
    """Build a record from ``<lang>/<section>/<dirs...>/<file>.md``."""
    path = PurePosixPath(relative_path)
    lang, section = path.parts[0], path.parts[1]
    data = {"title": title if title is not None else path.stem.replace("-", " ").title()}
    if key is not None:
        data["canonicalKey"] = key
    else:
        data["canonicalKey"] = path.stem
    data.update(front_matter)
    return ContentRecord(
        source_path=f"{root}/{relative_path}",
        relative_path=relative_path,
        language=lang,
        section=section,
        directory_segments=tuple(path.parts[2:-1]),
        file_name_stem=path.stem,
        frontmatter=Frontmatter.from_mapping(data),
    )


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def engine_config():
    return load_engine_config()


def write_markdown(path, front_matter, body="Body text.\n"):
    lines = ["---"]
    for key, value in front_matter.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


@pytest.fixture
def write_md():
    return write_markdown
