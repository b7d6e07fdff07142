from pathlib import Path
from typing import Optional

import mkdocs.config.config_options as c
from mkdocs.exceptions import PluginError
from mkdocs.plugins import BasePlugin

from plugins.nav_synthesis.config import EngineConfig, load_engine_config
from plugins.nav_synthesis.diagnostics import NavigationConfigError, NavigationInvariantError, log
from plugins.nav_synthesis.engine import NavigationEngine
from plugins.nav_synthesis.scanner import ContentScanner
from plugins.nav_synthesis.serializer import build_report, write_navigation


class NavSynthesisPlugin(BasePlugin):
    """
    Builds one multilingual navigation tree from localized markdown content
    and writes it as JSON into the site directory after the build.
    """

    config_scheme = (
        ("content_dir", c.Type(str, default="")),
        ("output", c.Type(str, default="navigation.json")),
        ("languages", c.Type(list, default=[])),
        ("sections", c.Type(list, default=[])),
        ("strict", c.Type(bool, default=False)),
        ("report", c.Type(bool, default=False)),
        ("prefer_legacy_slug", c.Type(bool, default=False)),
        ("sections_config", c.Type(str, default="")),
        ("synonyms_file", c.Type(str, default="")),
        ("max_workers", c.Type(int, default=8)),
    )

    def __init__(self):
        super().__init__()
        self.engine_config: Optional[EngineConfig] = None

    @staticmethod
    def project_root(config) -> Path:
        config_file_path = config.get("config_file_path")
        if config_file_path:
            return Path(config_file_path).resolve().parent
        return Path.cwd()

    def _optional_path(self, config, key: str) -> Optional[Path]:
        value = self.config.get(key)
        if not value:
            return None
        return (self.project_root(config) / value).resolve()

    def on_config(self, config, **kwargs):
        """Load section, synonym and acronym tables once per build."""
        try:
            self.engine_config = load_engine_config(
                sections_path=self._optional_path(config, "sections_config"),
                synonyms_path=self._optional_path(config, "synonyms_file"),
                strict=self.config["strict"],
                prefer_legacy_slug=self.config["prefer_legacy_slug"],
                max_workers=self.config["max_workers"],
            )
        except NavigationConfigError as e:
            raise PluginError(f"[nav_synthesis] {e}") from e
        log.debug(f"[nav_synthesis] Sections configured: {list(self.engine_config.sections)}")
        return config

    def on_post_build(self, config, **kwargs):
        if self.engine_config is None:
            self.on_config(config)

        content_dir = self._optional_path(config, "content_dir") or Path(config["docs_dir"]).resolve()
        site_dir = Path(config["site_dir"]).resolve()
        strict = self.config["strict"]

        scanner = ContentScanner(
            content_dir,
            self.engine_config,
            languages=self.config["languages"] or None,
            sections=self.config["sections"] or None,
        )
        try:
            scan = scanner.scan()
        except FileNotFoundError as e:
            raise PluginError(f"[nav_synthesis] {e}") from e

        try:
            result = NavigationEngine(self.engine_config).generate(scan.records)
        except NavigationInvariantError as e:
            raise PluginError(f"[nav_synthesis] {e}") from e
        result.diagnostics.extend(scan.diagnostics.entries)

        if strict and not result.succeeded(strict=True):
            raise PluginError(
                f"[nav_synthesis] strict mode: {len(result.diagnostics.warnings)} warning(s), "
                f"{len(result.validation.errors)} validation error(s)"
            )

        output_path = site_dir / self.config["output"]
        write_navigation(result.tree, output_path)

        if self.config["report"]:
            report_path = output_path.with_name(f"{output_path.stem}-report.md")
            report_path.write_text(build_report(result), encoding="utf-8")
            log.info(f"[nav_synthesis] Wrote report to {report_path}")
