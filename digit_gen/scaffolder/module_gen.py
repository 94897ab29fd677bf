"""Package-level files: metadata, build config, entry point and README."""

from __future__ import annotations

from ..schema.models import ModuleConfig
from .context import build_context
from .templates import TemplateRenderer


class ModuleFilesGenerator:
    """Renders the files that make the output an installable package."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def package_json(self, config: ModuleConfig) -> str:
        return self.renderer.render("module/package.json.j2", build_context(config))

    def webpack_config(self, config: ModuleConfig) -> str:
        return self.renderer.render("module/webpack.config.js.j2", build_context(config))

    def entry_point(self, config: ModuleConfig) -> str:
        return self.renderer.render("module/Module.js.j2", build_context(config))

    def readme(self, config: ModuleConfig) -> str:
        return self.renderer.render("module/README.md.j2", build_context(config))

    def generate(self, config: ModuleConfig) -> dict[str, str]:
        return {
            "package.json": self.package_json(config),
            "webpack.config.js": self.webpack_config(config),
            "src/Module.js": self.entry_point(config),
            "README.md": self.readme(config),
        }
