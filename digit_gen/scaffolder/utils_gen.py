"""Utility modules under ``src/utils/``."""

from __future__ import annotations

from ..schema.models import ModuleConfig
from .context import build_context
from .templates import TemplateRenderer


class UtilsGenerator:
    """Renders the create, search and response helpers plus their index."""

    # Output file name -> template
    FILES: dict[str, str] = {
        "createUtils.js": "utils/create_utils.js.j2",
        "searchUtils.js": "utils/search_utils.js.j2",
        "responseUtils.js": "utils/response_utils.js.j2",
        "index.js": "utils/index.js.j2",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def create_utils(self, config: ModuleConfig) -> str:
        return self._render("createUtils.js", config)

    def search_utils(self, config: ModuleConfig) -> str:
        return self._render("searchUtils.js", config)

    def response_utils(self, config: ModuleConfig) -> str:
        return self._render("responseUtils.js", config)

    def utils_index(self, config: ModuleConfig) -> str:
        return self._render("index.js", config)

    def generate(self, config: ModuleConfig) -> dict[str, str]:
        """Render every utility file, keyed by file name in a stable order."""
        return {name: self._render(name, config) for name in self.FILES}

    def _render(self, filename: str, config: ModuleConfig) -> str:
        return self.renderer.render(self.FILES[filename], build_context(config))
