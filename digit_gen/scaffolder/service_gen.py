"""API hooks and endpoint constants."""

from __future__ import annotations

from ..schema.models import ModuleConfig
from .context import build_context
from .templates import TemplateRenderer


class ServiceGenerator:
    """Renders ``src/hooks/use<Entity>.js`` and ``src/services/apiEndpoints.js``."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def hooks(self, config: ModuleConfig) -> str:
        return self.renderer.render("services/hooks.js.j2", build_context(config))

    def api_endpoints(self, config: ModuleConfig) -> str:
        return self.renderer.render("services/api_endpoints.js.j2", build_context(config))

    def generate(self, config: ModuleConfig) -> dict[str, str]:
        """Both service files keyed by their path relative to the module root."""
        return {
            self.hooks_path(config): self.hooks(config),
            "src/services/apiEndpoints.js": self.api_endpoints(config),
        }

    @staticmethod
    def hooks_path(config: ModuleConfig) -> str:
        return f"src/hooks/use{config.entity.name}.js"
