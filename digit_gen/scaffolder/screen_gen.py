"""React page components (``src/pages/employee/<Entity><Kind>.js``)."""

from __future__ import annotations

from typing import Optional

from ..naming import pascal_case
from ..schema.models import ModuleConfig, ScreenKind
from .context import build_context
from .templates import TemplateRenderer


class ScreenComponentGenerator:
    """Renders the page component for any of the five screen kinds."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def generate(self, config: ModuleConfig, kind: ScreenKind | str) -> Optional[str]:
        try:
            screen = ScreenKind(kind)
        except ValueError:
            return None
        return self.renderer.render(
            f"screens/{screen.value}.js.j2",
            build_context(config, kind=screen.value),
        )

    @staticmethod
    def component_name(config: ModuleConfig, kind: ScreenKind | str) -> str:
        return f"{config.entity.name}{pascal_case(ScreenKind(kind).value)}"

    @classmethod
    def filename(cls, config: ModuleConfig, kind: ScreenKind | str) -> str:
        return f"{cls.component_name(config, kind)}.js"
