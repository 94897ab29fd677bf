"""Screen configuration files (``src/configs/<Entity><Kind>Config.js``).

Each enabled screen except ``response`` gets a configuration object consumed
by the framework's composer components.  The response screen is driven by
navigation state only and has no configuration file.
"""

from __future__ import annotations

from typing import Optional

from ..naming import pascal_case
from ..schema.models import ModuleConfig, ScreenKind
from .context import build_context
from .templates import TemplateRenderer


class ScreenConfigGenerator:
    """Renders one screen-kind configuration from the ``configs/`` templates."""

    _TEMPLATES: dict[ScreenKind, str] = {
        ScreenKind.CREATE: "configs/create.js.j2",
        ScreenKind.SEARCH: "configs/search.js.j2",
        ScreenKind.INBOX: "configs/inbox.js.j2",
        ScreenKind.VIEW: "configs/view.js.j2",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def supports(self, kind: ScreenKind | str) -> bool:
        return _screen_kind(kind) in self._TEMPLATES

    def generate(self, config: ModuleConfig, kind: ScreenKind | str) -> Optional[str]:
        """Render the configuration for *kind*.

        Returns ``None`` for ``response`` and for names that are not a
        screen kind at all.
        """
        screen = _screen_kind(kind)
        template = self._TEMPLATES.get(screen)
        if template is None:
            return None
        return self.renderer.render(template, build_context(config, kind=screen.value))

    @staticmethod
    def filename(config: ModuleConfig, kind: ScreenKind | str) -> str:
        return f"{config.entity.name}{pascal_case(ScreenKind(kind).value)}Config.js"


def _screen_kind(kind: ScreenKind | str) -> Optional[ScreenKind]:
    try:
        return ScreenKind(kind)
    except ValueError:
        return None
