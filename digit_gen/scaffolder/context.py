"""Template context construction shared by every generator."""

from __future__ import annotations

from typing import Any

from ..schema.models import ModuleConfig


def build_context(config: ModuleConfig, **extra: Any) -> dict[str, Any]:
    """Return the JSON-shaped configuration plus generator-specific values.

    Each call returns a fresh deep copy, so a template (or a generator that
    adds keys) can never leak state into another render.
    """
    context = config.template_context()
    context.update(extra)
    return context
