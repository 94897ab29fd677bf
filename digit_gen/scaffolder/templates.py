"""Jinja2 template rendering for module scaffolding.

Provides the :class:`HelperRegistry`, which holds every naming helper a
template may call, and the :class:`TemplateRenderer`, which loads ``.j2``
templates from ``digit_gen/scaffolder/templates/`` and renders them with a
configuration-derived context.

Helpers are registered once on a registry object and installed into each
renderer's environment.  Nothing is registered on a shared global
environment, so helper availability never depends on import order.

Missing values behave as follows:

* inside ``{% if %}`` or ``| default(...)`` they are silently falsy, and
  attribute access on them chains (``screens.inbox.enabled`` is simply false
  when there is no inbox);
* interpolating them or passing them to a naming helper raises
  :class:`digit_gen.errors.TemplateError`.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from pathlib import Path
from typing import Any, Callable

import jinja2
from jinja2 import ChainableUndefined, Environment, FileSystemLoader, select_autoescape

from .. import naming
from ..errors import TemplateError, WriteFailure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

STRING_ORIGIN = "<string>"


# ---------------------------------------------------------------------------
# Undefined handling
# ---------------------------------------------------------------------------


class GuardedUndefined(ChainableUndefined):
    """Falsy and chainable in conditionals, fatal when rendered as text."""

    __slots__ = ()

    __str__ = jinja2.Undefined._fail_with_undefined_error


def _reject_undefined(func: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        for value in (*args, *kwargs.values()):
            if isinstance(value, jinja2.Undefined):
                value._fail_with_undefined_error()
        return func(*args, **kwargs)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers available to every template
# ---------------------------------------------------------------------------


def _eq(left: Any, right: Any) -> bool:
    return left == right


def _any_of(value: Any, *choices: Any) -> bool:
    return value in choices


def _to_json(value: Any, indent: int | None = None) -> str:
    if isinstance(value, jinja2.Undefined):
        value = None
    return json.dumps(value, indent=indent, ensure_ascii=False)


class HelperRegistry:
    """Named callables exposed to templates as globals and as filters.

    Build one with :meth:`default` at process start and hand it to every
    :class:`TemplateRenderer`.
    """

    def __init__(self) -> None:
        self._helpers: dict[str, Callable[..., Any]] = {}

    @classmethod
    def default(cls) -> "HelperRegistry":
        registry = cls()
        registry.register("pascal_case", naming.pascal_case)
        registry.register("camel_case", naming.camel_case)
        registry.register("kebab_case", naming.kebab_case)
        registry.register("constant_case", naming.constant_case)
        registry.register("to_localization_key", naming.to_localization_key)
        registry.register("eq", _eq, strict=False)
        registry.register("any_of", _any_of, strict=False)
        registry.register("to_json", _to_json, strict=False)
        return registry

    def register(
        self, name: str, func: Callable[..., Any], *, strict: bool = True
    ) -> None:
        """Add a helper.

        Strict helpers raise an undefined-value error when any argument is
        missing from the context instead of rendering an empty token.
        """
        if name in self._helpers:
            raise ValueError(f"Helper {name!r} is already registered")
        self._helpers[name] = _reject_undefined(func) if strict else func

    def names(self) -> list[str]:
        return sorted(self._helpers)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def install(self, env: Environment) -> None:
        for name, func in self._helpers.items():
            env.globals[name] = func
            env.filters[name] = func


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for module scaffolding.

    The renderer knows nothing about output locations; generators decide
    what to render and the assembler decides where it goes.
    """

    def __init__(
        self,
        registry: HelperRegistry | None = None,
        template_dir: str | Path | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.registry = registry or HelperRegistry.default()
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=GuardedUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.registry.install(self.env)

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"configs/search.js.j2"``).
            context: Dictionary of variables available inside the template.

        Raises:
            TemplateError: if the template cannot be loaded, compiled or
                rendered against *context*.
        """
        try:
            template = self.env.get_template(template_path)
            return template.render(**context)
        except jinja2.TemplateError as exc:
            raise _template_failure(template_path, exc) from exc

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        try:
            template = self.env.from_string(template_string)
            return template.render(**context)
        except jinja2.TemplateError as exc:
            raise _template_failure(STRING_ORIGIN, exc) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _template_failure(origin: str, exc: jinja2.TemplateError) -> TemplateError:
    message = exc.message or exc.__class__.__name__
    lineno = getattr(exc, "lineno", None)
    if lineno:
        message = f"{message} (line {lineno})"
    logger.error("Rendering %s failed: %s", origin, message)
    return TemplateError(origin, message)


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_text(
    path: Path, content: str, *, display_path: str | Path | None = None
) -> None:
    """Write *content* off the event loop.

    Storage errors become :class:`WriteFailure` naming *display_path* when
    given (e.g. a path relative to the module root), else *path*.
    """
    try:
        await asyncio.to_thread(_write_file, path, content)
    except OSError as exc:
        raise WriteFailure(display_path or path, exc) from exc
