"""Stored module presets ("templates").

A template is a directory holding ``template.json``::

    {"name": ..., "description": ..., "version": ..., "category": ...,
     "author": ..., "config": {<module configuration>}}

Bundled presets ship inside the package; user templates live under
``~/.digit-gen/templates`` (or the configured directory) and are searched
after the bundled ones, so a bundled name always wins.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from ..config import DEFAULT_TEMPLATES_DIR
from ..errors import ConfigNotFound, ConfigParseError
from ..schema.validator import ValidationResult, validate_module_config
from ..utils import dump_json, load_json

logger = logging.getLogger(__name__)

BUNDLED_PRESETS_DIR = Path(__file__).parent / "presets"
TEMPLATE_FILE = "template.json"
DEFAULT_AUTHOR = "digit-gen"

_TEMPLATE_NAME = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class TemplateInfo(BaseModel):
    """Listing entry for one stored template."""

    name: str
    description: str = ""
    display_name: Optional[str] = None
    version: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    source: str = "bundled"


class TemplateStore:
    """Read and write module presets across the bundled and user directories."""

    def __init__(
        self,
        user_dir: Optional[Path] = DEFAULT_TEMPLATES_DIR,
        bundled_dir: Path = BUNDLED_PRESETS_DIR,
    ) -> None:
        self.bundled_dir = Path(bundled_dir)
        self.user_dir = Path(user_dir) if user_dir is not None else None

    # -- Lookup ------------------------------------------------------------

    def _roots(self) -> list[tuple[str, Path]]:
        roots = [("bundled", self.bundled_dir)]
        if self.user_dir is not None:
            roots.append(("user", self.user_dir))
        return roots

    def path_of(self, name: str) -> Optional[Path]:
        """``template.json`` for *name*, or ``None`` when no root has it."""
        for _, root in self._roots():
            candidate = root / name / TEMPLATE_FILE
            if candidate.is_file():
                return candidate
        return None

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            data = load_json(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConfigParseError(path, str(exc)) from exc
        if not isinstance(data, dict):
            raise ConfigParseError(path, "top-level value must be an object")
        return data

    def load(self, name: str) -> dict[str, Any]:
        """The whole template document for *name*."""
        path = self.path_of(name)
        if path is None:
            raise ConfigNotFound(name, kind="Template")
        return self._read(path)

    def get(self, name: str) -> dict[str, Any]:
        """The module configuration stored in template *name*.

        Raises:
            ConfigNotFound: no template of that name exists.
            ConfigParseError: the template file is not a valid document.
        """
        document = self.load(name)
        config = document.get("config")
        if not isinstance(config, dict):
            raise ConfigParseError(self.path_of(name), "template has no config object")
        return config

    # -- Listing -----------------------------------------------------------

    def list(self, detailed: bool = False) -> list[TemplateInfo]:
        """Every readable template, sorted by name.

        Without *detailed* only ``name`` and ``description`` are filled.
        Unreadable template files are skipped with a warning.
        """
        found: dict[str, TemplateInfo] = {}
        for source, root in self._roots():
            if not root.is_dir():
                continue
            for path in sorted(root.glob(f"*/{TEMPLATE_FILE}")):
                name = path.parent.name
                if name in found:
                    continue
                try:
                    data = self._read(path)
                except ConfigParseError as exc:
                    logger.warning("Skipping template %s: %s", name, exc.reason)
                    continue
                info = TemplateInfo(name=name, description=str(data.get("description", "")))
                if detailed:
                    info = info.model_copy(
                        update={
                            "display_name": data.get("name"),
                            "version": data.get("version"),
                            "category": data.get("category"),
                            "author": data.get("author"),
                            "source": source,
                        }
                    )
                found[name] = info
        return [found[name] for name in sorted(found)]

    # -- Validation --------------------------------------------------------

    def validate(self, name: str) -> ValidationResult:
        """Check template metadata and the stored configuration.

        Never raises for a bad template; every problem is an error string.
        """
        path = self.path_of(name)
        if path is None:
            return ValidationResult(valid=False, errors=[f"Template not found: {name}"])
        try:
            document = self._read(path)
        except ConfigParseError as exc:
            return ValidationResult(
                valid=False,
                errors=[f"Invalid JSON in template configuration: {exc.reason}"],
            )

        errors: list[str] = []
        if not document.get("name"):
            errors.append("Template name is required")
        if not document.get("description"):
            errors.append("Template description is required")
        config = document.get("config")
        if not isinstance(config, dict):
            errors.append("Template config is required")
        else:
            errors.extend(validate_module_config(config).errors)
        return ValidationResult(valid=not errors, errors=errors)

    # -- Creation ----------------------------------------------------------

    def create(
        self,
        name: str,
        config: dict[str, Any],
        *,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        author: Optional[str] = None,
        category: str = "custom",
        version: str = "1.0.0",
    ) -> Path:
        """Store *config* as user template *name* and return its directory."""
        if self.user_dir is None:
            raise ValueError("No user template directory configured")
        if not _TEMPLATE_NAME.match(name):
            raise ValueError(
                f"Invalid template name {name!r}: use lowercase letters, digits and hyphens"
            )
        template_dir = self.user_dir / name
        template_dir.mkdir(parents=True, exist_ok=True)
        document = {
            "name": display_name or name,
            "description": description or "Custom template",
            "version": version,
            "author": author or DEFAULT_AUTHOR,
            "category": category,
            "config": config,
        }
        (template_dir / TEMPLATE_FILE).write_text(dump_json(document), encoding="utf-8")
        logger.info("Saved template %s to %s", name, template_dir)
        return template_dir
