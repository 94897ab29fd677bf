"""Loading and composing raw configuration documents.

Everything here works on plain JSON-shaped dictionaries *before*
validation.  Inputs are never mutated: every function returns a new
structure, so cached presets and defaults can be reused across runs.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigNotFound, ConfigParseError
from ..naming import entity_defaults
from ..schema.models import ScreenKind

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
DEFAULT_SCREEN_ROLES = ["ADMIN"]


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a configuration document from JSON, or YAML for ``.yaml``/``.yml``.

    Raises:
        ConfigNotFound: *path* is not an existing file.
        ConfigParseError: the content is not valid JSON/YAML or its top
            level is not an object.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigNotFound(file_path)

    try:
        text = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigParseError(file_path, str(exc)) from exc

    if not isinstance(data, dict):
        raise ConfigParseError(file_path, "top-level value must be an object")
    logger.debug("Loaded configuration from %s", file_path)
    return data


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* onto *base*.

    Mappings merge key by key; any other value in *override* (lists
    included) replaces the one in *base* wholesale.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def compose_config(
    direct: Optional[Mapping[str, Any]] = None,
    template: Optional[Mapping[str, Any]] = None,
    api_fragment: Optional[Mapping[str, Any]] = None,
    defaults: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Layer configuration sources.

    Precedence, highest first: *direct* (a config file or CLI values),
    *template* (a stored preset), *api_fragment* (derived from an API
    specification), *defaults*.
    """
    composed: dict[str, Any] = {}
    for layer in (defaults, api_fragment, template, direct):
        if layer:
            composed = deep_merge(composed, layer)
    return composed


# ---------------------------------------------------------------------------
# Built-in defaults
# ---------------------------------------------------------------------------

_DEFAULT_FIELDS: list[dict[str, Any]] = [
    {
        "name": "name",
        "type": "text",
        "label": "Name",
        "required": True,
        "searchable": True,
        "showInResults": True,
        "showInView": True,
        "validation": {"maxLength": 100},
    },
    {
        "name": "description",
        "type": "textarea",
        "label": "Description",
        "required": False,
        "showInView": True,
        "validation": {"maxLength": 500},
    },
    {
        "name": "status",
        "type": "dropdown",
        "label": "Status",
        "required": True,
        "filterable": True,
        "showInResults": True,
        "showInView": True,
        "options": [
            {"code": "ACTIVE", "name": "Active"},
            {"code": "INACTIVE", "name": "Inactive"},
        ],
    },
]

_DEFAULTS: dict[str, Any] = {
    "fields": _DEFAULT_FIELDS,
    "api": {
        "create": "/_create",
        "update": "/_update",
        "search": "/_search",
        "workflow": "/workflow/_transition",
    },
    "auth": {"required": False},
    "workflow": {"enabled": False},
}


def default_fields() -> list[dict[str, Any]]:
    return copy.deepcopy(_DEFAULT_FIELDS)


def default_config() -> dict[str, Any]:
    """Lowest-precedence layer for :func:`compose_config`."""
    return copy.deepcopy(_DEFAULTS)


def build_screens_config(
    kinds: Iterable[str],
    roles: Optional[list[str]] = None,
    workflow_service: Optional[str] = None,
) -> dict[str, Any]:
    """Enabled screen entries for *kinds* with their kind-specific settings."""
    screen_roles = list(roles) if roles else list(DEFAULT_SCREEN_ROLES)
    screens: dict[str, Any] = {}
    for kind in kinds:
        screen: dict[str, Any] = {"enabled": True, "roles": list(screen_roles)}
        if kind == ScreenKind.CREATE.value:
            screen["workflow"] = workflow_service is not None
        elif kind == ScreenKind.SEARCH.value:
            screen["filters"] = ["status", "dateRange"]
        elif kind == ScreenKind.INBOX.value:
            if workflow_service is not None:
                screen["businessService"] = workflow_service
        elif kind == ScreenKind.VIEW.value:
            screen["sections"] = ["basic", "details"]
        elif kind == ScreenKind.RESPONSE.value:
            screen["types"] = ["basic"]
        screens[kind] = screen
    return screens


def minimal_config(entity_name: str, screen_kind: Optional[str] = None) -> dict[str, Any]:
    """Synthesize a complete configuration for *entity_name*.

    With *screen_kind* only that screen is enabled; otherwise the create,
    search and view screens are.  An inbox gets a workflow named
    ``<entity>-approval`` since it cannot exist without one.
    """
    lower = entity_name.lower()
    derived = entity_defaults(entity_name)
    kinds = [screen_kind] if screen_kind else ["create", "search", "view"]
    workflow_service = f"{lower}-approval" if ScreenKind.INBOX.value in kinds else None
    workflow: dict[str, Any] = {"enabled": workflow_service is not None}
    if workflow_service is not None:
        workflow["businessService"] = workflow_service
    return {
        "module": {
            "name": f"{entity_name} Management",
            "code": f"{lower}-mgmt",
            "description": f"{entity_name} management system",
            "version": "1.0.0",
        },
        "entity": {
            "name": entity_name,
            "apiPath": "/api/v1",
            "primaryKey": derived["primaryKey"],
            "displayField": derived["displayField"],
        },
        "screens": build_screens_config(
            kinds, roles=["ADMIN", "USER"], workflow_service=workflow_service
        ),
        "fields": default_fields(),
        "api": {
            "create": f"/{lower}/_create",
            "update": f"/{lower}/_update",
            "search": f"/{lower}/_search",
            "view": f"/{lower}/{{id}}",
        },
        "auth": {"required": True, "roles": ["ADMIN", "USER"]},
        "workflow": workflow,
        "i18n": {"prefix": derived["prefix"], "generateKeys": True},
    }


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


def override_screens(config: Mapping[str, Any], kinds: Iterable[str]) -> dict[str, Any]:
    """Enable exactly *kinds*; every other declared screen is disabled.

    Screens not declared yet are added with roles ``["ADMIN"]``.
    """
    updated = copy.deepcopy(dict(config))
    screens = updated.get("screens")
    if not isinstance(screens, dict):
        screens = {}
    for screen in screens.values():
        if isinstance(screen, dict):
            screen["enabled"] = False
    for kind in kinds:
        existing = screens.get(kind)
        if isinstance(existing, dict):
            existing["enabled"] = True
        else:
            screens[kind] = {"enabled": True, "roles": list(DEFAULT_SCREEN_ROLES)}
    updated["screens"] = screens
    return updated


def apply_overrides(
    config: Mapping[str, Any],
    name: Optional[str] = None,
    code: Optional[str] = None,
    entity: Optional[str] = None,
    screens: Optional[Iterable[str]] = None,
) -> dict[str, Any]:
    """Apply command-line overrides on a copy of *config*."""
    updated = copy.deepcopy(dict(config))
    if name is not None or code is not None:
        module = updated.get("module")
        module = dict(module) if isinstance(module, Mapping) else {}
        if name is not None:
            module["name"] = name
        if code is not None:
            module["code"] = code
        updated["module"] = module
    if entity is not None:
        entity_section = updated.get("entity")
        entity_section = dict(entity_section) if isinstance(entity_section, Mapping) else {}
        entity_section["name"] = entity
        updated["entity"] = entity_section
    if screens is not None:
        updated = override_screens(updated, screens)
    return updated
