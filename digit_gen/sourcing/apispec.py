"""Import entity fields and endpoints from an OpenAPI 3 or Swagger 2 document.

The importer produces a *fragment*: the ``entity``, ``fields``, ``api`` and
``metadata`` sections of a module configuration.  It is merged under a
direct configuration or template by
:func:`digit_gen.sourcing.loader.compose_config`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx
import yaml

from ..errors import ConfigNotFound, ConfigParseError, DigitGenError
from ..naming import entity_defaults, humanize_label
from .loader import YAML_SUFFIXES, default_fields

logger = logging.getLogger(__name__)

DEFAULT_API_PATH = "/api/v1"

_PATH_PARAM = re.compile(r"\{[^}]+\}")

_TYPE_MAP = {
    "string": "text",
    "number": "number",
    "integer": "number",
    "boolean": "checkbox",
    "array": "multiselect",
    "object": "component",
}

_STRING_FORMATS = {
    "date": "date",
    "date-time": "datetime",
    "email": "email",
    "uri": "url",
    "url": "url",
    "password": "password",
    "byte": "file",
    "binary": "file",
}

# OpenAPI keyword -> FieldValidation key
_VALIDATION_KEYWORDS = (
    ("pattern", "pattern"),
    ("minLength", "minLength"),
    ("maxLength", "maxLength"),
    ("minimum", "min"),
    ("maximum", "max"),
    ("multipleOf", "step"),
)

PRIMARY_KEY_CANDIDATES = ("id", "uuid", "code")
DISPLAY_FIELD_CANDIDATES = ("name", "title", "label", "description")

# Longest text a plain input holds before it becomes a textarea.
_TEXTAREA_THRESHOLD = 255


# ---------------------------------------------------------------------------
# Schema mapping
# ---------------------------------------------------------------------------


def map_field_type(spec: dict[str, Any]) -> str:
    """Form widget type for one OpenAPI property."""
    kind = spec.get("type")
    if kind == "string":
        fmt = spec.get("format")
        if fmt in _STRING_FORMATS:
            return _STRING_FORMATS[fmt]
        max_length = spec.get("maxLength")
        if isinstance(max_length, (int, float)) and max_length > _TEXTAREA_THRESHOLD:
            return "textarea"
        return "text"
    return _TYPE_MAP.get(kind, "text")


def field_validation(spec: dict[str, Any]) -> dict[str, Any]:
    return {
        target: spec[keyword]
        for keyword, target in _VALIDATION_KEYWORDS
        if spec.get(keyword) is not None
    }


def option_label(value: Any) -> str:
    """Display name for an enum value (``ON_LEAVE`` -> ``On Leave``)."""
    text = str(value)
    if text.isupper() or "_" in text:
        return " ".join(part.capitalize() for part in text.split("_") if part)
    return humanize_label(text)


def _options(values: list[Any]) -> list[dict[str, str]]:
    return [{"code": str(value), "name": option_label(value)} for value in values]


def resolve_reference(spec: dict[str, Any], document: dict[str, Any]) -> dict[str, Any]:
    """Follow a local ``$ref`` one level; unresolvable references are returned as is."""
    ref = spec.get("$ref")
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return spec
    resolved: Any = document
    for segment in ref[2:].split("/"):
        if not isinstance(resolved, dict) or segment not in resolved:
            return spec
        resolved = resolved[segment]
    return resolved if isinstance(resolved, dict) else spec


def _schemas(document: dict[str, Any]) -> list[dict[str, Any]]:
    components = (document.get("components") or {}).get("schemas") or {}
    definitions = document.get("definitions") or {}
    return [components, definitions]


def find_entity_schema(document: dict[str, Any], entity: str) -> Optional[dict[str, Any]]:
    """Locate *entity* among the schemas, trying common name variations."""
    variations = (
        entity,
        entity.lower(),
        entity.upper(),
        f"{entity}Request",
        f"{entity}Response",
        f"Create{entity}Request",
        f"{entity}DTO",
    )
    for name in variations:
        for schemas in _schemas(document):
            schema = schemas.get(name)
            if isinstance(schema, dict):
                return resolve_reference(schema, document)
    return None


def extract_fields(schema: dict[str, Any], document: dict[str, Any]) -> list[dict[str, Any]]:
    """One field fragment per schema property, in declaration order."""
    required = set(schema.get("required") or [])
    fields: list[dict[str, Any]] = []
    for name, raw in (schema.get("properties") or {}).items():
        spec = resolve_reference(raw, document) if isinstance(raw, dict) else {}
        field: dict[str, Any] = {
            "name": name,
            "type": map_field_type(spec),
            "label": humanize_label(name),
            "required": name in required,
            "description": str(spec.get("description") or ""),
        }
        validation = field_validation(spec)
        if validation:
            field["validation"] = validation

        if spec.get("enum"):
            field["type"] = "dropdown"
            field["options"] = _options(spec["enum"])

        properties = spec.get("properties") or {}
        if spec.get("type") == "object" and "code" in properties and "name" in properties:
            # A {code, name} object is a master-data reference.
            field["type"] = "dropdown"
            field["mdms"] = {
                "masterName": humanize_label(name),
                "moduleName": "common-masters",
                "localePrefix": f"{name.upper()}_",
            }

        items = spec.get("items") or {}
        if spec.get("type") == "array" and items.get("type") == "string" and items.get("enum"):
            field["type"] = "multiselect"
            field["options"] = _options(items["enum"])

        fields.append(field)
    return fields


def _first_present(schema: dict[str, Any], candidates: tuple[str, ...]) -> Optional[str]:
    properties = schema.get("properties") or {}
    return next((name for name in candidates if name in properties), None)


def find_entity_path(paths: dict[str, Any], entity: str) -> Optional[str]:
    lower = entity.lower()
    for path in paths:
        if lower in path.lower():
            return path
    return None


def base_path(document: dict[str, Any]) -> str:
    """API base path from ``servers[0].url`` (OpenAPI 3) or ``basePath`` (Swagger 2)."""
    servers = document.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        path = urlsplit(str(servers[0]["url"])).path.rstrip("/")
        if path:
            return path
    if document.get("basePath"):
        return "/" + str(document["basePath"]).strip("/")
    return DEFAULT_API_PATH


def extract_endpoints(document: dict[str, Any], entity: str) -> dict[str, str]:
    """CRUD endpoints under the first path mentioning *entity*; empty when none does."""
    path = find_entity_path(document.get("paths") or {}, entity)
    if path is None:
        return {}
    root = _PATH_PARAM.sub("", path).rstrip("/")
    return {
        "create": f"{root}/_create",
        "update": f"{root}/_update",
        "search": f"{root}/_search",
        "view": f"{root}/{{id}}",
    }


def fragment_from_spec(document: dict[str, Any], entity: str) -> Optional[dict[str, Any]]:
    """Configuration fragment for *entity*, or ``None`` when its schema is absent."""
    schema = find_entity_schema(document, entity)
    if schema is None:
        return None
    derived = entity_defaults(entity)
    info = document.get("info") or {}
    fragment: dict[str, Any] = {
        "entity": {
            "name": entity,
            "apiPath": base_path(document),
            "primaryKey": _first_present(schema, PRIMARY_KEY_CANDIDATES) or derived["primaryKey"],
            "displayField": _first_present(schema, DISPLAY_FIELD_CANDIDATES)
            or derived["displayField"],
        },
        "fields": extract_fields(schema, document),
        "metadata": {
            "generatedFrom": "apiSpec",
            "apiVersion": info.get("version"),
            "apiTitle": info.get("title"),
        },
    }
    endpoints = extract_endpoints(document, entity)
    if endpoints:
        fragment["api"] = endpoints
    return fragment


def default_fragment(entity: str) -> dict[str, Any]:
    """Fallback fragment used when the document is unusable."""
    derived = entity_defaults(entity)
    return {
        "entity": {
            "name": entity,
            "apiPath": DEFAULT_API_PATH,
            "primaryKey": derived["primaryKey"],
            "displayField": derived["displayField"],
        },
        "fields": default_fields(),
        "api": {
            "create": "/_create",
            "update": "/_update",
            "search": "/_search",
            "view": "/{id}",
        },
        "metadata": {
            "generatedFrom": "default",
            "note": "Generated with default configuration due to API spec parsing issues",
        },
    }


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def parse_document(text: str, source: str) -> dict[str, Any]:
    """Parse JSON or YAML text and check it looks like an API description."""
    name = urlsplit(source).path if is_url(source) else source
    try:
        if name.lower().endswith(YAML_SUFFIXES):
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigParseError(source, str(exc)) from exc
    if not isinstance(document, dict):
        raise ConfigParseError(source, "API specification must be an object")
    if "openapi" not in document and "swagger" not in document:
        raise ConfigParseError(source, "missing 'openapi' or 'swagger' version key")
    return document


class ApiSpecImporter:
    """Reads API descriptions from disk or over HTTP.

    *transport* is passed to :class:`httpx.AsyncClient`, so tests can serve
    documents from an :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self.transport,
            follow_redirects=True,
        )

    async def _fetch(self, url: str) -> str:
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as exc:
            raise ConfigParseError(url, f"request timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ConfigParseError(
                url, f"server returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ConfigParseError(url, f"request failed: {exc}") from exc

    async def load(self, source: str | Path) -> dict[str, Any]:
        """Read and parse the document at *source* (path or http(s) URL).

        Raises:
            ConfigNotFound: a local path does not exist.
            ConfigParseError: the document could not be fetched or parsed.
        """
        source = str(source)
        if is_url(source):
            logger.info("Fetching API specification from %s", source)
            return parse_document(await self._fetch(source), source)
        path = Path(source)
        if not await asyncio.to_thread(path.is_file):
            raise ConfigNotFound(path, kind="API specification")
        logger.info("Loading API specification from %s", path)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigParseError(source, f"not valid UTF-8 text: {exc}") from exc
        return parse_document(text, source)

    async def import_entity(self, source: str | Path, entity: str) -> dict[str, Any]:
        """Fragment for *entity* from *source*, or the default fragment.

        Never raises for a bad document; the problem is logged as a warning
        and :func:`default_fragment` is returned instead.
        """
        try:
            document = await self.load(source)
        except DigitGenError as exc:
            logger.warning("Error reading API specification: %s", exc)
            logger.warning("Falling back to default configuration for %s", entity)
            return default_fragment(entity)

        fragment = fragment_from_spec(document, entity)
        if fragment is None:
            logger.warning("Entity schema %r not found in API specification", entity)
            return default_fragment(entity)
        logger.info("Imported %d fields for %s", len(fragment["fields"]), entity)
        return fragment
