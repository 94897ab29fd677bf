"""Structural and business-rule validation for module configurations.

Validation never raises for bad user input: every entry point returns the
complete list of violations as human-readable strings so a configuration
can be fixed in one pass.  Error order is deterministic (declared model
fields, then ``fields`` index, then screens in :class:`ScreenKind` order).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigValidationError
from .models import (
    CHOICE_FIELD_TYPES,
    FieldConfig,
    FieldType,
    ModuleConfig,
    ModuleDocument,
)

SUGGESTED_EMAIL_PATTERN = r"^[\w-\.]+@([\w-]+\.)+[\w-]{2,4}$"

_PREFIX_FORMAT = re.compile(r"[A-Z_]+_")
_MESSAGE_PREFIXES = ("Value error, ", "Assertion failed, ")


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class ValidationResult(BaseModel):
    """Outcome of a validation pass."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    document: Optional[ModuleDocument] = Field(default=None, exclude=True)


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------


def _format_location(loc: tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "root"


def _format_message(message: str) -> str:
    for prefix in _MESSAGE_PREFIXES:
        if message.startswith(prefix):
            return message[len(prefix):]
    return message


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        f"{_format_location(error['loc'])}: {_format_message(error['msg'])}"
        for error in exc.errors(include_url=False)
    ]


def validate_structure(config: Any) -> ValidationResult:
    """Check types, required keys, patterns and enums.

    Accepts any value; non-mappings are reported against ``root``.
    """
    try:
        document = ModuleDocument.model_validate(config)
    except ValidationError as exc:
        return ValidationResult(valid=False, errors=_format_errors(exc))
    return ValidationResult(valid=True, document=document)


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------


def _field_rule_errors(index: int, field: FieldConfig) -> list[str]:
    where = f"fields[{index}].{field.name}"
    errors: list[str] = []

    if field.type in CHOICE_FIELD_TYPES and not field.options and not field.mdms:
        errors.append(
            f"{where}: dropdown/radio/multiselect fields must have either "
            "options or mdms configuration"
        )

    rules = field.validation
    if rules is None:
        return errors

    if rules.min is not None and rules.max is not None and rules.min > rules.max:
        errors.append(f"{where}: validation.min cannot be greater than validation.max")
    if (
        rules.min_length is not None
        and rules.max_length is not None
        and rules.min_length > rules.max_length
    ):
        errors.append(
            f"{where}: validation.minLength cannot be greater than validation.maxLength"
        )

    if field.type == FieldType.AMOUNT and rules.min is None:
        errors.append(f"{where}: amount fields should have validation.min defined")
    # A zero bound counts as missing for mobile numbers.
    if field.type == FieldType.MOBILE_NUMBER and (not rules.min or not rules.max):
        errors.append(
            f"{where}: mobileNumber fields should have both validation.min "
            "and validation.max defined"
        )
    return errors


def validate_business_rules(document: ModuleDocument) -> list[str]:
    """Cross-field checks on a structurally valid document."""
    errors: list[str] = []
    workflow = document.workflow
    workflow_enabled = bool(workflow and workflow.enabled)

    if workflow_enabled and not workflow.business_service:
        errors.append("workflow.businessService is required when workflow is enabled")

    if document.screens.is_enabled("inbox") and not workflow_enabled:
        errors.append("Workflow must be enabled to use inbox screen")

    for index, field in enumerate(document.fields):
        errors.extend(_field_rule_errors(index, field))

    names = [field.name for field in document.fields]
    duplicates = [name for i, name in enumerate(names) if names.index(name) != i]
    if duplicates:
        errors.append(f"Duplicate field names found: {', '.join(duplicates)}")

    for kind, screen in document.screens.configured():
        if screen.enabled and screen.roles is not None and not screen.roles:
            errors.append(
                f"screens.{kind.value}.roles: must be a non-empty array when screen is enabled"
            )

    if document.api is not None:
        for operation, path in document.api.paths().items():
            if isinstance(path, str) and not path.startswith("/"):
                errors.append(f"api.{operation}: API paths must start with '/'")

    auth = document.auth
    if auth is not None and auth.required and not auth.roles:
        errors.append("auth.roles: must be defined when authentication is required")

    prefix = document.i18n.prefix if document.i18n else None
    if prefix:
        if not prefix.endswith("_"):
            errors.append("i18n.prefix: must end with underscore (_)")
        if not _PREFIX_FORMAT.fullmatch(prefix):
            errors.append("i18n.prefix: must contain only uppercase letters and underscores")
    return errors


# ---------------------------------------------------------------------------
# Combined entry points
# ---------------------------------------------------------------------------


def validate_module_config(config: Any) -> ValidationResult:
    """Structural validation, then business rules when the structure is sound."""
    structural = validate_structure(config)
    if not structural.valid:
        return structural
    errors = validate_business_rules(structural.document)
    return ValidationResult(
        valid=not errors,
        errors=errors,
        document=structural.document if not errors else None,
    )


def load_module_config(config: Any) -> ModuleConfig:
    """Validate *config* and normalize it for rendering.

    Raises:
        ConfigValidationError: carrying every violation found.
    """
    result = validate_module_config(config)
    if not result.valid:
        raise ConfigValidationError(result.errors)
    return ModuleConfig.from_document(result.document)


# ---------------------------------------------------------------------------
# Advisory checks
# ---------------------------------------------------------------------------


def validate_field_type(field: FieldConfig) -> list[str]:
    """Type-specific advice for one field.  Never modifies *field*."""
    rules = field.validation
    advice: list[str] = []
    if field.type in CHOICE_FIELD_TYPES:
        if not field.options and not field.mdms:
            advice.append(
                "Options or MDMS configuration required for dropdown/radio/multiselect fields"
            )
    elif field.type == FieldType.AMOUNT:
        if rules is not None and rules.min is None:
            advice.append("Amount fields should define minimum value")
    elif field.type == FieldType.MOBILE_NUMBER:
        if rules is not None and (not rules.min or not rules.max):
            advice.append("Mobile number fields should define min and max validation")
    elif field.type == FieldType.EMAIL:
        if rules is not None and not rules.pattern:
            advice.append(
                f"Email fields should define validation.pattern (e.g. {SUGGESTED_EMAIL_PATTERN})"
            )
    elif field.type in (FieldType.DATE, FieldType.DATETIME):
        if rules is not None and (rules.min_length or rules.max_length):
            advice.append("Date fields should not have length validation")
    return advice


def validate_screen_dependencies(config: ModuleConfig) -> list[str]:
    """Check that each enabled screen has the fields and settings it relies on."""
    advice: list[str] = []
    screens = config.screens

    if screens.is_enabled("view"):
        has_identifier = any(
            field.name in (config.entity.primary_key, "id") for field in config.fields
        )
        if not has_identifier:
            advice.append("View screen requires a primary key field to be defined")

    if screens.is_enabled("search"):
        if not any(field.searchable for field in config.fields):
            advice.append("Search screen requires at least one searchable field")

    if screens.is_enabled("inbox"):
        if not config.workflow_enabled:
            advice.append("Inbox screen requires workflow to be enabled")
        if not getattr(config.workflow, "business_service", None):
            advice.append("Inbox screen requires workflow.businessService to be defined")
    return advice


def validate_api_spec_compatibility(
    config: ModuleConfig, api_spec: Optional[Mapping[str, Any]]
) -> list[str]:
    """Compare configured fields with the entity schema of an API document."""
    if not api_spec:
        return []

    entity = config.entity.name
    schemas = (api_spec.get("components") or {}).get("schemas") or {}
    schema = schemas.get(entity) or (api_spec.get("definitions") or {}).get(entity)
    if not schema:
        return [f'Entity "{entity}" not found in API specification']

    properties = schema.get("properties") or {}
    required = schema.get("required") or []
    advice: list[str] = []
    for field in config.fields:
        if field.name not in properties:
            advice.append(f'Field "{field.name}" not found in API schema')
        elif field.required != (field.name in required):
            advice.append(f'Field "{field.name}" required status doesn\'t match API schema')
    return advice


def advisory_warnings(
    config: ModuleConfig, api_spec: Optional[Mapping[str, Any]] = None
) -> list[str]:
    """Every non-blocking warning for *config*, field advice first."""
    warnings = [
        f"{field.name}: {message}"
        for field in config.fields
        for message in validate_field_type(field)
    ]
    warnings.extend(validate_screen_dependencies(config))
    warnings.extend(validate_api_spec_compatibility(config, api_spec))
    return warnings


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

_SUGGESTIONS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (
        ("module.code",),
        "Module code must be in kebab-case (lowercase with hyphens)",
        'Example: "employee-management" instead of "Employee Management"',
    ),
    (
        ("entity.name",),
        "Entity name must be in PascalCase",
        'Example: "Employee" instead of "employee"',
    ),
    (
        ("entity.apiPath",),
        "API path must start with forward slash",
        'Example: "/employee-service/v1" instead of "employee-service/v1"',
    ),
    (
        ("workflow", "businessService"),
        "When workflow is enabled, businessService must be specified",
        'Example: "employee-approval" or "project-workflow"',
    ),
    (
        ("dropdown", "options"),
        "Dropdown fields need either static options or MDMS configuration",
        'Add "options" array or "mdms" configuration to dropdown fields',
    ),
    (
        ("i18n.prefix",),
        "i18n prefix must be uppercase and end with underscore",
        'Example: "EMP_" instead of "emp" or "EMP"',
    ),
    (
        ("validation.min", "validation.max"),
        "Validation min value cannot be greater than max value",
        "Check your field validation configuration",
    ),
    (
        ("roles", "array"),
        "Roles must be specified as an array of strings",
        'Example: ["ADMIN", "USER"] instead of "ADMIN,USER"',
    ),
)


def suggest_fixes(errors: list[str], config: Any) -> list[tuple[str, str]]:
    """Return ``(hint, detail)`` pairs for the given validation errors.

    *config* is the raw (possibly invalid) mapping; general hints about it
    are appended after the error-specific ones with an empty detail.
    """
    hints: list[tuple[str, str]] = []
    for error in errors:
        for needles, hint, detail in _SUGGESTIONS:
            if all(needle in error for needle in needles) and (hint, detail) not in hints:
                hints.append((hint, detail))

    raw = config if isinstance(config, Mapping) else {}
    auth = raw.get("auth") if isinstance(raw.get("auth"), Mapping) else {}
    workflow = raw.get("workflow") if isinstance(raw.get("workflow"), Mapping) else {}
    screens = raw.get("screens") if isinstance(raw.get("screens"), Mapping) else {}
    fields = raw.get("fields") if isinstance(raw.get("fields"), list) else []

    def screen_enabled(kind: str) -> bool:
        screen = screens.get(kind)
        return isinstance(screen, Mapping) and bool(screen.get("enabled"))

    if not auth.get("required"):
        hints.append(("Consider enabling authentication for production use", ""))
    if not workflow.get("enabled") and screen_enabled("inbox"):
        hints.append(("Inbox screen requires workflow to be enabled", ""))
    searchable = [f for f in fields if isinstance(f, Mapping) and f.get("searchable")]
    if screen_enabled("search") and not searchable:
        hints.append(("Search screen needs at least one field marked as searchable", ""))
    return hints
