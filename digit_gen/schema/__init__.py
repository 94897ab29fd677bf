"""Configuration schema and validation.

Quick usage::

    from digit_gen.schema import validate_module_config, load_module_config

    result = validate_module_config(raw)
    if result.valid:
        config = load_module_config(raw)
"""

from digit_gen.schema.models import (
    FieldConfig,
    FieldType,
    ModuleConfig,
    ModuleDocument,
    ScreenKind,
)
from digit_gen.schema.validator import (
    ValidationResult,
    advisory_warnings,
    load_module_config,
    suggest_fixes,
    validate_api_spec_compatibility,
    validate_business_rules,
    validate_field_type,
    validate_module_config,
    validate_screen_dependencies,
    validate_structure,
)

__all__ = [
    "FieldConfig",
    "FieldType",
    "ModuleConfig",
    "ModuleDocument",
    "ScreenKind",
    "ValidationResult",
    "advisory_warnings",
    "load_module_config",
    "suggest_fixes",
    "validate_api_spec_compatibility",
    "validate_business_rules",
    "validate_field_type",
    "validate_module_config",
    "validate_screen_dependencies",
    "validate_structure",
]
