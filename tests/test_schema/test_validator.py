"""Tests for configuration validation (digit_gen.schema.validator).

Covers:
- Structural errors with dotted locations
- Every business rule, reported together
- Advisory warnings (field types, screen dependencies, API comparison)
- Suggestions for common mistakes
- load_module_config raising ConfigValidationError
"""

from __future__ import annotations

import pytest

from digit_gen.errors import ConfigValidationError
from digit_gen.naming import to_localization_key
from digit_gen.scaffolder import ScreenConfigGenerator
from digit_gen.schema import (
    advisory_warnings,
    load_module_config,
    suggest_fixes,
    validate_api_spec_compatibility,
    validate_field_type,
    validate_module_config,
    validate_screen_dependencies,
    validate_structure,
)


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------


class TestStructure:
    def test_valid_document(self, vehicle_raw):
        result = validate_structure(vehicle_raw)
        assert result.valid is True
        assert result.errors == []
        assert result.document is not None

    def test_non_mapping_reported_against_root(self):
        result = validate_structure(["not", "a", "config"])
        assert result.valid is False
        assert result.errors[0].startswith("root:")

    def test_locations_use_json_keys(self, vehicle_raw):
        vehicle_raw["module"]["code"] = "Vehicle Mgmt"
        vehicle_raw["entity"]["apiPath"] = "vehicle-service"
        vehicle_raw["fields"][1]["type"] = "slider"
        result = validate_structure(vehicle_raw)
        assert not result.valid
        joined = "\n".join(result.errors)
        assert "module.code:" in joined
        assert "entity.apiPath:" in joined
        assert "fields[1].type:" in joined

    def test_missing_required_sections(self):
        result = validate_structure({"module": {"name": "X"}})
        joined = "\n".join(result.errors)
        for location in ("entity", "screens", "fields", "module.code", "module.description"):
            assert f"{location}:" in joined

    def test_document_not_serialized(self, vehicle_raw):
        result = validate_structure(vehicle_raw)
        assert "document" not in result.model_dump()


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------


class TestBusinessRules:
    def test_end_to_end_minimal_config(self, minimal_vehicle_raw, renderer):
        result = validate_module_config(minimal_vehicle_raw)
        assert result.valid is True
        assert result.errors == []

        config = load_module_config(minimal_vehicle_raw)
        output = ScreenConfigGenerator(renderer).generate(config, "search")
        assert "VEHICLE_REGISTRATION_NUMBER" in output
        assert to_localization_key("registrationNumber", "VEHICLE_") in output

    def test_workflow_needs_business_service(self, vehicle_raw):
        vehicle_raw["workflow"] = {"enabled": True}
        result = validate_module_config(vehicle_raw)
        assert "workflow.businessService is required when workflow is enabled" in result.errors

    def test_inbox_needs_workflow(self, workflow_raw):
        workflow_raw["workflow"] = {"enabled": False}
        result = validate_module_config(workflow_raw)
        assert "Workflow must be enabled to use inbox screen" in result.errors

    def test_choice_field_needs_options_or_mdms(self, vehicle_raw):
        del vehicle_raw["fields"][1]["options"]
        result = validate_module_config(vehicle_raw)
        assert result.errors == [
            "fields[1].vehicleType: dropdown/radio/multiselect fields must have either "
            "options or mdms configuration"
        ]

    def test_mdms_satisfies_choice_rule(self, vehicle_raw):
        del vehicle_raw["fields"][1]["options"]
        vehicle_raw["fields"][1]["mdms"] = {"masterName": "VehicleType", "moduleName": "fleet"}
        assert validate_module_config(vehicle_raw).valid

    def test_duplicate_field_names(self, vehicle_raw):
        vehicle_raw["fields"].append(dict(vehicle_raw["fields"][0]))
        result = validate_module_config(vehicle_raw)
        assert "Duplicate field names found: registrationNumber" in result.errors

    def test_min_greater_than_max(self, vehicle_raw):
        vehicle_raw["fields"][2]["validation"] = {"min": 9999999999, "max": 6000000000}
        result = validate_module_config(vehicle_raw)
        assert (
            "fields[2].ownerMobile: validation.min cannot be greater than validation.max"
            in result.errors
        )

    def test_mobile_number_zero_bound_counts_as_missing(self, vehicle_raw):
        vehicle_raw["fields"][2]["validation"] = {"min": 0, "max": 9999999999}
        result = validate_module_config(vehicle_raw)
        assert any("mobileNumber fields should have both" in e for e in result.errors)

    def test_amount_needs_min(self, vehicle_raw):
        vehicle_raw["fields"].append(
            {"name": "fee", "type": "amount", "label": "Fee", "required": False,
             "validation": {"max": 100}}
        )
        result = validate_module_config(vehicle_raw)
        assert "fields[4].fee: amount fields should have validation.min defined" in result.errors

    def test_enabled_screen_with_empty_roles(self, vehicle_raw):
        vehicle_raw["screens"]["view"]["roles"] = []
        result = validate_module_config(vehicle_raw)
        assert (
            "screens.view.roles: must be a non-empty array when screen is enabled"
            in result.errors
        )

    def test_auth_required_without_roles(self, vehicle_raw):
        del vehicle_raw["auth"]["roles"]
        result = validate_module_config(vehicle_raw)
        assert "auth.roles: must be defined when authentication is required" in result.errors

    def test_all_violations_reported_together(self, workflow_raw):
        workflow_raw["workflow"] = {"enabled": False}
        workflow_raw["fields"].append(dict(workflow_raw["fields"][0]))
        del workflow_raw["fields"][1]["options"]
        result = validate_module_config(workflow_raw)
        assert len(result.errors) == 3

    def test_validation_is_deterministic(self, workflow_raw):
        workflow_raw["workflow"] = {"enabled": True}
        first = validate_module_config(workflow_raw)
        second = validate_module_config(workflow_raw)
        assert first.errors == second.errors

    def test_structural_errors_skip_business_rules(self, vehicle_raw):
        vehicle_raw["module"]["code"] = "BAD CODE"
        vehicle_raw["workflow"] = {"enabled": True}
        result = validate_module_config(vehicle_raw)
        assert all(e.startswith("module.code") for e in result.errors)

    def test_load_module_config_raises_with_all_errors(self, vehicle_raw):
        vehicle_raw["workflow"] = {"enabled": True}
        vehicle_raw["screens"]["view"]["roles"] = []
        with pytest.raises(ConfigValidationError) as exc_info:
            load_module_config(vehicle_raw)
        assert len(exc_info.value.errors) == 2


# ---------------------------------------------------------------------------
# Advisory checks
# ---------------------------------------------------------------------------


class TestAdvisory:
    def test_field_type_advice_does_not_mutate(self, vehicle_config):
        field = vehicle_config.fields[2].model_copy(
            update={"validation": vehicle_config.fields[2].validation.model_copy(update={"min": 0})}
        )
        before = field.model_dump()
        advice = validate_field_type(field)
        assert advice == ["Mobile number fields should define min and max validation"]
        assert field.model_dump() == before

    def test_email_without_pattern(self, vehicle_raw):
        vehicle_raw["fields"].append(
            {"name": "email", "type": "email", "label": "Email", "required": False,
             "validation": {"maxLength": 64}}
        )
        config = load_module_config(vehicle_raw)
        assert any("validation.pattern" in w for w in validate_field_type(config.fields[-1]))

    def test_view_without_primary_key_field(self, vehicle_config):
        warnings = validate_screen_dependencies(vehicle_config)
        assert warnings == ["View screen requires a primary key field to be defined"]

    def test_search_without_searchable_field(self, vehicle_raw):
        for field in vehicle_raw["fields"]:
            field.pop("searchable", None)
        config = load_module_config(vehicle_raw)
        assert "Search screen requires at least one searchable field" in (
            validate_screen_dependencies(config)
        )

    def test_api_comparison(self, vehicle_config, openapi_document):
        advice = validate_api_spec_compatibility(vehicle_config, openapi_document)
        assert 'Field "ownerMobile" not found in API schema' in advice
        assert 'Field "registrationDate" not found in API schema' in advice
        assert not any("registrationNumber" in a for a in advice)

    def test_api_comparison_required_mismatch(self, vehicle_config, openapi_document):
        openapi_document["components"]["schemas"]["Vehicle"]["required"] = []
        advice = validate_api_spec_compatibility(vehicle_config, openapi_document)
        assert 'Field "registrationNumber" required status doesn\'t match API schema' in advice

    def test_api_comparison_missing_entity(self, vehicle_config):
        advice = validate_api_spec_compatibility(vehicle_config, {"definitions": {}})
        assert advice == ['Entity "Vehicle" not found in API specification']

    def test_advisory_warnings_without_spec(self, vehicle_config):
        assert advisory_warnings(vehicle_config) == [
            "View screen requires a primary key field to be defined"
        ]


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestSuggestions:
    def test_hint_per_matching_error(self, vehicle_raw):
        vehicle_raw["module"]["code"] = "Vehicle Mgmt"
        result = validate_module_config(vehicle_raw)
        hints = suggest_fixes(result.errors, vehicle_raw)
        assert hints[0] == (
            "Module code must be in kebab-case (lowercase with hyphens)",
            'Example: "employee-management" instead of "Employee Management"',
        )

    def test_general_hints(self):
        raw = {
            "auth": {"required": False},
            "workflow": {"enabled": False},
            "screens": {"inbox": {"enabled": True}, "search": {"enabled": True}},
            "fields": [{"name": "x"}],
        }
        hints = [hint for hint, _ in suggest_fixes([], raw)]
        assert hints == [
            "Consider enabling authentication for production use",
            "Inbox screen requires workflow to be enabled",
            "Search screen needs at least one field marked as searchable",
        ]

    def test_tolerates_non_mapping_config(self):
        hints = suggest_fixes([], "garbage")
        assert hints == [("Consider enabling authentication for production use", "")]
