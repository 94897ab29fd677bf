"""Shared pytest fixtures for the DIGIT module generator test suite.

Provides reusable fixtures for:
- Raw module configurations (minimal search-only, full vehicle, workflow)
- Normalized ModuleConfig instances
- A real TemplateRenderer over the bundled templates
- Temporary output and template-store directories
- A small OpenAPI document
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from digit_gen.scaffolder import TemplateRenderer
from digit_gen.schema import ModuleConfig, load_module_config
from digit_gen.utils import PACKAGE_LOGGER


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo configure_logging() so caplog keeps seeing package records."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# ---------------------------------------------------------------------------
# Raw configurations
# ---------------------------------------------------------------------------

_MINIMAL_VEHICLE: dict[str, Any] = {
    "module": {
        "name": "Vehicle Management",
        "code": "vehicle-mgmt",
        "description": "x",
        "version": "1.0.0",
    },
    "entity": {
        "name": "Vehicle",
        "apiPath": "/vehicle-service/v1",
        "primaryKey": "vehicleId",
        "displayField": "registrationNumber",
    },
    "screens": {"search": {"enabled": True, "roles": ["ADMIN"]}},
    "fields": [
        {
            "name": "registrationNumber",
            "type": "text",
            "label": "Registration Number",
            "required": True,
            "searchable": True,
        }
    ],
    "api": {"search": "/vehicle/_search"},
    "auth": {"required": True, "roles": ["ADMIN"]},
    "workflow": {"enabled": False},
    "i18n": {"prefix": "VEHICLE_", "generateKeys": True},
}

_FULL_VEHICLE: dict[str, Any] = {
    "module": {
        "name": "Vehicle Management",
        "code": "vehicle-mgmt",
        "description": "Comprehensive vehicle management system",
        "version": "1.2.0",
    },
    "entity": {
        "name": "Vehicle",
        "apiPath": "/vehicle-service/v1",
        "primaryKey": "vehicleId",
        "displayField": "registrationNumber",
    },
    "screens": {
        "create": {"enabled": True, "roles": ["VEHICLE_ADMIN"]},
        "search": {
            "enabled": True,
            "roles": ["VEHICLE_ADMIN", "VEHICLE_VIEWER"],
            "minSearchFields": 1,
        },
        "view": {"enabled": True, "roles": ["VEHICLE_ADMIN", "VEHICLE_VIEWER"]},
        "response": {"enabled": True},
    },
    "fields": [
        {
            "name": "registrationNumber",
            "type": "text",
            "label": "Registration Number",
            "required": True,
            "searchable": True,
            "showInResults": True,
            "showInView": True,
            "validation": {"pattern": "^[A-Z]{2}[0-9]{2}[A-Z]{2}[0-9]{4}$", "maxLength": 10},
        },
        {
            "name": "vehicleType",
            "type": "dropdown",
            "label": "Vehicle Type",
            "required": True,
            "searchable": True,
            "showInResults": True,
            "options": [
                {"code": "CAR", "name": "Car"},
                {"code": "TRUCK", "name": "Truck"},
            ],
        },
        {
            "name": "ownerMobile",
            "type": "mobileNumber",
            "label": "Owner Mobile",
            "required": False,
            "validation": {"min": 6000000000, "max": 9999999999},
        },
        {
            "name": "registrationDate",
            "type": "date",
            "label": "Registration Date",
            "required": True,
            "showInView": True,
            "helpText": "Date printed on the registration certificate",
        },
    ],
    "api": {
        "create": "/vehicle/_create",
        "update": "/vehicle/_update",
        "search": "/vehicle/_search",
        "view": "/vehicle/{id}",
    },
    "auth": {"required": True, "roles": ["VEHICLE_ADMIN", "VEHICLE_VIEWER"]},
    "workflow": {"enabled": False},
    "i18n": {"prefix": "VEHICLE_", "generateKeys": True},
}


@pytest.fixture
def minimal_vehicle_raw() -> dict[str, Any]:
    """The smallest valid document: one searchable field, search screen only."""
    return copy.deepcopy(_MINIMAL_VEHICLE)


@pytest.fixture
def vehicle_raw() -> dict[str, Any]:
    """A complete vehicle configuration without a workflow."""
    return copy.deepcopy(_FULL_VEHICLE)


@pytest.fixture
def workflow_raw(vehicle_raw: dict[str, Any]) -> dict[str, Any]:
    """The vehicle configuration with an approval workflow and an inbox."""
    vehicle_raw["workflow"] = {"enabled": True, "businessService": "vehicle-approval"}
    vehicle_raw["screens"]["inbox"] = {
        "enabled": True,
        "roles": ["VEHICLE_APPROVER"],
        "businessService": "vehicle-approval",
    }
    vehicle_raw["api"]["workflow"] = "/egov-workflow-v2/egov-wf/process/_transition"
    return vehicle_raw


# ---------------------------------------------------------------------------
# Normalized configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_vehicle_config(minimal_vehicle_raw: dict[str, Any]) -> ModuleConfig:
    return load_module_config(minimal_vehicle_raw)


@pytest.fixture
def vehicle_config(vehicle_raw: dict[str, Any]) -> ModuleConfig:
    return load_module_config(vehicle_raw)


@pytest.fixture
def workflow_config(workflow_raw: dict[str, Any]) -> ModuleConfig:
    return load_module_config(workflow_raw)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.fixture
def renderer() -> TemplateRenderer:
    """A real renderer over the bundled templates."""
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Files & directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory for generated modules."""
    out = tmp_path / "generated"
    out.mkdir()
    return out


@pytest.fixture
def config_file(tmp_path: Path, vehicle_raw: dict[str, Any]) -> Path:
    """The full vehicle configuration written to a JSON file."""
    path = tmp_path / "vehicle.json"
    path.write_text(json.dumps(vehicle_raw, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def user_templates_dir(tmp_path: Path) -> Path:
    """Empty user template store."""
    store = tmp_path / "user-templates"
    store.mkdir()
    return store


@pytest.fixture
def openapi_document() -> dict[str, Any]:
    """OpenAPI 3 document describing a Vehicle resource."""
    return {
        "openapi": "3.0.1",
        "info": {"title": "Vehicle Service", "version": "2.1.0"},
        "servers": [{"url": "https://api.example.org/vehicle-service/v1"}],
        "paths": {
            "/vehicles/{vehicleId}": {"get": {"responses": {"200": {"description": "ok"}}}},
        },
        "components": {
            "schemas": {
                "Vehicle": {
                    "type": "object",
                    "required": ["registrationNumber", "vehicleType"],
                    "properties": {
                        "id": {"type": "string"},
                        "registrationNumber": {
                            "type": "string",
                            "pattern": "^[A-Z]{2}[0-9]{4}$",
                            "maxLength": 10,
                        },
                        "vehicleType": {"type": "string", "enum": ["CAR", "TRUCK"]},
                        "seatingCapacity": {"type": "integer", "minimum": 1, "maximum": 60},
                        "registeredOn": {"type": "string", "format": "date"},
                        "notes": {"type": "string", "maxLength": 1000},
                        "owner": {"$ref": "#/components/schemas/Owner"},
                        "fuel": {"$ref": "#/components/schemas/FuelType"},
                        "features": {
                            "type": "array",
                            "items": {"type": "string", "enum": ["ABS", "GPS"]},
                        },
                        "active": {"type": "boolean"},
                    },
                },
                "Owner": {"type": "object", "properties": {"name": {"type": "string"}}},
                "FuelType": {
                    "type": "object",
                    "properties": {"code": {"type": "string"}, "name": {"type": "string"}},
                },
            }
        },
    }
