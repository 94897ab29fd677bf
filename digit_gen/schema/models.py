"""Pydantic v2 models for module configurations.

Two layers live here:

* *Document* models (``ModuleDocument`` and its parts) describe the raw JSON
  shape and carry every structural constraint (types, patterns, enums,
  required and forbidden keys).  Validating a raw mapping against
  ``ModuleDocument`` is the structural check.
* ``ModuleConfig`` is the frozen, normalized value handed to the renderer.
  Its workflow is a sum type, so an enabled workflow without a business
  service cannot be constructed.

Python attribute names are snake_case; the JSON keys are camelCase aliases.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainValidator,
    StrictBool,
    StrictStr,
    model_validator,
)
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ScreenKind(str, Enum):
    """Generated UI flows, in their canonical order."""
    CREATE = "create"
    SEARCH = "search"
    INBOX = "inbox"
    VIEW = "view"
    RESPONSE = "response"


class FieldType(str, Enum):
    """Form widget types understood by the target framework."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    EMAIL = "email"
    URL = "url"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    DROPDOWN = "dropdown"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    MULTISELECT = "multiselect"
    RADIO_OR_DROPDOWN = "radioordropdown"
    MOBILE_NUMBER = "mobileNumber"
    AMOUNT = "amount"
    LOCATION_DROPDOWN = "locationdropdown"
    API_DROPDOWN = "apidropdown"
    FILE = "file"
    COMPONENT = "component"


CHOICE_FIELD_TYPES = frozenset(
    {FieldType.DROPDOWN, FieldType.RADIO, FieldType.MULTISELECT}
)


# ---------------------------------------------------------------------------
# Constrained scalar types
# ---------------------------------------------------------------------------

def _number(value: Any) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return value


def _at_least(minimum: int) -> PlainValidator:
    def check(value: Any) -> Union[int, float]:
        number = _number(value)
        if number < minimum:
            raise ValueError(f"must be >= {minimum}")
        return number

    return PlainValidator(check)


Number = Annotated[Union[int, float], PlainValidator(_number)]
NonNegativeNumber = Annotated[Union[int, float], _at_least(0)]
PositiveNumber = Annotated[Union[int, float], _at_least(1)]
NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
ApiPath = Annotated[StrictStr, Field(pattern=r"^/")]


class _ConfigModel(BaseModel):
    """Base for every document model: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Module & entity
# ---------------------------------------------------------------------------

class ModuleInfo(_ConfigModel):
    """Identity of the generated module package."""
    name: NonEmptyStr
    code: StrictStr = Field(..., min_length=1, pattern=r"^[a-z0-9-]+$")
    description: NonEmptyStr
    version: Optional[StrictStr] = Field(default=None, pattern=r"^\d+\.\d+\.\d+$")


class EntityInfo(_ConfigModel):
    """The business entity the module manages."""
    name: StrictStr = Field(..., min_length=1, pattern=r"^[A-Z][a-zA-Z0-9]*$")
    api_path: StrictStr = Field(..., min_length=1, pattern=r"^/")
    primary_key: NonEmptyStr
    display_field: NonEmptyStr


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class ScreenConfig(_ConfigModel):
    """Toggle and roles for one screen; kind-specific keys are kept as extras."""

    model_config = ConfigDict(extra="allow")

    enabled: StrictBool
    roles: Optional[list[NonEmptyStr]] = None


class ScreenSet(_ConfigModel):
    """Screen toggles keyed by :class:`ScreenKind`."""

    create: Optional[ScreenConfig] = None
    search: Optional[ScreenConfig] = None
    inbox: Optional[ScreenConfig] = None
    view: Optional[ScreenConfig] = None
    response: Optional[ScreenConfig] = None

    @model_validator(mode="after")
    def _at_least_one_screen(self) -> "ScreenSet":
        if not self.configured():
            raise ValueError("must define at least one screen")
        return self

    def get(self, kind: ScreenKind | str) -> Optional[ScreenConfig]:
        return getattr(self, ScreenKind(kind).value)

    def configured(self) -> list[tuple[ScreenKind, ScreenConfig]]:
        """Declared screens in canonical :class:`ScreenKind` order."""
        return [
            (kind, screen)
            for kind in ScreenKind
            if (screen := getattr(self, kind.value)) is not None
        ]

    def enabled_kinds(self) -> list[ScreenKind]:
        return [kind for kind, screen in self.configured() if screen.enabled]

    def is_enabled(self, kind: ScreenKind | str) -> bool:
        screen = self.get(kind)
        return bool(screen and screen.enabled)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

class FieldValidation(_ConfigModel):
    """Input constraints rendered into form populators."""
    pattern: Optional[StrictStr] = None
    min_length: Optional[NonNegativeNumber] = None
    max_length: Optional[PositiveNumber] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    step: Optional[NonNegativeNumber] = None


class FieldOption(_ConfigModel):
    """A static choice for dropdown/radio/multiselect fields."""
    code: NonEmptyStr
    name: NonEmptyStr


class MdmsConfig(_ConfigModel):
    """Master-data source for choice fields."""
    master_name: NonEmptyStr
    module_name: NonEmptyStr
    locale_prefix: Optional[StrictStr] = None


class FieldConfig(_ConfigModel):
    """One entity attribute; list order is rendered order."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr = Field(..., min_length=1, pattern=r"^[a-zA-Z][a-zA-Z0-9]*$")
    type: FieldType
    label: NonEmptyStr
    required: StrictBool
    searchable: Optional[StrictBool] = None
    filterable: Optional[StrictBool] = None
    show_in_results: Optional[StrictBool] = None
    show_in_view: Optional[StrictBool] = None
    show_in_inbox_results: Optional[StrictBool] = None
    inbox_searchable: Optional[StrictBool] = None
    description: Optional[StrictStr] = None
    key: Optional[StrictStr] = None
    inline: Optional[StrictBool] = None
    validation: Optional[FieldValidation] = None
    options: Optional[list[FieldOption]] = None
    mdms: Optional[MdmsConfig] = None


# ---------------------------------------------------------------------------
# API, auth, workflow, i18n
# ---------------------------------------------------------------------------

class ApiEndpoints(_ConfigModel):
    """Operation name -> path.  Operations beyond the known five are allowed."""

    model_config = ConfigDict(extra="allow")

    create: Optional[ApiPath] = None
    update: Optional[ApiPath] = None
    search: Optional[ApiPath] = None
    view: Optional[ApiPath] = None
    workflow: Optional[ApiPath] = None

    def paths(self) -> dict[str, Any]:
        """Every declared operation, known ones first, in a stable order."""
        declared = {
            name: getattr(self, name)
            for name in ("create", "update", "search", "view", "workflow")
            if getattr(self, name) is not None
        }
        return {**declared, **(self.model_extra or {})}


class AuthConfig(_ConfigModel):
    required: StrictBool
    roles: Optional[list[NonEmptyStr]] = Field(default=None, min_length=1)


class WorkflowSettings(_ConfigModel):
    """Workflow block as written in a configuration document."""
    enabled: StrictBool
    business_service: Optional[NonEmptyStr] = None


class I18nConfig(_ConfigModel):
    prefix: Optional[StrictStr] = Field(default=None, pattern=r"^[A-Z_]+_$")
    generate_keys: Optional[StrictBool] = None


class ModuleDocument(_ConfigModel):
    """A complete configuration document as loaded from JSON.

    Unknown top-level keys (e.g. ``metadata`` from an API-spec import) are
    preserved.
    """

    model_config = ConfigDict(extra="allow")

    module: ModuleInfo
    entity: EntityInfo
    screens: ScreenSet
    fields: list[FieldConfig] = Field(..., min_length=1)
    api: Optional[ApiEndpoints] = None
    auth: Optional[AuthConfig] = None
    workflow: Optional[WorkflowSettings] = None
    i18n: Optional[I18nConfig] = Field(default=None, alias="i18n")


# ---------------------------------------------------------------------------
# Render-time configuration
# ---------------------------------------------------------------------------

class DisabledWorkflow(_ConfigModel):
    model_config = ConfigDict(frozen=True)

    enabled: Literal[False] = False


class EnabledWorkflow(_ConfigModel):
    model_config = ConfigDict(frozen=True)

    enabled: Literal[True] = True
    business_service: NonEmptyStr


Workflow = Union[DisabledWorkflow, EnabledWorkflow]


class ModuleConfig(_ConfigModel):
    """Normalized, read-only configuration used for one generation pass.

    Build it with :meth:`from_document` after validation; every optional
    section is filled with an explicit default so templates never see a
    missing section, only missing optional values.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    module: ModuleInfo
    entity: EntityInfo
    screens: ScreenSet
    fields: list[FieldConfig]
    api: ApiEndpoints = Field(default_factory=ApiEndpoints)
    auth: AuthConfig = Field(default_factory=lambda: AuthConfig(required=False))
    workflow: Workflow = Field(default_factory=DisabledWorkflow)
    i18n: I18nConfig = Field(..., alias="i18n")

    @classmethod
    def from_document(cls, document: ModuleDocument) -> "ModuleConfig":
        """Normalize a structurally and semantically valid document."""
        settings = document.workflow
        if settings is not None and settings.enabled:
            workflow: Workflow = EnabledWorkflow(
                business_service=settings.business_service
            )
        else:
            workflow = DisabledWorkflow()

        i18n = document.i18n or I18nConfig()
        updates: dict[str, Any] = {}
        if not i18n.prefix:
            updates["prefix"] = f"{document.entity.name.upper()}_"
        if i18n.generate_keys is None:
            updates["generate_keys"] = False
        if updates:
            i18n = i18n.model_copy(update=updates)

        return cls(
            module=document.module,
            entity=document.entity,
            screens=document.screens,
            fields=document.fields,
            api=document.api or ApiEndpoints(),
            auth=document.auth or AuthConfig(required=False),
            workflow=workflow,
            i18n=i18n,
            **(document.model_extra or {}),
        )

    # -- Convenience accessors ---------------------------------------------

    @property
    def prefix(self) -> str:
        return self.i18n.prefix or ""

    @property
    def workflow_enabled(self) -> bool:
        return isinstance(self.workflow, EnabledWorkflow)

    def has_field_type(self, *types: FieldType | str) -> bool:
        wanted = {FieldType(t) for t in types}
        return any(field.type in wanted for field in self.fields)

    def template_context(self) -> dict[str, Any]:
        """JSON-shaped deep copy with camelCase keys and absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
