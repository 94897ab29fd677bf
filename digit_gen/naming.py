"""Naming-convention derivation shared by validation, templates and generators.

Every case conversion used anywhere in the generator lives here so that the
same entity, field or screen name always maps to the same token in every
rendered file.  All functions are pure and total: an empty string maps to an
empty string.

Two upper-case schemes exist on purpose:

* :func:`constant_case` inserts ``_`` before *every* capital letter.  It is
  used for identifier tokens such as ``SEARCH_VEHICLE`` or ``ENDPOINTS.VEHICLE``.
* :func:`to_localization_key` inserts ``_`` only at a lowercase-to-uppercase
  boundary.  Every localization key goes through it.

They agree for plain camelCase names (``mobileNumber``) and differ for runs of
capitals (``panID`` -> ``PAN_I_D`` vs ``PAN_ID``).
"""

from __future__ import annotations

import re

DEFAULT_LOCALIZATION_PREFIX = "MODULE_"

_SEPARATOR_RUN = re.compile(r"[-_\s]+(.)?")
_UPPER = re.compile(r"[A-Z]")
_LOWER_UPPER_BOUNDARY = re.compile(r"([a-z])([A-Z])")


# ---------------------------------------------------------------------------
# Case conversions
# ---------------------------------------------------------------------------


def pascal_case(value: str) -> str:
    """Capitalize the first letter and collapse ``-``/``_``/space runs.

    The character following a separator run is upper-cased; every other
    character is kept as-is::

        pascal_case("vehicle-mgmt")  -> "VehicleMgmt"
        pascal_case("search")        -> "Search"
    """
    if not value:
        return ""
    tail = _SEPARATOR_RUN.sub(
        lambda m: m.group(1).upper() if m.group(1) else "", value[1:]
    )
    return value[0].upper() + tail


def camel_case(value: str) -> str:
    """``pascal_case`` with the first character lower-cased."""
    pascal = pascal_case(value)
    if not pascal:
        return ""
    return pascal[0].lower() + pascal[1:]


def kebab_case(value: str) -> str:
    """Replace each capital with ``-`` plus its lowercase form.

    A single leading ``-`` (from an initial capital) is stripped::

        kebab_case("VehicleType") -> "vehicle-type"
    """
    if not value:
        return ""
    converted = _UPPER.sub(lambda m: "-" + m.group().lower(), value)
    return converted[1:] if converted.startswith("-") else converted


def constant_case(value: str) -> str:
    """Prefix each capital with ``_``, drop one leading ``_`` and upper-case."""
    if not value:
        return ""
    converted = _UPPER.sub(lambda m: "_" + m.group(), value)
    if converted.startswith("_"):
        converted = converted[1:]
    return converted.upper()


def to_localization_key(field_name: str, prefix: str | None = None) -> str:
    """Derive the localization key for *field_name*.

    ``_`` is inserted only between a lowercase letter and the uppercase letter
    that follows it, the result is upper-cased and *prefix* (default
    ``MODULE_``) is prepended::

        to_localization_key("mobileNumber", "VEHICLE_") -> "VEHICLE_MOBILE_NUMBER"
        to_localization_key("name", "EMP_")             -> "EMP_NAME"
    """
    final_prefix = prefix or DEFAULT_LOCALIZATION_PREFIX
    return final_prefix + _LOWER_UPPER_BOUNDARY.sub(r"\1_\2", field_name).upper()


# ---------------------------------------------------------------------------
# Derived defaults
# ---------------------------------------------------------------------------


def humanize_label(name: str) -> str:
    """Turn an identifier into a display label (``mobileNumber`` -> ``Mobile Number``)."""
    if not name:
        return ""
    spaced = _UPPER.sub(lambda m: " " + m.group(), name)
    return (spaced[0].upper() + spaced[1:]).strip()


def entity_defaults(entity_name: str) -> dict[str, str]:
    """Primary key, display field and i18n prefix synthesized from an entity name."""
    lower = entity_name.lower()
    return {
        "primaryKey": f"{lower}Id",
        "displayField": f"{lower}Name",
        "prefix": f"{entity_name.upper()}_",
    }
