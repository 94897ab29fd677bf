"""Exception taxonomy for the module generator.

Configuration problems found by the validator are *returned* as lists of
strings; the exceptions below are raised only at the edges (file loading,
rendering, writing) and by callers that decide a failed validation result
should stop the run.
"""

from __future__ import annotations

from pathlib import Path


class DigitGenError(Exception):
    """Base class for all generator errors."""


# ---------------------------------------------------------------------------
# Configuration sourcing
# ---------------------------------------------------------------------------


class ConfigNotFound(DigitGenError):
    """A configuration, template or API specification file does not exist."""

    def __init__(self, path: str | Path, kind: str = "Configuration file") -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"{kind} not found: {path}")


class ConfigParseError(DigitGenError):
    """A configuration file exists but could not be parsed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid configuration in {path}: {reason}")


class ConfigValidationError(DigitGenError):
    """Structural or business-rule validation failed.

    Always carries the complete list of violations so that a user can fix
    every issue in one pass.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"Configuration validation failed with {len(self.errors)} error(s)"
        )


# ---------------------------------------------------------------------------
# Rendering and assembly
# ---------------------------------------------------------------------------


class TemplateError(DigitGenError):
    """A template could not be rendered.

    This indicates a mismatch between a template and the configuration model
    (undefined helper, unguarded missing value, syntax error) and is not
    fixable by editing the configuration.
    """

    def __init__(self, template: str, message: str) -> None:
        self.template = template
        self.message = message
        super().__init__(f"Template {template!r}: {message}")


class WriteFailure(DigitGenError):
    """Writing a generated file failed."""

    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")


class ModuleExistsError(DigitGenError):
    """The module output directory already exists and ``force`` was not set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"Module directory already exists: {path}. Use --force to overwrite."
        )


class GenerationError(DigitGenError):
    """Raised when an assembler stage fails; wraps the originating error."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage {stage!r} failed: {message}")
