"""Generator settings.

Typed settings for one CLI run.  Values come from command-line flags or from
environment variables (:meth:`GeneratorSettings.from_env`) and are validated
by Pydantic at construction time.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATES_DIR = Path.home() / ".digit-gen" / "templates"


class GeneratorSettings(BaseModel):
    """Everything that affects a run but is not part of a module configuration."""

    output_dir: Path = Field(default=Path("./generated"))
    templates_dir: Path = Field(
        default=DEFAULT_TEMPLATES_DIR,
        description="User template store, searched after the bundled presets",
    )
    languages: list[str] = Field(default_factory=lambda: ["en_IN", "hi_IN"], min_length=1)
    force: bool = False
    dry_run: bool = False
    debug: bool = False
    log_level: str = Field(default="WARNING")
    spec_timeout: float = Field(
        default=30.0, ge=1, description="Timeout in seconds for remote API specs"
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            DIGIT_GEN_OUTPUT_DIR, DIGIT_GEN_TEMPLATES_DIR, DIGIT_GEN_LANGUAGES
            (comma-separated), DIGIT_GEN_LOG_LEVEL, DIGIT_GEN_SPEC_TIMEOUT
            and DEBUG (any non-empty value other than ``0``/``false``).
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("DIGIT_GEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["DIGIT_GEN_OUTPUT_DIR"])
        if os.environ.get("DIGIT_GEN_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["DIGIT_GEN_TEMPLATES_DIR"])
        if os.environ.get("DIGIT_GEN_LANGUAGES"):
            kwargs["languages"] = parse_csv(os.environ["DIGIT_GEN_LANGUAGES"])
        if os.environ.get("DIGIT_GEN_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["DIGIT_GEN_LOG_LEVEL"]
        if os.environ.get("DIGIT_GEN_SPEC_TIMEOUT"):
            kwargs["spec_timeout"] = float(os.environ["DIGIT_GEN_SPEC_TIMEOUT"])
        debug = os.environ.get("DEBUG", "")
        kwargs["debug"] = debug.strip().lower() not in ("", "0", "false", "no")
        return cls(**kwargs)


def parse_csv(value: str) -> list[str]:
    """Split a comma-separated option, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]
