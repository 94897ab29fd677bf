"""Unit tests for GeneratorSettings (digit_gen.config).

Tests cover:
- Defaults
- log_level normalization and validation
- spec_timeout and languages constraints
- from_env
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from digit_gen.config import DEFAULT_TEMPLATES_DIR, GeneratorSettings, parse_csv


# ---------------------------------------------------------------------------
# Defaults & validation
# ---------------------------------------------------------------------------


class TestGeneratorSettings:
    @pytest.mark.unit
    def test_defaults(self):
        settings = GeneratorSettings()
        assert settings.output_dir == Path("./generated")
        assert settings.templates_dir == DEFAULT_TEMPLATES_DIR
        assert settings.languages == ["en_IN", "hi_IN"]
        assert settings.force is False
        assert settings.dry_run is False
        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.spec_timeout == 30.0

    @pytest.mark.unit
    def test_log_level_is_uppercased(self):
        assert GeneratorSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.unit
    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            GeneratorSettings(log_level="chatty")

    @pytest.mark.unit
    def test_spec_timeout_lower_bound(self):
        with pytest.raises(ValidationError):
            GeneratorSettings(spec_timeout=0.5)

    @pytest.mark.unit
    def test_languages_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            GeneratorSettings(languages=[])


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestFromEnv:
    @pytest.mark.unit
    def test_reads_variables(self, tmp_path: Path):
        env = {
            "DIGIT_GEN_OUTPUT_DIR": str(tmp_path / "out"),
            "DIGIT_GEN_TEMPLATES_DIR": str(tmp_path / "tpl"),
            "DIGIT_GEN_LANGUAGES": "en_IN, ta_IN ,",
            "DIGIT_GEN_LOG_LEVEL": "info",
            "DIGIT_GEN_SPEC_TIMEOUT": "12",
            "DEBUG": "1",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings.output_dir == tmp_path / "out"
        assert settings.templates_dir == tmp_path / "tpl"
        assert settings.languages == ["en_IN", "ta_IN"]
        assert settings.log_level == "INFO"
        assert settings.spec_timeout == 12.0
        assert settings.debug is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "0", "false", "No"])
    def test_debug_falsy_values(self, value: str):
        with patch.dict(os.environ, {"DEBUG": value}, clear=True):
            assert GeneratorSettings.from_env().debug is False

    @pytest.mark.unit
    def test_empty_environment_gives_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings.output_dir == Path("./generated")
        assert settings.languages == ["en_IN", "hi_IN"]


class TestParseCsv:
    @pytest.mark.unit
    def test_drops_blanks(self):
        assert parse_csv("create, search,,view ") == ["create", "search", "view"]
