"""Unit tests for shared helpers (digit_gen.utils)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from digit_gen.utils import (
    PACKAGE_LOGGER,
    configure_logging,
    console,
    dump_json,
    load_json,
    print_bullets,
    print_error,
)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    @pytest.mark.unit
    def test_installs_single_rich_handler(self):
        configure_logging("INFO")
        logger = configure_logging("INFO")
        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert logger.name == PACKAGE_LOGGER
        assert len(rich_handlers) == 1
        assert logger.level == logging.INFO
        assert logger.propagate is False

    @pytest.mark.unit
    def test_debug_forces_debug_level(self):
        logger = configure_logging("ERROR", debug=True)
        assert logger.level == logging.DEBUG


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


class TestJson:
    @pytest.mark.unit
    def test_dump_json_is_indented_with_trailing_newline(self):
        text = dump_json({"b": 1, "a": "हिंदी"})
        assert text.endswith("}\n")
        assert '  "b": 1' in text
        assert "हिंदी" in text

    @pytest.mark.unit
    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text(dump_json({"files": ["a.js"]}), encoding="utf-8")
        assert load_json(path) == {"files": ["a.js"]}

    @pytest.mark.unit
    def test_load_json_invalid(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


class TestConsoleOutput:
    @pytest.mark.unit
    def test_print_error_prefix(self):
        with console.capture() as capture:
            print_error("Configuration file not found: x.json")
        assert "Error: Configuration file not found: x.json" in capture.get()

    @pytest.mark.unit
    def test_print_bullets_one_line_per_item(self):
        with console.capture() as capture:
            print_bullets(["first problem", "second problem"])
        lines = [line for line in capture.get().splitlines() if line.strip()]
        assert len(lines) == 2
        assert "first problem" in lines[0]
