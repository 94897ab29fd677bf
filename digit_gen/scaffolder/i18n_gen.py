"""Localization bundles (``localization/<language>.json``).

Keys are built in a fixed order: module, entity and screen titles, actions,
messages, common labels, validation, status and pagination keys; then for
each field its label, ``_ERROR``, ``_PLACEHOLDER``, optional ``_HELP`` and
choice-option keys; then workflow keys when the workflow is enabled.

Phrases come from ``data/locales.yaml``.  A language missing from the
phrasebook falls back to English phrases under its own file name.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from ..naming import to_localization_key
from ..schema.models import CHOICE_FIELD_TYPES, ModuleConfig
from .context import build_context
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

PHRASEBOOK_PATH = Path(__file__).parent / "data" / "locales.yaml"
FALLBACK_LANGUAGE = "en_IN"
DEFAULT_LANGUAGES: tuple[str, ...] = ("en_IN", "hi_IN")


@functools.lru_cache(maxsize=None)
def load_phrasebook(path: Path = PHRASEBOOK_PATH) -> dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh)


class I18nGenerator:
    """Builds ordered message tables and renders them as JSON bundles."""

    def __init__(self, renderer: TemplateRenderer, phrasebook: dict[str, Any] | None = None) -> None:
        self.renderer = renderer
        self.phrasebook = phrasebook if phrasebook is not None else load_phrasebook()

    # -- Message tables ----------------------------------------------------

    def phrases(self, language: str) -> dict[str, Any]:
        if language in self.phrasebook:
            return self.phrasebook[language]
        logger.warning(
            "No phrases for language %s, using %s phrases", language, FALLBACK_LANGUAGE
        )
        return self.phrasebook[FALLBACK_LANGUAGE]

    def messages(self, config: ModuleConfig, language: str) -> dict[str, str]:
        """Return the ordered key -> translated text table for *language*."""
        phrases = self.phrases(language)
        terms: dict[str, str] = phrases.get("terms") or {}

        def translate(text: str) -> str:
            return terms.get(text, text)

        prefix = config.prefix
        values = {
            "entity": translate(config.entity.name),
            "module_name": translate(config.module.name),
            "module_description": translate(config.module.description),
        }
        messages = {
            f"{prefix}{key}": phrase.format(**values)
            for key, phrase in phrases["base"].items()
        }

        field_phrases = phrases["field"]
        for field in config.fields:
            key = to_localization_key(field.name, prefix)
            label = translate(field.label)
            messages[key] = label
            messages[f"{key}_ERROR"] = field_phrases["ERROR"].format(label=label)
            messages[f"{key}_PLACEHOLDER"] = field_phrases["PLACEHOLDER"].format(label=label)

            help_text = (field.model_extra or {}).get("helpText")
            if isinstance(help_text, str) and help_text:
                messages[f"{key}_HELP"] = translate(help_text)

            if field.type in CHOICE_FIELD_TYPES and field.options:
                for option in field.options:
                    messages[f"{key}_{option.code}"] = translate(option.name)

        if config.workflow_enabled:
            for key, phrase in phrases["workflow"].items():
                messages[f"{prefix}{key}"] = phrase
        return messages

    # -- Rendering ---------------------------------------------------------

    def bundle(self, config: ModuleConfig, language: str) -> str:
        """Render one ``<language>.json`` bundle."""
        context = build_context(
            config, language=language, messages=self.messages(config, language)
        )
        return self.renderer.render("localization/bundle.json.j2", context)

    def generate(
        self, config: ModuleConfig, languages: Iterable[str] = DEFAULT_LANGUAGES
    ) -> dict[str, str]:
        return {f"{language}.json": self.bundle(config, language) for language in languages}

    def loader_script(
        self, config: ModuleConfig, languages: Iterable[str] = DEFAULT_LANGUAGES
    ) -> str:
        """Render ``config.js``, which registers the bundles with the app."""
        languages = list(languages)
        if not languages:
            raise ValueError("At least one language is required")
        return self.renderer.render(
            "localization/config.js.j2", build_context(config, languages=languages)
        )
