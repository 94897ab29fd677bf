"""Module assembly: runs every generator in order and writes the output tree.

Stages run strictly one after another::

    directories -> package-metadata -> build-config -> entry-point
    -> screen-configs -> screen-components -> utilities -> services
    -> localization (when i18n.generateKeys) -> tests -> docs

No stage reads anything a previous stage wrote; they share only the
read-only :class:`ModuleConfig`.  The first failure stops the run and is
re-raised.  Files already written stay on disk.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..errors import DigitGenError, GenerationError, ModuleExistsError, WriteFailure
from ..schema.models import ModuleConfig
from ..schema.validator import advisory_warnings
from .config_gen import ScreenConfigGenerator
from .i18n_gen import DEFAULT_LANGUAGES, I18nGenerator
from .module_gen import ModuleFilesGenerator
from .screen_gen import ScreenComponentGenerator
from .service_gen import ServiceGenerator
from .templates import TemplateRenderer, write_text
from .test_gen import TestSuiteGenerator
from .utils_gen import UtilsGenerator

logger = logging.getLogger(__name__)


STAGES: tuple[str, ...] = (
    "directories",
    "package-metadata",
    "build-config",
    "entry-point",
    "screen-configs",
    "screen-components",
    "utilities",
    "services",
    "localization",
    "tests",
    "docs",
)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class Manifest(BaseModel):
    """Files written (relative to the module root) and advisory warnings."""

    root: str = ""
    files: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    dry_run: bool = False


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class ModuleAssembler:
    """Generates a complete module directory from one :class:`ModuleConfig`.

    All generators share one :class:`TemplateRenderer`, so every template
    sees the same helper registry.
    """

    def __init__(
        self,
        config: ModuleConfig,
        renderer: TemplateRenderer | None = None,
        api_spec: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.config = config
        self.api_spec = api_spec
        self.renderer = renderer or TemplateRenderer()
        self.module_gen = ModuleFilesGenerator(self.renderer)
        self.config_gen = ScreenConfigGenerator(self.renderer)
        self.screen_gen = ScreenComponentGenerator(self.renderer)
        self.utils_gen = UtilsGenerator(self.renderer)
        self.service_gen = ServiceGenerator(self.renderer)
        self.i18n_gen = I18nGenerator(self.renderer)
        self.test_gen = TestSuiteGenerator(self.renderer)

    # -- Public API --------------------------------------------------------

    async def assemble(
        self,
        output_dir: str | Path,
        *,
        force: bool = False,
        dry_run: bool = False,
        languages: Iterable[str] = DEFAULT_LANGUAGES,
    ) -> Manifest:
        """Render every stage into ``<output_dir>/<module.code>``.

        Args:
            output_dir: Parent directory of the module directory.
            force: Write into an existing module directory.
            dry_run: Render everything and build the manifest without
                touching the filesystem.
            languages: Localization bundles to produce when key generation
                is enabled.

        Raises:
            ModuleExistsError: the module directory exists and *force* is off.
            TemplateError: a template failed to render.
            WriteFailure: a file could not be written.
            GenerationError: any other failure, tagged with its stage.
        """
        root = Path(output_dir) / self.config.module.code
        if not dry_run and not force and await asyncio.to_thread(root.exists):
            raise ModuleExistsError(root)

        manifest = Manifest(
            root=root.as_posix(),
            warnings=advisory_warnings(self.config, self.api_spec),
            dry_run=dry_run,
        )
        for warning in manifest.warnings:
            logger.warning("%s", warning)

        languages = list(languages)
        stages = self._stage_table(languages)
        for stage in STAGES:
            logger.debug("Stage %s", stage)
            try:
                if stage == "directories":
                    if not dry_run:
                        await self._create_directories(root)
                    continue
                for relative, content in stages[stage]().items():
                    if not dry_run:
                        await write_text(root / relative, content, display_path=relative)
                    manifest.files.append(relative)
            except DigitGenError:
                logger.error("Stage %s failed", stage)
                raise
            except Exception as exc:
                logger.error("Stage %s failed: %s", stage, exc)
                raise GenerationError(stage, str(exc)) from exc

        logger.info(
            "%s %d files for %s in %s",
            "Planned" if dry_run else "Generated",
            len(manifest.files),
            self.config.module.code,
            root,
        )
        return manifest

    # -- Stages ------------------------------------------------------------

    def _stage_table(self, languages: list[str]) -> dict[str, Callable[[], dict[str, str]]]:
        config = self.config
        return {
            "package-metadata": lambda: {"package.json": self.module_gen.package_json(config)},
            "build-config": lambda: {"webpack.config.js": self.module_gen.webpack_config(config)},
            "entry-point": lambda: {"src/Module.js": self.module_gen.entry_point(config)},
            "screen-configs": self._screen_configs,
            "screen-components": self._screen_components,
            "utilities": lambda: {
                f"src/utils/{name}": content
                for name, content in self.utils_gen.generate(config).items()
            },
            "services": lambda: self.service_gen.generate(config),
            "localization": lambda: self._localization(languages),
            "tests": lambda: self.test_gen.generate(config),
            "docs": lambda: {"README.md": self.module_gen.readme(config)},
        }

    def _screen_configs(self) -> dict[str, str]:
        files: dict[str, str] = {}
        for kind in self.config.screens.enabled_kinds():
            content = self.config_gen.generate(self.config, kind)
            if content is None:
                continue
            files[f"src/configs/{self.config_gen.filename(self.config, kind)}"] = content
        return files

    def _screen_components(self) -> dict[str, str]:
        files: dict[str, str] = {}
        for kind in self.config.screens.enabled_kinds():
            content = self.screen_gen.generate(self.config, kind)
            if content is None:
                continue
            files[f"src/pages/employee/{self.screen_gen.filename(self.config, kind)}"] = content
        return files

    def _localization(self, languages: list[str]) -> dict[str, str]:
        if not self.config.i18n.generate_keys:
            logger.debug("Localization key generation disabled, skipping bundles")
            return {}
        return {
            f"localization/{name}": content
            for name, content in self.i18n_gen.generate(self.config, languages).items()
        }

    # -- Directory structure -----------------------------------------------

    def directories(self) -> list[str]:
        """Directories created before any file is written."""
        dirs = [
            "src/configs",
            "src/pages/employee",
            "src/utils",
            "src/hooks",
            "src/services",
            "__tests__/components",
            "__tests__/utils",
            "__tests__/mocks",
        ]
        if self.config.i18n.generate_keys:
            dirs.append("localization")
        return dirs

    async def _create_directories(self, root: Path) -> None:
        def _mkdir(path: Path) -> None:
            path.mkdir(parents=True, exist_ok=True)

        for directory in self.directories():
            try:
                await asyncio.to_thread(_mkdir, root / directory)
            except OSError as exc:
                raise WriteFailure(directory, exc) from exc
