"""Module scaffolder: renders a complete frontend module from a configuration.

Quick usage::

    from digit_gen.schema import load_module_config
    from digit_gen.scaffolder import ModuleAssembler

    config = load_module_config(raw)
    manifest = await ModuleAssembler(config).assemble("./generated")
"""

from digit_gen.scaffolder.assembler import Manifest, ModuleAssembler
from digit_gen.scaffolder.config_gen import ScreenConfigGenerator
from digit_gen.scaffolder.i18n_gen import I18nGenerator
from digit_gen.scaffolder.module_gen import ModuleFilesGenerator
from digit_gen.scaffolder.screen_gen import ScreenComponentGenerator
from digit_gen.scaffolder.service_gen import ServiceGenerator
from digit_gen.scaffolder.templates import HelperRegistry, TemplateRenderer
from digit_gen.scaffolder.test_gen import TestSuiteGenerator
from digit_gen.scaffolder.utils_gen import UtilsGenerator

__all__ = [
    "HelperRegistry",
    "I18nGenerator",
    "Manifest",
    "ModuleAssembler",
    "ModuleFilesGenerator",
    "ScreenComponentGenerator",
    "ScreenConfigGenerator",
    "ServiceGenerator",
    "TemplateRenderer",
    "TestSuiteGenerator",
    "UtilsGenerator",
]
