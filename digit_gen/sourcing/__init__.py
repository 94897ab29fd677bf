"""Where module configurations come from.

A configuration is composed from up to four layers, highest precedence
first: a configuration file, a stored template, an API-spec import and the
built-in defaults.
"""

from digit_gen.sourcing.apispec import ApiSpecImporter, default_fragment, fragment_from_spec
from digit_gen.sourcing.loader import (
    apply_overrides,
    compose_config,
    default_config,
    load_config_file,
    minimal_config,
    override_screens,
)
from digit_gen.sourcing.template_store import TemplateInfo, TemplateStore

__all__ = [
    "ApiSpecImporter",
    "TemplateInfo",
    "TemplateStore",
    "apply_overrides",
    "compose_config",
    "default_config",
    "default_fragment",
    "fragment_from_spec",
    "load_config_file",
    "minimal_config",
    "override_screens",
]
