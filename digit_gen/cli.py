"""Command-line entry point for the DIGIT module generator.

Usage::

    digit-gen create --config vehicle.json --output ./generated
    digit-gen create --template hrms --entity Employee
    digit-gen validate --config vehicle.json --api-spec openapi.yaml
    digit-gen templates --detailed
    digit-gen screen search --entity Project
    digit-gen utils --config vehicle.json
    digit-gen i18n --config vehicle.json --languages en_IN,hi_IN
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Optional

from rich.markup import escape
from rich.table import Table

from digit_gen import __version__
from digit_gen.config import GeneratorSettings, parse_csv
from digit_gen.errors import ConfigValidationError, DigitGenError
from digit_gen.scaffolder import (
    I18nGenerator,
    ModuleAssembler,
    ScreenComponentGenerator,
    ScreenConfigGenerator,
    TemplateRenderer,
    UtilsGenerator,
)
from digit_gen.scaffolder.templates import write_text
from digit_gen.schema import (
    ModuleConfig,
    ScreenKind,
    advisory_warnings,
    suggest_fixes,
    validate_api_spec_compatibility,
    validate_module_config,
)
from digit_gen.sourcing import (
    ApiSpecImporter,
    TemplateStore,
    apply_overrides,
    compose_config,
    default_config,
    load_config_file,
    minimal_config,
)
from digit_gen.utils import (
    configure_logging,
    console,
    create_progress,
    print_bullets,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

logger = logging.getLogger(__name__)

SCREEN_KINDS = [kind.value for kind in ScreenKind]

Handler = Callable[[argparse.Namespace, GeneratorSettings], Awaitable[int]]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _validated(raw: dict[str, Any]) -> Optional[ModuleConfig]:
    """Validate *raw*, printing every error and suggestion on failure."""
    result = validate_module_config(raw)
    if result.valid:
        return ModuleConfig.from_document(result.document)
    print_error("Configuration validation failed:")
    print_bullets(result.errors)
    suggestions = suggest_fixes(result.errors, raw)
    if suggestions:
        console.print("\n[bold blue]Suggestions:[/bold blue]")
        for hint, detail in suggestions:
            console.print(f"  [cyan]•[/cyan] {hint}", highlight=False)
            if detail:
                console.print(f"    [dim]{detail}[/dim]", highlight=False)
    return None


def _config_or_entity(
    args: argparse.Namespace, screen_kind: Optional[str] = None
) -> dict[str, Any]:
    """Raw configuration from ``--config``, or a minimal one for ``--entity``."""
    if args.config:
        raw = load_config_file(args.config)
        if args.entity:
            raw = apply_overrides(raw, entity=args.entity)
        return raw
    if not args.entity:
        raise DigitGenError("Entity name is required. Use --entity or provide --config.")
    return minimal_config(args.entity, screen_kind)


def _output_dir(args: argparse.Namespace, settings: GeneratorSettings) -> Path:
    return Path(args.output) if args.output else settings.output_dir


async def _write_all(root: Path, files: dict[str, str]) -> list[Path]:
    written = []
    for relative, content in files.items():
        await write_text(root / relative, content, display_path=relative)
        written.append(root / relative)
    return written


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def _compose_for_create(
    args: argparse.Namespace, settings: GeneratorSettings
) -> dict[str, Any]:
    direct = load_config_file(args.config) if args.config else None
    template = TemplateStore(settings.templates_dir).get(args.template) if args.template else None

    entity = args.entity
    if entity is None:
        for layer in (direct, template):
            if layer and isinstance(layer.get("entity"), dict) and layer["entity"].get("name"):
                entity = layer["entity"]["name"]
                break

    fragment = None
    if args.api_spec:
        if not entity:
            raise DigitGenError("--entity is required when importing from --api-spec")
        importer = ApiSpecImporter(timeout=settings.spec_timeout)
        fragment = await importer.import_entity(args.api_spec, entity)

    if direct is None and template is None and fragment is None and not entity:
        raise DigitGenError(
            "Nothing to generate from. Use --config, --template, --api-spec or --entity."
        )
    # A bare entity fills in everything the other layers leave out.
    defaults = (
        compose_config(minimal_config(entity), defaults=default_config())
        if entity and direct is None and template is None
        else default_config()
    )
    raw = compose_config(direct, template, fragment, defaults)
    return apply_overrides(
        raw,
        name=args.name,
        code=args.code,
        entity=args.entity,
        screens=parse_csv(args.screens) if args.screens else None,
    )


async def cmd_create(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    raw = await _compose_for_create(args, settings)
    config = _validated(raw)
    if config is None:
        return 1

    assembler = ModuleAssembler(config)
    with create_progress() as progress:
        task = progress.add_task(f"Generating {config.module.name}...", total=None)
        manifest = await assembler.assemble(
            _output_dir(args, settings),
            force=args.force or settings.force,
            dry_run=args.dry_run or settings.dry_run,
            languages=settings.languages,
        )
        progress.update(task, completed=1)

    print_summary_table(
        {
            "Module": config.module.name,
            "Code": config.module.code,
            "Entity": config.entity.name,
            "Screens": ", ".join(kind.value for kind in config.screens.enabled_kinds()),
            "Files": len(manifest.files),
            "Location": manifest.root,
        },
        title="Dry run" if manifest.dry_run else "Generated module",
    )
    print_bullets(manifest.files, style="green")
    if manifest.warnings:
        print_warning("Warnings:")
        print_bullets(manifest.warnings, style="yellow")
    if manifest.dry_run:
        print_success("Dry run complete, no files were written.")
    else:
        print_success(f"Module {config.module.code} generated successfully!")
    return 0


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


async def cmd_validate(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    raw = load_config_file(args.config)
    config = _validated(raw)
    if config is None:
        return 1

    api_document = None
    if args.api_spec:
        api_document = await ApiSpecImporter(timeout=settings.spec_timeout).load(args.api_spec)

    print_summary_table(
        {
            "Module": f"{config.module.name} ({config.module.code})",
            "Entity": config.entity.name,
            "Fields": len(config.fields),
            "Screens": ", ".join(kind.value for kind in config.screens.enabled_kinds()),
            "Workflow": config.workflow.business_service if config.workflow_enabled else "disabled",
            "Auth required": config.auth.required,
        },
        title="Configuration summary",
    )
    warnings = advisory_warnings(config)
    if warnings:
        print_warning("Warnings:")
        print_bullets(warnings, style="yellow")
    if api_document is not None:
        comparison = validate_api_spec_compatibility(config, api_document)
        if comparison:
            print_warning("API specification differences:")
            print_bullets(comparison, style="yellow")
        else:
            print_success("All fields match the API specification.")
    print_success("Configuration is valid!")
    return 0


# ---------------------------------------------------------------------------
# templates
# ---------------------------------------------------------------------------


async def cmd_templates(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    store = TemplateStore(settings.templates_dir)

    if args.create:
        if not args.config:
            raise DigitGenError("--config is required with --create")
        raw = load_config_file(args.config)
        if _validated(raw) is None:
            return 1
        location = store.create(args.create, raw, description=args.description)
        print_success(f"Template {args.create} saved to {location}")
        return 0

    if args.check:
        result = store.validate(args.check)
        if not result.valid:
            print_error(f"Template {args.check} is invalid:")
            print_bullets(result.errors)
            return 1
        print_success(f"Template {args.check} is valid!")
        return 0

    templates = store.list(detailed=args.detailed)
    if not templates:
        print_warning("No templates found.")
        return 0
    table = Table(title="Available templates", show_header=True, header_style="bold cyan")
    table.add_column("Name", no_wrap=True)
    table.add_column("Description")
    if args.detailed:
        for column in ("Category", "Version", "Author", "Source"):
            table.add_column(column, style="dim")
    for info in templates:
        row = [info.name, info.description]
        if args.detailed:
            row += [info.category or "-", info.version or "-", info.author or "-", info.source]
        table.add_row(*row)
    console.print(table)
    return 0


# ---------------------------------------------------------------------------
# screen / utils / i18n
# ---------------------------------------------------------------------------


async def cmd_screen(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    raw = _config_or_entity(args, args.kind)
    config = _validated(raw)
    if config is None:
        return 1

    renderer = TemplateRenderer()
    screen_gen = ScreenComponentGenerator(renderer)
    config_gen = ScreenConfigGenerator(renderer)
    files: dict[str, str] = {}
    component = screen_gen.generate(config, args.kind)
    if component is not None:
        files[f"pages/employee/{screen_gen.filename(config, args.kind)}"] = component
    screen_config = config_gen.generate(config, args.kind)
    if screen_config is not None:
        files[f"configs/{config_gen.filename(config, args.kind)}"] = screen_config

    for path in await _write_all(_output_dir(args, settings), files):
        print_success(f"Generated {path}")
    return 0


async def cmd_utils(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    config = _validated(_config_or_entity(args))
    if config is None:
        return 1

    files = UtilsGenerator(TemplateRenderer()).generate(config)
    for path in await _write_all(_output_dir(args, settings), files):
        print_success(f"Generated {path}")
    return 0


async def cmd_i18n(args: argparse.Namespace, settings: GeneratorSettings) -> int:
    config = _validated(load_config_file(args.config))
    if config is None:
        return 1

    languages = parse_csv(args.languages) if args.languages else settings.languages
    generator = I18nGenerator(TemplateRenderer())
    files = generator.generate(config, languages)
    files["config.js"] = generator.loader_script(config, languages)
    for path in await _write_all(_output_dir(args, settings), files):
        print_success(f"Generated {path}")
    return 0


COMMANDS: dict[str, Handler] = {
    "create": cmd_create,
    "validate": cmd_validate,
    "templates": cmd_templates,
    "screen": cmd_screen,
    "utils": cmd_utils,
    "i18n": cmd_i18n,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="digit-gen",
        description="DIGIT module generator -- scaffold frontend modules from configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  digit-gen create --config vehicle.json\n"
            "  digit-gen create --template hrms --entity Employee -o ./generated\n"
            "  digit-gen screen search --entity Project\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging and full tracebacks (also enabled by DEBUG=1)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Generate a complete module")
    create.add_argument("--config", "-c", help="Module configuration file (JSON or YAML)")
    create.add_argument("--template", "-t", help="Stored template to start from")
    create.add_argument("--api-spec", help="OpenAPI/Swagger document path or URL")
    create.add_argument("--entity", "-e", help="Entity name (PascalCase)")
    create.add_argument("--name", help="Override the module name")
    create.add_argument("--code", help="Override the module code")
    create.add_argument("--screens", help="Comma-separated screens to enable")
    create.add_argument("--output", "-o", help="Output directory (default: ./generated)")
    create.add_argument("--force", "-f", action="store_true", help="Overwrite an existing module")
    create.add_argument(
        "--dry-run", action="store_true", help="Show what would be generated without writing"
    )

    validate = sub.add_parser("validate", help="Validate a module configuration")
    validate.add_argument("--config", "-c", required=True, help="Module configuration file")
    validate.add_argument("--api-spec", help="Compare fields against this API document")

    templates = sub.add_parser("templates", help="List, check or save module templates")
    templates.add_argument("--detailed", "-d", action="store_true", help="Show template metadata")
    templates.add_argument("--check", metavar="NAME", help="Validate one template")
    templates.add_argument("--create", metavar="NAME", help="Save --config as a user template")
    templates.add_argument("--config", "-c", help="Configuration to save with --create")
    templates.add_argument("--description", help="Description for --create")

    screen = sub.add_parser("screen", help="Generate one screen component and its config")
    screen.add_argument("kind", choices=SCREEN_KINDS, help="Screen type")
    screen.add_argument("--config", "-c", help="Module configuration file")
    screen.add_argument("--entity", "-e", help="Entity name when no config is given")
    screen.add_argument("--output", "-o", help="Output directory (default: ./generated)")

    utils = sub.add_parser("utils", help="Generate the utility functions")
    utils.add_argument("--config", "-c", help="Module configuration file")
    utils.add_argument("--entity", "-e", help="Entity name when no config is given")
    utils.add_argument("--output", "-o", help="Output directory (default: ./generated)")

    i18n = sub.add_parser("i18n", help="Generate localization bundles")
    i18n.add_argument("--config", "-c", required=True, help="Module configuration file")
    i18n.add_argument("--languages", "-l", help="Comma-separated languages (default: en_IN,hi_IN)")
    i18n.add_argument("--output", "-o", help="Output directory (default: ./generated)")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``digit-gen``."""
    args = build_parser().parse_args(argv)

    try:
        settings = GeneratorSettings.from_env()
    except ValueError as exc:
        print_error(f"Invalid environment settings: {exc}")
        sys.exit(1)
    if args.debug:
        settings = settings.model_copy(update={"debug": True})
    configure_logging(settings.log_level, debug=settings.debug)

    try:
        code = asyncio.run(COMMANDS[args.command](args, settings))
    except DigitGenError as exc:
        print_error(str(exc))
        if isinstance(exc, ConfigValidationError):
            print_bullets(exc.errors)
        if settings.debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        sys.exit(1)
    except Exception as exc:
        logger.debug("Unhandled error in %s", args.command, exc_info=True)
        print_error(f"Unexpected error: {exc}")
        if settings.debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
