"""package-loader command line interface."""

from __future__ import annotations

import fnmatch
import logging
import sys
from functools import partial
from typing import NoReturn

import click
from pydantic import ValidationError
from rich.table import Table

from .console import console
from .console import err_console
from .enumerator import EntryEnumerator
from .errors import InvalidArgumentError
from .errors import PackageNotFoundError
from .loader import PackageLoader
from .locations import ArchiveLocation
from .logging_setup import init_console_logging
from .logging_setup import init_json_logging
from .registry import LoaderRegistry
from .resolvers import PathResolver
from .resolvers import get_system_resolver
from .settings import LoaderSettings
from .settings import load_settings
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)

_root_option = click.option(
    "--root",
    "-r",
    "roots",
    multiple=True,
    help="Directory or zip archive to search (repeatable, in order). Defaults to sys.path.",
)
_recursive_option = click.option(
    "--recursive/--shallow",
    default=None,
    help="Include sub-packages (default from settings: recursive)",
)


def _fail(e: Exception) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
    sys.exit(1)


def _build_loader(settings: LoaderSettings, roots: tuple[str, ...]) -> PackageLoader:
    registry = LoaderRegistry(loader_factory=partial(PackageLoader, enumerator=EntryEnumerator(settings.entry_suffix)))
    search = list(roots) or settings.roots
    if search:
        return registry.get(PathResolver(search, name="cli"))
    return registry.get(get_system_resolver())


def _recursive(settings: LoaderSettings, recursive: bool | None) -> bool:
    return settings.recursive if recursive is None else recursive


@click.group(invoke_without_command=True)
@click.version_option(package_name="package-loader")
@click.option("--log-level", default=None, help="Console log level (default from settings: WARNING)")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also write JSONL logs here")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_file: str | None):
    """Discover and load the modules of a Python package."""
    try:
        settings = load_settings()
    except ValidationError as e:
        _fail(e)

    level = log_level or settings.log_level
    init_console_logging(level)
    init_json_logging(log_file or settings.log_path, level)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("package")
@_root_option
@click.pass_obj
def locate(settings: LoaderSettings, package: str, roots: tuple[str, ...]):
    """Show the directories and archives that provide PACKAGE."""
    loader = _build_loader(settings, roots)
    try:
        locations = loader.locate(package)
    except (InvalidArgumentError, PackageNotFoundError) as e:
        _fail(e)

    table = Table(title=f"Locations of '{escape_markup(package)}'", show_header=True, header_style="bold cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Location", style="green")
    table.add_column("Resolver", style="magenta")
    for location in locations:
        kind = "archive" if isinstance(location, ArchiveLocation) else "directory"
        table.add_row(kind, escape_markup(str(location)), escape_markup(repr(location.resolver)))
    console.print(table)


@cli.command("list")
@click.argument("package")
@_root_option
@_recursive_option
@click.pass_obj
def list_entries(settings: LoaderSettings, package: str, roots: tuple[str, ...], recursive: bool | None):
    """List the modules of PACKAGE without importing them."""
    loader = _build_loader(settings, roots)
    try:
        entries = loader.list_entries(package, recursive=_recursive(settings, recursive))
    except (InvalidArgumentError, PackageNotFoundError) as e:
        _fail(e)

    if not entries:
        console.print(f"[dim]Package '{escape_markup(package)}' has no modules[/dim]")
        return

    table = Table(title=f"Modules in '{escape_markup(package)}'", show_header=True, header_style="bold cyan")
    table.add_column("Module", style="green")
    table.add_column("Location")
    for entry, location in sorted(entries.items()):
        table.add_row(entry, escape_markup(str(location)))
    console.print(table)


@cli.command()
@click.argument("package")
@_root_option
@_recursive_option
@click.option("--no-init", is_flag=True, help="Resolve modules without running their bodies")
@click.option(
    "--init-matching",
    "pattern",
    metavar="GLOB",
    help="Only run the bodies of modules whose name matches GLOB",
)
@click.pass_obj
def load(
    settings: LoaderSettings,
    package: str,
    roots: tuple[str, ...],
    recursive: bool | None,
    no_init: bool,
    pattern: str | None,
):
    """Load every module of PACKAGE."""
    if no_init and pattern:
        raise click.UsageError("--no-init and --init-matching are mutually exclusive")

    if pattern:

        def initialize(module) -> bool:
            return fnmatch.fnmatchcase(module.__name__, pattern)

    else:
        initialize = not no_init

    loader = _build_loader(settings, roots)
    try:
        modules = loader.load_package(package, recursive=_recursive(settings, recursive), initialize=initialize)
    except (InvalidArgumentError, PackageNotFoundError) as e:
        _fail(e)

    if not modules:
        console.print(f"[dim]Package '{escape_markup(package)}' has no loadable modules[/dim]")
        return

    table = Table(title=f"Loaded '{escape_markup(package)}'", show_header=True, header_style="bold green")
    table.add_column("Module", style="green")
    table.add_column("State", style="yellow")
    table.add_column("File")
    for module in sorted(modules, key=lambda m: m.__name__):
        active = any(r.is_active(module.__name__) for r in loader.scope)
        table.add_row(
            module.__name__,
            "initialized" if active else "resolved",
            escape_markup(str(getattr(module, "__file__", "") or "")),
        )
    console.print(table)
    console.print(f"[dim]{len(modules)} module(s)[/dim]")


def main():
    cli()


if __name__ == "__main__":
    main()
