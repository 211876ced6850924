"""CLI interface for Booknav.

Command-line tool for inspecting the book table of contents and computing
sidebar state for a page.
"""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from booknav.config import Config
from booknav.core.loader import TocLoader
from booknav.core.sidebar import IndexAlias, SidebarController
from booknav.core.storage import JsonFileStorage
from booknav.core.tree import EntryKind, NavigationTree

DEFAULT_STATE_FILE = Path(".booknav/session.json")

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover booknav.toml)",
)
_toc_option = click.option(
    "--toc",
    "toc_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="TOC markup or toc.js file (overrides config)",
)
_state_file_option = click.option(
    "--state-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_STATE_FILE,
    show_default=True,
    help="JSON file holding session storage between invocations",
)
_root_prefix_option = click.option(
    "--root-prefix",
    "-r",
    default="",
    help='Relative path from the page to the book root (e.g., "../")',
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Booknav - sidebar navigation for documentation books."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@_config_option
@_toc_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def tree(config_path: Path | None, toc_file: Path | None, output_format: str) -> None:
    """Print the parsed table of contents."""
    nav_tree = _load_tree(config_path, toc_file)

    if output_format == "json":
        click.echo(json.dumps(nav_tree.to_dict(), indent=2, ensure_ascii=False))
        return

    for idx, entry in nav_tree.iter_entries():
        indent = "  " * nav_tree.depth(idx)
        if entry.kind is EntryKind.SPACER:
            click.echo(f"{idx:>3} {indent}---")
        elif entry.kind is EntryKind.PART_TITLE:
            click.echo(f"{idx:>3} {indent}" + click.style(entry.label, bold=True))
        elif entry.href is not None:
            click.echo(f"{idx:>3} {indent}{entry.label} ({entry.href})")
        else:
            click.echo(f"{idx:>3} {indent}{entry.label}")


@cli.command()
@click.argument("page_url")
@_root_prefix_option
@_config_option
@_toc_option
@_state_file_option
@click.option(
    "--index-alias",
    type=click.Choice([alias.value for alias in IndexAlias]),
    default=None,
    help="Landing page policy (overrides config)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "json"]),
    default="html",
    help="Output format",
)
def sidebar(
    page_url: str,
    root_prefix: str,
    config_path: Path | None,
    toc_file: Path | None,
    state_file: Path,
    index_alias: str | None,
    output_format: str,
) -> None:
    """Render the sidebar for one page load of PAGE_URL.

    A scroll offset stored by a previous `click` is consumed.
    """
    config = _load_config(
        config_path,
        toc_file=toc_file,
        index_alias=IndexAlias(index_alias) if index_alias is not None else None,
    )
    nav_tree = _load_tree_from(config)

    controller = SidebarController(
        nav_tree,
        page_url,
        root_prefix,
        JsonFileStorage(state_file),
        config.sidebar.to_options(),
    )
    state = controller.connect()

    if output_format == "json":
        payload = {"page": controller.page_url, **state.to_dict()}
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(controller.render())


@cli.command(name="click")
@click.argument("page_url")
@click.argument("index", type=int)
@click.option(
    "--scroll-top",
    type=click.IntRange(min=0),
    default=0,
    help="Sidebar scroll offset at the time of the click",
)
@_root_prefix_option
@_config_option
@_toc_option
@_state_file_option
def click_entry(
    page_url: str,
    index: int,
    scroll_top: int,
    root_prefix: str,
    config_path: Path | None,
    toc_file: Path | None,
    state_file: Path,
) -> None:
    """Click sidebar entry INDEX on PAGE_URL, storing the scroll offset.

    Prints the navigation target of the entry.
    """
    config = _load_config(config_path, toc_file=toc_file)
    nav_tree = _load_tree_from(config)

    controller = SidebarController(
        nav_tree,
        page_url,
        root_prefix,
        JsonFileStorage(state_file),
        config.sidebar.to_options(),
    )
    controller.connect()
    controller.scroll_to(scroll_top)

    try:
        target = controller.click(index)
    except IndexError:
        _fail(f"No sidebar entry with index {index}")

    if target is None:
        _fail(f"Sidebar entry {index} is not a link")
    click.echo(target)


@cli.command()
@_config_option
@_toc_option
@click.option(
    "--build-dir",
    "-b",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Built book directory to serve (overrides config)",
)
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    toc_file: Path | None,
    build_dir: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
) -> None:
    """Start the sidebar server."""
    from booknav.server import run_server

    config = _load_config(
        config_path,
        toc_file=toc_file,
        build_dir=build_dir,
        host=host,
        port=port,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"TOC file: {config.book.toc_file}")
    if config.book.build_dir.is_dir():
        click.echo(f"Book directory: {config.book.build_dir}")
    else:
        click.echo("Book directory: not found, serving API only")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


def _load_config(
    config_path: Path | None,
    *,
    toc_file: Path | None = None,
    build_dir: Path | None = None,
    host: str | None = None,
    port: int | None = None,
    index_alias: IndexAlias | None = None,
    live_reload_enabled: bool | None = None,
) -> Config:
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
    return config.with_overrides(
        toc_file=toc_file,
        build_dir=build_dir,
        host=host,
        port=port,
        index_alias=index_alias,
        live_reload_enabled=live_reload_enabled,
    )


def _load_tree(config_path: Path | None, toc_file: Path | None) -> NavigationTree:
    return _load_tree_from(_load_config(config_path, toc_file=toc_file))


def _load_tree_from(config: Config) -> NavigationTree:
    try:
        return TocLoader(config.book.toc_file).load()
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)
