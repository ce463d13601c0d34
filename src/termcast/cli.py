"""Command line helpers for publishing recordings outside of MkDocs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from jinja2 import Template
from markdown import Markdown
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
import typer

from .catalog import CatalogAdapter, EntryKind, InMemoryCatalog
from .exceptions import TermcastError
from .identifiers import derive_token
from .markdown import AsciinemaExtension
from .publisher import recording_path
from .runtime import SCRIPTS_PARTIAL, STYLES_PARTIAL, RuntimeRegistrar
from .version import get_version


console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Embed asciinema recordings in generated documentation.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
{{ styles }}</head>
<body>
{{ body }}
{{ scripts }}</body>
</html>
"""


def _configure_logging(verbose: int) -> None:
    if verbose <= 0:
        return
    level = logging.INFO if verbose == 1 else logging.DEBUG
    package_logger = logging.getLogger("termcast")
    package_logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=err_console, show_path=False))


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[bold red]error:[/] {escape(message)}")
    return typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"termcast {get_version()}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the termcast version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log verbosity."),
    ] = 0,
) -> None:
    """Embed asciinema recordings in generated documentation."""
    _configure_logging(verbose)


@app.command()
def digest(
    recordings: Annotated[
        list[Path],
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Recording files."),
    ],
) -> None:
    """Print the content token and published path of each recording."""
    for recording in recordings:
        token = derive_token(recording.read_bytes())
        typer.echo(f"{token}  {recording_path(token)}  {recording}")


@app.command()
def render(
    source: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown document."),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", file_okay=False, help="Output directory."),
    ] = Path("site"),
    rows: Annotated[int | None, typer.Option(min=1, help="Default terminal rows.")] = None,
    cols: Annotated[int | None, typer.Option(min=1, help="Default terminal columns.")] = None,
    auto_play: Annotated[
        bool | None,
        typer.Option("--auto-play/--no-auto-play", help="Start playback automatically."),
    ] = None,
    runtime: Annotated[
        bool,
        typer.Option("--runtime/--no-runtime", help="Publish the player runtime files."),
    ] = True,
) -> None:
    """Render a Markdown document and publish its recordings."""
    catalog = InMemoryCatalog()
    adapter = CatalogAdapter(catalog)
    options = {
        key: value
        for key, value in (("rows", rows), ("cols", cols), ("autoPlay", auto_play))
        if value is not None
    }

    try:
        if runtime:
            RuntimeRegistrar(adapter).ensure_runtime_assets()
        extension = AsciinemaExtension(catalog=adapter, **options)
        body = Markdown(extensions=["extra", extension]).convert(
            source.read_text(encoding="utf-8")
        )
    except TermcastError as exc:
        raise _fail(str(exc)) from exc

    def partial(path: str) -> str:
        entry = catalog.find(path, EntryKind.PARTIAL)
        if entry is None:
            return ""
        return Template(entry.read().decode("utf-8")).render(base_url=".")

    page = Template(PAGE_TEMPLATE).render(
        title=source.stem,
        styles=partial(STYLES_PARTIAL.path),
        scripts=partial(SCRIPTS_PARTIAL.path),
        body=body,
    )

    output.mkdir(parents=True, exist_ok=True)
    target = output / f"{source.stem}.html"
    target.write_text(page, encoding="utf-8")
    written = catalog.write(output, EntryKind.ASSET)
    console.print(f"Wrote {target} and {len(written)} asset(s) to {output}")


__all__ = ["app"]
