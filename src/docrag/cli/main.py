"""docrag CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docrag.cli.ask import ask_cmd
from docrag.cli.conversations import attach_cmd, detach_cmd
from docrag.cli.ingest import add_cmd, process_cmd
from docrag.cli.init import init_cmd
from docrag.cli.remove import remove_cmd
from docrag.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docrag")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docrag {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docrag",
    help=(
        "docrag — ground conversations in your documents.\n\n"
        "  docrag add FILE...        register and index documents\n"
        "  docrag attach DOC CONV    scope a document to a conversation\n"
        "  docrag ask CONV QUERY     retrieve context for a message"
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """docrag — ground conversations in your documents."""


app.command("init")(init_cmd)
app.command("add")(add_cmd)
app.command("process")(process_cmd)
app.command("attach")(attach_cmd)
app.command("detach")(detach_cmd)
app.command("ask")(ask_cmd)
app.command("status")(status_cmd)
app.command("remove")(remove_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed docrag version."""
    typer.echo(f"docrag {_installed_version()}")


if __name__ == "__main__":
    app()
