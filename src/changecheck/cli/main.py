"""changecheck CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from changecheck.cli.checklist import check_cmd, note_cmd, show_cmd, uncheck_cmd
from changecheck.cli.init import init_cmd
from changecheck.cli.links import edit_template_cmd, link_cmd, open_state_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("changecheck")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"changecheck {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="changecheck",
    help=(
        "changecheck — change-request checklist tracker.\n\n"
        "  changecheck show <id>          Load (or start) the checklist for a change.\n"
        "  changecheck check <id> <item>  Tick an item off; progress is saved immediately."
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
    """changecheck — change-request checklist tracker."""


app.command("init")(init_cmd)
app.command("show")(show_cmd)
app.command("check")(check_cmd)
app.command("uncheck")(uncheck_cmd)
app.command("note")(note_cmd)
app.command("link")(link_cmd)
app.command("edit-template")(edit_template_cmd)
app.command("open-state")(open_state_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed changecheck version."""
    typer.echo(f"changecheck {_installed_version()}")


if __name__ == "__main__":
    app()
