"""External actions: change-request link, template editor, state file editor.

These are best effort. A browser or editor that fails to start is reported
as a warning and never turns into a failing exit code.
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.markup import escape

from changecheck.cli.common import (
    DefinitionOpt,
    StateDirOpt,
    build_session,
    console,
    load_or_exit,
    read_definition_or_exit,
    saving_or_exit,
)
from changecheck.cli.errors import (
    err_blank_change_id,
    err_no_definition,
    warn_browser_failed,
    warn_launch_failed,
)


def link_cmd(
    change_id: Annotated[str, typer.Argument(help="Change Request identifier.")],
    open_: Annotated[
        bool,
        typer.Option("--open", help="Open the link in the default browser."),
    ] = False,
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Print the change request URL (built from the configured template)."""
    session = build_session(definition, state_dir)
    read_definition_or_exit(session)

    url = session.change_url(change_id)
    if url is None:
        console.print(err_blank_change_id())
        raise typer.Exit(1)

    console.print(escape(url), soft_wrap=True)
    if open_ and not session.open_change_link(change_id):
        console.print(warn_browser_failed(session.status))


def edit_template_cmd(
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Open the checklist definition in the editor.

    The starter template is created first when the configured definition does
    not exist yet. An explicit --definition path must already exist.
    """
    session = build_session(definition, state_dir)
    if definition is not None and not definition.is_file():
        console.print(err_no_definition(str(definition)))
        raise typer.Exit(1)

    if session.edit_definition():
        console.print(f"[green]✓[/] Opened {escape(str(session.definition_path))}")
    else:
        console.print(warn_launch_failed(session.status))


def open_state_cmd(
    change_id: Annotated[str, typer.Argument(help="Change Request identifier.")],
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Open the saved state file of a change in the editor."""
    session = build_session(definition, state_dir)
    load_or_exit(session, change_id)
    with saving_or_exit():
        opened = session.open_state_file()
    if opened:
        console.print(f"[green]✓[/] Opened {escape(str(session.state_path))}")
    else:
        console.print(warn_launch_failed(session.status))
