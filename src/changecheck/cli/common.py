"""Helpers shared by the changecheck CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from changecheck.checklist.definition import DefinitionStore
from changecheck.checklist.errors import DefinitionNotFoundError, DefinitionParseError, StateWriteError
from changecheck.checklist.projection import ChecklistView
from changecheck.checklist.session import ChangeSession
from changecheck.checklist.state import StateStore
from changecheck.cli.errors import (
    err_blank_change_id,
    err_config,
    err_definition_invalid,
    err_no_definition,
    err_state_write,
    warn_state_recovered,
)
from changecheck.config import ConfigError, load_config
from changecheck.launcher import SystemLauncher

console = Console()

DefinitionOpt = Annotated[
    Path | None,
    typer.Option("--definition", help="Checklist definition file (overrides config)."),
]
StateDirOpt = Annotated[
    Path | None,
    typer.Option("--state-dir", help="Directory for per-change state files (overrides config)."),
]


def build_session(definition: Path | None, state_dir: Path | None) -> ChangeSession:
    """Create a session from config, with CLI overrides applied.

    The starter template is only written when the definition lives at its
    configured location (no ``--definition`` given).
    """
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    definitions = DefinitionStore(
        definition if definition is not None else cfg.storage.definition,
        change_url_template=cfg.links.change_url_template,
    )
    states = StateStore(state_dir if state_dir is not None else cfg.storage.state_dir)
    return ChangeSession(
        definitions,
        states,
        launcher=SystemLauncher(cfg.editor.command),
        create_default=definition is None,
    )


def read_definition_or_exit(session: ChangeSession) -> None:
    """Re-read the definition; fatal errors end the command with exit 1."""
    try:
        session.read_definition()
    except DefinitionNotFoundError:
        console.print(err_no_definition(str(session.definition_path)))
        raise typer.Exit(1)
    except DefinitionParseError as exc:
        console.print(err_definition_invalid(str(session.definition_path), str(exc)))
        raise typer.Exit(1)


def load_or_exit(session: ChangeSession, change_id: str) -> ChecklistView:
    """Load *change_id* into *session* and return its view, or end the command with exit 1."""
    try:
        loaded = session.load(change_id)
    except DefinitionNotFoundError:
        console.print(err_no_definition(str(session.definition_path)))
        raise typer.Exit(1)
    except DefinitionParseError as exc:
        console.print(err_definition_invalid(str(session.definition_path), str(exc)))
        raise typer.Exit(1)
    except StateWriteError as exc:
        console.print(err_state_write(str(exc)))
        raise typer.Exit(1)

    if not loaded or session.view is None:
        console.print(err_blank_change_id())
        raise typer.Exit(1)

    if session.recovered:
        console.print(warn_state_recovered(str(session.state_path)))
    return session.view


@contextmanager
def saving_or_exit() -> Iterator[None]:
    """Turn a failed state save during an edit into an error and exit 1."""
    try:
        yield
    except StateWriteError as exc:
        console.print(err_state_write(str(exc)))
        raise typer.Exit(1)
