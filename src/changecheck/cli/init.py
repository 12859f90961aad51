"""changecheck init — write the starter checklist and global config.

Creates:
  <storage.definition>        — two-section starter template (JSON or YAML by suffix)
  ~/.changecheck/config.yaml  — global config (created once, mode 0o600)

An existing definition is never overwritten unless --force is given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from changecheck.checklist.definition import DEFAULT_DEFINITION, DefinitionStore
from changecheck.cli.common import DefinitionOpt, StateDirOpt, console
from changecheck.cli.errors import err_config
from changecheck.config import ConfigError, ensure_global_config, load_config


def init_cmd(
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing checklist definition."),
    ] = False,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", hidden=True, help="Override global config path (for testing)."),
    ] = None,
) -> None:
    """Create the starter checklist definition and global config."""
    cfg_path = ensure_global_config(global_config)
    console.print(f"  [green]✓[/] {escape(str(cfg_path))} (global config)")

    try:
        cfg = load_config(global_config_path=global_config)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    definition_path = definition if definition is not None else cfg.storage.definition
    store = DefinitionStore(definition_path)

    if definition_path.exists() and not force:
        console.print(
            f"  [yellow]⚠[/]  {escape(str(definition_path))} already exists — left unchanged.\n"
            "  Use --force to replace it with the starter template."
        )
    else:
        store.write(DEFAULT_DEFINITION)
        console.print(f"  [green]✓[/] {escape(str(definition_path))} (checklist definition)")

    states = state_dir if state_dir is not None else cfg.storage.state_dir
    states.mkdir(parents=True, exist_ok=True)
    console.print(f"  [green]✓[/] {escape(str(states))} (state directory)")

    console.print("\nNext steps:")
    console.print("  1. changecheck edit-template            (tailor sections and items)")
    console.print("  2. changecheck show <change-id>         (start a change checklist)")
    console.print("  3. changecheck check <change-id> <item> (tick items off)")
