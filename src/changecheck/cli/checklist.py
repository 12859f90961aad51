"""Checklist commands: show, check, uncheck, note.

Each command loads the change (creating and saving a blank state the first
time an identifier is seen), applies its edit through the view model, which
saves the state after every change, and prints the result.

Usage:
  changecheck show CHG0001234
  changecheck check CHG0001234 pre-001 pre-002
  changecheck uncheck CHG0001234 pre-002
  changecheck note CHG0001234 pre-001 "Approved by CAB on Monday"
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from changecheck.checklist.projection import ChecklistView, ItemView, SectionView
from changecheck.checklist.session import ChangeSession
from changecheck.cli.common import (
    DefinitionOpt,
    StateDirOpt,
    build_session,
    console,
    load_or_exit,
    saving_or_exit,
)
from changecheck.cli.errors import err_unknown_items

ChangeIdArg = Annotated[str, typer.Argument(help="Change Request identifier, e.g. CHG0001234.")]
ItemIdsArg = Annotated[list[str], typer.Argument(help="One or more checklist item ids.")]


def show_cmd(
    change_id: ChangeIdArg,
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Show the checklist for a change, with per-section progress."""
    session = build_session(definition, state_dir)
    view = load_or_exit(session, change_id)
    _render(session, view)
    console.print(f"[dim]{escape(session.status)}[/]")


def check_cmd(
    change_id: ChangeIdArg,
    item_ids: ItemIdsArg,
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Mark checklist items as done (stamps the current UTC time)."""
    _set_checked(change_id, item_ids, True, definition, state_dir)


def uncheck_cmd(
    change_id: ChangeIdArg,
    item_ids: ItemIdsArg,
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Clear checklist items (removes their check time)."""
    _set_checked(change_id, item_ids, False, definition, state_dir)


def note_cmd(
    change_id: ChangeIdArg,
    item_id: Annotated[str, typer.Argument(help="Checklist item id.")],
    text: Annotated[str, typer.Argument(help="Notes text; replaces existing notes. Use \"\" to clear.")],
    definition: DefinitionOpt = None,
    state_dir: StateDirOpt = None,
) -> None:
    """Replace the notes of a checklist item."""
    session = build_session(definition, state_dir)
    view = load_or_exit(session, change_id)
    (item,) = _resolve_items(view, [item_id])

    with saving_or_exit():
        item.notes = text
    console.print(f"[green]✓[/] Notes saved for [bold]{escape(item.id)}[/]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _set_checked(
    change_id: str,
    item_ids: list[str],
    checked: bool,
    definition: Path | None,
    state_dir: Path | None,
) -> None:
    session = build_session(definition, state_dir)
    view = load_or_exit(session, change_id)
    items = _resolve_items(view, item_ids)

    touched: list[SectionView] = []
    for item in items:
        with saving_or_exit():
            item.is_checked = checked
        console.print(f"  {_checkbox(item)} [bold]{escape(item.id)}[/]  {escape(item.checked_label)}")
        section = _section_of(view, item)
        if section is not None and section not in touched:
            touched.append(section)

    for section in touched:
        console.print(f"  {escape(section.name)}: {section.progress}")


def _resolve_items(view: ChecklistView, item_ids: list[str]) -> list[ItemView]:
    """Map ids to item views, exiting with an error if any id is unknown."""
    found = [view.item(i) for i in item_ids]
    unknown = [i for i, v in zip(item_ids, found) if v is None]
    if unknown:
        available = [v.id for s in view.sections for v in s.items]
        console.print(err_unknown_items(unknown, available))
        raise typer.Exit(1)
    return [v for v in found if v is not None]


def _section_of(view: ChecklistView, item: ItemView) -> SectionView | None:
    for section in view.sections:
        if item in section.items:
            return section
    return None


def _checkbox(item: ItemView) -> str:
    return "[green]✓[/]" if item.is_checked else "[dim]·[/]"


def _render(session: ChangeSession, view: ChecklistView) -> None:
    checked, total = view.overall_progress
    saved = session.state.saved_utc if session.state is not None else None
    console.print(
        Panel(
            f"Change:  [bold]{escape(session.change_id or '')}[/]\n"
            f"Saved:   [dim]{escape(saved or '-')}[/]\n"
            f"Overall: [bold]{checked}/{total}[/] completed",
            title=f"[bold]{escape(view.title or 'Checklist')}[/]",
            expand=False,
        )
    )

    for section in view.sections:
        table = Table(title=escape(section.name), title_justify="left", show_header=True, header_style="bold")
        table.add_column("", width=1, no_wrap=True)
        table.add_column("Id", style="bold", no_wrap=True)
        table.add_column("Item")
        table.add_column("Status", style="dim")
        table.add_column("Notes")
        table.add_column("Link", style="dim")

        for item in section.items:
            link = f"{escape(item.link_text)}: {escape(item.link_url)}" if item.has_link else ""
            table.add_row(
                _checkbox(item),
                escape(item.id),
                escape(item.text),
                escape(item.checked_label),
                escape(item.notes),
                link,
            )

        console.print(table)
        console.print(f"  {section.progress}\n")
