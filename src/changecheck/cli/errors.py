"""changecheck rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from changecheck.cli.errors import err_no_definition
    console.print(err_no_definition("checklist.json"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape


def err_no_definition(path: str) -> str:
    """No checklist definition at *path*."""
    return (
        f"[red]Error:[/] No checklist definition found at '{escape(path)}'.\n"
        "  Run:  changecheck init"
    )


def err_definition_invalid(path: str, detail: str) -> str:
    """Checklist definition exists but cannot be parsed."""
    return (
        f"[red]Error:[/] Checklist definition '{escape(path)}' is invalid.\n"
        f"  {escape(detail)}\n"
        "  Fix the file and retry:  changecheck edit-template"
    )


def err_blank_change_id() -> str:
    """Change Request identifier is empty."""
    return (
        "[red]Error:[/] Enter a Change Request number first.\n"
        "  Example:  changecheck show CHG0001234"
    )


def err_unknown_items(unknown: list[str], available: list[str]) -> str:
    """One or more item ids are not in the checklist definition."""
    available_list = ", ".join(available) if available else "(none)"
    return (
        f"[red]Error:[/] Unknown checklist item(s): {escape(', '.join(unknown))}\n"
        f"  Available items: {escape(available_list)}\n"
        "  Run:  changecheck show <change-id>  to list items."
    )


def err_config(detail: str) -> str:
    """Configuration file contains an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {escape(detail)}\n"
        "  Fix changecheck.yaml or ~/.changecheck/config.yaml and retry."
    )


def err_state_write(detail: str) -> str:
    """Change state could not be saved (directory in the way, permissions, full disk)."""
    return (
        f"[red]Error:[/] Could not save the checklist state.\n"
        f"  {escape(detail)}\n"
        "  Check the state directory (--state-dir or storage.state_dir) and retry."
    )


def warn_state_recovered(path: str) -> str:
    """Warning shown when an unreadable state file was replaced by a blank one."""
    return (
        f"[yellow]⚠[/] State file '{escape(path)}' was unreadable and has been reset.\n"
        "  Previous checks and notes for this change could not be recovered."
    )


def warn_launch_failed(status: str) -> str:
    """Warning shown when an editor could not be started."""
    return (
        f"[yellow]⚠[/] {escape(status)}\n"
        "  Set an editor with:  export CHANGECHECK_EDITOR=<command>"
    )


def warn_browser_failed(status: str) -> str:
    """Warning shown when the change request link could not be opened in a browser."""
    return (
        f"[yellow]⚠[/] {escape(status)}\n"
        "  Copy the URL above into your browser instead."
    )
