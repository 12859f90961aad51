"""Best-effort launching of change-request links and files in an editor.

Nothing in the checklist core depends on a launch succeeding. ``ChangeSession``
catches ``LaunchError`` (and any other failure) and only reports it.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import Protocol

import typer

_URL_PREFIXES = ("http://", "https://")


class LaunchError(RuntimeError):
    """Raised when an external program could not be started."""


class Launcher(Protocol):
    def open(self, target: str) -> None: ...


class SystemLauncher:
    """Open URLs in the browser and files in the configured editor.

    Args:
        editor: Editor command line (e.g. ``"code --wait"``). When unset, files
            are handed to the platform's default application.
    """

    def __init__(self, editor: str | None = None) -> None:
        self.editor = editor

    def open(self, target: str) -> None:
        if target.startswith(_URL_PREFIXES) or not self.editor:
            rc = typer.launch(target)
            if rc not in (0, None):
                raise LaunchError(f"Could not open '{target}' (exit code {rc}).")
            return

        try:
            subprocess.Popen([*shlex.split(self.editor), target], shell=False)
        except (OSError, ValueError) as exc:
            raise LaunchError(f"Could not start editor '{self.editor}': {exc}") from exc
