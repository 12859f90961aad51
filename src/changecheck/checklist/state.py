"""Per-change state store.

One JSON document per Change Request identifier:

    <state_dir>/<sanitized id>.state.json

Sanitizing trims the identifier and replaces every character outside
``[A-Za-z0-9_-]`` with ``_``. Distinct identifiers can therefore share a file
(``chg/1234`` and ``chg_1234``); that collision is accepted behaviour.

A state file that cannot be read is not an error: ``load()`` reports it through
``on_recover`` and returns a blank state.
"""

from __future__ import annotations

import json
import re
import warnings
from collections.abc import Callable
from pathlib import Path
from typing import Any

from changecheck.checklist.errors import (
    BlankIdentifierError,
    StateParseError,
    StateRecoveryWarning,
    StateWriteError,
)
from changecheck.checklist.models import (
    ChangeState,
    Clock,
    Definition,
    ItemState,
    WindowGeometry,
    utc_now,
)
from changecheck.checklist.writer import write_json

STATE_SUFFIX = ".state.json"

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")

RecoverHook = Callable[[Path, Exception], None]


def sanitize_change_id(raw: str | None) -> str | None:
    """Return the storage key for *raw*, or None if it is blank."""
    trimmed = (raw or "").strip()
    if not trimmed:
        return None
    return _UNSAFE_RE.sub("_", trimmed)


def _warn_recovered(path: Path, exc: Exception) -> None:
    warnings.warn(
        f"State file '{path}' is unreadable ({exc}); starting from a blank checklist.",
        StateRecoveryWarning,
        stacklevel=3,
    )


class StateStore:
    """Reads and writes ChangeState documents under *state_dir*."""

    def __init__(self, state_dir: Path, *, clock: Clock = utc_now) -> None:
        self.state_dir = state_dir
        self._clock = clock

    def path(self, change_id: str | None) -> Path | None:
        key = sanitize_change_id(change_id)
        if key is None:
            return None
        return self.state_dir / f"{key}{STATE_SUFFIX}"

    def new_state(self, change_id: str, definition: Definition) -> ChangeState:
        return ChangeState(
            change_id=change_id.strip(),
            definition_id=definition.definition_id,
            definition_version=definition.definition_version,
        )

    def load(
        self,
        change_id: str,
        definition: Definition,
        *,
        on_recover: RecoverHook | None = None,
    ) -> ChangeState:
        """Load the state for *change_id*, or synthesize a blank one.

        Missing and unreadable files both yield a blank state; for the latter
        *on_recover* (default: a StateRecoveryWarning) is called first.
        """
        path = self.path(change_id)
        if path is None or not path.exists():
            return self.new_state(change_id, definition)

        try:
            raw = _read_document(path)
        except StateParseError as exc:
            (on_recover or _warn_recovered)(path, exc)
            return self.new_state(change_id, definition)

        return _state_from_dict(raw, change_id.strip(), definition)

    def save(self, state: ChangeState) -> Path:
        """Stamp ``saved_utc`` and rewrite the whole document atomically.

        Raises:
            BlankIdentifierError: If the state has no usable change identifier.
            StateWriteError: If the file cannot be written.
        """
        path = self.path(state.change_id)
        if path is None:
            raise BlankIdentifierError("Cannot save a change state without a change identifier.")
        state.saved_utc = self._clock()
        try:
            write_json(path, state.to_dict())
        except OSError as exc:
            raise StateWriteError(f"Could not write state file '{path}': {exc}") from exc
        return path


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def _read_document(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StateParseError(str(exc)) from exc
    if not isinstance(raw, dict):
        raise StateParseError("top-level value is not an object")
    return raw


def _state_from_dict(raw: dict[str, Any], change_id: str, definition: Definition) -> ChangeState:
    """Build a ChangeState, back-filling absent or null top-level fields."""
    if raw.get("definitionId") is None:
        raw["definitionId"] = definition.definition_id
    if raw.get("definitionVersion") is None:
        raw["definitionVersion"] = definition.definition_version
    if not isinstance(raw.get("itemStates"), dict):
        raw["itemStates"] = {}
    if not isinstance(raw.get("window"), dict):
        raw["window"] = {}

    try:
        definition_version = int(raw["definitionVersion"])
    except (TypeError, ValueError):
        definition_version = definition.definition_version

    saved = raw.get("savedUtc")
    return ChangeState(
        change_id=change_id,
        definition_id=str(raw["definitionId"]),
        definition_version=definition_version,
        saved_utc=str(saved) if saved else None,
        item_states={str(k): ItemState.from_dict(v) for k, v in raw["itemStates"].items()},
        window=WindowGeometry.from_dict(raw["window"]),
    )
