"""Change session — ties definition, state, reconciliation and view together.

Lifecycle:

    NO_CHANGE_LOADED ──load(id)──▶ CHANGE_LOADED ──load(other id)──▶ CHANGE_LOADED

``load()`` re-reads the definition, loads (or creates) the change state,
reconciles it, projects it to a ``ChecklistView`` and saves it once so that a
new change is durable before any edit. Every later edit on the view is saved
immediately through the section callbacks.

Outcomes the user should see are written to ``status`` (the status line);
only a missing or corrupt definition raises.
"""

from __future__ import annotations

import enum
from dataclasses import replace
from functools import partial
from pathlib import Path
from urllib.parse import quote

from changecheck.checklist.definition import DefinitionStore
from changecheck.checklist.models import ChangeState, Clock, Definition, WindowGeometry, utc_now
from changecheck.checklist.projection import ChecklistView, project
from changecheck.checklist.reconcile import reconcile
from changecheck.checklist.state import StateStore
from changecheck.launcher import Launcher

MSG_BLANK_ID = "Enter a Change Request number first."
MSG_NOTHING_LOADED = "Nothing loaded."
MSG_NO_URL_TEMPLATE = "No change URL template is configured."
MSG_NO_DEFINITION = "No checklist definition found"
MSG_RECOVERED = "state file was unreadable; started blank"


class SessionPhase(enum.Enum):
    NO_CHANGE_LOADED = "no_change_loaded"
    CHANGE_LOADED = "change_loaded"


def build_change_url(template: str | None, identifier: str | None) -> str | None:
    """Substitute ``{id}`` in *template* with the percent-encoded, trimmed *identifier*."""
    change_id = (identifier or "").strip()
    if not template or not change_id:
        return None
    return template.replace("{id}", quote(change_id, safe=""))


class ChangeSession:
    """The single live checklist session.

    Args:
        definitions: Template store, re-read on every ``load()``.
        states: Per-change state store.
        launcher: Opens links and files; optional.
        clock: Timestamp source for check stamps and saves.
        create_default: Write the starter template when none exists.
    """

    def __init__(
        self,
        definitions: DefinitionStore,
        states: StateStore,
        *,
        launcher: Launcher | None = None,
        clock: Clock = utc_now,
        create_default: bool = False,
    ) -> None:
        self._definitions = definitions
        self._states = states
        self._launcher = launcher
        self._clock = clock
        self._create_default = create_default

        self.definition: Definition | None = None
        self.state: ChangeState | None = None
        self.view: ChecklistView | None = None
        self.window = WindowGeometry()
        self.status = ""
        self.recovered = False

    @property
    def phase(self) -> SessionPhase:
        if self.state is None:
            return SessionPhase.NO_CHANGE_LOADED
        return SessionPhase.CHANGE_LOADED

    @property
    def change_id(self) -> str | None:
        return self.state.change_id if self.state is not None else None

    @property
    def state_path(self) -> Path | None:
        return self._states.path(self.change_id)

    @property
    def definition_path(self) -> Path:
        return self._definitions.path

    def read_definition(self) -> Definition:
        """Re-read the template (and pick up its change URL template, if any)."""
        self.definition = self._definitions.load(create_default=self._create_default)
        return self.definition

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(self, identifier: str | None) -> bool:
        """Load *identifier*, replacing any current session. Returns False on blank input.

        The new state is saved before it replaces the current one, so a failed
        load leaves the previous session as it was.

        Raises:
            DefinitionNotFoundError, DefinitionParseError: From the definition store.
            StateWriteError: If the state file cannot be written.
        """
        change_id = (identifier or "").strip()
        if not change_id:
            self.status = MSG_BLANK_ID
            return False

        definition = self._definitions.load(create_default=self._create_default)

        recovered: list[Path] = []
        state = self._states.load(
            change_id,
            definition,
            on_recover=lambda path, exc: recovered.append(path),
        )
        reconcile(definition, state)
        self._states.save(state)

        self.definition = definition
        self.state = state
        self.recovered = bool(recovered)
        self.view = project(
            definition,
            state,
            persist=partial(self._states.save, state),
            clock=self._clock,
        )

        if state.window.is_complete:
            self.window = replace(state.window)

        self.status = f"Loaded: {change_id}"
        if self.recovered:
            self.status += f" ({MSG_RECOVERED})"
        return True

    def save(self) -> bool:
        if self.state is None:
            self.status = MSG_NOTHING_LOADED
            return False
        self._states.save(self.state)
        self.status = f"Saved: {self.state.change_id}"
        return True

    def close_window(self, geometry: WindowGeometry | None = None) -> None:
        """Record the final window geometry and save before shutdown."""
        if geometry is not None:
            self.window = geometry
        if self.state is None:
            return
        self.state.window = replace(self.window)
        self._states.save(self.state)

    # ------------------------------------------------------------------
    # External actions (best effort)
    # ------------------------------------------------------------------

    def change_url(self, identifier: str | None = None) -> str | None:
        """URL of the change request for *identifier* (default: the loaded change)."""
        raw = identifier if identifier is not None else self.change_id
        return build_change_url(self._definitions.change_url_template, raw)

    def open_change_link(self, identifier: str | None = None) -> bool:
        raw = identifier if identifier is not None else self.change_id
        if not (raw or "").strip():
            self.status = MSG_BLANK_ID
            return False
        url = self.change_url(raw)
        if url is None:
            self.status = MSG_NO_URL_TEMPLATE
            return False
        return self._launch(url, "change link")

    def edit_definition(self) -> bool:
        """Open the template in the editor, writing the starter one first if allowed."""
        if self._create_default:
            path = self._definitions.ensure_default()
        else:
            path = self._definitions.path
            if not path.is_file():
                self.status = f"{MSG_NO_DEFINITION}: {path}"
                return False
        return self._launch(str(path), "checklist definition")

    def open_state_file(self) -> bool:
        if self.state is None:
            self.status = MSG_NOTHING_LOADED
            return False
        path = self._states.path(self.state.change_id)
        if path is None or not path.exists():
            self._states.save(self.state)
            path = self._states.path(self.state.change_id)
        return self._launch(str(path), "state file")

    def _launch(self, target: str, what: str) -> bool:
        if self._launcher is None:
            self.status = f"Cannot open {what}: no launcher available."
            return False
        try:
            self._launcher.open(target)
        except Exception as exc:
            self.status = f"Could not open {what}: {exc}"
            return False
        self.status = f"Opened {what}."
        return True
