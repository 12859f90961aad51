"""View-model projection: definition items × item states → bindable entities.

Each ``ItemView`` wraps one template item and the ItemState that backs it.
Edits go straight into the backing ItemState, then the owning ``SectionView``
persists the change state and refreshes its progress line. Listeners
registered with ``SectionView.subscribe()`` are told about every edit after
that; this is the hook a UI binds to.
"""

from __future__ import annotations

from collections.abc import Callable

from changecheck.checklist.models import ChangeState, Clock, Definition, Item, ItemState, utc_now

FIELD_IS_CHECKED = "is_checked"
FIELD_NOTES = "notes"

ChangeCallback = Callable[["ItemView", str], None]


class ItemView:
    """Projected checklist item.

    ``is_checked`` and ``notes`` are writable; everything else is derived.
    """

    def __init__(self, item: Item, state: ItemState, *, on_change: ChangeCallback, clock: Clock = utc_now) -> None:
        self._item = item
        self._state = state
        self._on_change = on_change
        self._clock = clock

    @property
    def id(self) -> str:
        return self._item.id

    @property
    def text(self) -> str:
        return self._item.text

    @property
    def link_text(self) -> str:
        return self._item.link_text

    @property
    def link_url(self) -> str:
        return self._item.link_url

    @property
    def has_link(self) -> bool:
        return self._item.has_link

    @property
    def is_checked(self) -> bool:
        return self._state.is_checked

    @is_checked.setter
    def is_checked(self, value: bool) -> None:
        value = bool(value)
        if value == self._state.is_checked:
            return
        self._state.is_checked = value
        self._state.checked_utc = self._clock() if value else None
        self._on_change(self, FIELD_IS_CHECKED)

    @property
    def notes(self) -> str:
        return self._state.notes

    @notes.setter
    def notes(self, value: str) -> None:
        value = value or ""
        if value == self._state.notes:
            return
        self._state.notes = value
        self._on_change(self, FIELD_NOTES)

    @property
    def checked_utc(self) -> str | None:
        return self._state.checked_utc

    @property
    def checked_label(self) -> str:
        if not self.is_checked:
            return "Not checked yet"
        if not (self.checked_utc or "").strip():
            return "Checked"
        return f"Checked: {self.checked_utc}"

    def __repr__(self) -> str:
        return f"ItemView(id={self.id!r}, is_checked={self.is_checked!r})"


class SectionView:
    """One section's items plus its progress summary."""

    def __init__(self, name: str, *, persist: Callable[[], object]) -> None:
        self.name = name
        self.items: list[ItemView] = []
        self.progress = ""
        self._persist = persist
        self._listeners: list[ChangeCallback] = []

    def add(self, item: Item, state: ItemState, clock: Clock = utc_now) -> ItemView:
        view = ItemView(item, state, on_change=self._item_changed, clock=clock)
        self.items.append(view)
        return view

    def subscribe(self, callback: ChangeCallback) -> None:
        self._listeners.append(callback)

    @property
    def checked_count(self) -> int:
        return sum(1 for view in self.items if view.is_checked)

    @property
    def total_count(self) -> int:
        return len(self.items)

    def refresh_progress(self) -> str:
        self.progress = f"Progress: {self.checked_count} / {self.total_count} completed"
        return self.progress

    def _item_changed(self, view: ItemView, field_name: str) -> None:
        self._persist()
        if field_name == FIELD_IS_CHECKED:
            self.refresh_progress()
        for listener in self._listeners:
            listener(view, field_name)


class ChecklistView:
    """All sections of a projected checklist, in definition order."""

    def __init__(self, title: str, sections: list[SectionView]) -> None:
        self.title = title
        self.sections = sections

    def section(self, name: str) -> SectionView | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def item(self, item_id: str) -> ItemView | None:
        for section in self.sections:
            for view in section.items:
                if view.id == item_id:
                    return view
        return None

    @property
    def overall_progress(self) -> tuple[int, int]:
        """(checked, total) across all sections."""
        return (
            sum(s.checked_count for s in self.sections),
            sum(s.total_count for s in self.sections),
        )


def project(
    definition: Definition,
    state: ChangeState,
    *,
    persist: Callable[[], object],
    clock: Clock = utc_now,
) -> ChecklistView:
    """Build the view model for a reconciled *state*.

    Every definition item must already have an entry in ``state.item_states``.
    """
    sections: list[SectionView] = []
    for section in definition.sections:
        view = SectionView(section.name, persist=persist)
        for item in section.items:
            view.add(item, state.item_states[item.id], clock)
        view.refresh_progress()
        sections.append(view)
    return ChecklistView(definition.title, sections)
