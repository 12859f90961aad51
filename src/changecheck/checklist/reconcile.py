"""Align a change state with the current checklist definition.

Entries are only ever added. State for items that were removed from the
definition stays in the document untouched.
"""

from __future__ import annotations

from changecheck.checklist.models import ChangeState, Definition, ItemState


def ensure_item_state(state: ChangeState, item_id: str) -> bool:
    """Insert a default ItemState for *item_id* if missing. Returns True if inserted."""
    if item_id in state.item_states:
        return False
    state.item_states[item_id] = ItemState()
    return True


def reconcile(definition: Definition, state: ChangeState) -> ChangeState:
    """Give every definition item an entry in *state*; returns the same object."""
    for item in definition.iter_items():
        ensure_item_state(state, item.id)
    return state


def stale_item_ids(definition: Definition, state: ChangeState) -> list[str]:
    """Ids held in *state* that the definition no longer lists."""
    current = set(definition.item_ids)
    return [item_id for item_id in state.item_states if item_id not in current]
