"""Checklist core — definition and state stores, reconciliation, view model, session."""

from changecheck.checklist.definition import DEFAULT_DEFINITION, DefinitionStore
from changecheck.checklist.errors import (
    BlankIdentifierError,
    ChecklistError,
    DefinitionNotFoundError,
    DefinitionParseError,
    StateParseError,
    StateRecoveryWarning,
    StateWriteError,
)
from changecheck.checklist.models import (
    ChangeState,
    Definition,
    Item,
    ItemState,
    Section,
    WindowGeometry,
)
from changecheck.checklist.projection import ChecklistView, ItemView, SectionView, project
from changecheck.checklist.reconcile import ensure_item_state, reconcile, stale_item_ids
from changecheck.checklist.session import ChangeSession, SessionPhase
from changecheck.checklist.state import StateStore, sanitize_change_id

__all__ = [
    "BlankIdentifierError",
    "ChangeSession",
    "ChangeState",
    "ChecklistError",
    "ChecklistView",
    "DEFAULT_DEFINITION",
    "Definition",
    "DefinitionNotFoundError",
    "DefinitionParseError",
    "DefinitionStore",
    "Item",
    "ItemState",
    "ItemView",
    "Section",
    "SectionView",
    "SessionPhase",
    "StateParseError",
    "StateRecoveryWarning",
    "StateWriteError",
    "StateStore",
    "WindowGeometry",
    "ensure_item_state",
    "project",
    "reconcile",
    "sanitize_change_id",
    "stale_item_ids",
]
