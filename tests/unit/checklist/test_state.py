"""Tests for the per-change state store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from changecheck.checklist.errors import BlankIdentifierError, StateRecoveryWarning, StateWriteError
from changecheck.checklist.models import ChangeState, Definition, ItemState, WindowGeometry
from changecheck.checklist.state import StateStore, sanitize_change_id


@pytest.fixture
def definition(definition_store) -> Definition:
    return definition_store.load()


# ------------------------------------------------------------------
# sanitize_change_id / path
# ------------------------------------------------------------------


def test_sanitize_trims_and_replaces_slash() -> None:
    assert sanitize_change_id("  chg/1234  ") == "chg_1234"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("CHG0001234", "CHG0001234"),
        ("chg-12_34", "chg-12_34"),
        ("a b.c", "a_b_c"),
        ("ä", "_"),
        ("..\\..\\etc", "______etc"),
    ],
)
def test_sanitize_replaces_unsafe_characters(raw: str, expected: str) -> None:
    assert sanitize_change_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
def test_sanitize_blank_is_none(raw) -> None:
    assert sanitize_change_id(raw) is None


def test_path_uses_state_suffix(state_store: StateStore, state_dir: Path) -> None:
    assert state_store.path("CHG1") == state_dir / "CHG1.state.json"


def test_path_blank_is_none(state_store: StateStore) -> None:
    assert state_store.path("  ") is None


def test_path_is_deterministic_in_trimmed_id(state_store: StateStore) -> None:
    assert state_store.path(" CHG1 ") == state_store.path("CHG1")


def test_distinct_ids_may_collide(state_store: StateStore) -> None:
    """Accepted behaviour: sanitization can map different ids to one file."""
    assert state_store.path("chg/1234") == state_store.path("chg_1234")


# ------------------------------------------------------------------
# load — missing / blank
# ------------------------------------------------------------------


def test_load_missing_returns_blank_state(state_store: StateStore, definition: Definition) -> None:
    state = state_store.load("CHG1", definition)
    assert state == ChangeState(
        change_id="CHG1",
        definition_id="test-checklist",
        definition_version=3,
    )


def test_load_does_not_create_file(state_store: StateStore, definition: Definition) -> None:
    state_store.load("CHG1", definition)
    assert not state_store.path("CHG1").exists()


def test_load_trims_change_id(state_store: StateStore, definition: Definition) -> None:
    assert state_store.load("  CHG1 ", definition).change_id == "CHG1"


# ------------------------------------------------------------------
# load — corruption recovery
# ------------------------------------------------------------------


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", "\"text\"", ""])
def test_load_corrupt_returns_blank_state(
    state_store: StateStore, definition: Definition, content: str
) -> None:
    path = state_store.path("CHG9")
    path.parent.mkdir(parents=True)
    path.write_text(content, encoding="utf-8")

    seen: list[Path] = []
    state = state_store.load("CHG9", definition, on_recover=lambda p, exc: seen.append(p))

    assert state.change_id == "CHG9"
    assert state.item_states == {}
    assert seen == [path]


def test_load_corrupt_warns_by_default(state_store: StateStore, definition: Definition) -> None:
    path = state_store.path("CHG9")
    path.parent.mkdir(parents=True)
    path.write_text("{oops", encoding="utf-8")

    with pytest.warns(StateRecoveryWarning):
        state = state_store.load("CHG9", definition)
    assert state.change_id == "CHG9"


# ------------------------------------------------------------------
# load — back-filling
# ------------------------------------------------------------------


def _write_state(store: StateStore, change_id: str, doc: dict) -> Path:
    path = store.path(change_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def test_load_backfills_missing_fields(state_store: StateStore, definition: Definition) -> None:
    _write_state(state_store, "CHG1", {"changeId": "CHG1"})
    state = state_store.load("CHG1", definition)
    assert state.definition_id == "test-checklist"
    assert state.definition_version == 3
    assert state.item_states == {}
    assert state.window == WindowGeometry()


def test_load_backfills_null_fields(state_store: StateStore, definition: Definition) -> None:
    _write_state(
        state_store,
        "CHG1",
        {"changeId": "CHG1", "definitionId": None, "definitionVersion": None, "itemStates": None, "window": None},
    )
    state = state_store.load("CHG1", definition)
    assert state.definition_id == "test-checklist"
    assert state.item_states == {}


def test_load_keeps_recorded_definition_identity(state_store: StateStore, definition: Definition) -> None:
    _write_state(state_store, "CHG1", {"changeId": "CHG1", "definitionId": "old", "definitionVersion": 1})
    state = state_store.load("CHG1", definition)
    assert state.definition_id == "old"
    assert state.definition_version == 1


def test_load_reads_item_states_and_window(state_store: StateStore, definition: Definition) -> None:
    _write_state(
        state_store,
        "CHG1",
        {
            "changeId": "CHG1",
            "savedUtc": "2026-01-01T00:00:00+00:00",
            "itemStates": {
                "pre-001": {"isChecked": True, "checkedUtc": "2026-01-01T00:00:00+00:00", "notes": "done"},
                "gone-999": {"isChecked": False, "checkedUtc": None, "notes": "old"},
                "broken": 42,
            },
            "window": {"top": 10, "left": 20, "width": 800, "height": 600},
        },
    )
    state = state_store.load("CHG1", definition)
    assert state.saved_utc == "2026-01-01T00:00:00+00:00"
    assert state.item_states["pre-001"] == ItemState(True, "2026-01-01T00:00:00+00:00", "done")
    assert state.item_states["gone-999"].notes == "old"
    assert state.item_states["broken"] == ItemState()
    assert state.window == WindowGeometry(10, 20, 800, 600)


def test_load_sets_change_id_from_identifier(state_store: StateStore, definition: Definition) -> None:
    """The changeId field always matches the identifier used to find the file."""
    _write_state(state_store, "chg_1234", {"changeId": "chg_1234"})
    state = state_store.load("chg/1234", definition)
    assert state.change_id == "chg/1234"


def test_load_drops_check_time_of_unchecked_item(state_store: StateStore, definition: Definition) -> None:
    _write_state(
        state_store,
        "CHG1",
        {"changeId": "CHG1", "itemStates": {"pre-001": {"isChecked": False, "checkedUtc": "2020-01-01T00:00:00+00:00"}}},
    )
    state = state_store.load("CHG1", definition)
    assert state.item_states["pre-001"] == ItemState(is_checked=False, checked_utc=None)


@pytest.mark.parametrize("value", ["false", "true", 1, "yes", None])
def test_load_only_json_true_counts_as_checked(
    state_store: StateStore, definition: Definition, value
) -> None:
    _write_state(
        state_store,
        "CHG1",
        {"changeId": "CHG1", "itemStates": {"pre-001": {"isChecked": value, "checkedUtc": "2020-01-01T00:00:00+00:00"}}},
    )
    item = state_store.load("CHG1", definition).item_states["pre-001"]
    assert item.is_checked is False
    assert item.checked_utc is None


# ------------------------------------------------------------------
# save
# ------------------------------------------------------------------


def test_save_stamps_saved_utc_and_writes(state_store: StateStore, clock) -> None:
    state = ChangeState(change_id="CHG1", item_states={"pre-001": ItemState()})
    path = state_store.save(state)

    assert state.saved_utc is not None
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["changeId"] == "CHG1"
    assert data["savedUtc"] == state.saved_utc
    assert data["itemStates"]["pre-001"]["isChecked"] is False


def test_save_creates_state_dir(state_store: StateStore, state_dir: Path) -> None:
    assert not state_dir.exists()
    state_store.save(ChangeState(change_id="CHG1"))
    assert (state_dir / "CHG1.state.json").exists()


def test_save_leaves_no_temp_files(state_store: StateStore, state_dir: Path) -> None:
    state = ChangeState(change_id="CHG1")
    state_store.save(state)
    state_store.save(state)
    assert [p.name for p in state_dir.iterdir()] == ["CHG1.state.json"]


def test_save_updates_timestamp_each_time(state_store: StateStore) -> None:
    state = ChangeState(change_id="CHG1")
    state_store.save(state)
    first = state.saved_utc
    state_store.save(state)
    assert state.saved_utc != first


def test_save_onto_directory_raises_write_error(state_store: StateStore, state_dir: Path) -> None:
    (state_dir / "CHG1.state.json").mkdir(parents=True)
    with pytest.raises(StateWriteError, match="Could not write state file"):
        state_store.save(ChangeState(change_id="CHG1"))
    assert [p.name for p in state_dir.iterdir()] == ["CHG1.state.json"]


def test_save_blank_change_id_raises(state_store: StateStore) -> None:
    with pytest.raises(BlankIdentifierError):
        state_store.save(ChangeState(change_id="  "))


def test_saved_document_loads_back(state_store: StateStore, definition: Definition) -> None:
    state = state_store.new_state("CHG1", definition)
    state.item_states["pre-001"] = ItemState(True, "2026-01-01T00:00:01+00:00", "notes")
    state.window = WindowGeometry(1, 2, 3, 4)
    state_store.save(state)

    assert state_store.load("CHG1", definition) == state
