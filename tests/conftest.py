"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from changecheck.checklist.definition import DefinitionStore
from changecheck.checklist.session import ChangeSession
from changecheck.checklist.state import StateStore
from helpers import FakeClock, RecordingLauncher, write_definition


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def definition_path(tmp_path: Path) -> Path:
    return write_definition(tmp_path / "checklist.json")


@pytest.fixture
def definition_store(definition_path: Path) -> DefinitionStore:
    return DefinitionStore(definition_path)


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


@pytest.fixture
def state_store(state_dir: Path, clock: FakeClock) -> StateStore:
    return StateStore(state_dir, clock=clock)


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def session(
    definition_store: DefinitionStore,
    state_store: StateStore,
    launcher: RecordingLauncher,
    clock: FakeClock,
) -> ChangeSession:
    return ChangeSession(definition_store, state_store, launcher=launcher, clock=clock)
