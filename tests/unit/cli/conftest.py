"""CLI fixtures: isolate config lookup and replace the system launcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers import RecordingLauncher


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("changecheck.config._GLOBAL_CONFIG_DIR", tmp_path / "home")
    monkeypatch.setattr("changecheck.config._GLOBAL_CONFIG_PATH", tmp_path / "home" / "config.yaml")
    for var in ("CHANGECHECK_DEFINITION", "CHANGECHECK_STATE_DIR", "CHANGECHECK_EDITOR", "CHANGECHECK_CHANGE_URL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cli_launcher(monkeypatch: pytest.MonkeyPatch) -> RecordingLauncher:
    launcher = RecordingLauncher()
    monkeypatch.setattr("changecheck.cli.common.SystemLauncher", lambda editor=None: launcher)
    return launcher
