"""Test doubles and sample documents shared across the test suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

DEFINITION_DOC = {
    "title": "Test Change Checklist",
    "changeUrlTemplate": "https://cr.example.com/view?id={id}",
    "definitionId": "test-checklist",
    "definitionVersion": 3,
    "sections": [
        {
            "name": "Pre-Implementation",
            "items": [
                {"id": "pre-001", "text": "Confirm approval", "linkText": "", "linkUrl": ""},
                {
                    "id": "pre-002",
                    "text": "Review backout plan",
                    "linkText": "Runbook",
                    "linkUrl": "https://wiki.example.com/runbook",
                },
                {"id": "pre-003", "text": "Notify stakeholders", "linkText": "", "linkUrl": ""},
            ],
        },
        {
            "name": "Post-Implementation",
            "items": [
                {"id": "post-001", "text": "Verify service health"},
                {"id": "post-002", "text": "Close the change"},
            ],
        },
    ],
}


class FakeClock:
    """Strictly increasing UTC timestamps, one second apart."""

    def __init__(self) -> None:
        self._now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        self._now += timedelta(seconds=1)
        return self._now.isoformat()


class RecordingLauncher:
    """Launcher double: records targets, optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.opened: list[str] = []
        self.fail = fail

    def open(self, target: str) -> None:
        if self.fail:
            raise OSError("no browser available")
        self.opened.append(target)


def write_definition(path: Path, doc: dict | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc if doc is not None else DEFINITION_DOC), encoding="utf-8")
    return path
