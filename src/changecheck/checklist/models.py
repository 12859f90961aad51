"""Domain models for checklist definitions and per-change state.

Attributes are snake_case; the JSON documents on disk use camelCase keys.
``from_dict`` / ``to_dict`` translate between the two.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_DEFINITION_ID = "default"
DEFAULT_DEFINITION_VERSION = 1

Clock = Callable[[], str]


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


# ---------------------------------------------------------------------------
# Definition (template)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Item:
    id: str
    text: str = ""
    link_text: str = ""
    link_url: str = ""

    @property
    def has_link(self) -> bool:
        return bool(self.link_url.strip()) and bool(self.link_text.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "linkText": self.link_text,
            "linkUrl": self.link_url,
        }


@dataclass(frozen=True)
class Section:
    name: str
    items: tuple[Item, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "items": [i.to_dict() for i in self.items]}


@dataclass(frozen=True)
class Definition:
    """A versioned checklist template.

    Attributes:
        title: Display title.
        sections: Ordered sections; order drives display and iteration.
        change_url_template: URL pattern with an ``{id}`` placeholder, or None.
        definition_id: Identity tag recorded into new change states.
        definition_version: Version tag recorded into new change states.
    """

    title: str
    sections: tuple[Section, ...] = ()
    change_url_template: str | None = None
    definition_id: str = DEFAULT_DEFINITION_ID
    definition_version: int = DEFAULT_DEFINITION_VERSION

    def iter_items(self):
        """Yield every item in section order."""
        for section in self.sections:
            yield from section.items

    @property
    def item_ids(self) -> list[str]:
        return [item.id for item in self.iter_items()]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title}
        if self.change_url_template:
            data["changeUrlTemplate"] = self.change_url_template
        data["definitionId"] = self.definition_id
        data["definitionVersion"] = self.definition_version
        data["sections"] = [s.to_dict() for s in self.sections]
        return data


# ---------------------------------------------------------------------------
# Per-change state
# ---------------------------------------------------------------------------


@dataclass
class ItemState:
    is_checked: bool = False
    checked_utc: str | None = None
    notes: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> ItemState:
        """Build from a raw document entry; anything but a mapping yields defaults.

        Only a JSON ``true`` counts as checked. An unchecked item never keeps a
        check time, whatever the document says.
        """
        if not isinstance(raw, dict):
            return cls()
        is_checked = raw.get("isChecked") is True
        checked_utc = raw.get("checkedUtc") if is_checked else None
        return cls(
            is_checked=is_checked,
            checked_utc=str(checked_utc) if checked_utc else None,
            notes=_text(raw.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isChecked": self.is_checked,
            "checkedUtc": self.checked_utc,
            "notes": self.notes,
        }


@dataclass
class WindowGeometry:
    top: float | None = None
    left: float | None = None
    width: float | None = None
    height: float | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.top, self.left, self.width, self.height)

    @classmethod
    def from_dict(cls, raw: Any) -> WindowGeometry:
        if not isinstance(raw, dict):
            return cls()
        return cls(
            top=_number(raw.get("top")),
            left=_number(raw.get("left")),
            width=_number(raw.get("width")),
            height=_number(raw.get("height")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "top": self.top,
            "left": self.left,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class ChangeState:
    """Mutable, durable record of one change request's checklist progress."""

    change_id: str
    definition_id: str = DEFAULT_DEFINITION_ID
    definition_version: int = DEFAULT_DEFINITION_VERSION
    saved_utc: str | None = None
    item_states: dict[str, ItemState] = field(default_factory=dict)
    window: WindowGeometry = field(default_factory=WindowGeometry)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changeId": self.change_id,
            "definitionId": self.definition_id,
            "definitionVersion": self.definition_version,
            "savedUtc": self.saved_utc,
            "itemStates": {k: v.to_dict() for k, v in self.item_states.items()},
            "window": self.window.to_dict(),
        }
