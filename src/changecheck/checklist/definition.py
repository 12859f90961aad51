"""Checklist definition store.

Reads the checklist template (title, sections, items, optional change URL
template, optional id/version) from a JSON or YAML document.

A missing template is created from ``DEFAULT_DEFINITION`` only when the caller
asks for it; a template that exists but cannot be parsed is always fatal.

Usage:
    store = DefinitionStore(Path("~/.changecheck/checklist.json").expanduser())
    definition = store.load(create_default=True)
    store.change_url_template   # overridden by the template's changeUrlTemplate
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from changecheck.checklist.errors import DefinitionNotFoundError, DefinitionParseError
from changecheck.checklist.models import (
    DEFAULT_DEFINITION_ID,
    DEFAULT_DEFINITION_VERSION,
    Definition,
    Item,
    Section,
)
from changecheck.checklist.writer import write_atomic, write_json

_YAML_SUFFIXES = frozenset([".yaml", ".yml"])

DEFAULT_DEFINITION = Definition(
    title="Change Implementation Checklist",
    sections=(
        Section(
            name="Pre-Implementation",
            items=(
                Item(
                    id="pre-001",
                    text="Confirm the change request is approved and inside its change window.",
                ),
                Item(
                    id="pre-002",
                    text="Review the implementation and backout plans with the implementer.",
                    link_text="Change runbook",
                    link_url="https://wiki.example.com/change-management/runbook",
                ),
                Item(
                    id="pre-003",
                    text="Notify affected stakeholders that work is about to start.",
                ),
            ),
        ),
        Section(
            name="Post-Implementation",
            items=(
                Item(
                    id="post-001",
                    text="Verify service health and monitoring after the change.",
                ),
                Item(
                    id="post-002",
                    text="Record implementation notes and evidence on the change request.",
                ),
                Item(
                    id="post-003",
                    text="Move the change request to review or close it.",
                ),
            ),
        ),
    ),
)


class DefinitionStore:
    """File-backed checklist template.

    Args:
        path: Location of the template document (.json, .yaml or .yml).
        change_url_template: Default change-link pattern; replaced whenever a
            loaded template carries its own ``changeUrlTemplate``.
    """

    def __init__(self, path: Path, *, change_url_template: str | None = None) -> None:
        self.path = path
        self.change_url_template = change_url_template

    def load(self, *, create_default: bool = False) -> Definition:
        """Read and parse the template.

        Raises:
            DefinitionNotFoundError: If the file is missing (and *create_default*
                is False) or the path is not a regular file.
            DefinitionParseError: If the document cannot be parsed.
        """
        if not self.path.exists():
            if not create_default:
                raise DefinitionNotFoundError(f"Checklist definition not found: '{self.path}'")
            self.ensure_default()
        if not self.path.is_file():
            raise DefinitionNotFoundError(f"Checklist definition is not a file: '{self.path}'")

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DefinitionParseError(f"Cannot read '{self.path}': {exc}") from exc

        definition = parse_definition(
            text,
            yaml_format=self.path.suffix.lower() in _YAML_SUFFIXES,
            source=self.path,
        )

        if definition.change_url_template:
            self.change_url_template = definition.change_url_template
        return definition

    def ensure_default(self) -> Path:
        """Write the starter template if no file exists yet. Never overwrites."""
        if not self.path.exists():
            self.write(DEFAULT_DEFINITION)
        return self.path

    def write(self, definition: Definition) -> None:
        """Persist *definition* in the format implied by the file suffix."""
        if self.path.suffix.lower() in _YAML_SUFFIXES:
            write_atomic(self.path, yaml.safe_dump(definition.to_dict(), sort_keys=False, allow_unicode=True))
        else:
            write_json(self.path, definition.to_dict())


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_definition(text: str, *, yaml_format: bool = False, source: Path | str = "<string>") -> Definition:
    """Parse a template document into a *Definition*.

    Raises:
        DefinitionParseError: On syntax errors or structural problems.
    """
    try:
        raw = yaml.safe_load(text) if yaml_format else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DefinitionParseError(f"Invalid checklist definition '{source}': {exc}") from exc

    if not isinstance(raw, dict):
        raise DefinitionParseError(f"Checklist definition '{source}' must be an object at the top level.")

    raw_sections = raw.get("sections") or []
    if not isinstance(raw_sections, list):
        raise DefinitionParseError(f"'sections' in '{source}' must be a list.")

    seen: set[str] = set()
    sections: list[Section] = []
    for s_index, raw_section in enumerate(raw_sections):
        if not isinstance(raw_section, dict) or not str(raw_section.get("name") or "").strip():
            raise DefinitionParseError(f"Section #{s_index + 1} in '{source}' has no name.")
        raw_items = raw_section.get("items") or []
        if not isinstance(raw_items, list):
            raise DefinitionParseError(f"'items' of section '{raw_section['name']}' must be a list.")

        items: list[Item] = []
        for i_index, raw_item in enumerate(raw_items):
            item = _parse_item(raw_item, source, str(raw_section["name"]), i_index)
            if item.id in seen:
                raise DefinitionParseError(f"Duplicate item id '{item.id}' in '{source}'.")
            seen.add(item.id)
            items.append(item)
        sections.append(Section(name=str(raw_section["name"]), items=tuple(items)))

    template = raw.get("changeUrlTemplate")
    version = raw.get("definitionVersion")
    try:
        definition_version = int(version) if version is not None else DEFAULT_DEFINITION_VERSION
    except (TypeError, ValueError) as exc:
        raise DefinitionParseError(f"'definitionVersion' in '{source}' must be an integer.") from exc

    return Definition(
        title=str(raw.get("title") or ""),
        sections=tuple(sections),
        change_url_template=str(template) if template and str(template).strip() else None,
        definition_id=str(raw.get("definitionId") or DEFAULT_DEFINITION_ID),
        definition_version=definition_version,
    )


def _parse_item(raw: Any, source: Path | str, section: str, index: int) -> Item:
    if not isinstance(raw, dict) or not str(raw.get("id") or "").strip():
        raise DefinitionParseError(f"Item #{index + 1} of section '{section}' in '{source}' has no id.")
    return Item(
        id=str(raw["id"]),
        text=str(raw.get("text") or ""),
        link_text=str(raw.get("linkText") or ""),
        link_url=str(raw.get("linkUrl") or ""),
    )
