"""Checklist exception taxonomy.

Fatal (halt the session / CLI command):
  DefinitionNotFoundError  — no template file and none may be synthesized
  DefinitionParseError     — template present but unreadable or malformed
  StateWriteError          — a change state could not be written to disk

Recovered locally:
  StateParseError          — raised by the state reader, always caught by
                             StateStore.load() and turned into a blank state

Input validation:
  BlankIdentifierError     — a blank Change Request identifier reached an API
                             that cannot report through a status line
"""

from __future__ import annotations


class ChecklistError(Exception):
    """Base class for checklist errors."""


class DefinitionNotFoundError(ChecklistError):
    """Raised when the checklist template does not exist (or is not a file)."""


class DefinitionParseError(ChecklistError):
    """Raised when the checklist template cannot be parsed."""


class StateParseError(ChecklistError):
    """Raised when a change state document is unreadable."""


class StateWriteError(ChecklistError):
    """Raised when a change state document cannot be written."""


class BlankIdentifierError(ChecklistError, ValueError):
    """Raised when a blank change identifier is used to address state."""


class StateRecoveryWarning(UserWarning):
    """Emitted when an unreadable state file is replaced by a blank state."""
