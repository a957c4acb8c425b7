"""
Dialogue runner error taxonomy.

All errors raised by the library derive from DialogueError so hosts can
catch everything the runner signals with a single except clause.
"""

from __future__ import annotations


class DialogueError(Exception):
    """Base class for dialogue runner errors."""


class ProgramFormatError(DialogueError, ValueError):
    """A loaded program could not be decoded or is not a valid graph."""


class InvalidStateError(DialogueError, RuntimeError):
    """An API was called in a state that forbids it."""


class InvalidOptionError(DialogueError, IndexError):
    """An option was selected that is not part of the pending option set."""


class LineTableError(DialogueError, ValueError):
    """A localized line table failed validation."""
