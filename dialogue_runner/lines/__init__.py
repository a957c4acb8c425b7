"""
Lines module - localized text lookup.

Exports:
- LineProvider, LocalizedLine, LineEntry: Provider interface and data
- MapLineProvider: In-memory tables
- FileLineProvider: JSON tables on disk
- HttpLineProvider: JSON tables over HTTP
"""

from dialogue_runner.lines.provider import (
    LineProvider,
    LocalizedLine,
    LineEntry,
    MapLineProvider,
    apply_substitutions,
)
from dialogue_runner.lines.files import FileLineProvider, LINE_TABLE_SCHEMA, parse_line_table
from dialogue_runner.lines.remote import HttpLineProvider

__all__ = [
    "LineProvider",
    "LocalizedLine",
    "LineEntry",
    "MapLineProvider",
    "apply_substitutions",
    "FileLineProvider",
    "LINE_TABLE_SCHEMA",
    "parse_line_table",
    "HttpLineProvider",
]
