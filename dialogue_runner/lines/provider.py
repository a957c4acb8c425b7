"""
Line providers - resolve line IDs to localized text.

The runner asks a provider for the text of every line and option it
shows, and forwards LinesNeeded hints to prepare() so providers backed
by files or the network can load ahead of time.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence


@dataclass
class LocalizedLine:
    """A resolved line of text."""
    text: str
    line_id: str
    substitutions: list[str] = field(default_factory=list)
    metadata: Optional[dict[str, str]] = None


@dataclass
class LineEntry:
    """A line table entry."""
    id: str
    text: str
    metadata: Optional[dict[str, str]] = None


SUBSTITUTION_PATTERN = re.compile(r"\{(\d+)\}")


def apply_substitutions(text: str, substitutions: Sequence[str]) -> str:
    """
    Replace {0}, {1}, ... with positional substitution values.

    Placeholders without a matching value are left as written. Inserted
    values are not scanned again.
    """
    def replace(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(substitutions):
            return str(substitutions[index])
        return match.group(0)

    return SUBSTITUTION_PATTERN.sub(replace, text)


class LineProvider(ABC):
    """
    Base class for line providers.

    Attributes:
        locale: Locale code for lookups (e.g. 'en-US')
        fallback_locale: Locale consulted when the primary one misses
    """

    def __init__(self, locale: str = "en-US", fallback_locale: str = "en-US"):
        self.locale = locale
        self.fallback_locale = fallback_locale

    @abstractmethod
    def resolve(
        self,
        line_id: str,
        substitutions: Sequence[str] = (),
    ) -> Optional[LocalizedLine]:
        """Resolve a line ID, or return None if the line is unknown."""

    @abstractmethod
    async def prepare(self, line_ids: Iterable[str]) -> None:
        """Prepare lines for upcoming dialogue (preload assets, fetch tables)."""

    def set_locale(self, locale: str) -> None:
        self.locale = locale

    def _localize(self, entry: LineEntry, substitutions: Sequence[str]) -> LocalizedLine:
        return LocalizedLine(
            text=apply_substitutions(entry.text, substitutions),
            line_id=entry.id,
            substitutions=list(substitutions),
            metadata=entry.metadata,
        )


class MapLineProvider(LineProvider):
    """
    In-memory line provider.

    Usage:
        provider = MapLineProvider({"greet": "Hello, {0}!"})
        provider.resolve("greet", ["Ayla"]).text  # "Hello, Ayla!"
    """

    def __init__(
        self,
        lines: Optional[Mapping[str, str | LineEntry]] = None,
        locale: str = "en-US",
        fallback_locale: str = "en-US",
    ):
        super().__init__(locale, fallback_locale)
        self._lines: dict[str, LineEntry] = {}
        for line_id, value in (lines or {}).items():
            if isinstance(value, LineEntry):
                self._lines[line_id] = value
            else:
                self._lines[line_id] = LineEntry(id=line_id, text=value)

    def resolve(
        self,
        line_id: str,
        substitutions: Sequence[str] = (),
    ) -> Optional[LocalizedLine]:
        entry = self._lines.get(line_id)
        if entry is None:
            return None
        return self._localize(entry, substitutions)

    async def prepare(self, line_ids: Iterable[str]) -> None:
        # Everything is already in memory
        return None

    def set_line(self, line_id: str, text: str, metadata: Optional[dict[str, str]] = None) -> None:
        """Add or update a line."""
        self._lines[line_id] = LineEntry(id=line_id, text=text, metadata=metadata)

    def load_entries(self, entries: Iterable[Mapping[str, str]]) -> int:
        """
        Load rows with 'id' and 'text' keys (e.g. from csv.DictReader).

        Returns:
            Number of entries loaded
        """
        count = 0
        for row in entries:
            self.set_line(row["id"], row["text"])
            count += 1
        return count

    def __contains__(self, line_id: str) -> bool:
        return line_id in self._lines
