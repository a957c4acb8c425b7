"""
File-backed line tables.

A line table is a JSON object stored as `<directory>/<locale>.json`:

```
{
  "greet": "Hello, {0}!",
  "farewell": {"text": "Safe travels.", "metadata": {"voice": "vo_017"}}
}
```

Tables are validated with a JSON schema when loaded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import jsonschema

from dialogue_runner.core.errors import LineTableError
from dialogue_runner.lines.provider import LineEntry, LineProvider, LocalizedLine

LINE_TABLE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {
                "type": "object",
                "required": ["text"],
                "properties": {
                    "text": {"type": "string"},
                    "metadata": {
                        "type": "object",
                        "additionalProperties": {"type": "string"},
                    },
                },
                "additionalProperties": False,
            },
        ]
    },
}


def parse_line_table(data: Any, source: str = "<table>") -> dict[str, LineEntry]:
    """
    Validate and convert raw table data to line entries.

    Raises:
        LineTableError: If the data does not match LINE_TABLE_SCHEMA
    """
    try:
        jsonschema.validate(instance=data, schema=LINE_TABLE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise LineTableError(f"Invalid line table {source}: {e.message}") from e

    entries = {}
    for line_id, value in data.items():
        if isinstance(value, str):
            entries[line_id] = LineEntry(id=line_id, text=value)
        else:
            entries[line_id] = LineEntry(
                id=line_id,
                text=value["text"],
                metadata=value.get("metadata"),
            )
    return entries


class FileLineProvider(LineProvider):
    """
    Line provider reading one JSON table per locale from a directory.

    Lines missing from the current locale are looked up in the fallback
    locale. A missing table file is logged and treated as empty; an
    invalid one raises LineTableError.
    """

    def __init__(
        self,
        directory: str | Path,
        locale: str = "en-US",
        fallback_locale: str = "en-US",
    ):
        super().__init__(locale, fallback_locale)
        self.directory = Path(directory)
        self.logger = logging.getLogger(__name__)
        self._tables: dict[str, dict[str, LineEntry]] = {}
        self._load_locale(locale)
        self._load_locale(fallback_locale)

    def _load_locale(self, locale: str) -> dict[str, LineEntry]:
        """Load (once) and return the table for a locale."""
        if locale in self._tables:
            return self._tables[locale]

        path = self.directory / f"{locale}.json"
        if not path.exists():
            self.logger.warning(f"Line table not found: {path}")
            self._tables[locale] = {}
            return self._tables[locale]

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LineTableError(f"Line table {path} is not valid JSON: {e}") from e

        table = parse_line_table(data, source=str(path))
        self._tables[locale] = table
        self.logger.info(f"Loaded {len(table)} lines for {locale} from {path}")
        return table

    def set_locale(self, locale: str) -> None:
        super().set_locale(locale)
        self._load_locale(locale)

    def resolve(
        self,
        line_id: str,
        substitutions: Sequence[str] = (),
    ) -> Optional[LocalizedLine]:
        for locale in (self.locale, self.fallback_locale):
            entry = self._load_locale(locale).get(line_id)
            if entry is not None:
                return self._localize(entry, substitutions)
        return None

    async def prepare(self, line_ids: Iterable[str]) -> None:
        self._load_locale(self.locale)
