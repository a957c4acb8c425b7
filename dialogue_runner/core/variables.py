"""
Variable storage - durable home of dialogue variables.

Provides:
- VariableStorage interface (get/set/has/delete/clear/names)
- In-memory storage for tests and throwaway runs
- JSON file storage that survives across sessions

Values are restricted to str, int, float and bool.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

VariableValue = Union[str, int, float, bool]


def check_value(name: str, value: object) -> VariableValue:
    """Ensure a variable value is a supported scalar."""
    if not isinstance(name, str) or not name:
        raise TypeError(f"Variable name must be a non-empty string, got {name!r}")
    if not isinstance(value, (str, int, float, bool)):
        raise TypeError(
            f"Variable '{name}' must be str, int, float or bool, "
            f"got {type(value).__name__}"
        )
    return value


class VariableStorage(ABC):
    """
    Interface for durable variable storage.

    Implementations are synchronous: a set() is visible to the next get()
    on any reference to the same storage object.
    """

    @abstractmethod
    def get(self, name: str) -> Optional[VariableValue]:
        """Get a variable value, or None if unset."""

    @abstractmethod
    def set(self, name: str, value: VariableValue) -> None:
        """Set a variable value."""

    @abstractmethod
    def has(self, name: str) -> bool:
        """Check whether a variable is set."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove a variable. Returns True if it existed."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all variables."""

    @abstractmethod
    def get_all(self) -> dict[str, VariableValue]:
        """Get a copy of all variables."""

    def names(self) -> list[str]:
        """Get all variable names."""
        return list(self.get_all())

    def __contains__(self, name: str) -> bool:
        return self.has(name)


class InMemoryVariableStorage(VariableStorage):
    """Simple dict-backed storage."""

    def __init__(self, initial: Optional[Mapping[str, VariableValue]] = None):
        self._variables: dict[str, VariableValue] = {}
        for name, value in (initial or {}).items():
            self._variables[name] = check_value(name, value)

    def get(self, name: str) -> Optional[VariableValue]:
        return self._variables.get(name)

    def set(self, name: str, value: VariableValue) -> None:
        self._variables[name] = check_value(name, value)

    def has(self, name: str) -> bool:
        return name in self._variables

    def delete(self, name: str) -> bool:
        return self._variables.pop(name, None) is not None

    def clear(self) -> None:
        self._variables.clear()

    def get_all(self) -> dict[str, VariableValue]:
        return dict(self._variables)


class JsonFileVariableStorage(VariableStorage):
    """
    Storage persisted to a JSON file.

    The file is read once on construction and rewritten after every
    mutation. A missing file starts empty; a corrupt one is logged and
    also starts empty (it is overwritten on the next write).

    Usage:
        storage = JsonFileVariableStorage("saves/variables.json")
        storage.set("stat_gold", 150)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._cache: dict[str, VariableValue] = self._load()

    def _load(self) -> dict[str, VariableValue]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read variables from {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring variables file {self.path}: expected a JSON object")
            return {}

        variables = {}
        for name, value in data.items():
            if isinstance(value, (str, int, float, bool)):
                variables[name] = value
            else:
                logger.warning(f"Skipping non-scalar variable '{name}' in {self.path}")
        return variables

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self._cache, f, indent=2)

    def get(self, name: str) -> Optional[VariableValue]:
        return self._cache.get(name)

    def set(self, name: str, value: VariableValue) -> None:
        self._cache[name] = check_value(name, value)
        self._save()

    def has(self, name: str) -> bool:
        return name in self._cache

    def delete(self, name: str) -> bool:
        if name not in self._cache:
            return False
        del self._cache[name]
        self._save()
        return True

    def clear(self) -> None:
        self._cache.clear()
        self._save()

    def get_all(self) -> dict[str, VariableValue]:
        return dict(self._cache)
