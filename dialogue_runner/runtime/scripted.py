"""
Scripted runtime - replays a fixed sequence of runtime events.

Useful as a stand-in backend for hosts and tests that want to drive the
runner with exact event sequences (commands, lines, options) without
authoring a graph.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional, get_args

from dialogue_runner.core.errors import InvalidOptionError, ProgramFormatError
from dialogue_runner.core.variables import VariableValue, check_value
from dialogue_runner.runtime.base import DialogueRuntime
from dialogue_runner.runtime.events import (
    RuntimeEvent,
    OptionSetEvent,
    DialogueFinishedEvent,
    runtime_event_from_dict,
)

EVENT_CLASSES = get_args(RuntimeEvent)


class ScriptedRuntime(DialogueRuntime):
    """
    Plays back events in order.

    An OptionSetEvent pauses playback until select_option() picks one of
    its options; the selected index is recorded in `selections`. Running
    out of events or reaching a DialogueFinishedEvent finishes the run.
    """

    def __init__(self, events: Iterable[RuntimeEvent] = ()):
        self._events: list[RuntimeEvent] = list(events)
        self._index = 0
        self._finished = False
        self._pending_options: Optional[OptionSetEvent] = None
        self._variables: dict[str, VariableValue] = {}
        self.selections: list[int] = []
        self.active_node: Optional[str] = None

    def load(self, program: Any) -> None:
        """Load a JSON array (text or bytes) or a list of serialized events."""
        try:
            if isinstance(program, (bytes, bytearray)):
                program = bytes(program).decode('utf-8')
            if isinstance(program, str):
                program = json.loads(program)
            if not isinstance(program, list):
                raise ProgramFormatError("Scripted program must be a list of events")
            events = [_decode_event(event) for event in program]
        except ProgramFormatError:
            raise
        except (UnicodeDecodeError, KeyError, ValueError, TypeError) as e:
            raise ProgramFormatError(f"Invalid scripted program: {e}") from e

        self._events = events
        self.reset()

    def set_active_node(self, node_id: str) -> None:
        self.active_node = node_id
        self._index = 0
        self._finished = False
        self._pending_options = None

    def step(self) -> Optional[RuntimeEvent]:
        if self._finished or self._pending_options is not None:
            return None

        if self._index >= len(self._events):
            self._finished = True
            return None

        event = self._events[self._index]
        self._index += 1

        if isinstance(event, OptionSetEvent):
            self._pending_options = event
        elif isinstance(event, DialogueFinishedEvent):
            self._finished = True

        return event

    def select_option(self, index: int) -> None:
        if self._pending_options is None:
            raise InvalidOptionError("Not currently waiting for an option")

        indices = {option.index for option in self._pending_options.options}
        if index not in indices:
            raise InvalidOptionError(f"Invalid option {index}")

        self.selections.append(index)
        self._pending_options = None

    def get_variable(self, name: str) -> Optional[VariableValue]:
        return self._variables.get(name)

    def set_variable(self, name: str, value: VariableValue) -> None:
        self._variables[name] = check_value(name, value)

    def variable_names(self) -> list[str]:
        return list(self._variables)

    def is_awaiting_choice(self) -> bool:
        return self._pending_options is not None

    def is_finished(self) -> bool:
        return self._finished

    def reset(self) -> None:
        self._index = 0
        self._finished = False
        self._pending_options = None
        self._variables.clear()
        self.selections.clear()
        self.active_node = None


def _decode_event(entry: Any) -> RuntimeEvent:
    if isinstance(entry, EVENT_CLASSES):
        return entry
    if isinstance(entry, dict):
        return runtime_event_from_dict(entry)
    raise ProgramFormatError(f"Not a runtime event: {entry!r}")
