"""
Runtime events - the discrete outputs of a dialogue runtime.

A runtime produces at most one of these per step() call. The set of
variants is closed: RuntimeEventType lists every kind, and each event
class carries its kind so consumers can dispatch on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class RuntimeEventType(Enum):
    """Kinds of runtime events."""
    TEXT = "line"
    OPTION_SET = "options"
    COMMAND = "command"
    NODE_ENTERED = "node_start"
    NODE_EXITED = "node_complete"
    DIALOGUE_FINISHED = "dialogue_complete"
    LINES_NEEDED = "prepare_for_lines"


@dataclass(frozen=True)
class OptionInfo:
    """A selectable option inside an OptionSetEvent."""
    index: int
    line_id: str
    enabled: bool = True
    destination: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.index,
            "lineId": self.line_id,
            "enabled": self.enabled,
        }
        if self.destination is not None:
            data["destinationNode"] = self.destination
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OptionInfo:
        return cls(
            index=int(data["id"]),
            line_id=str(data["lineId"]),
            enabled=bool(data.get("enabled", True)),
            destination=data.get("destinationNode"),
        )


@dataclass(frozen=True)
class TextEvent:
    """A line of dialogue to display."""
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.TEXT
    line_id: str
    substitutions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "lineId": self.line_id,
            "substitutions": list(self.substitutions),
        }


@dataclass(frozen=True)
class OptionSetEvent:
    """A set of options the player must choose from."""
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.OPTION_SET
    options: tuple[OptionInfo, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "options": [option.to_dict() for option in self.options],
        }


@dataclass(frozen=True)
class CommandEvent:
    """A raw command line for the command dispatcher."""
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.COMMAND
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class NodeEnteredEvent:
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.NODE_ENTERED
    node_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "nodeId": self.node_id}


@dataclass(frozen=True)
class NodeExitedEvent:
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.NODE_EXITED
    node_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "nodeId": self.node_id}


@dataclass(frozen=True)
class DialogueFinishedEvent:
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.DIALOGUE_FINISHED

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value}


@dataclass(frozen=True)
class LinesNeededEvent:
    """Advisory: these lines will be needed soon, preload them."""
    kind: ClassVar[RuntimeEventType] = RuntimeEventType.LINES_NEEDED
    line_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "lineIds": list(self.line_ids)}


RuntimeEvent = Union[
    TextEvent,
    OptionSetEvent,
    CommandEvent,
    NodeEnteredEvent,
    NodeExitedEvent,
    DialogueFinishedEvent,
    LinesNeededEvent,
]


def runtime_event_from_dict(data: dict[str, Any]) -> RuntimeEvent:
    """
    Build a runtime event from its serialized form.

    Raises:
        ValueError: If the type is unknown
        KeyError: If a required field is missing
    """
    kind = RuntimeEventType(data["type"])

    if kind is RuntimeEventType.TEXT:
        return TextEvent(
            line_id=str(data["lineId"]),
            substitutions=tuple(str(s) for s in data.get("substitutions", ())),
        )
    if kind is RuntimeEventType.OPTION_SET:
        return OptionSetEvent(
            options=tuple(OptionInfo.from_dict(o) for o in data["options"]),
        )
    if kind is RuntimeEventType.COMMAND:
        return CommandEvent(text=str(data["text"]))
    if kind is RuntimeEventType.NODE_ENTERED:
        return NodeEnteredEvent(node_id=str(data["nodeId"]))
    if kind is RuntimeEventType.NODE_EXITED:
        return NodeExitedEvent(node_id=str(data["nodeId"]))
    if kind is RuntimeEventType.DIALOGUE_FINISHED:
        return DialogueFinishedEvent()
    if kind is RuntimeEventType.LINES_NEEDED:
        return LinesNeededEvent(line_ids=tuple(str(i) for i in data["lineIds"]))

    raise ValueError(f"Unhandled runtime event type: {kind}")
