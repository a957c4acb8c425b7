"""
Dialogue runtime module.

Exports:
- DialogueRuntime: Runtime contract
- DialogueTreeRuntime: Reference graph walker
- ScriptedRuntime: Event playback runtime
- RuntimeEvent variants and RuntimeEventType
- DialogueTree and node models, parse_program, load_program_file
"""

from dialogue_runner.runtime.base import DialogueRuntime
from dialogue_runner.runtime.events import (
    RuntimeEvent,
    RuntimeEventType,
    OptionInfo,
    TextEvent,
    OptionSetEvent,
    CommandEvent,
    NodeEnteredEvent,
    NodeExitedEvent,
    DialogueFinishedEvent,
    LinesNeededEvent,
    runtime_event_from_dict,
)
from dialogue_runner.runtime.program import (
    DialogueTree,
    NpcNode,
    PlayerNode,
    PlayerChoice,
    parse_program,
    load_program_file,
    dump_program,
)
from dialogue_runner.runtime.scripted import ScriptedRuntime
from dialogue_runner.runtime.tree import DialogueTreeRuntime, TreeState

__all__ = [
    # Contract
    "DialogueRuntime",
    # Implementations
    "DialogueTreeRuntime",
    "TreeState",
    "ScriptedRuntime",
    # Events
    "RuntimeEvent",
    "RuntimeEventType",
    "OptionInfo",
    "TextEvent",
    "OptionSetEvent",
    "CommandEvent",
    "NodeEnteredEvent",
    "NodeExitedEvent",
    "DialogueFinishedEvent",
    "LinesNeededEvent",
    "runtime_event_from_dict",
    # Program
    "DialogueTree",
    "NpcNode",
    "PlayerNode",
    "PlayerChoice",
    "parse_program",
    "load_program_file",
    "dump_program",
]
