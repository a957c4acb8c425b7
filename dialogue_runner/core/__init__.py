"""
Core dialogue runner module.

Exports:
- EventBus, Event, Subscription: Notification system
- VariableStorage and implementations: Durable variables
- RunnerConfig: Runner configuration
- DialogueError and subclasses: Error taxonomy
"""

from dialogue_runner.core.config import RunnerConfig
from dialogue_runner.core.errors import (
    DialogueError,
    ProgramFormatError,
    InvalidStateError,
    InvalidOptionError,
    LineTableError,
)
from dialogue_runner.core.events import EventBus, Event, Subscription
from dialogue_runner.core.variables import (
    VariableValue,
    VariableStorage,
    InMemoryVariableStorage,
    JsonFileVariableStorage,
    check_value,
)

__all__ = [
    # Config
    "RunnerConfig",
    # Errors
    "DialogueError",
    "ProgramFormatError",
    "InvalidStateError",
    "InvalidOptionError",
    "LineTableError",
    # Events
    "EventBus",
    "Event",
    "Subscription",
    # Variables
    "VariableValue",
    "VariableStorage",
    "InMemoryVariableStorage",
    "JsonFileVariableStorage",
    "check_value",
]
