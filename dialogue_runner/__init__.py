"""
Dialogue runner - branching dialogue execution for interactive narrative.

Exports:
- DialogueRunner, RunnerEvent, RunnerState: Execution control loop
- DialogueRuntime, DialogueTreeRuntime, ScriptedRuntime: Runtimes
- CommandDispatcher, create_default_dispatcher: Commands
- LineProvider, MapLineProvider, FileLineProvider, HttpLineProvider: Lines
- VariableStorage and implementations: Durable variables
- RunnerConfig and the error taxonomy
"""

from dialogue_runner.commands import (
    CommandContext,
    CommandDispatcher,
    create_default_dispatcher,
)
from dialogue_runner.core import (
    RunnerConfig,
    DialogueError,
    ProgramFormatError,
    InvalidStateError,
    InvalidOptionError,
    LineTableError,
    EventBus,
    Event,
    Subscription,
    VariableValue,
    VariableStorage,
    InMemoryVariableStorage,
    JsonFileVariableStorage,
)
from dialogue_runner.lines import (
    LineProvider,
    LocalizedLine,
    MapLineProvider,
    FileLineProvider,
    HttpLineProvider,
)
from dialogue_runner.runner import DialogueRunner, RunnerEvent, RunnerState
from dialogue_runner.runtime import (
    DialogueRuntime,
    DialogueTreeRuntime,
    ScriptedRuntime,
    DialogueTree,
    load_program_file,
    parse_program,
)

__version__ = "0.1.0"

__all__ = [
    # Runner
    "DialogueRunner",
    "RunnerEvent",
    "RunnerState",
    # Runtimes
    "DialogueRuntime",
    "DialogueTreeRuntime",
    "ScriptedRuntime",
    "DialogueTree",
    "load_program_file",
    "parse_program",
    # Commands
    "CommandContext",
    "CommandDispatcher",
    "create_default_dispatcher",
    # Lines
    "LineProvider",
    "LocalizedLine",
    "MapLineProvider",
    "FileLineProvider",
    "HttpLineProvider",
    # Core
    "RunnerConfig",
    "DialogueError",
    "ProgramFormatError",
    "InvalidStateError",
    "InvalidOptionError",
    "LineTableError",
    "EventBus",
    "Event",
    "Subscription",
    "VariableValue",
    "VariableStorage",
    "InMemoryVariableStorage",
    "JsonFileVariableStorage",
]
