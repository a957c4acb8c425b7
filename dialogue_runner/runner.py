"""
Dialogue runner - the execution control loop.

Drives a DialogueRuntime one step at a time and turns its events into
host notifications:

- Text        -> resolve localized text, notify LINE, pause
- OptionSet   -> resolve option texts, notify OPTIONS, pause for a choice
- Command     -> run through the CommandDispatcher, notify COMMAND
- NodeEntered -> notify NODE_START
- NodeExited  -> notify NODE_COMPLETE
- LinesNeeded -> forward to LineProvider.prepare()
- finished    -> notify DIALOGUE_COMPLETE once and stop

Usage:
    runner = DialogueRunner.with_defaults(DialogueTreeRuntime(tree))
    runner.subscribe(RunnerEvent.LINE, lambda e: print(e["text"]))
    await runner.start(tree.start_node_id)
    while not runner.state.finished:
        if runner.state.awaiting_choice:
            await runner.select_option(0)
        else:
            await runner.continue_dialogue()

The host owns pacing: after a LINE the runner stays paused until
continue_dialogue() is awaited. Calls must not overlap on one runner.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Optional

from dialogue_runner.commands.builtins import create_default_dispatcher
from dialogue_runner.commands.dispatcher import CommandContext, CommandDispatcher
from dialogue_runner.core.config import RunnerConfig
from dialogue_runner.core.errors import InvalidStateError
from dialogue_runner.core.events import EventBus, EventHandler, Subscription
from dialogue_runner.core.variables import (
    InMemoryVariableStorage,
    VariableStorage,
    VariableValue,
)
from dialogue_runner.lines.provider import LineProvider, MapLineProvider
from dialogue_runner.runtime.base import DialogueRuntime
from dialogue_runner.runtime.events import (
    RuntimeEvent,
    RuntimeEventType,
    TextEvent,
    OptionSetEvent,
    CommandEvent,
    NodeEnteredEvent,
    NodeExitedEvent,
    DialogueFinishedEvent,
    LinesNeededEvent,
)

logger = logging.getLogger(__name__)


class RunnerEvent(Enum):
    """Notifications published by the runner."""
    LINE = auto()               # line_id, text, substitutions, metadata
    OPTIONS = auto()            # options: [{index, line_id, text, enabled, destination}]
    COMMAND = auto()            # command, handled
    NODE_START = auto()         # node_id
    NODE_COMPLETE = auto()      # node_id
    DIALOGUE_COMPLETE = auto()


@dataclass
class RunnerState:
    """
    Execution state of the current run.

    Invariants:
        awaiting_choice implies running and not finished
        finished implies not running
    """
    active_node_id: Optional[str] = None
    running: bool = False
    awaiting_choice: bool = False
    finished: bool = False
    last_event: Optional[RuntimeEvent] = None


# Runtime event handler: returns True to pause the loop
_StepHandler = Callable[[Any], Awaitable[bool]]


class DialogueRunner:
    """
    Orchestrates the runtime, line provider, command dispatcher and
    variable storage.

    Collaborators are passed in explicitly; use with_defaults() for a
    runner with fresh in-memory defaults.
    """

    def __init__(
        self,
        runtime: DialogueRuntime,
        line_provider: LineProvider,
        command_dispatcher: CommandDispatcher,
        variable_storage: VariableStorage,
        config: Optional[RunnerConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.runtime = runtime
        self.line_provider = line_provider
        self.command_dispatcher = command_dispatcher
        self.variable_storage = variable_storage
        self.config = config or RunnerConfig()
        self.events = event_bus or EventBus()

        self._state = RunnerState()
        self._stopped = False

        # Single dispatch point for runtime events
        self._step_handlers: dict[RuntimeEventType, _StepHandler] = {
            RuntimeEventType.TEXT: self._handle_text,
            RuntimeEventType.OPTION_SET: self._handle_options,
            RuntimeEventType.COMMAND: self._handle_command,
            RuntimeEventType.NODE_ENTERED: self._handle_node_entered,
            RuntimeEventType.NODE_EXITED: self._handle_node_exited,
            RuntimeEventType.DIALOGUE_FINISHED: self._handle_finished,
            RuntimeEventType.LINES_NEEDED: self._handle_lines_needed,
        }
        missing = set(RuntimeEventType) - set(self._step_handlers)
        if missing:
            names = ", ".join(sorted(kind.name for kind in missing))
            raise TypeError(f"No runner handling for runtime events: {names}")

    @classmethod
    def with_defaults(
        cls,
        runtime: DialogueRuntime,
        config: Optional[RunnerConfig] = None,
        **overrides: Any,
    ) -> DialogueRunner:
        """
        Create a runner with freshly constructed default collaborators.

        Keyword overrides (line_provider, command_dispatcher,
        variable_storage, event_bus) replace individual defaults.
        """
        config = config or RunnerConfig()
        collaborators: dict[str, Any] = {
            "line_provider": MapLineProvider(),
            "command_dispatcher": create_default_dispatcher(config),
            "variable_storage": InMemoryVariableStorage(),
            "event_bus": None,
        }
        unknown = set(overrides) - set(collaborators)
        if unknown:
            raise TypeError(f"Unknown collaborators: {', '.join(sorted(unknown))}")
        collaborators.update(overrides)
        return cls(runtime, config=config, **collaborators)

    @property
    def state(self) -> RunnerState:
        """A snapshot of the execution state."""
        return dataclasses.replace(self._state)

    # Control

    async def start(self, node_id: str) -> None:
        """Start a run at node_id and step until the first pause."""
        self._stopped = False
        self._state = RunnerState(active_node_id=node_id, running=True)

        if self.config.reset_runtime_on_start:
            self.runtime.reset()

        # Durable variables seed the runtime's working set
        for name, value in self.variable_storage.get_all().items():
            self.runtime.set_variable(name, value)

        self.runtime.set_active_node(node_id)
        logger.info(f"Dialogue started at '{node_id}'")
        await self._run_until_pause()

    async def continue_dialogue(self) -> None:
        """Resume after a line has been shown."""
        if self._state.awaiting_choice:
            raise InvalidStateError("Cannot continue while waiting for option selection")
        if self._state.finished:
            raise InvalidStateError("Dialogue is already complete")
        if not self._state.running:
            raise InvalidStateError("Dialogue has not been started")

        await self._run_until_pause()

    async def select_option(self, index: int) -> None:
        """
        Resolve the pending option set and resume.

        Raises:
            InvalidStateError: If no option set is pending
            InvalidOptionError: If the runtime rejects the index
        """
        if not self._state.awaiting_choice:
            raise InvalidStateError("Not waiting for option selection")

        self.runtime.select_option(index)
        self._state.awaiting_choice = False
        await self._run_until_pause()

    def stop(self) -> None:
        """Halt the run. Safe to call any number of times."""
        self._stopped = True
        self._state.running = False
        self._state.awaiting_choice = False
        self._state.finished = True

    def reset(self) -> None:
        """Reset the runtime and execution state. Durable variables are kept."""
        self._stopped = False
        self.runtime.reset()
        self._state = RunnerState()

    # Variables

    def get_variable(self, name: str) -> Optional[VariableValue]:
        """Read a variable, preferring durable storage over the runtime."""
        if self.variable_storage.has(name):
            return self.variable_storage.get(name)
        return self.runtime.get_variable(name)

    def set_variable(self, name: str, value: VariableValue) -> None:
        """Write a variable to durable storage, then the runtime."""
        self.variable_storage.set(name, value)
        self.runtime.set_variable(name, value)

    # Notifications

    def subscribe(self, event_type: RunnerEvent, handler: EventHandler) -> Subscription:
        """Register a handler for one notification kind."""
        return self.events.subscribe(event_type, handler)

    def subscribe_all(self, handler: EventHandler) -> Subscription:
        """Register a handler for every notification kind."""
        return self.events.subscribe_many(RunnerEvent, handler)

    # Step loop

    async def _run_until_pause(self) -> None:
        while not self._stopped:
            event = self.runtime.step()
            if event is None:
                await self._complete()
                return

            logger.debug(f"Runtime event: {event}")
            pause = await self._step_handlers[event.kind](event)
            self._state.last_event = event

            if pause or self._stopped:
                return

            if self.runtime.is_finished():
                await self._complete()
                return

    async def _complete(self) -> None:
        if self._state.finished:
            return

        self._state.running = False
        self._state.awaiting_choice = False
        self._state.finished = True
        logger.info("Dialogue complete")
        await self.events.publish(RunnerEvent.DIALOGUE_COMPLETE)

    async def _handle_text(self, event: TextEvent) -> bool:
        line = self.line_provider.resolve(event.line_id, event.substitutions)
        if line is None:
            logger.warning(f"Missing localized line: {event.line_id}")
            text, metadata = self.config.missing_line_text(event.line_id), None
        else:
            text, metadata = line.text, line.metadata

        await self.events.publish(
            RunnerEvent.LINE,
            line_id=event.line_id,
            text=text,
            substitutions=list(event.substitutions),
            metadata=metadata,
        )
        return True

    async def _handle_options(self, event: OptionSetEvent) -> bool:
        self._state.awaiting_choice = True

        options = []
        for option in event.options:
            line = self.line_provider.resolve(option.line_id)
            if line is None:
                logger.warning(f"Missing localized option: {option.line_id}")
            options.append({
                "index": option.index,
                "line_id": option.line_id,
                "text": line.text if line else self.config.missing_line_text(option.line_id),
                "enabled": option.enabled,
                "destination": option.destination,
            })

        await self.events.publish(RunnerEvent.OPTIONS, options=options)
        return True

    async def _handle_command(self, event: CommandEvent) -> bool:
        context = CommandContext(
            get_variable=self.get_variable,
            set_variable=self.set_variable,
            stop=self.stop,
            # The loop resumes on its own once the handler returns
            continue_dialogue=lambda: None,
        )
        handled = await self.command_dispatcher.dispatch(event.text, context)
        await self.events.publish(RunnerEvent.COMMAND, command=event.text, handled=handled)
        return False

    async def _handle_node_entered(self, event: NodeEnteredEvent) -> bool:
        self._state.active_node_id = event.node_id
        await self.events.publish(RunnerEvent.NODE_START, node_id=event.node_id)
        return False

    async def _handle_node_exited(self, event: NodeExitedEvent) -> bool:
        await self.events.publish(RunnerEvent.NODE_COMPLETE, node_id=event.node_id)
        return False

    async def _handle_finished(self, event: DialogueFinishedEvent) -> bool:
        await self._complete()
        return True

    async def _handle_lines_needed(self, event: LinesNeededEvent) -> bool:
        await self.line_provider.prepare(list(event.line_ids))
        return False
