"""
Dialogue runtime contract.

A runtime owns the position inside a dialogue program and turns it into
a stream of RuntimeEvents, one per step() call. The runner only talks to
runtimes through this interface, so graph walkers, bytecode VMs and
scripted test doubles are interchangeable.

State machine every runtime follows:

    load()/reset()  ->  stepping  --OptionSetEvent-->  awaiting choice
                          ^  |                              |
                          |  +--DialogueFinishedEvent--> finished
                          +------- select_option() ---------+

While awaiting a choice step() returns None. After finishing, step()
returns None until reset(), load() or set_active_node() reopens a run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from dialogue_runner.core.variables import VariableValue
from dialogue_runner.runtime.events import RuntimeEvent


class DialogueRuntime(ABC):
    """
    Base class for all dialogue runtimes.

    Override every abstract method. Variable accessors operate on the
    runtime's transient working set only; durable storage is the
    runner's concern.
    """

    @abstractmethod
    def load(self, program: Any) -> None:
        """
        Replace the executable program and reset to its start point.

        Raises:
            ProgramFormatError: If the program cannot be parsed
        """

    @abstractmethod
    def set_active_node(self, node_id: str) -> None:
        """
        Jump to a named node.

        Clears buffered events and any pending option set. Unknown nodes
        are not rejected here; how they surface is up to the runtime.
        """

    @abstractmethod
    def step(self) -> Optional[RuntimeEvent]:
        """Advance by exactly one event, or return None if there is none."""

    @abstractmethod
    def select_option(self, index: int) -> None:
        """
        Resolve the pending option set.

        Raises:
            InvalidOptionError: If nothing is pending or index is invalid
        """

    @abstractmethod
    def get_variable(self, name: str) -> Optional[VariableValue]:
        """Get a working-set variable."""

    @abstractmethod
    def set_variable(self, name: str, value: VariableValue) -> None:
        """Set a working-set variable."""

    @abstractmethod
    def variable_names(self) -> list[str]:
        """Names of all working-set variables."""

    @abstractmethod
    def is_awaiting_choice(self) -> bool:
        """True while an option set is pending."""

    @abstractmethod
    def is_finished(self) -> bool:
        """True once the dialogue has finished."""

    @abstractmethod
    def reset(self) -> None:
        """Reinitialize to the program start, clearing all transient state."""
