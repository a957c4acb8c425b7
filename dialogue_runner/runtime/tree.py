"""
Tree runtime - reference graph-walking implementation of DialogueRuntime.

Walks a DialogueTree node by node. Per node visit it emits:

    NPC node:     NodeEntered, LinesNeeded([line]), Text(line), NodeExited
    PLAYER node:  NodeEntered, LinesNeeded(option lines), OptionSet
                  ... select_option(i) ...  NodeExited

then moves to the node's (or chosen option's) next id. A missing next id
or a position that names no node ends the dialogue with a single
DialogueFinished.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from dialogue_runner.core.errors import InvalidOptionError
from dialogue_runner.core.variables import VariableValue, check_value
from dialogue_runner.runtime.base import DialogueRuntime
from dialogue_runner.runtime.events import (
    RuntimeEvent,
    TextEvent,
    OptionInfo,
    OptionSetEvent,
    NodeEnteredEvent,
    NodeExitedEvent,
    DialogueFinishedEvent,
    LinesNeededEvent,
)
from dialogue_runner.runtime.program import (
    DialogueTree,
    NpcNode,
    PlayerChoice,
    PlayerNode,
    parse_program,
)

logger = logging.getLogger(__name__)


class TreeState(Enum):
    """Position of the walker inside the node lifecycle."""
    NOT_STARTED = auto()     # Loaded, nothing emitted yet
    NODE_ENTERING = auto()   # About to announce the current node
    NODE_BODY = auto()       # Announced, body not yet emitted
    AWAITING_CHOICE = auto() # Options shown, waiting for select_option
    ADVANCING = auto()       # Draining buffered body events
    FINISHED = auto()        # DialogueFinished emitted


@dataclass
class _OptionCache:
    """Choices offered by the node currently awaiting a selection."""
    node_id: str
    choices: list[PlayerChoice]


class DialogueTreeRuntime(DialogueRuntime):
    """
    Runs a DialogueTree one event at a time.

    Usage:
        runtime = DialogueTreeRuntime(tree)
        while (event := runtime.step()) is not None:
            if runtime.is_awaiting_choice():
                runtime.select_option(0)
    """

    def __init__(self, tree: Optional[DialogueTree | Any] = None):
        self._tree: Optional[DialogueTree] = None
        self._variables: dict[str, VariableValue] = {}

        # Walk state
        self._state = TreeState.NOT_STARTED
        self._current_node_id: Optional[str] = None
        self._pending_events: deque[RuntimeEvent] = deque()
        self._pending_next_node_id: Optional[str] = None
        self._visited: set[str] = set()
        self._option_cache: Optional[_OptionCache] = None

        if tree is not None:
            self.load(tree)

    @property
    def tree(self) -> Optional[DialogueTree]:
        return self._tree

    @property
    def state(self) -> TreeState:
        return self._state

    @property
    def current_node_id(self) -> Optional[str]:
        return self._current_node_id

    # Contract

    def load(self, program: Any) -> None:
        tree = parse_program(program)
        self._tree = tree
        self.reset()
        logger.info(f"Loaded dialogue '{tree.id}' ({len(tree.nodes)} nodes)")

    def set_active_node(self, node_id: str) -> None:
        self._current_node_id = node_id
        self._pending_events.clear()
        self._pending_next_node_id = None
        self._option_cache = None
        self._state = TreeState.NODE_ENTERING

    def step(self) -> Optional[RuntimeEvent]:
        if self._state in (TreeState.FINISHED, TreeState.AWAITING_CHOICE):
            return None

        if not self._pending_events:
            self._populate_events()

        if not self._pending_events:
            return None

        event = self._pending_events.popleft()

        if isinstance(event, OptionSetEvent):
            self._state = TreeState.AWAITING_CHOICE
        elif isinstance(event, NodeEnteredEvent):
            self._state = TreeState.NODE_BODY
        elif isinstance(event, NodeExitedEvent):
            self._current_node_id = self._pending_next_node_id
            self._pending_next_node_id = None
            self._state = TreeState.NODE_ENTERING
        elif isinstance(event, DialogueFinishedEvent):
            self._state = TreeState.FINISHED

        return event

    def select_option(self, index: int) -> None:
        cache = self._option_cache
        if cache is None or self._state != TreeState.AWAITING_CHOICE:
            raise InvalidOptionError("Not currently waiting for an option")

        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidOptionError(f"Option index must be an int, got {index!r}")
        if not 0 <= index < len(cache.choices):
            raise InvalidOptionError(
                f"Invalid option {index} (node '{cache.node_id}' offers {len(cache.choices)})"
            )

        choice = cache.choices[index]
        if not choice.enabled:
            raise InvalidOptionError(f"Option {index} ('{choice.id}') is disabled")

        self._pending_next_node_id = choice.next_node_id
        self._pending_events.append(NodeExitedEvent(node_id=cache.node_id))
        self._option_cache = None
        self._state = TreeState.ADVANCING

    def get_variable(self, name: str) -> Optional[VariableValue]:
        return self._variables.get(name)

    def set_variable(self, name: str, value: VariableValue) -> None:
        self._variables[name] = check_value(name, value)

    def variable_names(self) -> list[str]:
        return list(self._variables)

    def is_awaiting_choice(self) -> bool:
        return self._state == TreeState.AWAITING_CHOICE

    def is_finished(self) -> bool:
        return self._state == TreeState.FINISHED

    def reset(self) -> None:
        self._current_node_id = self._tree.start_node_id if self._tree else None
        self._pending_events.clear()
        self._pending_next_node_id = None
        self._visited.clear()
        self._option_cache = None
        self._variables.clear()
        self._state = TreeState.NOT_STARTED

    # Node lifecycle

    def _populate_events(self) -> None:
        """Buffer the next events for the current position."""
        node = self._tree.get_node(self._current_node_id) if self._tree else None
        if node is None:
            if self._current_node_id is not None:
                logger.debug(f"Node '{self._current_node_id}' not found, finishing")
            self._pending_events.append(DialogueFinishedEvent())
            return

        if node.id not in self._visited:
            self._visited.add(node.id)
            self._pending_events.append(NodeEnteredEvent(node_id=node.id))
            return

        if isinstance(node, NpcNode):
            self._populate_npc(node)
        elif isinstance(node, PlayerNode):
            self._populate_player(node)
        else:
            raise TypeError(f"Unhandled node type: {type(node).__name__}")

        self._state = TreeState.ADVANCING

    def _populate_npc(self, node: NpcNode) -> None:
        line_id = node.resolved_line_id
        self._pending_next_node_id = node.next_node_id
        self._pending_events.extend([
            LinesNeededEvent(line_ids=(line_id,)),
            TextEvent(line_id=line_id, substitutions=tuple(node.substitutions)),
            NodeExitedEvent(node_id=node.id),
        ])

    def _populate_player(self, node: PlayerNode) -> None:
        if not any(choice.enabled for choice in node.choices):
            # Nothing selectable: leave the node and end the dialogue
            logger.debug(f"Node '{node.id}' has no enabled choices, finishing")
            self._pending_next_node_id = None
            self._pending_events.append(NodeExitedEvent(node_id=node.id))
            return

        options = tuple(
            OptionInfo(
                index=i,
                line_id=choice.resolved_line_id,
                enabled=choice.enabled,
                destination=choice.next_node_id,
            )
            for i, choice in enumerate(node.choices)
        )
        self._pending_events.extend([
            LinesNeededEvent(line_ids=tuple(option.line_id for option in options)),
            OptionSetEvent(options=options),
        ])
        self._option_cache = _OptionCache(node_id=node.id, choices=list(node.choices))
