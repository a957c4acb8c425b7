"""
Command dispatcher - routes command lines to registered handlers.

A command line is a verb followed by whitespace-separated arguments;
single or double quotes group words into one argument:

    wait 1.5
    set $quest_dragon 'slain by the hero'
    camera pan "north gate"

Verbs are matched case-insensitively. Handlers receive the argument list
and a CommandContext, and may be plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from dialogue_runner.core.variables import VariableValue

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    """Capabilities a command handler may use while the runner waits on it."""
    get_variable: Callable[[str], Optional[VariableValue]]
    set_variable: Callable[[str, VariableValue], None]
    stop: Callable[[], None]
    continue_dialogue: Callable[[], None]


CommandHandler = Callable[[list[str], CommandContext], "None | Awaitable[None]"]


class QuotedArg(str):
    """An argument that was written in quotes. Compares like a plain str."""


# A quoted run ("..." or '...') or a bare run of non-space characters
TOKEN_PATTERN = re.compile(r'"([^"]*)"?|\'([^\']*)\'?|(\S+)')


def tokenize(text: str) -> list[str]:
    """
    Split a command line into tokens, stripping quotes.

    Quoted tokens are returned as QuotedArg so handlers can tell `"true"`
    from `true`.
    """
    tokens = []
    for match in TOKEN_PATTERN.finditer(text):
        double, single, bare = match.groups()
        if bare is not None:
            tokens.append(bare)
        elif double is not None:
            tokens.append(QuotedArg(double))
        else:
            tokens.append(QuotedArg(single))
    return tokens


def parse_command(text: str) -> Optional[tuple[str, list[str]]]:
    """
    Parse a command line into (verb, args).

    Returns:
        None for blank input
    """
    tokens = tokenize(text.strip())
    if not tokens:
        return None
    return tokens[0], tokens[1:]


class CommandDispatcher:
    """
    Dispatcher for dialogue commands like <<wait>>, <<camera>>, etc.

    Usage:
        dispatcher = CommandDispatcher()
        dispatcher.register("shake", shake_camera).register("fade", fade_out)
        handled = await dispatcher.dispatch("shake 0.5", context)
    """

    def __init__(self):
        self._handlers: dict[str, CommandHandler] = {}
        self._default_handler: Optional[CommandHandler] = None

    def register(self, command: str, handler: CommandHandler) -> CommandDispatcher:
        """Register a handler for a verb (replaces any existing one)."""
        self._handlers[command.lower()] = handler
        return self

    def unregister(self, command: str) -> CommandDispatcher:
        """Remove the handler for a verb."""
        self._handlers.pop(command.lower(), None)
        return self

    def set_default(self, handler: Optional[CommandHandler]) -> CommandDispatcher:
        """
        Set a fallback for unknown verbs.

        The fallback receives [verb, *args].
        """
        self._default_handler = handler
        return self

    def has_handler(self, command: str) -> bool:
        return command.lower() in self._handlers or self._default_handler is not None

    def registered_commands(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, text: str, context: CommandContext) -> bool:
        """
        Dispatch a command line.

        Returns:
            True if a handler (or the default handler) ran
        """
        parsed = parse_command(text)
        if parsed is None:
            return False

        command, args = parsed
        handler = self._handlers.get(command.lower())
        if handler is None:
            if self._default_handler is None:
                logger.warning(f"No handler for command: {text!r}")
                return False
            handler = self._default_handler
            args = [command, *args]

        result = handler(args, context)
        if inspect.isawaitable(result):
            await result
        return True
