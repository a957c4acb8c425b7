"""
Built-in commands: wait, stop, set.
"""

from __future__ import annotations

import asyncio
import re
from typing import Optional

from dialogue_runner.commands.dispatcher import CommandContext, CommandDispatcher, QuotedArg
from dialogue_runner.core.config import RunnerConfig
from dialogue_runner.core.variables import VariableValue

NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


def parse_value(text: str) -> VariableValue:
    """
    Parse a command argument into a variable value.

    Quoted text (a QuotedArg, or text still wrapped in quotes) stays a
    string, true/false become bools, numeric literals become int or
    float, anything else is a bare string.
    """
    if isinstance(text, QuotedArg):
        return str(text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]

    if text == 'true':
        return True
    if text == 'false':
        return False

    if NUMBER_PATTERN.match(text):
        if re.match(r'^[+-]?\d+$', text):
            return int(text)
        return float(text)

    return text


def create_default_dispatcher(config: Optional[RunnerConfig] = None) -> CommandDispatcher:
    """Create a dispatcher with the built-in commands registered."""
    config = config or RunnerConfig()
    dispatcher = CommandDispatcher()

    async def wait(args: list[str], context: CommandContext) -> None:
        # <<wait 1.5>>
        seconds = parse_value(args[0]) if args else config.default_wait_seconds
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool) and seconds > 0:
            await asyncio.sleep(seconds)
        context.continue_dialogue()

    def stop(args: list[str], context: CommandContext) -> None:
        # <<stop>>
        context.stop()

    def set_variable(args: list[str], context: CommandContext) -> None:
        # <<set $gold 150>>
        if len(args) >= 2:
            name = args[0].lstrip('$')
            # Several words form one string value
            value = parse_value(args[1]) if len(args) == 2 else ' '.join(args[1:])
            context.set_variable(name, value)
        context.continue_dialogue()

    dispatcher.register('wait', wait)
    dispatcher.register('stop', stop)
    dispatcher.register('set', set_variable)
    return dispatcher
