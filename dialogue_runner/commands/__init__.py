"""
Command module - routes dialogue commands to handlers.

Exports:
- CommandDispatcher, CommandContext, CommandHandler
- parse_command, tokenize, QuotedArg: Command line parsing
- create_default_dispatcher, parse_value: Built-in wait/stop/set
"""

from dialogue_runner.commands.dispatcher import (
    CommandDispatcher,
    CommandContext,
    CommandHandler,
    QuotedArg,
    parse_command,
    tokenize,
)
from dialogue_runner.commands.builtins import create_default_dispatcher, parse_value

__all__ = [
    "CommandDispatcher",
    "CommandContext",
    "CommandHandler",
    "QuotedArg",
    "parse_command",
    "tokenize",
    "create_default_dispatcher",
    "parse_value",
]
