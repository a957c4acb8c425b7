import pytest

from dialogue_runner.commands import (
    CommandContext,
    CommandDispatcher,
    QuotedArg,
    create_default_dispatcher,
    parse_command,
    parse_value,
    tokenize,
)
from dialogue_runner.core import InMemoryVariableStorage, RunnerConfig


class RecordingContext:
    """Builds a CommandContext over a plain storage and records stop calls."""

    def __init__(self, **initial):
        self.storage = InMemoryVariableStorage(initial)
        self.stopped = 0
        self.continued = 0
        self.context = CommandContext(
            get_variable=self.storage.get,
            set_variable=self.storage.set,
            stop=self._stop,
            continue_dialogue=self._continue,
        )

    def _stop(self):
        self.stopped += 1

    def _continue(self):
        self.continued += 1


def test_tokenize_respects_quotes():
    assert tokenize('camera pan "north gate" fast') == ["camera", "pan", "north gate", "fast"]
    assert tokenize("set $quest 'slain by hero'") == ["set", "$quest", "slain by hero"]
    assert tokenize("  spaced   out  ") == ["spaced", "out"]
    assert tokenize("say \"unterminated quote") == ["say", "unterminated quote"]


def test_parse_command():
    assert parse_command("wait 1.5") == ("wait", ["1.5"])
    assert parse_command("   ") is None


@pytest.mark.parametrize("text,expected", [
    ("true", True),
    ("false", False),
    ("150", 150),
    ("-3", -3),
    ("1.5", 1.5),
    ("'quoted'", "quoted"),
    ('"true"', "true"),
    ("dragon", "dragon"),
    ("12abc", "12abc"),
])
def test_parse_value(text, expected):
    value = parse_value(text)
    assert value == expected
    assert type(value) is type(expected)


@pytest.mark.asyncio
async def test_dispatch_is_case_insensitive():
    calls = []
    dispatcher = CommandDispatcher().register("Shake", lambda args, ctx: calls.append(args))
    recorder = RecordingContext()

    assert await dispatcher.dispatch("SHAKE 0.5 hard", recorder.context)
    assert calls == [["0.5", "hard"]]
    assert dispatcher.has_handler("shake")
    assert dispatcher.registered_commands() == ["shake"]


@pytest.mark.asyncio
async def test_unknown_command_not_handled():
    dispatcher = CommandDispatcher()
    recorder = RecordingContext()

    assert not await dispatcher.dispatch("dance wildly", recorder.context)
    assert not await dispatcher.dispatch("", recorder.context)
    assert not dispatcher.has_handler("dance")


@pytest.mark.asyncio
async def test_default_handler_receives_verb():
    calls = []
    dispatcher = CommandDispatcher().set_default(lambda args, ctx: calls.append(args))

    assert await dispatcher.dispatch("dance wildly", RecordingContext().context)
    assert calls == [["dance", "wildly"]]


@pytest.mark.asyncio
async def test_async_handler_awaited():
    calls = []

    async def handler(args, ctx):
        calls.append(args)

    dispatcher = CommandDispatcher().register("fade", handler)
    await dispatcher.dispatch("fade out", RecordingContext().context)

    assert calls == [["out"]]


@pytest.mark.asyncio
async def test_unregister():
    dispatcher = CommandDispatcher().register("fade", lambda a, c: None)
    dispatcher.unregister("FADE")

    assert not await dispatcher.dispatch("fade", RecordingContext().context)


@pytest.mark.asyncio
async def test_builtin_set_writes_through_context():
    dispatcher = create_default_dispatcher()
    recorder = RecordingContext(stat_gold=100)

    await dispatcher.dispatch("set $stat_gold 150", recorder.context)
    await dispatcher.dispatch("set $quest_dragon 'complete'", recorder.context)
    await dispatcher.dispatch("set $met_king true", recorder.context)

    assert recorder.storage.get("stat_gold") == 150
    assert recorder.storage.get("quest_dragon") == "complete"
    assert recorder.storage.get("met_king") is True
    assert recorder.continued == 3


@pytest.mark.asyncio
async def test_builtin_stop():
    recorder = RecordingContext()
    await create_default_dispatcher().dispatch("stop", recorder.context)

    assert recorder.stopped == 1


@pytest.mark.asyncio
async def test_builtin_wait_sleeps(monkeypatch):
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr("dialogue_runner.commands.builtins.asyncio.sleep", fake_sleep)
    dispatcher = create_default_dispatcher(RunnerConfig(default_wait_seconds=2.0))
    recorder = RecordingContext()

    await dispatcher.dispatch("wait 1.5", recorder.context)
    await dispatcher.dispatch("wait", recorder.context)
    await dispatcher.dispatch("wait soon", recorder.context)

    assert slept == [1.5, 2.0]
    assert recorder.continued == 3


@pytest.mark.asyncio
async def test_builtin_set_keeps_quoted_values_as_strings():
    dispatcher = create_default_dispatcher()
    recorder = RecordingContext()

    await dispatcher.dispatch('set $flag "true"', recorder.context)
    await dispatcher.dispatch("set $code '150'", recorder.context)
    await dispatcher.dispatch("set $motto slay the dragon", recorder.context)

    assert recorder.storage.get("flag") == "true"
    assert recorder.storage.get("code") == "150"
    assert recorder.storage.get("motto") == "slay the dragon"


def test_tokenize_marks_quoted_arguments():
    tokens = tokenize('set $flag "true" false')

    assert tokens == ["set", "$flag", "true", "false"]
    assert isinstance(tokens[2], QuotedArg)
    assert not isinstance(tokens[3], QuotedArg)
    assert parse_value(tokens[2]) == "true"
    assert parse_value(tokens[3]) is False
