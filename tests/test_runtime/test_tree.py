import json

import pytest

from dialogue_runner.core.errors import InvalidOptionError, ProgramFormatError
from dialogue_runner.runtime import (
    DialogueTreeRuntime,
    TreeState,
    TextEvent,
    OptionInfo,
    OptionSetEvent,
    NodeEnteredEvent,
    NodeExitedEvent,
    DialogueFinishedEvent,
    LinesNeededEvent,
    RuntimeEventType,
)


def collect_events(runtime):
    events = []
    while not runtime.is_finished():
        event = runtime.step()
        if event is None:
            break
        events.append(event)
    return events


def test_linear_chain_event_order(tree_runtime):
    events = collect_events(tree_runtime)

    assert [event.kind for event in events] == [
        RuntimeEventType.NODE_ENTERED,
        RuntimeEventType.LINES_NEEDED,
        RuntimeEventType.TEXT,
        RuntimeEventType.NODE_EXITED,
        RuntimeEventType.NODE_ENTERED,
        RuntimeEventType.LINES_NEEDED,
        RuntimeEventType.TEXT,
        RuntimeEventType.NODE_EXITED,
        RuntimeEventType.DIALOGUE_FINISHED,
    ]
    assert events[0] == NodeEnteredEvent(node_id="A")
    assert events[1] == LinesNeededEvent(line_ids=("A",))
    assert [e.line_id for e in events if isinstance(e, TextEvent)] == ["A", "B"]
    assert tree_runtime.is_finished()


def test_finished_emitted_once(tree_runtime):
    events = collect_events(tree_runtime)

    assert events.count(DialogueFinishedEvent()) == 1
    assert tree_runtime.step() is None
    assert tree_runtime.step() is None


def test_choice_branching(shop_program):
    runtime = DialogueTreeRuntime(shop_program)

    assert runtime.step() == NodeEnteredEvent(node_id="menu")
    assert runtime.step() == LinesNeededEvent(line_ids=("buy", "chat"))

    options = runtime.step()
    assert options == OptionSetEvent(options=(
        OptionInfo(index=0, line_id="buy", enabled=True, destination="X"),
        OptionInfo(index=1, line_id="chat", enabled=True, destination="Y"),
    ))
    assert runtime.is_awaiting_choice()
    assert runtime.state == TreeState.AWAITING_CHOICE

    # Nothing more until a choice is made
    assert runtime.step() is None

    runtime.select_option(1)
    remaining = collect_events(runtime)

    assert remaining[0] == NodeExitedEvent(node_id="menu")
    assert remaining[1] == NodeEnteredEvent(node_id="Y")
    visited = {e.node_id for e in remaining if isinstance(e, NodeEnteredEvent)}
    assert visited == {"Y"}
    assert remaining[-1] == DialogueFinishedEvent()


def test_select_option_invalid_index_does_not_move(shop_program):
    runtime = DialogueTreeRuntime(shop_program)
    for _ in range(3):
        runtime.step()

    with pytest.raises(InvalidOptionError):
        runtime.select_option(5)
    with pytest.raises(InvalidOptionError):
        runtime.select_option(-1)

    assert runtime.is_awaiting_choice()
    assert runtime.current_node_id == "menu"

    runtime.select_option(0)
    assert runtime.step() == NodeExitedEvent(node_id="menu")
    assert runtime.step() == NodeEnteredEvent(node_id="X")


def test_select_option_without_pending_options(tree_runtime):
    with pytest.raises(InvalidOptionError):
        tree_runtime.select_option(0)


def test_disabled_option_rejected():
    runtime = DialogueTreeRuntime({
        "id": "gate",
        "startNodeId": "ask",
        "nodes": {
            "ask": {
                "type": "PLAYER",
                "choices": [
                    {"id": "bribe", "text": "Bribe", "enabled": False},
                    {"id": "leave", "text": "Leave"},
                ],
            },
        },
    })
    events = [runtime.step(), runtime.step(), runtime.step()]
    assert events[2].options[0].enabled is False

    with pytest.raises(InvalidOptionError):
        runtime.select_option(0)

    runtime.select_option(1)
    assert collect_events(runtime) == [NodeExitedEvent(node_id="ask"), DialogueFinishedEvent()]


def test_choice_node_without_enabled_choices_ends_dialogue():
    runtime = DialogueTreeRuntime({
        "id": "empty",
        "startNodeId": "ask",
        "nodes": {"ask": {"type": "PLAYER", "choices": []}},
    })

    assert collect_events(runtime) == [
        NodeEnteredEvent(node_id="ask"),
        NodeExitedEvent(node_id="ask"),
        DialogueFinishedEvent(),
    ]


def test_unknown_active_node_finishes_lazily(tree_runtime):
    tree_runtime.set_active_node("nowhere")

    assert not tree_runtime.is_finished()
    assert tree_runtime.step() == DialogueFinishedEvent()
    assert tree_runtime.is_finished()
    assert tree_runtime.step() is None


def test_set_active_node_clears_pending_options(shop_program):
    runtime = DialogueTreeRuntime(shop_program)
    for _ in range(3):
        runtime.step()
    assert runtime.is_awaiting_choice()

    runtime.set_active_node("Y")

    assert not runtime.is_awaiting_choice()
    with pytest.raises(InvalidOptionError):
        runtime.select_option(0)
    assert runtime.step() == NodeEnteredEvent(node_id="Y")


def test_revisited_node_enters_once_per_run():
    runtime = DialogueTreeRuntime({
        "id": "loop",
        "startNodeId": "hub",
        "nodes": {
            "hub": {
                "type": "PLAYER",
                "choices": [
                    {"id": "again", "text": "Again", "nextNodeId": "hub"},
                    {"id": "done", "text": "Done"},
                ],
            },
        },
    })
    for _ in range(3):
        runtime.step()
    runtime.select_option(0)

    assert runtime.step() == NodeExitedEvent(node_id="hub")
    assert runtime.step() == LinesNeededEvent(line_ids=("again", "done"))

    runtime.step()
    runtime.reset()
    assert runtime.step() == NodeEnteredEvent(node_id="hub")


def test_substitutions_and_line_ids():
    runtime = DialogueTreeRuntime({
        "id": "greet",
        "startNodeId": "hello",
        "nodes": {
            "hello": {
                "type": "NPC",
                "content": "Hello, {0}!",
                "lineId": "line:hello",
                "substitutions": ["Ayla"],
            },
        },
    })
    runtime.step()
    assert runtime.step() == LinesNeededEvent(line_ids=("line:hello",))
    assert runtime.step() == TextEvent(line_id="line:hello", substitutions=("Ayla",))


def test_load_resets_to_new_start(tree_runtime):
    tree_runtime.step()
    tree_runtime.set_variable("gold", 5)

    second = {
        "id": "second",
        "startNodeId": "npc_b",
        "nodes": {"npc_b": {"id": "npc_b", "type": "NPC", "content": "Beta"}},
    }
    tree_runtime.load(json.dumps(second).encode("utf-8"))

    assert tree_runtime.state == TreeState.NOT_STARTED
    assert tree_runtime.variable_names() == []
    assert tree_runtime.step() == NodeEnteredEvent(node_id="npc_b")


def test_failed_load_keeps_current_program(tree_runtime):
    with pytest.raises(ProgramFormatError):
        tree_runtime.load(b"\xff\xfe not json")

    assert tree_runtime.tree.id == "demo"
    assert tree_runtime.step() == NodeEnteredEvent(node_id="A")


def test_working_set_variables(tree_runtime):
    tree_runtime.set_variable("gold", 10)
    tree_runtime.set_variable("met_king", True)

    assert tree_runtime.get_variable("gold") == 10
    assert sorted(tree_runtime.variable_names()) == ["gold", "met_king"]

    with pytest.raises(TypeError):
        tree_runtime.set_variable("bag", {"a": 1})

    tree_runtime.reset()
    assert tree_runtime.get_variable("gold") is None


def test_runtime_without_program_finishes():
    runtime = DialogueTreeRuntime()
    assert runtime.step() == DialogueFinishedEvent()
    assert runtime.step() is None
