import pytest

from dialogue_runner.commands import create_default_dispatcher
from dialogue_runner.core import EventBus, InMemoryVariableStorage, RunnerConfig
from dialogue_runner.lines import MapLineProvider
from dialogue_runner.runtime import DialogueTree, DialogueTreeRuntime


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def linear_program():
    """Two NPC nodes: A -> B."""
    return {
        "id": "demo",
        "title": "Demo",
        "startNodeId": "A",
        "nodes": {
            "A": {"id": "A", "type": "NPC", "speaker": "Guide", "content": "Welcome", "nextNodeId": "B"},
            "B": {"id": "B", "type": "NPC", "content": "Farewell"},
        },
    }


@pytest.fixture
def shop_program():
    """A PLAYER node offering Buy -> X and Chat -> Y."""
    return {
        "id": "shop",
        "startNodeId": "menu",
        "nodes": {
            "menu": {
                "type": "PLAYER",
                "choices": [
                    {"id": "buy", "text": "Buy", "nextNodeId": "X"},
                    {"id": "chat", "text": "Chat", "nextNodeId": "Y"},
                ],
            },
            "X": {"type": "NPC", "content": "Here are the wares.", "nextNodeId": "X2"},
            "X2": {"type": "NPC", "content": "Anything else?"},
            "Y": {"type": "NPC", "content": "Gossip time."},
        },
    }


@pytest.fixture
def linear_tree(linear_program):
    return DialogueTree.model_validate(linear_program)


@pytest.fixture
def tree_runtime(linear_program):
    return DialogueTreeRuntime(linear_program)


@pytest.fixture
def storage():
    return InMemoryVariableStorage({"stat_gold": 100, "quest_dragon": "started"})


@pytest.fixture
def lines():
    return MapLineProvider({
        "A": "Welcome",
        "B": "Farewell",
        "buy": "Buy",
        "chat": "Chat",
        "X": "Here are the wares.",
        "X2": "Anything else?",
        "Y": "Gossip time.",
    })


@pytest.fixture
def config():
    return RunnerConfig(default_wait_seconds=0)


@pytest.fixture
def dispatcher(config):
    return create_default_dispatcher(config)
