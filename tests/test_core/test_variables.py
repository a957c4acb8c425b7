import json

import pytest

from dialogue_runner.core.variables import InMemoryVariableStorage, JsonFileVariableStorage


def test_in_memory_storage_basics():
    storage = InMemoryVariableStorage({"gold": 100})

    assert storage.get("gold") == 100
    assert storage.has("gold")
    assert "gold" in storage
    assert storage.get("missing") is None

    storage.set("name", "Ayla")
    storage.set("met_king", False)
    assert sorted(storage.names()) == ["gold", "met_king", "name"]

    assert storage.delete("gold")
    assert not storage.delete("gold")

    storage.clear()
    assert storage.get_all() == {}


def test_get_all_returns_copy():
    storage = InMemoryVariableStorage({"gold": 1})
    snapshot = storage.get_all()
    snapshot["gold"] = 999
    assert storage.get("gold") == 1


def test_rejects_non_scalar_values():
    storage = InMemoryVariableStorage()
    with pytest.raises(TypeError):
        storage.set("inventory", ["sword"])
    with pytest.raises(TypeError):
        InMemoryVariableStorage({"bad": None})


def test_json_storage_persists_across_instances(tmp_path):
    path = tmp_path / "saves" / "variables.json"

    storage = JsonFileVariableStorage(path)
    storage.set("stat_gold", 150)
    storage.set("quest_dragon", "complete")

    reopened = JsonFileVariableStorage(path)
    assert reopened.get("stat_gold") == 150
    assert reopened.get("quest_dragon") == "complete"

    reopened.delete("stat_gold")
    assert json.loads(path.read_text()) == {"quest_dragon": "complete"}


def test_json_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "variables.json"
    path.write_text("{not json")

    storage = JsonFileVariableStorage(path)
    assert storage.get_all() == {}

    storage.set("gold", 5)
    assert json.loads(path.read_text()) == {"gold": 5}


def test_json_storage_skips_non_scalar_entries(tmp_path):
    path = tmp_path / "variables.json"
    path.write_text(json.dumps({"gold": 5, "items": ["sword"]}))

    storage = JsonFileVariableStorage(path)
    assert storage.get_all() == {"gold": 5}
