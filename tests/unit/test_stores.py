# tests/unit/test_stores.py
import json

from plugins.stores.json_file.impl import JsonFileStore
from plugins.stores.memory.impl import MemoryStore


def test_memory_store():
    store = MemoryStore(initial={"a": "1"})
    assert store.get("a") == "1"
    store.set("b", "2")
    store.delete("a")
    store.delete("missing")
    assert store.get("a") is None and store.get("b") == "2"


def test_json_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileStore(path).set("library", '{"recordings": []}')

    reopened = JsonFileStore(path)
    assert reopened.get("library") == '{"recordings": []}'
    assert json.loads(path.read_text(encoding="utf-8")) == {"library": '{"recordings": []}'}

    reopened.delete("library")
    assert JsonFileStore(path).get("library") is None


def test_json_file_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{oops", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("library") is None
    store.set("library", "x")
    assert store.get("library") == "x"


def test_json_file_store_leaves_no_temp_files(tmp_path):
    store = JsonFileStore(tmp_path / "store.json")
    store.set("a", "1")
    store.set("b", "2")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["store.json"]
