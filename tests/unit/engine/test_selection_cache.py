"""Tests for the key/value stores and the selected-routine cache."""

import json

from app.engine.cache import InMemoryKeyValueStore, JsonFileKeyValueStore, SelectedRoutineCache


# ======================================================================
# Key/value stores
# ======================================================================


class TestInMemoryKeyValueStore:
    def test_set_get_delete(self):
        store = InMemoryKeyValueStore()
        store.set("a", {"x": 1})
        assert store.get("a") == {"x": 1}
        store.delete("a")
        assert store.get("a") is None

    def test_delete_missing_key(self):
        InMemoryKeyValueStore().delete("nope")


class TestJsonFileKeyValueStore:
    def test_survives_reload(self, tmp_path):
        path = tmp_path / "cache" / "state.json"
        JsonFileKeyValueStore(path).set("selected_routine:1", {"routine_id": 4})

        reloaded = JsonFileKeyValueStore(path)
        assert reloaded.get("selected_routine:1") == {"routine_id": 4}

    def test_delete_is_persisted(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileKeyValueStore(path)
        store.set("k", 1)
        store.delete("k")
        assert JsonFileKeyValueStore(path).get("k") is None
        assert json.loads(path.read_text()) == {}

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        store = JsonFileKeyValueStore(path)
        assert store.get("anything") is None
        store.set("k", 2)
        assert json.loads(path.read_text()) == {"k": 2}

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]")
        assert JsonFileKeyValueStore(path).get("0") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "state.json")
        store.set("a", 1)
        store.set("b", 2)
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


# ======================================================================
# SelectedRoutineCache
# ======================================================================


class TestSelectedRoutineCache:
    def test_keyed_per_user(self):
        cache = SelectedRoutineCache(InMemoryKeyValueStore())
        cache.set(1, 10)
        cache.set(2, 20)
        assert cache.get(1) == 10
        assert cache.get(2) == 20

    def test_clear(self):
        cache = SelectedRoutineCache(InMemoryKeyValueStore())
        cache.set(1, 10)
        cache.clear(1)
        assert cache.get(1) is None

    def test_setting_none_clears(self):
        store = InMemoryKeyValueStore()
        cache = SelectedRoutineCache(store)
        cache.set(1, 10)
        cache.set(1, None)
        assert len(store) == 0

    def test_malformed_entry_is_dropped(self):
        store = InMemoryKeyValueStore()
        store.set("selected_routine:1", {"routine_id": "not-a-number"})
        cache = SelectedRoutineCache(store)
        assert cache.get(1) is None
        assert store.get("selected_routine:1") is None
