import json

from nextup.persisted import PersistedValue, dumps
from nextup.storage import InMemoryStore


class FailingStore(InMemoryStore):
    def __init__(self, fail_reads=False, fail_writes=False):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get_item(self, key):
        if self.fail_reads:
            raise OSError("storage unavailable")
        return super().get_item(key)

    def set_item(self, key, value):
        if self.fail_writes:
            raise OSError("quota exceeded")
        super().set_item(key, value)


ESSAY = {"id": "1", "description": "Essay", "dueDate": "2025-01-01", "tags": ["english"], "completed": False}


class TestHydrate:
    def test_default_until_hydrated(self):
        store = InMemoryStore()
        store.set_item("alice-assignments", json.dumps([ESSAY]))

        value = PersistedValue(store, "alice-assignments", [])
        assert value.value == []
        assert value.hydrate() == [ESSAY]
        assert value.value == [ESSAY]

    def test_stored_essay_round_trips_exactly(self):
        store = InMemoryStore()
        writer = PersistedValue(store, "alice-assignments", [])
        writer.set([ESSAY])

        reader = PersistedValue(store, "alice-assignments", [])
        records = reader.hydrate()
        assert len(records) == 1
        assert records == [ESSAY]
        assert dumps(records) == store.get_item("alice-assignments")
        assert json.loads(store.get_item("alice-assignments")) == [ESSAY]

    def test_absent_or_empty_keeps_default(self):
        store = InMemoryStore()
        assert PersistedValue(store, "missing", ["x"]).hydrate() == ["x"]

        store.set_item("empty", "")
        assert PersistedValue(store, "empty", []).hydrate() == []

    def test_default_is_copied(self):
        default = []
        value = PersistedValue(InMemoryStore(), "k", default)
        value.value.append(1)
        assert default == []

    def test_corrupt_json_is_logged_and_ignored(self, caplog):
        store = InMemoryStore()
        store.set_item("bob-events", "{not json")
        value = PersistedValue(store, "bob-events", [])

        with caplog.at_level("ERROR", logger="nextup.persisted"):
            assert value.hydrate() == []
        assert "bob-events" in caplog.text

    def test_read_error_keeps_last_known_value(self):
        store = FailingStore()
        value = PersistedValue(store, "k", [])
        value.set([1, 2])

        store.fail_reads = True
        assert value.hydrate() == [1, 2]


class TestSet:
    def test_set_value_and_updater(self):
        store = InMemoryStore()
        value = PersistedValue(store, "k", [])

        value.set(["a"])
        value.set(lambda prev: [*prev, "b"])
        assert value.value == ["a", "b"]
        assert store.get_item("k") == '["a","b"]'

    def test_non_ascii_is_kept(self):
        store = InMemoryStore()
        PersistedValue(store, "k", "").set("Café")
        assert store.get_item("k") == '"Café"'

    def test_unserializable_value_is_not_kept(self, caplog):
        store = InMemoryStore()
        value = PersistedValue(store, "k", [1])

        with caplog.at_level("ERROR", logger="nextup.persisted"):
            value.set({1, 2})
        assert value.value == [1]
        assert store.get_item("k") is None
        assert "Error setting storage key" in caplog.text

    def test_write_error_is_logged(self, caplog):
        store = FailingStore(fail_writes=True)
        value = PersistedValue(store, "k", [])

        with caplog.at_level("ERROR", logger="nextup.persisted"):
            value.set([1])
        assert store.get_item("k") is None
        assert value.value == [1]
        assert "quota exceeded" in caplog.text

    def test_updater_error_is_logged(self, caplog):
        value = PersistedValue(InMemoryStore(), "k", [1])

        def boom(prev):
            raise RuntimeError("bad updater")

        with caplog.at_level("ERROR", logger="nextup.persisted"):
            assert value.set(boom) == [1]
        assert "bad updater" in caplog.text
