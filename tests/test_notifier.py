"""Tests for change callbacks and autonum keys."""

import pytest

from mirrormap import ArgumentError, Store


@pytest.fixture
def calls():
    return []


def watch(store, calls):
    store.changed(lambda key, old, new: calls.append((key, old, new)))


class TestChanged:
    """Tests for the changed() callback."""

    def test_set_new_and_existing(self, store, calls):
        """The callback gets the previous and new value."""
        watch(store, calls)
        store.set("k", 1)
        store.set("k", 2)
        assert calls == [("k", None, 1), ("k", 1, 2)]

    def test_old_value_is_a_snapshot(self, store, calls):
        """Path writes report the whole value before and after."""
        store.set("k", {"a": 1})
        watch(store, calls)
        store.set("k", 2, "a")
        assert calls == [("k", {"a": 1}, {"a": 2})]

    def test_runs_after_commit(self, db_store):
        """The store and backend already hold the new value."""
        seen = []

        def callback(key, old, new):
            seen.append((db_store.get(key), db_store._backend.get(db_store.name, key).text))

        db_store.changed(callback)
        db_store.set("k", {"a": 1})
        assert seen == [({"a": 1}, '{"a":1}')]

    def test_operators_notify(self, store, calls):
        """push, remove, math, inc and dec report their writes."""
        store.set("arr", [1])
        store.set("n", 1)
        watch(store, calls)
        store.push("arr", 2)
        store.remove("arr", 1)
        store.math("n", "*", 10)
        store.inc("n")
        store.dec("n")
        assert calls == [
            ("arr", [1], [1, 2]),
            ("arr", [1, 2], [2]),
            ("n", 1, 10),
            ("n", 10, 11),
            ("n", 11, 10),
        ]

    def test_no_ops_are_silent(self, store, calls):
        """Skipped pushes and unmatched removes don't notify."""
        store.set("arr", [1])
        watch(store, calls)
        store.push("arr", 1)
        store.remove("arr", 5)
        assert calls == []

    def test_update_is_silent(self, store, calls):
        """update() never notifies."""
        store.set("obj", {"a": 1})
        watch(store, calls)
        store.update("obj", {"b": 2})
        store.update("obj", lambda prev: {**prev, "c": 3})
        assert calls == []

    def test_default_is_silent(self, calls):
        """Materializing a default doesn't notify."""
        store = Store(default={"a": 1})
        watch(store, calls)
        store.get("k")
        assert calls == []
        store.set("j", 2, "a")
        assert calls == [("j", {"a": 1}, {"a": 2})]

    def test_delete_memory_store(self, memory_store, calls):
        """Memory-only stores report deleted keys."""
        memory_store.set("k", 1)
        watch(memory_store, calls)
        memory_store.delete("k")
        memory_store.delete("absent")
        assert calls == [("k", 1, None)]

    def test_delete_persistent_store(self, db_store, calls):
        """Persistent stores don't report deleted keys."""
        db_store.set("k", 1)
        watch(db_store, calls)
        db_store.delete("k")
        assert calls == []

    def test_delete_path(self, store, calls):
        """Deleting a path is a write."""
        store.set("k", {"a": 1, "b": 2})
        watch(store, calls)
        store.delete("k", "a")
        assert calls == [("k", {"a": 1, "b": 2}, {"b": 2})]

    def test_callback_errors_propagate(self, store):
        """A failing callback surfaces, the write is kept."""
        def callback(key, old, new):
            raise RuntimeError("listener failed")

        store.changed(callback)
        with pytest.raises(RuntimeError):
            store.set("k", 1)
        assert store.get("k") == 1

    def test_replace_and_remove(self, store, calls):
        """Only the latest callback is kept; None removes it."""
        first = []
        store.changed(lambda *args: first.append(args))
        watch(store, calls)
        store.set("a", 1)
        store.changed(None)
        store.set("b", 2)
        assert first == []
        assert calls == [("a", None, 1)]

    def test_requires_callable(self, store):
        """Non-callables are rejected."""
        with pytest.raises(ArgumentError):
            store.changed("not a function")


class TestAutonum:
    """Tests for next_autonum()."""

    def test_sequence(self, store):
        """Keys count up from 1 as strings."""
        assert [store.next_autonum() for _ in range(3)] == ["1", "2", "3"]

    def test_usable_as_key(self, store):
        """Allocated keys work with set()."""
        store.set(store.next_autonum(), "first")
        store.set(store.next_autonum(), "second")
        assert store.get("2") == "second"

    def test_counter_per_store(self, shared_backend):
        """Stores sharing a backend count independently."""
        one = Store("one", backend=shared_backend)
        two = Store("two", backend=shared_backend)
        one.next_autonum()
        one.next_autonum()
        assert two.next_autonum() == "1"
        assert shared_backend.get_counter("one") == 2

    def test_survives_reopen(self, data_dir):
        """The counter is persisted with the store."""
        with Store("log", data_dir=data_dir) as store:
            store.next_autonum()
            store.next_autonum()
        with Store("log", data_dir=data_dir) as store:
            assert store.next_autonum() == "3"

    def test_not_reset_by_clear(self, store):
        """clear() keeps the counter."""
        store.next_autonum()
        store.clear()
        assert store.next_autonum() == "2"

    def test_reset_by_destroy(self, shared_backend):
        """A store recreated after destroy() counts from 1 again."""
        store = Store("log", backend=shared_backend)
        store.next_autonum()
        store.destroy()
        assert Store("log", backend=shared_backend).next_autonum() == "1"
