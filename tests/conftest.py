"""Shared pytest fixtures for mirrormap tests."""

import pytest

from mirrormap import MemoryBackend, Store


@pytest.fixture
def memory_store():
    """A memory-only (non-persistent) store."""
    return Store()


@pytest.fixture
def db_store():
    """A persistent store backed by an in-memory SQLite database."""
    store = Store("::memory::")
    yield store
    if not store.is_destroyed:
        store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Each behavior checked on a memory-only and a persistent store."""
    if request.param == "memory":
        yield Store()
        return
    store = Store("::memory::")
    yield store
    if not store.is_destroyed:
        store.close()


@pytest.fixture
def shared_backend():
    """A connected MemoryBackend that several stores can share."""
    backend = MemoryBackend()
    backend.connect()
    yield backend
    backend.close()


@pytest.fixture
def data_dir(tmp_path):
    """Directory for SQLite files of persistent stores."""
    return tmp_path / "data"
