"""Shared test fixtures."""

from pathlib import Path

import pytest

from bookmark_manager.core.store.store import BookmarkStore
from tests.unit.fakes import FakeClock, SequentialIds, make_draft


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> BookmarkStore:
    """Return an empty store with a deterministic clock and ids."""
    return BookmarkStore(clock=clock, id_factory=SequentialIds())


@pytest.fixture
def populated_store(store: BookmarkStore) -> BookmarkStore:
    """Return a store with bookmarks in two files, two colors and two workspaces."""
    store.add_bookmark(make_draft("src/f1.ts", 10, color="red", label="A"))
    store.add_bookmark(make_draft("src/f1.ts", 3, color="blue"))
    store.add_bookmark(make_draft("src/f2.ts", 5, color="red"))
    store.add_bookmark(make_draft("lib/g.py", 1, workspace="other", color="green"))
    return store


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root
