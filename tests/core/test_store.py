"""Tests for the in-memory file store."""

from datetime import datetime, timedelta, timezone

import pytest

from context_pack.core.context import CandidateItem
from context_pack.core.store import FileStore, InMemoryFileStore

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _file(path, *, language="typescript", minutes_ago=None):
    return CandidateItem(
        path=path,
        content=f"// {path}",
        language=language,
        last_modified=None if minutes_ago is None else NOW - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def store():
    store = InMemoryFileStore()
    store.add(
        "repo",
        _file("a.ts", minutes_ago=10),
        _file("b.ts", minutes_ago=5),
        _file("c.ts", minutes_ago=5),
        _file("d.ts"),
        _file("notes.md", language=None, minutes_ago=1),
    )
    return store


def test_satisfies_protocol():
    assert isinstance(InMemoryFileStore(), FileStore)


class TestFetchByPaths:
    def test_requested_order_missing_skipped(self, store):
        items = store.fetch_by_paths("repo", ["c.ts", "missing.ts", "a.ts", "c.ts"])
        assert [item.path for item in items] == ["c.ts", "a.ts"]

    def test_repositories_isolated(self, store):
        assert store.fetch_by_paths("other", ["a.ts"]) == []

    def test_add_replaces_by_path(self, store):
        store.add("repo", CandidateItem(path="a.ts", content="new"))
        assert store.get("repo", "a.ts").content == "new"


class TestFetchRecent:
    def test_newest_first_ties_by_path_undated_last(self, store):
        items = store.fetch_recent("repo", [], 10)
        assert [item.path for item in items] == ["b.ts", "c.ts", "a.ts", "d.ts"]

    def test_excludes_paths_and_non_code(self, store):
        items = store.fetch_recent("repo", ["b.ts"], 10)
        assert [item.path for item in items] == ["c.ts", "a.ts", "d.ts"]

    def test_limit(self, store):
        assert [item.path for item in store.fetch_recent("repo", [], 2)] == ["b.ts", "c.ts"]
        assert store.fetch_recent("repo", [], 0) == []

    def test_mixed_naive_and_aware_timestamps(self):
        store = InMemoryFileStore()
        store.add(
            "repo",
            CandidateItem(path="a.ts", language="typescript", last_modified=datetime(2024, 1, 1)),
            CandidateItem(
                path="b.ts",
                language="typescript",
                last_modified=datetime(2024, 1, 2, tzinfo=timezone.utc),
            ),
        )
        assert [item.path for item in store.fetch_recent("repo", [], 10)] == ["b.ts", "a.ts"]
