"""File store collaborator interface and in-memory implementation.

The context builder reads candidate files through ``FileStore``; it never
writes through it. Persisting materialized artifacts is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, runtime_checkable

from context_pack.core.context.models import CandidateItem, rank_by_recency

logger = logging.getLogger(__name__)


@runtime_checkable
class FileStore(Protocol):
    """Read-only access to the files of a repository.

    Returned items may have ``content`` None and may carry a pre-existing
    ``artifact``. Order of returned items is not significant.
    """

    def fetch_by_paths(self, repository_id: str, paths: Sequence[str]) -> list[CandidateItem]:
        """Return the items stored under any of the given paths."""
        ...

    def fetch_recent(
        self, repository_id: str, exclude_paths: Sequence[str], limit: int
    ) -> list[CandidateItem]:
        """Return up to ``limit`` most recently modified code files."""
        ...


class InMemoryFileStore:
    """Dict-backed FileStore for tests and single-process use.

    Example:
        store = InMemoryFileStore()
        store.add("repo-1", CandidateItem(path="src/app.ts", content="...", language="typescript"))
        store.fetch_by_paths("repo-1", ["src/app.ts"])
    """

    def __init__(self) -> None:
        self._files: dict[str, dict[str, CandidateItem]] = {}

    def add(self, repository_id: str, *items: CandidateItem) -> None:
        """Add or replace items (keyed by path) in a repository."""
        files = self._files.setdefault(repository_id, {})
        for item in items:
            files[item.path] = item

    def get(self, repository_id: str, path: str) -> Optional[CandidateItem]:
        return self._files.get(repository_id, {}).get(path)

    def fetch_by_paths(self, repository_id: str, paths: Sequence[str]) -> list[CandidateItem]:
        files = self._files.get(repository_id, {})
        return [files[path] for path in dict.fromkeys(paths) if path in files]

    def fetch_recent(
        self, repository_id: str, exclude_paths: Sequence[str], limit: int
    ) -> list[CandidateItem]:
        """Code files (language set) newest first, ties and undated items by path."""
        if limit <= 0:
            return []
        excluded = set(exclude_paths)
        candidates = [
            item
            for path, item in self._files.get(repository_id, {}).items()
            if path not in excluded and item.language is not None
        ]
        recent = rank_by_recency(candidates)[:limit]
        logger.debug(f"fetch_recent({repository_id}): {len(recent)} of {len(candidates)} candidates")
        return recent
