"""Issue context builder.

Wires a FileStore, the compaction allocator and the assembler together:
fetch requested and recent files, allocate them under a budget derived
from the request, and render the payload.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from context_pack.config import ContextPackConfig, get_config, timed
from context_pack.core.codec import CodeCodec
from context_pack.core.store import FileStore
from context_pack.core.token_management import ContextBudget

from .allocator import CompactionAllocator
from .assembler import ContextAssembler
from .models import BuiltContext, CandidateItem, PriorClass
from .summarizer import StructuralSummarizer

logger = logging.getLogger(__name__)


class ContextBuilder:
    """Build a rendered repository context for an issue or request.

    The store is an explicit collaborator owned by the caller; the builder
    only reads from it.

    Example:
        builder = ContextBuilder(store)
        built = builder.build_issue_context(
            "repo-1",
            title="Login fails",
            description="Users cannot log in after the upgrade",
            relevant_files=["src/auth.ts"],
        )
        prompt = compose_prompt(built.payload, "Fix the login bug")
    """

    def __init__(
        self,
        store: FileStore,
        config: Optional[ContextPackConfig] = None,
        *,
        allocator: Optional[CompactionAllocator] = None,
        assembler: Optional[ContextAssembler] = None,
        codec: Optional[CodeCodec] = None,
    ):
        """Initialize the builder.

        Args:
            store: File store to read candidates from
            config: Configuration (defaults to the global get_config())
            allocator: Allocator override; built from config when omitted
            assembler: Assembler override
            codec: Codec for artifact materialization and summaries of
                artifact-only files (a default CodeCodec when omitted)
        """
        self.store = store
        self.config = config or get_config()
        self.codec = codec or CodeCodec()
        self.allocator = allocator or CompactionAllocator(
            summarizer=StructuralSummarizer(char_limit=self.config.summary.char_limit),
            codec=self.codec,
            small_file_threshold=self.config.budget.small_file_threshold,
            materialize_artifacts=self.config.codec.materialize_artifacts,
            materialize_strategy=self.config.codec.default_strategy,
            materialize_metadata=self.config.codec.include_metadata,
        )
        self.assembler = assembler or ContextAssembler()

    def _fetch_explicit(self, repository_id: str, paths: Sequence[str]) -> list[CandidateItem]:
        """Requested files in caller order; missing ones become content-less items."""
        if not paths:
            return []
        found = {item.path: item for item in self.store.fetch_by_paths(repository_id, list(paths))}
        items = []
        for path in paths:
            item = found.get(path)
            if item is None:
                logger.warning(f"Requested file not found in store: {path}")
                item = CandidateItem(path=path)
            items.append(item.model_copy(update={"prior_class": PriorClass.EXPLICIT}))
        return items

    def _fetch_recent(self, repository_id: str, exclude_paths: Sequence[str]) -> list[CandidateItem]:
        limit = self.config.budget.recent_file_limit
        if limit <= 0:
            return []
        try:
            recent = self.store.fetch_recent(repository_id, list(exclude_paths), limit)
        except Exception as e:
            logger.warning(f"Fetching recent files for {repository_id} failed, continuing without: {e}")
            return []
        excluded = set(exclude_paths)
        return [
            item.model_copy(update={"prior_class": PriorClass.RECENT})
            for item in recent[:limit]
            if item.path not in excluded
        ]

    @timed("build_issue_context")
    def build_issue_context(
        self,
        repository_id: str,
        title: str,
        description: str,
        relevant_files: Sequence[str] = (),
    ) -> BuiltContext:
        """Build the context for an issue.

        Args:
            repository_id: Repository to read files from
            title: Issue title
            description: Issue description
            relevant_files: Paths the caller explicitly wants included,
                in priority order

        Returns:
            BuiltContext with payload, side-table, allocation and budget

        Raises:
            Exception: Whatever the store raises while fetching requested files
        """
        budget_config = self.config.budget
        requested = list(dict.fromkeys(relevant_files))
        budget = ContextBudget.for_request(
            budget_config.max_tokens,
            f"{title}\n{description}",
            response_reserve=budget_config.response_reserve_tokens,
        )

        items = self._fetch_explicit(repository_id, requested)
        items.extend(self._fetch_recent(repository_id, requested))

        allocation = self.allocator.allocate(items, budget)
        rendered = self.assembler.render(allocation)
        logger.debug(
            f"Built context for {repository_id}: {len(allocation.items)} items, "
            f"{allocation.tokens_used}/{allocation.tokens_available} tokens, "
            f"{len(allocation.dropped)} dropped"
        )
        return BuiltContext(
            payload=rendered.payload,
            side_table=rendered.side_table,
            allocation=allocation,
            budget=budget,
        )
