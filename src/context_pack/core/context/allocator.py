"""Tiered compaction allocator.

Assigns each candidate item one representation tier (verbatim, binary
reference, summary, or drop) under a running token ledger so that the
committed cost never exceeds the budget's available tokens.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import replace
from typing import Callable, Iterator, Optional, Sequence

from context_pack.core.codec import BinaryArtifact, CodeCodec, CodecStrategy
from context_pack.core.errors import DecodeFailure
from context_pack.core.token_management import ContextBudget, TokenLedger, estimate_tokens

from .constants import (
    ARTIFACT_ID_HEX_LENGTH,
    ARTIFACT_ID_PREFIX,
    REFERENCE_TEMPLATE,
    SMALL_FILE_THRESHOLD,
)
from .models import (
    AllocatedItem,
    AllocationResult,
    BinaryReference,
    CandidateItem,
    DropReason,
    Dropped,
    PriorClass,
    Representation,
    Summary,
    Verbatim,
    rank_by_recency,
)
from .summarizer import StructuralSummarizer

logger = logging.getLogger(__name__)

_TierCandidate = tuple[Representation, Optional[BinaryArtifact]]


def content_artifact_id(content: str) -> str:
    """Content-derived artifact identifier ("sha256:" + 16 hex chars)."""
    digest = hashlib.sha256(content.encode("utf-8", errors="surrogatepass")).hexdigest()
    return f"{ARTIFACT_ID_PREFIX}{digest[:ARTIFACT_ID_HEX_LENGTH]}"


class CompactionAllocator:
    """Greedy tier assignment for candidate items under a token budget.

    Explicitly requested items are processed first, in caller order, and
    downgraded one tier at a time (verbatim, binary reference, summary)
    until a tier fits; only when none fits are they dropped. Recency-ranked
    items follow, newest first with ties broken by path, and are included
    at their preferred tier or skipped. Once the ledger is full the
    remaining recency-ranked items are recorded as exhausted.

    Each ``allocate`` call owns its own TokenLedger; the allocator itself
    holds configuration only.

    Attributes:
        small_file_threshold: Verbatim is preferred below this token cost
        materialize_artifacts: Encode artifacts on demand for large items

    Example:
        allocator = CompactionAllocator()
        result = allocator.allocate(items, ContextBudget(total=8_000, reserved=2_150))
        for entry in result.items:
            print(entry.path, entry.tier.value, entry.token_cost)
    """

    def __init__(
        self,
        *,
        token_estimator: Optional[Callable[[str], int]] = None,
        summarizer: Optional[StructuralSummarizer] = None,
        codec: Optional[CodeCodec] = None,
        small_file_threshold: int = SMALL_FILE_THRESHOLD,
        materialize_artifacts: bool = False,
        materialize_strategy: CodecStrategy = CodecStrategy.COMPRESSION,
        materialize_metadata: bool = False,
    ):
        """Initialize the allocator.

        Args:
            token_estimator: Custom token estimator (defaults to estimate_tokens)
            summarizer: Summarizer for the summary tier
            codec: Codec used to materialize artifacts and to recover text
                for summarizing items held only as an artifact
            small_file_threshold: Verbatim cost ceiling (exclusive)
            materialize_artifacts: When True (and a codec is set), items too
                large for verbatim get an artifact encoded on demand
            materialize_strategy: Strategy for materialized artifacts
            materialize_metadata: Embed a metadata envelope in materialized
                compression artifacts
        """
        if small_file_threshold < 0:
            raise ValueError(
                f"small_file_threshold must be non-negative, got {small_file_threshold}"
            )
        self._token_estimator = token_estimator
        self.summarizer = summarizer or StructuralSummarizer()
        self.codec = codec
        self.small_file_threshold = small_file_threshold
        self.materialize_artifacts = materialize_artifacts
        self.materialize_strategy = CodecStrategy(materialize_strategy)
        self.materialize_metadata = materialize_metadata

    def _estimate_tokens(self, content: str) -> int:
        if self._token_estimator:
            return self._token_estimator(content)
        return estimate_tokens(content)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    @staticmethod
    def _partition(
        items: Sequence[CandidateItem],
    ) -> tuple[list[CandidateItem], list[CandidateItem]]:
        """Split items into explicit (caller order) and recent (ranked) lists."""
        explicit = [item for item in items if item.prior_class == PriorClass.EXPLICIT]
        recent = rank_by_recency(item for item in items if item.prior_class == PriorClass.RECENT)
        return explicit, recent

    # -------------------------------------------------------------------------
    # Tier candidates
    # -------------------------------------------------------------------------

    def _materialize(self, item: CandidateItem) -> Optional[BinaryArtifact]:
        if not (self.materialize_artifacts and self.codec and item.content):
            return None
        artifact = self.codec.encode(
            item.content,
            item.language,
            self.materialize_strategy,
            include_metadata=self.materialize_metadata,
        )
        artifact_id = item.id or content_artifact_id(item.content)
        logger.debug(
            f"Materialized {artifact.strategy.value} artifact {artifact_id} for {item.path} "
            f"({len(item.content)} chars -> {artifact.compressed_size} bytes)"
        )
        return replace(artifact, artifact_id=artifact_id)

    def _summary_source(self, item: CandidateItem, artifact: Optional[BinaryArtifact]) -> Optional[str]:
        if item.content is not None or artifact is None or self.codec is None:
            return item.content
        try:
            return self.codec.decode(artifact)
        except DecodeFailure as exc:
            logger.debug(f"Could not recover text of {item.path} for summary: {exc}")
            return None

    def _iter_tiers(self, item: CandidateItem) -> Iterator[_TierCandidate]:
        """Yield representations in preference order, computing each lazily."""
        small = False
        if item.content is not None:
            cost = self._estimate_tokens(item.content)
            small = cost < self.small_file_threshold
            if small:
                yield Verbatim(text=item.content, token_cost=cost), None

        artifact = item.artifact
        if artifact is None and not small:
            artifact = self._materialize(item)
        if artifact is not None:
            artifact_id = artifact.artifact_id or item.id or item.path
            if item.content is not None:
                original_size = len(item.content)
            elif artifact.metadata is not None:
                original_size = artifact.metadata.char_count
            else:
                original_size = 0
            reference = BinaryReference(
                artifact_id=artifact_id,
                original_size=original_size,
                compressed_size=artifact.compressed_size,
                reference_token_cost=self._estimate_tokens(
                    REFERENCE_TEMPLATE.format(artifact_id=artifact_id)
                ),
            )
            yield reference, artifact

        summary = self.summarizer.summarize(self._summary_source(item, artifact), item.language)
        yield Summary(text=summary, token_cost=self._estimate_tokens(summary)), None

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    def _resolve_trivial(self, item: CandidateItem) -> Optional[AllocatedItem]:
        """Handle items whose outcome does not depend on the budget."""
        if item.content == "":
            return AllocatedItem(item=item, representation=Verbatim(text="", token_cost=0))
        if item.content is None and item.artifact is None:
            return AllocatedItem(
                item=item,
                representation=Dropped(
                    reason=DropReason.ITEM_UNRESOLVABLE,
                    detail="item has neither content nor a binary artifact",
                ),
            )
        return None

    def _place_explicit(self, item: CandidateItem, ledger: TokenLedger) -> AllocatedItem:
        downgrades = 0
        for representation, artifact in self._iter_tiers(item):
            if ledger.commit(representation.token_cost):
                return AllocatedItem(
                    item=item,
                    representation=representation,
                    downgrades=downgrades,
                    artifact=artifact,
                )
            downgrades += 1
        return AllocatedItem(
            item=item,
            representation=Dropped(
                reason=DropReason.DOES_NOT_FIT,
                detail=f"no tier fits the remaining {ledger.remaining} tokens",
            ),
            downgrades=downgrades,
        )

    def _place_recent(self, item: CandidateItem, ledger: TokenLedger) -> AllocatedItem:
        if ledger.is_full:
            return AllocatedItem(
                item=item,
                representation=Dropped(reason=DropReason.BUDGET_EXHAUSTED),
            )
        representation, artifact = next(self._iter_tiers(item))
        if ledger.commit(representation.token_cost):
            return AllocatedItem(item=item, representation=representation, artifact=artifact)
        return AllocatedItem(
            item=item,
            representation=Dropped(
                reason=DropReason.DOES_NOT_FIT,
                detail=(
                    f"{representation.tier.value} costs {representation.token_cost} tokens, "
                    f"{ledger.remaining} remaining"
                ),
            ),
        )

    def allocate(self, items: Sequence[CandidateItem], budget: ContextBudget) -> AllocationResult:
        """Assign a representation tier to every candidate item.

        Args:
            items: Candidate items; explicit items in caller order, recent
                items in any order (they are ranked here)
            budget: Token budget for the context items

        Returns:
            AllocationResult listing every item in processing order. With a
            misconfigured budget (reserved >= total) every item is dropped.
        """
        explicit, recent = self._partition(items)
        warnings: list[str] = []

        if budget.is_misconfigured:
            message = (
                f"Budget misconfigured: reserved {budget.reserved} >= total {budget.total}; "
                f"dropping all {len(items)} items"
            )
            logger.warning(message)
            return AllocationResult(
                entries=[
                    AllocatedItem(
                        item=item,
                        representation=Dropped(reason=DropReason.BUDGET_MISCONFIGURED),
                    )
                    for item in explicit + recent
                ],
                tokens_used=0,
                tokens_available=0,
                warnings=[message],
            )

        ledger = TokenLedger(budget.available)
        entries: list[AllocatedItem] = []

        for item in explicit:
            entry = self._resolve_trivial(item) or self._place_explicit(item, ledger)
            if entry.dropped:
                reason = entry.representation.reason
                message = f"Dropped requested file {item.path}: {reason.value}"
                if reason == DropReason.ITEM_UNRESOLVABLE:
                    logger.warning(message)
                warnings.append(message)
            elif entry.downgrades:
                warnings.append(
                    f"Requested file {item.path} downgraded {entry.downgrades} tier(s) "
                    f"to {entry.tier.value}"
                )
            logger.debug(
                f"Explicit {item.path}: {entry.tier.value} ({entry.token_cost} tokens, "
                f"used {ledger.used_tokens}/{ledger.available})"
            )
            entries.append(entry)

        for item in recent:
            entry = self._resolve_trivial(item) or self._place_recent(item, ledger)
            logger.debug(
                f"Recent {item.path}: {entry.tier.value} ({entry.token_cost} tokens, "
                f"used {ledger.used_tokens}/{ledger.available})"
            )
            entries.append(entry)

        return AllocationResult(
            entries=entries,
            tokens_used=ledger.used_tokens,
            tokens_available=ledger.available,
            warnings=warnings,
        )
