"""Data models for context allocation and assembly.

Provides candidate records, the four representation tiers, and result
containers for the compaction allocator and context builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from context_pack.core.codec import BinaryArtifact
from context_pack.core.token_management import ContextBudget


class PriorClass(str, Enum):
    """How a candidate item entered the candidate list.

    Classes:
        EXPLICIT: Requested by the caller. Considered first, in caller order,
            and downgraded tier by tier before being dropped.
        RECENT: Recency-ranked filler. Considered after every explicit item,
            newest first, at its preferred tier only.
    """

    EXPLICIT = "explicit"
    RECENT = "recent"


class Tier(str, Enum):
    """Representation tiers, in preference order."""

    VERBATIM = "verbatim"
    BINARY_REFERENCE = "binary_reference"
    SUMMARY = "summary"
    DROP = "drop"


class DropReason(str, Enum):
    """Why an item was dropped from the context.

    Reasons:
        BUDGET_MISCONFIGURED: Reserved tokens leave nothing for context
        ITEM_UNRESOLVABLE: Item has neither content nor a binary artifact
        DOES_NOT_FIT: No allowed tier fit the remaining budget
        BUDGET_EXHAUSTED: Ledger was already full when the item came up
    """

    BUDGET_MISCONFIGURED = "budget_misconfigured"
    ITEM_UNRESOLVABLE = "item_unresolvable"
    DOES_NOT_FIT = "does_not_fit"
    BUDGET_EXHAUSTED = "budget_exhausted"


# =============================================================================
# Store Records
# =============================================================================


class CandidateItem(BaseModel):
    """A file eligible for inclusion in the context window."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str = Field(..., description="Unique file path within the repository")
    language: Optional[str] = Field(
        None, description="Language tag selecting codec and summarizer behavior"
    )
    content: Optional[str] = Field(
        None, description="Full text; None when held only as a binary artifact"
    )
    prior_class: PriorClass = Field(
        default=PriorClass.EXPLICIT, description="Explicitly requested or recency-ranked"
    )
    last_modified: Optional[datetime] = Field(
        None, description="Last modification time, used to rank recent items"
    )
    id: Optional[str] = Field(None, description="Store identifier for the file")
    artifact: Optional[BinaryArtifact] = Field(
        None, description="Pre-existing binary artifact for this file's content"
    )


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps are taken to be UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def rank_by_recency(items: Iterable[CandidateItem]) -> list[CandidateItem]:
    """Order items newest first; ties and undated items fall back to path order.

    Naive and timezone-aware ``last_modified`` values may be mixed.
    """
    by_path = sorted(items, key=lambda item: item.path)
    dated = [item for item in by_path if item.last_modified is not None]
    undated = [item for item in by_path if item.last_modified is None]
    dated.sort(key=lambda item: _as_utc(item.last_modified), reverse=True)
    return dated + undated


class ConversationMessage(BaseModel):
    """A prior conversation turn included in a composed prompt."""

    role: str = Field(..., description="Speaker role (user, assistant, system)")
    content: str = Field(..., description="Message text")


# =============================================================================
# Representations
# =============================================================================


@dataclass(frozen=True)
class Verbatim:
    """Full item text included in a fenced block."""

    text: str
    token_cost: int

    @property
    def tier(self) -> Tier:
        return Tier.VERBATIM

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier.value, "token_cost": self.token_cost}


@dataclass(frozen=True)
class BinaryReference:
    """Pointer to a binary artifact, costed as its short reference line.

    Attributes:
        artifact_id: Store-stable artifact identifier
        original_size: Size of the source text in characters
        compressed_size: Size of the artifact bytes
        reference_token_cost: Token cost of the rendered reference line
    """

    artifact_id: str
    original_size: int
    compressed_size: int
    reference_token_cost: int

    @property
    def tier(self) -> Tier:
        return Tier.BINARY_REFERENCE

    @property
    def token_cost(self) -> int:
        return self.reference_token_cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "artifact_id": self.artifact_id,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "token_cost": self.token_cost,
        }


@dataclass(frozen=True)
class Summary:
    """Structural summary of an item."""

    text: str
    token_cost: int

    @property
    def tier(self) -> Tier:
        return Tier.SUMMARY

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier.value, "token_cost": self.token_cost}


@dataclass(frozen=True)
class Dropped:
    """Marker for an item left out of the context, with the reason."""

    reason: DropReason
    detail: str = ""

    @property
    def tier(self) -> Tier:
        return Tier.DROP

    @property
    def token_cost(self) -> int:
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier.value, "reason": self.reason.value, "detail": self.detail}


Representation = Union[Verbatim, BinaryReference, Summary, Dropped]


# =============================================================================
# Allocation Results
# =============================================================================


@dataclass
class AllocatedItem:
    """A candidate item with the representation the allocator chose.

    Attributes:
        item: The candidate item
        representation: Chosen tier and its payload
        downgrades: Number of applicable tiers tried and refused by the
            budget before this one. Tiers the item never qualified for
            (verbatim for a large file, a reference without an artifact)
            are skipped, not counted
        artifact: Binary artifact backing a BinaryReference; either the
            item's own or one materialized during allocation
    """

    item: CandidateItem
    representation: Representation
    downgrades: int = 0
    artifact: Optional[BinaryArtifact] = None

    @property
    def path(self) -> str:
        return self.item.path

    @property
    def tier(self) -> Tier:
        return self.representation.tier

    @property
    def token_cost(self) -> int:
        return self.representation.token_cost

    @property
    def dropped(self) -> bool:
        return isinstance(self.representation, Dropped)

    @property
    def materialized(self) -> bool:
        """True when the artifact was produced during allocation."""
        return self.artifact is not None and self.item.artifact is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "prior_class": self.item.prior_class.value,
            "downgrades": self.downgrades,
            "materialized": self.materialized,
            **self.representation.to_dict(),
        }


@dataclass
class AllocationResult:
    """Result of one compaction allocation pass.

    ``entries`` holds every candidate in processing order, dropped ones
    included, so the result explains every omission.

    Attributes:
        entries: All items with their representations, in processing order
        tokens_used: Sum of committed representation costs
        tokens_available: Budget that was available to context items
        warnings: Human-readable warnings raised during allocation

    Example:
        result = allocator.allocate(items, budget)
        for entry in result.dropped:
            logger.info(f"{entry.path}: {entry.representation.reason.value}")
    """

    entries: list[AllocatedItem] = field(default_factory=list)
    tokens_used: int = 0
    tokens_available: int = 0
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate result consistency."""
        if self.tokens_used < 0:
            raise ValueError(f"tokens_used must be non-negative, got {self.tokens_used}")
        if self.tokens_available < 0:
            raise ValueError(f"tokens_available must be non-negative, got {self.tokens_available}")

    @property
    def items(self) -> list[AllocatedItem]:
        """Retained (non-dropped) entries in allocation order."""
        return [entry for entry in self.entries if not entry.dropped]

    @property
    def dropped(self) -> list[AllocatedItem]:
        """Dropped entries in allocation order."""
        return [entry for entry in self.entries if entry.dropped]

    @property
    def resolved(self) -> list[tuple[CandidateItem, Representation]]:
        """(item, representation) pairs for every entry, as the assembler takes them."""
        return [(entry.item, entry.representation) for entry in self.entries]

    @property
    def utilization(self) -> float:
        """Fraction of the available budget that was used (0.0 to 1.0)."""
        if self.tokens_available <= 0:
            return 0.0
        return min(1.0, self.tokens_used / self.tokens_available)

    def get(self, path: str) -> Optional[AllocatedItem]:
        """Entry for a path, or None."""
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "items": [entry.to_dict() for entry in self.entries],
            "tokens_used": self.tokens_used,
            "tokens_available": self.tokens_available,
            "utilization": self.utilization,
            "warnings": self.warnings,
            "items_allocated": len(self.items),
            "items_dropped": len(self.dropped),
        }


@dataclass
class BuiltContext:
    """Output of ContextBuilder.build_issue_context.

    Attributes:
        payload: Rendered context text
        side_table: Path to representation for every candidate
        allocation: Full allocator result
        budget: Budget the context was built against
    """

    payload: str
    side_table: dict[str, Representation]
    allocation: AllocationResult
    budget: ContextBudget

    @property
    def materialized_artifacts(self) -> dict[str, BinaryArtifact]:
        """Artifacts encoded during allocation, keyed by path, for the caller to persist."""
        return {
            entry.path: entry.artifact
            for entry in self.allocation.entries
            if entry.materialized and entry.artifact is not None
        }
