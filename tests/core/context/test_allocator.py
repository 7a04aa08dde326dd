"""Tests for CompactionAllocator.

Tests cover:
1. Tier selection for small and large explicit items
2. Explicit downgrade chain and DOES_NOT_FIT drops
3. Recent items: ranking, no downgrades, budget exhaustion
4. Misconfigured budgets, zero-length and unresolvable items
5. Budget invariant and determinism across varied inputs
6. On-demand artifact materialization
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from context_pack.core.codec import BinaryArtifact, CodecStrategy
from context_pack.core.context import (
    CandidateItem,
    CompactionAllocator,
    DropReason,
    PriorClass,
    Tier,
    content_artifact_id,
)
from context_pack.core.token_management import ContextBudget

RECENT = PriorClass.RECENT

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

# 120 import lines: 2280 chars (570 tokens); the truncated summary is
# 1000 chars plus the 23-char marker (256 tokens)
IMPORT_HEAVY = "import a from 'b';\n" * 120


def minutes_ago(minutes):
    return BASE_TIME - timedelta(minutes=minutes)


@pytest.fixture
def allocator():
    return CompactionAllocator()


def _budget(available):
    return ContextBudget(total=available, reserved=0)


# =============================================================================
# Test: Explicit items
# =============================================================================


class TestExplicitItems:
    """Tests for caller-requested items."""

    def test_small_item_included_verbatim(self, allocator, make_item):
        """Test a small file that fits is included in full."""
        content = "x" * 100
        result = allocator.allocate([make_item("a.ts", content)], _budget(1000))

        entry = result.entries[0]
        assert entry.tier == Tier.VERBATIM
        assert entry.representation.text == content
        assert entry.token_cost == 25
        assert entry.downgrades == 0
        assert result.tokens_used == 25

    def test_large_item_with_artifact_uses_reference(self, allocator, make_item):
        """Test a large file with an artifact becomes a cheap reference."""
        artifact = BinaryArtifact(data=b"\x00" * 50, artifact_id="file-1")
        item = make_item("big.ts", "x" * 4000, artifact=artifact)

        result = allocator.allocate([item], _budget(10))

        entry = result.entries[0]
        assert entry.tier == Tier.BINARY_REFERENCE
        assert entry.representation.artifact_id == "file-1"
        assert entry.representation.original_size == 4000
        assert entry.representation.compressed_size == 50
        # "REF: file-1" is 11 characters
        assert entry.token_cost == 3
        assert entry.artifact == artifact
        assert entry.materialized is False
        assert result.tokens_used == 3

    def test_reference_id_falls_back_to_item_id_then_path(self, allocator, make_item):
        bare = BinaryArtifact(data=b"\x00" * 5)
        result = allocator.allocate(
            [
                make_item("a.ts", "x" * 4000, artifact=bare, id="store-7"),
                make_item("b.ts", "y" * 4000, artifact=bare),
            ],
            _budget(100),
        )
        assert result.entries[0].representation.artifact_id == "store-7"
        assert result.entries[1].representation.artifact_id == "b.ts"

    def test_small_item_downgraded_to_reference(self, allocator, make_item):
        """Test verbatim that does not fit falls to the reference tier."""
        artifact = BinaryArtifact(data=b"\x00" * 20, artifact_id="f")
        result = allocator.allocate(
            [make_item("a.ts", "x" * 100, artifact=artifact)], _budget(5)
        )

        entry = result.entries[0]
        assert entry.tier == Tier.BINARY_REFERENCE
        assert entry.downgrades == 1
        assert result.warnings == ["Requested file a.ts downgraded 1 tier(s) to binary_reference"]

    def test_large_item_without_artifact_summarized(self, allocator, make_item):
        """Test a large file without an artifact goes straight to summary."""
        content = "import a from 'b';\n" * 200
        result = allocator.allocate([make_item("a.ts", content)], _budget(300))

        entry = result.entries[0]
        assert entry.tier == Tier.SUMMARY
        assert entry.token_cost == 256
        assert entry.downgrades == 0

    def test_inapplicable_tiers_not_counted_as_downgrades(self, allocator, make_item):
        """Test only tiers refused by the budget count toward downgrades."""
        large = "import a from 'b';\n" * 200
        artifact = BinaryArtifact(data=b"\x00" * 20, artifact_id="f")
        items = [
            make_item("plain.ts", large),
            make_item("backed.ts", large, artifact=artifact),
        ]

        result = allocator.allocate(items, _budget(1000))

        plain, backed = result.entries
        assert (plain.tier, plain.downgrades) == (Tier.SUMMARY, 0)
        assert (backed.tier, backed.downgrades) == (Tier.BINARY_REFERENCE, 0)
        assert result.warnings == []

    def test_dropped_when_nothing_fits(self, allocator, make_item):
        content = "import a from 'b';\n" * 200
        result = allocator.allocate([make_item("a.ts", content)], _budget(100))

        entry = result.entries[0]
        assert entry.tier == Tier.DROP
        assert entry.representation.reason == DropReason.DOES_NOT_FIT
        assert entry.downgrades == 1
        assert result.tokens_used == 0
        assert result.warnings == ["Dropped requested file a.ts: does_not_fit"]

    def test_explicit_items_keep_caller_order(self, allocator, make_item):
        items = [make_item(path, "x") for path in ["z.ts", "a.ts", "m.ts"]]
        result = allocator.allocate(items, _budget(100))
        assert [entry.path for entry in result.entries] == ["z.ts", "a.ts", "m.ts"]

    def test_custom_token_estimator(self, make_item):
        allocator = CompactionAllocator(token_estimator=len)
        result = allocator.allocate([make_item("a.ts", "x" * 100)], _budget(1000))
        assert result.entries[0].token_cost == 100

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            CompactionAllocator(small_file_threshold=-1)


# =============================================================================
# Test: Recent items
# =============================================================================


class TestRecentItems:
    """Tests for recency-ranked filler items."""

    def test_explicit_processed_before_recent(self, allocator, make_item):
        items = [
            make_item("recent.ts", "r", prior_class=RECENT, last_modified=minutes_ago(1)),
            make_item("explicit.ts", "e"),
        ]
        result = allocator.allocate(items, _budget(100))
        assert [entry.path for entry in result.entries] == ["explicit.ts", "recent.ts"]

    def test_ranked_newest_first_ties_by_path(self, allocator, make_item):
        items = [
            make_item("a.ts", "1", prior_class=RECENT, last_modified=minutes_ago(10)),
            make_item("0.ts", "2", prior_class=RECENT),
            make_item("c.ts", "3", prior_class=RECENT, last_modified=minutes_ago(5)),
            make_item("b.ts", "4", prior_class=RECENT, last_modified=minutes_ago(5)),
        ]
        result = allocator.allocate(items, _budget(100))
        assert [entry.path for entry in result.entries] == ["b.ts", "c.ts", "a.ts", "0.ts"]

    def test_naive_and_aware_timestamps_ranked_together(self, allocator, make_item):
        """Test naive timestamps are read as UTC when ranked against aware ones."""
        items = [
            make_item("a.ts", "1", prior_class=RECENT, last_modified=datetime(2024, 1, 1)),
            make_item(
                "b.ts",
                "2",
                prior_class=RECENT,
                last_modified=datetime(2024, 1, 2, tzinfo=timezone.utc),
            ),
            make_item("c.ts", "3", prior_class=RECENT, last_modified=datetime(2024, 1, 3)),
        ]
        result = allocator.allocate(items, ContextBudget(total=100))
        assert [entry.path for entry in result.entries] == ["c.ts", "b.ts", "a.ts"]
        assert all(entry.tier == Tier.VERBATIM for entry in result.entries)

    def test_large_recent_items_dropped_when_summary_too_big(self, allocator, make_item):
        """Test recent items get their preferred tier or nothing."""
        items = [
            make_item("one.ts", IMPORT_HEAVY, prior_class=RECENT, last_modified=minutes_ago(1)),
            make_item("two.ts", IMPORT_HEAVY, prior_class=RECENT, last_modified=minutes_ago(2)),
        ]
        result = allocator.allocate(items, _budget(200))

        assert [entry.representation.reason for entry in result.entries] == [
            DropReason.DOES_NOT_FIT,
            DropReason.DOES_NOT_FIT,
        ]
        assert result.tokens_used == 0
        assert result.warnings == []

    def test_recent_item_not_downgraded(self, allocator, make_item):
        """Test a recent item whose verbatim tier fails is not offered its reference."""
        artifact = BinaryArtifact(data=b"\x00" * 20, artifact_id="f")
        item = make_item("a.ts", "x" * 100, prior_class=RECENT, artifact=artifact)

        result = allocator.allocate([item], _budget(10))

        assert result.entries[0].representation.reason == DropReason.DOES_NOT_FIT
        assert result.entries[0].downgrades == 0

    def test_budget_exhausted_after_ledger_full(self, allocator, make_item):
        items = [
            make_item("first.ts", "x" * 100, prior_class=RECENT, last_modified=minutes_ago(1)),
            make_item("second.ts", "y" * 40, prior_class=RECENT, last_modified=minutes_ago(2)),
            make_item("empty.ts", "", prior_class=RECENT, last_modified=minutes_ago(3)),
        ]
        result = allocator.allocate(items, _budget(25))

        first, second, empty = result.entries
        assert first.tier == Tier.VERBATIM
        assert second.representation.reason == DropReason.BUDGET_EXHAUSTED
        assert empty.tier == Tier.VERBATIM
        assert empty.token_cost == 0


# =============================================================================
# Test: Edge cases
# =============================================================================


class TestEdgeCases:
    """Tests for budget misconfiguration and degenerate items."""

    @pytest.mark.parametrize("reserved", [100, 150])
    def test_misconfigured_budget_drops_everything(self, allocator, make_item, caplog, reserved):
        items = [
            make_item("a.ts", "x"),
            make_item("b.ts", "y", prior_class=RECENT),
        ]
        with caplog.at_level(logging.WARNING, logger="context_pack.core.context.allocator"):
            result = allocator.allocate(items, ContextBudget(total=100, reserved=reserved))

        assert len(result.entries) == 2
        assert result.items == []
        assert all(
            entry.representation.reason == DropReason.BUDGET_MISCONFIGURED
            for entry in result.entries
        )
        assert result.tokens_available == 0
        assert result.tokens_used == 0
        assert len(result.warnings) == 1
        assert "Budget misconfigured" in caplog.text

    def test_zero_length_item_always_verbatim(self, allocator, make_item):
        items = [make_item("full.ts", "x" * 40), make_item("empty.ts", "")]
        result = allocator.allocate(items, _budget(10))

        empty = result.get("empty.ts")
        assert empty.tier == Tier.VERBATIM
        assert empty.token_cost == 0

    def test_unresolvable_item_dropped_with_warning(self, allocator, caplog):
        item = CandidateItem(path="missing.ts")
        with caplog.at_level(logging.WARNING, logger="context_pack.core.context.allocator"):
            result = allocator.allocate([item], _budget(100))

        entry = result.entries[0]
        assert entry.representation.reason == DropReason.ITEM_UNRESOLVABLE
        assert "missing.ts" in result.warnings[0]
        assert "missing.ts" in caplog.text

    def test_artifact_only_item_uses_metadata_size(self, allocator, make_item, codec):
        artifact = codec.encode("const a = 1;\nconst b = 2;", "typescript", include_metadata=True)
        item = make_item("a.ts", artifact=artifact, id="f-1")

        result = allocator.allocate([item], _budget(100))

        representation = result.entries[0].representation
        assert representation.artifact_id == "f-1"
        assert representation.original_size == 25

    def test_artifact_only_summary_recovers_text_with_codec(self, make_item, codec):
        """Test the summary tier decodes the artifact when a codec is available."""
        artifact = codec.encode("x = 1;", "typescript")
        item = make_item("a.ts", artifact=artifact, id="f-1")

        with_codec = CompactionAllocator(codec=codec).allocate([item], _budget(1))
        without_codec = CompactionAllocator().allocate([item], _budget(1))

        assert with_codec.entries[0].tier == Tier.SUMMARY
        assert with_codec.entries[0].representation.text == ""
        assert without_codec.entries[0].representation.reason == DropReason.DOES_NOT_FIT


# =============================================================================
# Test: Invariants
# =============================================================================


class TestInvariants:
    """Tests for budget safety and determinism."""

    @pytest.fixture
    def mixed_items(self, make_item):
        artifact = BinaryArtifact(data=b"\x00" * 64, artifact_id="blob")
        return [
            make_item("src/main.ts", "x" * 300),
            make_item("src/big.ts", "y" * 5000, artifact=artifact),
            make_item("src/heavy.ts", IMPORT_HEAVY * 2),
            make_item("src/missing.ts"),
            make_item("lib/a.py", "import os\n" * 30, language="python",
                      prior_class=RECENT, last_modified=minutes_ago(3)),
            make_item("lib/b.go", "package b\n" * 50, language="go",
                      prior_class=RECENT, last_modified=minutes_ago(3)),
            make_item("lib/c.ts", IMPORT_HEAVY, prior_class=RECENT),
            make_item("lib/d.ts", "", prior_class=RECENT, last_modified=minutes_ago(9)),
        ]

    @pytest.mark.parametrize("available", [0, 1, 3, 10, 80, 150, 400, 1000, 5000])
    def test_committed_cost_within_budget(self, allocator, mixed_items, available):
        result = allocator.allocate(mixed_items, _budget(available))

        assert result.tokens_used <= available
        assert sum(entry.token_cost for entry in result.items) == result.tokens_used
        assert len(result.entries) == len(mixed_items)

    def test_deterministic(self, allocator, mixed_items):
        first = allocator.allocate(mixed_items, _budget(400)).to_dict()
        second = allocator.allocate(list(mixed_items), _budget(400)).to_dict()
        assert first == second

    def test_recent_input_order_irrelevant(self, allocator, mixed_items):
        shuffled = mixed_items[:4] + list(reversed(mixed_items[4:]))
        first = allocator.allocate(mixed_items, _budget(400)).to_dict()
        second = allocator.allocate(shuffled, _budget(400)).to_dict()
        assert first == second


# =============================================================================
# Test: Materialization
# =============================================================================


class TestMaterialization:
    """Tests for encoding artifacts during allocation."""

    def test_large_item_materialized(self, make_item, codec):
        allocator = CompactionAllocator(codec=codec, materialize_artifacts=True)
        content = "x" * 4000

        result = allocator.allocate([make_item("big.ts", content)], _budget(100))

        entry = result.entries[0]
        expected_id = content_artifact_id(content)
        assert expected_id.startswith("sha256:")
        assert len(expected_id) == len("sha256:") + 16
        assert entry.tier == Tier.BINARY_REFERENCE
        assert entry.representation.artifact_id == expected_id
        assert entry.token_cost == 7
        assert entry.materialized is True
        assert codec.decode(entry.artifact) == content

    def test_item_id_preferred_for_materialized_artifact(self, make_item, codec):
        allocator = CompactionAllocator(codec=codec, materialize_artifacts=True)
        result = allocator.allocate([make_item("big.ts", "x" * 4000, id="file-9")], _budget(100))
        assert result.entries[0].artifact.artifact_id == "file-9"

    def test_materialize_strategy(self, make_item, codec):
        allocator = CompactionAllocator(
            codec=codec,
            materialize_artifacts=True,
            materialize_strategy=CodecStrategy.TOKENIZATION,
        )
        result = allocator.allocate([make_item("big.ts", "const a = 1;\n" * 400)], _budget(100))
        assert result.entries[0].artifact.strategy == CodecStrategy.TOKENIZATION

    def test_materialize_metadata(self, make_item, codec):
        allocator = CompactionAllocator(
            codec=codec, materialize_artifacts=True, materialize_metadata=True
        )
        content = "x" * 4000

        artifact = allocator.allocate([make_item("big.ts", content)], _budget(100)).entries[0].artifact

        assert artifact.has_envelope is True
        assert artifact.metadata.char_count == 4000
        assert artifact.metadata.timestamp == 1_700_000_000_000
        assert codec.decode(artifact) == content

    def test_small_items_not_materialized(self, make_item, codec):
        allocator = CompactionAllocator(codec=codec, materialize_artifacts=True)
        result = allocator.allocate([make_item("a.ts", "x" * 100)], _budget(5))

        entry = result.entries[0]
        assert entry.tier == Tier.SUMMARY
        assert entry.artifact is None
        assert entry.downgrades == 1

    def test_requires_codec(self, make_item):
        allocator = CompactionAllocator(materialize_artifacts=True)
        result = allocator.allocate([make_item("big.ts", "x" * 4000)], _budget(100))
        assert result.entries[0].tier == Tier.SUMMARY
