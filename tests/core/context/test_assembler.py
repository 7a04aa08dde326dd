"""Tests for context rendering and prompt composition.

Tests cover:
1. FILE block formats per representation tier
2. Side-table covering dropped items
3. compose_prompt with and without history and insights
"""

import pytest

from context_pack.core.context import (
    CONTEXT_HEADER,
    AllocatedItem,
    AllocationResult,
    BinaryReference,
    ContextAssembler,
    ConversationMessage,
    DropReason,
    Dropped,
    Summary,
    Verbatim,
    compose_prompt,
    render_context,
)


@pytest.fixture
def resolved(make_item):
    return [
        (make_item("a.ts", "hello"), Verbatim(text="hello", token_cost=2)),
        (
            make_item("big.ts", "x" * 4000),
            BinaryReference(
                artifact_id="file-1",
                original_size=4000,
                compressed_size=50,
                reference_token_cost=3,
            ),
        ),
        (make_item("c.py", language="python"), Summary(text="import os", token_cost=3)),
        (make_item("d.ts"), Dropped(reason=DropReason.DOES_NOT_FIT)),
    ]


class TestContextAssembler:
    """Tests for ContextAssembler.render."""

    def test_payload_format(self, resolved):
        rendered = ContextAssembler().render(resolved)

        assert rendered.payload == (
            "Repository Context:\n\n"
            "FILE: a.ts\n\n```typescript\nhello\n```\n\n"
            "FILE: big.ts (Binary format, 4000 bytes, compressed to 50 bytes)\n"
            "REF: file-1\n\n"
            "FILE: c.py\n\n```python\nimport os\n```\n\n"
        )

    def test_side_table_includes_dropped(self, resolved):
        rendered = ContextAssembler().render(resolved)

        assert list(rendered.side_table) == ["a.ts", "big.ts", "c.py", "d.ts"]
        assert rendered.side_table["d.ts"] == Dropped(reason=DropReason.DOES_NOT_FIT)
        assert "d.ts" not in rendered.payload

    def test_missing_language_renders_bare_fence(self, make_item):
        rendered = render_context([(make_item("notes", "hi", language=None), Verbatim("hi", 1))])
        assert rendered.payload == CONTEXT_HEADER + "FILE: notes\n\n```\nhi\n```\n\n"

    def test_empty_input_renders_header_only(self):
        rendered = render_context([])
        assert rendered.payload == CONTEXT_HEADER
        assert rendered.side_table == {}

    def test_accepts_allocation_result(self, resolved):
        allocation = AllocationResult(
            entries=[AllocatedItem(item=item, representation=rep) for item, rep in resolved]
        )
        assert render_context(allocation) == render_context(resolved)


class TestComposePrompt:
    """Tests for compose_prompt."""

    def test_without_history(self):
        assert compose_prompt("CTX", "do it") == "CTX\n\ndo it"

    def test_with_history(self):
        history = [
            ConversationMessage(role="user", content="hi"),
            {"role": "assistant", "content": "hello"},
        ]
        assert compose_prompt("CTX", "do it", history) == (
            "CTX\n\n"
            "Previous conversation:\n\n"
            "USER: hi\n\n"
            "ASSISTANT: hello\n\n"
            "\n\n"
            "Current request:\ndo it"
        )

    def test_with_insights(self):
        assert compose_prompt("CTX", "do it", insights="past") == (
            "CTX\n\n## Historical Context\n\npast\n\n\n\ndo it"
        )
