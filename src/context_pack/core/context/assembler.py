"""Rendering of allocation results into prompt text.

Provides:
    - ContextAssembler / render_context(): payload text plus side-table
    - compose_prompt(): context, history and request in one prompt string
"""

from __future__ import annotations

from typing import Iterable, Mapping, NamedTuple, Optional, Sequence, Union

from .constants import (
    CONTEXT_HEADER,
    CURRENT_REQUEST_HEADER,
    HISTORY_HEADER,
    INSIGHTS_HEADER,
)
from .models import (
    AllocationResult,
    BinaryReference,
    CandidateItem,
    ConversationMessage,
    Dropped,
    Representation,
)

Resolved = Iterable[tuple[CandidateItem, Representation]]


class RenderedContext(NamedTuple):
    """Rendered payload and the path -> representation side-table."""

    payload: str
    side_table: dict[str, Representation]


def _render_block(item: CandidateItem, representation: Representation) -> str:
    if isinstance(representation, BinaryReference):
        return (
            f"FILE: {item.path} (Binary format, {representation.original_size} bytes, "
            f"compressed to {representation.compressed_size} bytes)\n"
            f"REF: {representation.artifact_id}\n\n"
        )
    return f"FILE: {item.path}\n\n```{item.language or ''}\n{representation.text}\n```\n\n"


class ContextAssembler:
    """Render allocator decisions as a delimited context payload.

    Retained items become ``FILE:`` blocks in allocator order under a fixed
    header: fenced code for verbatim and summary tiers, a ``REF:`` line for
    binary references. Dropped items are not rendered but appear in the
    side-table with their reason. Pure; performs no I/O.
    """

    header = CONTEXT_HEADER

    def render(self, resolved: Union[AllocationResult, Resolved]) -> RenderedContext:
        if isinstance(resolved, AllocationResult):
            resolved = resolved.resolved

        parts = [self.header]
        side_table: dict[str, Representation] = {}
        for item, representation in resolved:
            side_table[item.path] = representation
            if isinstance(representation, Dropped):
                continue
            parts.append(_render_block(item, representation))
        return RenderedContext(payload="".join(parts), side_table=side_table)


def render_context(resolved: Union[AllocationResult, Resolved]) -> RenderedContext:
    """Render with a default ContextAssembler."""
    return ContextAssembler().render(resolved)


def compose_prompt(
    context: str,
    request: str,
    history: Sequence[Union[ConversationMessage, Mapping[str, str]]] = (),
    insights: Optional[str] = None,
) -> str:
    """Combine context, prior turns and the new request into one prompt.

    Args:
        context: Rendered context payload
        request: The new user request
        history: Prior turns, oldest first, excluding the new request
        insights: Optional notes from earlier conversations, added under a
            "## Historical Context" heading

    Returns:
        Prompt text for the model-invocation collaborator
    """
    if insights:
        context += f"\n\n{INSIGHTS_HEADER}\n\n{insights}\n\n"

    if not history:
        return f"{context}\n\n{request}"

    turns = (
        message if isinstance(message, ConversationMessage) else ConversationMessage.model_validate(message)
        for message in history
    )
    transcript = "".join(f"{turn.role.upper()}: {turn.content}\n\n" for turn in turns)
    return f"{context}\n\n{HISTORY_HEADER}{transcript}\n\n{CURRENT_REQUEST_HEADER}{request}"
