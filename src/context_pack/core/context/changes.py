"""Planning file changes from a model response.

Model responses carry proposed file contents in fenced blocks tagged
```` ```language:path ````. Each tagged block becomes a FileChange, compared
against the original text the context was built from.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from context_pack.config import log_call
from context_pack.core.codec import CodeCodec
from context_pack.core.errors import DecodeFailure

from .models import AllocatedItem, AllocationResult, DropReason, Dropped, Verbatim

logger = logging.getLogger(__name__)

_CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_]+)(?::(\S+))?\s*\n(.*?)```", re.DOTALL)


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block from a model response."""

    language: str
    path: Optional[str]
    code: str


@dataclass(frozen=True)
class FileChange:
    """A proposed change to one file.

    Attributes:
        path: File path from the block tag
        content: Proposed full file content
        change_type: CREATE for files not in the context, UPDATE otherwise
        description: Short human-readable summary of the change
        original_available: False when the original text could not be
            recovered (for example an AST artifact with no generator)
    """

    path: str
    content: str
    change_type: ChangeType
    description: str
    original_available: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "content": self.content,
            "type": self.change_type.value,
            "description": self.description,
            "original_available": self.original_available,
        }


def extract_code_blocks(response: str) -> list[CodeBlock]:
    """Extract fenced code blocks (with optional ``:path`` tag) in order.

    Block bodies are stripped of surrounding whitespace.
    """
    return [
        CodeBlock(language=match.group(1), path=match.group(2), code=match.group(3).strip())
        for match in _CODE_BLOCK_PATTERN.finditer(response)
    ]


def describe_change(original: str, updated: str) -> str:
    """Describe a change by its net line-count difference."""
    line_diff = len(updated.split("\n")) - len(original.split("\n"))
    if line_diff > 0:
        return f"Added {line_diff} lines"
    if line_diff < 0:
        return f"Removed {abs(line_diff)} lines"
    return "Modified without changing line count"


def _original_text(entry: AllocatedItem, codec: Optional[CodeCodec]) -> Optional[str]:
    """Recover the text an entry was built from, or None if unavailable."""
    if isinstance(entry.representation, Verbatim):
        return entry.representation.text
    if entry.item.content is not None:
        return entry.item.content

    artifact = entry.artifact or entry.item.artifact
    if artifact is None or codec is None:
        return None
    try:
        return codec.decode(artifact)
    except DecodeFailure as e:
        logger.warning(
            f"Original of {entry.path} unavailable: {e}",
            extra={"path": entry.path, "strategy": e.strategy, "error_type": type(e).__name__},
        )
        return None


def _is_new_file(entry: Optional[AllocatedItem]) -> bool:
    if entry is None:
        return True
    representation = entry.representation
    return (
        isinstance(representation, Dropped)
        and representation.reason == DropReason.ITEM_UNRESOLVABLE
    )


@log_call()
def plan_file_changes(
    response: str,
    allocation: AllocationResult,
    codec: Optional[CodeCodec] = None,
) -> list[FileChange]:
    """Turn path-tagged code blocks in a model response into file changes.

    Args:
        response: Model response text
        allocation: Allocation the prompt's context was rendered from
        codec: Codec used to decode binary artifacts of referenced files

    Returns:
        One FileChange per path-tagged block, in response order. Blocks
        without a path are skipped.
    """
    changes: list[FileChange] = []
    for block in extract_code_blocks(response):
        if not block.path:
            logger.warning("Code block without filepath, skipping")
            continue

        entry = allocation.get(block.path)
        if _is_new_file(entry):
            changes.append(
                FileChange(
                    path=block.path,
                    content=block.code,
                    change_type=ChangeType.CREATE,
                    description="Created new file",
                )
            )
            continue

        original = _original_text(entry, codec)
        if original is None:
            changes.append(
                FileChange(
                    path=block.path,
                    content=block.code,
                    change_type=ChangeType.UPDATE,
                    description="Updated file (original unavailable)",
                    original_available=False,
                )
            )
            continue

        changes.append(
            FileChange(
                path=block.path,
                content=block.code,
                change_type=ChangeType.UPDATE,
                description=describe_change(original, block.code),
            )
        )
    return changes
