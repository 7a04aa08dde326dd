"""Context assembly sub-package.

Key Components:
    - CompactionAllocator: Tiered allocation of candidate files under a token budget
    - StructuralSummarizer: Line-based structural summaries
    - ContextAssembler: Payload rendering plus path -> representation side-table
    - ContextBuilder: Store-backed end-to-end context building
    - plan_file_changes(): File changes proposed in a model response
"""

from .allocator import CompactionAllocator, content_artifact_id
from .assembler import ContextAssembler, RenderedContext, compose_prompt, render_context
from .builder import ContextBuilder
from .changes import (
    ChangeType,
    CodeBlock,
    FileChange,
    describe_change,
    extract_code_blocks,
    plan_file_changes,
)
from .constants import (
    CONTEXT_HEADER,
    EMPTY_CONTENT_PLACEHOLDER,
    SMALL_FILE_THRESHOLD,
    SUMMARY_CHAR_LIMIT,
    TRUNCATION_MARKER,
)
from .models import (
    AllocatedItem,
    AllocationResult,
    BinaryReference,
    BuiltContext,
    CandidateItem,
    ConversationMessage,
    DropReason,
    Dropped,
    PriorClass,
    Representation,
    Summary,
    Tier,
    Verbatim,
    rank_by_recency,
)
from .summarizer import StructuralSummarizer

__all__ = [
    # Constants
    "CONTEXT_HEADER",
    "EMPTY_CONTENT_PLACEHOLDER",
    "SMALL_FILE_THRESHOLD",
    "SUMMARY_CHAR_LIMIT",
    "TRUNCATION_MARKER",
    # Models
    "AllocatedItem",
    "AllocationResult",
    "BinaryReference",
    "BuiltContext",
    "CandidateItem",
    "ConversationMessage",
    "DropReason",
    "Dropped",
    "PriorClass",
    "Representation",
    "Summary",
    "Tier",
    "Verbatim",
    "rank_by_recency",
    # Allocation
    "CompactionAllocator",
    "content_artifact_id",
    "StructuralSummarizer",
    # Rendering
    "ContextAssembler",
    "RenderedContext",
    "compose_prompt",
    "render_context",
    # Building
    "ContextBuilder",
    # Change planning
    "ChangeType",
    "CodeBlock",
    "FileChange",
    "describe_change",
    "extract_code_blocks",
    "plan_file_changes",
]
