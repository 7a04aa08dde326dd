"""context-pack - budget-constrained context assembly for LLM prompts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("context-pack")
except PackageNotFoundError:
    # Package not installed (development mode without editable install)
    __version__ = "0.3.0"

from context_pack.core.codec import BinaryArtifact, CodeCodec, CodecStrategy
from context_pack.core.context import (
    AllocationResult,
    CandidateItem,
    CompactionAllocator,
    ContextAssembler,
    ContextBuilder,
    PriorClass,
    StructuralSummarizer,
    Tier,
    compose_prompt,
    plan_file_changes,
)
from context_pack.core.errors import (
    AstDecodeError,
    CodecError,
    CompressionDecodeError,
    DecodeFailure,
    TokenizationDecodeError,
    UnsupportedLanguageError,
)
from context_pack.core.store import FileStore, InMemoryFileStore
from context_pack.core.token_management import ContextBudget, estimate_tokens

__all__ = [
    "__version__",
    "AllocationResult",
    "AstDecodeError",
    "BinaryArtifact",
    "CandidateItem",
    "CodeCodec",
    "CodecError",
    "CodecStrategy",
    "CompactionAllocator",
    "CompressionDecodeError",
    "ContextAssembler",
    "ContextBudget",
    "ContextBuilder",
    "DecodeFailure",
    "FileStore",
    "InMemoryFileStore",
    "PriorClass",
    "StructuralSummarizer",
    "Tier",
    "TokenizationDecodeError",
    "UnsupportedLanguageError",
    "compose_prompt",
    "estimate_tokens",
    "plan_file_changes",
]
