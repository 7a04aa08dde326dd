"""Data models for the code codec.

Key Components:
    - CodecStrategy: Enum selecting the encoding strategy
    - ArtifactMetadata: Line/char counts and timestamp embedded by compression
    - BinaryArtifact: Encoded bytes tagged with the strategy that produced them
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .constants import LANGUAGE_ALIASES


class CodecStrategy(str, Enum):
    """Strategies for encoding source text into a binary artifact.

    Strategies:
        COMPRESSION: Deflate the UTF-8 text, optionally inside a metadata
            envelope. Default, lossless for every input, and the fallback
            for the other two.
        TOKENIZATION: Substitute a fixed keyword dictionary with single
            code-point stand-ins, then deflate. A density optimization only;
            not lossless for arbitrary input.
        AST: Parse to a syntax tree, strip positions and comments, serialize
            and deflate. Decoding needs an externally supplied generator.
    """

    AST = "ast"
    TOKENIZATION = "tokenization"
    COMPRESSION = "compression"

    @property
    def lossless(self) -> bool:
        """Whether decode(encode(x)) == x is guaranteed for this strategy."""
        return self is CodecStrategy.COMPRESSION


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Lower-case a language tag and resolve short aliases ("ts" -> "typescript")."""
    if not language:
        return None
    key = language.strip().lower()
    return LANGUAGE_ALIASES.get(key, key)


@dataclass(frozen=True)
class ArtifactMetadata:
    """Metadata embedded in a compression artifact.

    Attributes:
        line_count: Number of lines ("\\n"-separated) in the source
        char_count: Number of characters in the source
        timestamp: Encode time in milliseconds since the epoch
    """

    line_count: int
    char_count: int
    timestamp: int

    @classmethod
    def for_text(cls, text: str, timestamp: int) -> "ArtifactMetadata":
        return cls(line_count=text.count("\n") + 1, char_count=len(text), timestamp=timestamp)

    def to_envelope(self) -> dict[str, int]:
        """Serialize with the envelope's wire key names."""
        return {
            "lineCount": self.line_count,
            "charCount": self.char_count,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_envelope(cls, data: dict[str, Any]) -> "ArtifactMetadata":
        return cls(
            line_count=int(data["lineCount"]),
            char_count=int(data["charCount"]),
            timestamp=int(data["timestamp"]),
        )


@dataclass(frozen=True)
class BinaryArtifact:
    """Opaque encoded bytes produced by the code codec.

    ``strategy`` is the strategy that actually produced ``data``. When a
    non-compression strategy failed and compression was substituted,
    ``requested_strategy`` keeps what the caller asked for and
    ``fallback_reason`` explains why.

    Attributes:
        data: Encoded bytes
        strategy: Strategy used to produce data
        language: Normalized language tag given at encode time
        metadata: Embedded metadata (compression with include_metadata only)
        requested_strategy: Strategy the caller asked for
        fallback_reason: Why the requested strategy was replaced, if it was
        artifact_id: Store-assigned identifier, stable for identical content
        has_envelope: Whether compressed data is wrapped in the metadata
            envelope; None when unknown (bytes handed in by a store)

    Example:
        artifact = codec.encode(source, "typescript", CodecStrategy.AST)
        if artifact.fell_back:
            logger.info(artifact.fallback_reason)
    """

    data: bytes
    strategy: CodecStrategy = CodecStrategy.COMPRESSION
    language: Optional[str] = None
    metadata: Optional[ArtifactMetadata] = None
    requested_strategy: Optional[CodecStrategy] = None
    fallback_reason: Optional[str] = None
    artifact_id: Optional[str] = None
    has_envelope: Optional[bool] = None

    @property
    def compressed_size(self) -> int:
        """Size of the encoded bytes."""
        return len(self.data)

    @property
    def fell_back(self) -> bool:
        """True when encode substituted compression for the requested strategy."""
        return self.fallback_reason is not None

    @property
    def lossless(self) -> bool:
        return self.strategy.lossless

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (without the payload bytes)."""
        return {
            "artifact_id": self.artifact_id,
            "strategy": self.strategy.value,
            "requested_strategy": (self.requested_strategy or self.strategy).value,
            "language": self.language,
            "compressed_size": self.compressed_size,
            "fallback_reason": self.fallback_reason,
            "metadata": self.metadata.to_envelope() if self.metadata else None,
        }
