"""Reversible code codec.

Key Components:
    - CodeCodec: Strategy-selecting encoder/decoder with compression fallback
    - CodecStrategy: ast | tokenization | compression
    - BinaryArtifact: Encoded bytes plus strategy, metadata and fallback info

Usage:
    from context_pack.core.codec import CodeCodec, CodecStrategy

    codec = CodeCodec()
    artifact = codec.encode(source, "typescript", CodecStrategy.COMPRESSION)
    source == codec.decode(artifact)  # True for compression
"""

from .codec import CodeCodec
from .constants import TOKEN_MAPS
from .models import ArtifactMetadata, BinaryArtifact, CodecStrategy, normalize_language
from .parsers import default_parsers, parse_javascript, parse_python, parse_typescript
from .strategies import (
    AstStrategy,
    CodeGenerator,
    CompressionStrategy,
    StrategyCodec,
    TokenizationStrategy,
)

__all__ = [
    # Codec
    "CodeCodec",
    "CodecStrategy",
    # Models
    "ArtifactMetadata",
    "BinaryArtifact",
    "normalize_language",
    # Strategies
    "StrategyCodec",
    "CompressionStrategy",
    "TokenizationStrategy",
    "AstStrategy",
    "CodeGenerator",
    "TOKEN_MAPS",
    # Parsers
    "default_parsers",
    "parse_python",
    "parse_javascript",
    "parse_typescript",
]
