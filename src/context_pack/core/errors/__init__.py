"""Unified error hierarchy for context-pack.

Usage:
    from context_pack.core.errors import DecodeFailure, AstDecodeError
"""

from context_pack.core.errors.codec import (
    AstDecodeError,
    CodecError,
    CompressionDecodeError,
    DecodeFailure,
    TokenizationDecodeError,
    UnsupportedLanguageError,
)

__all__ = [
    "CodecError",
    "UnsupportedLanguageError",
    "DecodeFailure",
    "CompressionDecodeError",
    "TokenizationDecodeError",
    "AstDecodeError",
]
