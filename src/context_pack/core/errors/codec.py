"""Code codec error classes.

Encoding failures never leave the codec (they trigger the compression
fallback), so ``UnsupportedLanguageError`` is only seen by strategy
implementations and tests. Decoding failures are raised to the caller,
one subclass per strategy.
"""

from __future__ import annotations

from typing import Any, Optional


class CodecError(Exception):
    """Base exception for code codec errors."""

    pass


class UnsupportedLanguageError(CodecError):
    """Raised when a strategy has no support for the requested language."""

    def __init__(self, strategy: str, language: Optional[str]):
        self.strategy = strategy
        self.language = language
        super().__init__(
            f"{strategy} strategy does not support language: {language or '<none>'}"
        )


# =============================================================================
# Decode Errors
# =============================================================================


class DecodeFailure(CodecError):
    """Raised when an artifact cannot be reconstructed into source text.

    Callers resolving a binary reference should catch this and treat the
    referenced file as unavailable rather than use partial output.

    Attributes:
        strategy: Strategy the artifact was decoded with
        language: Language tag passed to decode (may be None)
    """

    strategy = "unknown"

    def __init__(self, message: str, *, language: Optional[str] = None):
        self.language = language
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error_type": "decode_failure",
            "strategy": self.strategy,
            "language": self.language,
            "message": str(self),
        }


class CompressionDecodeError(DecodeFailure):
    """Raised when a compressed artifact is corrupt or not valid text."""

    strategy = "compression"


class TokenizationDecodeError(DecodeFailure):
    """Raised when a tokenized artifact cannot be inflated or de-substituted."""

    strategy = "tokenization"


class AstDecodeError(DecodeFailure):
    """Raised when an AST artifact cannot be turned back into source.

    This is the normal outcome for AST artifacts: without a registered
    code generator for the language there is nothing to rebuild text from.
    """

    strategy = "ast"
