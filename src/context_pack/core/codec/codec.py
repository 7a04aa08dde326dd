"""Code codec: reversible encoding of source text into binary artifacts.

CodeCodec selects one of three strategies by ``CodecStrategy``. Encoding
never fails past this class: any strategy error is absorbed and the text
is compressed instead, with the substitution recorded on the artifact.
Decoding raises a strategy-specific ``DecodeFailure`` when the artifact
cannot be reconstructed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Union

from .models import BinaryArtifact, CodecStrategy, normalize_language
from .parsers import ParserFunc, default_parsers
from .strategies import (
    AstStrategy,
    CodeGenerator,
    CompressionStrategy,
    StrategyCodec,
    TokenizationStrategy,
)

logger = logging.getLogger(__name__)


class CodeCodec:
    """Encode and decode source text under a selectable strategy.

    The codec keeps no per-call state; registered parsers and generators
    are configuration and may be shared across calls and threads once set.

    Example:
        codec = CodeCodec()
        artifact = codec.encode(source, "typescript")
        assert codec.decode(artifact) == source

        ast_artifact = codec.encode(source, "python", CodecStrategy.AST)
        codec.decode(ast_artifact)  # raises AstDecodeError (no generator)
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """Initialize the codec.

        Args:
            clock: Time source (seconds since the epoch) for metadata
                timestamps. Defaults to time.time.
        """
        self._ast = AstStrategy(parsers=default_parsers())
        self._strategies: dict[CodecStrategy, StrategyCodec] = {
            CodecStrategy.AST: self._ast,
            CodecStrategy.TOKENIZATION: TokenizationStrategy(),
            CodecStrategy.COMPRESSION: CompressionStrategy(clock=clock),
        }

    def register_parser(self, language: str, parser: ParserFunc) -> None:
        """Register (or replace) the AST parser for a language."""
        key = normalize_language(language)
        if key is None:
            raise ValueError("language must be a non-empty string")
        self._ast.parsers[key] = parser

    def register_code_generator(self, language: str, generator: CodeGenerator) -> None:
        """Register a tree-to-source generator, enabling AST decode for a language.

        The generator receives the decoded (pruned) tree and must return
        source text. It is never called for other strategies.
        """
        key = normalize_language(language)
        if key is None:
            raise ValueError("language must be a non-empty string")
        self._ast.generators[key] = generator

    def encode(
        self,
        text: Optional[str],
        language: Optional[str] = None,
        strategy: Union[CodecStrategy, str] = CodecStrategy.COMPRESSION,
        include_metadata: bool = False,
    ) -> BinaryArtifact:
        """Encode source text into a binary artifact.

        Args:
            text: Source text (None is treated as empty)
            language: Language tag; aliases such as "ts" are normalized
            strategy: Requested strategy
            include_metadata: Wrap compressed text in a metadata envelope
                (compression only)

        Returns:
            BinaryArtifact. When the requested strategy failed, the artifact
            was produced by compression and ``fell_back`` is True.

        Raises:
            ValueError: If strategy is not a known strategy name
        """
        requested = CodecStrategy(strategy)
        source = text or ""
        lang = normalize_language(language)

        try:
            return self._strategies[requested].encode(
                source, lang, include_metadata=include_metadata
            )
        except Exception as exc:
            if requested is CodecStrategy.COMPRESSION:
                raise
            reason = f"{type(exc).__name__}: {exc}"
            logger.warning(
                f"{requested.value} encoding failed for language {lang or '<none>'}, "
                f"falling back to compression: {reason}"
            )

        artifact = self._strategies[CodecStrategy.COMPRESSION].encode(
            source, lang, include_metadata=include_metadata
        )
        return replace(artifact, requested_strategy=requested, fallback_reason=reason)

    def decode(
        self,
        artifact: Union[BinaryArtifact, bytes],
        language: Optional[str] = None,
        strategy: Union[CodecStrategy, str, None] = None,
    ) -> str:
        """Reconstruct source text from an artifact.

        Args:
            artifact: A BinaryArtifact, or raw bytes from a store
            language: Language tag; overrides the artifact's own when given
            strategy: Strategy to decode with; defaults to the artifact's
                strategy, or compression for raw bytes. Passing the
                strategy originally requested for a fallen-back artifact
                decodes it with the strategy that actually produced it.

        Returns:
            The original source text

        Raises:
            DecodeFailure: Strategy-specific subclass when reconstruction
                is impossible (always the case for AST without a generator)
            ValueError: If strategy is not a known strategy name
        """
        lang = normalize_language(language)
        if isinstance(artifact, (bytes, bytearray, memoryview)):
            artifact = BinaryArtifact(
                data=bytes(artifact),
                strategy=CodecStrategy(strategy or CodecStrategy.COMPRESSION),
                language=lang,
            )
        else:
            overrides = {}
            wanted = CodecStrategy(strategy) if strategy is not None else artifact.strategy
            if wanted is artifact.requested_strategy:
                wanted = artifact.strategy
            if wanted is not artifact.strategy:
                # envelope knowledge only holds for the producing strategy
                overrides["strategy"] = wanted
                overrides["has_envelope"] = None
            if lang is not None:
                overrides["language"] = lang
            if overrides:
                artifact = replace(artifact, **overrides)

        return self._strategies[artifact.strategy].decode(artifact)
