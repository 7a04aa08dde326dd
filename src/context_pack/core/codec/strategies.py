"""Encoding strategy implementations.

One class per ``CodecStrategy`` member, all satisfying ``StrategyCodec``.
Strategies raise freely; ``CodeCodec`` owns the fallback and error policy.
"""

from __future__ import annotations

import json
import time
import zlib
from typing import Any, Callable, Optional, Protocol, Type

from context_pack.core.errors.codec import (
    AstDecodeError,
    CompressionDecodeError,
    DecodeFailure,
    TokenizationDecodeError,
    UnsupportedLanguageError,
)

from .constants import ENVELOPE_KEYS, TOKEN_MAPS
from .models import ArtifactMetadata, BinaryArtifact, CodecStrategy
from .parsers import ParserFunc

CodeGenerator = Callable[[Any], str]


class StrategyCodec(Protocol):
    """Interface shared by the encoding strategies."""

    strategy: CodecStrategy

    def encode(
        self, text: str, language: Optional[str], *, include_metadata: bool = False
    ) -> BinaryArtifact: ...

    def decode(self, artifact: BinaryArtifact) -> str: ...


def _to_bytes(text: str) -> bytes:
    # surrogatepass keeps lone surrogates round-trippable
    return text.encode("utf-8", errors="surrogatepass")


def _inflate_text(
    data: bytes, error_cls: Type[DecodeFailure], language: Optional[str]
) -> str:
    try:
        raw = zlib.decompress(data)
    except zlib.error as exc:
        raise error_cls(f"Could not inflate artifact: {exc}", language=language) from exc
    try:
        return raw.decode("utf-8", errors="surrogatepass")
    except UnicodeDecodeError as exc:
        raise error_cls(f"Artifact is not valid UTF-8 text: {exc}", language=language) from exc


# =============================================================================
# Compression
# =============================================================================


class CompressionStrategy:
    """Deflate the UTF-8 text, optionally inside a metadata envelope.

    The envelope is the JSON object ``{"metadata": {...}, "code": text}``;
    its timestamp never affects what decode returns.
    """

    strategy = CodecStrategy.COMPRESSION

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time

    def encode(
        self, text: str, language: Optional[str], *, include_metadata: bool = False
    ) -> BinaryArtifact:
        metadata: Optional[ArtifactMetadata] = None
        payload = text
        if include_metadata:
            metadata = ArtifactMetadata.for_text(text, int(self._clock() * 1000))
            payload = json.dumps({"metadata": metadata.to_envelope(), "code": text})
        return BinaryArtifact(
            data=zlib.compress(_to_bytes(payload)),
            strategy=self.strategy,
            language=language,
            metadata=metadata,
            has_envelope=include_metadata,
        )

    def decode(self, artifact: BinaryArtifact) -> str:
        text = _inflate_text(artifact.data, CompressionDecodeError, artifact.language)
        if artifact.has_envelope is False:
            return text

        try:
            envelope = json.loads(text)
        except ValueError as exc:
            if artifact.has_envelope:
                raise CompressionDecodeError(
                    f"Metadata envelope is not valid JSON: {exc}", language=artifact.language
                ) from exc
            return text

        if (
            isinstance(envelope, dict)
            and set(envelope) == ENVELOPE_KEYS
            and isinstance(envelope["code"], str)
        ):
            return envelope["code"]
        if artifact.has_envelope:
            raise CompressionDecodeError(
                "Metadata envelope is missing its code field", language=artifact.language
            )
        return text


# =============================================================================
# Tokenization
# =============================================================================


class TokenizationStrategy:
    """Keyword substitution followed by deflate.

    Not lossless: a source that already contains a stand-in, or a pattern
    that a later substitution rewrites, decodes to different text. Use only
    on explicit caller request.
    """

    strategy = CodecStrategy.TOKENIZATION

    def __init__(self, token_maps: Optional[dict[str, dict[str, str]]] = None):
        self._token_maps = token_maps if token_maps is not None else TOKEN_MAPS

    def encode(
        self, text: str, language: Optional[str], *, include_metadata: bool = False
    ) -> BinaryArtifact:
        token_map = self._token_maps.get(language or "")
        if not token_map:
            raise UnsupportedLanguageError(self.strategy.value, language)

        tokenized = text
        for pattern, replacement in token_map.items():
            tokenized = tokenized.replace(pattern, replacement)

        return BinaryArtifact(
            data=zlib.compress(_to_bytes(tokenized)),
            strategy=self.strategy,
            language=language,
            has_envelope=False,
        )

    def decode(self, artifact: BinaryArtifact) -> str:
        token_map = self._token_maps.get(artifact.language or "")
        if not token_map:
            raise TokenizationDecodeError(
                f"No token dictionary for language: {artifact.language or '<none>'}",
                language=artifact.language,
            )

        code = _inflate_text(artifact.data, TokenizationDecodeError, artifact.language)
        for pattern, replacement in token_map.items():
            code = code.replace(replacement, pattern)
        return code


# =============================================================================
# AST
# =============================================================================


class AstStrategy:
    """Serialize a pruned syntax tree and deflate it.

    Decoding requires a code generator registered for the language; with
    none available decode raises ``AstDecodeError`` instead of guessing.
    """

    strategy = CodecStrategy.AST

    def __init__(
        self,
        parsers: Optional[dict[str, ParserFunc]] = None,
        generators: Optional[dict[str, CodeGenerator]] = None,
    ):
        self.parsers: dict[str, ParserFunc] = dict(parsers or {})
        self.generators: dict[str, CodeGenerator] = dict(generators or {})

    def encode(
        self, text: str, language: Optional[str], *, include_metadata: bool = False
    ) -> BinaryArtifact:
        parser = self.parsers.get(language or "")
        if parser is None:
            raise UnsupportedLanguageError(self.strategy.value, language)

        tree = parser(text)
        serialized = json.dumps(tree, separators=(",", ":"))
        return BinaryArtifact(
            data=zlib.compress(serialized.encode("utf-8")),
            strategy=self.strategy,
            language=language,
            has_envelope=False,
        )

    def decode(self, artifact: BinaryArtifact) -> str:
        language = artifact.language
        serialized = _inflate_text(artifact.data, AstDecodeError, language)
        try:
            tree = json.loads(serialized)
        except ValueError as exc:
            raise AstDecodeError(f"Syntax tree is not valid JSON: {exc}", language=language) from exc

        generator = self.generators.get(language or "")
        if generator is None:
            raise AstDecodeError(
                f"No code generator registered for language: {language or '<none>'}",
                language=language,
            )

        try:
            code = generator(tree)
        except Exception as exc:
            raise AstDecodeError(f"Code generator failed: {exc}", language=language) from exc
        if not isinstance(code, str):
            raise AstDecodeError(
                f"Code generator returned {type(code).__name__}, expected str",
                language=language,
            )
        return code
