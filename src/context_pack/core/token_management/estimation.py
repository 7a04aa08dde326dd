"""Token estimation with provider tokenizer fallback.

Provides:
    - estimate_tokens(): ceil(chars / 4) estimate, optionally via a registered tokenizer
    - register_provider_tokenizer(): Register provider-specific tokenizers
    - unregister_provider_tokenizer(): Remove a registered tokenizer
"""

import logging
import math
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Characters per token for Latin-script code and prose
CHARS_PER_TOKEN = 4

# Provider-specific tokenizers: maps provider id -> counting function
_PROVIDER_TOKENIZERS: dict[str, Callable[[str], int]] = {}


def register_provider_tokenizer(provider: str, tokenizer: Callable[[str], int]) -> None:
    """Register a provider-specific tokenizer function.

    Args:
        provider: Provider identifier (e.g., "claude", "openai")
        tokenizer: Function that takes content string and returns token count

    Example:
        def my_tokenizer(content: str) -> int:
            return len(my_api.count_tokens(content))
        register_provider_tokenizer("my_provider", my_tokenizer)
    """
    _PROVIDER_TOKENIZERS[provider.lower()] = tokenizer


def unregister_provider_tokenizer(provider: str) -> bool:
    """Remove a provider tokenizer.

    Returns:
        True if a tokenizer was registered for the provider
    """
    return _PROVIDER_TOKENIZERS.pop(provider.lower(), None) is not None


def _estimate_heuristic(content: str) -> int:
    """Estimate tokens as ceil(characters / 4)."""
    return math.ceil(len(content) / CHARS_PER_TOKEN)


def estimate_tokens(content: Optional[str], provider: Optional[str] = None) -> int:
    """Estimate the token count for content.

    The estimate is ``ceil(len(content) / 4)``, an approximation of sub-word
    tokenization for Latin-script text. When a tokenizer has been registered
    for ``provider`` it is used instead; any failure or non-integer result
    from it falls back to the character formula, so this function never
    raises.

    Args:
        content: Text to estimate (None and "" both yield 0)
        provider: Optional provider whose registered tokenizer to prefer

    Returns:
        Non-negative token estimate

    Example:
        estimate_tokens("x" * 100)  # 25
        estimate_tokens("abcde")  # 2
    """
    if not content:
        return 0

    provider_key = (provider or "").lower()
    tokenizer = _PROVIDER_TOKENIZERS.get(provider_key) if provider_key else None
    if tokenizer is not None:
        try:
            count = tokenizer(content)
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
                return count
            logger.debug(f"Provider tokenizer for {provider_key} returned invalid count: {count!r}")
        except Exception as e:
            logger.debug(f"Provider tokenizer failed for {provider_key}: {e}")

    return _estimate_heuristic(content)
