"""Token budget and per-allocation ledger.

Provides:
    - ContextBudget: Total/reserved token budget for one context window
    - TokenLedger: Running usage tracker owned by a single allocation pass
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .estimation import estimate_tokens

logger = logging.getLogger(__name__)

# Tokens held back for the model's response when building from a request
DEFAULT_RESPONSE_RESERVE = 2000


@dataclass(frozen=True)
class ContextBudget:
    """Token budget for assembling one context window.

    ``reserved`` accounts for the caller's own prompt plus a response
    allowance. A reservation at or above ``total`` is a configuration error
    but is not rejected here: the allocator treats it as "assemble nothing".

    Attributes:
        total: Hard upper bound on tokens for the whole request
        reserved: Tokens not available to context items

    Example:
        budget = ContextBudget(total=8_000, reserved=2_150)
        budget.available  # 5_850
    """

    total: int
    reserved: int = 0

    def __post_init__(self) -> None:
        """Validate budget parameters after initialization."""
        if self.total < 0:
            raise ValueError(f"total must be non-negative, got {self.total}")
        if self.reserved < 0:
            raise ValueError(f"reserved must be non-negative, got {self.reserved}")

    @property
    def available(self) -> int:
        """Tokens available for context items (may be negative when misconfigured)."""
        return self.total - self.reserved

    @property
    def is_misconfigured(self) -> bool:
        """True when the reservation leaves nothing for context items."""
        return self.reserved >= self.total

    @classmethod
    def for_request(
        cls,
        total: int,
        request_text: str,
        *,
        response_reserve: int = DEFAULT_RESPONSE_RESERVE,
        token_estimator: Optional[Callable[[str], int]] = None,
    ) -> "ContextBudget":
        """Build a budget that reserves room for a request and its response.

        Args:
            total: Model context size to fit in
            request_text: The caller's own prompt text
            response_reserve: Tokens reserved for the model's response
            token_estimator: Optional estimator (defaults to estimate_tokens)

        Returns:
            ContextBudget with reserved = request tokens + response_reserve
        """
        estimator = token_estimator or estimate_tokens
        return cls(total=total, reserved=estimator(request_text) + response_reserve)


class TokenLedger:
    """Running token usage for one allocation pass.

    ``used_tokens`` only grows and never exceeds ``available``: a commit
    that would overflow is refused without changing state.

    Example:
        ledger = TokenLedger(available=100)
        ledger.commit(60)  # True
        ledger.commit(50)  # False, used_tokens stays 60
    """

    def __init__(self, available: int):
        self.available = max(0, available)
        self._used_tokens = 0

    @property
    def used_tokens(self) -> int:
        """Tokens committed so far."""
        return self._used_tokens

    @property
    def remaining(self) -> int:
        """Tokens still available for commits."""
        return self.available - self._used_tokens

    @property
    def is_full(self) -> bool:
        """True once the ledger has reached the available budget."""
        return self._used_tokens >= self.available

    def can_fit(self, tokens: int) -> bool:
        """Check if a given number of tokens fits in the remaining budget.

        Raises:
            ValueError: If tokens is negative
        """
        if tokens < 0:
            raise ValueError(f"tokens must be non-negative, got {tokens}")
        return tokens <= self.remaining

    def commit(self, tokens: int) -> bool:
        """Commit tokens to the ledger.

        Returns:
            True if committed, False if the tokens do not fit

        Raises:
            ValueError: If tokens is negative
        """
        if not self.can_fit(tokens):
            logger.debug(f"Ledger commit refused: requested {tokens}, remaining {self.remaining}")
            return False
        self._used_tokens += tokens
        return True
