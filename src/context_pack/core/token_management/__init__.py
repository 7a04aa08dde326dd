"""Token management utilities for context assembly.

Key Components:
    - estimate_tokens(): ceil(chars / 4) estimate with provider tokenizer override
    - register_provider_tokenizer(): Plug in an exact tokenizer per provider
    - ContextBudget: Total and reserved tokens for one context window
    - TokenLedger: Running usage tracker for one allocation pass

Usage:
    from context_pack.core.token_management import (
        ContextBudget,
        TokenLedger,
        estimate_tokens,
    )

    budget = ContextBudget.for_request(8_000, "Fix the login bug")
    ledger = TokenLedger(budget.available)
    if ledger.commit(estimate_tokens(file_text)):
        ...
"""

from .budget import DEFAULT_RESPONSE_RESERVE, ContextBudget, TokenLedger
from .estimation import (
    _PROVIDER_TOKENIZERS,
    CHARS_PER_TOKEN,
    estimate_tokens,
    register_provider_tokenizer,
    unregister_provider_tokenizer,
)

__all__ = [
    # Budget
    "DEFAULT_RESPONSE_RESERVE",
    "ContextBudget",
    "TokenLedger",
    # Estimation
    "CHARS_PER_TOKEN",
    "estimate_tokens",
    "register_provider_tokenizer",
    "unregister_provider_tokenizer",
    "_PROVIDER_TOKENIZERS",
]
