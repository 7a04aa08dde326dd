"""Parsing and normalization helpers for configuration values.

Provides boolean, integer and log-level parsing used by the other config
sub-modules. Helpers raise ``ValueError`` on bad input; the loader turns
that into a startup warning.
"""

from typing import Any, Optional

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _try_parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "on"}:
        return True
    if normalized in {"false", "0", "no", "off"}:
        return False
    return None


def _parse_strict_bool(value: Any, *, name: str) -> bool:
    parsed = _try_parse_bool(value)
    if parsed is None:
        raise ValueError(f"{name} must be boolean-compatible, got {value!r}")
    return parsed


def _parse_non_negative_int(value: Any, *, name: str) -> int:
    """Parse an int >= 0 from TOML or env input (bools rejected)."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        parsed = int(str(value).strip()) if not isinstance(value, int) else value
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed < 0:
        raise ValueError(f"{name} must be non-negative, got {parsed}")
    return parsed


def _normalize_log_level(value: Any) -> str:
    normalized = str(value).strip().upper()
    if normalized not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level {value!r}. Valid options: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return normalized
