"""Section configuration dataclasses.

Contains the small configuration classes for each TOML section: token
budget, code codec, and structural summaries.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from context_pack.config.parsing import _parse_non_negative_int, _parse_strict_bool
from context_pack.core.codec import CodecStrategy


@dataclass
class BudgetConfig:
    """Token budget settings for context building.

    Attributes:
        max_tokens: Model context size the whole request must fit in
        response_reserve_tokens: Tokens held back for the model's response
        small_file_threshold: Files below this token cost are included verbatim
        recent_file_limit: Recency-ranked filler files fetched per build
    """

    max_tokens: int = 8000
    response_reserve_tokens: int = 2000
    small_file_threshold: int = 500
    recent_file_limit: int = 10

    def __post_init__(self) -> None:
        """Validate that all limits are non-negative integers."""
        for name in (
            "max_tokens",
            "response_reserve_tokens",
            "small_file_threshold",
            "recent_file_limit",
        ):
            setattr(self, name, _parse_non_negative_int(getattr(self, name), name=name))

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "BudgetConfig":
        """Create config from TOML dict (typically [budget] section).

        Raises:
            ValueError: If any value is not a non-negative integer
        """
        return cls(
            max_tokens=data.get("max_tokens", 8000),
            response_reserve_tokens=data.get("response_reserve_tokens", 2000),
            small_file_threshold=data.get("small_file_threshold", 500),
            recent_file_limit=data.get("recent_file_limit", 10),
        )


@dataclass
class CodecConfig:
    """Code codec settings.

    Attributes:
        default_strategy: Strategy used when materializing artifacts
        include_metadata: Embed line/char counts and a timestamp in
            compression artifacts
        materialize_artifacts: Encode artifacts on demand for files too
            large for verbatim inclusion
    """

    default_strategy: Union[CodecStrategy, str] = CodecStrategy.COMPRESSION
    include_metadata: bool = False
    materialize_artifacts: bool = False

    def __post_init__(self) -> None:
        """Normalize the strategy name.

        Raises:
            ValueError: If default_strategy is not a known strategy
        """
        raw = self.default_strategy
        if isinstance(raw, str) and not isinstance(raw, CodecStrategy):
            raw = raw.strip().lower()
        try:
            self.default_strategy = CodecStrategy(raw)
        except ValueError:
            valid = ", ".join(strategy.value for strategy in CodecStrategy)
            raise ValueError(
                f"Unknown codec strategy {self.default_strategy!r}. Valid options: {valid}"
            ) from None

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "CodecConfig":
        """Create config from TOML dict (typically [codec] section)."""
        return cls(
            default_strategy=data.get("default_strategy", CodecStrategy.COMPRESSION),
            include_metadata=_parse_strict_bool(
                data.get("include_metadata", False), name="include_metadata"
            ),
            materialize_artifacts=_parse_strict_bool(
                data.get("materialize_artifacts", False), name="materialize_artifacts"
            ),
        )


@dataclass
class SummaryConfig:
    """Structural summary settings.

    Attributes:
        char_limit: Summary length before truncation
    """

    char_limit: int = 1000

    def __post_init__(self) -> None:
        self.char_limit = _parse_non_negative_int(self.char_limit, name="char_limit")

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "SummaryConfig":
        """Create config from TOML dict (typically [summary] section)."""
        return cls(char_limit=data.get("char_limit", 1000))
