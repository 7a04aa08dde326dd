"""ContextPackConfig dataclass and global configuration state.

This module defines the ``ContextPackConfig`` class (field declarations and
logging setup) and the global ``get_config`` / ``set_config`` helpers.
Loading logic lives in the ``_ConfigLoader`` mixin (``loader.py``).
The global holds configuration only; stores are always passed explicitly.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from context_pack.config.domains import BudgetConfig, CodecConfig, SummaryConfig
from context_pack.config.loader import _ConfigLoader

_PACKAGE_LOGGER = "context_pack"


@dataclass
class ContextPackConfig(_ConfigLoader):
    """Configuration with support for env vars and TOML overrides."""

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    # Token budget configuration
    budget: BudgetConfig = field(default_factory=BudgetConfig)

    # Code codec configuration
    codec: CodecConfig = field(default_factory=CodecConfig)

    # Structural summary configuration
    summary: SummaryConfig = field(default_factory=SummaryConfig)

    startup_warnings: List[str] = field(default_factory=list, repr=False)

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def setup_logging(self) -> None:
        """Configure the package logger based on settings.

        Replaces any handler installed by an earlier call.
        """
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler.set_name(_PACKAGE_LOGGER)

        package_logger = logging.getLogger(_PACKAGE_LOGGER)
        for existing in list(package_logger.handlers):
            if existing.get_name() == _PACKAGE_LOGGER:
                package_logger.removeHandler(existing)
        package_logger.setLevel(level)
        package_logger.addHandler(handler)


# Global configuration instance
_config: Optional[ContextPackConfig] = None


def get_config() -> ContextPackConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ContextPackConfig.from_env()
    return _config


def set_config(config: Optional[ContextPackConfig]) -> None:
    """Set the global configuration instance (None reloads on next get_config)."""
    global _config
    _config = config
