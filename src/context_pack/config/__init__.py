"""Configuration package for context-pack.

Sub-modules:
    parsing    – Boolean/integer/log-level parsing helpers
    domains    – BudgetConfig, CodecConfig, SummaryConfig
    loader     – TOML and environment loading mixin (_ConfigLoader)
    settings   – ContextPackConfig dataclass, get_config/set_config globals
    decorators – log_call, timed
"""

from context_pack.config.decorators import log_call, timed
from context_pack.config.domains import BudgetConfig, CodecConfig, SummaryConfig
from context_pack.config.loader import CONFIG_FILE_ENV_VAR, ENV_PREFIX
from context_pack.config.parsing import _try_parse_bool
from context_pack.config.settings import ContextPackConfig, get_config, set_config

__all__ = [
    "BudgetConfig",
    "CodecConfig",
    "SummaryConfig",
    "ContextPackConfig",
    "get_config",
    "set_config",
    "log_call",
    "timed",
    "CONFIG_FILE_ENV_VAR",
    "ENV_PREFIX",
    "_try_parse_bool",
]
