"""ContextPackConfig loading logic.

Provides ``_ConfigLoader``, a mixin whose methods are inherited by
``ContextPackConfig`` (defined in ``settings.py``). Invalid values never
abort loading: they are logged, recorded in ``startup_warnings`` and the
previous value is kept.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, cast

if TYPE_CHECKING:
    from context_pack.config.settings import ContextPackConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from context_pack.config.domains import BudgetConfig, CodecConfig, SummaryConfig
from context_pack.config.parsing import (
    _normalize_log_level,
    _parse_non_negative_int,
    _parse_strict_bool,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONTEXT_PACK_"
CONFIG_FILE_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
PROJECT_CONFIG_NAME = "context-pack.toml"

# env var suffix -> (section attribute or None for top level, field name, parser)
_ENV_FIELDS: dict[str, tuple[Optional[str], str, Callable[..., Any]]] = {
    "LOG_LEVEL": (None, "log_level", lambda value, name: _normalize_log_level(value)),
    "STRUCTURED_LOGGING": (None, "structured_logging", _parse_strict_bool),
    "MAX_TOKENS": ("budget", "max_tokens", _parse_non_negative_int),
    "RESPONSE_RESERVE_TOKENS": ("budget", "response_reserve_tokens", _parse_non_negative_int),
    "SMALL_FILE_THRESHOLD": ("budget", "small_file_threshold", _parse_non_negative_int),
    "RECENT_FILE_LIMIT": ("budget", "recent_file_limit", _parse_non_negative_int),
    "CODEC_STRATEGY": (
        "codec",
        "default_strategy",
        lambda value, name: CodecConfig(default_strategy=value).default_strategy,
    ),
    "INCLUDE_METADATA": ("codec", "include_metadata", _parse_strict_bool),
    "MATERIALIZE_ARTIFACTS": ("codec", "materialize_artifacts", _parse_strict_bool),
    "SUMMARY_CHAR_LIMIT": ("summary", "char_limit", _parse_non_negative_int),
}

_SECTIONS: dict[str, Any] = {
    "budget": BudgetConfig,
    "codec": CodecConfig,
    "summary": SummaryConfig,
}


class _ConfigLoader:
    """Mixin providing config-loading methods for ``ContextPackConfig``.

    At runtime ``self`` is always a ``ContextPackConfig`` instance.
    """

    if TYPE_CHECKING:
        log_level: str
        structured_logging: bool
        budget: BudgetConfig
        codec: CodecConfig
        summary: SummaryConfig
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ContextPackConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables (CONTEXT_PACK_*)
        2. Explicit config file (argument or CONTEXT_PACK_CONFIG_FILE), or else:
           a. Project TOML config (./context-pack.toml)
           b. User TOML config (~/.context-pack.toml)
           c. XDG config (~/.config/context-pack/config.toml)
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            # Lowest priority first; later files override earlier ones
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "context-pack" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".context-pack.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path(PROJECT_CONFIG_NAME)
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")

        config._load_env()
        return cast("ContextPackConfig", config)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._add_startup_warning(message)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from a TOML file."""
        if not path.exists():
            self._warn(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            self._add_startup_warning(f"Error loading config file {path}: {e}")
            return

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                try:
                    self.log_level = _normalize_log_level(log["level"])
                except ValueError as e:
                    self._warn(f"Ignoring [logging].level in {path}: {e}")
            if "structured" in log:
                try:
                    self.structured_logging = _parse_strict_bool(log["structured"], name="structured")
                except ValueError as e:
                    self._warn(f"Ignoring [logging].structured in {path}: {e}")

        for section, section_cls in _SECTIONS.items():
            if section not in data:
                continue
            section_data = data[section]
            if not isinstance(section_data, dict):
                self._warn(f"Ignoring [{section}] in {path}: expected a table")
                continue
            current = getattr(self, section)
            try:
                setattr(self, section, section_cls.from_toml_dict({**asdict(current), **section_data}))
            except (TypeError, ValueError) as e:
                self._warn(f"Ignoring [{section}] in {path}: {e}")

    def _load_env(self) -> None:
        """Load configuration from CONTEXT_PACK_* environment variables."""
        for suffix, (section, field_name, parser) in _ENV_FIELDS.items():
            env_var = f"{ENV_PREFIX}{suffix}"
            raw = os.environ.get(env_var)
            if not raw:
                continue
            try:
                value = parser(raw, name=env_var)
            except ValueError as e:
                self._warn(f"Ignoring {env_var}: {e}")
                continue
            target = self if section is None else getattr(self, section)
            setattr(target, field_name, value)
