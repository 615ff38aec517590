"""Enhanced CoT MCP Configuration.

Centralized configuration management with environment variable support.

Usage:
    from enhanced_cot.config import get_config
    print(get_config().server.name)
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger

from enhanced_cot.tools.cot_types import AutoCoTConfig


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable, treating empty string as unset."""
    value = os.getenv(key, default)
    return value if value else default


def _get_env_int(key: str, default: int) -> int:
    """Integer variable; unparseable values log a warning and use the default."""
    value = os.getenv(key)
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value}, using default {default}")
    return default


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Boolean variable: true, 1 or yes (case-insensitive)."""
    value = _get_env(key, "").lower()
    if not value:
        return default
    return value in ("true", "1", "yes")


@dataclass(frozen=True)
class ServerConfig:
    """MCP server identity and transport."""

    name: str = field(default_factory=lambda: _get_env("SERVER_NAME", "Enhanced-CoT-MCP"))
    transport: str = field(default_factory=lambda: _get_env("SERVER_TRANSPORT", "stdio"))
    host: str = field(default_factory=lambda: _get_env("SERVER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_env_int("SERVER_PORT", 8000))


@dataclass(frozen=True)
class DisplayConfig:
    """Console rendering of accepted thoughts."""

    disable_thought_logging: bool = field(
        default_factory=lambda: _get_env_bool("DISABLE_COT_LOGGING", False)
    )


@dataclass(frozen=True)
class AutoCoTSettings:
    """Auto-CoT switches."""

    # Empty string disables trigger detection, so read it raw
    trigger: str = field(
        default_factory=lambda: os.getenv("AUTO_COT_TRIGGER", "Let's think step by step")
    )
    diversity_sampling: bool = field(
        default_factory=lambda: _get_env_bool("AUTO_COT_DIVERSITY_SAMPLING", True)
    )
    template_suggestion: bool = field(
        default_factory=lambda: _get_env_bool("AUTO_COT_TEMPLATE_SUGGESTION", True)
    )
    context_aware: bool = field(
        default_factory=lambda: _get_env_bool("AUTO_COT_CONTEXT_AWARE", True)
    )

    def to_auto_cot_config(self) -> AutoCoTConfig:
        """Build the engine-side Auto-CoT configuration."""
        return AutoCoTConfig(
            trigger=self.trigger,
            diversity_sampling=self.diversity_sampling,
            template_suggestion=self.template_suggestion,
            context_aware=self.context_aware,
        )


@dataclass(frozen=True)
class SessionConfig:
    """Expiry of idle chain sessions."""

    max_age_minutes: int = field(
        default_factory=lambda: _get_env_int("SESSION_MAX_AGE_MINUTES", 30)
    )


@dataclass(frozen=True)
class InputLimitsConfig:
    """Per-thought and per-session size caps (CWE-400 mitigation)."""

    max_thought_size: int = field(default_factory=lambda: _get_env_int("MAX_THOUGHT_SIZE", 10000))
    max_thoughts_per_session: int = field(
        default_factory=lambda: _get_env_int("MAX_THOUGHTS_PER_SESSION", 1000)
    )


@dataclass(frozen=True)
class Config:
    """All configuration groups, read once from the environment."""

    server: ServerConfig = field(default_factory=ServerConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    auto_cot: AutoCoTSettings = field(default_factory=AutoCoTSettings)
    session: SessionConfig = field(default_factory=SessionConfig)
    input_limits: InputLimitsConfig = field(default_factory=InputLimitsConfig)

    def to_dict(self) -> dict[str, Any]:
        """Nested plain-dict view, safe to log."""
        return asdict(self)


_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide configuration, building it on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Re-read the environment and replace the process-wide configuration."""
    global _config
    _config = Config()
    return _config
