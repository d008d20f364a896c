"""Centralized environment configuration management for patchrefine.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from patchrefine.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> size = get_environment(EnvVar.REFINE_HISTORY_SIZE)  # Returns int
    >>>
    >>> # Override at runtime
    >>> size = get_environment(EnvVar.REFINE_HISTORY_SIZE, override=10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "MCP_PORT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str or int).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by patchrefine.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - logging: Log output configuration
        - refinement: Refinement engine tuning
        - service: MCP server bind address and limits
    """

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level name (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )

    # -------------------------------------------------------------------------
    # Refinement Engine
    # -------------------------------------------------------------------------
    REFINE_HISTORY_SIZE = EnvConfig(
        name="REFINE_HISTORY_SIZE",
        default=5,
        var_type=int,
        description="Patch snapshots kept per conversation for undo",
        category="refinement",
    )

    # -------------------------------------------------------------------------
    # MCP Server
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="0.0.0.0",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18090,
        var_type=int,
        description="MCP server port for HTTP/SSE transports",
        category="service",
    )
    MCP_SESSION_LIMIT = EnvConfig(
        name="MCP_SESSION_LIMIT",
        default=100,
        var_type=int,
        description="Refinement sessions held in memory before LRU eviction",
        category="service",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str or int).

    Example:
        >>> get_environment(EnvVar.MCP_PORT)
        18090
        >>> get_environment(EnvVar.MCP_PORT, override=9000)
        9000
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_history_size(override: int | None = None) -> int:
    """Get the undo history bound.

    Non-positive values fall back to the default, since a history must at
    least hold the patch being refined.
    """
    size = get_environment(EnvVar.REFINE_HISTORY_SIZE, override=override)
    if size < 1:
        return EnvVar.REFINE_HISTORY_SIZE.value.default
    return size


def get_log_level(override: str | None = None) -> str:
    """Get the configured log level name, upper-cased."""
    return str(get_environment(EnvVar.LOG_LEVEL, override=override)).upper()


def get_session_limit(override: int | None = None) -> int:
    """Get the maximum number of in-memory MCP sessions."""
    return max(1, get_environment(EnvVar.MCP_SESSION_LIMIT, override=override))


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (logging, refinement, service).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_history_size",
    "get_log_level",
    "get_session_limit",
    # Introspection
    "list_environment_variables",
]
