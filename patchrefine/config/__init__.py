"""Centralized configuration management for patchrefine.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from patchrefine.config import EnvVar, get_environment
    >>>
    >>> size = get_environment(EnvVar.REFINE_HISTORY_SIZE)  # Returns int: 5
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
    >>>
    >>> for var in list_environment_variables("service"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    logging: Log output configuration
    refinement: Refinement engine tuning (history size)
    service: MCP server bind address, port and session limit
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_environment,
    get_environment_info,
    get_history_size,
    get_log_level,
    get_session_limit,
    # Introspection
    list_environment_variables,
)

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
