"""Core utilities shared across patchrefine packages."""

from .errors import EmptyFeedbackError, MappingError, RefinementError
from .log import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "RefinementError",
    "EmptyFeedbackError",
    "MappingError",
]
