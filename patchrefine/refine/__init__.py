"""Refinement orchestration for patchrefine.

Example:
    >>> from patchrefine.refine import refine_patch
    >>> result = refine_patch(patch, "make it darker", rack)
    >>> if result.success:
    ...     patch = result.updated_patch
"""

from patchrefine.core.errors import EmptyFeedbackError, MappingError, RefinementError
from patchrefine.refine.lib import (
    RefinementResult,
    SaveDecision,
    generate_impossible_request_message,
    generate_undo_message,
    generate_variation_message,
    handle_save_intent,
    handle_start_fresh_intent,
    handle_variations_intent,
    refine_patch,
)

__all__ = [
    # Pipeline
    "RefinementResult",
    "refine_patch",
    # Special intents
    "SaveDecision",
    "handle_save_intent",
    "handle_start_fresh_intent",
    "handle_variations_intent",
    "generate_undo_message",
    "generate_variation_message",
    "generate_impossible_request_message",
    # Errors
    "RefinementError",
    "EmptyFeedbackError",
    "MappingError",
]
