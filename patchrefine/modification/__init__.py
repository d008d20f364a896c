"""Patch modification mapping and application.

Example:
    >>> from patchrefine.feedback import parse_feedback
    >>> from patchrefine.modification import (
    ...     apply_modifications,
    ...     map_feedback_to_modifications,
    ... )
    >>> modification = map_feedback_to_modifications(
    ...     parse_feedback("darker"), patch, rack
    ... )
    >>> patch = apply_modifications(patch, modification)
"""

from patchrefine.modification.apply import apply_modifications
from patchrefine.modification.lib import (
    DECREASE_FACTOR,
    INCREASE_FACTOR,
    ModificationChanges,
    ParameterChange,
    PatchModification,
    map_feedback_to_modifications,
    scale_value,
)

__all__ = [
    "DECREASE_FACTOR",
    "INCREASE_FACTOR",
    "ModificationChanges",
    "ParameterChange",
    "PatchModification",
    "apply_modifications",
    "map_feedback_to_modifications",
    "scale_value",
]
