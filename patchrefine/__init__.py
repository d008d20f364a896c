"""patchrefine: conversational refinement of Eurorack patches."""

from patchrefine.core import EmptyFeedbackError, MappingError, RefinementError
from patchrefine.feedback import ParsedFeedback, parse_feedback
from patchrefine.history import RefinementHistory
from patchrefine.intents import check_special_intents, detect_save_intent
from patchrefine.models import ParsedRack, Patch, export_patch_schema
from patchrefine.modification import (
    PatchModification,
    apply_modifications,
    map_feedback_to_modifications,
)
from patchrefine.refine import RefinementResult, refine_patch
from patchrefine.session import RefinementSession, TurnKind, TurnResult
from patchrefine.validation import validate_modifications, validate_patch

__all__ = [
    # Models
    "Patch",
    "ParsedRack",
    "export_patch_schema",
    # Pipeline
    "parse_feedback",
    "ParsedFeedback",
    "map_feedback_to_modifications",
    "PatchModification",
    "apply_modifications",
    "validate_modifications",
    "validate_patch",
    "refine_patch",
    "RefinementResult",
    # Conversation
    "check_special_intents",
    "detect_save_intent",
    "RefinementHistory",
    "RefinementSession",
    "TurnKind",
    "TurnResult",
    # Errors
    "RefinementError",
    "EmptyFeedbackError",
    "MappingError",
]
