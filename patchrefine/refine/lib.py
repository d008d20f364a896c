"""Patch refinement orchestration.

`refine_patch` runs one feedback message through the whole pipeline:

    parse -> impossibility check -> clarification gate -> map -> validate -> apply

and always returns a RefinementResult. Faults inside the pipeline are
logged and reported as a failed result, never raised.

The `handle_*` and `generate_*` helpers build the replies for the special
intents (save, start fresh, variations, undo) that bypass refinement.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

from patchrefine.core.errors import EmptyFeedbackError
from patchrefine.feedback import (
    ParsedFeedback,
    generate_clarification_question,
    needs_clarification,
    parse_feedback,
)
from patchrefine.intents import generate_patch_name, generate_save_confirmation
from patchrefine.models import ParsedRack, Patch
from patchrefine.modification import (
    PatchModification,
    apply_modifications,
    map_feedback_to_modifications,
)
from patchrefine.rack import is_impossible_request
from patchrefine.validation import validate_modifications

logger = logging.getLogger(__name__)

TROUBLE_MESSAGE = (
    "Sorry, I had trouble understanding that request. Could you try rephrasing it?"
)
START_FRESH_MESSAGE = "🔄 Starting fresh! What kind of sound would you like to create?"
VARIATIONS_MESSAGE = "🎨 Let me generate some variations for you..."


@dataclass
class RefinementResult:
    """Outcome of one refinement attempt.

    Attributes:
        success: True when the patch was changed (or validly left as is).
        message: Reply for the user.
        updated_patch: New patch on success.
        modification: Applied modification on success.
        feedback: Parser output, when parsing got that far.
        needs_clarification: True when the reply is a question.
        impossible_request: True when the rack lacks the needed module.
        impossible_reason: Why the request is impossible.
        issues: Validation problems that blocked the change.
    """

    success: bool
    message: str
    updated_patch: Patch | None = None
    modification: PatchModification | None = None
    feedback: ParsedFeedback | None = None
    needs_clarification: bool = False
    impossible_request: bool = False
    impossible_reason: str | None = None
    issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase documents."""
        return {
            "success": self.success,
            "message": self.message,
            "updatedPatch": self.updated_patch.to_document() if self.updated_patch else None,
            "modification": self.modification.to_document() if self.modification else None,
            "feedback": self.feedback.to_dict() if self.feedback else None,
            "needsClarification": self.needs_clarification,
            "impossibleRequest": self.impossible_request,
            "impossibleReason": self.impossible_reason,
            "issues": list(self.issues),
        }


@dataclass
class SaveDecision:
    """What to persist when the user saves.

    Attributes:
        should_save: Always True; the caller performs the write.
        patch_name: Generated name for the saved patch.
        confirmation_message: Reply for the user.
    """

    should_save: bool
    patch_name: str
    confirmation_message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Refinement
# =============================================================================


def refine_patch(patch: Patch, text: str, rack: ParsedRack) -> RefinementResult:
    """Refine a patch from one free-text feedback message.

    Args:
        patch: Current patch. Never mutated.
        text: User feedback, e.g. "make it darker".
        rack: Rack inventory.

    Returns:
        RefinementResult describing the change, the question to ask, or
        why nothing could be done.

    Example:
        >>> result = refine_patch(patch, "add reverb", rack)
        >>> result.message
        '✨ Added reverb (Clouds) after Veils'
    """
    logger.info(f"Refining '{patch.title}' with feedback {(text or '')[:50]!r}")
    feedback: ParsedFeedback | None = None

    try:
        if not text or not text.strip():
            raise EmptyFeedbackError("Feedback text is empty")

        feedback = parse_feedback(text, patch, rack)

        feasibility = is_impossible_request(feedback, rack)
        if feasibility.impossible:
            return RefinementResult(
                success=False,
                message=generate_impossible_request_message(feasibility.reason),
                feedback=feedback,
                impossible_request=True,
                impossible_reason=feasibility.reason,
            )

        if needs_clarification(feedback):
            return RefinementResult(
                success=False,
                message=generate_clarification_question(text),
                feedback=feedback,
                needs_clarification=True,
            )

        modification = map_feedback_to_modifications(feedback, patch, rack)

        validation = validate_modifications(modification, patch, rack)
        if not validation.valid:
            logger.warning(f"Rejected modification: {validation.issues}")
            return RefinementResult(
                success=False,
                message=f"I can't make that change: {', '.join(validation.issues)}",
                modification=modification,
                feedback=feedback,
                issues=validation.issues,
            )

        updated = apply_modifications(patch, modification)

    except Exception:
        logger.exception(f"Refinement failed for feedback {(text or '')[:50]!r}")
        return RefinementResult(success=False, message=TROUBLE_MESSAGE, feedback=feedback)

    logger.info(f"Refinement complete: {modification.description}")
    return RefinementResult(
        success=True,
        message=f"✨ {modification.description}",
        updated_patch=updated,
        modification=modification,
        feedback=feedback,
    )


# =============================================================================
# Special Intent Handlers
# =============================================================================


def handle_save_intent(
    patch: Patch,
    modifications: Sequence[PatchModification],
    context: Sequence[str] | None = None,
) -> SaveDecision:
    """Name the patch and build the save confirmation.

    Args:
        patch: Patch being saved.
        modifications: Refinements applied during the conversation.
        context: User messages, for mood-based naming.

    Returns:
        SaveDecision with should_save=True.
    """
    name = generate_patch_name(patch.title, modifications, context or [])
    logger.info(f"Saving '{patch.title}' as '{name}'")
    return SaveDecision(
        should_save=True,
        patch_name=name,
        confirmation_message=generate_save_confirmation(name, modifications),
    )


def handle_start_fresh_intent() -> dict[str, Any]:
    return {"should_start_fresh": True, "message": START_FRESH_MESSAGE}


def handle_variations_intent() -> dict[str, Any]:
    return {"should_show_variations": True, "message": VARIATIONS_MESSAGE}


def generate_undo_message(previous_patch: Patch) -> str:
    return f'↩️ Reverted to previous version: "{previous_patch.title}"'


def generate_variation_message(count: int) -> str:
    plural = "s" if count > 1 else ""
    return f"🎨 Generated {count} variation{plural} for you! Which one interests you most?"


def generate_impossible_request_message(reason: str) -> str:
    return (
        f"I can't do that because {reason}. Would you like me to suggest some "
        "modules that could add that capability to your rack?"
    )


__all__ = [
    "RefinementResult",
    "SaveDecision",
    "refine_patch",
    "handle_save_intent",
    "handle_start_fresh_intent",
    "handle_variations_intent",
    "generate_undo_message",
    "generate_variation_message",
    "generate_impossible_request_message",
]
