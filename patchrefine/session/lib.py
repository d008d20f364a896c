"""Chat-turn sessions.

A RefinementSession owns one conversation about one patch: it routes each
user message to undo, save, start fresh, variations or refinement, and
keeps the history and applied modifications that those turns need.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from patchrefine.history import RefinementHistory
from patchrefine.intents import check_special_intents
from patchrefine.models import ParsedRack, Patch
from patchrefine.modification import PatchModification
from patchrefine.refine import (
    RefinementResult,
    SaveDecision,
    generate_undo_message,
    generate_variation_message,
    handle_save_intent,
    handle_start_fresh_intent,
    handle_variations_intent,
    refine_patch,
)

logger = logging.getLogger(__name__)

NOTHING_TO_UNDO_MESSAGE = "There's nothing to undo yet."


class TurnKind(str, Enum):
    """How a chat message was handled."""

    UNDO = "undo"
    SAVE = "save"
    START_FRESH = "start_fresh"
    VARIATIONS = "variations"
    REFINE = "refine"


@dataclass
class TurnResult:
    """Reply to one chat message.

    Attributes:
        kind: Which handler took the message.
        message: Reply for the user.
        patch: Current patch after the turn. For saves, the renamed copy
            marked saved=True that the caller should persist.
        refinement: Pipeline result, for refine turns.
        save: Naming decision, for save turns.
    """

    kind: TurnKind
    message: str
    patch: Patch
    refinement: RefinementResult | None = None
    save: SaveDecision | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "patch": self.patch.to_document(),
            "refinement": self.refinement.to_dict() if self.refinement else None,
            "save": self.save.to_dict() if self.save else None,
        }


class RefinementSession:
    """One conversation refining one patch.

    Messages are routed in priority order: undo, save, start fresh,
    variations, and otherwise refinement.

    Example:
        >>> session = RefinementSession(patch, rack)
        >>> session.handle_message("make it darker").kind
        <TurnKind.REFINE: 'refine'>
        >>> session.handle_message("perfect, save it").patch.saved
        True

    Args:
        patch: Patch the conversation starts from.
        rack: Rack inventory, fixed for the session.
        max_history: Undo depth. Defaults to REFINE_HISTORY_SIZE.
    """

    def __init__(self, patch: Patch, rack: ParsedRack, max_history: int | None = None):
        self._rack = rack
        self._history = RefinementHistory(patch, max_history)
        self._modifications: list[PatchModification] = []
        self._conversation: list[str] = []

    @property
    def rack(self) -> ParsedRack:
        return self._rack

    @property
    def history(self) -> RefinementHistory:
        return self._history

    @property
    def current_patch(self) -> Patch:
        return self._history.get_current_patch()

    @property
    def modifications(self) -> list[PatchModification]:
        """Modifications applied so far, oldest first."""
        return list(self._modifications)

    @property
    def conversation(self) -> list[str]:
        """User messages received so far."""
        return list(self._conversation)

    def handle_message(self, text: str) -> TurnResult:
        """Handle one user message and return the reply."""
        self._conversation.append(text)
        intents = check_special_intents(text)

        if intents.undo_intent:
            return self.undo()
        if intents.save_intent:
            return self._save()
        if intents.start_fresh_intent:
            return self._start_fresh()
        if intents.variations_intent:
            return self._variations()
        return self._refine(text)

    def undo(self) -> TurnResult:
        """Revert the last refinement, if any."""
        previous = self._history.undo()
        if previous is None:
            return TurnResult(
                kind=TurnKind.UNDO,
                message=NOTHING_TO_UNDO_MESSAGE,
                patch=self.current_patch,
            )

        if self._modifications:
            undone = self._modifications.pop()
            logger.info(f"Undid '{undone.description}'")
        return TurnResult(kind=TurnKind.UNDO, message=generate_undo_message(previous), patch=previous)

    def _save(self) -> TurnResult:
        patch = self.current_patch
        decision = handle_save_intent(patch, self._modifications, self._conversation)

        saved = patch.model_copy(deep=True)
        saved.metadata.title = decision.patch_name
        saved.saved = True
        return TurnResult(
            kind=TurnKind.SAVE,
            message=decision.confirmation_message,
            patch=saved,
            save=decision,
        )

    def _start_fresh(self) -> TurnResult:
        patch = self.current_patch
        self._history = RefinementHistory(patch, self._history.max_history)
        self._modifications.clear()
        self._conversation.clear()
        logger.info(f"Session restarted from '{patch.title}'")
        return TurnResult(
            kind=TurnKind.START_FRESH,
            message=handle_start_fresh_intent()["message"],
            patch=patch,
        )

    def _variations(self) -> TurnResult:
        patch = self.current_patch
        if not patch.variations:
            message = handle_variations_intent()["message"]
        else:
            listed = "\n".join(f"- {variation}" for variation in patch.variations)
            message = f"{generate_variation_message(len(patch.variations))}\n{listed}"
        return TurnResult(kind=TurnKind.VARIATIONS, message=message, patch=patch)

    def _refine(self, text: str) -> TurnResult:
        result = refine_patch(self.current_patch, text, self._rack)
        if result.success and not result.modification.is_empty:
            self._history.add_patch(result.updated_patch)
            self._modifications.append(result.modification)
        return TurnResult(
            kind=TurnKind.REFINE,
            message=result.message,
            patch=self.current_patch,
            refinement=result,
        )


__all__ = ["TurnKind", "TurnResult", "RefinementSession"]
