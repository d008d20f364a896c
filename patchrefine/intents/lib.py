"""Special-intent detection for chat messages.

Recognizes the meta-commands a user can send instead of feedback: save the
patch, start fresh, show variations, undo. Each detector is independent and
several may fire for the same message; callers decide priority.

Messages are normalized (lowercased, typographic apostrophes folded,
punctuation stripped) and phrases match on whole words only, so "no" does
not match "know" and "perfect!" matches "perfect".
"""

import logging
import re
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s']")


# =============================================================================
# Phrase Sets
# =============================================================================

# (confidence, tier name, phrases), checked from strongest to weakest.
SAVE_TIERS: tuple[tuple[float, str, frozenset[str]], ...] = (
    (
        0.95,
        "explicit save",
        frozenset(
            {"save", "save this", "save it", "keep this", "keep it", "bookmark", "bookmark this"}
        ),
    ),
    (
        0.85,
        "positive feedback",
        frozenset(
            {
                "perfect",
                "great",
                "love it",
                "i love it",
                "i like it",
                "looks good",
                "that works",
                "this is good",
                "this works",
                "exactly what i wanted",
                "sounds perfect",
                "sounds great",
                "that's perfect",
                "that's great",
            }
        ),
    ),
    (
        0.75,
        "completion",
        frozenset({"done", "finished", "that's it", "that's good", "i'm done", "i'm finished"}),
    ),
    (
        0.65,
        "approval",
        frozenset({"yes", "yeah", "yep", "sure", "ok", "okay", "sounds good"}),
    ),
)

# Any of these vetoes a save: negation, refinement or variation requests.
NO_SAVE_PHRASES = frozenset(
    {
        "no",
        "nope",
        "not yet",
        "not now",
        "wait",
        "hold on",
        "not quite",
        "almost",
        "getting there",
        "not right",
        "not good",
        "not working",
        "try again",
        "different",
        "something else",
        "another",
        "variation",
        "variations",
        "change",
        "modify",
        "adjust",
        "make it",
        "more",
        "less",
        "darker",
        "brighter",
        "add",
        "remove",
        "don't",
        "do not",
    }
)

START_FRESH_PHRASES = frozenset(
    {
        "start fresh",
        "start over",
        "new patch",
        "different patch",
        "something else",
        "try again",
        "reset",
        "clear",
        "begin again",
        "from scratch",
    }
)

VARIATIONS_PHRASES = frozenset(
    {
        "variations",
        "variation",
        "other options",
        "other choices",
        "different versions",
        "alternatives",
        "show me more",
        "what else",
        "try another",
        "another one",
        "different approach",
    }
)

UNDO_PHRASES = frozenset(
    {"undo", "go back", "revert", "previous version", "change it back"}
)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class SaveIntentResult:
    """Save detection outcome.

    Attributes:
        detected: True when the message asks to keep the patch.
        confidence: Strength of the matched phrase tier (0.0 when none).
        reasoning: Which phrase decided the outcome.
    """

    detected: bool
    confidence: float
    reasoning: str


@dataclass(frozen=True)
class SpecialIntents:
    """Independent meta-intent flags for one message."""

    save_intent: bool
    start_fresh_intent: bool
    variations_intent: bool
    undo_intent: bool

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


# =============================================================================
# Matching
# =============================================================================


def normalize_message(message: str) -> str:
    """Lowercase, fold curly apostrophes, strip punctuation, collapse spaces."""
    text = (message or "").lower().replace("’", "'").replace("‘", "'")
    text = _PUNCTUATION.sub(" ", text)
    return " ".join(text.split())


def find_phrases(message: str, phrases: frozenset[str]) -> list[str]:
    """Return the phrases that occur as whole words in a message.

    Args:
        message: Raw or normalized message.
        phrases: Lowercase phrases to look for.

    Returns:
        Matching phrases, longest first.
    """
    padded = f" {normalize_message(message)} "
    found = [phrase for phrase in phrases if f" {phrase} " in padded]
    return sorted(found, key=lambda phrase: (-len(phrase), phrase))


# =============================================================================
# Detectors
# =============================================================================


def detect_save_intent(message: str) -> SaveIntentResult:
    """Detect whether the user wants to save the current patch.

    Negative phrases are checked first and veto any save phrase, so
    "not quite, but save it" is not a save. Otherwise the strongest matching
    tier decides the confidence.

    Example:
        >>> detect_save_intent("Save this!").confidence
        0.95
        >>> detect_save_intent("make it darker").detected
        False
    """
    negatives = find_phrases(message, NO_SAVE_PHRASES)
    if negatives:
        result = SaveIntentResult(
            detected=False,
            confidence=0.0,
            reasoning=f'Message contains "{negatives[0]}" which indicates not wanting to save',
        )
        logger.debug(f"Save intent vetoed by '{negatives[0]}'")
        return result

    for confidence, tier, phrases in SAVE_TIERS:
        matches = find_phrases(message, phrases)
        if matches:
            logger.debug(f"Save intent: '{matches[0]}' ({tier}, {confidence})")
            return SaveIntentResult(
                detected=True,
                confidence=confidence,
                reasoning=f'Detected "{matches[0]}" ({tier}) with {confidence} confidence',
            )

    return SaveIntentResult(detected=False, confidence=0.0, reasoning="No save intent detected")


def detect_start_fresh_intent(message: str) -> bool:
    """Detect a request to abandon the current patch and start over."""
    return bool(find_phrases(message, START_FRESH_PHRASES))


def detect_variations_intent(message: str) -> bool:
    """Detect a request to see alternative versions of the patch."""
    return bool(find_phrases(message, VARIATIONS_PHRASES))


def detect_undo_intent(message: str) -> bool:
    """Detect a request to revert the last refinement."""
    return bool(find_phrases(message, UNDO_PHRASES))


def check_special_intents(message: str) -> SpecialIntents:
    """Run every detector on a message.

    Example:
        >>> check_special_intents("perfect, save it").save_intent
        True
    """
    return SpecialIntents(
        save_intent=detect_save_intent(message).detected,
        start_fresh_intent=detect_start_fresh_intent(message),
        variations_intent=detect_variations_intent(message),
        undo_intent=detect_undo_intent(message),
    )


__all__ = [
    "SaveIntentResult",
    "SpecialIntents",
    "normalize_message",
    "find_phrases",
    "detect_save_intent",
    "detect_start_fresh_intent",
    "detect_variations_intent",
    "detect_undo_intent",
    "check_special_intents",
]
