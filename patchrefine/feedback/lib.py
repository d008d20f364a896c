"""Feedback parsing for patch refinement.

Turns free-text feedback ("darker", "add reverb", "set reverb decay to 5
seconds") into a structured ParsedFeedback using an ordered cascade of
pattern rules. The first rule that matches wins; text no rule understands
falls back to a low-confidence general adjustment so the caller asks for
clarification instead of guessing.
"""

import logging
import re
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable

from patchrefine.rack import CATEGORIES, resolve_target

logger = logging.getLogger(__name__)

# Below this confidence the orchestrator asks a question instead of editing.
CLARIFICATION_THRESHOLD = 0.5

FALLBACK_CONFIDENCE = 0.3
CLARIFY_CONFIDENCE = 0.2


class FeedbackAction(str, Enum):
    """What the user wants done to the patch."""

    ADJUST = "adjust"
    ADD = "add"
    REMOVE = "remove"
    CLARIFY = "clarify"


class Direction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class Specificity(str, Enum):
    """Whether feedback names an exact value or only a direction."""

    VAGUE = "vague"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class ParsedFeedback:
    """Structured interpretation of one feedback utterance.

    Attributes:
        intent: Requested action.
        target: Slug naming what to change (e.g. "filter_cutoff", "reverb").
        specificity: Exact value vs qualitative direction.
        confidence: Parse confidence 0.0-1.0.
        reasoning: Which rule matched and why.
        direction: Increase or decrease, for relative adjustments.
        value: Normalized value string such as "5s", for specific requests.
    """

    intent: FeedbackAction
    target: str
    specificity: Specificity
    confidence: float
    reasoning: str
    direction: Direction | None = None
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["intent"] = self.intent.value
        data["specificity"] = self.specificity.value
        data["direction"] = self.direction.value if self.direction else None
        return data


# =============================================================================
# Lexicons
# =============================================================================

# word -> (target, direction, confidence)
MOOD_LEXICON = MappingProxyType(
    {
        "darker": ("filter_cutoff", Direction.DECREASE, 0.9),
        "darken": ("filter_cutoff", Direction.DECREASE, 0.85),
        "duller": ("filter_cutoff", Direction.DECREASE, 0.8),
        "muddier": ("filter_cutoff", Direction.DECREASE, 0.75),
        "warmer": ("filter_cutoff", Direction.DECREASE, 0.8),
        "brighter": ("filter_cutoff", Direction.INCREASE, 0.9),
        "brighten": ("filter_cutoff", Direction.INCREASE, 0.85),
        "sharper": ("filter_cutoff", Direction.INCREASE, 0.8),
        "colder": ("filter_cutoff", Direction.INCREASE, 0.75),
        "crisper": ("filter_cutoff", Direction.INCREASE, 0.8),
        "louder": ("volume", Direction.INCREASE, 0.85),
        "softer": ("volume", Direction.DECREASE, 0.85),
        "quieter": ("volume", Direction.DECREASE, 0.85),
        "faster": ("tempo", Direction.INCREASE, 0.85),
        "quicker": ("tempo", Direction.INCREASE, 0.8),
        "slower": ("tempo", Direction.DECREASE, 0.85),
    }
)

VAGUE_WORDS = (
    "better",
    "good",
    "nice",
    "fix",
    "wrong",
    "problem",
    "improve",
    "change something",
    "different",
    "whatever",
)

# Raw unit spelling -> canonical unit
UNIT_ALIASES = MappingProxyType(
    {
        "seconds": "s",
        "second": "s",
        "secs": "s",
        "sec": "s",
        "s": "s",
        "milliseconds": "ms",
        "ms": "ms",
        "hertz": "Hz",
        "hz": "Hz",
        "kilohertz": "kHz",
        "khz": "kHz",
        "k": "kHz",
        "percent": "%",
        "%": "%",
        "bpm": "BPM",
        "volts": "V",
        "volt": "V",
        "v": "V",
    }
)


# Categories that can be patched in or out as a whole.
EFFECT_CATEGORIES = ("reverb", "delay", "distortion")


def _noun_alternation(effects_only: bool = False) -> str:
    nouns: set[str] = set()
    for category in CATEGORIES:
        if effects_only and category.name not in EFFECT_CATEGORIES:
            continue
        nouns.update(category.aliases)
        if not effects_only:
            nouns.update(category.parameter_aliases)
    # Longest first so "saturation" is not cut short by a shorter alias.
    return "|".join(sorted((re.escape(n) for n in nouns), key=len, reverse=True))


_NOUNS = _noun_alternation()
_EFFECT_NOUNS = _noun_alternation(effects_only=True)
_UNITS = "|".join(sorted((re.escape(u) for u in UNIT_ALIASES), key=len, reverse=True))
_FILLER = r"(?:(?:the|a|an|some|a\s+little|a\s+bit\s+of)\s+)?"

_MOOD_PATTERN = re.compile(r"\b(" + "|".join(MOOD_LEXICON) + r")\b")
_ADD_REMOVE_PATTERN = re.compile(
    r"\b(?P<verb>add|include|insert|put\s+in|remove|delete|take\s+out|get\s+rid\s+of)\s+"
    + _FILLER
    + r"(?P<noun>"
    + _EFFECT_NOUNS
    + r")\b"
)
_QUANTIFIED_PATTERN = re.compile(
    r"\b(?P<verb>set|change|make|turn|increase|raise|decrease|lower|drop|bring)\s+"
    r"(?:the\s+)?(?!(?:it|this|that)\b)(?P<noun>[a-z][a-z ]*?)\s+(?:to|at)\s+"
    r"(?P<number>\d+(?:\.\d+)?)\s*(?P<unit>" + _UNITS + r")?(?![a-z])"
)
_BPM_PATTERN = re.compile(r"(?P<number>\d+(?:\.\d+)?)\s*bpm\b")
_RELATIVE_PATTERN = re.compile(
    r"\b(?P<verb>more|less|increase|decrease|boost|reduce|raise|lower|drop|kill|turn\s+up|turn\s+down)\s+"
    + _FILLER
    + r"(?P<noun>"
    + _NOUNS
    + r")\b"
)
_VAGUE_PATTERN = re.compile(r"\b(" + "|".join(VAGUE_WORDS) + r")\b")

_REMOVE_VERBS = ("remove", "delete", "take", "get")
_INCREASE_VERBS = ("more", "increase", "boost", "raise", "turn up")
_DECREASE_VERBS = ("less", "decrease", "reduce", "lower", "drop", "kill", "turn down")


# =============================================================================
# Helpers
# =============================================================================


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def target_slug(noun: str) -> str:
    """Build a target slug from a noun phrase.

    A bare parameter alias is qualified with its category so "cutoff"
    becomes "filter_cutoff".

    Example:
        >>> target_slug("reverb decay")
        'reverb_decay'
        >>> target_slug("cutoff")
        'filter_cutoff'
    """
    words = [w for w in noun.split() if w not in ("the", "a", "an", "it", "my")]
    if not words:
        return "general"
    for category in CATEGORIES:
        if words[0] in category.parameter_aliases:
            return f"{category.name}_{'_'.join(words)}"
    return "_".join(words)


def _category_target(noun: str) -> str:
    """Map a single domain noun to a category-level target slug."""
    noun = " ".join(noun.split())
    for category in CATEGORIES:
        if noun in category.aliases:
            return category.name
    return target_slug(noun)


def normalize_value(number: str, unit: str | None) -> str:
    """Join a number with its canonical unit spelling ("5", "seconds" -> "5s")."""
    if not unit:
        return number
    return f"{number}{UNIT_ALIASES[unit.lower()]}"


def _direction_for(verb: str) -> Direction | None:
    verb = " ".join(verb.split())
    if verb in _INCREASE_VERBS:
        return Direction.INCREASE
    if verb in _DECREASE_VERBS:
        return Direction.DECREASE
    return None


# =============================================================================
# Rules
# =============================================================================


def _match_mood(text: str) -> ParsedFeedback | None:
    match = _MOOD_PATTERN.search(text)
    if not match:
        return None
    word = match.group(1)
    target, direction, confidence = MOOD_LEXICON[word]
    return ParsedFeedback(
        intent=FeedbackAction.ADJUST,
        target=target,
        direction=direction,
        specificity=Specificity.VAGUE,
        confidence=confidence,
        reasoning=f"'{word}' is a mood word for {direction.value} {target}",
    )


def _match_add_remove(text: str) -> ParsedFeedback | None:
    match = _ADD_REMOVE_PATTERN.search(text)
    if not match:
        return None
    verb = match.group("verb")
    intent = FeedbackAction.REMOVE if verb.startswith(_REMOVE_VERBS) else FeedbackAction.ADD
    target = _category_target(match.group("noun"))
    return ParsedFeedback(
        intent=intent,
        target=target,
        specificity=Specificity.VAGUE,
        confidence=0.9,
        reasoning=f"User wants to {intent.value} {target}",
    )


def _match_quantified(text: str) -> ParsedFeedback | None:
    match = _QUANTIFIED_PATTERN.search(text)
    if match:
        target = target_slug(match.group("noun"))
        value = normalize_value(match.group("number"), match.group("unit"))
        return ParsedFeedback(
            intent=FeedbackAction.ADJUST,
            target=target,
            direction=_direction_for(match.group("verb")),
            value=value,
            specificity=Specificity.SPECIFIC,
            confidence=0.95,
            reasoning=f"User specified {target} = {value}",
        )

    match = _BPM_PATTERN.search(text)
    if match:
        value = normalize_value(match.group("number"), "bpm")
        return ParsedFeedback(
            intent=FeedbackAction.ADJUST,
            target="tempo",
            value=value,
            specificity=Specificity.SPECIFIC,
            confidence=0.95,
            reasoning=f"User specified tempo = {value}",
        )
    return None


def _match_relative(text: str) -> ParsedFeedback | None:
    match = _RELATIVE_PATTERN.search(text)
    if not match:
        return None
    direction = _direction_for(match.group("verb"))
    target = _category_target(match.group("noun"))
    return ParsedFeedback(
        intent=FeedbackAction.ADJUST,
        target=target,
        direction=direction,
        specificity=Specificity.VAGUE,
        confidence=0.8,
        reasoning=f"User wants to {direction.value} {target}",
    )


def _match_vague(text: str) -> ParsedFeedback | None:
    match = _VAGUE_PATTERN.search(text)
    if not match:
        return None
    return ParsedFeedback(
        intent=FeedbackAction.CLARIFY,
        target="general",
        specificity=Specificity.VAGUE,
        confidence=CLARIFY_CONFIDENCE,
        reasoning=f"'{match.group(1)}' does not say what to change",
    )


def _fallback(text: str) -> ParsedFeedback:
    return ParsedFeedback(
        intent=FeedbackAction.ADJUST,
        target="general",
        specificity=Specificity.VAGUE,
        confidence=FALLBACK_CONFIDENCE,
        reasoning="No recognized pattern, defaulting to general adjustment",
    )


Rule = Callable[[str], "ParsedFeedback | None"]


class FeedbackParser:
    """Parse natural language feedback into a ParsedFeedback.

    Rules are tried in RULES order and the first match wins. The parser is
    stateless and deterministic.

    Example:
        >>> parser = FeedbackParser()
        >>> feedback = parser.parse("add reverb")
        >>> feedback.intent, feedback.target
        (<FeedbackAction.ADD: 'add'>, 'reverb')
    """

    RULES: tuple[tuple[str, Rule], ...] = (
        ("mood", _match_mood),
        ("add_remove", _match_add_remove),
        ("quantified", _match_quantified),
        ("relative", _match_relative),
        ("vague", _match_vague),
        ("fallback", _fallback),
    )

    def parse(self, text: str, current_patch=None, rack=None) -> ParsedFeedback:
        """Parse feedback text.

        Args:
            text: User's feedback. Empty text is allowed.
            current_patch: Patch being refined, used for log context only.
            rack: Rack inventory, used for log context only.

        Returns:
            ParsedFeedback. Never raises.
        """
        normalized = _normalize(text or "")
        title = current_patch.title if current_patch is not None else None

        for name, rule in self.RULES:
            result = rule(normalized)
            if result is not None:
                logger.debug(
                    f"Rule '{name}' parsed {normalized[:50]!r} (patch={title}) -> "
                    f"{result.intent.value}/{result.target} @ {result.confidence}"
                )
                if name == "fallback":
                    logger.warning(f"No rule matched feedback {normalized[:50]!r}")
                return result

        return _fallback(normalized)


_default_parser = FeedbackParser()


def parse_feedback(text: str, current_patch=None, rack=None) -> ParsedFeedback:
    """Parse feedback with the default parser."""
    return _default_parser.parse(text, current_patch, rack)


# =============================================================================
# Clarification Gate
# =============================================================================


def needs_clarification(feedback: ParsedFeedback) -> bool:
    """True when feedback is too vague, too uncertain, or names nothing adjustable."""
    if feedback.intent == FeedbackAction.CLARIFY or feedback.confidence < CLARIFICATION_THRESHOLD:
        return True
    category, _ = resolve_target(feedback.target)
    return feedback.intent == FeedbackAction.ADJUST and category is None


_CLARIFICATION_HINTS: tuple[tuple[re.Pattern, tuple[str, ...]], ...] = (
    (
        re.compile(r"better|good|nice", re.IGNORECASE),
        ("darker", "brighter", "more reverb", "faster"),
    ),
    (
        re.compile(r"fix|wrong|problem", re.IGNORECASE),
        ("too dark", "too bright", "too complex", "too simple"),
    ),
    (
        re.compile(r"change|different", re.IGNORECASE),
        ("darker", "brighter", "add delay", "remove reverb"),
    ),
)

GENERIC_CLARIFICATION = (
    "I want to make sure I understand what you're looking for. "
    "Could you tell me more about what you'd like to change? For example:\n"
    "- Make it darker/brighter\n"
    "- Add more reverb/delay\n"
    "- Make it faster/slower\n"
    "- Add/remove specific effects"
)


def generate_clarification_question(text: str) -> str:
    """Build a follow-up question with example requests for vague feedback."""
    for pattern, suggestions in _CLARIFICATION_HINTS:
        if pattern.search(text or ""):
            examples = "\n- ".join(suggestions)
            return (
                "I'd love to help! Could you be more specific? For example:\n"
                f"- {examples}\n\n"
                "What exactly would you like to change?"
            )
    return GENERIC_CLARIFICATION


__all__ = [
    "CLARIFICATION_THRESHOLD",
    "FeedbackAction",
    "Direction",
    "Specificity",
    "ParsedFeedback",
    "FeedbackParser",
    "parse_feedback",
    "target_slug",
    "normalize_value",
    "needs_clarification",
    "generate_clarification_question",
]
