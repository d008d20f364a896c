"""Feedback parsing for patch refinement.

Provides the rule-based parser that classifies free-text feedback and the
clarification gate that decides when to ask instead of act.
"""

from patchrefine.feedback.lib import (
    CLARIFICATION_THRESHOLD,
    Direction,
    FeedbackAction,
    FeedbackParser,
    ParsedFeedback,
    Specificity,
    generate_clarification_question,
    needs_clarification,
    parse_feedback,
)

__all__ = [
    "CLARIFICATION_THRESHOLD",
    "Direction",
    "FeedbackAction",
    "FeedbackParser",
    "ParsedFeedback",
    "Specificity",
    "generate_clarification_question",
    "needs_clarification",
    "parse_feedback",
]
