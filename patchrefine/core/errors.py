"""Exception types raised inside the refinement pipeline.

None of these escape `refine_patch`; they are logged and converted into a
failed RefinementResult with a friendly message.
"""


class RefinementError(Exception):
    """Base error for refinement pipeline faults."""


class EmptyFeedbackError(RefinementError):
    """Raised when feedback text is blank."""


class MappingError(RefinementError):
    """Raised when parsed feedback cannot be mapped to patch changes."""


__all__ = ["RefinementError", "EmptyFeedbackError", "MappingError"]
