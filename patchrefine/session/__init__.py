"""Chat-turn sessions for conversational patch refinement."""

from .lib import RefinementSession, TurnKind, TurnResult

__all__ = ["RefinementSession", "TurnKind", "TurnResult"]
