"""Refinement history for patchrefine.

Keeps a bounded, undoable sequence of patch snapshots per conversation.

Example:
    >>> from patchrefine.history import RefinementHistory
    >>> history = RefinementHistory(patch, max_history=5)
    >>> history.add_patch(refined)
    >>> history.undo()
"""

from .lib import RefinementHistory

__all__ = ["RefinementHistory"]
