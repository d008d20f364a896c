"""Bounded undo history of patch snapshots.

Each conversation owns one RefinementHistory. Snapshots are deep copies so
later edits to a patch never leak into the history.
"""

import logging

from patchrefine.config import get_history_size
from patchrefine.models import Patch

logger = logging.getLogger(__name__)


class RefinementHistory:
    """Capped list of patch snapshots with a current pointer.

    Adding a patch after an undo discards the undone snapshots, like a
    text editor. When the history is full the oldest snapshot is evicted.

    Example:
        >>> history = RefinementHistory(original)
        >>> history.add_patch(darker)
        >>> history.undo().title == original.title
        True
        >>> history.undo() is None
        True

    Args:
        initial_patch: Patch the conversation starts from.
        max_history: Maximum snapshots kept. Defaults to REFINE_HISTORY_SIZE.
    """

    def __init__(self, initial_patch: Patch, max_history: int | None = None):
        self._max_history = get_history_size(max_history)
        self._snapshots: list[Patch] = [initial_patch.model_copy(deep=True)]
        self._current = 0

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def current_index(self) -> int:
        return self._current

    def add_patch(self, patch: Patch) -> None:
        """Record a new current patch."""
        if self._current < len(self._snapshots) - 1:
            dropped = len(self._snapshots) - 1 - self._current
            del self._snapshots[self._current + 1 :]
            logger.debug(f"Discarded {dropped} undone snapshot(s)")

        self._snapshots.append(patch.model_copy(deep=True))
        if len(self._snapshots) > self._max_history:
            self._snapshots.pop(0)
        self._current = len(self._snapshots) - 1

    def undo(self) -> Patch | None:
        """Step back one snapshot.

        Returns:
            The now-current patch, or None when there is nothing to undo.
            History is unchanged in that case.
        """
        if not self.can_undo():
            return None
        self._current -= 1
        logger.debug(f"Undo to snapshot {self._current}")
        return self._snapshots[self._current].model_copy(deep=True)

    def can_undo(self) -> bool:
        return self._current > 0

    def get_current_patch(self) -> Patch | None:
        if not self._snapshots:
            return None
        return self._snapshots[self._current].model_copy(deep=True)

    def get_previous_patch(self) -> Patch | None:
        """Return the snapshot an undo would restore, without moving."""
        if not self.can_undo():
            return None
        return self._snapshots[self._current - 1].model_copy(deep=True)

    def get_history(self) -> list[Patch]:
        """Return a copy of all snapshots, oldest first."""
        return [snapshot.model_copy(deep=True) for snapshot in self._snapshots]

    def clear(self) -> None:
        self._snapshots.clear()
        self._current = 0

    def __len__(self) -> int:
        return len(self._snapshots)


__all__ = ["RefinementHistory"]
