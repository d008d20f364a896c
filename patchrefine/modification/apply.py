"""Apply a PatchModification to a patch, producing a new patch."""

import logging
from datetime import UTC, datetime

from patchrefine.models import ParameterSuggestion, Patch

from .lib import PatchModification

logger = logging.getLogger(__name__)


def apply_modifications(patch: Patch, modification: PatchModification) -> Patch:
    """Return a copy of ``patch`` with the modification merged in.

    Merge rules:
        - Parameter changes replace the suggestion with the same
          (module_id, parameter) key, or append a new one.
        - Added connections are appended unless their id already exists,
          and their ids are appended to patching_order.
        - Removed connections are dropped by id, from both connections and
          patching_order.

    The input patch is never mutated, so a failure part-way leaves the
    caller with the original.

    Args:
        patch: Current patch.
        modification: Mapper output.

    Returns:
        New Patch with updated_at set to now (UTC).
    """
    updated = patch.model_copy(deep=True)
    changes = modification.changes

    for change in changes.parameters_changed:
        suggestion = updated.get_suggestion(change.module_id, change.parameter)
        if suggestion is not None:
            suggestion.value = change.new_value
            if change.reasoning:
                suggestion.reasoning = change.reasoning
        else:
            updated.parameter_suggestions.append(
                ParameterSuggestion(
                    module_id=change.module_id,
                    module_name=change.module_name,
                    parameter=change.parameter,
                    value=change.new_value,
                    reasoning=change.reasoning,
                )
            )

    existing = {connection.id for connection in updated.connections}
    for connection in changes.connections_added:
        if connection.id in existing:
            logger.debug(f"Connection {connection.id} already in patch, skipping")
            continue
        updated.connections.append(connection.model_copy(deep=True))
        existing.add(connection.id)
        if connection.id not in updated.patching_order:
            updated.patching_order.append(connection.id)

    removed = {connection.id for connection in changes.connections_removed}
    if removed:
        updated.connections = [c for c in updated.connections if c.id not in removed]
        updated.patching_order = [cid for cid in updated.patching_order if cid not in removed]

    updated.updated_at = datetime.now(UTC)
    return updated


__all__ = ["apply_modifications"]
