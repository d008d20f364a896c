"""Patch and modification validation.

Two checks live here:
    - `validate_modifications` verifies a proposed change only references
      modules that exist in the rack.
    - `validate_patch` checks a patch document's own invariants.
"""

from collections import Counter
from dataclasses import dataclass, field

from patchrefine.models import ParsedRack, Patch
from patchrefine.modification import PatchModification


@dataclass
class ValidationResult:
    """Outcome of validating a modification against a rack.

    Attributes:
        valid: True when no issues were found.
        issues: Human-readable problems, in discovery order.
    """

    valid: bool
    issues: list[str] = field(default_factory=list)


def validate_modifications(
    modification: PatchModification, patch: Patch, rack: ParsedRack
) -> ValidationResult:
    """Check that a modification only touches modules present in the rack.

    Args:
        modification: Proposed change.
        patch: Patch the change would be applied to.
        rack: Rack inventory.

    Returns:
        ValidationResult listing every unknown module reference.
    """
    issues: list[str] = []

    for connection in modification.changes.connections_added:
        if not rack.has_module(connection.from_.module_id):
            issues.append(f"Source module {connection.from_.module_name} not found in rack")
        if not rack.has_module(connection.to.module_id):
            issues.append(f"Target module {connection.to.module_name} not found in rack")

    for change in modification.changes.parameters_changed:
        if not rack.has_module(change.module_id):
            issues.append(f"Module {change.module_name} not found in rack")

    return ValidationResult(valid=not issues, issues=issues)


# =============================================================================
# Document Invariants
# =============================================================================


@dataclass
class PatchIssue:
    """A broken invariant in a patch document.

    Attributes:
        subject_id: Connection id or "module_id/parameter" key at fault.
        message: Human-readable description.
        issue_type: Category of the issue.
    """

    subject_id: str
    message: str
    issue_type: str


def validate_patch(patch: Patch) -> list[PatchIssue]:
    """Validate a patch document for structural issues.

    Performs the following checks:
        - Every patching_order id names an existing connection
        - Connection ids are unique
        - At most one suggestion per (module_id, parameter)

    Args:
        patch: Patch to check.

    Returns:
        list[PatchIssue]: Issues found (empty if valid).

    Example:
        >>> for issue in validate_patch(patch):
        ...     print(f"{issue.subject_id}: {issue.message}")
    """
    issues: list[PatchIssue] = []

    id_counts = Counter(connection.id for connection in patch.connections)
    for connection_id, count in id_counts.items():
        if count > 1:
            issues.append(
                PatchIssue(
                    subject_id=connection_id,
                    message=f"Duplicate connection id '{connection_id}' appears {count} times",
                    issue_type="duplicate_connection",
                )
            )

    for connection_id in patch.patching_order:
        if connection_id not in id_counts:
            issues.append(
                PatchIssue(
                    subject_id=connection_id,
                    message=f"Patching order references unknown connection '{connection_id}'",
                    issue_type="dangling_order",
                )
            )

    key_counts = Counter(suggestion.key for suggestion in patch.parameter_suggestions)
    for (module_id, parameter), count in key_counts.items():
        if count > 1:
            issues.append(
                PatchIssue(
                    subject_id=f"{module_id}/{parameter}",
                    message=f"Parameter '{parameter}' on {module_id} suggested {count} times",
                    issue_type="duplicate_suggestion",
                )
            )

    return issues


__all__ = [
    "ValidationResult",
    "validate_modifications",
    "PatchIssue",
    "validate_patch",
]
