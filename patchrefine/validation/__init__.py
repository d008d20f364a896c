"""Patch and modification validation utilities."""

from patchrefine.validation.lib import (
    PatchIssue,
    ValidationResult,
    validate_modifications,
    validate_patch,
)

__all__ = [
    "PatchIssue",
    "ValidationResult",
    "validate_modifications",
    "validate_patch",
]
