"""Patch and rack document models.

Example:
    >>> from patchrefine.models import ParsedRack, Patch
    >>> rack = ParsedRack.model_validate(rack_json)
    >>> patch = Patch.model_validate(patch_json)
    >>> patch.to_document()["parameterSuggestions"]
"""

from patchrefine.models.lib import (
    Connection,
    ConnectionImportance,
    ConnectionSource,
    ConnectionTarget,
    DifficultyLevel,
    DocumentModel,
    ModulePort,
    ParameterSuggestion,
    ParsedRack,
    Patch,
    PatchMetadata,
    PowerDraw,
    RackModule,
    RackRow,
    SignalType,
    export_patch_schema,
)

__all__ = [
    # Enums
    "SignalType",
    "ConnectionImportance",
    "DifficultyLevel",
    # Rack
    "ModulePort",
    "PowerDraw",
    "RackModule",
    "RackRow",
    "ParsedRack",
    # Patch
    "DocumentModel",
    "ConnectionSource",
    "ConnectionTarget",
    "Connection",
    "ParameterSuggestion",
    "PatchMetadata",
    "Patch",
    "export_patch_schema",
]
