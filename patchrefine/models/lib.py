"""Patch and rack document models.

These models are the contract between the refinement engine and its external
collaborators: the patch generator produces `Patch` JSON, the rack scraper
produces `ParsedRack` JSON. Python attributes are snake_case; serialized
documents use camelCase keys, and both spellings are accepted on input.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class SignalType(str, Enum):
    """Kind of signal carried by a cable or port."""

    AUDIO = "audio"
    CV = "cv"
    GATE = "gate"
    CLOCK = "clock"
    VIDEO = "video"


class ConnectionImportance(str, Enum):
    """Visual hierarchy of a connection within a patch.

    PRIMARY and SECONDARY are what refinements create; the generator also
    emits MODULATION and UTILITY for supporting cables.
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"
    MODULATION = "modulation"
    UTILITY = "utility"


class DifficultyLevel(str, Enum):
    """How demanding a patch is to build."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class DocumentModel(BaseModel):
    """Base for all wire documents: camelCase aliases, enum values stored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _now() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Rack Inventory
# =============================================================================


class ModulePort(DocumentModel):
    """A named input or output jack on a module."""

    name: str
    type: SignalType = SignalType.AUDIO
    voltage_range: str | None = None


class PowerDraw(DocumentModel):
    """Current draw per rail in mA."""

    positive_12v: int = Field(default=0, alias="positive12V")
    negative_12v: int = Field(default=0, alias="negative12V")
    positive_5v: int = Field(default=0, alias="positive5V")

    @property
    def total(self) -> int:
        return self.positive_12v + self.negative_12v + self.positive_5v


class RackModule(DocumentModel):
    """A module installed in the rack.

    Attributes:
        id: Rack-unique module identifier.
        name: Display name (e.g. "Ripples").
        manufacturer: Maker name, empty when unknown.
        type: Functional type such as VCO, VCF, VCA, Effect.
        hp: Width in Eurorack horizontal pitch units.
        power: Power draw; a bare integer is read as +12V mA.
        inputs: Input jacks.
        outputs: Output jacks.
    """

    id: str
    name: str
    manufacturer: str = ""
    type: str = "Other"
    hp: int = 0
    power: PowerDraw = Field(default_factory=PowerDraw)
    inputs: list[ModulePort] = Field(default_factory=list)
    outputs: list[ModulePort] = Field(default_factory=list)
    description: str | None = None

    @field_validator("power", mode="before")
    @classmethod
    def _coerce_power(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return {"positive12V": int(value)}
        return value

    @field_validator("inputs", "outputs", mode="before")
    @classmethod
    def _coerce_ports(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"name": port} if isinstance(port, str) else port for port in value]
        return value


class RackRow(DocumentModel):
    """One physical row of the rack."""

    row_number: int = 0
    modules: list[RackModule] = Field(default_factory=list)
    total_hp: int = 0
    max_hp: int = 0


class ParsedRack(DocumentModel):
    """Module inventory supplied by the rack scraper. Never mutated here."""

    url: str = ""
    modules: list[RackModule] = Field(default_factory=list)
    rows: list[RackRow] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    total_hp: int = 0
    total_power: int = 0

    @model_validator(mode="after")
    def _fill_totals(self) -> "ParsedRack":
        if not self.total_hp:
            self.total_hp = sum(module.hp for module in self.modules)
        if not self.total_power:
            self.total_power = sum(module.power.total for module in self.modules)
        return self

    def get_module(self, module_id: str) -> RackModule | None:
        """Look up a module by id."""
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def has_module(self, module_id: str) -> bool:
        return self.get_module(module_id) is not None


# =============================================================================
# Patch Document
# =============================================================================


class ConnectionSource(DocumentModel):
    """Output side of a connection."""

    module_id: str
    module_name: str
    output_name: str = "output"


class ConnectionTarget(DocumentModel):
    """Input side of a connection."""

    module_id: str
    module_name: str
    input_name: str = "input"


class Connection(DocumentModel):
    """Directed cable from one module output to another module input.

    The source endpoint is exposed as ``from_`` in Python and ``from`` in
    documents.
    """

    id: str
    from_: ConnectionSource = Field(alias="from")
    to: ConnectionTarget
    signal_type: SignalType = SignalType.AUDIO
    importance: ConnectionImportance = ConnectionImportance.PRIMARY
    note: str | None = None

    @property
    def module_ids(self) -> tuple[str, str]:
        return self.from_.module_id, self.to.module_id


class ParameterSuggestion(DocumentModel):
    """Suggested knob setting for one module parameter."""

    module_id: str
    module_name: str
    parameter: str
    value: str
    reasoning: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the suggestion within a patch."""
        return self.module_id, self.parameter


class PatchMetadata(DocumentModel):
    """Narrative description of a patch."""

    title: str
    description: str = ""
    sound_description: str | None = None
    difficulty: DifficultyLevel = DifficultyLevel.INTERMEDIATE
    estimated_time: int = 0
    techniques: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    user_intent: str | None = None


class Patch(DocumentModel):
    """A generated patch for a rack.

    Invariants (checked by ``patchrefine.validation.validate_patch``):
        - every id in ``patching_order`` names a connection in ``connections``
        - at most one parameter suggestion per (module_id, parameter)
    """

    id: str
    user_id: str = ""
    rack_id: str = ""
    metadata: PatchMetadata
    connections: list[Connection] = Field(default_factory=list)
    patching_order: list[str] = Field(default_factory=list)
    parameter_suggestions: list[ParameterSuggestion] = Field(default_factory=list)
    why_this_works: str = ""
    tips: list[str] = Field(default_factory=list)
    variations: list[str] = Field(default_factory=list)
    parent_patch_id: str | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    saved: bool = False
    tags: list[str] = Field(default_factory=list)
    user_rating: Literal["loved", "meh", "disaster"] | None = None
    user_notes: str | None = None
    tried_at: datetime | None = None

    @property
    def title(self) -> str:
        return self.metadata.title

    def get_connection(self, connection_id: str) -> Connection | None:
        for connection in self.connections:
            if connection.id == connection_id:
                return connection
        return None

    def get_suggestion(self, module_id: str, parameter: str) -> ParameterSuggestion | None:
        for suggestion in self.parameter_suggestions:
            if suggestion.key == (module_id, parameter):
                return suggestion
        return None

    def wired_module_ids(self) -> set[str]:
        """Ids of every module that has at least one cable attached."""
        ids: set[str] = set()
        for connection in self.connections:
            ids.update(connection.module_ids)
        return ids

    def ordered_connections(self) -> list[Connection]:
        """Connections in patching order, followed by any left unordered."""
        by_id = {connection.id: connection for connection in self.connections}
        ordered = [by_id[cid] for cid in self.patching_order if cid in by_id]
        seen = {connection.id for connection in ordered}
        ordered.extend(c for c in self.connections if c.id not in seen)
        return ordered


def export_patch_schema() -> dict:
    """Export the Patch JSON Schema (camelCase keys)."""
    return Patch.model_json_schema(by_alias=True)


__all__ = [
    "SignalType",
    "ConnectionImportance",
    "DifficultyLevel",
    "DocumentModel",
    "ModulePort",
    "PowerDraw",
    "RackModule",
    "RackRow",
    "ParsedRack",
    "ConnectionSource",
    "ConnectionTarget",
    "Connection",
    "ParameterSuggestion",
    "PatchMetadata",
    "Patch",
    "export_patch_schema",
]
