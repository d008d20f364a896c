"""Modification mapping for patch refinement.

Converts a ParsedFeedback into a PatchModification: the parameter changes
and cable additions/removals that realize the request on a concrete rack.
Mapping is pure; nothing here touches the patch itself (see `apply`).
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from pydantic import Field

from patchrefine.core.errors import MappingError
from patchrefine.feedback import Direction, FeedbackAction, ParsedFeedback, Specificity
from patchrefine.models import (
    Connection,
    ConnectionImportance,
    ConnectionSource,
    ConnectionTarget,
    DocumentModel,
    ParsedRack,
    Patch,
    RackModule,
    SignalType,
)
from patchrefine.rack import (
    ModuleCategory,
    find_category_modules,
    get_category,
    resolve_target,
)

logger = logging.getLogger(__name__)

DECREASE_FACTOR = 0.7
INCREASE_FACTOR = 1.3

CLARIFICATION_CONFIDENCE = 0.1

# Assumed current value for parameters other than a category's default one.
PARAMETER_DEFAULTS = MappingProxyType(
    {
        "resonance": "50%",
        "decay": "4s",
        "time": "500ms",
        "mix": "50%",
    }
)

_VALUE_PATTERN = re.compile(
    r"^(?P<number>-?\d+(?:\.\d+)?)(?P<sep>\s*)(?P<unit>.*)$"
)
_TWO_PLACES = Decimal("0.01")


# =============================================================================
# Modification Models
# =============================================================================


class ParameterChange(DocumentModel):
    """A single knob change on one module."""

    module_id: str
    module_name: str
    parameter: str
    old_value: str
    new_value: str
    reasoning: str | None = None


class ModificationChanges(DocumentModel):
    """Change sets carried by a PatchModification."""

    parameters_changed: list[ParameterChange] = Field(default_factory=list)
    connections_added: list[Connection] = Field(default_factory=list)
    connections_removed: list[Connection] = Field(default_factory=list)


class PatchModification(DocumentModel):
    """Structured, human-describable change to a patch.

    Attributes:
        description: Sentence shown to the user, e.g. "Added reverb (Clouds)".
        changes: Parameter and connection change sets.
        confidence: How sure the mapper is that this is what was asked.
    """

    description: str
    changes: ModificationChanges = Field(default_factory=ModificationChanges)
    confidence: float = 0.0

    @property
    def is_empty(self) -> bool:
        changes = self.changes
        return not (
            changes.parameters_changed
            or changes.connections_added
            or changes.connections_removed
        )


# =============================================================================
# Value Scaling
# =============================================================================


def scale_value(value: str, factor: float) -> str:
    """Multiply the numeric part of a parameter value, keeping its unit.

    The result is rounded to two decimals with trailing zeros dropped.
    Percentages are clamped to 0-100.

    Args:
        value: Value string such as "5kHz", "50%", "4 s".
        factor: Multiplier.

    Returns:
        Scaled value string.

    Raises:
        ValueError: If the value has no leading number.

    Example:
        >>> scale_value("5kHz", 0.7)
        '3.5kHz'
        >>> scale_value("80%", 1.3)
        '100%'
    """
    match = _VALUE_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Parameter value '{value}' is not numeric")

    unit = match.group("unit")
    scaled = Decimal(match.group("number")) * Decimal(str(factor))
    if unit == "%":
        scaled = min(max(scaled, Decimal(0)), Decimal(100))
    scaled = scaled.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP).normalize()

    return f"{format(scaled, 'f')}{match.group('sep')}{unit}"


def _default_value(category: ModuleCategory, parameter: str) -> str:
    if parameter == category.default_parameter:
        return category.default_value
    return PARAMETER_DEFAULTS.get(parameter, category.default_value)


# =============================================================================
# Module Selection
# =============================================================================


def _pick_module(modules: list[RackModule], patch: Patch, parameter: str) -> RackModule:
    """Choose the module to change: suggested, then wired, then first."""
    for module in modules:
        if patch.get_suggestion(module.id, parameter) is not None:
            return module
    wired = patch.wired_module_ids()
    for module in modules:
        if module.id in wired:
            return module
    return modules[0]


def _first_port(ports, fallback: str) -> str:
    for port in ports:
        if port.type == SignalType.AUDIO:
            return port.name
    return fallback


def _signal_source(patch: Patch, rack: ParsedRack) -> RackModule | None:
    """Find the module whose output should feed a newly added effect.

    This is the destination of the last primary audio cable in patching
    order. Without one, the first VCA, then any module with outputs.
    """
    for connection in reversed(patch.ordered_connections()):
        if (
            connection.importance == ConnectionImportance.PRIMARY
            and connection.signal_type == SignalType.AUDIO
        ):
            module = rack.get_module(connection.to.module_id)
            if module is not None:
                return module

    vcas = find_category_modules(rack, get_category("volume"))
    if vcas:
        return vcas[0]

    for module in rack.modules:
        if module.outputs:
            return module
    return None


def _connection_id(category: ModuleCategory, module: RackModule, patch: Patch) -> str:
    existing = {connection.id for connection in patch.connections}
    n = 1
    while f"{category.name}-{module.id}-{n}" in existing:
        n += 1
    return f"{category.name}-{module.id}-{n}"


# =============================================================================
# Intent Mappers
# =============================================================================


def _empty(description: str, confidence: float) -> PatchModification:
    return PatchModification(description=description, confidence=confidence)


def _map_adjustment(feedback: ParsedFeedback, patch: Patch, rack: ParsedRack) -> PatchModification:
    category, parameter = resolve_target(feedback.target)
    if category is None:
        logger.warning(f"No category for target '{feedback.target}'")
        return _empty(f"Adjusted {feedback.target} parameters", feedback.confidence)

    modules = find_category_modules(rack, category)
    if not modules:
        return _empty(f"No {category.name} module to adjust", feedback.confidence)

    module = _pick_module(modules, patch, parameter)
    suggestion = patch.get_suggestion(module.id, parameter)
    old_value = suggestion.value if suggestion else _default_value(category, parameter)
    label = f"{category.name} {parameter}"

    if feedback.specificity == Specificity.SPECIFIC and feedback.value:
        new_value = feedback.value
        description = f"Set {label} to {new_value} on {module.name}"
    elif feedback.direction is not None:
        factor = DECREASE_FACTOR if feedback.direction == Direction.DECREASE else INCREASE_FACTOR
        try:
            new_value = scale_value(old_value, factor)
        except ValueError:
            logger.warning(
                f"Cannot scale '{old_value}' on {module.name}, using default for {label}"
            )
            old_value = _default_value(category, parameter)
            new_value = scale_value(old_value, factor)

        verb = "Lowered" if feedback.direction == Direction.DECREASE else "Raised"
        percent = round(abs(1 - factor) * 100)
        description = f"{verb} {label} by {percent}% ({old_value} → {new_value})"
        if category.name == "filter" and parameter == "cutoff":
            mood = "darker" if feedback.direction == Direction.DECREASE else "brighter"
            description += f" for a {mood} sound"
    else:
        return _empty(f"Adjusted {label} parameters", feedback.confidence)

    change = ParameterChange(
        module_id=module.id,
        module_name=module.name,
        parameter=parameter,
        old_value=old_value,
        new_value=new_value,
        reasoning=feedback.reasoning,
    )
    return PatchModification(
        description=description,
        changes=ModificationChanges(parameters_changed=[change]),
        confidence=feedback.confidence,
    )


def _map_addition(feedback: ParsedFeedback, patch: Patch, rack: ParsedRack) -> PatchModification:
    category, _ = resolve_target(feedback.target)
    if category is None:
        return _empty(f"Could not find a {feedback.target} module to add", feedback.confidence)

    wired = patch.wired_module_ids()
    candidates = [m for m in find_category_modules(rack, category) if m.id not in wired]
    if not candidates:
        return _empty(
            f"All {category.name} modules are already in the patch", feedback.confidence
        )

    target = candidates[0]
    source = _signal_source(patch, rack)
    if source is None or source.id == target.id:
        return _empty(
            f"No signal to route into the {category.name} ({target.name})",
            feedback.confidence,
        )

    connection = Connection(
        id=_connection_id(category, target, patch),
        from_=ConnectionSource(
            module_id=source.id,
            module_name=source.name,
            output_name=_first_port(source.outputs, "output"),
        ),
        to=ConnectionTarget(
            module_id=target.id,
            module_name=target.name,
            input_name=_first_port(target.inputs, "input"),
        ),
        signal_type=SignalType.AUDIO,
        importance=ConnectionImportance.PRIMARY,
        note=f"Added {category.name} to signal path",
    )
    return PatchModification(
        description=f"Added {category.name} ({target.name}) after {source.name}",
        changes=ModificationChanges(connections_added=[connection]),
        confidence=feedback.confidence,
    )


def _map_removal(feedback: ParsedFeedback, patch: Patch, rack: ParsedRack) -> PatchModification:
    category, _ = resolve_target(feedback.target)
    name = category.name if category else feedback.target
    module_ids = {m.id for m in find_category_modules(rack, category)} if category else set()

    def matches(module_id: str, module_name: str) -> bool:
        if module_id in module_ids:
            return True
        if category is not None:
            return category.matches_name(module_name)
        return name in module_name.lower()

    removed = [
        connection
        for connection in patch.connections
        if matches(connection.to.module_id, connection.to.module_name)
        or matches(connection.from_.module_id, connection.from_.module_name)
    ]

    description = (
        f"Removed {name} from the patch" if removed else f"No {name} in the patch to remove"
    )
    return PatchModification(
        description=description,
        changes=ModificationChanges(connections_removed=removed),
        confidence=feedback.confidence,
    )


def map_feedback_to_modifications(
    feedback: ParsedFeedback, patch: Patch, rack: ParsedRack
) -> PatchModification:
    """Map parsed feedback to a concrete patch modification.

    Args:
        feedback: Parser output.
        patch: Current patch.
        rack: Rack inventory.

    Returns:
        PatchModification. Its change sets may be empty (e.g. removing an
        effect that is not patched), which is not an error.

    Raises:
        MappingError: If the feedback has no target.
    """
    if not feedback.target:
        raise MappingError("Feedback has no target to modify")

    logger.debug(
        f"Mapping {feedback.intent.value}/{feedback.target} "
        f"({feedback.specificity.value}) onto '{patch.title}'"
    )

    if feedback.intent == FeedbackAction.CLARIFY:
        return _empty("Need clarification on what to change", CLARIFICATION_CONFIDENCE)
    if feedback.intent == FeedbackAction.ADD:
        return _map_addition(feedback, patch, rack)
    if feedback.intent == FeedbackAction.REMOVE:
        return _map_removal(feedback, patch, rack)
    return _map_adjustment(feedback, patch, rack)


__all__ = [
    "DECREASE_FACTOR",
    "INCREASE_FACTOR",
    "ParameterChange",
    "ModificationChanges",
    "PatchModification",
    "scale_value",
    "map_feedback_to_modifications",
]
