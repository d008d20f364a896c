"""Module categories and rack capability checks.

A category is a processing role (filter, reverb, ...) that feedback can
refer to. Categories are matched against rack modules by case-insensitive
keyword search over the module type and name, so "Clouds" (type "Effect")
counts as a reverb and "Ripples" (type "VCF") counts as a filter.
"""

import logging
from dataclasses import dataclass

from patchrefine.models import ParsedRack, RackModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleCategory:
    """A processing role the refinement engine understands.

    Attributes:
        name: Category word, also used in user-facing messages.
        keywords: Substrings matched against module type and name.
        aliases: Target slug tokens that select this category.
        default_parameter: Parameter adjusted when feedback names none.
        default_value: Assumed current value when the patch has no suggestion.
        parameter_aliases: Slug tokens that imply this category and name a
            specific parameter (e.g. "cutoff" means filter cutoff).
    """

    name: str
    keywords: tuple[str, ...]
    aliases: tuple[str, ...]
    default_parameter: str
    default_value: str
    parameter_aliases: tuple[str, ...] = ()

    def matches(self, module: RackModule) -> bool:
        haystack = f"{module.type} {module.name}".lower()
        return any(keyword in haystack for keyword in self.keywords)

    def matches_name(self, module_name: str) -> bool:
        lowered = module_name.lower()
        return any(keyword in lowered for keyword in self.keywords)


# Order matters: the first category whose alias appears in a slug wins.
CATEGORIES: tuple[ModuleCategory, ...] = (
    ModuleCategory(
        name="filter",
        keywords=("filter", "vcf"),
        aliases=("filter", "vcf"),
        default_parameter="cutoff",
        default_value="5kHz",
        parameter_aliases=("cutoff", "resonance"),
    ),
    ModuleCategory(
        name="reverb",
        keywords=("reverb", "effect"),
        aliases=("reverb",),
        default_parameter="send",
        default_value="50%",
    ),
    ModuleCategory(
        name="delay",
        keywords=("delay", "echo", "effect"),
        aliases=("delay", "echo"),
        default_parameter="feedback",
        default_value="40%",
    ),
    ModuleCategory(
        name="distortion",
        keywords=("distortion", "drive", "fuzz", "saturat", "fold", "effect"),
        aliases=("distortion", "drive", "fuzz", "saturation", "overdrive"),
        default_parameter="drive",
        default_value="30%",
    ),
    ModuleCategory(
        name="volume",
        keywords=("vca", "amp"),
        aliases=("volume", "level", "vca", "amplitude", "loudness"),
        default_parameter="level",
        default_value="70%",
    ),
    ModuleCategory(
        name="tempo",
        keywords=("clock", "lfo", "sequencer"),
        aliases=("tempo", "speed", "rate", "bpm", "clock"),
        default_parameter="rate",
        default_value="120BPM",
    ),
)

_CATEGORY_BY_NAME = {category.name: category for category in CATEGORIES}


def get_category(name: str) -> ModuleCategory | None:
    """Get a category by its name."""
    return _CATEGORY_BY_NAME.get(name)


def resolve_target(target: str) -> tuple[ModuleCategory | None, str | None]:
    """Split a feedback target slug into (category, parameter).

    The first slug token naming a category selects it; the remaining tokens
    form the parameter, falling back to the category default. Parameter
    aliases such as "cutoff" select their category and keep their own name.

    Example:
        >>> category, parameter = resolve_target("reverb_decay")
        >>> category.name, parameter
        ('reverb', 'decay')
        >>> resolve_target("general")
        (None, None)
    """
    tokens = [token for token in target.lower().replace("-", "_").split("_") if token]

    for index, token in enumerate(tokens):
        for category in CATEGORIES:
            if token in category.aliases:
                rest = [t for t in tokens[index + 1 :] if t not in category.aliases]
                parameter = "_".join(rest) if rest else category.default_parameter
                return category, parameter
            if token in category.parameter_aliases:
                return category, token

    return None, None


def find_category_modules(rack: ParsedRack, category: ModuleCategory) -> list[RackModule]:
    """Return rack modules that can serve a category, in rack order."""
    return [module for module in rack.modules if category.matches(module)]


# =============================================================================
# Impossibility Check
# =============================================================================


@dataclass(frozen=True)
class Feasibility:
    """Whether a request can be satisfied by the rack.

    Attributes:
        impossible: True when the rack lacks a required module.
        reason: Human-readable explanation naming the missing category.
    """

    impossible: bool
    reason: str | None = None


def is_impossible_request(feedback, rack: ParsedRack) -> Feasibility:
    """Check whether feedback asks for hardware the rack does not have.

    Only ``add`` and ``adjust`` intents are checked. Removing something that
    was never patched is a harmless no-op, not an impossibility.

    Args:
        feedback: A ParsedFeedback.
        rack: The rack inventory.

    Returns:
        Feasibility with ``impossible=True`` and a reason like
        "No reverb module in your rack" when no module serves the target.
    """
    if feedback.intent not in ("add", "adjust"):
        return Feasibility(impossible=False)

    category, _ = resolve_target(feedback.target)
    if category is None:
        return Feasibility(impossible=False)

    if find_category_modules(rack, category):
        return Feasibility(impossible=False)

    reason = f"No {category.name} module in your rack"
    logger.info(f"Impossible request for target '{feedback.target}': {reason}")
    return Feasibility(impossible=True, reason=reason)


__all__ = [
    "ModuleCategory",
    "CATEGORIES",
    "get_category",
    "resolve_target",
    "find_category_modules",
    "Feasibility",
    "is_impossible_request",
]
