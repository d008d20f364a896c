"""Patch naming and save confirmation text.

A saved patch is named after its original title plus a few descriptors
drawn from the refinements applied to it, e.g.
"Dark Ambient Drone (Darker, Reverb Heavy)".
"""

import logging
import re
from typing import Sequence

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 80
MAX_DESCRIPTORS = 3
MAX_MOODS = 2
MAX_LISTED_REFINEMENTS = 3

# (substrings searched in a modification description, descriptor)
DESCRIPTOR_TABLE: tuple[tuple[tuple[str, ...], str], ...] = (
    (("darker", "lowered filter cutoff"), "Darker"),
    (("brighter", "raised filter cutoff"), "Brighter"),
    (("reverb",), "Reverb Heavy"),
    (("delay",), "Delayed"),
    (("louder", "raised volume"), "Loud"),
    (("softer", "lowered volume"), "Soft"),
    (("faster", "raised tempo"), "Fast"),
    (("slower", "lowered tempo"), "Slow"),
    (("aggressive",), "Aggressive"),
    (("smooth",), "Smooth"),
    (("distortion",), "Distorted"),
    (("modulation",), "Modulated"),
)

# Descriptions that take something away or change nothing earn no descriptor.
NO_DESCRIPTOR_PREFIXES = ("removed ", "no ", "all ", "could not ", "adjusted ")

MOOD_PATTERNS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(?:dark|darker|darkness)"), "Dark"),
    (re.compile(r"\b(?:bright|brighter|brightness)"), "Bright"),
    (re.compile(r"\b(?:ambient|atmospheric|ethereal)"), "Ambient"),
    (re.compile(r"\b(?:aggressive|harsh|intense)"), "Aggressive"),
    (re.compile(r"\b(?:smooth|gentle|soft)"), "Smooth"),
    (re.compile(r"\b(?:experimental|weird|strange)"), "Experimental"),
    (re.compile(r"\b(?:melodic|musical|tuneful)"), "Melodic"),
    (re.compile(r"\b(?:rhythmic|percussive|driving)"), "Rhythmic"),
    (re.compile(r"\b(?:minimal|simple|clean)"), "Minimal"),
    (re.compile(r"\b(?:complex|layered|rich)"), "Complex"),
)


def _descriptors(modifications: Sequence) -> list[str]:
    found: list[str] = []
    for modification in modifications:
        description = modification.description.lower()
        if description.startswith(NO_DESCRIPTOR_PREFIXES):
            continue
        for keywords, descriptor in DESCRIPTOR_TABLE:
            if descriptor not in found and any(k in description for k in keywords):
                found.append(descriptor)
    return found[:MAX_DESCRIPTORS]


def extract_moods(context: Sequence[str]) -> list[str]:
    """Pick up to two mood words from the conversation so far."""
    text = " ".join(context).lower()
    moods = [mood for pattern, mood in MOOD_PATTERNS if pattern.search(text)]
    return moods[:MAX_MOODS]


def generate_patch_name(
    title: str, modifications: Sequence, context: Sequence[str] | None = None
) -> str:
    """Name a refined patch.

    Args:
        title: Original patch title.
        modifications: Applied PatchModifications, oldest first.
        context: User messages from the conversation, used for mood words
            when the modifications yield no descriptors.

    Returns:
        Name of at most 80 characters, e.g. "Drone (Darker, Reverb Heavy)".
    """
    words = _descriptors(modifications) or extract_moods(context or [])
    name = f"{title} ({', '.join(words)})" if words else title

    if len(name) > MAX_NAME_LENGTH:
        name = name[: MAX_NAME_LENGTH - 3] + "..."

    logger.debug(f"Generated patch name '{name}' from '{title}'")
    return name


def generate_save_confirmation(name: str, modifications: Sequence) -> str:
    """Build the message shown after a patch is saved."""
    lines = [f'✅ Saved as "{name}" to your Cookbook!', ""]

    count = len(modifications)
    if count:
        plural = "s" if count > 1 else ""
        lines.append(f"This patch includes {count} refinement{plural}:")
        for modification in modifications[:MAX_LISTED_REFINEMENTS]:
            lines.append(f"• {modification.description}")
        if count > MAX_LISTED_REFINEMENTS:
            lines.append(f"• ...and {count - MAX_LISTED_REFINEMENTS} more")
        lines.append("")

    lines.append("Want to try another variation or start fresh?")
    return "\n".join(lines)


__all__ = [
    "DESCRIPTOR_TABLE",
    "extract_moods",
    "generate_patch_name",
    "generate_save_confirmation",
]
