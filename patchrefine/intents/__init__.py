"""Special-intent detection and patch naming.

Example:
    >>> from patchrefine.intents import check_special_intents
    >>> intents = check_special_intents("Perfect, save this!")
    >>> intents.save_intent
    True
"""

from patchrefine.intents.lib import (
    SaveIntentResult,
    SpecialIntents,
    check_special_intents,
    detect_save_intent,
    detect_start_fresh_intent,
    detect_undo_intent,
    detect_variations_intent,
)
from patchrefine.intents.naming import (
    extract_moods,
    generate_patch_name,
    generate_save_confirmation,
)

__all__ = [
    # Detection
    "SaveIntentResult",
    "SpecialIntents",
    "check_special_intents",
    "detect_save_intent",
    "detect_start_fresh_intent",
    "detect_undo_intent",
    "detect_variations_intent",
    # Naming
    "extract_moods",
    "generate_patch_name",
    "generate_save_confirmation",
]
