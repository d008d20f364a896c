"""Tests for special-intent detection and patch naming."""

import pytest

from patchrefine.intents import (
    check_special_intents,
    detect_save_intent,
    detect_start_fresh_intent,
    detect_undo_intent,
    detect_variations_intent,
    extract_moods,
    generate_patch_name,
    generate_save_confirmation,
)
from patchrefine.intents.lib import normalize_message
from patchrefine.modification import PatchModification


def _mods(*descriptions: str) -> list[PatchModification]:
    return [PatchModification(description=d, confidence=0.9) for d in descriptions]


class TestDetectSaveIntent:
    """Tests for detect_save_intent."""

    @pytest.mark.unit
    def test_explicit_save(self):
        result = detect_save_intent("save this")
        assert result.detected is True
        assert result.confidence > 0.9
        assert "save this" in result.reasoning

    @pytest.mark.unit
    def test_positive_feedback(self):
        result = detect_save_intent("perfect")
        assert result.detected is True
        assert result.confidence > 0.8

    @pytest.mark.unit
    def test_completion(self):
        result = detect_save_intent("done")
        assert result.detected is True
        assert result.confidence > 0.7

    @pytest.mark.unit
    def test_approval(self):
        result = detect_save_intent("yes")
        assert result.detected is True
        assert result.confidence > 0.6

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "message",
        ["no", "make it darker", "show me variations", "not quite, save it later"],
    )
    def test_negative_phrases_veto(self, message):
        assert detect_save_intent(message).detected is False

    @pytest.mark.unit
    def test_case_insensitive(self):
        result = detect_save_intent("SAVE THIS")
        assert result.detected is True
        assert result.confidence > 0.9

    @pytest.mark.unit
    def test_punctuation(self):
        result = detect_save_intent("perfect!")
        assert result.detected is True
        assert result.confidence > 0.8

    @pytest.mark.unit
    def test_curly_apostrophe(self):
        result = detect_save_intent("That’s it")
        assert result.detected is True
        assert result.confidence == 0.75

    @pytest.mark.unit
    def test_whole_words_only(self):
        """'no' inside 'know' is not a negation."""
        assert detect_save_intent("I know, it's great").detected is True
        assert detect_save_intent("hmm").detected is False
        assert detect_save_intent("hmm").confidence == 0.0


class TestOtherDetectors:
    """Tests for start-fresh, variations and undo detection."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "message", ["start fresh", "Start over!", "new patch please", "something else", "reset"]
    )
    def test_start_fresh(self, message):
        assert detect_start_fresh_intent(message) is True

    @pytest.mark.unit
    def test_not_start_fresh(self):
        assert detect_start_fresh_intent("make it darker") is False
        assert detect_start_fresh_intent("clearer please") is False

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "message", ["show me variations", "any alternatives?", "what else", "another one"]
    )
    def test_variations(self, message):
        assert detect_variations_intent(message) is True

    @pytest.mark.unit
    def test_not_variations(self):
        assert detect_variations_intent("save this") is False

    @pytest.mark.unit
    @pytest.mark.parametrize("message", ["undo", "go back", "Revert that", "change it back"])
    def test_undo(self, message):
        assert detect_undo_intent(message) is True

    @pytest.mark.unit
    def test_not_undo(self):
        assert detect_undo_intent("add reverb") is False

    @pytest.mark.unit
    def test_check_special_intents_independent(self):
        intents = check_special_intents("try again with something else")
        assert intents.start_fresh_intent is True
        assert intents.save_intent is False
        assert intents.undo_intent is False

    @pytest.mark.unit
    def test_check_special_intents_multiple(self):
        intents = check_special_intents("try another variation")
        assert intents.variations_intent is True
        assert intents.to_dict() == {
            "save_intent": False,
            "start_fresh_intent": False,
            "variations_intent": True,
            "undo_intent": False,
        }

    @pytest.mark.unit
    def test_normalize_message(self):
        assert normalize_message("  That’s   PERFECT!! ") == "that's perfect"


class TestGeneratePatchName:
    """Tests for generate_patch_name."""

    @pytest.mark.unit
    def test_descriptors_from_modifications(self):
        name = generate_patch_name(
            "Original Patch",
            _mods("Lowered filter cutoff by 30%", "Increased reverb send to 80%"),
            [],
        )
        assert name == "Original Patch (Darker, Reverb Heavy)"

    @pytest.mark.unit
    def test_removals_and_no_ops_add_no_descriptor(self):
        name = generate_patch_name(
            "Original Patch",
            _mods(
                "Removed reverb from the patch",
                "No delay in the patch to remove",
                "All reverb modules are already in the patch",
                "Lowered filter cutoff by 30% (5kHz → 3.5kHz) for a darker sound",
            ),
        )
        assert name == "Original Patch (Darker)"

    @pytest.mark.unit
    def test_removal_only_falls_back_to_title(self):
        assert generate_patch_name("P", _mods("Removed reverb from the patch"), []) == "P"

    @pytest.mark.unit
    def test_no_modifications(self):
        assert generate_patch_name("Original Patch", [], []) == "Original Patch"

    @pytest.mark.unit
    def test_limit_three_descriptors(self):
        name = generate_patch_name(
            "Original Patch",
            _mods(
                "Made it darker",
                "Added reverb",
                "Made it louder",
                "Made it faster",
                "Added distortion",
            ),
        )
        assert name == "Original Patch (Darker, Reverb Heavy, Loud)"

    @pytest.mark.unit
    def test_duplicate_descriptors_collapse(self):
        name = generate_patch_name("P", _mods("darker", "even darker"))
        assert name == "P (Darker)"

    @pytest.mark.unit
    def test_mood_from_context(self):
        name = generate_patch_name(
            "Original Patch",
            [],
            ["I want something dark and atmospheric", "Make it more ambient", "That sounds perfect"],
        )
        assert name == "Original Patch (Dark, Ambient)"

    @pytest.mark.unit
    def test_modifications_take_precedence_over_mood(self):
        name = generate_patch_name("P", _mods("Added delay"), ["something dark"])
        assert name == "P (Delayed)"

    @pytest.mark.unit
    def test_truncates_long_names(self):
        name = generate_patch_name("A" * 100, _mods(*[f"Modification {i}" for i in range(10)]))
        assert len(name) == 80
        assert name.endswith("...")

    @pytest.mark.unit
    def test_extract_moods_limit(self):
        moods = extract_moods(["dark bright ambient harsh"])
        assert moods == ["Dark", "Bright"]


class TestSaveConfirmation:
    """Tests for generate_save_confirmation."""

    @pytest.mark.unit
    def test_basic(self):
        message = generate_save_confirmation("Test Patch", [])
        assert 'Saved as "Test Patch"' in message
        assert "Cookbook" in message
        assert "Want to try another variation" in message
        assert "refinement" not in message

    @pytest.mark.unit
    def test_lists_modifications(self):
        message = generate_save_confirmation(
            "Test Patch",
            _mods("Lowered filter cutoff by 30%", "Increased reverb send to 80%"),
        )
        assert "2 refinements" in message
        assert "• Lowered filter cutoff" in message
        assert "• Increased reverb send" in message

    @pytest.mark.unit
    def test_single_refinement(self):
        message = generate_save_confirmation("Test Patch", _mods("Added delay"))
        assert "1 refinement:" in message

    @pytest.mark.unit
    def test_many_modifications(self):
        message = generate_save_confirmation(
            "Test Patch", _mods(*[f"Modification {i + 1}" for i in range(5)])
        )
        assert "5 refinements" in message
        assert "...and 2 more" in message
        assert "Modification 4" not in message
