"""Tests for the refinement orchestrator and special-intent handlers."""

import json
import logging

import pytest

from patchrefine.core.errors import MappingError
from patchrefine.modification import (
    ModificationChanges,
    ParameterChange,
    PatchModification,
)
from patchrefine.refine import (
    generate_impossible_request_message,
    generate_undo_message,
    generate_variation_message,
    handle_save_intent,
    handle_start_fresh_intent,
    handle_variations_intent,
    refine_patch,
)
from patchrefine.validation import validate_patch


class TestRefinePatch:
    """Tests for refine_patch."""

    @pytest.mark.unit
    def test_successful_refinement(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "make it darker", sample_rack)

        assert result.success is True
        assert result.message.startswith("✨")
        assert "darker" in result.message
        assert result.modification is not None
        assert result.updated_patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        # Input patch is untouched
        assert sample_patch.get_suggestion("filter-1", "cutoff").value == "5kHz"

    @pytest.mark.unit
    def test_add_effect_keeps_document_valid(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "add reverb", sample_rack)

        assert result.success is True
        assert result.message == "✨ Added reverb (Clouds) after Veils"
        assert result.updated_patch.patching_order[-1] == "reverb-reverb-1-1"
        assert validate_patch(result.updated_patch) == []

    @pytest.mark.unit
    def test_impossible_request(self, sample_patch, bare_rack):
        result = refine_patch(sample_patch, "add reverb", bare_rack)

        assert result.success is False
        assert result.impossible_request is True
        assert "reverb" in result.impossible_reason
        assert result.message.startswith("I can't do that because No reverb module")
        assert result.updated_patch is None

    @pytest.mark.unit
    def test_clarification_for_vague_feedback(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "make it better", sample_rack)

        assert result.success is False
        assert result.needs_clarification is True
        assert "specific" in result.message

    @pytest.mark.unit
    def test_clarification_for_low_confidence(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "hmm", sample_rack)

        assert result.needs_clarification is True
        assert result.feedback.confidence == 0.3
        assert "Could you tell me more" in result.message

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["increase decay to 5 seconds", "turn it up to 11"])
    def test_unresolvable_target_asks(self, sample_patch, sample_rack, text):
        result = refine_patch(sample_patch, text, sample_rack)

        assert result.success is False
        assert result.needs_clarification is True
        assert result.updated_patch is None

    @pytest.mark.unit
    def test_drop_lowers_instead_of_removing(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "drop the cutoff", sample_rack)

        assert result.success is True
        assert result.updated_patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        assert [c.id for c in result.updated_patch.connections] == ["conn-1", "conn-2"]

    @pytest.mark.unit
    def test_drop_volume_lowers_level(self, sample_patch, sample_rack):
        result = refine_patch(sample_patch, "drop the volume a bit", sample_rack)

        assert result.success is True
        assert result.modification.changes.connections_removed == []
        assert result.updated_patch.get_suggestion("vca-1", "level").value == "49%"

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_feedback(self, sample_patch, sample_rack, text):
        result = refine_patch(sample_patch, text, sample_rack)

        assert result.success is False
        assert "trouble understanding" in result.message
        assert result.feedback is None

    @pytest.mark.unit
    def test_validation_failure(self, sample_patch, sample_rack, monkeypatch):
        ghost = PatchModification(
            description="Lowered filter cutoff",
            changes=ModificationChanges(
                parameters_changed=[
                    ParameterChange(
                        module_id="ghost",
                        module_name="Ghost",
                        parameter="cutoff",
                        old_value="5kHz",
                        new_value="3.5kHz",
                    )
                ]
            ),
            confidence=0.9,
        )
        monkeypatch.setattr(
            "patchrefine.refine.lib.map_feedback_to_modifications",
            lambda feedback, patch, rack: ghost,
        )

        result = refine_patch(sample_patch, "darker", sample_rack)

        assert result.success is False
        assert result.message == "I can't make that change: Module Ghost not found in rack"
        assert result.issues == ["Module Ghost not found in rack"]

    @pytest.mark.unit
    def test_internal_fault_is_converted(self, sample_patch, sample_rack, monkeypatch, caplog):
        def boom(feedback, patch, rack):
            raise MappingError("broken")

        monkeypatch.setattr("patchrefine.refine.lib.map_feedback_to_modifications", boom)

        with caplog.at_level(logging.ERROR, logger="patchrefine.refine.lib"):
            result = refine_patch(sample_patch, "darker", sample_rack)

        assert result.success is False
        assert "trouble understanding" in result.message
        assert result.feedback is not None
        assert any("Refinement failed" in r.getMessage() for r in caplog.records)

    @pytest.mark.unit
    def test_to_dict_is_json_serializable(self, sample_patch, sample_rack):
        data = refine_patch(sample_patch, "brighter", sample_rack).to_dict()
        encoded = json.loads(json.dumps(data))

        assert encoded["success"] is True
        assert encoded["feedback"]["target"] == "filter_cutoff"
        assert encoded["modification"]["changes"]["parametersChanged"][0]["newValue"] == "6.5kHz"
        assert "parameterSuggestions" in encoded["updatedPatch"]


class TestSpecialIntentHandlers:
    """Tests for save, start fresh, variations and undo replies."""

    @pytest.mark.unit
    def test_save_with_modifications(self, sample_patch):
        modifications = [
            PatchModification(description="Lowered filter cutoff by 30%", confidence=0.9),
            PatchModification(description="Added reverb (Clouds) after Veils", confidence=0.9),
        ]
        decision = handle_save_intent(sample_patch, modifications, [])

        assert decision.should_save is True
        assert decision.patch_name == "Dark Ambient Drone (Darker, Reverb Heavy)"
        assert "Saved as" in decision.confirmation_message
        assert "2 refinements" in decision.confirmation_message

    @pytest.mark.unit
    def test_save_without_modifications(self, sample_patch):
        decision = handle_save_intent(sample_patch, [])

        assert decision.should_save is True
        assert decision.patch_name == "Dark Ambient Drone"
        assert 'Saved as "Dark Ambient Drone"' in decision.confirmation_message
        assert decision.to_dict()["patch_name"] == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_start_fresh(self):
        result = handle_start_fresh_intent()
        assert result["should_start_fresh"] is True
        assert "Starting fresh" in result["message"]
        assert "What kind of sound" in result["message"]

    @pytest.mark.unit
    def test_variations(self):
        result = handle_variations_intent()
        assert result["should_show_variations"] is True
        assert "variations" in result["message"]

    @pytest.mark.unit
    def test_undo_message(self, sample_patch):
        assert generate_undo_message(sample_patch) == (
            '↩️ Reverted to previous version: "Dark Ambient Drone"'
        )

    @pytest.mark.unit
    def test_variation_message(self):
        assert "1 variation for you" in generate_variation_message(1)
        assert "3 variations for you" in generate_variation_message(3)

    @pytest.mark.unit
    def test_impossible_message(self):
        message = generate_impossible_request_message("No delay module in your rack")
        assert message.startswith("I can't do that because No delay module in your rack.")
        assert "suggest some modules" in message
