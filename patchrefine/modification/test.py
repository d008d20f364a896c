"""Tests for modification mapping and application."""

import pytest

from patchrefine.core.errors import MappingError
from patchrefine.feedback import (
    FeedbackAction,
    ParsedFeedback,
    Specificity,
    parse_feedback,
)
from patchrefine.models import Connection, ParsedRack
from patchrefine.modification import (
    ModificationChanges,
    ParameterChange,
    PatchModification,
    apply_modifications,
    map_feedback_to_modifications,
    scale_value,
)
from patchrefine.validation import validate_patch


def _reverb_connection(connection_id: str = "fx-1") -> Connection:
    return Connection.model_validate(
        {
            "id": connection_id,
            "from": {"moduleId": "vca-1", "moduleName": "Veils"},
            "to": {"moduleId": "reverb-1", "moduleName": "Clouds"},
        }
    )


class TestScaleValue:
    """Tests for numeric value scaling."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,factor,expected",
        [
            ("5kHz", 0.7, "3.5kHz"),
            ("5kHz", 1.3, "6.5kHz"),
            ("50%", 0.7, "35%"),
            ("80%", 1.3, "100%"),
            ("120BPM", 1.3, "156BPM"),
            ("4 s", 1.3, "5.2 s"),
            ("1.234kHz", 1.3, "1.6kHz"),
            ("100", 0.7, "70"),
        ],
    )
    def test_scale(self, value, factor, expected):
        assert scale_value(value, factor) == expected

    @pytest.mark.unit
    def test_non_numeric_raises(self):
        with pytest.raises(ValueError):
            scale_value("wide open", 0.7)


class TestMapAdjustment:
    """Tests for adjust intents."""

    @pytest.mark.unit
    def test_darker_lowers_cutoff(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("make it darker"), sample_patch, sample_rack
        )
        changes = modification.changes.parameters_changed
        assert len(changes) == 1
        assert changes[0].module_id == "filter-1"
        assert changes[0].parameter == "cutoff"
        assert changes[0].old_value == "5kHz"
        assert changes[0].new_value == "3.5kHz"
        assert "darker" in modification.description
        assert "filter" in modification.description

    @pytest.mark.unit
    def test_brighter_raises_cutoff(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("brighter"), sample_patch, sample_rack
        )
        assert modification.changes.parameters_changed[0].new_value == "6.5kHz"
        assert "brighter" in modification.description

    @pytest.mark.unit
    def test_louder_scales_vca_level(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("louder"), sample_patch, sample_rack
        )
        change = modification.changes.parameters_changed[0]
        assert change.module_id == "vca-1"
        assert change.new_value == "91%"
        assert "volume" in modification.description

    @pytest.mark.unit
    def test_specific_value_sets_directly(self, sample_patch, sample_rack):
        feedback = ParsedFeedback(
            intent=FeedbackAction.ADJUST,
            target="reverb_decay",
            value="8s",
            specificity=Specificity.SPECIFIC,
            confidence=0.95,
            reasoning="test",
        )
        modification = map_feedback_to_modifications(feedback, sample_patch, sample_rack)
        change = modification.changes.parameters_changed[0]
        assert change.module_name == "Clouds"
        assert change.parameter == "decay"
        assert change.new_value == "8s"
        assert modification.description == "Set reverb decay to 8s on Clouds"

    @pytest.mark.unit
    def test_missing_suggestion_uses_category_default(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("more reverb"), sample_patch, sample_rack
        )
        change = modification.changes.parameters_changed[0]
        assert change.parameter == "send"
        assert change.old_value == "50%"
        assert change.new_value == "65%"

    @pytest.mark.unit
    def test_non_numeric_value_falls_back_to_default(self, sample_patch, sample_rack):
        patch = sample_patch.model_copy(deep=True)
        patch.parameter_suggestions[0].value = "wide open"
        modification = map_feedback_to_modifications(
            parse_feedback("darker"), patch, sample_rack
        )
        assert modification.changes.parameters_changed[0].new_value == "3.5kHz"

    @pytest.mark.unit
    def test_prefers_module_with_suggestion(self, sample_patch):
        rack = ParsedRack.model_validate(
            {
                "modules": [
                    {"id": "filter-0", "name": "QPAS", "type": "VCF"},
                    {"id": "filter-1", "name": "Ripples", "type": "VCF"},
                ]
            }
        )
        modification = map_feedback_to_modifications(
            parse_feedback("darker"), sample_patch, rack
        )
        changes = modification.changes.parameters_changed
        assert len(changes) == 1
        assert changes[0].module_id == "filter-1"

    @pytest.mark.unit
    def test_general_target_changes_nothing(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("hmm"), sample_patch, sample_rack
        )
        assert modification.is_empty


class TestMapAddRemove:
    """Tests for add and remove intents."""

    @pytest.mark.unit
    def test_add_reverb_after_signal_chain(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("add reverb"), sample_patch, sample_rack
        )
        added = modification.changes.connections_added
        assert len(added) == 1
        assert added[0].to.module_name == "Clouds"
        assert added[0].to.input_name == "IN L"
        assert added[0].from_.module_id == "vca-1"
        assert added[0].from_.output_name == "OUT 1"
        assert added[0].importance == "primary"
        assert added[0].id == "reverb-reverb-1-1"
        assert "reverb" in modification.description

    @pytest.mark.unit
    def test_add_is_deterministic(self, sample_patch, sample_rack):
        first = map_feedback_to_modifications(parse_feedback("add reverb"), sample_patch, sample_rack)
        second = map_feedback_to_modifications(parse_feedback("add reverb"), sample_patch, sample_rack)
        assert first == second

    @pytest.mark.unit
    def test_add_when_already_wired(self, sample_patch, sample_rack):
        patch = sample_patch.model_copy(deep=True)
        patch.connections.append(_reverb_connection())
        modification = map_feedback_to_modifications(
            parse_feedback("add reverb"), patch, sample_rack
        )
        assert modification.is_empty
        assert "reverb" in modification.description

    @pytest.mark.unit
    def test_remove_reverb(self, sample_patch, sample_rack):
        patch = sample_patch.model_copy(deep=True)
        patch.connections.append(_reverb_connection())
        modification = map_feedback_to_modifications(
            parse_feedback("remove reverb"), patch, sample_rack
        )
        removed = modification.changes.connections_removed
        assert [c.id for c in removed] == ["fx-1"]
        assert "reverb" in modification.description

    @pytest.mark.unit
    def test_remove_absent_effect(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("remove delay"), sample_patch, sample_rack
        )
        assert modification.changes.connections_removed == []
        assert "delay" in modification.description

    @pytest.mark.unit
    def test_clarify(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("make it better"), sample_patch, sample_rack
        )
        assert modification.description == "Need clarification on what to change"
        assert modification.confidence == 0.1
        assert modification.is_empty

    @pytest.mark.unit
    def test_empty_target_raises(self, sample_patch, sample_rack):
        feedback = ParsedFeedback(
            intent=FeedbackAction.ADJUST,
            target="",
            specificity=Specificity.VAGUE,
            confidence=0.9,
            reasoning="test",
        )
        with pytest.raises(MappingError):
            map_feedback_to_modifications(feedback, sample_patch, sample_rack)


class TestApplyModifications:
    """Tests for apply_modifications."""

    @pytest.mark.unit
    def test_replaces_existing_suggestion(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("darker"), sample_patch, sample_rack
        )
        updated = apply_modifications(sample_patch, modification)
        assert updated.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        assert len(updated.parameter_suggestions) == len(sample_patch.parameter_suggestions)
        # Original untouched
        assert sample_patch.get_suggestion("filter-1", "cutoff").value == "5kHz"

    @pytest.mark.unit
    def test_appends_new_suggestion(self, sample_patch):
        modification = PatchModification(
            description="Raised filter resonance",
            changes=ModificationChanges(
                parameters_changed=[
                    ParameterChange(
                        module_id="filter-1",
                        module_name="Ripples",
                        parameter="resonance",
                        old_value="50%",
                        new_value="65%",
                    )
                ]
            ),
            confidence=0.8,
        )
        updated = apply_modifications(sample_patch, modification)
        assert updated.get_suggestion("filter-1", "resonance").value == "65%"
        assert len(updated.parameter_suggestions) == 3

    @pytest.mark.unit
    def test_added_connection_joins_patching_order(self, sample_patch, sample_rack):
        modification = map_feedback_to_modifications(
            parse_feedback("add reverb"), sample_patch, sample_rack
        )
        updated = apply_modifications(sample_patch, modification)
        assert updated.patching_order == ["conn-1", "conn-2", "reverb-reverb-1-1"]
        assert updated.get_connection("reverb-reverb-1-1") is not None
        assert validate_patch(updated) == []

    @pytest.mark.unit
    def test_duplicate_connection_skipped(self, sample_patch):
        duplicate = sample_patch.connections[0].model_copy(deep=True)
        modification = PatchModification(
            description="Added duplicate",
            changes=ModificationChanges(connections_added=[duplicate]),
        )
        updated = apply_modifications(sample_patch, modification)
        assert len(updated.connections) == 2
        assert updated.patching_order == ["conn-1", "conn-2"]

    @pytest.mark.unit
    def test_removed_connection_leaves_patching_order(self, sample_patch):
        modification = PatchModification(
            description="Removed filter",
            changes=ModificationChanges(connections_removed=[sample_patch.connections[1]]),
        )
        updated = apply_modifications(sample_patch, modification)
        assert [c.id for c in updated.connections] == ["conn-1"]
        assert updated.patching_order == ["conn-1"]
        assert validate_patch(updated) == []

    @pytest.mark.unit
    def test_updates_timestamp(self, sample_patch):
        modification = PatchModification(description="Nothing")
        updated = apply_modifications(sample_patch, modification)
        assert updated.updated_at >= sample_patch.updated_at
