"""Unit tests for validation module."""

import pytest

from patchrefine.models import Connection, ParameterSuggestion
from patchrefine.modification import (
    ModificationChanges,
    ParameterChange,
    PatchModification,
)
from patchrefine.validation import (
    PatchIssue,
    validate_modifications,
    validate_patch,
)


def _connection(connection_id: str, from_id: str, from_name: str, to_id: str, to_name: str):
    return Connection.model_validate(
        {
            "id": connection_id,
            "from": {"moduleId": from_id, "moduleName": from_name},
            "to": {"moduleId": to_id, "moduleName": to_name},
        }
    )


class TestValidateModifications:
    """Tests for validate_modifications function."""

    @pytest.mark.unit
    def test_valid_modification(self, sample_patch, sample_rack):
        modification = PatchModification(
            description="Added reverb",
            changes=ModificationChanges(
                connections_added=[_connection("c", "vca-1", "Veils", "reverb-1", "Clouds")]
            ),
        )
        result = validate_modifications(modification, sample_patch, sample_rack)
        assert result.valid is True
        assert result.issues == []

    @pytest.mark.unit
    def test_unknown_parameter_module(self, sample_patch, sample_rack):
        modification = PatchModification(
            description="Lowered cutoff",
            changes=ModificationChanges(
                parameters_changed=[
                    ParameterChange(
                        module_id="ghost",
                        module_name="Ghost Filter",
                        parameter="cutoff",
                        old_value="5kHz",
                        new_value="3.5kHz",
                    )
                ]
            ),
        )
        result = validate_modifications(modification, sample_patch, sample_rack)
        assert result.valid is False
        assert result.issues == ["Module Ghost Filter not found in rack"]

    @pytest.mark.unit
    def test_unknown_connection_endpoints(self, sample_patch, sample_rack):
        modification = PatchModification(
            description="Added delay",
            changes=ModificationChanges(
                connections_added=[_connection("c", "ghost-a", "Ghost A", "ghost-b", "Ghost B")]
            ),
        )
        result = validate_modifications(modification, sample_patch, sample_rack)
        assert result.issues == [
            "Source module Ghost A not found in rack",
            "Target module Ghost B not found in rack",
        ]

    @pytest.mark.unit
    def test_empty_modification_valid(self, sample_patch, sample_rack):
        result = validate_modifications(
            PatchModification(description="Nothing"), sample_patch, sample_rack
        )
        assert result.valid


class TestValidatePatch:
    """Tests for validate_patch function."""

    @pytest.mark.unit
    def test_valid_patch(self, sample_patch):
        assert validate_patch(sample_patch) == []

    @pytest.mark.unit
    def test_dangling_patching_order(self, sample_patch):
        patch = sample_patch.model_copy(deep=True)
        patch.patching_order.append("conn-9")
        issues = validate_patch(patch)
        assert len(issues) == 1
        assert issues[0].issue_type == "dangling_order"
        assert issues[0].subject_id == "conn-9"

    @pytest.mark.unit
    def test_duplicate_connection_ids(self, sample_patch):
        patch = sample_patch.model_copy(deep=True)
        patch.connections.append(patch.connections[0].model_copy(deep=True))
        issues = validate_patch(patch)
        assert [i.issue_type for i in issues] == ["duplicate_connection"]
        assert "conn-1" in issues[0].message

    @pytest.mark.unit
    def test_duplicate_suggestions(self, sample_patch):
        patch = sample_patch.model_copy(deep=True)
        patch.parameter_suggestions.append(
            ParameterSuggestion(
                module_id="filter-1", module_name="Ripples", parameter="cutoff", value="1kHz"
            )
        )
        issues = validate_patch(patch)
        assert issues == [
            PatchIssue(
                subject_id="filter-1/cutoff",
                message="Parameter 'cutoff' on filter-1 suggested 2 times",
                issue_type="duplicate_suggestion",
            )
        ]
