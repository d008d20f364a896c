"""Unit tests for patch and rack document models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from patchrefine.models import (
    Connection,
    ParsedRack,
    Patch,
    RackModule,
    SignalType,
    export_patch_schema,
)


class TestRackModels:
    """Tests for rack inventory parsing."""

    @pytest.mark.unit
    def test_bare_power_integer(self):
        """A bare power number is read as +12V draw."""
        module = RackModule(id="vco-1", name="Plaits", type="VCO", hp=12, power=50)
        assert module.power.positive_12v == 50
        assert module.power.total == 50

    @pytest.mark.unit
    def test_power_rails_from_document(self):
        module = RackModule.model_validate(
            {
                "id": "m",
                "name": "Maths",
                "power": {"positive12V": 60, "negative12V": 50, "positive5V": 0},
            }
        )
        assert module.power.total == 110

    @pytest.mark.unit
    def test_ports_accept_bare_names(self):
        module = RackModule(id="f", name="Ripples", inputs=["in", "fm"], outputs=[])
        assert [port.name for port in module.inputs] == ["in", "fm"]
        assert module.inputs[0].type == SignalType.AUDIO

    @pytest.mark.unit
    def test_rack_totals_computed(self):
        rack = ParsedRack(
            modules=[
                RackModule(id="a", name="A", hp=8, power=40),
                RackModule(id="b", name="B", hp=12, power=50),
            ]
        )
        assert rack.total_hp == 20
        assert rack.total_power == 90

    @pytest.mark.unit
    def test_rack_totals_respected_when_given(self):
        rack = ParsedRack.model_validate(
            {"modules": [{"id": "a", "name": "A", "hp": 8}], "totalHp": 84}
        )
        assert rack.total_hp == 84

    @pytest.mark.unit
    def test_get_module(self, sample_rack):
        assert sample_rack.get_module("filter-1").name == "Ripples"
        assert sample_rack.get_module("missing") is None
        assert sample_rack.has_module("vco-1")


class TestPatchModels:
    """Tests for the patch document."""

    @pytest.mark.unit
    def test_camel_case_document_round_trip(self, sample_patch):
        """Documents use camelCase keys and 'from' for the source endpoint."""
        document = sample_patch.to_document()
        assert "parameterSuggestions" in document
        assert "patchingOrder" in document
        assert document["connections"][0]["from"]["moduleId"] == "vco-1"

        restored = Patch.model_validate(document)
        assert restored.connections[0].from_.module_name == "Plaits"
        assert restored.parameter_suggestions == sample_patch.parameter_suggestions

    @pytest.mark.unit
    def test_connection_by_python_name(self):
        connection = Connection.model_validate(
            {
                "id": "c",
                "from_": {"module_id": "a", "module_name": "A"},
                "to": {"module_id": "b", "module_name": "B"},
            }
        )
        assert connection.module_ids == ("a", "b")
        assert connection.from_.output_name == "output"

    @pytest.mark.unit
    def test_invalid_signal_type_rejected(self):
        with pytest.raises(ValidationError):
            Connection.model_validate(
                {
                    "id": "c",
                    "from": {"moduleId": "a", "moduleName": "A"},
                    "to": {"moduleId": "b", "moduleName": "B"},
                    "signalType": "midi",
                }
            )

    @pytest.mark.unit
    def test_timestamps_default_to_now(self, sample_patch):
        assert isinstance(sample_patch.updated_at, datetime)
        assert sample_patch.updated_at.tzinfo is not None

    @pytest.mark.unit
    def test_lookup_helpers(self, sample_patch):
        assert sample_patch.title == "Dark Ambient Drone"
        assert sample_patch.get_connection("conn-1") is not None
        assert sample_patch.get_suggestion("filter-1", "cutoff").value == "5kHz"
        assert sample_patch.get_suggestion("filter-1", "resonance") is None
        assert sample_patch.wired_module_ids() == {"vco-1", "filter-1", "vca-1"}

    @pytest.mark.unit
    def test_ordered_connections_follow_patching_order(self, sample_patch):
        reordered = sample_patch.model_copy(
            update={"patching_order": ["conn-2"]}, deep=True
        )
        ids = [c.id for c in reordered.ordered_connections()]
        assert ids == ["conn-2", "conn-1"]

    @pytest.mark.unit
    def test_schema_export(self):
        schema = export_patch_schema()
        assert schema["title"] == "Patch"
        assert "parameterSuggestions" in schema["properties"]
