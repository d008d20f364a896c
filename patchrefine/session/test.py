"""Tests for chat-turn sessions."""

import json

import pytest

from patchrefine.session import RefinementSession, TurnKind


class TestRefinementSession:
    """Tests for RefinementSession message routing."""

    @pytest.mark.unit
    def test_refine_turn(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        turn = session.handle_message("make it darker")

        assert turn.kind == TurnKind.REFINE
        assert turn.refinement.success is True
        assert turn.patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        assert session.current_patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        assert len(session.modifications) == 1
        assert session.conversation == ["make it darker"]

    @pytest.mark.unit
    def test_failed_refinement_leaves_state(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        turn = session.handle_message("make it better")

        assert turn.kind == TurnKind.REFINE
        assert turn.refinement.needs_clarification is True
        assert session.modifications == []
        assert session.history.can_undo() is False

    @pytest.mark.unit
    def test_no_op_refinement_is_not_recorded(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        for _ in range(3):
            assert session.handle_message("add reverb").refinement.success is True

        assert len(session.history) == 2
        assert len(session.modifications) == 1

        saved = session.handle_message("save this")
        assert "already in the patch" not in saved.message
        assert "1 refinement:" in saved.message

    @pytest.mark.unit
    def test_undo_reverts_last_refinement(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        session.handle_message("make it darker")
        session.handle_message("add reverb")

        turn = session.handle_message("undo")

        assert turn.kind == TurnKind.UNDO
        assert turn.message.startswith("↩️ Reverted to previous version")
        assert turn.patch.get_connection("reverb-reverb-1-1") is None
        assert turn.patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"
        assert len(session.modifications) == 1

    @pytest.mark.unit
    def test_undo_with_nothing_to_undo(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        turn = session.handle_message("go back")

        assert turn.kind == TurnKind.UNDO
        assert "nothing to undo" in turn.message
        assert turn.patch.title == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_save_turn(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        session.handle_message("make it darker")
        turn = session.handle_message("perfect, save it")

        assert turn.kind == TurnKind.SAVE
        assert turn.save.should_save is True
        assert turn.patch.saved is True
        assert turn.patch.title == turn.save.patch_name
        assert turn.patch.title.startswith("Dark Ambient Drone")
        assert "Saved as" in turn.message
        # The session's own patch keeps its title
        assert session.current_patch.title == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_negated_save_is_refined(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        turn = session.handle_message("great, now add reverb")

        assert turn.kind == TurnKind.REFINE
        assert turn.refinement.success is True

    @pytest.mark.unit
    def test_start_fresh(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=3)
        session.handle_message("make it darker")
        turn = session.handle_message("let's start over")

        assert turn.kind == TurnKind.START_FRESH
        assert "Starting fresh" in turn.message
        assert session.modifications == []
        assert session.conversation == []
        assert session.history.can_undo() is False
        assert session.history.max_history == 3
        assert session.current_patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"

    @pytest.mark.unit
    def test_variations(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        turn = session.handle_message("show me some alternatives")

        assert turn.kind == TurnKind.VARIATIONS
        assert "variations" in turn.message
        assert turn.patch.title == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_variations_lists_suggested_variations(self, sample_patch, sample_rack):
        patch = sample_patch.model_copy(deep=True)
        patch.variations = ["Swap the filter for a wavefolder", "Clock the envelope from the LFO"]
        session = RefinementSession(patch, sample_rack, max_history=5)

        turn = session.handle_message("show me some alternatives")

        assert turn.kind == TurnKind.VARIATIONS
        assert "Generated 2 variations for you" in turn.message
        assert "- Swap the filter for a wavefolder" in turn.message
        assert "- Clock the envelope from the LFO" in turn.message

    @pytest.mark.unit
    def test_turn_to_dict(self, sample_patch, sample_rack):
        session = RefinementSession(sample_patch, sample_rack, max_history=5)
        data = json.loads(json.dumps(session.handle_message("brighter").to_dict()))

        assert data["kind"] == "refine"
        assert data["refinement"]["success"] is True
        assert data["save"] is None
        assert data["patch"]["id"] == "test-patch-1"
