"""Tests for the refinement history."""

import pytest

from patchrefine.history import RefinementHistory


def _titled(patch, title: str):
    copy = patch.model_copy(deep=True)
    copy.metadata.title = title
    return copy


class TestRefinementHistory:
    """Tests for RefinementHistory."""

    @pytest.mark.unit
    def test_starts_with_initial_patch(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        assert len(history) == 1
        assert history.get_current_patch().title == "Dark Ambient Drone"
        assert history.can_undo() is False

    @pytest.mark.unit
    def test_default_size_from_config(self, sample_patch, monkeypatch):
        monkeypatch.setenv("REFINE_HISTORY_SIZE", "3")
        assert RefinementHistory(sample_patch).max_history == 3
        monkeypatch.delenv("REFINE_HISTORY_SIZE")
        assert RefinementHistory(sample_patch).max_history == 5

    @pytest.mark.unit
    def test_evicts_oldest(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        for i in range(10):
            history.add_patch(_titled(sample_patch, f"v{i + 1}"))

        assert len(history) == 5
        assert history.get_current_patch().title == "v10"
        assert [p.title for p in history.get_history()] == ["v6", "v7", "v8", "v9", "v10"]

    @pytest.mark.unit
    def test_undo(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        history.add_patch(_titled(sample_patch, "v1"))
        history.add_patch(_titled(sample_patch, "v2"))

        assert history.get_previous_patch().title == "v1"
        assert history.undo().title == "v1"
        assert history.undo().title == "Dark Ambient Drone"
        assert history.get_current_patch().title == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_undo_single_entry(self, sample_patch):
        """Nothing to undo returns None and leaves state alone."""
        history = RefinementHistory(sample_patch, max_history=5)
        assert history.undo() is None
        assert history.get_previous_patch() is None
        assert len(history) == 1
        assert history.current_index == 0

    @pytest.mark.unit
    def test_add_after_undo_discards_redo(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        history.add_patch(_titled(sample_patch, "v1"))
        history.add_patch(_titled(sample_patch, "v2"))
        history.undo()
        history.add_patch(_titled(sample_patch, "v3"))

        titles = [p.title for p in history.get_history()]
        assert titles == ["Dark Ambient Drone", "v1", "v3"]
        assert history.get_current_patch().title == "v3"

    @pytest.mark.unit
    def test_snapshots_are_copies(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        sample_patch.metadata.title = "Mutated"
        assert history.get_current_patch().title == "Dark Ambient Drone"

        history.get_history()[0].metadata.title = "Also mutated"
        assert history.get_current_patch().title == "Dark Ambient Drone"

    @pytest.mark.unit
    def test_clear(self, sample_patch):
        history = RefinementHistory(sample_patch, max_history=5)
        history.add_patch(_titled(sample_patch, "v1"))
        history.clear()

        assert len(history) == 0
        assert history.get_current_patch() is None
        assert history.undo() is None

        history.add_patch(_titled(sample_patch, "v2"))
        assert history.get_current_patch().title == "v2"
