"""Integration tests for a full refinement conversation.

Walks one patch through a chat session:
1. Refine twice -> both changes applied, document stays valid
2. Undo -> last change reverted
3. Save -> named copy returned for the caller to persist
"""

import pytest

from patchrefine.session import RefinementSession, TurnKind
from patchrefine.validation import validate_patch


@pytest.mark.integration
def test_conversation_workflow(sample_patch, sample_rack):
    session = RefinementSession(sample_patch, sample_rack, max_history=5)

    darker = session.handle_message("make it darker")
    assert darker.kind == TurnKind.REFINE
    assert darker.refinement.success is True

    reverb = session.handle_message("add reverb")
    assert reverb.refinement.success is True
    assert validate_patch(session.current_patch) == []
    assert len(session.modifications) == 2

    undone = session.handle_message("undo that")
    assert undone.kind == TurnKind.UNDO
    assert session.current_patch.get_connection("reverb-reverb-1-1") is None
    assert session.current_patch.get_suggestion("filter-1", "cutoff").value == "3.5kHz"

    saved = session.handle_message("perfect, save it")
    assert saved.kind == TurnKind.SAVE
    assert saved.patch.saved is True
    assert saved.patch.title == saved.save.patch_name
    assert validate_patch(saved.patch) == []


@pytest.mark.integration
def test_history_is_bounded(sample_patch, sample_rack):
    session = RefinementSession(sample_patch, sample_rack, max_history=3)

    for _ in range(5):
        assert session.handle_message("make it darker").refinement.success is True

    assert len(session.history) == 3
    assert session.handle_message("undo").kind == TurnKind.UNDO
    assert session.handle_message("undo").kind == TurnKind.UNDO
    assert "nothing to undo" in session.handle_message("undo").message


@pytest.mark.integration
def test_impossible_request_leaves_patch(sample_patch, bare_rack):
    session = RefinementSession(sample_patch, bare_rack, max_history=5)

    turn = session.handle_message("add reverb")

    assert turn.refinement.impossible_request is True
    assert turn.patch.title == "Dark Ambient Drone"
    assert session.modifications == []
    assert session.history.can_undo() is False
