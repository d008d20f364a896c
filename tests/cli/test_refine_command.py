"""Tests for the refine and intents CLI commands."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=ROOT,
        timeout=60,
    )


@pytest.fixture
def documents(tmp_path, sample_patch, sample_rack):
    """Write the sample patch and rack to JSON files."""
    patch_file = tmp_path / "patch.json"
    rack_file = tmp_path / "rack.json"
    patch_file.write_text(json.dumps(sample_patch.to_document()), encoding="utf-8")
    rack_file.write_text(json.dumps(sample_rack.to_document()), encoding="utf-8")
    return patch_file, rack_file


def test_refine_prints_result(documents):
    """refine should print the refinement result as JSON and exit 0."""
    patch_file, rack_file = documents
    result = _run("refine", "--patch", str(patch_file), "--rack", str(rack_file), "make it darker")

    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["success"] is True
    assert data["feedback"]["target"] == "filter_cutoff"


def test_refine_unsuccessful_exits_1(documents):
    """refine should exit 1 when the feedback needs clarification."""
    patch_file, rack_file = documents
    result = _run("refine", "--patch", str(patch_file), "--rack", str(rack_file), "make it better")

    assert result.returncode == 1
    assert json.loads(result.stdout)["needsClarification"] is True


def test_refine_missing_file(tmp_path, documents):
    """refine should report an unreadable patch file and exit 1."""
    _, rack_file = documents
    result = _run(
        "refine", "--patch", str(tmp_path / "missing.json"), "--rack", str(rack_file), "darker"
    )

    assert result.returncode == 1
    assert "Cannot read patch file" in result.stderr


def test_refine_requires_rack(documents):
    """refine should reject a call without --rack."""
    patch_file, _ = documents
    result = _run("refine", "--patch", str(patch_file), "darker")

    assert result.returncode != 0
    assert "--rack" in result.stderr


def test_intents_prints_flags():
    """intents should print the detected special intents."""
    result = _run("intents", "perfect,", "save", "it")

    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["save_intent"] is True
    assert data["undo_intent"] is False


def test_unknown_command():
    """Unknown commands should print help and exit 1."""
    result = _run("bogus")

    assert result.returncode == 1
    assert "Usage: python . {command}" in result.stdout
