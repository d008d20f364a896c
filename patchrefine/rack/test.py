"""Tests for rack category lookup and the impossibility check."""

import pytest

from patchrefine.feedback import parse_feedback
from patchrefine.rack import (
    CATEGORIES,
    find_category_modules,
    get_category,
    is_impossible_request,
    resolve_target,
)


class TestResolveTarget:
    """Tests for target slug resolution."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "slug,category,parameter",
        [
            ("filter_cutoff", "filter", "cutoff"),
            ("filter", "filter", "cutoff"),
            ("cutoff", "filter", "cutoff"),
            ("reverb", "reverb", "send"),
            ("reverb_decay", "reverb", "decay"),
            ("delay", "delay", "feedback"),
            ("volume", "volume", "level"),
            ("tempo", "tempo", "rate"),
            ("drive", "distortion", "drive"),
        ],
    )
    def test_known_targets(self, slug, category, parameter):
        resolved, resolved_parameter = resolve_target(slug)
        assert resolved.name == category
        assert resolved_parameter == parameter

    @pytest.mark.unit
    def test_unknown_target(self):
        assert resolve_target("general") == (None, None)
        assert resolve_target("") == (None, None)

    @pytest.mark.unit
    def test_categories_are_immutable(self):
        with pytest.raises(AttributeError):
            CATEGORIES[0].name = "other"
        assert get_category("missing") is None


class TestFindCategoryModules:
    """Tests for keyword matching against rack modules."""

    @pytest.mark.unit
    def test_match_by_type(self, sample_rack):
        filters = find_category_modules(sample_rack, get_category("filter"))
        assert [m.id for m in filters] == ["filter-1"]

    @pytest.mark.unit
    def test_effect_type_counts_as_reverb(self, sample_rack):
        reverbs = find_category_modules(sample_rack, get_category("reverb"))
        assert [m.name for m in reverbs] == ["Clouds"]

    @pytest.mark.unit
    def test_no_match(self, bare_rack):
        assert find_category_modules(bare_rack, get_category("reverb")) == []


class TestImpossibleRequest:
    """Tests for is_impossible_request."""

    @pytest.mark.unit
    def test_add_missing_reverb(self, bare_rack):
        result = is_impossible_request(parse_feedback("add reverb"), bare_rack)
        assert result.impossible is True
        assert "reverb" in result.reason

    @pytest.mark.unit
    def test_adjust_missing_category(self, bare_rack):
        result = is_impossible_request(parse_feedback("louder"), bare_rack)
        assert result.impossible is True
        assert "volume" in result.reason

    @pytest.mark.unit
    def test_available_module(self, sample_rack):
        result = is_impossible_request(parse_feedback("add reverb"), sample_rack)
        assert result.impossible is False
        assert result.reason is None

    @pytest.mark.unit
    def test_remove_never_impossible(self, bare_rack):
        result = is_impossible_request(parse_feedback("remove reverb"), bare_rack)
        assert result.impossible is False

    @pytest.mark.unit
    def test_general_target_possible(self, bare_rack):
        result = is_impossible_request(parse_feedback("hmm"), bare_rack)
        assert result.impossible is False
