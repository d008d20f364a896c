"""Tests for feedback module."""

import pytest

from patchrefine.feedback import (
    CLARIFICATION_THRESHOLD,
    Direction,
    FeedbackAction,
    FeedbackParser,
    ParsedFeedback,
    Specificity,
    generate_clarification_question,
    needs_clarification,
    parse_feedback,
)
from patchrefine.feedback.lib import normalize_value, target_slug


class TestFeedbackParser:
    """Tests for FeedbackParser class."""

    @pytest.fixture
    def parser(self):
        return FeedbackParser()

    @pytest.mark.unit
    def test_rule_order(self, parser):
        """Rules are tried in a fixed, inspectable order."""
        names = [name for name, _ in parser.RULES]
        assert names == [
            "mood",
            "add_remove",
            "quantified",
            "relative",
            "vague",
            "fallback",
        ]

    @pytest.mark.unit
    def test_parse_darker(self, parser, sample_patch, sample_rack):
        feedback = parser.parse("make it darker", sample_patch, sample_rack)
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "filter_cutoff"
        assert feedback.direction == Direction.DECREASE
        assert feedback.specificity == Specificity.VAGUE
        assert feedback.confidence > 0.7

    @pytest.mark.unit
    def test_parse_brighter(self, parser):
        feedback = parser.parse("Brighter please!")
        assert feedback.target == "filter_cutoff"
        assert feedback.direction == Direction.INCREASE

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text,target,direction",
        [
            ("louder", "volume", Direction.INCREASE),
            ("a bit quieter", "volume", Direction.DECREASE),
            ("can it go faster", "tempo", Direction.INCREASE),
            ("slower", "tempo", Direction.DECREASE),
        ],
    )
    def test_parse_mood_words(self, parser, text, target, direction):
        feedback = parser.parse(text)
        assert feedback.target == target
        assert feedback.direction == direction

    @pytest.mark.unit
    def test_parse_add(self, parser):
        feedback = parser.parse("add reverb")
        assert feedback.intent == FeedbackAction.ADD
        assert feedback.target == "reverb"
        assert feedback.confidence == 0.9

    @pytest.mark.unit
    def test_parse_remove(self, parser):
        feedback = parser.parse("Please get rid of the delay")
        assert feedback.intent == FeedbackAction.REMOVE
        assert feedback.target == "delay"

    @pytest.mark.unit
    def test_parse_add_alias(self, parser):
        """Aliases resolve to their category name."""
        feedback = parser.parse("add some echo")
        assert feedback.target == "delay"

    @pytest.mark.unit
    def test_parse_specific_value(self, parser):
        feedback = parser.parse("set reverb decay to 5 seconds")
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "reverb_decay"
        assert feedback.value == "5s"
        assert feedback.specificity == Specificity.SPECIFIC
        assert feedback.confidence == 0.95

    @pytest.mark.unit
    def test_parse_specific_cutoff(self, parser):
        feedback = parser.parse("set the cutoff to 2 khz")
        assert feedback.target == "filter_cutoff"
        assert feedback.value == "2kHz"

    @pytest.mark.unit
    def test_parse_specific_direction(self, parser):
        feedback = parser.parse("increase the volume to 80%")
        assert feedback.target == "volume"
        assert feedback.value == "80%"
        assert feedback.direction == Direction.INCREASE

    @pytest.mark.unit
    def test_parse_bare_bpm(self, parser):
        feedback = parser.parse("make it 120 BPM")
        assert feedback.target == "tempo"
        assert feedback.value == "120BPM"

    @pytest.mark.unit
    def test_parse_relative(self, parser):
        feedback = parser.parse("more reverb")
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "reverb"
        assert feedback.direction == Direction.INCREASE
        assert feedback.confidence == 0.8

    @pytest.mark.unit
    def test_parse_relative_parameter(self, parser):
        feedback = parser.parse("less resonance")
        assert feedback.target == "filter_resonance"
        assert feedback.direction == Direction.DECREASE

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text,target",
        [
            ("drop the volume", "volume"),
            ("drop the volume a bit", "volume"),
            ("drop the cutoff", "filter_cutoff"),
            ("kill the resonance", "filter_resonance"),
        ],
    )
    def test_drop_and_kill_lower_parameters(self, parser, text, target):
        """Lowering verbs on parameters adjust them instead of removing modules."""
        feedback = parser.parse(text)
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == target
        assert feedback.direction == Direction.DECREASE

    @pytest.mark.unit
    def test_drop_tempo_to_value(self, parser):
        feedback = parser.parse("drop the tempo to 90 bpm")
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "tempo"
        assert feedback.value == "90BPM"
        assert feedback.direction == Direction.DECREASE

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["remove the volume", "delete the cutoff", "add tempo"])
    def test_add_remove_only_names_effects(self, parser, text):
        assert parser.parse(text).intent not in (FeedbackAction.ADD, FeedbackAction.REMOVE)

    @pytest.mark.unit
    def test_pronoun_is_not_a_target(self, parser):
        """A pronoun before the value is not read as a parameter name."""
        feedback = parser.parse("turn it up to 11")
        assert feedback.target == "general"
        assert needs_clarification(feedback)

    @pytest.mark.unit
    def test_parse_vague(self, parser):
        feedback = parser.parse("make it better")
        assert feedback.intent == FeedbackAction.CLARIFY
        assert feedback.target == "general"
        assert feedback.confidence < CLARIFICATION_THRESHOLD

    @pytest.mark.unit
    def test_fallback(self, parser):
        """Unrecognized text falls back to a low-confidence adjustment."""
        feedback = parser.parse("hmm, interesting")
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "general"
        assert feedback.confidence == 0.3

    @pytest.mark.unit
    def test_empty_input(self, parser):
        feedback = parser.parse("")
        assert feedback.target == "general"
        assert feedback.confidence == 0.3

    @pytest.mark.unit
    def test_deterministic(self):
        assert parse_feedback("add delay") == parse_feedback("add delay")


class TestHelpers:
    """Tests for slug and unit normalization."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "number,unit,expected",
        [
            ("5", "seconds", "5s"),
            ("250", "ms", "250ms"),
            ("440", "hz", "440Hz"),
            ("2", "k", "2kHz"),
            ("80", "percent", "80%"),
            ("120", "bpm", "120BPM"),
            ("5", "v", "5V"),
            ("3", None, "3"),
        ],
    )
    def test_normalize_value(self, number, unit, expected):
        assert normalize_value(number, unit) == expected

    @pytest.mark.unit
    def test_target_slug(self):
        assert target_slug("reverb decay") == "reverb_decay"
        assert target_slug("resonance") == "filter_resonance"
        assert target_slug("it") == "general"

    @pytest.mark.unit
    def test_to_dict(self):
        data = parse_feedback("darker").to_dict()
        assert data["intent"] == "adjust"
        assert data["direction"] == "decrease"
        assert data["specificity"] == "vague"


class TestClarification:
    """Tests for the clarification gate and questions."""

    @pytest.mark.unit
    def test_clarify_intent_needs_clarification(self):
        assert needs_clarification(parse_feedback("make it better"))

    @pytest.mark.unit
    def test_low_confidence_needs_clarification(self):
        feedback = ParsedFeedback(
            intent=FeedbackAction.ADJUST,
            target="filter_cutoff",
            specificity=Specificity.VAGUE,
            confidence=0.4,
            reasoning="test",
        )
        assert needs_clarification(feedback)

    @pytest.mark.unit
    def test_confident_feedback_passes(self):
        assert not needs_clarification(parse_feedback("darker"))

    @pytest.mark.unit
    def test_unknown_target_needs_clarification(self):
        feedback = parse_feedback("increase decay to 5 seconds")
        assert feedback.intent == FeedbackAction.ADJUST
        assert feedback.target == "decay"
        assert needs_clarification(feedback)

    @pytest.mark.unit
    def test_removal_passes(self):
        """Removals are never sent back for clarification."""
        assert not needs_clarification(parse_feedback("remove reverb"))

    @pytest.mark.unit
    def test_question_for_better(self):
        question = generate_clarification_question("make it better")
        assert "darker" in question
        assert "more reverb" in question

    @pytest.mark.unit
    def test_question_for_fix(self):
        question = generate_clarification_question("fix it")
        assert "too bright" in question

    @pytest.mark.unit
    def test_question_for_change(self):
        question = generate_clarification_question("something different")
        assert "add delay" in question

    @pytest.mark.unit
    def test_generic_question(self):
        question = generate_clarification_question("hmm")
        assert "Could you tell me more" in question
        assert "darker/brighter" in question
