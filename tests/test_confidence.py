"""Tests for the confidence aggregator."""

from __future__ import annotations

import pytest

from taskcapture.extraction.confidence import _clamp_score, aggregate, score_signals


class TestClampScore:
    def test_within_range(self) -> None:
        assert _clamp_score(0.5) == 0.5

    def test_below_zero(self) -> None:
        assert _clamp_score(-0.3) == 0.0

    def test_above_one(self) -> None:
        assert _clamp_score(1.7) == 1.0


class TestScoreSignals:
    def test_bonuses(self) -> None:
        signals = [a.signal for a in score_signals("Please call the bank ASAP")]
        assert signals == ["action_verb", "request_phrase", "strong_keyword", "urgency"]

    def test_time_reference_is_supplied_by_caller(self) -> None:
        assert [a.signal for a in score_signals("water", has_time_reference=True)] == [
            "action_verb",
            "time_reference",
        ]

    def test_instruction_pronoun(self) -> None:
        signals = [a.signal for a in score_signals("we need a plan")]
        assert "instruction_pronoun" in signals

    def test_question_without_action_verb(self) -> None:
        signals = [a.signal for a in score_signals("what about the weather?")]
        assert signals == ["question"]

    def test_question_with_action_verb_is_not_penalised(self) -> None:
        signals = [a.signal for a in score_signals("can you call the plumber?")]
        assert "question" not in signals


class TestAggregate:
    def test_action_verb_bonus(self) -> None:
        assert aggregate(0.5, "Buy milk") == pytest.approx(0.8)

    def test_clamped_to_one(self) -> None:
        assert aggregate(0.95, "remind me to call mom tonight", has_time_reference=True) == 1.0

    def test_clamped_to_zero(self) -> None:
        # generic and too short
        assert aggregate(0.5, "ok") == 0.0

    def test_generic_penalty(self) -> None:
        assert aggregate(0.9, "thanks") == pytest.approx(0.5)

    def test_question_penalty(self) -> None:
        assert aggregate(0.5, "what about the weather?") == pytest.approx(0.3)

    def test_long_span_penalty(self) -> None:
        assert aggregate(0.5, "Buy milk and bread and eggs and some butter too") == pytest.approx(0.7)

    def test_order_independent(self) -> None:
        text = "Please submit the report asap"
        assert aggregate(0.5, text) == aggregate(0.5, text)
        assert aggregate(0.5, text) == pytest.approx(
            min(1.0, 0.5 + sum(a.delta for a in score_signals(text)))
        )
