"""Confidence aggregator: adjust a strategy's base confidence by text signals.

Adjustments are additive and the total is clamped to [0, 1]. The
per-signal weights are fixed; only the base confidence varies by strategy.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskcapture.extraction import lexicon

ACTION_VERB_BONUS = 0.30
TIME_REFERENCE_BONUS = 0.20
REQUEST_PHRASE_BONUS = 0.25
STRONG_KEYWORD_BONUS = 0.15
URGENCY_BONUS = 0.10
INSTRUCTION_PRONOUN_BONUS = 0.05

GENERIC_PHRASE_PENALTY = -0.40
TOO_SHORT_PENALTY = -0.30
QUESTION_PENALTY = -0.20
TOO_LONG_PENALTY = -0.10

MIN_SPAN_CHARS = 3
MAX_SPAN_WORDS = 8


@dataclass(frozen=True)
class Adjustment:
    """One signal that moved the score, and by how much."""

    signal: str
    delta: float


def _clamp_score(score: float) -> float:
    """Clamp a score to [0.0, 1.0]."""
    return max(0.0, min(1.0, float(score)))


def score_signals(text: str, *, has_time_reference: bool = False) -> list[Adjustment]:
    """List every adjustment that applies to *text*, bonuses first."""
    action_verb = lexicon.has_action_verb(text)
    adjustments: list[Adjustment] = []

    if action_verb:
        adjustments.append(Adjustment("action_verb", ACTION_VERB_BONUS))
    if has_time_reference:
        adjustments.append(Adjustment("time_reference", TIME_REFERENCE_BONUS))
    if lexicon.find_request_phrase(text) is not None:
        adjustments.append(Adjustment("request_phrase", REQUEST_PHRASE_BONUS))
    if lexicon.find_strong_category_keywords(text):
        adjustments.append(Adjustment("strong_keyword", STRONG_KEYWORD_BONUS))
    if lexicon.find_urgency_words(text):
        adjustments.append(Adjustment("urgency", URGENCY_BONUS))
    if lexicon.has_instruction_pronoun(text):
        adjustments.append(Adjustment("instruction_pronoun", INSTRUCTION_PRONOUN_BONUS))

    if lexicon.is_generic_phrase(text):
        adjustments.append(Adjustment("generic_phrase", GENERIC_PHRASE_PENALTY))
    if len(text.strip()) < MIN_SPAN_CHARS:
        adjustments.append(Adjustment("too_short", TOO_SHORT_PENALTY))
    if lexicon.has_question_indicator(text) and not action_verb:
        adjustments.append(Adjustment("question", QUESTION_PENALTY))
    if len(text.split()) > MAX_SPAN_WORDS:
        adjustments.append(Adjustment("too_long", TOO_LONG_PENALTY))

    return adjustments


def aggregate(base_confidence: float, text: str, *, has_time_reference: bool = False) -> float:
    """Final confidence for a candidate: base plus signal adjustments, clamped."""
    total = base_confidence + sum(a.delta for a in score_signals(text, has_time_reference=has_time_reference))
    return round(_clamp_score(total), 4)
