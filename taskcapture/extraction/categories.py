"""Category classifier: weighted keyword scoring over the fixed category set."""

from __future__ import annotations

import re

from taskcapture.extraction.lexicon import CATEGORY_KEYWORDS, phrase_pattern, unify_quotes
from taskcapture.extraction.models import Category
from taskcapture.pipeline_config import PipelineConfig

# One word-bounded pattern per keyword so each keyword scores at most once.
_KEYWORD_PATTERNS: dict[Category, list[tuple[str, re.Pattern[str], bool]]] = {
    category: [
        (keyword, phrase_pattern([keyword], plurals=True), keyword in keywords.strong)
        for keyword in sorted(keywords.all)
    ]
    for category, keywords in CATEGORY_KEYWORDS.items()
}


def score_categories(text: str, config: PipelineConfig | None = None) -> dict[Category, float]:
    """Raw weighted score per category (strong hits outweigh weak ones)."""
    config = config or PipelineConfig()
    text = unify_quotes(text)
    scores: dict[Category, float] = {}
    for category, patterns in _KEYWORD_PATTERNS.items():
        score = 0.0
        for _keyword, pattern, strong in patterns:
            if pattern.search(text):
                score += config.strong_keyword_weight if strong else config.weak_keyword_weight
        scores[category] = score
    return scores


def classify(text: str, config: PipelineConfig | None = None) -> tuple[Category | None, float]:
    """Pick the best-scoring category for *text*.

    Confidence is the winning score divided by the calibration normaliser,
    capped at 1.0. Ties go to the category listed first in :class:`Category`.
    Returns ``(None, 0.0)`` when no keyword is present.
    """
    config = config or PipelineConfig()
    scores = score_categories(text, config)

    best: Category | None = None
    best_score = 0.0
    for category in Category:
        if scores[category] > best_score:
            best, best_score = category, scores[category]

    if best is None:
        return None, 0.0
    return best, min(1.0, best_score / config.category_normalizer)
