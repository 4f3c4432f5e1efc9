"""Corpus metrics: match predictions to labels and score the engine.

A prediction counts as a hit when its title shares enough words with an
expected title. Pairs are assigned greedily, most similar first, so each
expected task is matched at most once.
"""

from __future__ import annotations

import re

from taskcapture.evaluation.models import (
    BandCalibration,
    EvaluationSummary,
    ExampleResult,
    ExpectedTask,
    LabeledExample,
    TaskMatch,
)
from taskcapture.extraction.extractor import extract
from taskcapture.extraction.models import ConfidenceBand, ExtractedTask
from taskcapture.ingestion.models import RawInput
from taskcapture.pipeline_config import PipelineConfig

MATCH_THRESHOLD = 0.5

_WORD_RE = re.compile(r"[a-z0-9']+")
_STOPWORDS = frozenset({"the", "a", "an", "to", "for", "of", "my", "your", "our", "and"})


def _words(title: str) -> set[str]:
    return {w for w in _WORD_RE.findall(title.lower()) if w not in _STOPWORDS}


def title_similarity(a: str, b: str) -> float:
    """Shared words over the larger word set (0.0 when either is empty)."""
    words_a, words_b = _words(a), _words(b)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def match_tasks(
    expected: list[ExpectedTask], predicted: list[ExtractedTask]
) -> tuple[list[TaskMatch], list[ExtractedTask], list[ExpectedTask]]:
    """Pair predictions with expectations.

    Returns:
        Tuple of (matches, unmatched predictions, unmatched expectations).
    """
    pairs = [
        (title_similarity(e.title, p.title), ei, pi)
        for ei, e in enumerate(expected)
        for pi, p in enumerate(predicted)
    ]
    pairs = [pair for pair in pairs if pair[0] >= MATCH_THRESHOLD]
    pairs.sort(key=lambda pair: (-pair[0], pair[1], pair[2]))

    used_expected: set[int] = set()
    used_predicted: set[int] = set()
    matches: list[TaskMatch] = []
    for similarity, ei, pi in pairs:
        if ei in used_expected or pi in used_predicted:
            continue
        used_expected.add(ei)
        used_predicted.add(pi)
        matches.append(TaskMatch(expected=expected[ei], predicted=predicted[pi], similarity=similarity))

    false_positives = [p for pi, p in enumerate(predicted) if pi not in used_predicted]
    missed = [e for ei, e in enumerate(expected) if ei not in used_expected]
    return matches, false_positives, missed


def evaluate_example(
    example: LabeledExample,
    threshold: float = 0.0,
    config: PipelineConfig | None = None,
) -> ExampleResult:
    """Run the engine on one example and compare with its labels."""
    raw_input = RawInput(text=example.text, origin=example.origin, received_at=example.reference_time)
    predicted = list(extract(raw_input, config=config).above(threshold))
    matches, false_positives, missed = match_tasks(example.expected, predicted)
    return ExampleResult(
        example=example,
        predicted=predicted,
        matches=matches,
        false_positives=false_positives,
        missed=missed,
    )


def _ratio(numerator: int, denominator: int) -> float:
    return round(numerator / denominator, 3) if denominator else 0.0


def _accuracy(flags: list[bool | None]) -> float:
    judged = [f for f in flags if f is not None]
    return _ratio(sum(judged), len(judged))


def calibration_table(results: list[ExampleResult]) -> list[BandCalibration]:
    """Per-band prediction counts and how many of them were real tasks."""
    rows = {band: BandCalibration(band=band) for band in ConfidenceBand}
    for result in results:
        matched_ids = {id(m.predicted) for m in result.matches}
        for task in result.predicted:
            row = rows[task.confidence_band]
            row.predictions += 1
            if id(task) in matched_ids:
                row.matched += 1
    return list(rows.values())


def summarize(results: list[ExampleResult], threshold: float = 0.0) -> EvaluationSummary:
    """Aggregate per-example outcomes into corpus-level metrics."""
    matches = [m for r in results for m in r.matches]
    tp = len(matches)
    fp = sum(len(r.false_positives) for r in results)
    fn = sum(len(r.missed) for r in results)

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    f1 = round(2 * precision * recall / (precision + recall), 3) if precision + recall else 0.0

    return EvaluationSummary(
        threshold=threshold,
        num_examples=len(results),
        true_positives=tp,
        false_positives=fp,
        false_negatives=fn,
        precision=precision,
        recall=recall,
        f1=f1,
        strategy_accuracy=_accuracy([m.strategy_correct for m in matches]),
        category_accuracy=_accuracy([m.category_correct for m in matches]),
        priority_accuracy=_accuracy([m.priority_correct for m in matches]),
        date_accuracy=_accuracy([m.date_correct for m in matches]),
        time_accuracy=_accuracy([m.time_correct for m in matches]),
        calibration=calibration_table(results),
        individual_results=results,
    )


def evaluate_corpus(
    examples: list[LabeledExample],
    threshold: float = 0.0,
    config: PipelineConfig | None = None,
) -> EvaluationSummary:
    """Evaluate every example at one caller threshold."""
    results = [evaluate_example(ex, threshold, config) for ex in examples]
    return summarize(results, threshold)
