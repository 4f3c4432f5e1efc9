"""Threshold comparison: evaluate the corpus at several caller thresholds.

The engine reports every candidate with a confidence; callers pick the cut.
This module shows what each cut costs in recall and buys in precision.
"""

from __future__ import annotations

from taskcapture.evaluation.metrics import evaluate_corpus
from taskcapture.evaluation.models import EvaluationSummary, LabeledExample
from taskcapture.pipeline_config import PipelineConfig

DEFAULT_THRESHOLDS: list[float] = [0.2, 0.4, 0.6, 0.8]


def compare_thresholds(
    examples: list[LabeledExample],
    thresholds: list[float] | None = None,
    config: PipelineConfig | None = None,
) -> list[EvaluationSummary]:
    """Run the evaluation once per threshold.

    Args:
        examples: Labeled corpus.
        thresholds: Caller thresholds to try. Defaults to DEFAULT_THRESHOLDS.
        config: Calibration constants under test.

    Returns:
        One EvaluationSummary per threshold, in the order given.
    """
    return [evaluate_corpus(examples, t, config) for t in (thresholds or DEFAULT_THRESHOLDS)]


def format_threshold_table(summaries: list[EvaluationSummary]) -> str:
    """Format summaries as a markdown comparison table."""
    lines = [
        "| Threshold | Precision | Recall | F1 | TP | FP | FN |",
        "|-----------|-----------|--------|----|----|----|----|",
    ]
    for s in summaries:
        lines.append(
            f"| {s.threshold:.2f} | {s.precision:.3f} | {s.recall:.3f} | {s.f1:.3f} "
            f"| {s.true_positives} | {s.false_positives} | {s.false_negatives} |"
        )
    return "\n".join(lines)


def format_calibration_table(summary: EvaluationSummary) -> str:
    """Format the per-band calibration of one summary as markdown."""
    lines = [
        "| Band | Predictions | Matched | Hit rate |",
        "|------|-------------|---------|----------|",
    ]
    for row in summary.calibration:
        lines.append(f"| {row.band.value} | {row.predictions} | {row.matched} | {row.hit_rate:.3f} |")
    return "\n".join(lines)
