"""Evaluation runner: score the extraction engine against a labeled corpus.

Loads the corpus, evaluates it at every requested caller threshold, and
writes a JSON summary plus a markdown report.

Entry point
-----------
Run as a module::

    python -m taskcapture.evaluation.runner \\
        --corpus data/labeled_corpus.json \\
        --output reports/eval_results \\
        --thresholds 0.2 0.4 0.6 0.8

Use ``--help`` for full argument documentation.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import UTC, datetime

from taskcapture.evaluation.compare_thresholds import (
    DEFAULT_THRESHOLDS,
    compare_thresholds,
    format_calibration_table,
    format_threshold_table,
)
from taskcapture.evaluation.corpus import load_corpus
from taskcapture.evaluation.models import EvaluationSummary, LabeledExample
from taskcapture.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)


def _format_corpus_summary(examples: list[LabeledExample]) -> str:
    """Format a summary of the corpus composition."""
    by_strategy: dict[str, int] = {}
    negatives = 0
    for ex in examples:
        if not ex.expected:
            negatives += 1
        for task in ex.expected:
            key = task.strategy.value if task.strategy else "unlabeled"
            by_strategy[key] = by_strategy.get(key, 0) + 1

    lines = [
        f"**Total examples:** {len(examples)}",
        f"**Expected tasks:** {sum(len(ex.expected) for ex in examples)}",
        f"**Examples with no task:** {negatives}\n",
        "**By strategy:**\n",
    ]
    for strategy, count in sorted(by_strategy.items()):
        lines.append(f"- {strategy}: {count}")
    return "\n".join(lines)


def _format_attribute_accuracy(summary: EvaluationSummary) -> str:
    """Format per-attribute accuracy over matched tasks."""
    return "\n".join(
        [
            "| Attribute | Accuracy |",
            "|-----------|----------|",
            f"| Strategy | {summary.strategy_accuracy:.3f} |",
            f"| Category | {summary.category_accuracy:.3f} |",
            f"| Priority | {summary.priority_accuracy:.3f} |",
            f"| Date found | {summary.date_accuracy:.3f} |",
            f"| Time found | {summary.time_accuracy:.3f} |",
        ]
    )


def _format_misses(summary: EvaluationSummary, limit: int = 10) -> str:
    """List missed expectations and false positives, capped at *limit* each."""
    missed = [(r.example.example_id, e.title) for r in summary.individual_results for e in r.missed]
    spurious = [
        (r.example.example_id, t.title, t.overall_confidence)
        for r in summary.individual_results
        for t in r.false_positives
    ]
    lines = ["**Missed:**\n"]
    lines.extend(f"- `{eid}`: {title}" for eid, title in missed[:limit])
    if not missed:
        lines.append("- none")
    lines.append("\n**False positives:**\n")
    lines.extend(f"- `{eid}`: {title} ({conf:.2f})" for eid, title, conf in spurious[:limit])
    if not spurious:
        lines.append("- none")
    return "\n".join(lines)


def generate_report(examples: list[LabeledExample], summaries: list[EvaluationSummary]) -> str:
    """Generate a full markdown evaluation report.

    Args:
        examples: The labeled corpus used for evaluation.
        summaries: One summary per caller threshold.

    Returns:
        Markdown-formatted report string.
    """
    now = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")

    sections = [
        f"# Task Capture Evaluation Report\n\n_Generated: {now}_\n",
        "## 1. Corpus Summary\n",
        _format_corpus_summary(examples),
        "\n## 2. Threshold Comparison\n",
        format_threshold_table(summaries),
    ]

    if summaries:
        best = max(summaries, key=lambda s: (s.f1, -s.threshold))
        sections.append(f"\n**Best threshold:** {best.threshold:.2f} (F1: {best.f1:.3f})\n")
        # The lowest cut covers the most predictions.
        lowest = min(summaries, key=lambda s: s.threshold)
        sections.append(f"\n## 3. Confidence Calibration (threshold {lowest.threshold:.2f})\n")
        sections.append(format_calibration_table(lowest))
        sections.append("\n## 4. Attribute Accuracy\n")
        sections.append(_format_attribute_accuracy(lowest))
        sections.append(f"\n## 5. Errors at threshold {best.threshold:.2f}\n")
        sections.append(_format_misses(best))

    sections.append("\n---\n_Report generated by Task Capture Evaluation Framework_\n")

    return "\n".join(sections)


def run_evaluation(
    corpus_path: str,
    output_dir: str = "reports/eval_results",
    thresholds: list[float] | None = None,
    config: PipelineConfig | None = None,
) -> str:
    """Run the complete evaluation.

    Args:
        corpus_path: Path to the labeled corpus JSON.
        output_dir: Directory to write results.
        thresholds: Caller thresholds to compare. Defaults to DEFAULT_THRESHOLDS.
        config: Calibration constants under test.

    Returns:
        Path to the generated markdown report.
    """
    os.makedirs(output_dir, exist_ok=True)

    examples = load_corpus(corpus_path)
    logger.info("Loaded %d examples from %s", len(examples), corpus_path)

    summaries = compare_thresholds(examples, thresholds or DEFAULT_THRESHOLDS, config)

    with open(os.path.join(output_dir, "summary.json"), "w", encoding="utf-8") as f:
        json.dump([s.to_dict() for s in summaries], f, indent=2)

    report = generate_report(examples, summaries)
    report_path = os.path.join(output_dir, "evaluation_report.md")
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(report)

    return report_path


# ── CLI entry point ────────────────────────────────────────────────────────


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser for the evaluation runner."""
    parser = argparse.ArgumentParser(
        prog="python -m taskcapture.evaluation.runner",
        description=(
            "Task Capture Evaluation Runner\n\n"
            "Runs the extraction engine over a labeled corpus, compares caller\n"
            "thresholds, checks how well confidence bands track real tasks, and\n"
            "writes summary.json plus a markdown report."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--corpus",
        default="data/labeled_corpus.json",
        metavar="PATH",
        help="Labeled corpus JSON file (default: data/labeled_corpus.json).",
    )
    parser.add_argument(
        "--output",
        default="reports/eval_results",
        metavar="OUTPUT_DIR",
        help=(
            "Directory where results are written (default: reports/eval_results). "
            "Created if it does not exist. Produces: summary.json, evaluation_report.md."
        ),
    )
    parser.add_argument(
        "--thresholds",
        nargs="+",
        type=float,
        metavar="T",
        default=None,
        help="Caller thresholds in [0, 1] to compare. Defaults to 0.2 0.4 0.6 0.8.",
    )

    return parser


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)

    parser = _build_arg_parser()
    args = parser.parse_args()

    if args.thresholds and any(not 0.0 <= t <= 1.0 for t in args.thresholds):
        parser.error("--thresholds values must be within [0, 1].")

    print(f"Running evaluation on {args.corpus!r}, output dir: {args.output!r}")

    try:
        report_path = run_evaluation(
            corpus_path=args.corpus,
            output_dir=args.output,
            thresholds=args.thresholds,
        )
    except (OSError, ValueError) as exc:
        print(f"ERROR: Could not run evaluation: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"\nEvaluation complete. Report: {report_path}")
    sys.exit(0)
