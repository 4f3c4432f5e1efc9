"""Tests for the evaluation framework.

Tests cover title matching, per-example scoring, corpus-level metrics,
corpus I/O, threshold comparison, and report generation format.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

import pytest

from taskcapture.evaluation.compare_thresholds import (
    DEFAULT_THRESHOLDS,
    compare_thresholds,
    format_calibration_table,
    format_threshold_table,
)
from taskcapture.evaluation.corpus import load_corpus, parse_example, save_corpus
from taskcapture.evaluation.metrics import (
    evaluate_corpus,
    evaluate_example,
    match_tasks,
    summarize,
    title_similarity,
)
from taskcapture.evaluation.models import BandCalibration, EvaluationSummary, ExpectedTask, LabeledExample
from taskcapture.evaluation.runner import _build_arg_parser, generate_report, run_evaluation
from taskcapture.extraction.models import Category, ConfidenceBand, ExtractedTask, Priority
from taskcapture.ingestion.models import Origin, Span
from taskcapture.pipeline_config import ExtractionStrategy

REF = datetime(2026, 10, 19, 9, 0)
CORPUS_PATH = Path(__file__).resolve().parent.parent / "data" / "labeled_corpus.json"

# ── Helpers ──────────────────────────────────────────────────────────────────


def _make_example(**overrides) -> LabeledExample:
    """Create a LabeledExample with sensible defaults."""
    defaults = {
        "example_id": "ex-001",
        "text": "remind me to call mom tonight",
        "reference_time": REF,
        "expected": [
            ExpectedTask(
                title="Call mom",
                strategy=ExtractionStrategy.REMINDER,
                category=Category.FAMILY,
                has_date=True,
                has_time=True,
            )
        ],
    }
    defaults.update(overrides)
    return LabeledExample(**defaults)


def _make_task(title: str, confidence: float = 0.9) -> ExtractedTask:
    return ExtractedTask(
        title=title,
        source_span=Span.of(title, 0, len(title)),
        strategy_used=ExtractionStrategy.ACTION_ITEM,
        overall_confidence=confidence,
    )


# ── Test: Title similarity ───────────────────────────────────────────────────


class TestTitleSimilarity:
    def test_identical_ignoring_case(self) -> None:
        assert title_similarity("Buy milk", "buy milk") == 1.0

    def test_stopwords_ignored(self) -> None:
        assert title_similarity("Call the dentist", "Call dentist") == 1.0

    def test_partial_overlap(self) -> None:
        assert title_similarity("Submit tax documents", "Submit documents") == pytest.approx(2 / 3)

    def test_disjoint(self) -> None:
        assert title_similarity("Buy milk", "Call mom") == 0.0

    def test_empty(self) -> None:
        assert title_similarity("", "Buy milk") == 0.0


# ── Test: Matching ───────────────────────────────────────────────────────────


class TestMatchTasks:
    def test_one_to_one(self) -> None:
        expected = [ExpectedTask(title="Buy milk")]
        predicted = [_make_task("Buy milk"), _make_task("Buy milk now")]
        matches, false_positives, missed = match_tasks(expected, predicted)
        assert len(matches) == 1
        assert matches[0].predicted is predicted[0]
        assert false_positives == [predicted[1]]
        assert missed == []

    def test_below_threshold_is_not_a_match(self) -> None:
        expected = [ExpectedTask(title="Schedule follow-up meeting with the client")]
        predicted = [_make_task("Meeting")]
        matches, false_positives, missed = match_tasks(expected, predicted)
        assert matches == []
        assert len(false_positives) == 1
        assert len(missed) == 1

    def test_unlabeled_attributes_are_not_judged(self) -> None:
        matches, _fp, _missed = match_tasks([ExpectedTask(title="Buy milk")], [_make_task("Buy milk")])
        assert matches[0].strategy_correct is None
        assert matches[0].category_correct is None
        assert matches[0].priority_correct is None
        assert matches[0].date_correct is True


# ── Test: Per-example evaluation ─────────────────────────────────────────────


class TestEvaluateExample:
    def test_reminder_matches(self) -> None:
        result = evaluate_example(_make_example())
        assert len(result.matches) == 1
        match = result.matches[0]
        assert match.strategy_correct is True
        assert match.category_correct is True
        assert match.date_correct is True
        assert match.time_correct is True
        assert result.false_positives == []
        assert result.missed == []

    def test_negative_example(self) -> None:
        result = evaluate_example(_make_example(text="ok thanks", expected=[]))
        assert result.predicted == []
        assert result.matches == []

    def test_threshold_drops_predictions(self) -> None:
        example = _make_example(
            text="we should probably think about the budget at some point",
            expected=[ExpectedTask(title="Think about the budget", priority=Priority.LOW)],
        )
        assert len(evaluate_example(example, threshold=0.5).predicted) == 1
        strict = evaluate_example(example, threshold=0.9)
        assert strict.predicted == []
        assert strict.missed == example.expected


# ── Test: Summaries ──────────────────────────────────────────────────────────


class TestSummarize:
    def test_perfect_run(self) -> None:
        results = [
            evaluate_example(_make_example()),
            evaluate_example(_make_example(example_id="ex-002", text="ok thanks", expected=[])),
        ]
        summary = summarize(results, threshold=0.4)
        assert summary.num_examples == 2
        assert summary.true_positives == 1
        assert summary.false_positives == 0
        assert summary.false_negatives == 0
        assert summary.precision == 1.0
        assert summary.recall == 1.0
        assert summary.f1 == 1.0
        assert summary.strategy_accuracy == 1.0

    def test_missed_task_lowers_recall(self) -> None:
        results = [
            evaluate_example(_make_example()),
            evaluate_example(
                _make_example(example_id="ex-002", text="ok thanks", expected=[ExpectedTask(title="Paint the fence")])
            ),
        ]
        summary = summarize(results)
        assert summary.precision == 1.0
        assert summary.recall == 0.5
        assert summary.f1 == pytest.approx(0.667)

    def test_calibration_counts_matched_predictions(self) -> None:
        summary = summarize([evaluate_example(_make_example())])
        rows = {row.band: row for row in summary.calibration}
        assert set(rows) == set(ConfidenceBand)
        assert rows[ConfidenceBand.VERY_HIGH].predictions == 1
        assert rows[ConfidenceBand.VERY_HIGH].matched == 1
        assert rows[ConfidenceBand.VERY_HIGH].hit_rate == 1.0
        assert rows[ConfidenceBand.LOW].hit_rate == 0.0

    def test_empty(self) -> None:
        summary = summarize([])
        assert summary.precision == 0.0
        assert summary.recall == 0.0
        assert summary.f1 == 0.0

    def test_to_dict_is_json_serialisable(self) -> None:
        summary = evaluate_corpus([_make_example()])
        data = json.loads(json.dumps(summary.to_dict()))
        assert data["true_positives"] == 1
        assert "individual_results" not in data
        assert data["calibration"][0]["band"] == "very_high"


# ── Test: Corpus I/O ─────────────────────────────────────────────────────────


class TestCorpus:
    def test_bundled_corpus_loads(self) -> None:
        examples = load_corpus(str(CORPUS_PATH))
        assert len(examples) == 18
        assert any(not ex.expected for ex in examples)
        assert all(isinstance(ex.reference_time, datetime) for ex in examples)

    def test_round_trip(self, tmp_path: Path) -> None:
        path = str(tmp_path / "corpus.json")
        original = [_make_example(origin=Origin.VOICE)]
        save_corpus(original, path)
        assert load_corpus(path) == original

    def test_missing_field(self) -> None:
        with pytest.raises(ValueError, match="missing field 'text'"):
            parse_example({"example_id": "x", "reference_time": "2026-10-19T09:00:00"})

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError):
            parse_example(
                {
                    "example_id": "x",
                    "text": "buy milk",
                    "reference_time": "2026-10-19T09:00:00",
                    "expected": [{"title": "Buy milk", "strategy": "telepathy"}],
                }
            )

    def test_non_string_reference_time(self) -> None:
        with pytest.raises(ValueError, match="malformed"):
            parse_example({"example_id": "x", "text": "buy milk", "reference_time": 20261019})

    def test_non_object_expected_task(self) -> None:
        with pytest.raises(ValueError, match="malformed"):
            parse_example(
                {"example_id": "x", "text": "buy milk", "reference_time": "2026-10-19T09:00:00", "expected": ["milk"]}
            )

    def test_non_object_entry(self, tmp_path: Path) -> None:
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps(["buy milk"]), encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_corpus(str(path))

    def test_non_list_corpus(self, tmp_path: Path) -> None:
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"examples": []}), encoding="utf-8")
        with pytest.raises(ValueError, match="JSON array"):
            load_corpus(str(path))


# ── Test: Threshold comparison ───────────────────────────────────────────────


class TestCompareThresholds:
    def test_one_summary_per_threshold(self) -> None:
        summaries = compare_thresholds([_make_example()], [0.2, 0.99])
        assert [s.threshold for s in summaries] == [0.2, 0.99]

    def test_defaults(self) -> None:
        summaries = compare_thresholds([_make_example()])
        assert [s.threshold for s in summaries] == DEFAULT_THRESHOLDS

    def test_table_format(self) -> None:
        summaries = [
            EvaluationSummary(threshold=0.4, precision=0.9, recall=0.8, f1=0.847, true_positives=8),
        ]
        table = format_threshold_table(summaries)
        assert "| Threshold | Precision | Recall | F1 |" in table
        assert "| 0.40 | 0.900 | 0.800 | 0.847 | 8 |" in table

    def test_calibration_table_format(self) -> None:
        summary = EvaluationSummary(
            threshold=0.2,
            calibration=[BandCalibration(band=ConfidenceBand.HIGH, predictions=4, matched=3)],
        )
        assert "| high | 4 | 3 | 0.750 |" in format_calibration_table(summary)


# ── Test: Report and runner ──────────────────────────────────────────────────


class TestReport:
    def test_report_sections(self) -> None:
        examples = [_make_example()]
        report = generate_report(examples, compare_thresholds(examples, [0.2, 0.8]))
        assert "# Task Capture Evaluation Report" in report
        assert "## 1. Corpus Summary" in report
        assert "## 2. Threshold Comparison" in report
        assert "**Best threshold:**" in report
        assert "## 3. Confidence Calibration" in report
        assert "- reminder: 1" in report

    def test_report_without_summaries(self) -> None:
        report = generate_report([], [])
        assert "Best threshold" not in report

    def test_run_evaluation_writes_outputs(self, tmp_path: Path) -> None:
        corpus_path = str(tmp_path / "corpus.json")
        save_corpus([_make_example()], corpus_path)
        output_dir = str(tmp_path / "out")

        report_path = run_evaluation(corpus_path, output_dir, thresholds=[0.4, 0.8])

        assert report_path == os.path.join(output_dir, "evaluation_report.md")
        assert os.path.exists(report_path)
        with open(os.path.join(output_dir, "summary.json"), encoding="utf-8") as f:
            summary = json.load(f)
        assert [s["threshold"] for s in summary] == [0.4, 0.8]

    def test_cli_arguments(self) -> None:
        args = _build_arg_parser().parse_args(["--thresholds", "0.3", "0.5"])
        assert args.thresholds == [0.3, 0.5]
        assert args.corpus == "data/labeled_corpus.json"
        assert args.output == "reports/eval_results"
