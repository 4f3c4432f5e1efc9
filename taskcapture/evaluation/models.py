"""Data models for the evaluation framework."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from taskcapture.extraction.models import Category, ConfidenceBand, ExtractedTask, Priority
from taskcapture.ingestion.models import Origin
from taskcapture.pipeline_config import ExtractionStrategy


@dataclass
class ExpectedTask:
    """A task a human labeller expects the engine to find."""

    title: str
    strategy: ExtractionStrategy | None = None
    category: Category | None = None
    priority: Priority | None = None
    has_date: bool = False
    has_time: bool = False


@dataclass
class LabeledExample:
    """One message of the labeled corpus."""

    example_id: str
    text: str
    reference_time: datetime
    origin: Origin = Origin.CHAT
    expected: list[ExpectedTask] = field(default_factory=list)


@dataclass
class TaskMatch:
    """A predicted task paired with the expected task it was judged to be."""

    expected: ExpectedTask
    predicted: ExtractedTask
    similarity: float

    @property
    def strategy_correct(self) -> bool | None:
        if self.expected.strategy is None:
            return None
        return self.predicted.strategy_used == self.expected.strategy

    @property
    def category_correct(self) -> bool | None:
        if self.expected.category is None:
            return None
        return self.predicted.suggested_category == self.expected.category

    @property
    def priority_correct(self) -> bool | None:
        if self.expected.priority is None:
            return None
        return self.predicted.priority == self.expected.priority

    @property
    def date_correct(self) -> bool:
        return (self.predicted.parsed_date is not None) == self.expected.has_date

    @property
    def time_correct(self) -> bool:
        return (self.predicted.parsed_time is not None) == self.expected.has_time


@dataclass
class ExampleResult:
    """Outcome of running the engine on one labeled example."""

    example: LabeledExample
    predicted: list[ExtractedTask]
    matches: list[TaskMatch] = field(default_factory=list)
    false_positives: list[ExtractedTask] = field(default_factory=list)
    missed: list[ExpectedTask] = field(default_factory=list)


@dataclass
class BandCalibration:
    """How often predictions in one confidence band were real tasks."""

    band: ConfidenceBand
    predictions: int = 0
    matched: int = 0

    @property
    def hit_rate(self) -> float:
        return self.matched / self.predictions if self.predictions else 0.0


@dataclass
class EvaluationSummary:
    """Aggregated metrics for one caller threshold."""

    threshold: float
    num_examples: int = 0
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0
    strategy_accuracy: float = 0.0
    category_accuracy: float = 0.0
    priority_accuracy: float = 0.0
    date_accuracy: float = 0.0
    time_accuracy: float = 0.0
    calibration: list[BandCalibration] = field(default_factory=list)
    individual_results: list[ExampleResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        """JSON-friendly view without the per-example detail."""
        return {
            "threshold": self.threshold,
            "num_examples": self.num_examples,
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "strategy_accuracy": self.strategy_accuracy,
            "category_accuracy": self.category_accuracy,
            "priority_accuracy": self.priority_accuracy,
            "date_accuracy": self.date_accuracy,
            "time_accuracy": self.time_accuracy,
            "calibration": [
                {
                    "band": c.band.value,
                    "predictions": c.predictions,
                    "matched": c.matched,
                    "hit_rate": round(c.hit_rate, 3),
                }
                for c in self.calibration
            ],
        }
