"""Data models for structured extraction results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, time
from enum import StrEnum

from taskcapture.ingestion.models import Span
from taskcapture.pipeline_config import ExtractionStrategy


class InvalidInputError(ValueError):
    """Raised when the pipeline is handed something that is not raw text."""


class Priority(StrEnum):
    """Urgency tier of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Category(StrEnum):
    """Fixed category set used for classification."""

    HOUSEHOLD = "household"
    HEALTH = "health"
    WORK = "work"
    FAMILY = "family"
    FINANCE = "finance"
    PERSONAL = "personal"


class ConfidenceBand(StrEnum):
    """Descriptive label for an overall confidence score."""

    VERY_HIGH = "very_high"  # explicit, clear task
    HIGH = "high"  # likely task
    MEDIUM = "medium"  # possible task
    LOW = "low"  # unlikely
    VERY_LOW = "very_low"  # almost certainly not


def confidence_band(score: float) -> ConfidenceBand:
    """Map a score in [0, 1] to its descriptive band."""
    if score >= 0.8:
        return ConfidenceBand.VERY_HIGH
    if score >= 0.6:
        return ConfidenceBand.HIGH
    if score >= 0.4:
        return ConfidenceBand.MEDIUM
    if score >= 0.2:
        return ConfidenceBand.LOW
    return ConfidenceBand.VERY_LOW


@dataclass(frozen=True)
class Candidate:
    """A proposal from one strategy matcher, before enrichment.

    ``priority_hint`` and ``category_hint`` carry what the matcher knows from
    its own phrasing (e.g. "no rush" or a chore vocabulary); the pipeline only
    falls back to them when the dedicated inferencers stay neutral.
    """

    strategy: ExtractionStrategy
    title: str
    span: Span
    base_confidence: float
    description: str | None = None
    priority_hint: Priority | None = None
    category_hint: Category | None = None


@dataclass(frozen=True)
class ExtractedTask:
    """A single task proposed by the engine, awaiting user review."""

    title: str
    source_span: Span
    strategy_used: ExtractionStrategy
    overall_confidence: float
    description: str | None = None
    parsed_date: date | None = None
    parsed_time: time | None = None
    date_confidence: float = 0.0
    suggested_category: Category | None = None
    category_confidence: float = 0.0
    priority: Priority = Priority.MEDIUM
    keywords: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.title.strip():
            msg = "ExtractedTask.title must not be empty"
            raise ValueError(msg)
        for name in ("overall_confidence", "date_confidence", "category_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                msg = f"ExtractedTask.{name} must be within [0, 1], got {value}"
                raise ValueError(msg)

    @property
    def confidence_band(self) -> ConfidenceBand:
        return confidence_band(self.overall_confidence)


@dataclass(frozen=True)
class ExtractionResult:
    """Ordered tasks from one call to ``extract``, highest confidence first."""

    tasks: tuple[ExtractedTask, ...] = ()

    def __iter__(self) -> Iterator[ExtractedTask]:
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def __getitem__(self, index: int) -> ExtractedTask:
        return self.tasks[index]

    def above(self, threshold: float) -> ExtractionResult:
        """Keep only tasks whose confidence meets the caller's threshold."""
        return ExtractionResult(tuple(t for t in self.tasks if t.overall_confidence >= threshold))
