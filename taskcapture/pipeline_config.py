"""Pipeline configuration: strategy enum and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskcapture.config import Settings


class ExtractionStrategy(str, Enum):
    """Pattern families that can propose a task candidate."""

    DIRECT_REQUEST = "direct_request"
    SCHEDULED_ITEM = "scheduled_item"
    SHOPPING_LIST = "shopping_list"
    APPOINTMENT = "appointment"
    REMINDER = "reminder"
    DEADLINE = "deadline"
    ACTION_ITEM = "action_item"
    HOUSEHOLD_TASK = "household_task"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable calibration constants for the extraction pipeline.

    Defaults mirror :class:`taskcapture.config.Settings` so the core can run
    without touching the environment.
    """

    category_normalizer: float = 3.0
    strong_keyword_weight: float = 2.0
    weak_keyword_weight: float = 1.0
    category_hint_confidence: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            category_normalizer=settings.category_normalizer,
            strong_keyword_weight=settings.strong_keyword_weight,
            weak_keyword_weight=settings.weak_keyword_weight,
            category_hint_confidence=settings.category_hint_confidence,
        )

    def __post_init__(self) -> None:
        if self.category_normalizer <= 0:
            msg = f"category_normalizer must be positive, got {self.category_normalizer}"
            raise ValueError(msg)
        if not 0.0 <= self.category_hint_confidence <= 1.0:
            msg = f"category_hint_confidence must be within [0, 1], got {self.category_hint_confidence}"
            raise ValueError(msg)
