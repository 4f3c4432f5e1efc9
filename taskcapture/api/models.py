"""Pydantic request/response schemas for the task capture API."""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from taskcapture.extraction.models import Category, ConfidenceBand, Priority
from taskcapture.ingestion.models import Origin
from taskcapture.pipeline_config import ExtractionStrategy


class ExtractRequest(BaseModel):
    """Request body for the /api/extract endpoint."""

    text: str
    origin: Origin = Origin.CHAT
    reference_time: datetime | None = None
    min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class SpanResponse(BaseModel):
    """Region of the submitted text a task was read from."""

    text: str
    start_offset: int
    end_offset: int


class ExtractedTaskResponse(BaseModel):
    """A single extracted task in API responses."""

    title: str
    description: str | None = None
    source_span: SpanResponse
    strategy_used: ExtractionStrategy
    parsed_date: date | None = None
    parsed_time: time | None = None
    date_confidence: float = 0.0
    suggested_category: Category | None = None
    category_confidence: float = 0.0
    priority: Priority = Priority.MEDIUM
    overall_confidence: float
    confidence_band: ConfidenceBand
    keywords: list[str] = []


class ExtractResponse(BaseModel):
    """Response body for the /api/extract endpoint."""

    count: int
    reference_time: datetime
    tasks: list[ExtractedTaskResponse] = []
