"""Extraction endpoint: turn a shared message or transcript into candidate tasks."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException

from taskcapture.api.models import (
    ExtractedTaskResponse,
    ExtractRequest,
    ExtractResponse,
    SpanResponse,
)
from taskcapture.config import settings
from taskcapture.extraction.extractor import extract
from taskcapture.extraction.models import ExtractedTask, InvalidInputError
from taskcapture.ingestion.models import RawInput
from taskcapture.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(task: ExtractedTask) -> ExtractedTaskResponse:
    span = task.source_span
    return ExtractedTaskResponse(
        title=task.title,
        description=task.description,
        source_span=SpanResponse(
            text=span.text,
            start_offset=span.start_offset,
            end_offset=span.end_offset,
        ),
        strategy_used=task.strategy_used,
        parsed_date=task.parsed_date,
        parsed_time=task.parsed_time,
        date_confidence=task.date_confidence,
        suggested_category=task.suggested_category,
        category_confidence=task.category_confidence,
        priority=task.priority,
        overall_confidence=task.overall_confidence,
        confidence_band=task.confidence_band,
        keywords=list(task.keywords),
    )


@router.post("/api/extract", response_model=ExtractResponse)
async def extract_tasks(request: ExtractRequest) -> ExtractResponse:
    """Extract candidate tasks from raw voice or chat text.

    Text beyond ``max_input_chars`` is truncated before extraction, and
    tasks below the caller's confidence threshold are filtered out.
    """
    reference_time = request.reference_time or datetime.now(UTC)
    raw_input = RawInput(
        text=request.text[: settings.max_input_chars],
        origin=request.origin,
        received_at=reference_time,
    )
    threshold = settings.min_confidence if request.min_confidence is None else request.min_confidence

    try:
        result = extract(raw_input, config=PipelineConfig.from_settings(settings))
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    tasks = result.above(threshold)
    logger.info(
        "Extracted %d tasks (%d above threshold %.2f) from %d chars of %s text",
        len(result),
        len(tasks),
        threshold,
        len(raw_input.text),
        raw_input.origin.value,
    )
    return ExtractResponse(
        count=len(tasks),
        reference_time=reference_time,
        tasks=[_to_response(t) for t in tasks],
    )
