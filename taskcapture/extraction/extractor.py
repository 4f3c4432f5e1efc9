"""Heuristic extraction of candidate tasks from unstructured voice or chat text.

``extract`` is a pure function of its arguments: the same RawInput,
reference time and config always produce the same ExtractionResult.
"""

from __future__ import annotations

import logging
from datetime import datetime

from taskcapture.extraction import lexicon
from taskcapture.extraction.categories import classify
from taskcapture.extraction.confidence import aggregate
from taskcapture.extraction.datetime_resolver import resolve
from taskcapture.extraction.models import (
    Candidate,
    ExtractedTask,
    ExtractionResult,
    InvalidInputError,
    Priority,
)
from taskcapture.extraction.priority import infer_priority
from taskcapture.extraction.strategies import propose, select
from taskcapture.ingestion.models import Origin, RawInput, Span
from taskcapture.ingestion.segmentation import segment
from taskcapture.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

# Spans at least this long keep their source text as the description.
DESCRIPTION_MIN_CHARS = 50


def _keywords(text: str) -> tuple[str, ...]:
    """Notable signal words in order of first appearance."""
    found = [
        *lexicon.find_action_verbs(text),
        *lexicon.find_urgency_words(text),
        *lexicon.find_strong_category_keywords(text),
    ]
    lowered = lexicon.unify_quotes(text).lower()
    unique = dict.fromkeys(found)
    return tuple(sorted(unique, key=lambda kw: lowered.find(kw.split()[0])))


def _enrich(
    candidate: Candidate,
    reference_now: datetime,
    config: PipelineConfig,
) -> ExtractedTask:
    """Attach date, category, priority and the final confidence to a candidate."""
    span = candidate.span
    resolution = resolve(span.text, reference_now)

    category, category_confidence = classify(span.text, config)
    if category is None and candidate.category_hint is not None:
        category, category_confidence = candidate.category_hint, config.category_hint_confidence

    priority = infer_priority(span.text)
    if priority == Priority.MEDIUM and candidate.priority_hint is not None:
        priority = candidate.priority_hint

    source = span.text.strip()
    description = candidate.description
    if description is None and len(source) >= DESCRIPTION_MIN_CHARS and source != candidate.title:
        description = source

    return ExtractedTask(
        title=candidate.title,
        description=description,
        source_span=span,
        strategy_used=candidate.strategy,
        parsed_date=resolution.date,
        parsed_time=resolution.time,
        date_confidence=resolution.confidence,
        suggested_category=category,
        category_confidence=category_confidence,
        priority=priority,
        overall_confidence=aggregate(
            candidate.base_confidence, span.text, has_time_reference=resolution.resolved
        ),
        keywords=_keywords(span.text),
    )


def _rank(task: ExtractedTask) -> tuple[float, int]:
    span = task.source_span
    return task.overall_confidence, span.end_offset - span.start_offset


def deduplicate(tasks: list[ExtractedTask]) -> list[ExtractedTask]:
    """Keep the most confident task of every cluster of overlapping spans.

    Sweeps spans in start order, growing a cluster while the next span
    starts before the cluster's furthest end. Equal confidences keep the
    longer span, then the earlier one.
    """
    ordered = sorted(tasks, key=lambda t: (t.source_span.start_offset, t.source_span.end_offset))
    kept: list[ExtractedTask] = []
    best: ExtractedTask | None = None
    cluster_end = -1

    for task in ordered:
        span = task.source_span
        if best is not None and span.start_offset < cluster_end:
            cluster_end = max(cluster_end, span.end_offset)
            if _rank(task) > _rank(best):
                logger.debug("Dropping overlapping task %r", best.title)
                best = task
            else:
                logger.debug("Dropping overlapping task %r", task.title)
            continue
        if best is not None:
            kept.append(best)
        best, cluster_end = task, span.end_offset

    if best is not None:
        kept.append(best)
    return kept


def _candidate_for(span: Span) -> Candidate | None:
    candidate = select(propose(span))
    if candidate is None:
        logger.debug("No strategy matched span %r", span.text)
    else:
        logger.debug(
            "Span %r matched %s (base %.2f)",
            span.text,
            candidate.strategy.value,
            candidate.base_confidence,
        )
    return candidate


def extract(
    raw_input: RawInput,
    reference_now: datetime | None = None,
    config: PipelineConfig | None = None,
) -> ExtractionResult:
    """Extract candidate tasks from *raw_input*.

    Args:
        raw_input: Text plus provenance delivered by the host.
        reference_now: Clock used for relative dates. Defaults to
            ``raw_input.received_at``.
        config: Calibration constants. Defaults to :class:`PipelineConfig`.

    Returns:
        Tasks ordered by overall confidence, highest first. Empty or
        whitespace-only text yields an empty result.

    Raises:
        InvalidInputError: *raw_input* is missing or its text is not a string.
    """
    if not isinstance(raw_input, RawInput):
        msg = f"extract() expects a RawInput, got {type(raw_input).__name__}"
        raise InvalidInputError(msg)
    if not isinstance(raw_input.text, str):
        msg = f"RawInput.text must be a string, got {type(raw_input.text).__name__}"
        raise InvalidInputError(msg)

    config = config or PipelineConfig()
    reference = reference_now or raw_input.received_at

    if not raw_input.text.strip():
        return ExtractionResult()

    tasks: list[ExtractedTask] = []
    for span in segment(raw_input.text, raw_input.origin):
        candidate = _candidate_for(span)
        if candidate is not None:
            tasks.append(_enrich(candidate, reference, config))

    kept = deduplicate(tasks)
    kept.sort(key=lambda t: (-t.overall_confidence, t.source_span.start_offset))
    logger.debug("Extracted %d tasks (%d before deduplication)", len(kept), len(tasks))
    return ExtractionResult(tuple(kept))


def extract_text(
    text: str,
    origin: Origin = Origin.CHAT,
    reference_now: datetime | None = None,
    config: PipelineConfig | None = None,
) -> ExtractionResult:
    """Convenience wrapper: build the RawInput and extract in one call."""
    if reference_now is None:
        raw_input = RawInput(text=text, origin=origin)
    else:
        raw_input = RawInput(text=text, origin=origin, received_at=reference_now)
    return extract(raw_input, reference_now, config)
