"""Labeled corpus I/O: load and save the JSON examples used for calibration."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from taskcapture.evaluation.models import ExpectedTask, LabeledExample
from taskcapture.extraction.models import Category, Priority
from taskcapture.ingestion.models import Origin
from taskcapture.pipeline_config import ExtractionStrategy


def _optional(enum_cls: type, value: Any) -> Any:
    return None if value is None else enum_cls(value)


def _parse_expected(item: dict[str, Any]) -> ExpectedTask:
    return ExpectedTask(
        title=item["title"],
        strategy=_optional(ExtractionStrategy, item.get("strategy")),
        category=_optional(Category, item.get("category")),
        priority=_optional(Priority, item.get("priority")),
        has_date=bool(item.get("has_date", False)),
        has_time=bool(item.get("has_time", False)),
    )


def parse_example(item: dict[str, Any]) -> LabeledExample:
    """Build a LabeledExample from its JSON form.

    Raises ValueError for missing fields, wrongly typed values, unknown enum
    values or a bad ``reference_time``.
    """
    if not isinstance(item, dict):
        msg = f"Corpus example must be a JSON object, got {type(item).__name__}"
        raise ValueError(msg)
    example_id = item.get("example_id", "<unknown>")
    try:
        return LabeledExample(
            example_id=item["example_id"],
            text=item["text"],
            origin=Origin(item.get("origin", Origin.CHAT.value)),
            reference_time=datetime.fromisoformat(item["reference_time"]),
            expected=[_parse_expected(e) for e in item.get("expected", [])],
        )
    except KeyError as exc:
        msg = f"Corpus example {example_id!r} is missing field {exc.args[0]!r}"
        raise ValueError(msg) from exc
    except (TypeError, AttributeError) as exc:
        msg = f"Corpus example {example_id!r} is malformed: {exc}"
        raise ValueError(msg) from exc


def load_corpus(path: str) -> list[LabeledExample]:
    """Load a labeled corpus from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        msg = f"Corpus {path} must contain a JSON array, got {type(data).__name__}"
        raise ValueError(msg)
    return [parse_example(item) for item in data]


def save_corpus(examples: list[LabeledExample], path: str) -> None:
    """Save a labeled corpus to a JSON file."""
    data = [
        {
            "example_id": ex.example_id,
            "text": ex.text,
            "origin": ex.origin.value,
            "reference_time": ex.reference_time.isoformat(),
            "expected": [
                {
                    "title": e.title,
                    "strategy": e.strategy.value if e.strategy else None,
                    "category": e.category.value if e.category else None,
                    "priority": e.priority.value if e.priority else None,
                    "has_date": e.has_date,
                    "has_time": e.has_time,
                }
                for e in ex.expected
            ],
        }
        for ex in examples
    ]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
