"""Priority inferencer: map urgency vocabulary to a priority tier."""

from __future__ import annotations

from taskcapture.extraction.lexicon import find_urgency_words, urgency_tier
from taskcapture.extraction.models import Priority


def infer_priority(text: str) -> Priority:
    """Urgent if any urgent-tier word appears, high for high-tier words.

    Never returns :attr:`Priority.LOW`; only a strategy matcher that
    recognises relaxed phrasing may lower a task's priority.
    """
    tiers = {urgency_tier(word) for word in find_urgency_words(text)}
    if Priority.URGENT in tiers:
        return Priority.URGENT
    if Priority.HIGH in tiers:
        return Priority.HIGH
    return Priority.MEDIUM
