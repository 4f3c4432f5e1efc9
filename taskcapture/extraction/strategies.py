"""Strategy matchers: independent pattern families that propose task candidates.

Each matcher is a pure function ``Span -> Candidate | None``. Matchers never
see each other's output; the pipeline runs all of them on every span and
keeps the proposal with the highest base confidence. :data:`MATCHERS` lists
them in tie-break order.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from taskcapture.extraction import lexicon
from taskcapture.extraction.datetime_resolver import find_expressions, resolve_time
from taskcapture.extraction.models import Candidate, Category, Priority
from taskcapture.ingestion.models import Span
from taskcapture.pipeline_config import ExtractionStrategy

Matcher = Callable[[Span], Candidate | None]


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# ---------------------------------------------------------------------------
# Title cleaning
# ---------------------------------------------------------------------------

_LEAD_IN_RE = _compile(r"^(?:(?:and|also|then|plus|so|oh|ok|okay|hey)\b[\s,]*)+")
_LEADING_TO_RE = _compile(r"^to\s+")
_TRAILING_PUNCT_RE = re.compile(r"[\s.,;:!?\-–—\"']+$")
_TRAILING_FILLER_RE = _compile(
    r"\s+(?:at|on|by|before|until|due|around|about|from|for|and|or|please|pls"
    r"|asap|urgently|immediately|right\s+away)$"
)
_SPACE_RE = re.compile(r"\s+")


def strip_prefixes(text: str) -> str:
    """Drop list markers, task labels and connective lead-ins."""
    previous = None
    while previous != text:
        previous = text
        text = lexicon.LIST_MARKER_RE.sub("", text)
        text = lexicon.TASK_LABEL_RE.sub("", text)
        text = _LEAD_IN_RE.sub("", text).lstrip()
    return text


def _remove_expressions(text: str) -> str:
    for start, end in reversed(find_expressions(text)):
        text = f"{text[:start]} {text[end:]}"
    return text


def clean_phrase(text: str) -> str:
    """Strip markers, temporal expressions and dangling words; keep case."""
    text = strip_prefixes(lexicon.unify_quotes(text).strip())
    text = _remove_expressions(lexicon.remove_low_urgency_phrases(text))
    text = _LEADING_TO_RE.sub("", _SPACE_RE.sub(" ", text).strip())

    previous = None
    while previous != text:
        previous = text
        text = _TRAILING_PUNCT_RE.sub("", text)
        text = _TRAILING_FILLER_RE.sub("", text)
    return text.strip()


def clean_title(text: str) -> str:
    """Turn a matched body into a reviewable title (first letter capitalised)."""
    text = clean_phrase(text)
    return text[:1].upper() + text[1:] if text else ""


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _relaxed(text: str) -> Priority | None:
    return Priority.LOW if lexicon.has_low_urgency_phrase(text) else None


def _first_body(
    patterns: list[tuple[re.Pattern[str], float]], text: str
) -> tuple[re.Match[str], float, str] | None:
    """First pattern whose ``body`` group yields a non-empty title."""
    for pattern, base in patterns:
        m = pattern.search(text)
        if m is None:
            continue
        title = clean_title(m.group("body"))
        if title and not lexicon.is_generic_phrase(title):
            return m, base, title
    return None


# ---------------------------------------------------------------------------
# reminder
# ---------------------------------------------------------------------------

_REMINDER_PATTERNS: list[tuple[re.Pattern[str], float]] = [
    (_compile(r"\bremind\s+me\s+(?:to\s+|that\s+|about\s+)?(?P<body>.+)"), 0.95),
    (_compile(r"\breminder\s*[:\-]?\s*(?:to\s+|that\s+|about\s+)?(?P<body>.+)"), 0.92),
    (_compile(r"\b(?:don'?t\s+let\s+me\s+forget|make\s+sure\s+i)\s+(?:to\s+|about\s+)?(?P<body>.+)"), 0.92),
    (_compile(r"\b(?:i\s+need\s+to\s+remember|remember\s+that\s+i\s+need)\s+(?:to\s+)?(?P<body>.+)"), 0.9),
    (_compile(r"\b(?:note\s+to\s+self|mental\s+note)\s*[:,\-]?\s*(?:to\s+)?(?P<body>.+)"), 0.9),
]


def match_reminder(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    found = _first_body(_REMINDER_PATTERNS, text)
    if found is None:
        return None
    _m, base, title = found
    return Candidate(
        strategy=ExtractionStrategy.REMINDER,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
    )


# ---------------------------------------------------------------------------
# deadline
# ---------------------------------------------------------------------------

_DEADLINE_PATTERNS: list[tuple[re.Pattern[str], float]] = [
    (_compile(r"\bdeadline\s+(?:for|on)\s+(?P<body>.+?)\s+(?:is|:)\s"), 0.94),
    (_compile(r"^(?P<body>.+?)\s+(?:(?:is|are)\s+)?due\b"), 0.93),
    (
        _compile(
            r"^(?P<body>.+?)\s+(?:must|needs?\s+to|has\s+to|have\s+to|should)\s+be\s+"
            r"(?:done|completed|finished|submitted|sent|paid|filed|ready)\s+(?:by|before)\b"
        ),
        0.92,
    ),
    (_compile(r"^(?P<body>.+?)\s+(?:no\s+later\s+than|before\s+the\s+deadline)\b"), 0.9),
    (_compile(r"^\s*(?:deadline|due)\s*:\s*(?P<body>.+)"), 0.9),
]


def match_deadline(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text):
        return None
    found = _first_body(_DEADLINE_PATTERNS, text)
    if found is None:
        return None
    _m, base, title = found
    return Candidate(
        strategy=ExtractionStrategy.DEADLINE,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text) or Priority.HIGH,
    )


# ---------------------------------------------------------------------------
# appointment
# ---------------------------------------------------------------------------

_APPOINTMENT_RE = _compile(
    r"\b(?:doctor|dr|dentist|dental|appointment|appt|check-?up|physio|therapist|therapy"
    r"|vet|interview|consultation|meeting|haircut|reservation|session)s?\b"
)
_SCHEDULING_CUE_RE = _compile(r"\b(?:schedule[d]?|book(?:ed)?|with|at|confirmed?)\b")
_MEDICAL_RE = _compile(r"\b(?:doctor|dr|dentist|dental|physio|therapist|check-?up)\b")


def match_appointment(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text) or not _APPOINTMENT_RE.search(text):
        return None
    if find_expressions(text):
        base = 0.88
    elif _SCHEDULING_CUE_RE.search(text):
        base = 0.82
    else:
        return None
    title = clean_title(text)
    if not title:
        return None
    return Candidate(
        strategy=ExtractionStrategy.APPOINTMENT,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
        category_hint=Category.HEALTH if _MEDICAL_RE.search(text) else None,
    )


# ---------------------------------------------------------------------------
# scheduled_item
# ---------------------------------------------------------------------------

_HAVE_EVENT_RE = _compile(
    r"\b(?:we\s+have|we've\s+got|i\s+have|i've\s+got|there'?s|there\s+is)\s+(?:a\s+|an\s+|the\s+)?(?P<body>.+)"
)


def match_scheduled_item(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text):
        return None
    expressions = find_expressions(text)
    if not expressions:
        return None

    have = _HAVE_EVENT_RE.search(text)
    if have is not None:
        title = clean_title(have.group("body"))
        base = 0.82
    else:
        parsed_time, _confidence = resolve_time(text)
        # The activity must come before the first temporal expression.
        if parsed_time is None or expressions[0][0] == 0:
            return None
        title = clean_title(text)
        base = 0.84

    if not title or lexicon.is_generic_phrase(title):
        return None
    return Candidate(
        strategy=ExtractionStrategy.SCHEDULED_ITEM,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
    )


# ---------------------------------------------------------------------------
# household_task
# ---------------------------------------------------------------------------

CHORE_NOUNS: frozenset[str] = frozenset({
    "kitchen", "bathroom", "bedroom", "living room", "garage", "basement",
    "attic", "yard", "garden", "lawn", "house", "faucet", "sink", "toilet",
    "shower", "fridge", "oven", "gutters", "windows", "floor", "floors",
    "carpet", "laundry", "dishes", "closet", "roof", "fence", "room",
})
_CHORE_NOUN_RE = lexicon.phrase_pattern(CHORE_NOUNS)

_CHORE_VERB_PATTERNS: list[re.Pattern[str]] = [
    _compile(r"\b(?P<verb>clean|tidy(?:\s+up)?|organi[sz]e|vacuum|mop|sweep|declutter|dust|wash)\s+(?P<body>.+)"),
    _compile(r"\b(?P<verb>fix|repair|maintain|service)\s+(?P<body>.+)"),
]

_CHORE_FIXED_PATTERNS: list[re.Pattern[str]] = [
    _compile(
        r"\b(?P<verb>change|replace)\s+(?P<body>(?:the\s+)?(?:\w+\s+){0,2}"
        r"(?:filter|(?:light\s*)?bulb|battery|batteries|sheets|smoke\s+detector)s?)\b"
    ),
    _compile(r"\b(?P<verb>water|feed|walk)\s+(?P<body>(?:the\s+)?(?:plants?|dog|cat|fish|garden|lawn|flowers))\b"),
    _compile(r"\b(?P<verb>do|run|load|unload|empty|fold)\s+(?P<body>(?:the\s+)?(?:laundry|dishes|dishwasher|washing))\b"),
    _compile(r"\b(?P<verb>take\s+out|empty)\s+(?P<body>(?:the\s+)?(?:trash|garbage|recycling|bins?))\b"),
    _compile(r"\b(?P<verb>mow)\s+(?P<body>(?:the\s+)?lawn)\b"),
]

_ROOM_NEEDS_RE = _compile(
    r"\b(?:the\s+)?(?P<room>kitchen|bathroom|bedroom|living\s+room|garage|basement|attic|yard|garden|lawn|house)"
    r"\s+(?:needs|requires)\s+(?P<body>.+)"
)


def match_household_task(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text):
        return None

    title = ""
    base = 0.0
    for pattern in _CHORE_FIXED_PATTERNS:
        m = pattern.search(text)
        if m:
            title = clean_title(f"{m.group('verb')} {m.group('body')}")
            base = 0.8
            break
    if not title:
        room = _ROOM_NEEDS_RE.search(text)
        if room:
            title = clean_title(room.group(0))
            base = 0.8
    if not title:
        for pattern in _CHORE_VERB_PATTERNS:
            m = pattern.search(text)
            if m:
                body = clean_phrase(m.group("body"))
                if body:
                    title = clean_title(f"{m.group('verb')} {body}")
                    base = 0.8 if _CHORE_NOUN_RE.search(body) else 0.74
                    break
    if not title:
        return None

    return Candidate(
        strategy=ExtractionStrategy.HOUSEHOLD_TASK,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
        category_hint=Category.HOUSEHOLD,
    )


# ---------------------------------------------------------------------------
# shopping_list
# ---------------------------------------------------------------------------

_SHOPPING_VERB = r"(?:buy|grab|pick\s+up|purchase|order|get)"
_SHOPPING_PATTERNS: list[tuple[re.Pattern[str], float]] = [
    (_compile(r"\b(?:grocery|groceries|shopping)\s+list\s*[:\-]?\s*(?P<body>.+)"), 0.8),
    (_compile(rf"\b(?:we|i)\s+(?:need|have)\s+to\s+{_SHOPPING_VERB}\s+(?P<body>.+)"), 0.8),
    (_compile(r"\b(?:we(?:'re|\s+are)?|i'm|i\s+am)\s+(?:out\s+of|running\s+low\s+on|low\s+on)\s+(?P<body>.+)"), 0.78),
    (_compile(rf"\b{_SHOPPING_VERB}\s+(?P<body>.+)"), 0.75),
    (_compile(r"\b(?:we|i)\s+need\s+(?!to\b)(?P<body>.+)"), 0.72),
]
# "get back to", "pick up the kids" and friends are not shopping.
_NOT_ITEMS_RE = _compile(
    r"^(?:the\s+)?(?:back|ready|done|started|going|in\s+touch|home|up|out|off|on|over|along|together|through"
    r"|rid|to|it|this|that|there|kids|children|mom|mum|dad|him|her|them|me|you|us)\b"
)
_ITEM_SPLIT_RE = _compile(r"\s*,\s*(?:and\s+)?|\s+and\s+|\s*&\s*")


def split_items(body: str) -> list[str]:
    """Split "milk, bread, and eggs" into its items."""
    return [item.strip() for item in _ITEM_SPLIT_RE.split(body) if item and item.strip()]


def match_shopping_list(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text):
        return None

    # "when you get a chance" must not read as "get a chance".
    scan = lexicon.remove_low_urgency_phrases(text)
    for pattern, base in _SHOPPING_PATTERNS:
        m = pattern.search(scan)
        if m is None:
            continue
        body = clean_phrase(m.group("body"))
        if not body or _NOT_ITEMS_RE.match(body):
            continue
        items = split_items(body)
        return Candidate(
            strategy=ExtractionStrategy.SHOPPING_LIST,
            title=clean_title(f"buy {body}"),
            span=span,
            base_confidence=base,
            description=f"Items: {', '.join(items)}" if len(items) > 1 else None,
            priority_hint=_relaxed(text),
            category_hint=Category.HOUSEHOLD,
        )
    return None


# ---------------------------------------------------------------------------
# direct_request
# ---------------------------------------------------------------------------

_DIRECT_PATTERNS: list[tuple[re.Pattern[str], float]] = [
    (_compile(r"\b(?:don'?t|do\s+not)\s+forget\s+(?:to\s+|about\s+)?(?P<body>.+)"), 0.88),
    (_compile(r"\b(?:can|could|would|will)\s+you\s+(?:please\s+)?(?:mind\s+)?(?P<body>.+)"), 0.85),
    (_compile(r"\bplease\s+(?P<body>.+)"), 0.85),
    (_compile(r"\b(?:remember|make\s+sure)\s+to\s+(?P<body>.+)"), 0.85),
    (_compile(r"\bmake\s+sure\s+you\s+(?P<body>.+)"), 0.84),
    (_compile(r"\bpls\s+(?P<body>.+)"), 0.83),
    (_compile(r"\byou\s+(?:need|have|must|ought)\s+to\s+(?P<body>.+)"), 0.82),
    (_compile(r"\b(?:(?:i|we)\s+)?(?:need\s+to|have\s+to|must|gotta)\s+(?P<body>.+)"), 0.8),
]


def match_direct_request(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    found = _first_body(_DIRECT_PATTERNS, text)
    if found is None:
        return None
    _m, base, title = found
    return Candidate(
        strategy=ExtractionStrategy.DIRECT_REQUEST,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
    )


# ---------------------------------------------------------------------------
# action_item
# ---------------------------------------------------------------------------

_ACTION_ITEM_PATTERNS: list[tuple[re.Pattern[str], float]] = [
    (_compile(r"^\s*(?:action\s+items?|to\s*-?\s*dos?|tasks?)\s*[:\-]\s*(?P<body>.+)"), 0.7),
    (_compile(r"\b(?:we\s+should|let'?s|let\s+us|we\s+ought\s+to|it\s+would\s+be\s+good\s+to)\s+(?P<body>.+)"), 0.66),
    (_compile(r"^\s*(?:\d{1,2}[.)]|[-*•])\s+(?P<body>.+)"), 0.62),
]
IMPERATIVE_BASE = 0.6


def match_action_item(span: Span) -> Candidate | None:
    text = lexicon.unify_quotes(span.text)
    if lexicon.is_question(text):
        return None

    found = _first_body(_ACTION_ITEM_PATTERNS, text)
    if found is not None:
        _m, base, title = found
    elif lexicon.starts_with_action_verb(strip_prefixes(text)):
        base, title = IMPERATIVE_BASE, clean_title(text)
        if not title:
            return None
    else:
        return None

    return Candidate(
        strategy=ExtractionStrategy.ACTION_ITEM,
        title=title,
        span=span,
        base_confidence=base,
        priority_hint=_relaxed(text),
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Order breaks ties between equal base confidences.
MATCHERS: tuple[tuple[ExtractionStrategy, Matcher], ...] = (
    (ExtractionStrategy.REMINDER, match_reminder),
    (ExtractionStrategy.DEADLINE, match_deadline),
    (ExtractionStrategy.APPOINTMENT, match_appointment),
    (ExtractionStrategy.SCHEDULED_ITEM, match_scheduled_item),
    (ExtractionStrategy.HOUSEHOLD_TASK, match_household_task),
    (ExtractionStrategy.SHOPPING_LIST, match_shopping_list),
    (ExtractionStrategy.DIRECT_REQUEST, match_direct_request),
    (ExtractionStrategy.ACTION_ITEM, match_action_item),
)


def propose(span: Span) -> list[Candidate]:
    """Run every matcher on *span* and return all proposals, in registry order."""
    candidates: list[Candidate] = []
    for _strategy, matcher in MATCHERS:
        candidate = matcher(span)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def select(candidates: list[Candidate]) -> Candidate | None:
    """Highest base confidence wins; earlier registry entries win ties."""
    best: Candidate | None = None
    for candidate in candidates:
        if best is None or candidate.base_confidence > best.base_confidence:
            best = candidate
    return best
