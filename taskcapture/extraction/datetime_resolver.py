"""Date/time resolver: turn temporal expressions into calendar values.

Every calculation is anchored on an explicit ``reference_now`` so the same
text always resolves to the same date; nothing in this module reads the
clock.

Date and time are resolved independently. Each family of patterns carries a
base confidence and a specificity (absolute > relative > period >
approximate). A match nested inside a longer match defers to it. Among the
rest, the highest base confidence wins and ties go to the more specific
pattern, then to the longer match.
"""

from __future__ import annotations

import calendar
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import IntEnum

from taskcapture.extraction.lexicon import unify_quotes

logger = logging.getLogger(__name__)


class PatternKind(IntEnum):
    """Specificity of a date pattern; higher wins confidence ties."""

    APPROXIMATE = 0
    PERIOD = 1
    RELATIVE = 2
    ABSOLUTE = 3


@dataclass(frozen=True)
class DateResolution:
    """Outcome of :func:`resolve`.

    ``confidence`` is the selected date pattern's base confidence, or the
    time pattern's when only a time of day was found.
    """

    date: date | None = None
    time: time | None = None
    confidence: float = 0.0
    time_confidence: float = 0.0

    @property
    def resolved(self) -> bool:
        return self.date is not None or self.time is not None


UNRESOLVED = DateResolution()

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

WEEKDAYS: dict[str, int] = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7,
    "august": 8, "aug": 8, "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
}

NUMBER_WORDS: dict[str, int] = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12,
}

# Time-of-day anchors (hour, minute)
DAY_PARTS: dict[str, tuple[int, int]] = {
    "morning": (9, 0),
    "afternoon": (14, 0),
    "evening": (18, 0),
    "night": (20, 0),
    "tonight": (20, 0),
    "tonite": (20, 0),
}

MODIFIED_DAY_PARTS: dict[tuple[str, str], tuple[int, int]] = {
    ("early", "morning"): (7, 0),
    ("late", "morning"): (11, 0),
    ("early", "afternoon"): (13, 0),
    ("late", "afternoon"): (16, 0),
    ("early", "evening"): (17, 0),
    ("late", "evening"): (21, 0),
}

SEASON_STARTS: dict[str, tuple[int, int]] = {
    "spring": (3, 20),
    "summer": (6, 21),
    "fall": (9, 22),
    "autumn": (9, 22),
    "winter": (12, 21),
}


def _alternation(words: dict[str, int] | dict[str, tuple[int, int]]) -> str:
    return "|".join(sorted(words, key=lambda w: (-len(w), w)))


_WEEKDAY = rf"(?P<weekday>{_alternation(WEEKDAYS)})"
_MONTH = rf"(?P<month>{_alternation(MONTHS)})"
_NUMBER = rf"(?P<n>\d{{1,3}}|{_alternation(NUMBER_WORDS)})"
_HOUR = rf"(?P<h>\d{{1,2}}|{_alternation({k: v for k, v in NUMBER_WORDS.items() if len(k) > 2})})"
_ORDINAL = r"(?:st|nd|rd|th)"
_UNIT = r"(?P<unit>day|week|month|year)s?"


def _number(token: str) -> int:
    token = token.lower()
    return NUMBER_WORDS[token] if token in NUMBER_WORDS else int(token)


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------


def _add_months(start: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month."""
    index = start.month - 1 + months
    year, month = start.year + index // 12, index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _add(start: date, amount: int, unit: str) -> date:
    if unit == "day":
        return start + timedelta(days=amount)
    if unit == "week":
        return start + timedelta(weeks=amount)
    if unit == "month":
        return _add_months(start, amount)
    return _add_months(start, amount * 12)


def _start_of_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _this_weekday(ref: date, weekday: int) -> date:
    """Closest occurrence on or after *ref*."""
    return ref + timedelta(days=(weekday - ref.weekday()) % 7)


def _next_weekday(ref: date, weekday: int) -> date:
    """Occurrence within the calendar week (Mon-Sun) after *ref*'s week."""
    return _start_of_week(ref) + timedelta(weeks=1, days=weekday)


def _upcoming(ref: date, month: int, day: int) -> date:
    """Next occurrence of month/day on or after *ref* (raises on e.g. 2/30)."""
    candidate = date(ref.year, month, day) if (month, day) != (2, 29) else None
    if candidate is None:
        year = ref.year
        while not calendar.isleap(year) or date(year, 2, 29) < ref:
            year += 1
        return date(year, 2, 29)
    if candidate < ref:
        candidate = date(ref.year + 1, month, day)
    return candidate


def _expand_year(token: str) -> int:
    year = int(token)
    return year + 2000 if year < 100 else year


def _thanksgiving(year: int) -> date:
    first = date(year, 11, 1)
    first_thursday = first + timedelta(days=(3 - first.weekday()) % 7)
    return first_thursday + timedelta(weeks=3)


# ---------------------------------------------------------------------------
# Date calculators
# ---------------------------------------------------------------------------

DateCalculator = Callable[[re.Match[str], date], date]


def _offset(days: int) -> DateCalculator:
    return lambda _m, ref: ref + timedelta(days=days)


def _in_amount(m: re.Match[str], ref: date) -> date:
    return _add(ref, _number(m.group("n")), m.group("unit").lower())


def _this_named_weekday(m: re.Match[str], ref: date) -> date:
    return _this_weekday(ref, WEEKDAYS[m.group("weekday").lower()])


def _next_named_weekday(m: re.Match[str], ref: date) -> date:
    return _next_weekday(ref, WEEKDAYS[m.group("weekday").lower()])


def _next_period(m: re.Match[str], ref: date) -> date:
    return _add(ref, 1, m.group("unit").lower())


def _weekend(m: re.Match[str], ref: date) -> date:
    if m.group("which").lower() == "next":
        return _next_weekday(ref, 5)
    return ref if ref.weekday() == 6 else _this_weekday(ref, 5)


def _end_of_period(m: re.Match[str], ref: date) -> date:
    unit = m.group("unit").lower()
    anchor = _add(ref, 1, unit) if (m.group("which") or "").lower() == "next" else ref
    if unit == "week":
        return _start_of_week(anchor) + timedelta(days=6)
    if unit == "month":
        return date(anchor.year, anchor.month, calendar.monthrange(anchor.year, anchor.month)[1])
    return date(anchor.year, 12, 31)


def _start_of_period(m: re.Match[str], ref: date) -> date:
    unit = m.group("unit").lower()
    if (m.group("which") or "next").lower() == "this":
        anchor = ref
    else:
        anchor = _add(ref, 1, unit)
    if unit == "week":
        return _start_of_week(anchor)
    if unit == "month":
        return anchor.replace(day=1)
    return date(anchor.year, 1, 1)


def _month_day(m: re.Match[str], ref: date) -> date:
    month = MONTHS[m.group("month").lower()]
    day = int(m.group("day"))
    if m.group("year"):
        return date(_expand_year(m.group("year")), month, day)
    return _upcoming(ref, month, day)


def _numeric_date(m: re.Match[str], ref: date) -> date:
    month, day = int(m.group("month")), int(m.group("day"))
    year = m.groupdict().get("year")
    if year:
        return date(_expand_year(year), month, day)
    return _upcoming(ref, month, day)


def _iso_date(m: re.Match[str], _ref: date) -> date:
    return date(int(m.group("year")), int(m.group("month")), int(m.group("day")))


def _day_of_month(m: re.Match[str], ref: date) -> date:
    day = int(m.group("day"))
    if not 1 <= day <= 31:
        msg = f"day of month out of range: {day}"
        raise ValueError(msg)
    candidate = ref.replace(day=1)
    # Walk forward to the first month that has this day on or after ref.
    for _ in range(12):
        if day <= calendar.monthrange(candidate.year, candidate.month)[1]:
            resolved = candidate.replace(day=day)
            if resolved >= ref:
                return resolved
        candidate = _add_months(candidate, 1)
    msg = f"no upcoming month has day {day}"
    raise ValueError(msg)


def _holiday(m: re.Match[str], ref: date) -> date:
    name = re.sub(r"[\s']+", " ", unify_quotes(m.group("holiday")).lower()).strip()
    if name == "thanksgiving":
        day = _thanksgiving(ref.year)
        return day if day >= ref else _thanksgiving(ref.year + 1)
    if name in ("christmas eve", "xmas eve"):
        return _upcoming(ref, 12, 24)
    if name in ("christmas", "christmas day", "xmas"):
        return _upcoming(ref, 12, 25)
    if name in ("new year s eve", "new years eve"):
        return _upcoming(ref, 12, 31)
    return _upcoming(ref, 1, 1)


def _season(m: re.Match[str], ref: date) -> date:
    month, day = SEASON_STARTS[m.group("season").lower()]
    year = ref.year + 1 if m.group("which").lower() == "next" else ref.year
    return date(year, month, day)


@dataclass(frozen=True)
class _DatePattern:
    regex: re.Pattern[str]
    calculate: DateCalculator
    confidence: float
    kind: PatternKind


def _date_pattern(
    regex: str, calculate: DateCalculator, confidence: float, kind: PatternKind
) -> _DatePattern:
    return _DatePattern(re.compile(regex, re.IGNORECASE), calculate, confidence, kind)


_DATE_PATTERNS: list[_DatePattern] = [
    # Relative days
    _date_pattern(r"\btoday\b", _offset(0), 0.95, PatternKind.RELATIVE),
    _date_pattern(r"\b(?:tonight|tonite)\b", _offset(0), 0.85, PatternKind.RELATIVE),
    _date_pattern(r"\bthis\s+(?:morning|afternoon|evening)\b", _offset(0), 0.85, PatternKind.RELATIVE),
    _date_pattern(r"\btomorrow\b", _offset(1), 0.9, PatternKind.RELATIVE),
    _date_pattern(r"\b(?:the\s+)?day\s+after\s+tomorrow\b", _offset(2), 0.92, PatternKind.RELATIVE),
    _date_pattern(r"\byesterday\b", _offset(-1), 0.9, PatternKind.RELATIVE),
    # Offsets
    _date_pattern(rf"\bin\s+{_NUMBER}\s+{_UNIT}\b", _in_amount, 0.85, PatternKind.RELATIVE),
    _date_pattern(
        rf"\b{_NUMBER}\s+{_UNIT}\s+from\s+(?:now|today)\b", _in_amount, 0.85, PatternKind.RELATIVE
    ),
    # Weekdays
    _date_pattern(rf"\bthis\s+(?:coming\s+)?{_WEEKDAY}\b", _this_named_weekday, 0.85, PatternKind.RELATIVE),
    _date_pattern(rf"\bnext\s+{_WEEKDAY}\b", _next_named_weekday, 0.85, PatternKind.RELATIVE),
    _date_pattern(rf"\b{_WEEKDAY}\s+this\s+week\b", _this_named_weekday, 0.8, PatternKind.RELATIVE),
    _date_pattern(rf"\b{_WEEKDAY}\s+next\s+week\b", _next_named_weekday, 0.8, PatternKind.RELATIVE),
    _date_pattern(rf"\b{_WEEKDAY}\b", _this_named_weekday, 0.8, PatternKind.RELATIVE),
    _date_pattern(r"\b(?P<which>this|next)\s+weekend\b", _weekend, 0.8, PatternKind.RELATIVE),
    _date_pattern(r"\bnext\s+(?P<unit>week|month|year)\b", _next_period, 0.8, PatternKind.RELATIVE),
    # Period boundaries
    _date_pattern(
        r"\b(?:by\s+)?(?:the\s+)?end\s+of\s+(?:the\s+)?(?:(?P<which>this|next)\s+)?(?P<unit>week|month|year)\b",
        _end_of_period,
        0.75,
        PatternKind.PERIOD,
    ),
    _date_pattern(
        r"\b(?:the\s+)?(?:beginning|start)\s+of\s+(?:the\s+)?(?:(?P<which>this|next)\s+)?(?P<unit>week|month|year)\b",
        _start_of_period,
        0.75,
        PatternKind.PERIOD,
    ),
    _date_pattern(r"\b(?:eod|(?:the\s+)?end\s+of\s+(?:the\s+)?day)\b", _offset(0), 0.7, PatternKind.PERIOD),
    _date_pattern(
        r"\beow\b", lambda _m, ref: _start_of_week(ref) + timedelta(days=6), 0.7, PatternKind.PERIOD
    ),
    # Absolute dates
    _date_pattern(
        rf"\b{_MONTH}\.?\s+(?P<day>\d{{1,2}}){_ORDINAL}?(?:,?\s+(?P<year>\d{{4}}))?\b",
        _month_day,
        0.9,
        PatternKind.ABSOLUTE,
    ),
    _date_pattern(
        rf"\b(?:the\s+)?(?P<day>\d{{1,2}}){_ORDINAL}?\s+(?:of\s+)?{_MONTH}\b\.?(?:,?\s+(?P<year>\d{{4}}))?",
        _month_day,
        0.9,
        PatternKind.ABSOLUTE,
    ),
    _date_pattern(
        r"\b(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})\b", _iso_date, 0.9, PatternKind.ABSOLUTE
    ),
    _date_pattern(
        r"(?<![\d/])\b(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4}|\d{2})\b",
        _numeric_date,
        0.85,
        PatternKind.ABSOLUTE,
    ),
    _date_pattern(
        r"\b(?:on|by|before|until|due|after)\s+(?P<month>\d{1,2})/(?P<day>\d{1,2})\b(?!/)",
        _numeric_date,
        0.85,
        PatternKind.ABSOLUTE,
    ),
    # "1/2 gallon" is a quantity: common fractions need a year or a date cue.
    _date_pattern(
        r"(?<![\d/])\b(?!(?:1/[234]|2/3|3/4)\b)(?P<month>\d{1,2})/(?P<day>\d{1,2})\b(?!/)",
        _numeric_date,
        0.85,
        PatternKind.ABSOLUTE,
    ),
    _date_pattern(
        rf"\b(?:on|by|before|until)\s+the\s+(?P<day>\d{{1,2}}){_ORDINAL}\b",
        _day_of_month,
        0.85,
        PatternKind.ABSOLUTE,
    ),
    _date_pattern(
        r"\b(?P<holiday>christmas\s+eve|christmas(?:\s+day)?|xmas(?:\s+eve)?|thanksgiving"
        r"|new\s+year'?s?\s+eve|new\s+year'?s?(?:\s+day)?)\b",
        _holiday,
        0.85,
        PatternKind.ABSOLUTE,
    ),
    # Approximate
    _date_pattern(
        rf"\b(?P<which>this|next)\s+(?P<season>{_alternation(SEASON_STARTS)})\b",
        _season,
        0.4,
        PatternKind.APPROXIMATE,
    ),
]

# ---------------------------------------------------------------------------
# Time calculators
# ---------------------------------------------------------------------------

TimeCalculator = Callable[[re.Match[str]], time]


def _clock(hour: int, minute: int = 0, meridiem: str | None = None, *, padded: bool = False) -> time:
    """Build a time, applying am/pm or the afternoon heuristic for bare 1-6."""
    if meridiem:
        if not 1 <= hour <= 12:
            msg = f"12-hour clock out of range: {hour}"
            raise ValueError(msg)
        if meridiem.startswith("p") and hour != 12:
            hour += 12
        elif meridiem.startswith("a") and hour == 12:
            hour = 0
    elif 1 <= hour <= 6 and not padded:
        hour += 12
    return time(hour, minute)


def _meridiem_time(m: re.Match[str]) -> time:
    meridiem = m.group("mer").lower().replace(".", "")
    return _clock(int(m.group("h")), int(m.group("m") or 0), meridiem)


def _bare_clock(m: re.Match[str]) -> time:
    token = m.group("h")
    return _clock(int(token), int(m.group("m")), padded=token.startswith("0") or int(token) > 12)


def _hour_only(m: re.Match[str]) -> time:
    return _clock(_number(m.group("h")))


def _half_past(m: re.Match[str]) -> time:
    return _clock(_number(m.group("h")), 30)


def _quarter(m: re.Match[str]) -> time:
    hour = _number(m.group("h"))
    if m.group("rel").lower() == "past":
        return _clock(hour, 15)
    return _clock(12 if hour == 1 else hour - 1, 45)


def _day_part(m: re.Match[str]) -> time:
    return time(*DAY_PARTS[m.group("part").lower()])


def _modified_day_part(m: re.Match[str]) -> time:
    return time(*MODIFIED_DAY_PARTS[(m.group("mod").lower(), m.group("part").lower())])


@dataclass(frozen=True)
class _TimePattern:
    regex: re.Pattern[str]
    calculate: TimeCalculator
    confidence: float


def _time_pattern(regex: str, calculate: TimeCalculator, confidence: float) -> _TimePattern:
    return _TimePattern(re.compile(regex, re.IGNORECASE), calculate, confidence)


_TIME_PATTERNS: list[_TimePattern] = [
    _time_pattern(
        r"\b(?P<h>\d{1,2})(?:[:.](?P<m>[0-5]\d))?\s*(?P<mer>a\.?m\.?|p\.?m\.?)(?![a-z])",
        _meridiem_time,
        0.9,
    ),
    _time_pattern(r"\b(?P<h>[01]?\d|2[0-3]):(?P<m>[0-5]\d)\b", _bare_clock, 0.85),
    _time_pattern(r"\b(?:at|around|about)\s+(?P<h>\d{1,2})\.(?P<m>[0-5]\d)\b", _bare_clock, 0.8),
    _time_pattern(rf"\b{_HOUR}\s+o'?clock\b", _hour_only, 0.85),
    _time_pattern(rf"\bhalf\s+past\s+{_HOUR}\b", _half_past, 0.8),
    _time_pattern(rf"\bquarter\s+(?P<rel>past|to)\s+{_HOUR}\b", _quarter, 0.8),
    _time_pattern(r"\b(?:noon|midday)\b", lambda _m: time(12, 0), 0.95),
    _time_pattern(r"\bmidnight\b", lambda _m: time(0, 0), 0.95),
    _time_pattern(
        r"\b(?P<mod>early|late)\s+(?P<part>morning|afternoon|evening)\b", _modified_day_part, 0.7
    ),
    _time_pattern(rf"\b(?P<part>{_alternation(DAY_PARTS)})\b", _day_part, 0.6),
    _time_pattern(
        r"\b(?:at|around|about|by)\s+(?P<h>\d{1,2})"
        r"(?=\s*(?:$|[,;!?)]|\.(?!\d)|\s(?:on|today|tonight|tomorrow|this|next|and|for|with|to)\b))",
        _hour_only,
        0.7,
    ),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _reference_date(reference_now: datetime | date) -> date:
    return reference_now.date() if isinstance(reference_now, datetime) else reference_now


def resolve_date(text: str, reference_now: datetime | date) -> tuple[date | None, float]:
    """Best date expression in *text*, with its base confidence."""
    ref = _reference_date(reference_now)
    text = unify_quotes(text)
    found: list[tuple[int, int, _DatePattern, date]] = []

    for pattern in _DATE_PATTERNS:
        for m in pattern.regex.finditer(text):
            try:
                value = pattern.calculate(m, ref)
            except ValueError as exc:
                logger.debug("Skipping invalid date %r: %s", m.group(0), exc)
                continue
            found.append((m.start(), m.end(), pattern, value))
            break

    # "next month" inside "beginning of next month" belongs to the longer expression.
    outermost = [
        item
        for item in found
        if not any(
            o[0] <= item[0] and item[1] <= o[1] and o[1] - o[0] > item[1] - item[0] for o in found
        )
    ]
    if not outermost:
        return None, 0.0
    best = max(outermost, key=lambda i: (i[2].confidence, int(i[2].kind), i[1] - i[0], -i[0]))
    return best[3], best[2].confidence


def resolve_time(text: str) -> tuple[time | None, float]:
    """Best time-of-day expression in *text*, with its base confidence."""
    text = unify_quotes(text)
    best: tuple[tuple[float, int, int], time] | None = None

    for pattern in _TIME_PATTERNS:
        for m in pattern.regex.finditer(text):
            try:
                value = pattern.calculate(m)
            except ValueError as exc:
                logger.debug("Skipping invalid time %r: %s", m.group(0), exc)
                continue
            key = (pattern.confidence, m.end() - m.start(), -m.start())
            if best is None or key > best[0]:
                best = (key, value)
            break

    if best is None:
        return None, 0.0
    return best[1], best[0][0]


def resolve(text: str, reference_now: datetime | date) -> DateResolution:
    """Resolve the date and time of day mentioned in *text*.

    Returns :data:`UNRESOLVED` (no date, no time, confidence 0.0) when no
    pattern matches.
    """
    parsed_date, date_confidence = resolve_date(text, reference_now)
    parsed_time, time_confidence = resolve_time(text)
    if parsed_date is None and parsed_time is None:
        return UNRESOLVED
    return DateResolution(
        date=parsed_date,
        time=parsed_time,
        confidence=date_confidence if parsed_date is not None else time_confidence,
        time_confidence=time_confidence,
    )


def find_expressions(text: str) -> list[tuple[int, int]]:
    """Character ranges of every temporal expression in *text*, merged."""
    text = unify_quotes(text)
    ranges = sorted(
        (m.start(), m.end())
        for pattern in (*_DATE_PATTERNS, *_TIME_PATTERNS)
        for m in pattern.regex.finditer(text)
    )
    merged: list[tuple[int, int]] = []
    for start, end in ranges:
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return merged
