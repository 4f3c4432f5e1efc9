"""Segmentation: cut raw text into candidate spans that keep their offsets.

Boundaries, outermost first:

- line breaks;
- numbered/bulleted list markers (inline "1. ... 2. ..." sequences count
  only when numbered 1, 2, 3, ... in order);
- sentence-terminal punctuation followed by a capital letter, except inside
  temporal expressions ("Jan. 5", "3.30") and after abbreviations ("Dr.");
- clause boundaries (comma/"and"/"then"/"also") that introduce a new action
  verb.

Spans are never rewritten: each one is a slice of the original text, so the
host can highlight it. Chat sender labels and timestamps are skipped by
moving the start offset, not by editing the text.
"""

from __future__ import annotations

import logging
import re

from taskcapture.extraction.datetime_resolver import find_expressions
from taskcapture.extraction.lexicon import ACTION_VERB_RE, LIST_MARKER_RE, TASK_LABEL_RE
from taskcapture.ingestion.models import Origin, Span

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"[^\r\n]+")
_TIMESTAMP_PREFIX_RE = re.compile(r"\s*\[[^\]\n]{1,40}\]\s*")
_SENDER_PREFIX_RE = re.compile(r"\s*(?P<name>[A-Z][\w.'-]*(?:\s+[A-Z][\w.'-]*){0,2})\s*:\s+")
_INLINE_NUMBER_RE = re.compile(r"(?<!\S)(?P<num>\d{1,2})[.)]\s+(?=[^\s\d])")
_SENTENCE_END_RE = re.compile(r"[.!?]+[\"')\]]*(?P<gap>\s+)(?=[\"'(\[]?[A-Z])")
_CLAUSE_RE = re.compile(
    r"(?:\s*[,;]\s*(?:(?:and|then|also|plus)\s+)*|\s+(?:and|then|also|plus)\s+(?:(?:then|also)\s+)?)"
    r"(?=(?:(?:also|then)\s+)?(?:remember\s+to\s+|don'?t\s+forget\s+to\s+|need\s+to\s+|please\s+)?"
    rf"{ACTION_VERB_RE.pattern}\s+(?!(?:and|or)\b)[\w'])",
    re.IGNORECASE,
)
_WORD_RE = re.compile(r"[A-Za-z0-9']+")

ABBREVIATIONS: frozenset[str] = frozenset({
    "dr", "mr", "mrs", "ms", "prof", "st", "sr", "jr", "vs", "etc", "approx",
    "appt", "dept", "e.g", "i.e",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
})

# Words that may accompany a temporal expression without adding content.
_TEMPORAL_FILLERS: frozenset[str] = frozenset({
    "at", "on", "by", "the", "this", "next", "in", "around", "about", "and",
    "or", "before", "until", "from", "of", "ok", "okay", "then",
})

Range = tuple[int, int]


def _skip_chat_prefix(line: str) -> int:
    """Offset where message content starts after "[10:42] Alice: "."""
    pos = 0
    stamp = _TIMESTAMP_PREFIX_RE.match(line)
    if stamp:
        pos = stamp.end()
    sender = _SENDER_PREFIX_RE.match(line, pos)
    if sender and not TASK_LABEL_RE.match(f"{sender.group('name')}: "):
        pos = sender.end()
    return pos


def _split_list_markers(line: str, start: int) -> list[int]:
    """Cut points for an inline "1. ... 2. ..." sequence."""
    cuts: list[int] = []
    expected = 1
    for m in _INLINE_NUMBER_RE.finditer(line, start):
        if int(m.group("num")) == expected:
            cuts.append(m.start())
            expected += 1
    if len(cuts) < 2:
        return []
    return cuts


def _after_marker(text: str, start: int, end: int) -> int:
    marker = LIST_MARKER_RE.match(text[start:end])
    return start + marker.end() if marker else start


def _is_abbreviation(text: str, dot: int) -> bool:
    word = re.search(r"([A-Za-z][A-Za-z.]*)$", text[:dot])
    if word is None:
        return False
    token = word.group(1).lower().rstrip(".")
    return len(token) == 1 or token in ABBREVIATIONS


def _sentence_ranges(text: str, start: int, end: int) -> list[Range]:
    scan_from = _after_marker(text, start, end)
    protected = [(s + start, e + start) for s, e in find_expressions(text[start:end])]

    ranges: list[Range] = []
    piece_start = start
    for m in _SENTENCE_END_RE.finditer(text, scan_from, end):
        punct_end = m.start("gap")
        dot = m.start()
        if text[dot] == "." and _is_abbreviation(text, dot):
            continue
        if any(s <= dot and dot + 1 < e for s, e in protected):
            continue
        ranges.append((piece_start, punct_end))
        piece_start = m.end()
    ranges.append((piece_start, end))
    return ranges


def _clause_ranges(text: str, start: int, end: int) -> list[Range]:
    scan_from = _after_marker(text, start, end)
    ranges: list[Range] = []
    piece_start = start
    for m in _CLAUSE_RE.finditer(text, scan_from, end):
        if m.start() <= piece_start or m.end() >= end:
            continue
        ranges.append((piece_start, m.start()))
        piece_start = m.end()
    ranges.append((piece_start, end))
    return ranges


def _trim(text: str, start: int, end: int) -> Range | None:
    while start < end and text[start].isspace():
        start += 1
    while end > start and (text[end - 1].isspace() or text[end - 1] in ",;"):
        end -= 1
    if not any(ch.isalnum() for ch in text[start:end]):
        return None
    return start, end


def _is_temporal_fragment(text: str) -> bool:
    """True for spans like "Tomorrow at 3." that only say *when*."""
    expressions = find_expressions(text)
    if not expressions:
        return False
    remainder = text
    for s, e in reversed(expressions):
        remainder = remainder[:s] + " " + remainder[e:]
    words = [w.lower() for w in _WORD_RE.findall(remainder)]
    return all(w in _TEMPORAL_FILLERS for w in words)


def _bridges(raw: str, spans: list[Span]) -> list[Span]:
    """Spans joining a dangling temporal fragment to the span before it."""
    bridges: list[Span] = []
    for previous, current in zip(spans, spans[1:]):
        if _is_temporal_fragment(current.text) and not _is_temporal_fragment(previous.text):
            bridges.append(Span.of(raw, previous.start_offset, current.end_offset))
    return bridges


def segment(raw: str, origin: Origin = Origin.CHAT) -> list[Span]:
    """Split *raw* into candidate spans ordered by start offset.

    Empty or whitespace-only pieces are dropped. Spans may overlap only
    where a temporal bridge was added.
    """
    if not raw or not raw.strip():
        return []

    spans: list[Span] = []
    for line in _LINE_RE.finditer(raw):
        line_start, line_end = line.span()
        content_start = line_start
        if origin == Origin.CHAT:
            content_start += _skip_chat_prefix(raw[line_start:line_end])

        cuts = [c + line_start for c in _split_list_markers(raw[line_start:line_end], content_start - line_start)]
        bounds = [content_start, *[c for c in cuts if c > content_start], line_end]
        for item_start, item_end in zip(bounds, bounds[1:]):
            for sent_start, sent_end in _sentence_ranges(raw, item_start, item_end):
                for clause_start, clause_end in _clause_ranges(raw, sent_start, sent_end):
                    trimmed = _trim(raw, clause_start, clause_end)
                    if trimmed is not None:
                        spans.append(Span.of(raw, *trimmed))

    spans.extend(_bridges(raw, spans))
    spans.sort(key=lambda s: (s.start_offset, s.end_offset))
    logger.debug("Segmented %d chars into %d spans", len(raw), len(spans))
    return spans
