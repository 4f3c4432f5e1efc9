"""Lexical signal library: the shared vocabulary every heuristic consults.

All lookups are case-insensitive. Phrase searches respect word boundaries,
so "call" never fires inside "recall", and apostrophes are optional so
"dont forget" reads like "don't forget".
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from taskcapture.extraction.models import Category, Priority

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

ACTION_VERBS: frozenset[str] = frozenset({
    "book", "bring", "buy", "call", "cancel", "change", "check", "clean",
    "complete", "confirm", "cook", "deliver", "deposit", "drop off", "email",
    "exchange", "feed", "file", "finish", "fix", "get", "grab", "mail",
    "mow", "order", "organize", "organise", "pack", "pay", "pick up", "plan",
    "prepare", "purchase", "renew", "repair", "replace", "reserve", "return",
    "review", "schedule", "send", "sign", "submit", "take out", "text",
    "update", "vacuum", "visit", "walk", "wash", "water", "write",
})

REQUEST_PHRASES: frozenset[str] = frozenset({
    "can you", "could you", "would you", "would you mind", "will you",
    "please", "pls", "remind me", "don't forget", "don't forget to",
    "do not forget to", "remember to", "make sure to", "make sure you",
    "you need to", "need you to",
})

URGENT_WORDS: frozenset[str] = frozenset({
    "urgent", "urgently", "asap", "immediately", "critical", "emergency",
    "right away",
})

HIGH_PRIORITY_WORDS: frozenset[str] = frozenset({
    "important", "priority", "crucial", "essential", "vital",
})

# Deliberately relaxed phrasing. These mask any urgency word they contain.
LOW_URGENCY_PHRASES: frozenset[str] = frozenset({
    "no rush", "no hurry", "not urgent", "low priority", "when possible",
    "whenever possible", "when you get a chance", "whenever you get a chance",
    "when you can", "whenever you can", "eventually", "at some point",
})

GENERIC_PHRASES: frozenset[str] = frozenset({
    "ok", "okay", "k", "yes", "yeah", "yep", "no", "nope", "sure", "thanks",
    "thank you", "thx", "ty", "hello", "hi", "hey", "bye", "goodbye",
    "see you", "see ya", "talk later", "good", "great", "awesome", "nice",
    "cool", "sounds good", "got it", "lol", "good morning", "good night",
})

QUESTION_WORDS: frozenset[str] = frozenset({"what", "when", "where", "why", "how", "who", "which"})

INSTRUCTION_PRONOUN_PHRASES: frozenset[str] = frozenset({
    "i need", "i have to", "i must", "i should", "i've got to", "i gotta",
    "you need", "you should", "you have to", "you must",
    "we need", "we should", "we have to", "we must",
})


@dataclass(frozen=True)
class CategoryKeywords:
    """Strong and weak keyword sets for one category."""

    strong: frozenset[str]
    weak: frozenset[str]

    @property
    def all(self) -> frozenset[str]:
        return self.strong | self.weak


CATEGORY_KEYWORDS: dict[Category, CategoryKeywords] = {
    Category.HOUSEHOLD: CategoryKeywords(
        strong=frozenset({
            "groceries", "grocery", "laundry", "dishes", "dishwasher", "vacuum",
            "kitchen", "bathroom", "garage", "trash", "garbage", "recycling",
            "faucet", "chores", "mop", "declutter", "lawn",
        }),
        weak=frozenset({
            "home", "house", "clean", "tidy", "organize", "buy", "shop",
            "shopping", "store", "repair", "fix", "wash", "dust", "garden",
            "yard", "milk", "bread", "egg", "cook", "bedroom", "living room",
            "filter", "bulb", "plant", "supplies",
        }),
    ),
    Category.HEALTH: CategoryKeywords(
        strong=frozenset({
            "doctor", "dr", "dentist", "pharmacy", "prescription", "medication",
            "medicine", "hospital", "checkup", "therapy", "therapist", "clinic",
            "vaccine", "surgery", "physio",
        }),
        weak=frozenset({
            "appointment", "gym", "exercise", "workout", "health", "medical",
            "pill", "vitamin", "diet", "wellness", "yoga",
        }),
    ),
    Category.WORK: CategoryKeywords(
        strong=frozenset({
            "meeting", "presentation", "project", "client", "office", "boss",
            "colleague", "report", "proposal", "standup", "conference",
            "interview", "deadline",
        }),
        weak=frozenset({
            "work", "email", "submit", "review", "team", "business", "task",
            "prepare", "send", "finish", "documentation", "slides", "manager",
        }),
    ),
    Category.FAMILY: CategoryKeywords(
        strong=frozenset({
            "mom", "mum", "dad", "mother", "father", "kids", "children", "child",
            "wife", "husband", "spouse", "grandma", "grandpa", "brother",
            "sister", "parents", "birthday", "anniversary", "family",
        }),
        weak=frozenset({"school", "dinner", "visit", "son", "daughter", "practice", "party"}),
    ),
    Category.FINANCE: CategoryKeywords(
        strong=frozenset({
            "bill", "bank", "tax", "taxes", "insurance", "mortgage", "rent",
            "invoice", "loan", "credit card", "budget", "payment", "deposit",
        }),
        weak=frozenset({
            "pay", "money", "account", "transfer", "expense", "subscription",
            "statement", "finance", "documents",
        }),
    ),
    Category.PERSONAL: CategoryKeywords(
        strong=frozenset({
            "haircut", "hobby", "friend", "coffee", "book club", "dry cleaning",
            "vacation", "flight", "hotel",
        }),
        weak=frozenset({"read", "book", "learn", "study", "relax", "personal", "lunch", "movie", "gift"}),
    ),
}

# ---------------------------------------------------------------------------
# Matching helpers
# ---------------------------------------------------------------------------

_PUNCT_RE = re.compile(r"[^\w\s']+")
_SPACE_RE = re.compile(r"\s+")


def unify_quotes(text: str) -> str:
    """Replace typographic apostrophes with ASCII ones (length-preserving)."""
    return text.replace("’", "'").replace("‘", "'")


def _normalize(text: str) -> str:
    text = _PUNCT_RE.sub(" ", unify_quotes(text).lower())
    return _SPACE_RE.sub(" ", text).strip()


def phrase_pattern(phrases: Iterable[str], *, plurals: bool = False) -> re.Pattern[str]:
    """Compile a word-bounded alternation of *phrases*, longest first.

    Inner whitespace matches any run of whitespace and apostrophes are
    optional. With ``plurals`` a trailing "s"/"es" is tolerated.
    """
    ordered = sorted(set(phrases), key=lambda p: (-len(p), p))
    alternatives = [
        r"\s+".join(re.escape(word).replace("'", "'?") for word in phrase.split())
        for phrase in ordered
    ]
    suffix = r"(?:s|es)?" if plurals else ""
    return re.compile(rf"\b(?:{'|'.join(alternatives)}){suffix}\b", re.IGNORECASE)


def _find_all(pattern: re.Pattern[str], text: str) -> list[str]:
    return [_SPACE_RE.sub(" ", m.group(0).lower()) for m in pattern.finditer(unify_quotes(text))]


LIST_MARKER_RE = re.compile(r"^\s*(?:\d{1,2}[.)]|[-*•])\s+")
TASK_LABEL_RE = re.compile(
    r"^\s*(?:action\s+items?|to\s*-?\s*dos?|tasks?|reminder|deadline|due|note\s+to\s+self"
    r"|mental\s+note|urgent|important|asap|fyi|note|ps|grocery\s+list|shopping\s+list)\s*[:\-]\s*",
    re.IGNORECASE,
)

ACTION_VERB_RE = phrase_pattern(ACTION_VERBS)
_REQUEST_RE = phrase_pattern(REQUEST_PHRASES)
_URGENCY_RE = phrase_pattern(URGENT_WORDS | HIGH_PRIORITY_WORDS)
_LOW_URGENCY_RE = phrase_pattern(LOW_URGENCY_PHRASES)
_GENERIC_RE = phrase_pattern(GENERIC_PHRASES)
_QUESTION_WORD_RE = phrase_pattern(QUESTION_WORDS)
_PRONOUN_RE = phrase_pattern(INSTRUCTION_PRONOUN_PHRASES)
_STRONG_KEYWORD_RE = phrase_pattern(
    {kw for keywords in CATEGORY_KEYWORDS.values() for kw in keywords.strong},
    plurals=True,
)


# ---------------------------------------------------------------------------
# Public lookups
# ---------------------------------------------------------------------------


def is_action_verb(word: str) -> bool:
    return _normalize(word) in ACTION_VERBS


def find_action_verbs(text: str) -> list[str]:
    """Action verbs in *text*, in order of appearance."""
    return _find_all(ACTION_VERB_RE, text)


def has_action_verb(text: str) -> bool:
    return ACTION_VERB_RE.search(unify_quotes(text)) is not None


def starts_with_action_verb(text: str) -> bool:
    """True when *text* opens with an imperative action verb."""
    match = ACTION_VERB_RE.match(unify_quotes(text).lstrip())
    return match is not None


def is_request_phrase(text: str) -> bool:
    """True when *text* is itself one of the request phrases."""
    return _normalize(text) in REQUEST_PHRASES


def find_request_phrase(text: str) -> str | None:
    """First request phrase contained in *text*, if any."""
    found = _find_all(_REQUEST_RE, text)
    return found[0] if found else None


def is_urgency_word(word: str) -> bool:
    normalized = _normalize(word)
    return normalized in URGENT_WORDS or normalized in HIGH_PRIORITY_WORDS


def urgency_tier(word: str) -> Priority | None:
    """Priority tier an urgency word belongs to, or None."""
    normalized = _normalize(word)
    if normalized in URGENT_WORDS:
        return Priority.URGENT
    if normalized in HIGH_PRIORITY_WORDS:
        return Priority.HIGH
    return None


def has_low_urgency_phrase(text: str) -> bool:
    return _LOW_URGENCY_RE.search(unify_quotes(text)) is not None


def find_urgency_words(text: str) -> list[str]:
    """Urgency words in *text*, ignoring those inside low-urgency phrasing.

    "low priority" and "not urgent" must never raise a task's priority.
    """
    masked = _LOW_URGENCY_RE.sub(lambda m: " " * len(m.group(0)), unify_quotes(text))
    return _find_all(_URGENCY_RE, masked)


def remove_low_urgency_phrases(text: str) -> str:
    return _LOW_URGENCY_RE.sub(" ", unify_quotes(text))


def category_keywords(category: Category) -> CategoryKeywords:
    return CATEGORY_KEYWORDS[category]


def find_strong_category_keywords(text: str) -> list[str]:
    """Strong keywords of any category present in *text*."""
    return _find_all(_STRONG_KEYWORD_RE, text)


def is_generic_phrase(text: str) -> bool:
    """True when *text* is nothing but acknowledgements and pleasantries."""
    normalized = _normalize(text)
    if not normalized:
        return False
    if normalized in GENERIC_PHRASES:
        return True
    return not _GENERIC_RE.sub(" ", normalized).strip()


def has_question_indicator(text: str) -> bool:
    """"?" anywhere or an interrogative word anywhere."""
    return "?" in text or _QUESTION_WORD_RE.search(text) is not None


def is_question(text: str) -> bool:
    """True when *text* is phrased as a question.

    Stricter than :func:`has_question_indicator`: it must end with "?" or
    open with an interrogative word.
    """
    stripped = text.strip()
    if stripped.endswith("?"):
        return True
    first = _normalize(stripped).split(" ", 1)[0]
    return first in QUESTION_WORDS


def has_instruction_pronoun(text: str) -> bool:
    return _PRONOUN_RE.search(unify_quotes(text)) is not None
