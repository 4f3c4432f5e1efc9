"""Tests for the strategy matchers and title cleaning."""

from __future__ import annotations

import pytest

from taskcapture.extraction.models import Candidate, Category, Priority
from taskcapture.extraction.strategies import (
    MATCHERS,
    clean_title,
    match_action_item,
    match_appointment,
    match_deadline,
    match_direct_request,
    match_household_task,
    match_reminder,
    match_scheduled_item,
    match_shopping_list,
    propose,
    select,
    split_items,
)
from taskcapture.ingestion.models import Span
from taskcapture.pipeline_config import ExtractionStrategy

# ── Helpers ──────────────────────────────────────────────────────────────────


def _span(text: str) -> Span:
    return Span.of(text, 0, len(text))


def _make_candidate(**overrides) -> Candidate:
    """Create a Candidate with sensible defaults."""
    defaults = {
        "strategy": ExtractionStrategy.ACTION_ITEM,
        "title": "Buy milk",
        "span": _span("buy milk"),
        "base_confidence": 0.6,
    }
    defaults.update(overrides)
    return Candidate(**defaults)


# ── Title cleaning ───────────────────────────────────────────────────────────


class TestCleanTitle:
    def test_strips_list_marker_and_date(self) -> None:
        assert clean_title("1. buy milk tomorrow") == "Buy milk"

    def test_strips_label_and_urgency_filler(self) -> None:
        assert clean_title("TODO: call the bank asap") == "Call the bank"

    def test_strips_connective_lead_in(self) -> None:
        assert clean_title("and then email Sarah.") == "Email Sarah"

    def test_empty(self) -> None:
        assert clean_title("   ") == ""


class TestSplitItems:
    def test_commas_and_conjunction(self) -> None:
        assert split_items("milk, bread, and eggs") == ["milk", "bread", "eggs"]

    def test_ampersand(self) -> None:
        assert split_items("milk, bread & eggs") == ["milk", "bread", "eggs"]


# ── Matchers ─────────────────────────────────────────────────────────────────


class TestReminder:
    def test_remind_me(self) -> None:
        candidate = match_reminder(_span("Remind me to call mom tonight"))
        assert candidate is not None
        assert candidate.title == "Call mom"
        assert candidate.base_confidence == 0.95
        assert candidate.priority_hint is None

    def test_relaxed_phrasing_hints_low(self) -> None:
        candidate = match_reminder(_span("Remind me to water the plants, no rush"))
        assert candidate is not None
        assert candidate.title == "Water the plants"
        assert candidate.priority_hint == Priority.LOW

    def test_no_trigger(self) -> None:
        assert match_reminder(_span("Buy milk")) is None


class TestDeadline:
    def test_due_by(self) -> None:
        candidate = match_deadline(_span("Report due by Friday 5 PM"))
        assert candidate is not None
        assert candidate.title == "Report"
        assert candidate.base_confidence == 0.93
        assert candidate.priority_hint == Priority.HIGH

    def test_is_due(self) -> None:
        candidate = match_deadline(_span("The project report is due by Friday 5 PM"))
        assert candidate is not None
        assert candidate.title == "The project report"

    def test_question_declined(self) -> None:
        assert match_deadline(_span("When is the report due?")) is None


class TestAppointment:
    def test_with_date_and_time(self) -> None:
        candidate = match_appointment(_span("Doctor appointment next Friday at 3:30 PM"))
        assert candidate is not None
        assert candidate.title == "Doctor appointment"
        assert candidate.base_confidence == 0.88
        assert candidate.category_hint == Category.HEALTH

    def test_scheduling_cue_without_date(self) -> None:
        candidate = match_appointment(_span("Meeting with the accountant"))
        assert candidate is not None
        assert candidate.base_confidence == 0.82
        assert candidate.category_hint is None

    def test_domain_word_alone_is_not_enough(self) -> None:
        assert match_appointment(_span("Dentist appointment")) is None


class TestScheduledItem:
    def test_we_have_event(self) -> None:
        candidate = match_scheduled_item(_span("We have a party on Saturday"))
        assert candidate is not None
        assert candidate.title == "Party"
        assert candidate.base_confidence == 0.82

    def test_activity_at_time(self) -> None:
        candidate = match_scheduled_item(_span("Soccer practice at 4 PM"))
        assert candidate is not None
        assert candidate.title == "Soccer practice"
        assert candidate.base_confidence == 0.84

    def test_bare_time_expression(self) -> None:
        assert match_scheduled_item(_span("tomorrow at 5pm")) is None


class TestHouseholdTask:
    def test_chore_verb_with_room(self) -> None:
        candidate = match_household_task(_span("clean the kitchen"))
        assert candidate is not None
        assert candidate.title == "Clean the kitchen"
        assert candidate.base_confidence == 0.8
        assert candidate.category_hint == Category.HOUSEHOLD

    def test_repair(self) -> None:
        candidate = match_household_task(_span("fix the leaky faucet"))
        assert candidate is not None
        assert candidate.title == "Fix the leaky faucet"

    def test_fixed_chore(self) -> None:
        candidate = match_household_task(_span("take out the trash"))
        assert candidate is not None
        assert candidate.title == "Take out the trash"

    def test_chore_verb_without_chore_noun(self) -> None:
        candidate = match_household_task(_span("wash the car"))
        assert candidate is not None
        assert candidate.base_confidence == 0.74


class TestShoppingList:
    def test_items_in_description(self) -> None:
        candidate = match_shopping_list(_span("We need to buy milk, bread, and eggs today"))
        assert candidate is not None
        assert candidate.title == "Buy milk, bread, and eggs"
        assert candidate.description == "Items: milk, bread, eggs"
        assert candidate.base_confidence == 0.8

    def test_out_of(self) -> None:
        candidate = match_shopping_list(_span("we're out of coffee"))
        assert candidate is not None
        assert candidate.title == "Buy coffee"
        assert candidate.description is None

    def test_people_are_not_items(self) -> None:
        assert match_shopping_list(_span("pick up the kids")) is None

    def test_get_is_a_trigger(self) -> None:
        candidate = match_shopping_list(_span("Get milk"))
        assert candidate is not None
        assert candidate.title == "Buy milk"
        assert candidate.base_confidence == 0.75

    @pytest.mark.parametrize(
        ("text", "title"),
        [
            ("Pick up batteries", "Buy batteries"),
            ("Grab some eggs", "Buy some eggs"),
            ("order printer paper", "Buy printer paper"),
            ("we need to get bananas and apples", "Buy bananas and apples"),
        ],
    )
    def test_titles_normalised_to_buy(self, text: str, title: str) -> None:
        candidate = match_shopping_list(_span(text))
        assert candidate is not None
        assert candidate.title == title

    def test_household_category_hint(self) -> None:
        candidate = match_shopping_list(_span("grab some eggs"))
        assert candidate is not None
        assert candidate.category_hint == Category.HOUSEHOLD

    @pytest.mark.parametrize("text", ["get back to Sarah", "get ready for work", "fix the shelf when you get a chance"])
    def test_non_shopping_get(self, text: str) -> None:
        assert match_shopping_list(_span(text)) is None


class TestDirectRequest:
    def test_question_form_request(self) -> None:
        candidate = match_direct_request(_span("Can you call the plumber?"))
        assert candidate is not None
        assert candidate.title == "Call the plumber"
        assert candidate.base_confidence == 0.85

    def test_dont_forget(self) -> None:
        candidate = match_direct_request(
            _span("Don't forget to pick up the kids from soccer practice at 4 PM")
        )
        assert candidate is not None
        assert candidate.title == "Pick up the kids from soccer practice"
        assert candidate.base_confidence == 0.88

    def test_trigger_without_body(self) -> None:
        assert match_direct_request(_span("please")) is None


class TestActionItem:
    def test_label(self) -> None:
        candidate = match_action_item(_span("Action items: send the proposal"))
        assert candidate is not None
        assert candidate.title == "Send the proposal"
        assert candidate.base_confidence == 0.7

    def test_suggestion(self) -> None:
        candidate = match_action_item(_span("Let's update the timeline"))
        assert candidate is not None
        assert candidate.base_confidence == 0.66

    def test_bullet(self) -> None:
        candidate = match_action_item(_span("- Update project timeline"))
        assert candidate is not None
        assert candidate.title == "Update project timeline"
        assert candidate.base_confidence == 0.62

    def test_imperative(self) -> None:
        candidate = match_action_item(_span("Submit the report"))
        assert candidate is not None
        assert candidate.base_confidence == 0.6

    def test_statement(self) -> None:
        assert match_action_item(_span("The sky is blue")) is None

    def test_question(self) -> None:
        assert match_action_item(_span("What should we do?")) is None


# ── Registry ─────────────────────────────────────────────────────────────────


class TestSelection:
    def test_registry_covers_every_strategy(self) -> None:
        assert {strategy for strategy, _matcher in MATCHERS} == set(ExtractionStrategy)

    def test_highest_base_confidence_wins(self) -> None:
        candidates = propose(_span("Remind me to call mom tonight"))
        strategies = [c.strategy for c in candidates]
        assert ExtractionStrategy.REMINDER in strategies
        assert len(candidates) > 1
        assert select(candidates).strategy == ExtractionStrategy.REMINDER

    def test_tie_keeps_earlier(self) -> None:
        first = _make_candidate(strategy=ExtractionStrategy.DEADLINE, base_confidence=0.8)
        second = _make_candidate(strategy=ExtractionStrategy.SHOPPING_LIST, base_confidence=0.8)
        assert select([first, second]) is first

    def test_empty(self) -> None:
        assert select([]) is None
        assert propose(_span("ok")) == []
