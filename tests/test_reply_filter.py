"""Leak detection keeps plan specifics out of intake replies."""

import re

import pytest

from coresync.reply_filter import (
    PLAN_SAVED_MESSAGE,
    STILL_GATHERING_MESSAGE,
    LeakPattern,
    ReplyFilter,
)


@pytest.mark.parametrize(
    "text, pattern",
    [
        ("Start with squats for 4 sets of 8.", "sets_or_reps_count"),
        ("Bench press, 8-12 reps.", "sets_or_reps_count"),
        ("Deadlift reps: 5", "sets_or_reps_label"),
        ("Pull-ups 3x10 on Monday", "sets_by_reps"),
        ("Aim for 2,200 calories a day.", "calorie_count"),
        ("Target 1800kcal on rest days", "calorie_count"),
        ("We will start with a 500 calorie deficit.", "calorie_count"),
        ("Daily calories: 2500", "calorie_label"),
        ("Breakfast: 3 eggs and toast", "meal_with_numbers"),
        ('{"routines": []}', "plan_schema_keys"),
    ],
)
def test_patterns_detect_leaks(text, pattern):
    assert pattern in ReplyFilter().find_leaks(text)


@pytest.mark.parametrize(
    "text",
    [
        "How many days per week can you train?",
        "Got it, you're 29 and train 4 days a week. Any injuries?",
        "What do you usually eat for breakfast?",
        PLAN_SAVED_MESSAGE,
        STILL_GATHERING_MESSAGE,
    ],
)
def test_intake_replies_pass(text):
    assert not ReplyFilter().is_leaky(text)


def test_sanitize_picks_canned_message_by_save_state():
    reply_filter = ReplyFilter()
    leaky = "Do 5 sets of squats and eat 2500 calories."
    assert reply_filter.sanitize(leaky, plan_saved=True) == PLAN_SAVED_MESSAGE
    assert reply_filter.sanitize(leaky, plan_saved=False) == STILL_GATHERING_MESSAGE


def test_sanitize_keeps_clean_text_and_replaces_empty():
    reply_filter = ReplyFilter()
    assert reply_filter.sanitize("  Any injuries?  ", plan_saved=False) == "Any injuries?"
    assert reply_filter.sanitize("", plan_saved=True) == PLAN_SAVED_MESSAGE
    assert reply_filter.sanitize(None, plan_saved=False) == STILL_GATHERING_MESSAGE


def test_custom_patterns_replace_defaults():
    reply_filter = ReplyFilter(
        patterns=[LeakPattern("secret", re.compile("tempo"))],
        gathering_message="nope",
    )
    assert reply_filter.sanitize("use a slow tempo", plan_saved=False) == "nope"
    assert reply_filter.sanitize("Do 5 sets", plan_saved=False) == "Do 5 sets"
