from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

logger = logging.getLogger(__name__)

PLAN_SAVED_MESSAGE = (
    "Thanks! I have everything I need. Your full workout and diet plan is saved "
    "on your profile page."
)
STILL_GATHERING_MESSAGE = (
    "Thanks, that helps! I'm still gathering your details here. Once intake is "
    "complete, your full workout and diet plan will appear on your profile page."
)

_MEALS = r"(?:breakfast|brunch|lunch|dinner|supper|snacks?|pre-workout|post-workout)"


@dataclass(frozen=True)
class LeakPattern:
    """A named regex that flags plan specifics in a chat reply."""

    name: str
    regex: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


def _pattern(name: str, expr: str) -> LeakPattern:
    return LeakPattern(name=name, regex=re.compile(expr, re.IGNORECASE))


DEFAULT_LEAK_PATTERNS: Sequence[LeakPattern] = (
    _pattern("sets_or_reps_count", r"\b\d+\s*(?:-\s*\d+\s*)?(?:sets?|reps?|repetitions)\b"),
    _pattern("sets_or_reps_label", r"\b(?:sets?|reps?)\s*[:=]\s*\d+"),
    _pattern("sets_by_reps", r"\b\d+\s*[x×]\s*\d+\b"),
    _pattern("calorie_count", r"\b\d[\d,]{2,}\s*(?:k?cals?|kilocalories?|calories?)\b"),
    _pattern("calorie_label", r"\b(?:daily\s*)?calories\s*[:=]\s*\d"),
    _pattern("meal_with_numbers", rf"\b{_MEALS}\b\s*[:\-]\s*[^\n.]{{0,40}}\d"),
    _pattern("plan_schema_keys", r"\"(?:routines|exercises|dailyCalories|meals|workoutPlan|dietPlan)\"\s*:"),
)


class ReplyFilter:
    """
    Keeps plan details out of the intake chat.

    A reply matching any pattern is replaced by a canned message that depends on
    whether a plan was actually saved during this turn.
    """

    def __init__(
        self,
        patterns: Optional[Sequence[LeakPattern]] = None,
        saved_message: str = PLAN_SAVED_MESSAGE,
        gathering_message: str = STILL_GATHERING_MESSAGE,
    ) -> None:
        self.patterns = tuple(DEFAULT_LEAK_PATTERNS if patterns is None else patterns)
        self.saved_message = saved_message
        self.gathering_message = gathering_message

    def find_leaks(self, text: str) -> List[str]:
        return [p.name for p in self.patterns if p.matches(text)]

    def is_leaky(self, text: str) -> bool:
        return any(p.matches(text) for p in self.patterns)

    def canned_message(self, plan_saved: bool) -> str:
        return self.saved_message if plan_saved else self.gathering_message

    def sanitize(self, text: Optional[str], plan_saved: bool) -> str:
        if not text or not text.strip():
            return self.canned_message(plan_saved)
        leaks = self.find_leaks(text)
        if leaks:
            logger.warning("Replacing chat reply that leaked plan details: %s", ", ".join(leaks))
            return self.canned_message(plan_saved)
        return text.strip()
