from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

DEFAULT_SCHEDULE_DAY = "Day"
DEFAULT_EXERCISE_DAY = "Unknown"
DEFAULT_ROUTINE_NAME = "Exercise"
DEFAULT_MEAL_NAME = "Meal"
DEFAULT_SETS = 1
DEFAULT_REPS = 10
DEFAULT_DAILY_CALORIES = 0


def to_int(value: Any, default: int, minimum: int = 0) -> int:
    """
    Parse `value` as an integer, returning `default` when it cannot be parsed
    or falls below `minimum`.

    Accepts ints, finite floats (truncated) and strings holding a number
    ("12", " 8 ", "3.0"). Text like "12 reps" or "to failure" is rejected
    rather than guessed at. Booleans are not numbers here.
    """
    if isinstance(value, bool):
        return default

    parsed: Optional[int] = None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if math.isfinite(value):
            parsed = int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                as_float = None
            if as_float is not None and math.isfinite(as_float):
                parsed = int(as_float)

    if parsed is None or parsed < minimum:
        return default
    return parsed


def _to_text(value: Any, default: str) -> str:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def coerce_routine(raw: Any) -> Dict[str, Any]:
    routine = _as_dict(raw)
    return {
        "name": _to_text(routine.get("name"), DEFAULT_ROUTINE_NAME),
        "sets": to_int(routine.get("sets"), DEFAULT_SETS, minimum=1),
        "reps": to_int(routine.get("reps"), DEFAULT_REPS, minimum=1),
    }


def coerce_exercise_day(raw: Any) -> Dict[str, Any]:
    entry = _as_dict(raw)
    return {
        "day": _to_text(entry.get("day"), DEFAULT_EXERCISE_DAY),
        "routines": [coerce_routine(r) for r in _as_list(entry.get("routines"))],
    }


def coerce_workout_plan(value: Any) -> Optional[Dict[str, Any]]:
    """
    Force a model-produced workout plan into
    {"schedule": [str], "exercises": [{"day", "routines": [{"name", "sets", "reps"}]}]}.

    Returns None only when there is no plan at all (`value is None`); every other
    input, however malformed, yields a plan made of safe defaults. Extra keys
    are dropped at every level.
    """
    if value is None:
        return None
    plan = _as_dict(value)
    return {
        "schedule": [_to_text(day, DEFAULT_SCHEDULE_DAY) for day in _as_list(plan.get("schedule"))],
        "exercises": [coerce_exercise_day(e) for e in _as_list(plan.get("exercises"))],
    }


def _coerce_foods(raw: Any) -> List[str]:
    foods: List[str] = []
    for item in _as_list(raw):
        if isinstance(item, bool):
            continue
        if isinstance(item, (int, float)):
            foods.append(str(item))
        elif isinstance(item, str) and item.strip():
            foods.append(item.strip())
    return foods


def coerce_meal(raw: Any) -> Dict[str, Any]:
    meal = _as_dict(raw)
    return {
        "name": _to_text(meal.get("name"), DEFAULT_MEAL_NAME),
        "foods": _coerce_foods(meal.get("foods")),
    }


def coerce_diet_plan(value: Any) -> Optional[Dict[str, Any]]:
    """Force a model-produced diet plan into {"dailyCalories": int, "meals": [{"name", "foods"}]}."""
    if value is None:
        return None
    plan = _as_dict(value)
    return {
        "dailyCalories": to_int(plan.get("dailyCalories"), DEFAULT_DAILY_CALORIES, minimum=0),
        "meals": [coerce_meal(m) for m in _as_list(plan.get("meals"))],
    }
