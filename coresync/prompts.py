from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

NOT_SPECIFIED = "not specified"
COACH_NAME = "CoreSync"


@dataclass(frozen=True)
class UserProfile:
    """User attributes collected during intake (all free text as spoken/typed)."""

    age: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    injuries: Optional[str] = None
    workout_days: Optional[str] = None
    fitness_goal: Optional[str] = None
    fitness_level: Optional[str] = None
    dietary_restrictions: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserProfile":
        fields = {}
        for name in cls.__dataclass_fields__:
            value = data.get(name)
            fields[name] = None if value is None else str(value).strip() or None
        return cls(**fields)


def _show(value: Optional[str]) -> str:
    return value if value else NOT_SPECIFIED


WORKOUT_PROMPT_TEMPLATE = """You are an experienced fitness coach creating a personalized workout plan based on:
Age: {age}
Height: {height}
Weight: {weight}
Injuries or limitations: {injuries}
Available days for workout: {workout_days}
Fitness goal: {fitness_goal}
Fitness level: {fitness_level}

As a professional coach:
- Consider muscle group splits to avoid overtraining the same muscles on consecutive days
- Design exercises that match the fitness level and account for any injuries
- Structure the workouts to specifically target the user's fitness goal
- Schedule exactly as many training days as the user has available

CRITICAL SCHEMA INSTRUCTIONS:
- Your output MUST contain ONLY the fields specified below, NO ADDITIONAL FIELDS
- "sets" and "reps" MUST ALWAYS be NUMBERS, never strings
- For example: "sets": 3, "reps": 10
- Do NOT use text like "reps": "As many as possible" or "reps": "To failure"
- Instead use specific numbers like "reps": 12 or "reps": 15
- For cardio, use "sets": 1, "reps": 1 or another appropriate number
- NEVER include strings for numerical fields
- NEVER add extra fields not shown in the example below

Return a JSON object with this EXACT structure:
{{
  "schedule": ["Monday", "Wednesday", "Friday"],
  "exercises": [
    {{
      "day": "Monday",
      "routines": [
        {{
          "name": "Barbell Back Squat",
          "sets": 4,
          "reps": 8
        }},
        {{
          "name": "Dumbbell Bench Press",
          "sets": 3,
          "reps": 10
        }}
      ]
    }}
  ]
}}

DO NOT add any fields that are not in this example.
Your response must be a valid JSON object with no additional text."""


DIET_PROMPT_TEMPLATE = """You are an experienced nutrition coach creating a personalized diet plan based on:
Age: {age}
Height: {height}
Weight: {weight}
Fitness goal: {fitness_goal}
Dietary restrictions: {dietary_restrictions}

As a professional nutrition coach:
- Calculate appropriate daily calorie intake based on the person's stats and goals
- Create a balanced meal plan with proper macronutrient distribution
- Include a variety of nutrient-dense foods while respecting dietary restrictions
- Consider meal timing around workouts for optimal performance and recovery

CRITICAL SCHEMA INSTRUCTIONS:
- Your output MUST contain ONLY the fields specified below, NO ADDITIONAL FIELDS
- "dailyCalories" MUST be a NUMBER, not a string
- Every entry in "foods" MUST be a plain string
- DO NOT add fields like "supplements", "macros", "notes", or ANYTHING else
- ONLY include the EXACT fields shown in the example below

Return a JSON object with this EXACT structure and no other fields:
{{
  "dailyCalories": 2200,
  "meals": [
    {{
      "name": "Breakfast",
      "foods": ["Oatmeal with berries", "Greek yogurt", "Black coffee"]
    }},
    {{
      "name": "Lunch",
      "foods": ["Grilled chicken salad", "Whole grain bread", "Water"]
    }}
  ]
}}

DO NOT add any fields that are not in this example.
Your response must be a valid JSON object with no additional text."""


def build_workout_prompt(profile: UserProfile) -> str:
    return WORKOUT_PROMPT_TEMPLATE.format(
        age=_show(profile.age),
        height=_show(profile.height),
        weight=_show(profile.weight),
        injuries=_show(profile.injuries),
        workout_days=_show(profile.workout_days),
        fitness_goal=_show(profile.fitness_goal),
        fitness_level=_show(profile.fitness_level),
    )


def build_diet_prompt(profile: UserProfile) -> str:
    return DIET_PROMPT_TEMPLATE.format(
        age=_show(profile.age),
        height=_show(profile.height),
        weight=_show(profile.weight),
        fitness_goal=_show(profile.fitness_goal),
        dietary_restrictions=_show(profile.dietary_restrictions),
    )


CHAT_PROMPT_TEMPLATE = """You are {coach}, an elite fitness and nutrition intake coach.

Your job in this chat is ONLY to collect information:
- training goals, current fitness level, age, height and weight
- how many days per week they can train and which days
- injuries or physical limitations
- available equipment
- dietary preferences and restrictions
Ask one or two short clarifying questions at a time. Keep replies under 120 words and do not use markdown tables.

You MUST NOT share plan details in the chat. Never mention exercises with sets or reps, calorie targets,
or meals with quantities in "reply". The finished workout and diet plan live on the user's profile page;
when the plan is ready, tell the user it is saved there.

When, and only when, you have enough information, set "planReady" to true and fill in "workoutPlan" and "dietPlan".

Conversation so far:
{conversation}

Respond with ONLY a JSON object in this exact shape and nothing else:
{{
  "reply": "what you say to the user (no plan specifics)",
  "planReady": false,
  "planName": "short plan title, or empty string",
  "workoutPlan": null,
  "dietPlan": null
}}

When "planReady" is true:
- "workoutPlan" MUST be {{"schedule": ["Monday", ...], "exercises": [{{"day": "Monday", "routines": [{{"name": "Exercise Name", "sets": 3, "reps": 10}}]}}]}}
- "dietPlan" MUST be {{"dailyCalories": 2000, "meals": [{{"name": "Breakfast", "foods": ["Oatmeal"]}}]}}
- "sets", "reps" and "dailyCalories" MUST be NUMBERS, never strings
- Do NOT add any fields beyond the ones shown."""


def format_transcript(messages: Sequence[Mapping[str, Any]]) -> str:
    lines: List[str] = []
    for msg in messages:
        speaker = "Coach" if msg.get("role") == "assistant" else "User"
        lines.append(f"{speaker}: {msg.get('content', '')}")
    return "\n".join(lines)


def build_chat_prompt(messages: Sequence[Mapping[str, Any]]) -> str:
    """System prompt for one chat turn: persona, intake rules, transcript and response contract."""
    return CHAT_PROMPT_TEMPLATE.format(
        coach=COACH_NAME,
        conversation=format_transcript(messages),
    )


def profile_summary(profile: UserProfile) -> Dict[str, str]:
    """Attributes as they appear in the prompts, for logging."""
    return {name: _show(getattr(profile, name)) for name in profile.__dataclass_fields__}
