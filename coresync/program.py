from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

from .coercion import coerce_diet_plan, coerce_workout_plan
from .errors import BadRequest, Misconfigured, UpstreamError
from .llm import LanguageModel
from .parsing import extract_json_object
from .prompts import UserProfile, build_diet_prompt, build_workout_prompt, profile_summary
from .store import PlanStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedProgram:
    plan_id: str
    workout_plan: Dict[str, Any]
    diet_plan: Dict[str, Any]

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "data": {
                "planId": self.plan_id,
                "workoutPlan": self.workout_plan,
                "dietPlan": self.diet_plan,
            },
        }


class ProgramGenerator:
    """Generates and stores a full plan from the attributes the voice assistant collected."""

    def __init__(self, language_model: Optional[LanguageModel], store: PlanStore) -> None:
        self.language_model = language_model
        self.store = store

    def generate(
        self,
        user_id: Optional[str],
        profile: UserProfile,
        today: Optional[date] = None,
    ) -> GeneratedProgram:
        if self.language_model is None:
            raise Misconfigured("OPENAI_API_KEY is not configured")
        if not user_id or not str(user_id).strip():
            raise BadRequest("user_id is required")
        user_id = str(user_id).strip()

        logger.debug("Generating program for %s: %s", user_id, profile_summary(profile))

        workout_plan = self._generate_part(build_workout_prompt(profile), coerce_workout_plan, "workout")
        diet_plan = self._generate_part(build_diet_prompt(profile), coerce_diet_plan, "diet")

        goal = profile.fitness_goal or "Fitness"
        name = f"{goal} Plan - {(today or date.today()).isoformat()}"
        plan_id = self.store.create_plan(
            user_id=user_id,
            name=name,
            workout_plan=workout_plan,
            diet_plan=diet_plan,
            is_active=True,
        )
        logger.info("Saved generated plan %s for %s", plan_id, user_id)
        return GeneratedProgram(plan_id=plan_id, workout_plan=workout_plan, diet_plan=diet_plan)

    def _generate_part(
        self,
        prompt: str,
        coerce: Callable[[Any], Optional[Dict[str, Any]]],
        label: str,
    ) -> Dict[str, Any]:
        try:
            raw = self.language_model.generate(prompt, json_mode=True)
        except Exception as exc:
            logger.exception("Language model call for %s plan failed", label)
            raise UpstreamError(f"Failed to generate the {label} plan") from exc

        extraction = extract_json_object(raw)
        if not extraction.found:
            logger.warning("Model returned no JSON object for the %s plan", label)
            raise UpstreamError(f"The language model returned an invalid {label} plan")

        plan = coerce(extraction.payload)
        if plan is None:
            raise UpstreamError(f"The language model returned an invalid {label} plan")
        return plan
