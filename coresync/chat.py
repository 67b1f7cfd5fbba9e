from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .coercion import coerce_diet_plan, coerce_workout_plan
from .errors import BadRequest, Misconfigured, UpstreamError
from .llm import LanguageModel
from .parsing import extract_json_object
from .prompts import build_chat_prompt
from .reply_filter import ReplyFilter
from .store import PlanStore

logger = logging.getLogger(__name__)

CHAT_ROLES = frozenset({"user", "assistant"})


@dataclass(frozen=True)
class ChatResult:
    reply: str
    plan_saved: bool = False
    plan_id: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        return {"reply": self.reply, "planSaved": self.plan_saved, "planId": self.plan_id}


def validate_messages(messages: Any) -> List[Dict[str, str]]:
    """Return a clean transcript or raise BadRequest."""
    if not isinstance(messages, list) or not messages:
        raise BadRequest("messages must be a non-empty array")

    transcript: List[Dict[str, str]] = []
    for msg in messages:
        if not isinstance(msg, dict):
            raise BadRequest("each message must be an object with role and content")
        role = msg.get("role")
        content = msg.get("content")
        if role not in CHAT_ROLES:
            raise BadRequest("message role must be 'user' or 'assistant'")
        if not isinstance(content, str):
            raise BadRequest("message content must be a string")
        transcript.append({"role": role, "content": content})
    return transcript


def resolve_user_id(session_user_id: Optional[str], user_id: Optional[str]) -> Optional[str]:
    """The authenticated session wins over a caller-supplied id; either may be absent."""
    for candidate in (session_user_id, user_id):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _plan_ready(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def plan_name_for(plan_name: Any, user_name: Optional[str], today: Optional[date] = None) -> str:
    if isinstance(plan_name, str) and plan_name.strip():
        return plan_name.strip()
    stamp = (today or date.today()).isoformat()
    if user_name and user_name.strip():
        return f"{user_name.strip()} Plan - {stamp}"
    return f"Personalized Plan - {stamp}"


class ChatOrchestrator:
    """
    One intake-chat turn: prompt the model with the transcript, recover its
    structured reply, save a plan when intake is complete, and keep plan
    details out of the text sent back to the user.
    """

    def __init__(
        self,
        language_model: Optional[LanguageModel],
        store: PlanStore,
        reply_filter: Optional[ReplyFilter] = None,
    ) -> None:
        self.language_model = language_model
        self.store = store
        self.reply_filter = reply_filter or ReplyFilter()

    def handle(
        self,
        messages: Sequence[Any],
        session_user_id: Optional[str] = None,
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> ChatResult:
        if self.language_model is None:
            raise Misconfigured("OPENAI_API_KEY is not configured")

        transcript = validate_messages(messages)
        acting_user = resolve_user_id(session_user_id, user_id)

        raw = self._ask_model(build_chat_prompt(transcript))

        extraction = extract_json_object(raw)
        if not extraction.found:
            logger.info("Model reply was not structured JSON; using it as plain text")
            reply_text = raw
            plan_id = None
        else:
            payload = extraction.payload or {}
            reply = payload.get("reply")
            reply_text = reply if isinstance(reply, str) else ""
            plan_id = self._maybe_save_plan(payload, acting_user, user_name)

        plan_saved = plan_id is not None
        return ChatResult(
            reply=self.reply_filter.sanitize(reply_text, plan_saved),
            plan_saved=plan_saved,
            plan_id=plan_id,
        )

    def _ask_model(self, prompt: str) -> str:
        try:
            raw = self.language_model.generate(prompt)
        except Exception as exc:
            logger.exception("Language model call failed")
            raise UpstreamError("Failed to contact the language model") from exc
        if not raw or not raw.strip():
            raise UpstreamError("The language model returned an empty response")
        return raw

    def _maybe_save_plan(
        self,
        payload: Dict[str, Any],
        acting_user: Optional[str],
        user_name: Optional[str],
    ) -> Optional[str]:
        if not _plan_ready(payload.get("planReady")):
            return None
        if payload.get("workoutPlan") is None or payload.get("dietPlan") is None:
            logger.info("Model marked the plan ready without both sub-plans")
            return None
        if acting_user is None:
            # Plans are never stored for anonymous chats.
            logger.info("Plan ready but no user id; not saving")
            return None

        workout_plan = coerce_workout_plan(payload.get("workoutPlan"))
        diet_plan = coerce_diet_plan(payload.get("dietPlan"))
        if workout_plan is None or diet_plan is None:
            return None

        try:
            plan_id = self.store.create_plan(
                user_id=acting_user,
                name=plan_name_for(payload.get("planName"), user_name),
                workout_plan=workout_plan,
                diet_plan=diet_plan,
                is_active=True,
            )
        except Exception:
            # The reply still goes out, with planSaved false.
            logger.exception("Failed to save plan for %s", acting_user)
            return None

        logger.info("Saved plan %s for %s", plan_id, acting_user)
        return plan_id
