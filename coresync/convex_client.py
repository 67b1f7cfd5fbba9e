from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from .errors import PersistenceFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def _iso_from_millis(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()


class ConvexPlanStore:
    """
    PlanStore backed by a Convex deployment's HTTP function API.

    Each call is a single POST to `{url}/api/mutation` or `{url}/api/query` with
    `{"path": "module:function", "args": {...}, "format": "json"}`. Convex answers
    `{"status": "success", "value": ...}` or `{"status": "error", "errorMessage": ...}`.
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def _call(self, kind: str, path: str, args: Dict[str, Any]) -> Any:
        try:
            resp = self._session.post(
                f"{self.url}/api/{kind}",
                json={"path": path, "args": args, "format": "json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise PersistenceFailure(f"Plan store {kind} {path} failed") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("status") == "success":
            return payload.get("value")

        detail = payload.get("errorMessage") if isinstance(payload, dict) else None
        logger.error(
            "Plan store %s %s returned HTTP %s: %s",
            kind,
            path,
            resp.status_code,
            detail or "unexpected response",
        )
        raise PersistenceFailure(f"Plan store {kind} {path} failed")

    def sync_user(self, name: str, email: str, clerk_id: str, image: Optional[str] = None) -> None:
        args: Dict[str, Any] = {"name": name, "email": email, "clerkId": clerk_id}
        if image:
            args["image"] = image
        self._call("mutation", "users:syncUser", args)

    def create_plan(
        self,
        user_id: str,
        name: str,
        workout_plan: Dict[str, Any],
        diet_plan: Dict[str, Any],
        is_active: bool = True,
    ) -> str:
        value = self._call(
            "mutation",
            "plans:createPlan",
            {
                "userId": user_id,
                "name": name,
                "workoutPlan": workout_plan,
                "dietPlan": diet_plan,
                "isActive": is_active,
            },
        )
        if not isinstance(value, str) or not value:
            raise PersistenceFailure("Plan store did not return a plan id")
        return value

    def get_active_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        value = self._call("query", "plans:getActivePlan", {"userId": user_id})
        if not isinstance(value, dict):
            return None
        return {
            "id": value.get("_id"),
            "userId": value.get("userId"),
            "name": value.get("name"),
            "isActive": bool(value.get("isActive")),
            "workoutPlan": value.get("workoutPlan") or {},
            "dietPlan": value.get("dietPlan") or {},
            "createdAt": _iso_from_millis(value.get("_creationTime")),
        }

    def close(self) -> None:
        self._session.close()
