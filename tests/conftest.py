import base64
import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from svix.webhooks import Webhook

from coresync.config import Settings
from coresync.errors import PersistenceFailure
from coresync.main import create_app

WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"coresync-test-signing-secret").decode()


class FakeLanguageModel:
    """Returns queued replies in order and records every prompt."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    def generate(self, prompt, json_mode=False):
        self.calls.append({"prompt": prompt, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


class FakeStore:
    def __init__(self, fail_create=False, fail_sync=False):
        self.fail_create = fail_create
        self.fail_sync = fail_sync
        self.synced = []
        self.plans = []

    def sync_user(self, name, email, clerk_id, image=None):
        if self.fail_sync:
            raise PersistenceFailure("Failed to sync user")
        self.synced.append({"name": name, "email": email, "clerk_id": clerk_id, "image": image})

    def create_plan(self, user_id, name, workout_plan, diet_plan, is_active=True):
        if self.fail_create:
            raise PersistenceFailure("store unavailable")
        plan_id = f"plan_{len(self.plans) + 1}"
        if is_active:
            for plan in self.plans:
                if plan["userId"] == user_id:
                    plan["isActive"] = False
        self.plans.append(
            {
                "id": plan_id,
                "userId": user_id,
                "name": name,
                "isActive": is_active,
                "workoutPlan": workout_plan,
                "dietPlan": diet_plan,
            }
        )
        return plan_id

    def get_active_plan(self, user_id):
        for plan in reversed(self.plans):
            if plan["userId"] == user_id and plan["isActive"]:
                return plan
        return None


WORKOUT_PLAN = {
    "schedule": ["Monday", "Wednesday", "Friday"],
    "exercises": [
        {
            "day": "Monday",
            "routines": [
                {"name": "Squat", "sets": 4, "reps": 8},
                {"name": "Bench Press", "sets": 3, "reps": 10},
            ],
        }
    ],
}

DIET_PLAN = {
    "dailyCalories": 2400,
    "meals": [
        {"name": "Breakfast", "foods": ["Oatmeal", "Eggs"]},
        {"name": "Dinner", "foods": ["Salmon", "Rice"]},
    ],
}


def model_reply(reply="Thanks! Your plan is ready on your profile page.", plan_ready=False, **extra):
    payload = {
        "reply": reply,
        "planReady": plan_ready,
        "planName": extra.pop("planName", ""),
        "workoutPlan": extra.pop("workoutPlan", None),
        "dietPlan": extra.pop("dietPlan", None),
    }
    payload.update(extra)
    return json.dumps(payload)


def signed_headers(body, secret=WEBHOOK_SECRET, msg_id="msg_2abc"):
    now = datetime.now(tz=timezone.utc)
    signature = Webhook(secret).sign(msg_id, now, body)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(now.timestamp())),
        "svix-signature": signature,
    }


@pytest.fixture
def settings():
    return Settings(
        clerk_webhook_secret=WEBHOOK_SECRET,
        openai_api_key="sk-test",
        log_level="DEBUG",
    )


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def make_client(settings, fake_store):
    """Factory for a started TestClient wired to fakes."""
    clients = []

    def _make(language_model=None, store=None, **overrides):
        app = create_app(
            replace(settings, **overrides),
            store=store if store is not None else fake_store,
            language_model=language_model,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
