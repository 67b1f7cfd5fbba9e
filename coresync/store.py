from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from . import models
from .database import create_db_engine, create_session_factory
from .errors import PersistenceFailure

logger = logging.getLogger(__name__)


class PlanStore(Protocol):
    """The users/plans gateway every handler talks to."""

    def sync_user(self, name: str, email: str, clerk_id: str, image: Optional[str] = None) -> None:
        ...

    def create_plan(
        self,
        user_id: str,
        name: str,
        workout_plan: Dict[str, Any],
        diet_plan: Dict[str, Any],
        is_active: bool = True,
    ) -> str:
        ...

    def get_active_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...


def _deserialize(data_json: Optional[str]) -> Dict[str, Any]:
    if not data_json:
        return {}
    try:
        return json.loads(data_json)
    except json.JSONDecodeError:
        return {}


def plan_to_dict(plan: models.Plan) -> Dict[str, Any]:
    return {
        "id": str(plan.id),
        "userId": plan.user_id,
        "name": plan.name,
        "isActive": bool(plan.is_active),
        "workoutPlan": _deserialize(plan.workout_plan_json),
        "dietPlan": _deserialize(plan.diet_plan_json),
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
    }


class SqlPlanStore:
    """PlanStore backed by a SQL database through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker, engine: Optional[Engine] = None) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlPlanStore":
        engine = create_db_engine(database_url)
        return cls(create_session_factory(engine), engine=engine)

    def sync_user(self, name: str, email: str, clerk_id: str, image: Optional[str] = None) -> None:
        try:
            with self._session_factory() as db:
                user = db.query(models.User).filter(models.User.clerk_id == clerk_id).first()
                if user is None:
                    user = models.User(clerk_id=clerk_id)
                    db.add(user)
                user.name = name
                user.email = email
                user.image = image
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to sync user {clerk_id}") from exc

    def create_plan(
        self,
        user_id: str,
        name: str,
        workout_plan: Dict[str, Any],
        diet_plan: Dict[str, Any],
        is_active: bool = True,
    ) -> str:
        try:
            with self._session_factory() as db:
                if is_active:
                    # Only one plan per user is current.
                    db.query(models.Plan).filter(
                        models.Plan.user_id == user_id,
                        models.Plan.is_active.is_(True),
                    ).update({models.Plan.is_active: False}, synchronize_session=False)

                plan = models.Plan(
                    user_id=user_id,
                    name=name,
                    is_active=is_active,
                    workout_plan_json=json.dumps(workout_plan),
                    diet_plan_json=json.dumps(diet_plan),
                )
                db.add(plan)
                db.commit()
                db.refresh(plan)
                return str(plan.id)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to create plan for {user_id}") from exc

    def get_active_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            with self._session_factory() as db:
                plan = (
                    db.query(models.Plan)
                    .filter(models.Plan.user_id == user_id, models.Plan.is_active.is_(True))
                    .order_by(models.Plan.id.desc())
                    .first()
                )
                return plan_to_dict(plan) if plan else None
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to load active plan for {user_id}") from exc

    def get_user(self, clerk_id: str) -> Optional[Dict[str, Any]]:
        try:
            with self._session_factory() as db:
                user = db.query(models.User).filter(models.User.clerk_id == clerk_id).first()
                if user is None:
                    return None
                return {
                    "clerkId": user.clerk_id,
                    "name": user.name,
                    "email": user.email,
                    "image": user.image,
                }
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to load user {clerk_id}") from exc

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
