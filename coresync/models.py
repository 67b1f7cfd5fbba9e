from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from .database import Base


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    clerk_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    image = Column(String, nullable=True)


class Plan(Base, TimestampMixin):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    # Identity-provider user id, so plans can exist before the user webhook lands.
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    workout_plan_json = Column(Text, nullable=False)
    diet_plan_json = Column(Text, nullable=False)
