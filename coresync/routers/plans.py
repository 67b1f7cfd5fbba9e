from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from .. import schemas
from ..chat import resolve_user_id
from ..deps import get_session_user_id, get_store
from ..errors import BadRequest
from ..store import PlanStore

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("/active", response_model=schemas.ActivePlanOut)
def get_active_plan(
    userId: Optional[str] = None,
    store: PlanStore = Depends(get_store),
    session_user_id: Optional[str] = Depends(get_session_user_id),
):
    user_id = resolve_user_id(session_user_id, userId)
    if user_id is None:
        raise BadRequest("userId is required")
    return {"plan": store.get_active_plan(user_id)}
