from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from .. import schemas
from ..chat import ChatOrchestrator
from ..deps import get_chat_orchestrator, get_session_user_id

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chatbot", response_model=schemas.ChatResponse)
def chatbot(
    payload: schemas.ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
    session_user_id: Optional[str] = Depends(get_session_user_id),
):
    result = orchestrator.handle(
        [m.model_dump() for m in payload.messages],
        session_user_id=session_user_id,
        user_id=payload.userId,
        user_name=payload.userName,
    )
    return result.to_response()
