from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .. import schemas
from ..config import Settings
from ..deps import get_program_generator, get_settings
from ..errors import CoreSyncError
from ..program import ProgramGenerator
from ..prompts import UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vapi", tags=["vapi"])


@router.post("/generate-program", response_model=schemas.GenerateProgramResponse)
def generate_program(
    payload: schemas.ProgramRequest,
    generator: ProgramGenerator = Depends(get_program_generator),
):
    try:
        program = generator.generate(
            payload.user_id,
            UserProfile.from_mapping(payload.model_dump()),
        )
    except CoreSyncError as exc:
        return JSONResponse({"success": False, "error": exc.message}, status_code=exc.status_code)
    except Exception:
        logger.exception("Unexpected failure generating program for %s", payload.user_id)
        return JSONResponse({"success": False, "error": "Failed to generate program"}, status_code=500)
    return program.to_response()


@router.get("/assistant", response_model=schemas.AssistantConfigOut)
def assistant_config(
    fullName: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """What the browser needs to start a voice intake call."""
    full_name = fullName.strip() if fullName and fullName.strip() else "Friend"
    return {
        "assistantId": settings.vapi_assistant_id,
        "variableValues": {"full_name": full_name},
    }
