from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from ..deps import get_store, get_webhook_verifier
from ..errors import CoreSyncError
from ..store import PlanStore
from ..webhooks import WebhookVerifier, handle_clerk_event

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post("/clerk-webhook", response_class=PlainTextResponse)
async def clerk_webhook(
    request: Request,
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    store: PlanStore = Depends(get_store),
):
    body = await request.body()
    headers = dict(request.headers)
    try:
        event = await run_in_threadpool(verifier.verify, headers, body)
        await run_in_threadpool(handle_clerk_event, event, store)
    except CoreSyncError as exc:
        logger.warning("Clerk webhook rejected (%s): %s", exc.status_code, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return PlainTextResponse("ok", status_code=200)
