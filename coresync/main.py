from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, configure_logging
from .deps import build_services
from .errors import CoreSyncError
from .llm import LanguageModel
from .routers import chat, plans, vapi, webhooks
from .store import PlanStore

# Voice-assistant tool routes answer with a {success, error} envelope.
TOOL_CALL_PREFIX = "/vapi/"


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PlanStore] = None,
    language_model: Optional[LanguageModel] = None,
) -> FastAPI:
    """
    Build the API.

    The store and language model are created when the app starts serving and
    closed on shutdown. Passing them in (tests, embedding) skips construction.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = build_services(settings, store=store, language_model=language_model)
        app.state.services = services
        try:
            yield
        finally:
            services.close()

    app = FastAPI(title="coresync backend", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CoreSyncError)
    async def coresync_error_handler(request: Request, exc: CoreSyncError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        if request.url.path.startswith(TOOL_CALL_PREFIX):
            return JSONResponse({"success": False, "error": message}, status_code=400)
        return JSONResponse({"error": message}, status_code=400)

    app.include_router(webhooks.router)
    app.include_router(chat.router)
    app.include_router(vapi.router)
    app.include_router(plans.router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
