from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from .chat import ChatOrchestrator
from .config import Settings
from .convex_client import ConvexPlanStore
from .llm import LanguageModel, OpenAIChatModel
from .program import ProgramGenerator
from .reply_filter import ReplyFilter
from .store import PlanStore, SqlPlanStore
from .webhooks import WebhookVerifier

logger = logging.getLogger(__name__)

SESSION_USER_HEADER = "x-clerk-user-id"


@dataclass
class AppServices:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    store: PlanStore
    language_model: Optional[LanguageModel]
    webhook_verifier: WebhookVerifier
    reply_filter: ReplyFilter = field(default_factory=ReplyFilter)

    def close(self) -> None:
        for resource in (self.store, self.language_model):
            close = getattr(resource, "close", None)
            if callable(close):
                close()


def build_store(settings: Settings) -> PlanStore:
    if settings.database_url:
        logger.info("Using SQL plan store")
        return SqlPlanStore.from_url(settings.database_url)
    logger.info("Using Convex plan store at %s", settings.convex_url)
    return ConvexPlanStore(settings.convex_url)


def build_language_model(settings: Settings) -> Optional[LanguageModel]:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; chat and plan generation are disabled")
        return None
    return OpenAIChatModel.from_api_key(settings.openai_api_key, settings.openai_model)


def build_services(
    settings: Settings,
    store: Optional[PlanStore] = None,
    language_model: Optional[LanguageModel] = None,
) -> AppServices:
    return AppServices(
        settings=settings,
        store=store if store is not None else build_store(settings),
        language_model=(
            language_model if language_model is not None else build_language_model(settings)
        ),
        webhook_verifier=WebhookVerifier(settings.clerk_webhook_secret),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_settings(services: AppServices = Depends(get_services)) -> Settings:
    return services.settings


def get_store(services: AppServices = Depends(get_services)) -> PlanStore:
    return services.store


def get_webhook_verifier(services: AppServices = Depends(get_services)) -> WebhookVerifier:
    return services.webhook_verifier


def get_chat_orchestrator(services: AppServices = Depends(get_services)) -> ChatOrchestrator:
    return ChatOrchestrator(services.language_model, services.store, services.reply_filter)


def get_program_generator(services: AppServices = Depends(get_services)) -> ProgramGenerator:
    return ProgramGenerator(services.language_model, services.store)


def get_session_user_id(request: Request) -> Optional[str]:
    """User id forwarded by the authenticating edge, if the request carries a session."""
    value = request.headers.get(SESSION_USER_HEADER)
    return value.strip() if value and value.strip() else None
