from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_VAPI_ASSISTANT_ID = "34caa6a5-e59f-4a2a-a0de-9642aabdfe48"
DEFAULT_CONVEX_URL = "https://whimsical-greyhound-498.convex.cloud"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    clerk_webhook_secret: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    vapi_assistant_id: str = DEFAULT_VAPI_ASSISTANT_ID
    convex_url: str = DEFAULT_CONVEX_URL
    database_url: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        A local .env file is loaded first (existing variables win). Blank values
        count as unset so that `KEY=` in .env does not mask a default.
        """
        load_dotenv()
        return cls(
            clerk_webhook_secret=_env("CLERK_WEBHOOK_SECRET"),
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_model=_env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            vapi_assistant_id=_env("VAPI_ASSISTANT_ID") or DEFAULT_VAPI_ASSISTANT_ID,
            convex_url=(
                _env("CONVEX_URL") or _env("NEXT_PUBLIC_CONVEX_URL") or DEFAULT_CONVEX_URL
            ),
            database_url=_env("DATABASE_URL"),
            log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        )


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
