from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from svix.webhooks import Webhook, WebhookVerificationError

from .errors import InvalidSignature, Misconfigured
from .store import PlanStore

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")
USER_SYNC_EVENTS = frozenset({"user.created", "user.updated"})


class WebhookVerifier:
    """Checks the svix signature envelope Clerk puts on every webhook delivery."""

    def __init__(self, secret: Optional[str]) -> None:
        self._secret = secret

    def verify(self, headers: Mapping[str, str], body: bytes) -> Dict[str, Any]:
        """
        Return the decoded event, or raise.

        Raises Misconfigured when no usable secret is set and InvalidSignature when
        a signature header is missing or the body does not verify (including stale
        timestamps and non-object payloads).
        """
        if not self._secret:
            raise Misconfigured("CLERK_WEBHOOK_SECRET is not set")

        lowered = {k.lower(): v for k, v in headers.items()}
        envelope = {name: lowered.get(name) for name in SIGNATURE_HEADERS}
        if not all(envelope.values()):
            raise InvalidSignature("No svix headers found")

        try:
            webhook = Webhook(self._secret)
        except ValueError as exc:
            raise Misconfigured("CLERK_WEBHOOK_SECRET is not a valid signing secret") from exc

        try:
            webhook.verify(body, envelope)
        except (WebhookVerificationError, ValueError) as exc:
            logger.warning("Error verifying webhook %s: %s", envelope["svix-id"], exc)
            raise InvalidSignature("Error occurred") from exc

        # svix 2.x verifies without decoding.
        try:
            event = json.loads(body)
        except ValueError as exc:
            raise InvalidSignature("Error occurred") from exc
        if not isinstance(event, dict):
            raise InvalidSignature("Error occurred")
        return event


@dataclass(frozen=True)
class UserSync:
    name: str
    email: str
    clerk_id: str
    image: Optional[str] = None


def _primary_email(user: Mapping[str, Any]) -> str:
    addresses: List[Any] = [a for a in (user.get("email_addresses") or []) if isinstance(a, dict)]
    primary_id = user.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id and address.get("email_address"):
            return address["email_address"]
    if addresses and addresses[0].get("email_address"):
        return addresses[0]["email_address"]
    return ""


def user_sync_from_event(event: Mapping[str, Any]) -> Optional[UserSync]:
    """Map a Clerk event to a user sync; None for event types we do not act on."""
    if event.get("type") not in USER_SYNC_EVENTS:
        return None
    user = event.get("data")
    if not isinstance(user, dict) or not user.get("id"):
        return None

    name = " ".join(
        part.strip()
        for part in (user.get("first_name"), user.get("last_name"))
        if isinstance(part, str) and part.strip()
    )
    return UserSync(
        name=name,
        email=_primary_email(user),
        clerk_id=str(user["id"]),
        image=user.get("image_url") or None,
    )


def handle_clerk_event(event: Mapping[str, Any], store: PlanStore) -> bool:
    """Apply a verified event; returns True when a user sync was made."""
    sync = user_sync_from_event(event)
    if sync is None:
        logger.debug("Ignoring Clerk event %s", event.get("type"))
        return False
    store.sync_user(name=sync.name, email=sync.email, clerk_id=sync.clerk_id, image=sync.image)
    logger.info("Synced user %s from %s", sync.clerk_id, event.get("type"))
    return True
