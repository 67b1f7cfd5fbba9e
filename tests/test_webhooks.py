"""Clerk webhook verification, event mapping and the /clerk-webhook endpoint."""

import asyncio
import json

import pytest

from conftest import WEBHOOK_SECRET, FakeStore, signed_headers
from coresync.errors import InvalidSignature, Misconfigured
from coresync.webhooks import WebhookVerifier, handle_clerk_event, user_sync_from_event


def _user_event(event_type="user.created", **data):
    user = {
        "id": "user_123",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "image_url": "https://img.example/ada.png",
        "primary_email_address_id": "idn_2",
        "email_addresses": [
            {"id": "idn_1", "email_address": "old@example.com"},
            {"id": "idn_2", "email_address": "ada@example.com"},
        ],
    }
    user.update(data)
    return {"type": event_type, "object": "event", "data": user}


# ============================================================================
# Event mapping
# ============================================================================

class TestUserSyncMapping:

    def test_primary_email_wins(self):
        sync = user_sync_from_event(_user_event())
        assert sync.name == "Ada Lovelace"
        assert sync.email == "ada@example.com"
        assert sync.clerk_id == "user_123"
        assert sync.image == "https://img.example/ada.png"

    def test_falls_back_to_first_address(self):
        sync = user_sync_from_event(_user_event(primary_email_address_id="idn_missing"))
        assert sync.email == "old@example.com"

    def test_no_addresses_gives_empty_email(self):
        sync = user_sync_from_event(_user_event(email_addresses=[]))
        assert sync.email == ""
        sync = user_sync_from_event(_user_event(email_addresses=None))
        assert sync.email == ""

    def test_name_drops_empty_parts_and_image_may_be_absent(self):
        sync = user_sync_from_event(_user_event("user.updated", first_name="Ada", last_name=None, image_url=""))
        assert sync.name == "Ada"
        assert sync.image is None

    @pytest.mark.parametrize("event_type", ["session.created", "user.deleted", "email.created", None])
    def test_other_events_are_ignored(self, event_type):
        assert user_sync_from_event(_user_event(event_type)) is None

    def test_handle_clerk_event_calls_sync_once(self):
        store = FakeStore()
        assert handle_clerk_event(_user_event(), store) is True
        assert store.synced == [
            {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "clerk_id": "user_123",
                "image": "https://img.example/ada.png",
            }
        ]
        assert handle_clerk_event(_user_event("session.ended"), store) is False
        assert len(store.synced) == 1


# ============================================================================
# Signature verification
# ============================================================================

class TestWebhookVerifier:

    def test_valid_signature_returns_decoded_event(self):
        body = json.dumps(_user_event())
        event = WebhookVerifier(WEBHOOK_SECRET).verify(signed_headers(body), body.encode())
        assert event == _user_event()

    def test_header_names_are_case_insensitive(self):
        body = json.dumps(_user_event())
        headers = {k.upper(): v for k, v in signed_headers(body).items()}
        assert WebhookVerifier(WEBHOOK_SECRET).verify(headers, body.encode())["data"]["id"] == "user_123"

    @pytest.mark.parametrize("missing", ["svix-id", "svix-timestamp", "svix-signature"])
    def test_missing_header_is_invalid(self, missing):
        body = json.dumps(_user_event())
        headers = signed_headers(body)
        del headers[missing]
        with pytest.raises(InvalidSignature):
            WebhookVerifier(WEBHOOK_SECRET).verify(headers, body.encode())

    def test_tampered_body_is_invalid(self):
        body = json.dumps(_user_event())
        headers = signed_headers(body)
        with pytest.raises(InvalidSignature):
            WebhookVerifier(WEBHOOK_SECRET).verify(headers, body.replace("Ada", "Eve").encode())

    def test_signed_non_object_body_is_invalid(self):
        body = json.dumps(["user.created"])
        with pytest.raises(InvalidSignature):
            WebhookVerifier(WEBHOOK_SECRET).verify(signed_headers(body), body.encode())

    def test_missing_secret_is_misconfigured(self):
        body = json.dumps(_user_event())
        with pytest.raises(Misconfigured):
            WebhookVerifier(None).verify(signed_headers(body), body.encode())


# ============================================================================
# Endpoint
# ============================================================================

class TestClerkWebhookEndpoint:

    def test_user_created_syncs_user(self, make_client, fake_store):
        client = make_client()
        body = json.dumps(_user_event())
        resp = client.post("/clerk-webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 200
        assert resp.text == "ok"
        assert len(fake_store.synced) == 1
        assert fake_store.synced[0]["email"] == "ada@example.com"

    @pytest.mark.parametrize("missing", ["svix-id", "svix-timestamp", "svix-signature"])
    def test_missing_headers_return_400_without_mutation(self, make_client, fake_store, missing):
        client = make_client()
        body = json.dumps(_user_event())
        headers = signed_headers(body)
        del headers[missing]
        resp = client.post("/clerk-webhook", content=body, headers=headers)
        assert resp.status_code == 400
        assert fake_store.synced == []

    def test_bad_signature_returns_400(self, make_client, fake_store):
        client = make_client()
        body = json.dumps(_user_event())
        headers = signed_headers(body)
        headers["svix-signature"] = "v1,AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA="
        resp = client.post("/clerk-webhook", content=body, headers=headers)
        assert resp.status_code == 400
        assert fake_store.synced == []

    def test_unset_secret_returns_500(self, make_client, fake_store):
        client = make_client(clerk_webhook_secret=None)
        body = json.dumps(_user_event())
        resp = client.post("/clerk-webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 500
        assert "CLERK_WEBHOOK_SECRET" in resp.text
        assert fake_store.synced == []

    def test_unhandled_event_type_is_ok(self, make_client, fake_store):
        client = make_client()
        body = json.dumps({"type": "session.created", "data": {"id": "sess_1"}})
        resp = client.post("/clerk-webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 200
        assert fake_store.synced == []

    def test_store_failure_returns_500(self, make_client):
        client = make_client(store=FakeStore(fail_sync=True))
        body = json.dumps(_user_event())
        resp = client.post("/clerk-webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 500

    def test_store_call_runs_off_the_event_loop(self, make_client):
        class LoopCheckingStore(FakeStore):
            def sync_user(self, name, email, clerk_id, image=None):
                try:
                    asyncio.get_running_loop()
                    self.on_event_loop = True
                except RuntimeError:
                    self.on_event_loop = False
                super().sync_user(name, email, clerk_id, image)

        store = LoopCheckingStore()
        client = make_client(store=store)
        body = json.dumps(_user_event())
        resp = client.post("/clerk-webhook", content=body, headers=signed_headers(body))
        assert resp.status_code == 200
        assert store.on_event_loop is False
        assert len(store.synced) == 1
