from __future__ import annotations


class CoreSyncError(Exception):
    """Base error; `status_code` is the HTTP status the request fails with."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Misconfigured(CoreSyncError):
    """A required secret or API key is not configured."""

    status_code = 500


class BadRequest(CoreSyncError):
    status_code = 400


class InvalidSignature(CoreSyncError):
    """Webhook signature envelope missing or not verifiable."""

    status_code = 400


class UpstreamError(CoreSyncError):
    """The language model call failed or produced nothing usable."""

    status_code = 500


class PersistenceFailure(CoreSyncError):
    """The plan store rejected or failed a read/write."""

    status_code = 500
