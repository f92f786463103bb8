"""Domain errors raised by the tip workflow and their JSON payload."""
from typing import Any


def error_response(message: str) -> dict[str, Any]:
    """Return the error payload sent back to clients."""

    return {"error": message}


class TunelyError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TunelyError):
    status_code = 401
    default_message = "Invalid or missing token"


class OutOfRangeAmount(TunelyError):
    status_code = 400
    default_message = "Tip amount is out of range"


class ArtistNotFound(TunelyError):
    status_code = 404
    default_message = "Artist not found"


class ArtistNotOnboarded(TunelyError):
    status_code = 400
    default_message = "Artist has not connected their Stripe account"


class ArtistNotChargeable(TunelyError):
    status_code = 400
    default_message = "Artist account is not ready to accept payments"


class SessionNotFound(TunelyError):
    status_code = 404
    default_message = "Session not found"


class QueueEntryNotFound(TunelyError):
    status_code = 404
    default_message = "Queue entry not found"


class SignatureInvalid(TunelyError):
    status_code = 400
    default_message = "Invalid signature"


class PersistenceFailure(TunelyError):
    """Local bookkeeping failed after Stripe already accepted the request.

    Never surfaced to the caller; logged for manual reconciliation.
    """

    default_message = "Failed to store payment"
