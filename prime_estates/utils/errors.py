"""Error handling utilities."""

from typing import Optional


class PrimeEstatesError(Exception):
    """Base exception for the listing store."""
    pass


class ValidationError(PrimeEstatesError):
    """Listing input failed required-field or type checks."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class NetworkError(PrimeEstatesError):
    """Backend unreachable or request timed out."""

    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"

    def __init__(self, message: str, reason: str = UNREACHABLE):
        super().__init__(message)
        self.reason = reason


class ProtocolError(PrimeEstatesError):
    """Backend response did not have the expected shape."""
    pass


class NotFoundError(PrimeEstatesError):
    """Listing does not exist."""

    def __init__(self, listing_id: str, message: Optional[str] = None):
        super().__init__(message or f"Listing not found: {listing_id}")
        self.listing_id = listing_id


class ServerRejectedError(PrimeEstatesError):
    """Backend answered a well-formed request with an error status."""

    def __init__(self, status_code: int, detail: str = ""):
        message = f"Backend rejected request ({status_code})"
        super().__init__(f"{message}: {detail}" if detail else message)
        self.status_code = status_code
        self.detail = detail


class RemoteValidationError(ServerRejectedError, ValidationError):
    """Backend rejected the listing payload (400/422)."""

    def __init__(self, status_code: int, detail: str = ""):
        ServerRejectedError.__init__(self, status_code, detail)
        self.errors = {}


class MutationError(PrimeEstatesError):
    """A create, update or delete failed in transport; state was left untouched."""

    def __init__(self, action: str, cause: PrimeEstatesError):
        self.action = action
        self.notice = f"Error {action}."
        self.cause = cause
        super().__init__(f"{self.notice} {cause}")
