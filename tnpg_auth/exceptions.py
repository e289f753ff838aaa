"""
Custom exceptions for the TNPG authentication library.
"""

from .models import RejectReason


class TNPGAuthError(Exception):
    """Base exception for TNPG authentication errors."""
    pass


class ConfigurationError(TNPGAuthError):
    """Raised when merchant credentials or settings are missing or invalid."""
    pass


class MissingFieldError(TNPGAuthError):
    """Raised when a signature-string field is empty."""

    def __init__(self, field_name: str):
        super().__init__(f"{field_name} is required to build the signature string")
        self.field_name = field_name


class MalformedFieldError(TNPGAuthError):
    """Raised when a signature-string field contains the delimiter."""

    def __init__(self, field_name: str):
        super().__init__(f"{field_name} must not contain the '|' delimiter")
        self.field_name = field_name


class SigningError(TNPGAuthError):
    """Raised when a signature or digest cannot be computed."""
    pass


class VerificationError(TNPGAuthError):
    """Base class for rejections of an inbound request."""
    reason = None


class MissingHeaders(VerificationError):
    """Raised when required authentication headers are absent or empty."""
    reason = RejectReason.MISSING_HEADERS


class MalformedHeaders(VerificationError):
    """Raised when an authentication header cannot be part of a signature string."""
    reason = RejectReason.MALFORMED_HEADERS


class StaleOrFutureTimestamp(VerificationError):
    """Raised when the timestamp is unparseable or outside the replay window."""
    reason = RejectReason.STALE_OR_FUTURE_TIMESTAMP


class InvalidSignature(VerificationError):
    """Raised when the provided signature does not match."""
    reason = RejectReason.INVALID_SIGNATURE


class UnknownMerchant(InvalidSignature):
    """Raised when no secret is known for the asserted merchant id."""
    reason = RejectReason.UNKNOWN_MERCHANT


class InvalidDigest(VerificationError):
    """Raised when the provided body digest does not match."""
    reason = RejectReason.INVALID_DIGEST


class ReplayDetected(VerificationError):
    """Raised when a request signature has already been accepted once."""
    reason = RejectReason.REPLAYED


class HTTPError(TNPGAuthError):
    """Raised when an HTTP request to the gateway fails."""
    pass
