"""
Value objects shared by the signing and verification paths.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .constants import PUBLIC_REJECT_MESSAGE


class ProtocolVersion(str, Enum):
    """
    Header protocol generation spoken by the gateway.

    V1 signs a bare host and path with an ISO-8601 timestamp and hex
    encodings. V2 signs a scheme-qualified host and "METHOD path" with an
    RFC-1123 GMT timestamp, a base64 signature and a "SHA-256=" base64 digest.
    """
    V1 = "v1"
    V2 = "v2"


class RejectReason(str, Enum):
    """Diagnostic codes for rejected verifications. Logged, never returned to callers."""
    MISSING_HEADERS = "missing_headers"
    MALFORMED_HEADERS = "malformed_headers"
    STALE_OR_FUTURE_TIMESTAMP = "stale_or_future_timestamp"
    UNKNOWN_MERCHANT = "unknown_merchant"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_DIGEST = "invalid_digest"
    REPLAYED = "replayed"


@dataclass(frozen=True)
class SigningContext:
    """The five values joined into the signature string, in signing order."""
    timestamp: str
    host: str
    target_api: str
    merchant_id: str
    api_key: str


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying one inbound request."""
    accepted: bool
    merchant_id: Optional[str] = None
    reason: Optional[RejectReason] = None

    @property
    def http_status(self) -> int:
        return 200 if self.accepted else 401

    @property
    def public_message(self) -> str:
        """Message safe to return to the caller; identical for every rejection."""
        return "OK" if self.accepted else PUBLIC_REJECT_MESSAGE

    def __bool__(self):
        return self.accepted


@dataclass(frozen=True)
class CallbackAck:
    """Acknowledgement for an IPN callback. The gateway always gets a 200."""
    authentic: bool
    processed: bool
    reason: Optional[RejectReason] = None
    ack_always: bool = True

    @property
    def http_status(self) -> int:
        return 200


@dataclass
class GatewayError:
    status_code: int
    status_text: str
    message: str
    reason: str


@dataclass
class GatewayResult:
    """Uniform result of an upstream gateway call."""
    success: bool
    data: Optional[Any] = None
    error: Optional[GatewayError] = None
    headers: Dict[str, str] = field(default_factory=dict)
