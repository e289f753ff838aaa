"""
TNPG Authentication Library

Builds and verifies the X-TNPG-* HMAC-SHA256 authentication headers used by
the TNPG payment gateway, and provides a client for its payment API.

Example usage:
    from tnpg_auth import GatewayConfig, GatewayClient, PaymentOrder

    config = GatewayConfig.from_env()
    with GatewayClient(config) as client:
        result = client.create_payment_order(PaymentOrder.create("ORDER-1", 1000))
"""

from .callback import CallbackHandler, verify_then_process
from .canonical import canonical_body, signature_string
from .client import GatewayClient
from .config import GatewayConfig
from .exceptions import (
    TNPGAuthError,
    ConfigurationError,
    MissingFieldError,
    MalformedFieldError,
    SigningError,
    VerificationError,
    MissingHeaders,
    MalformedHeaders,
    StaleOrFutureTimestamp,
    InvalidSignature,
    UnknownMerchant,
    InvalidDigest,
    ReplayDetected,
    HTTPError
)
from .headers import HeaderAssembler, generate_gateway_headers
from .models import (
    CallbackAck,
    GatewayError,
    GatewayResult,
    ProtocolVersion,
    RejectReason,
    SigningContext,
    VerificationResult
)
from .nonce_cache import NonceCache
from .payloads import (
    CustomFields,
    IPNNotification,
    OrderInformation,
    PaymentInquiry,
    PaymentOrder,
    PaymentVerification,
    parse_payment_status
)
from .secret_store import SecretStore
from .signer import digest, digest_body, sign
from .verifier import Verifier, verify_request

__version__ = "1.0.0"
__all__ = [
    "CallbackHandler",
    "verify_then_process",
    "canonical_body",
    "signature_string",
    "GatewayClient",
    "GatewayConfig",
    "TNPGAuthError",
    "ConfigurationError",
    "MissingFieldError",
    "MalformedFieldError",
    "SigningError",
    "VerificationError",
    "MissingHeaders",
    "MalformedHeaders",
    "StaleOrFutureTimestamp",
    "InvalidSignature",
    "UnknownMerchant",
    "InvalidDigest",
    "ReplayDetected",
    "HTTPError",
    "HeaderAssembler",
    "generate_gateway_headers",
    "CallbackAck",
    "GatewayError",
    "GatewayResult",
    "ProtocolVersion",
    "RejectReason",
    "SigningContext",
    "VerificationResult",
    "NonceCache",
    "CustomFields",
    "IPNNotification",
    "OrderInformation",
    "PaymentInquiry",
    "PaymentOrder",
    "PaymentVerification",
    "parse_payment_status",
    "SecretStore",
    "digest",
    "digest_body",
    "sign",
    "Verifier",
    "verify_request"
]
