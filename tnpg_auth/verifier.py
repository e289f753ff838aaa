"""
Verification of inbound TNPG-signed requests and callbacks.

verify() is a deterministic function of (headers, body, secret lookup, now)
and never raises: every failed check becomes a rejected VerificationResult
carrying a diagnostic RejectReason for logs. Callers must answer untrusted
clients with result.http_status and result.public_message only.
"""

import datetime
import hmac
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

import structlog
from requests.structures import CaseInsensitiveDict

from .canonical import signature_string
from .constants import (
    DEFAULT_REPLAY_WINDOW,
    HEADER_API_KEY,
    HEADER_DIGEST,
    HEADER_HOST,
    HEADER_MERCHANT_ID,
    HEADER_SIGNATURE,
    HEADER_TARGET_API,
    HEADER_TIMESTAMP,
    REQUIRED_HEADERS,
    SIGNATURE_DELIMITER,
)
from .exceptions import (
    ConfigurationError,
    InvalidDigest,
    InvalidSignature,
    MalformedHeaders,
    MissingHeaders,
    ReplayDetected,
    SigningError,
    TNPGAuthError,
    UnknownMerchant,
    VerificationError,
)
from .models import ProtocolVersion, SigningContext, VerificationResult
from .nonce_cache import NonceCache
from .signer import digest_body, sign
from .timestamps import check_freshness, parse_timestamp, utc_now

logger = structlog.get_logger(__name__)

SecretLookup = Union[Callable[[str], Optional[str]], Mapping]

SIGNED_HEADERS = (
    HEADER_TIMESTAMP,
    HEADER_HOST,
    HEADER_TARGET_API,
    HEADER_MERCHANT_ID,
    HEADER_API_KEY,
)


def constant_time_equals(provided: str, expected: Optional[str]) -> bool:
    """
    Compare two encoded values without leaking where they differ.

    hmac.compare_digest handles length mismatches without an early exit.
    A missing expected value still runs a comparison before returning False.
    """
    provided_bytes = (provided or '').encode('utf-8')
    if expected is None:
        hmac.compare_digest(provided_bytes, provided_bytes)
        return False
    return hmac.compare_digest(provided_bytes, expected.encode('utf-8'))


class Verifier:
    """
    Checks inbound X-TNPG-* headers against the server's own secrets.

    The secret is always looked up by the merchant id asserted in the
    headers; nothing secret is taken from the request.
    """

    def __init__(self, secret_lookup: SecretLookup,
                 version: ProtocolVersion = ProtocolVersion.V2,
                 replay_window: int = DEFAULT_REPLAY_WINDOW,
                 nonce_cache: Optional[NonceCache] = None,
                 clock: Callable[[], datetime.datetime] = utc_now):
        """
        Args:
            secret_lookup: Callable or mapping from merchant id to API secret
            version: Protocol version the peer signs with
            replay_window: Maximum |now - timestamp| in seconds
            nonce_cache: Optional single-use cache keyed by signature
            clock: Source of the current UTC time

        Raises:
            ConfigurationError: If the nonce cache forgets entries while a
                request could still pass the freshness check
        """
        if nonce_cache is not None and nonce_cache.ttl_seconds < 2 * replay_window:
            # A timestamp up to one window ahead stays fresh for two windows
            raise ConfigurationError(
                f"nonce cache TTL ({nonce_cache.ttl_seconds}s) is shorter than "
                f"twice the replay window ({2 * replay_window}s)"
            )
        if isinstance(secret_lookup, Mapping):
            secret_lookup = secret_lookup.get
        self.secret_lookup = secret_lookup
        self.version = ProtocolVersion(version)
        self.replay_window = replay_window
        self.nonce_cache = nonce_cache
        self.clock = clock

    @classmethod
    def from_config(cls, config, secret_lookup: Optional[SecretLookup] = None, **kwargs) -> 'Verifier':
        """Verifier speaking the config's protocol version and replay window."""
        if secret_lookup is None:
            secret_lookup = {config.merchant_id: config.api_secret}
        kwargs.setdefault('version', config.protocol_version)
        kwargs.setdefault('replay_window', config.replay_window)
        return cls(secret_lookup, **kwargs)

    def verify(self, headers: Mapping, body: Any,
               now: Optional[datetime.datetime] = None) -> VerificationResult:
        """
        Decide whether an inbound request is authentic.

        Args:
            headers: Inbound headers; names are matched case-insensitively
            body: Raw body bytes/text, or the already-decoded JSON value
            now: Verification time; defaults to the verifier's clock

        Returns:
            VerificationResult, accepted with the merchant id or rejected
            with a diagnostic reason
        """
        try:
            merchant_id = self.verify_or_raise(headers, body, now)
        except VerificationError as e:
            logger.warning(
                "Gateway request rejected",
                reason=e.reason.value,
                detail=str(e),
                merchant_id=self._asserted_merchant(headers),
            )
            return VerificationResult(accepted=False, reason=e.reason)

        logger.debug("Gateway request verified", merchant_id=merchant_id)
        return VerificationResult(accepted=True, merchant_id=merchant_id)

    def verify_or_raise(self, headers: Mapping, body: Any,
                        now: Optional[datetime.datetime] = None) -> str:
        """
        Exception-raising form of verify().

        Returns:
            The authenticated merchant id

        Raises:
            MissingHeaders, MalformedHeaders, StaleOrFutureTimestamp,
            UnknownMerchant, InvalidSignature, InvalidDigest, ReplayDetected
        """
        received = self._read_headers(headers)

        timestamp = parse_timestamp(received[HEADER_TIMESTAMP], self.version)
        check_freshness(timestamp, now or self.clock(), self.replay_window)

        merchant_id = received[HEADER_MERCHANT_ID]
        secret = self.secret_lookup(merchant_id)
        if not secret:
            raise UnknownMerchant(f"no secret for merchant {merchant_id!r}")

        context = SigningContext(
            timestamp=received[HEADER_TIMESTAMP],
            host=received[HEADER_HOST],
            target_api=received[HEADER_TARGET_API],
            merchant_id=merchant_id,
            api_key=received[HEADER_API_KEY],
        )
        try:
            expected_signature = sign(signature_string(context), secret, self.version)
        except TNPGAuthError as e:
            raise InvalidSignature(f"cannot recompute signature: {e}") from e

        try:
            expected_digest = digest_body(body, self.version)
        except SigningError:
            expected_digest = None

        # Both comparisons always run
        signature_ok = constant_time_equals(received[HEADER_SIGNATURE], expected_signature)
        digest_ok = constant_time_equals(received[HEADER_DIGEST], expected_digest)

        if not signature_ok:
            raise InvalidSignature("signature mismatch")
        if not digest_ok:
            raise InvalidDigest("digest mismatch" if expected_digest else "body is not valid JSON")

        if self.nonce_cache is not None:
            if not self.nonce_cache.check_and_store(f"{merchant_id}:{received[HEADER_SIGNATURE]}"):
                raise ReplayDetected("signature already used")

        return merchant_id

    def _read_headers(self, headers: Mapping) -> CaseInsensitiveDict:
        if not isinstance(headers, Mapping):
            raise MissingHeaders("headers must be a mapping")

        received = CaseInsensitiveDict(headers)
        missing = [name for name in REQUIRED_HEADERS if not received.get(name)]
        if missing:
            raise MissingHeaders(f"missing headers: {', '.join(missing)}")

        for name in REQUIRED_HEADERS:
            if not isinstance(received[name], str):
                raise MalformedHeaders(f"{name} must be a string")
        for name in SIGNED_HEADERS:
            if SIGNATURE_DELIMITER in received[name]:
                raise MalformedHeaders(f"{name} contains the signature delimiter")

        return received

    @staticmethod
    def _asserted_merchant(headers) -> Optional[str]:
        if not isinstance(headers, Mapping):
            return None
        return CaseInsensitiveDict(headers).get(HEADER_MERCHANT_ID)


def verify_request(headers: Mapping, body: Any, api_secret: str,
                   version: ProtocolVersion = ProtocolVersion.V2,
                   replay_window: int = DEFAULT_REPLAY_WINDOW,
                   now: Optional[datetime.datetime] = None) -> bool:
    """
    Verify a request against a single known secret.

    The secret applies whatever merchant id the headers assert; use a
    Verifier with a SecretStore when serving several merchants.
    """
    verifier = Verifier(lambda merchant_id: api_secret, version=version, replay_window=replay_window)
    return verifier.verify(headers, body, now=now).accepted
