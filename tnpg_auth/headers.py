"""
Header assembly for outbound gateway requests.
"""

import datetime
from typing import Any, Dict, Optional

import structlog

from .canonical import signature_string
from .config import GatewayConfig
from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_METHOD,
    HEADER_API_KEY,
    HEADER_CONTENT_TYPE,
    HEADER_DIGEST,
    HEADER_HOST,
    HEADER_MERCHANT_ID,
    HEADER_SIGNATURE,
    HEADER_TARGET_API,
    HEADER_TIMESTAMP,
    PRIVATE_HOST_PATTERN,
)
from .models import ProtocolVersion, SigningContext
from .signer import digest_body, sign
from .timestamps import format_timestamp

logger = structlog.get_logger(__name__)


def resolve_host(host: str, version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """
    Host value as signed for the protocol version.

    V1 uses the configured host verbatim. V2 requires a scheme: hosts that
    already carry one are kept, loopback and private-range hosts get
    http:// and anything else gets https://.
    """
    host = host.strip()
    if ProtocolVersion(version) == ProtocolVersion.V1:
        return host
    if host.startswith('http://') or host.startswith('https://'):
        return host
    if PRIVATE_HOST_PATTERN.match(host):
        return f"http://{host}"
    return f"https://{host}"


def resolve_target_api(path: str, method: str = DEFAULT_METHOD,
                       version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """Path for V1, "METHOD path" for V2."""
    if ProtocolVersion(version) == ProtocolVersion.V1:
        return path
    return f"{(method or DEFAULT_METHOD).upper()} {path}"


class HeaderAssembler:
    """
    Builds the X-TNPG-* header set for one merchant configuration.

    A new header set is produced per call: the timestamp, and therefore the
    signature, changes every time.
    """

    def __init__(self, config: GatewayConfig):
        """
        Args:
            config: Merchant credentials; validated here

        Raises:
            ConfigurationError: If merchant_id, api_key or api_secret is blank
        """
        self.config = config.validate()
        self.version = config.protocol_version
        self.host = resolve_host(config.host, self.version)

    def signing_context(self, target_api: str, method: str = DEFAULT_METHOD,
                        now: Optional[datetime.datetime] = None) -> SigningContext:
        return SigningContext(
            timestamp=format_timestamp(now, self.version),
            host=self.host,
            target_api=resolve_target_api(target_api, method, self.version),
            merchant_id=self.config.merchant_id,
            api_key=self.config.api_key,
        )

    def generate_gateway_headers(self, target_api: str, body: Any, method: str = DEFAULT_METHOD,
                                 now: Optional[datetime.datetime] = None) -> Dict[str, str]:
        """
        Build the authentication headers for a request.

        Args:
            target_api: Endpoint path, e.g. /p/service/api/payment/processing/payment-order
            body: Request body (mapping, payload record or raw JSON)
            method: HTTP method, prefixed to the target API in V2
            now: Signing time; defaults to the current UTC time

        Returns:
            Ordered mapping of header name to value, including Content-Type

        Raises:
            MissingFieldError: If a signature-string field ends up empty
            MalformedFieldError: If a field contains the "|" delimiter
            SigningError: If the signature or digest cannot be computed
        """
        context = self.signing_context(target_api, method, now)
        signature = sign(signature_string(context), self.config.api_secret, self.version)
        body_digest = digest_body(body, self.version)

        logger.debug(
            "Generated gateway headers",
            merchant_id=context.merchant_id,
            target_api=context.target_api,
            timestamp=context.timestamp,
            protocol=self.version.value,
        )

        return {
            HEADER_TIMESTAMP: context.timestamp,
            HEADER_HOST: context.host,
            HEADER_TARGET_API: context.target_api,
            HEADER_MERCHANT_ID: context.merchant_id,
            HEADER_API_KEY: context.api_key,
            HEADER_SIGNATURE: signature,
            HEADER_DIGEST: body_digest,
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
        }


def generate_gateway_headers(target_api: str, body: Any, config: GatewayConfig,
                             method: str = DEFAULT_METHOD,
                             now: Optional[datetime.datetime] = None) -> Dict[str, str]:
    """One-shot form of HeaderAssembler(config).generate_gateway_headers()."""
    return HeaderAssembler(config).generate_gateway_headers(target_api, body, method, now)
