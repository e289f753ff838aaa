"""
TNPG payment gateway client.

Sends payment-order, verification and inquiry calls to the gateway with
X-TNPG-* authentication headers. The body is serialized once to its
canonical JSON and the same bytes are both digested and sent, so the
gateway's digest check sees exactly what was signed.
"""

from typing import Any, Optional
from urllib.parse import urljoin

import requests
import structlog

from .canonical import canonical_body_bytes
from .config import GatewayConfig
from .constants import DEFAULT_METHOD
from .exceptions import HTTPError, SigningError
from .headers import HeaderAssembler
from .models import GatewayError, GatewayResult
from .payloads import PaymentInquiry, PaymentOrder, PaymentVerification, parse_payment_status

logger = structlog.get_logger(__name__)


class GatewayClient:
    """
    Client for the TNPG payment gateway API.

    Signing failures (missing credentials, unserializable bodies) raise
    before anything is sent. Transport and HTTP failures come back as an
    unsuccessful GatewayResult.
    """

    def __init__(self, config: GatewayConfig, session: Optional[requests.Session] = None):
        """
        Initialize gateway client.

        Args:
            config: Merchant credentials and gateway settings
            session: Optional pre-configured requests session

        Raises:
            ConfigurationError: If a credential is missing
        """
        self.config = config
        self.assembler = HeaderAssembler(config)
        self.base_url = config.base_url.rstrip('/')
        self.session = session or requests.Session()

    def _prepare_request_body(self, body: Any) -> bytes:
        """Serialize the body to the canonical bytes that are signed and sent."""
        try:
            return canonical_body_bytes(body)
        except (TypeError, ValueError, RecursionError) as e:
            raise SigningError(f"request body cannot be serialized: {e}") from e

    def _make_request(self, method: str, path: str, body: Any = None, **kwargs) -> requests.Response:
        """
        Make authenticated HTTP request with TNPG headers.

        Args:
            method: HTTP method
            path: Endpoint path (relative to base_url); also the signed target API
            body: JSON body (mapping, payload record or raw JSON)
            **kwargs: Additional requests arguments

        Returns:
            requests.Response object

        Raises:
            HTTPError: If the request cannot be completed
        """
        url = urljoin(self.base_url + '/', path.lstrip('/'))

        data = self._prepare_request_body(body if body is not None else {})
        auth_headers = self.assembler.generate_gateway_headers(path, data, method=method)

        headers = dict(kwargs.pop('headers', None) or {})
        headers.update(auth_headers)
        kwargs.setdefault('timeout', self.config.timeout)

        try:
            return self.session.request(method, url, data=data, headers=headers, **kwargs)
        except requests.RequestException as e:
            raise HTTPError(f"HTTP request failed: {e}") from e

    def post(self, path: str, body: Any, operation: str = 'request') -> GatewayResult:
        """
        POST a signed body and wrap the outcome in a GatewayResult.

        Args:
            path: Endpoint path
            body: Request body
            operation: Name used in logs and failure messages
        """
        try:
            response = self._make_request(DEFAULT_METHOD, path, body)
        except HTTPError as e:
            logger.error("Gateway API error", operation=operation, error=str(e))
            return GatewayResult(
                success=False,
                error=GatewayError(
                    status_code=500,
                    status_text='NETWORK_ERROR',
                    message=f"Failed to reach payment gateway ({operation})",
                    reason=str(e),
                ),
            )

        data = self._decode(response)
        if response.status_code >= 400:
            details = data if isinstance(data, dict) else {}
            error = GatewayError(
                status_code=response.status_code,
                status_text=response.reason or '',
                message=details.get('message') or f"{operation} failed",
                reason=details.get('reason') or response.reason or '',
            )
            logger.error(
                "Gateway API error",
                operation=operation,
                status_code=error.status_code,
                message=error.message,
            )
            return GatewayResult(success=False, data=data, error=error)

        return GatewayResult(success=True, data=data, headers=dict(response.headers))

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def create_payment_order(self, order: PaymentOrder) -> GatewayResult:
        """Create a payment order; the response carries the gateway page URL."""
        logger.info("Creating payment order", order_id=order.order_id)
        return self.post(self.config.endpoint('create_order'), order, 'create order')

    def verify_payment(self, payment_order_id: str) -> GatewayResult:
        """Verify a payment by the gateway's payment order id."""
        return self.post(
            self.config.endpoint('verify'),
            PaymentVerification(payment_order_id),
            'verify payment',
        )

    def inquire_payment(self, order_id: str) -> GatewayResult:
        """Inquire the status of a merchant order."""
        return self.post(
            self.config.endpoint('inquiry'),
            PaymentInquiry(order_id, self.config.merchant_id),
            'inquiry',
        )

    @staticmethod
    def parse_payment_status(status_code: Any) -> str:
        return parse_payment_status(status_code)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
