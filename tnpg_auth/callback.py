"""
IPN (payment-status callback) acceptance.

The gateway retries callbacks that are not acknowledged with HTTP 200, so
every callback is acknowledged. Authenticity and processing are reported
separately: a forged callback is never processed and is logged as an alert,
while a processing failure on an authentic callback is logged as an error.
"""

import json
from typing import Any, Callable, Mapping, Optional

import structlog
from requests.structures import CaseInsensitiveDict

from .constants import REQUIRED_HEADERS
from .models import CallbackAck
from .payloads import IPNNotification
from .verifier import Verifier

logger = structlog.get_logger(__name__)

Processor = Callable[[IPNNotification], Any]


def _decode(body: Any) -> Any:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode('utf-8')
    if isinstance(body, str):
        return json.loads(body)
    return body


class CallbackHandler:
    """
    Verify-then-process contract for inbound IPN callbacks.

    Example:
        handler = CallbackHandler(Verifier(store), update_transaction)
        ack = handler.verify_then_process(request.headers, request.body)
        return ack.http_status  # always 200
    """

    def __init__(self, verifier: Verifier, processor: Processor, require_signature: bool = True):
        """
        Args:
            verifier: Verifier configured with the gateway's protocol and secrets
            processor: Called with the parsed notification of authentic callbacks
            require_signature: When False, callbacks carrying none of the
                X-TNPG-* headers are processed as unauthenticated
        """
        self.verifier = verifier
        self.processor = processor
        self.require_signature = require_signature

    def verify_then_process(self, headers: Mapping, body: Any) -> CallbackAck:
        """
        Verify a callback and, if authentic, process it.

        Never raises; the returned ack is always HTTP 200.
        """
        if not self.require_signature and self._unsigned(headers):
            logger.warning("Processing unsigned IPN callback")
            return CallbackAck(authentic=False, processed=self._process(body))

        try:
            result = self.verifier.verify(headers, body)
        except Exception:
            # Secret lookup failures surface here; the callback is still acknowledged
            logger.exception("IPN callback could not be verified", alert=True)
            return CallbackAck(authentic=False, processed=False)

        if not result.accepted:
            logger.error(
                "IPN callback failed verification",
                reason=result.reason.value,
                alert=True,
            )
            return CallbackAck(authentic=False, processed=False, reason=result.reason)

        return CallbackAck(authentic=True, processed=self._process(body))

    def _process(self, body: Any) -> bool:
        try:
            notification = IPNNotification.from_dict(_decode(body))
        except (ValueError, RecursionError) as e:
            logger.error("Invalid IPN data", error=str(e))
            return False

        try:
            self.processor(notification)
        except Exception as e:
            # Acknowledged anyway so the gateway does not retry forever
            logger.exception(
                "IPN processing error",
                order_id=notification.order_id,
                error=str(e),
            )
            return False

        logger.info(
            "IPN processed",
            order_id=notification.order_id,
            status=notification.status,
            payment_status=notification.payment_status,
        )
        return True

    @staticmethod
    def _unsigned(headers: Optional[Mapping]) -> bool:
        if not headers:
            return True
        received = CaseInsensitiveDict(headers)
        return not any(name in received for name in REQUIRED_HEADERS)


def verify_then_process(headers: Mapping, body: Any, verifier: Verifier,
                        processor: Processor, require_signature: bool = True) -> CallbackAck:
    """Functional form of CallbackHandler.verify_then_process()."""
    return CallbackHandler(verifier, processor, require_signature).verify_then_process(headers, body)
