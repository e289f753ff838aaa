"""
Constants for the TNPG authentication library.
Header names and defaults match the TNPG payment gateway contract.
"""

import re

# HTTP Headers
HEADER_TIMESTAMP = "X-TNPG-TIMESTAMP"
HEADER_HOST = "X-TNPG-HOST"
HEADER_TARGET_API = "X-TNPG-TARGET-API"
HEADER_MERCHANT_ID = "X-TNPG-MERCHANT-ID"
HEADER_API_KEY = "X-TNPG-API-KEY"
HEADER_SIGNATURE = "X-TNPG-SIGNATURE"
HEADER_DIGEST = "X-TNPG-DIGEST"
HEADER_CONTENT_TYPE = "Content-Type"

CONTENT_TYPE_JSON = "application/json"

# Order matters: this is the order headers are emitted in
REQUIRED_HEADERS = (
    HEADER_TIMESTAMP,
    HEADER_HOST,
    HEADER_TARGET_API,
    HEADER_MERCHANT_ID,
    HEADER_API_KEY,
    HEADER_SIGNATURE,
    HEADER_DIGEST,
)

SIGNATURE_DELIMITER = "|"
DIGEST_PREFIX = "SHA-256="

# Timestamp formats
ISO_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
GMT_TIMESTAMP_PATTERN = re.compile(
    r"^[A-Z][a-z]{2}, \d{2} [A-Z][a-z]{2} \d{4} \d{2}:\d{2}:\d{2} GMT$"
)
ISO_TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?Z$"
)

# Hosts given without a scheme that are signed as plain http
PRIVATE_HOST_PATTERN = re.compile(
    r"^(localhost|127\.0\.0\.1|192\.168\.|10\.|172\.(1[6-9]|2[0-9]|3[01])\.)"
)

DEFAULT_METHOD = "POST"
DEFAULT_HOST = "api-stage.tnextpay.com"
DEFAULT_BASE_URL = "https://api-stage.tnextpay.com"
DEFAULT_CURRENCY = "BDT"

DEFAULT_ENDPOINTS = {
    'create_order': '/payment/api/v1/p/service/api/payment/processing/payment-order',
    'verify': '/payment/api/v1/p/service/api/payment/processing/verify',
    'inquiry': '/payment/api/v1/p/service/api/payment/processing/inquiry',
}

# Default configuration values
DEFAULT_CONFIG = {
    'replay_window': 300,  # 5 minutes in seconds
    'timeout': 30,         # HTTP timeout in seconds
}

DEFAULT_REPLAY_WINDOW = 5 * 60  # 5 minutes in seconds

# Gateway status codes reported in IPN callbacks and inquiries
PAYMENT_STATUS_CODES = {
    '1002': 'APPROVED',
    '1003': 'DECLINED',
    '1004': 'CANCELLED',
    '1005': 'FAILED',
}
PAYMENT_STATUS_UNKNOWN = 'UNKNOWN'

# Returned to untrusted callers for every rejection
PUBLIC_REJECT_MESSAGE = "Unauthorized"
