"""
Shared fixtures for the TNPG authentication tests.
"""

import datetime

import pytest

from tnpg_auth import GatewayConfig, HeaderAssembler, ProtocolVersion, SecretStore, Verifier

MERCHANT_ID = "M12345"
API_KEY = "test"
API_SECRET = "test-secret-key"
HOST = "api-stage.tnextpay.com"
TARGET_API = "/payment/api/v1/p/service/api/payment/processing/payment-order"
SIGNED_AT = datetime.datetime(2026, 2, 9, 7, 47, 49, tzinfo=datetime.timezone.utc)


@pytest.fixture
def order_body():
    """Payment order body as posted by the merchant backend."""
    return {
        "order_id": "ORDER-12345",
        "order_information": {
            "payable_amount": 1000.00,
            "currency_code": "BDT",
        },
        "customer_information": {
            "name": "John Doe",
            "email": "john@example.com",
            "phone": "+8801712345678",
        },
        "product_information": {
            "name": "Premium Subscription",
            "quantity": 1,
        },
        "ipn_url": "http://localhost:3000/payment/ipn",
        "success_url": "http://localhost:3000/payment/success",
        "cancel_url": "http://localhost:3000/payment/cancel",
        "failure_url": "http://localhost:3000/payment/failure",
    }


@pytest.fixture
def config():
    """Current-protocol merchant configuration."""
    return GatewayConfig(
        merchant_id=MERCHANT_ID,
        api_key=API_KEY,
        api_secret=API_SECRET,
        host=HOST,
    )


@pytest.fixture
def legacy_config(config):
    """Legacy-protocol merchant configuration."""
    return config.with_overrides(protocol_version=ProtocolVersion.V1)


@pytest.fixture
def assembler(config):
    return HeaderAssembler(config)


@pytest.fixture
def secret_store():
    return SecretStore({MERCHANT_ID: API_SECRET, "M67890": "other-merchant-secret"})


@pytest.fixture
def verifier(secret_store):
    return Verifier(secret_store)


@pytest.fixture
def signed_headers(assembler, order_body):
    """Headers signed at SIGNED_AT for order_body."""
    return assembler.generate_gateway_headers(TARGET_API, order_body, now=SIGNED_AT)
