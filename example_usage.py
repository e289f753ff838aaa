#!/usr/bin/env python3
"""
Basic usage examples for the TNPG authentication library.

This script signs a payment order the way a merchant would, verifies it the
way the gateway would, and accepts a signed IPN callback. Set MERCHANT_ID,
API_KEY and API_SECRET (or a .env file) to also create a real order against
the staging gateway.
"""

import sys

from tnpg_auth import (
    CallbackHandler,
    ConfigurationError,
    GatewayClient,
    GatewayConfig,
    HeaderAssembler,
    PaymentOrder,
    ProtocolVersion,
    SecretStore,
    Verifier,
    canonical_body
)
from tnpg_auth.constants import HEADER_SIGNATURE, HEADER_TIMESTAMP
from tnpg_auth.log import configure_logging


def main():
    """Run offline signing and verification examples."""

    config = GatewayConfig(
        merchant_id="M12345",
        api_key="test",
        api_secret="test-secret-key",
    )

    print("=== TNPG Authentication Basic Usage Examples ===\n")

    # Example 1: Build an order body
    print("1. Building a payment order...")
    order = PaymentOrder.create(
        "ORDER-12345", 1000.00,
        ipn_url="http://localhost:3000/payment/ipn",
        customer_information={"name": "John Doe", "email": "john@example.com"},
    )
    body = canonical_body(order)
    print(f"   Canonical body: {body[:72]}...\n")

    # Example 2: Sign it
    print("2. Generating gateway headers...")
    assembler = HeaderAssembler(config)
    headers = assembler.generate_gateway_headers(config.endpoint('create_order'), order)
    for name, value in headers.items():
        print(f"   {name}: {value}")
    print()

    # Example 3: Verify it as the gateway would
    print("3. Verifying the signed request...")
    store = SecretStore.from_config(config)
    verifier = Verifier(store)
    result = verifier.verify(headers, body)
    print(f"   Verification: {'✓ Accepted' if result else '✗ Rejected'} ({result.http_status})\n")

    # Example 4: Tampering is rejected
    print("4. Verifying a tampered body...")
    tampered = body.replace("1000", "1")
    result = verifier.verify(headers, tampered)
    print(f"   Verification: {'✓ Accepted' if result else '✗ Rejected'} "
          f"({result.http_status} {result.public_message}, reason={result.reason.value})\n")

    # Example 5: Legacy protocol
    print("5. Signing with the legacy protocol...")
    legacy = HeaderAssembler(config.with_overrides(protocol_version=ProtocolVersion.V1))
    legacy_headers = legacy.generate_gateway_headers(config.endpoint('create_order'), order)
    print(f"   Timestamp: {legacy_headers[HEADER_TIMESTAMP]}")
    print(f"   Signature: {legacy_headers[HEADER_SIGNATURE]}\n")

    # Example 6: IPN callback
    print("6. Accepting a signed IPN callback...")
    ipn = {"order_id": "ORDER-12345", "status": "APPROVED", "status_code": "1002"}
    ipn_headers = assembler.generate_gateway_headers("/payment/ipn", ipn)

    def update_order(notification):
        print(f"   Order {notification.order_id} is {notification.payment_status}")

    handler = CallbackHandler(verifier, update_order)
    ack = handler.verify_then_process(ipn_headers, canonical_body(ipn))
    print(f"   Ack: HTTP {ack.http_status}, authentic={ack.authentic}, processed={ack.processed}")


def demonstrate_gateway_call():
    """Create an order against the configured gateway."""

    print("\n=== Gateway Call Example ===")

    try:
        config = GatewayConfig.from_env(env_file=".env")
    except ConfigurationError as e:
        print(f"Skipping gateway call: {e}")
        return

    order = PaymentOrder.create("ORDER-12345", 1000.00, ipn_url="https://merchant.example/ipn")
    with GatewayClient(config) as client:
        result = client.create_payment_order(order)

    if result.success:
        print(f"✓ Order created: {result.data}")
    else:
        print(f"✗ Order failed: {result.error.status_code} {result.error.message} ({result.error.reason})")


if __name__ == "__main__":
    configure_logging("WARNING")
    main()
    demonstrate_gateway_call()
    sys.exit(0)
