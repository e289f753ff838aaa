"""
Unit tests for signatures and digests, pinned to known gateway values.
"""

import base64
import hashlib
import hmac

import pytest

from tnpg_auth import ProtocolVersion, SigningContext, SigningError, digest, digest_body, sign, signature_string

from .test_canonical import CANONICAL_ORDER

SECRET = "test-secret-key"

V2_SIGNATURE_STRING = (
    "Mon, 09 Feb 2026 07:47:49 GMT|https://api-stage.tnextpay.com|"
    "POST /payment/api/v1/p/service/api/payment/processing/payment-order|M12345|test"
)
V2_SIGNATURE = "wNCNoEHAIdJuNjKl3YWV0TY381yI5Dw+J7athDlFVXE="
V2_DIGEST = "SHA-256=eWmwEV8Jxrpw4pRJuqjIov2e8FHepYL7ThP8elXkns4="

V1_SIGNATURE_STRING = (
    "2026-02-09T07:47:49Z|api-stage.tnextpay.com|"
    "/payment/api/v1/p/service/api/payment/processing/payment-order|M12345|test"
)
V1_SIGNATURE = "4645876e66a04577c1e16aa68bfc9f159d75cb09ce19389db36cf6badddd79aa"
V1_DIGEST = "7969b0115f09c6ba70e29449baa8c8a2fd9ef051dea582fb4e13fc7a55e49ece"


class TestSign:
    """Test HMAC-SHA256 signatures."""

    def test_v2_fixture(self):
        """Test the current protocol reproduces the pinned base64 signature."""
        assert sign(V2_SIGNATURE_STRING, SECRET, ProtocolVersion.V2) == V2_SIGNATURE

    def test_v1_fixture(self):
        """Test the legacy protocol reproduces the pinned hex signature."""
        assert sign(V1_SIGNATURE_STRING, SECRET, ProtocolVersion.V1) == V1_SIGNATURE

    def test_default_is_v2(self):
        """Test the current protocol is the default."""
        assert sign(V2_SIGNATURE_STRING, SECRET) == V2_SIGNATURE

    def test_matches_hmac_module(self):
        """Test the signature is a plain HMAC-SHA256 of the string."""
        expected = hmac.new(SECRET.encode('utf-8'), V2_SIGNATURE_STRING.encode('utf-8'), hashlib.sha256)
        assert sign(V2_SIGNATURE_STRING, SECRET) == base64.b64encode(expected.digest()).decode('ascii')
        assert sign(V2_SIGNATURE_STRING, SECRET, "v1") == expected.hexdigest()

    def test_deterministic(self):
        """Test the same input always yields the same signature."""
        signatures = {sign(V2_SIGNATURE_STRING, SECRET) for _ in range(5)}
        assert signatures == {V2_SIGNATURE}

    @pytest.mark.parametrize("field_name", ['timestamp', 'host', 'target_api', 'merchant_id', 'api_key'])
    def test_every_field_changes_signature(self, field_name):
        """Test changing any single field changes the signature."""
        values = {
            'timestamp': "Mon, 09 Feb 2026 07:47:49 GMT",
            'host': "https://api-stage.tnextpay.com",
            'target_api': "POST /payment/api/v1/p/service/api/payment/processing/payment-order",
            'merchant_id': "M12345",
            'api_key': "test",
        }
        original = sign(signature_string(SigningContext(**values)), SECRET)
        values[field_name] = values[field_name] + "x"
        assert sign(signature_string(SigningContext(**values)), SECRET) != original

    def test_secret_changes_signature(self):
        """Test a different secret yields a different signature."""
        assert sign(V2_SIGNATURE_STRING, "another-secret") != V2_SIGNATURE

    def test_empty_secret(self):
        """Test an empty secret fails instead of returning a signature."""
        with pytest.raises(SigningError):
            sign(V2_SIGNATURE_STRING, "")

        with pytest.raises(SigningError):
            sign(V2_SIGNATURE_STRING, None)

    def test_empty_signature_string(self):
        """Test an empty signature string fails."""
        with pytest.raises(SigningError):
            sign("", SECRET)

    def test_unsupported_version(self):
        """Test unknown protocol versions fail."""
        with pytest.raises(SigningError):
            sign(V2_SIGNATURE_STRING, SECRET, "v3")


class TestDigest:
    """Test SHA-256 body digests."""

    def test_v2_fixture(self, order_body):
        """Test the current protocol reproduces the pinned prefixed base64 digest."""
        assert digest(CANONICAL_ORDER) == V2_DIGEST
        assert digest_body(order_body) == V2_DIGEST

    def test_v1_fixture(self, order_body):
        """Test the legacy protocol reproduces the pinned hex digest."""
        assert digest(CANONICAL_ORDER, ProtocolVersion.V1) == V1_DIGEST
        assert digest_body(order_body, ProtocolVersion.V1) == V1_DIGEST

    def test_same_body_same_digest(self, order_body):
        """Test digesting the same body twice gives the same value."""
        assert digest_body(order_body) == digest_body(dict(order_body))

    def test_different_bodies_differ(self, order_body):
        """Test distinct bodies produce distinct digests."""
        modified = dict(order_body, order_id="different-order")
        assert digest_body(modified) != digest_body(order_body)

    def test_key_order_is_significant(self):
        """Test bodies differing only in key order are distinct canonical strings."""
        assert digest_body({"a": 1, "b": 2}) != digest_body({"b": 2, "a": 1})

    def test_unserializable_body(self):
        """Test bodies that cannot be serialized raise SigningError."""
        with pytest.raises(SigningError):
            digest_body({"amount": float("inf")})

        with pytest.raises(SigningError):
            digest_body(b"{not json")

    def test_non_text_body_string(self):
        """Test digest() requires the canonical string, not raw bytes."""
        with pytest.raises(SigningError):
            digest(b"{}")
