"""
HMAC-SHA256 signatures and SHA-256 body digests.

The output encoding follows the protocol version: V1 uses lowercase hex for
both values, V2 uses base64 for the signature and "SHA-256=" plus base64 for
the digest.
"""

import base64
import hashlib
import hmac
from typing import Any

from .canonical import canonical_body
from .constants import DIGEST_PREFIX
from .exceptions import SigningError
from .models import ProtocolVersion


def _resolve_version(version) -> ProtocolVersion:
    try:
        return ProtocolVersion(version)
    except ValueError as e:
        raise SigningError(f"unsupported protocol version: {version!r}") from e


def _encode(raw: bytes, version: ProtocolVersion) -> str:
    if version == ProtocolVersion.V1:
        return raw.hex()
    return base64.b64encode(raw).decode('ascii')


def sign(signature_string: str, secret: str, version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """
    Compute the HMAC-SHA256 signature of a canonical signature string.

    Args:
        signature_string: Output of canonical.signature_string()
        secret: Merchant API secret
        version: Protocol version selecting the output encoding

    Returns:
        Hex (V1) or base64 (V2) encoded signature

    Raises:
        SigningError: If the secret is empty or the version is unsupported
    """
    if not isinstance(secret, str) or not secret:
        raise SigningError("API secret must be a non-empty string")
    if not isinstance(signature_string, str) or not signature_string:
        raise SigningError("signature string must be a non-empty string")

    version = _resolve_version(version)
    mac = hmac.new(
        secret.encode('utf-8'),
        signature_string.encode('utf-8'),
        hashlib.sha256
    )
    return _encode(mac.digest(), version)


def digest(body_string: str, version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """
    Compute the SHA-256 digest of a canonical body string.

    Returns:
        Hex (V1) or "SHA-256=<base64>" (V2) digest
    """
    if not isinstance(body_string, str):
        raise SigningError("body string must be text")

    version = _resolve_version(version)
    raw = hashlib.sha256(body_string.encode('utf-8')).digest()
    if version == ProtocolVersion.V1:
        return _encode(raw, version)
    return f"{DIGEST_PREFIX}{_encode(raw, version)}"


def digest_body(body: Any, version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """
    Canonicalize a body and digest it.

    Raises:
        SigningError: If the body cannot be canonicalized
    """
    try:
        body_string = canonical_body(body)
    except (TypeError, ValueError, RecursionError) as e:
        raise SigningError(f"request body cannot be serialized: {e}") from e
    return digest(body_string, version)
