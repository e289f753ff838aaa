"""
Canonical strings for signing.

Two strings are produced here: the signature string that is HMAC'd and the
body string that is digested. Both sides of the gateway must build them
byte-for-byte identically, so the JSON encoding is pinned to what the
gateway's JavaScript side emits with JSON.stringify: insertion-ordered keys,
no whitespace, UTF-8 text rather than \\u escapes and numbers in JavaScript's
shortest form (1000, 10.5, 1e-7, 1e+21).
"""

import decimal
import json
import math
from collections.abc import Mapping
from typing import Any, Union

from .constants import SIGNATURE_DELIMITER
from .exceptions import MalformedFieldError, MissingFieldError
from .models import SigningContext

SIGNATURE_FIELDS = ('timestamp', 'host', 'target_api', 'merchant_id', 'api_key')


def signature_string(context: SigningContext) -> str:
    """
    Build "timestamp|host|target_api|merchant_id|api_key".

    Values are used verbatim.

    Raises:
        MissingFieldError: If any field is empty
        MalformedFieldError: If any field contains the delimiter
    """
    values = []
    for name in SIGNATURE_FIELDS:
        value = getattr(context, name)
        if not value:
            raise MissingFieldError(name)
        if not isinstance(value, str):
            value = str(value)
        # A delimiter inside a field would let two contexts share one string
        if SIGNATURE_DELIMITER in value:
            raise MalformedFieldError(name)
        values.append(value)
    return SIGNATURE_DELIMITER.join(values)


# Every integer below this is exact in a JavaScript number
JS_SAFE_INTEGER_LIMIT = 2 ** 53


def _normalize(value: Any) -> Any:
    if hasattr(value, 'to_dict') and callable(value.to_dict):
        return _normalize(value.to_dict())
    if isinstance(value, Mapping):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    if isinstance(value, decimal.Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def format_number(value: Union[int, float]) -> str:
    """
    Render a number the way JavaScript's Number#toString does.

    Digits are the shortest round-tripping ones (as repr), placed in plain
    notation for exponents -7 < e < 21 and in "1.5e+21" / "1e-7" form
    outside it. Integers beyond 2**53 are rounded to the nearest double
    first, as JSON.parse would.

    Raises:
        ValueError: For NaN, Infinity or integers too large for a double
    """
    if isinstance(value, int):
        if abs(value) < JS_SAFE_INTEGER_LIMIT:
            return str(value)
        try:
            value = float(value)
        except OverflowError as e:
            raise ValueError(f"number out of range: {value}") from e

    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Out of range float values are not JSON compliant: {value!r}")
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = decimal.Decimal(repr(value)).as_tuple()
    digits = ''.join(map(str, digit_tuple))
    stripped = digits.rstrip('0')
    exponent += len(digits) - len(stripped)
    digits = stripped

    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        text = digits + '0' * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = f"0.{'0' * -n}{digits}"
    else:
        e = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return f"-{text}" if sign else text


def _encode(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return 'null'
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, dict):
        return '{' + ','.join(f"{_encode(key)}:{_encode(item)}" for key, item in value.items()) + '}'
    if isinstance(value, list):
        return '[' + ','.join(_encode(item) for item in value) + ']'
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_body(body: Any) -> str:
    """
    Serialize a request body to its canonical JSON string.

    Accepts mappings, lists, payload records exposing to_dict(), or raw JSON
    text (str/bytes), which is decoded and re-serialized.

    Raises:
        ValueError: If raw text is not valid JSON or the body holds NaN/Infinity
        TypeError: If the body holds values JSON cannot represent
        RecursionError: If the body is nested too deeply to walk
    """
    if isinstance(body, (bytes, bytearray)):
        body = body.decode('utf-8')
    if isinstance(body, str):
        body = json.loads(body)
    return _encode(_normalize(body))


def canonical_body_bytes(body: Union[Any, bytes]) -> bytes:
    """Canonical body encoded as UTF-8, the exact bytes sent on the wire."""
    return canonical_body(body).encode('utf-8')
