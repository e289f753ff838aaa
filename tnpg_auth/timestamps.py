"""
Timestamp formatting and the replay-window freshness policy.
"""

import datetime
from email.utils import format_datetime, parsedate_to_datetime

from .constants import (
    DEFAULT_REPLAY_WINDOW,
    GMT_TIMESTAMP_PATTERN,
    ISO_TIMESTAMP_FORMAT,
    ISO_TIMESTAMP_PATTERN,
)
from .exceptions import StaleOrFutureTimestamp
from .models import ProtocolVersion


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)


def format_timestamp(moment: datetime.datetime = None, version: ProtocolVersion = ProtocolVersion.V2) -> str:
    """
    Render a timestamp in the protocol's header format.

    V1: "2026-02-09T07:47:49Z". V2: "Mon, 09 Feb 2026 07:47:49 GMT".
    Sub-second precision is dropped. Naive datetimes are taken as UTC.
    """
    moment = _as_utc(moment or utc_now()).replace(microsecond=0)
    if ProtocolVersion(version) == ProtocolVersion.V1:
        return moment.strftime(ISO_TIMESTAMP_FORMAT)
    return format_datetime(moment, usegmt=True)


def parse_timestamp(value: str, version: ProtocolVersion = ProtocolVersion.V2) -> datetime.datetime:
    """
    Parse a header timestamp strictly in the protocol's format.

    V1 also accepts fractional seconds ("...T07:47:49.123Z").

    Raises:
        StaleOrFutureTimestamp: If the value does not match the format
    """
    if not isinstance(value, str):
        raise StaleOrFutureTimestamp("timestamp must be a string")

    value = value.strip()
    try:
        if ProtocolVersion(version) == ProtocolVersion.V1:
            if not ISO_TIMESTAMP_PATTERN.match(value):
                raise ValueError(value)
            fmt = '%Y-%m-%dT%H:%M:%S.%fZ' if '.' in value else ISO_TIMESTAMP_FORMAT
            parsed = datetime.datetime.strptime(value, fmt)
        else:
            if not GMT_TIMESTAMP_PATTERN.match(value):
                raise ValueError(value)
            parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise StaleOrFutureTimestamp(f"unparseable timestamp: {value!r}") from e

    return _as_utc(parsed)


def check_freshness(
    timestamp: datetime.datetime,
    now: datetime.datetime = None,
    replay_window: int = DEFAULT_REPLAY_WINDOW,
) -> float:
    """
    Enforce |now - timestamp| <= replay_window, in both directions.

    Returns:
        Signed age in seconds (negative for timestamps ahead of the clock)

    Raises:
        StaleOrFutureTimestamp: If the timestamp is outside the window
    """
    now = _as_utc(now or utc_now())
    age = (now - _as_utc(timestamp)).total_seconds()
    if abs(age) > replay_window:
        direction = "old" if age > 0 else "in the future"
        raise StaleOrFutureTimestamp(
            f"timestamp is {abs(age):.0f}s {direction}, window is {replay_window}s"
        )
    return age


def is_fresh(value: str, now: datetime.datetime = None,
             replay_window: int = DEFAULT_REPLAY_WINDOW,
             version: ProtocolVersion = ProtocolVersion.V2) -> bool:
    """Boolean form of parse_timestamp() plus check_freshness()."""
    try:
        check_freshness(parse_timestamp(value, version), now, replay_window)
    except StaleOrFutureTimestamp:
        return False
    return True
