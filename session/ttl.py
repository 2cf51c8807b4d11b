"""
Time-to-live resolution for session records.

The effective TTL of a record comes from one of three places, in order:

1. a callable TTL policy, which receives the record and fully decides;
2. the absolute expiration in ``record["cookie"]["expires"]``;
3. the fixed TTL configured on the store.

A resolved TTL of zero or less means the record has already expired and
must be deleted instead of written. It is never clamped to a minimum.
"""

import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Optional, Union

from errors.exceptions import invalid_expiration


# One day in seconds
DEFAULT_SESSION_TTL = 86400

TTLPolicy = Union[int, Callable[[dict[str, Any]], int]]


def parse_expires(value: Any) -> Optional[datetime]:
    """
    Convert a cookie ``expires`` value into an aware UTC datetime.

    Accepted forms are ISO 8601 strings (a trailing ``Z`` is allowed),
    HTTP dates such as ``"Thu, 01 Jan 2099 00:00:00 GMT"``, ``datetime``
    objects (naive ones are taken as UTC) and numbers, read as
    milliseconds since the epoch. Falsy values (None, "", 0, False)
    declare no expiration.

    Args:
        value: The raw ``expires`` value from the record.

    Returns:
        The expiration instant, or None when no expiration is set.

    Raises:
        InvalidExpirationError: If the value cannot be read as a timestamp.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        expires = value
    elif isinstance(value, bool):
        raise invalid_expiration(value)
    elif isinstance(value, (int, float)):
        try:
            expires = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise invalid_expiration(value) from e
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            expires = datetime.fromisoformat(text)
        except ValueError:
            expires = _parse_http_date(value)
    else:
        raise invalid_expiration(value)

    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    return expires


def _parse_http_date(value: str) -> datetime:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise invalid_expiration(value) from e


def get_expires(record: Any) -> Optional[datetime]:
    """Return the absolute expiration declared by a record's cookie, if any."""
    if not isinstance(record, dict):
        return None
    cookie = record.get("cookie")
    if not isinstance(cookie, dict):
        return None
    return parse_expires(cookie.get("expires"))


def resolve_ttl(
    record: dict[str, Any],
    policy: TTLPolicy = DEFAULT_SESSION_TTL,
    now: Optional[datetime] = None,
) -> int:
    """
    Compute the effective TTL of a record in seconds.

    Args:
        record: The session record being written or touched.
        policy: A fixed TTL in seconds or a callable mapping the record
            to its TTL.
        now: Reference instant, defaults to the current UTC time.

    Returns:
        The TTL in seconds; zero or negative when the record has expired.
    """
    if callable(policy):
        return policy(record)

    expires = get_expires(record)
    if expires is None:
        return policy

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return math.ceil((expires - now).total_seconds())
