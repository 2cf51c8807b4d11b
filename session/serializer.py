"""
Pluggable payload encoding for session records.

Any object with ``stringify(record) -> str`` and ``parse(text) -> record``
can be handed to the store. ``parse`` may return an awaitable so codecs
that do I/O or heavier decoding can be used without blocking the loop.
"""

import inspect
import json
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Protocol, Union, runtime_checkable


@runtime_checkable
class Serializer(Protocol):
    """Encode/decode contract between a record and its stored text."""

    def stringify(self, record: dict[str, Any]) -> str: ...

    def parse(self, text: str) -> Union[dict[str, Any], Awaitable[dict[str, Any]]]: ...


def _encode_default(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec="milliseconds") + "Z"
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONSerializer:
    """
    Default JSON codec.

    Datetimes are written as UTC ISO 8601 strings with millisecond
    precision and a ``Z`` suffix, which is also the format the TTL
    resolver reads back from ``cookie.expires``.
    """

    def stringify(self, record: dict[str, Any]) -> str:
        return json.dumps(record, default=_encode_default, separators=(",", ":"))

    def parse(self, text: str) -> dict[str, Any]:
        return json.loads(text)


async def parse_payload(serializer: Serializer, text: str) -> Any:
    """Run ``serializer.parse``, awaiting the result when it is awaitable."""
    result = serializer.parse(text)
    if inspect.isawaitable(result):
        result = await result
    return result
