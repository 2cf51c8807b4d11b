"""
Key namespace for stored sessions.

Sessions live under ``prefix + session_id``. The mapping back from a key
to its session id is a plain strip of the prefix, which is only applied
to keys returned by a scan over ``prefix + "*"``.
"""

from dataclasses import dataclass
from typing import Union

DEFAULT_PREFIX = "sess:"


def decode_value(value: Union[str, bytes]) -> str:
    """Return a value read from Redis as text, decoding bytes as UTF-8."""
    if isinstance(value, str):
        return value
    return bytes(value).decode("utf-8")


@dataclass(frozen=True)
class KeyCodec:
    """
    Builds and parses the keys sessions are stored under.

    Attributes:
        prefix: Namespace prepended to every session id.
    """
    prefix: str = DEFAULT_PREFIX

    @property
    def pattern(self) -> str:
        """Glob pattern matching every session key."""
        return f"{self.prefix}*"

    def to_key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    def to_id(self, key: Union[str, bytes]) -> str:
        return decode_value(key)[len(self.prefix):]
