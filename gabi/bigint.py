"""Serialisation helpers for non-negative big integers.

Integers travel as base64 of their big-endian bytes in JSON and as
base-10 text in XML.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import re
from typing import Callable, Union

_DECIMAL = re.compile(r"[+-]?[0-9]+")


class BigIntFormatError(ValueError):
    """Raised when an integer cannot be encoded or decoded."""


def _to_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def encode_base64(value: int) -> str:
    """Return the base64 encoding of the big-endian bytes of ``value``."""
    if value < 0:
        raise BigIntFormatError("Marshaling negative integers is not supported")
    return base64.b64encode(_to_bytes(value)).decode("ascii")


def to_json(value: int) -> str:
    """Return ``value`` as a JSON string holding its base64 encoding."""
    return json.dumps(encode_base64(value))


def from_json(raw: Union[str, bytes]) -> int:
    """Decode an integer from JSON.

    A quoted value is read as base64 of big-endian bytes; anything else
    must be a JSON base-10 integer that is not negative.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw:
        raise BigIntFormatError("empty input")
    if raw[0] != '"':
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise BigIntFormatError(str(exc)) from exc
        if isinstance(value, bool) or not isinstance(value, int):
            raise BigIntFormatError("JSON value is not an integer")
        if value < 0:
            raise BigIntFormatError("Unexpected negative integer")
        return value
    if len(raw) < 2 or raw[-1] != '"':
        raise BigIntFormatError("unterminated JSON string")
    try:
        data = base64.b64decode(raw[1:-1], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BigIntFormatError(f"invalid base64: {exc}") from exc
    return int.from_bytes(data, "big")


def to_xml_text(value: int) -> str:
    """Return the base-10 text of ``value`` for use as XML character data."""
    return str(value)


def from_xml_text(text: str) -> int:
    """Parse XML character data as a non-negative base-10 integer."""
    if not _DECIMAL.fullmatch(text):
        raise BigIntFormatError("XML element was not a base 10 integer")
    value = int(text, 10)
    if value < 0:
        raise BigIntFormatError("Unexpected negative integer")
    return value


def rand_int(limit: int, read: Callable[[int], bytes] = os.urandom) -> int:
    """Return a uniformly random integer in ``[0, limit)``.

    ``read(n)`` must return ``n`` random bytes.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    top = limit - 1
    bit_len = top.bit_length()
    if bit_len == 0:
        return 0
    size = (bit_len + 7) // 8
    spare = bit_len % 8 or 8
    while True:
        data = bytearray(read(size))
        if len(data) != size:
            raise ValueError("random source returned too few bytes")
        data[0] &= (1 << spare) - 1
        candidate = int.from_bytes(data, "big")
        if candidate < limit:
            return candidate