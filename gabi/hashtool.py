"""Hashing of integer lists for Fiat-Shamir challenges."""

from __future__ import annotations

import hashlib
from typing import Iterable, Optional

_TAG_BOOLEAN = 0x01
_TAG_INTEGER = 0x02
_TAG_SEQUENCE = 0x30


def _der_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(body)]) + body


def _der(tag: int, content: bytes) -> bytes:
    return bytes([tag]) + _der_length(len(content)) + content


def _der_integer(value: int) -> bytes:
    magnitude = value if value >= 0 else ~value
    size = (magnitude.bit_length() + 8) // 8
    return _der(_TAG_INTEGER, value.to_bytes(size, "big", signed=True))


def hash_commit(values: Iterable[int], issig: bool = False) -> int:
    """Return SHA-256 over the DER sequence of the count and the values, as an integer.

    With ``issig`` a boolean TRUE precedes the count.
    """
    values = list(values)
    parts = []
    if issig:
        parts.append(_der(_TAG_BOOLEAN, b"\xff"))
    parts.append(_der_integer(len(values)))
    parts.extend(_der_integer(v) for v in values)
    encoded = _der(_TAG_SEQUENCE, b"".join(parts))
    return int.from_bytes(hashlib.sha256(encoded).digest(), "big")


def get_hash_number(a: Optional[int], b: Optional[int], index: int, bitlen: int) -> int:
    """Derive a number of at least ``bitlen`` bits from ``a``, ``b`` and ``index``."""
    prefix = [v for v in (a, b) if v is not None]
    prefix.append(index)
    result = 0
    shift = 0
    counter = 0
    while shift < bitlen:
        result += hash_commit(prefix + [counter]) << shift
        shift += 256
        counter += 1
    return result


def int_hash_sha256(data: bytes) -> int:
    """Return the SHA-256 digest of ``data`` as an integer."""
    return int.from_bytes(hashlib.sha256(data).digest(), "big")