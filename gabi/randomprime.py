"""Random probable primes in a range above a power of two."""

from __future__ import annotations

import math
import os
from typing import Callable

from gabi.mathutil import probably_prime

# Odd small primes for cheap rejection of candidates; their product fits in 64 bits.
SMALL_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53)
SMALL_PRIMES_PRODUCT = math.prod(SMALL_PRIMES)


def random_prime_in_range(
    start: int,
    length: int,
    read: Callable[[int], bytes] = os.urandom,
) -> int:
    """Return a random probable prime in ``[2**start, 2**start + 2**length]``.

    ``read(n)`` must return ``n`` random bytes.
    """
    if start < 2:
        raise ValueError("randomPrimeInRange: prime size must be at least 2-bit")
    if length < 1:
        raise ValueError("length must be at least 1")

    top_bits = length % 8 or 8
    start_val = 1 << start
    size = (length + 7) // 8

    while True:
        data = bytearray(read(size))
        if len(data) != size:
            raise ValueError("random source returned too few bytes")
        data[0] &= (1 << top_bits) - 1
        data[-1] |= 1
        p = start_val + int.from_bytes(data, "big")

        residue = p % SMALL_PRIMES_PRODUCT
        if any(
            residue % prime == 0 and (start > 6 or residue != prime)
            for prime in SMALL_PRIMES
        ):
            continue
        if probably_prime(p, 20):
            return p