"""Fast cryptographically secure pseudo-random numbers from AES in counter mode."""

from __future__ import annotations

import math
import os
import threading

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from gabi.bigint import rand_int

_BLOCK = 16
_COUNTER_MASK = (1 << 64) - 1


class CPRNG:
    """Thread-safe generator: AES-256 with the seed as key over a 64-bit counter."""

    def __init__(self, seed: bytes) -> None:
        seed = bytes(seed)
        if len(seed) != 32:
            raise ValueError("seed must be 32 bytes")
        self._cipher = Cipher(algorithms.AES(seed), modes.ECB())
        self._counter = 0
        self._lock = threading.Lock()

    def read(self, n: int) -> bytes:
        """Return ``n`` pseudo-random bytes."""
        if n <= 0:
            return b""
        blocks = (n - 1) // _BLOCK + 1
        with self._lock:
            first = self._counter
            self._counter = (self._counter + blocks) & _COUNTER_MASK
        plaintext = b"".join(
            ((first + k) & _COUNTER_MASK).to_bytes(8, "little") + bytes(8)
            for k in range(blocks)
        )
        encryptor = self._cipher.encryptor()
        stream = encryptor.update(plaintext) + encryptor.finalize()
        return stream[:n]


_GLOBAL_CPRNG = CPRNG(os.urandom(32))


def fast_random_big_int(limit: int) -> int:
    """Return a random integer uniformly chosen in ``[0, limit)``."""
    return rand_int(limit, _GLOBAL_CPRNG.read)


def random_qr(n: int) -> int:
    """Return a random quadratic residue in the unit group modulo ``n``."""
    while True:
        r = fast_random_big_int(n)
        if math.gcd(r, n) == 1:
            return r * r % n