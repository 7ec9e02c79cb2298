"""Number-theoretic helpers: inverses, square roots, residues and four squares."""

from __future__ import annotations

import math
import random
import secrets
from typing import Iterable, Optional, Sequence, Tuple

from gabi.hashtool import int_hash_sha256

_SMALL_PRIMES = (
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47,
    53, 59, 61, 67, 71, 73, 79, 83, 89, 97,
)


class NoModInverseError(ArithmeticError):
    """Raised when a modular inverse does not exist."""

    def __init__(self, message: str = "modular inverse does not exist") -> None:
        super().__init__(message)


def _is_strong_probable_prime(n: int, base: int, d: int, s: int) -> bool:
    x = pow(base, d, n)
    if x in (1, n - 1):
        return True
    for _ in range(s - 1):
        x = x * x % n
        if x == n - 1:
            return True
    return False


def probably_prime(n: int, rounds: int = 20) -> bool:
    """Miller-Rabin test with base 2 and ``rounds`` further random bases."""
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False
    d = n - 1
    s = 0
    while not d & 1:
        d >>= 1
        s += 1
    if not _is_strong_probable_prime(n, 2, d, s):
        return False
    for _ in range(rounds):
        base = 2 + secrets.randbelow(n - 3)
        if not _is_strong_probable_prime(n, base, d, s):
            return False
    return True


def mod_inverse(a: int, n: int) -> int:
    """Return the inverse of ``a`` modulo ``n``.

    Raises NoModInverseError when ``a`` and ``n`` are not coprime.
    """
    if n == 0 or math.gcd(a, n) != 1:
        raise NoModInverseError()
    return pow(a, -1, n)


def mod_pow(x: int, y: int, m: int) -> int:
    """Return ``x**y mod m``; a negative ``y`` uses the modular inverse of ``x``."""
    if y < 0:
        return pow(mod_inverse(x, m), -y, m)
    return pow(x, y, m)


def represent_to_bases(
    bases: Sequence[int],
    exps: Iterable[int],
    modulus: int,
    max_message_length: int,
) -> int:
    """Return the product of ``bases[i] ** exps[i]`` modulo ``modulus``.

    Exponents longer than ``max_message_length`` bits are replaced by
    their SHA-256 hash.
    """
    result = 1
    for base, exp in zip(bases, exps):
        if exp.bit_length() > max_message_length:
            exp = int_hash_sha256(exp.to_bytes((exp.bit_length() + 7) // 8, "big"))
        result = result * pow(base, exp, modulus) % modulus
    return result


def random_big_int(num_bits: int) -> int:
    """Return a random integer in ``[0, 2**num_bits - 1]``."""
    return secrets.randbits(num_bits)


def legendre_symbol(a: int, p: int) -> int:
    """Return the Legendre symbol ``(a/p)``."""
    j = 1
    n = a % p
    m = p
    while n != 0:
        t = 0
        while not n & 1:
            n >>= 1
            t += 1
        m8 = m % 8
        if t & 1 and m8 in (3, 5):
            j = -j
        if m % 4 == 3 and n % 4 == 3:
            j = -j
        m %= n
        n, m = m, n
    return j if m == 1 else 0


def crt(a: int, pa: int, b: int, pb: int) -> int:
    """Return x modulo ``pa*pb`` with x = a (mod pa) and x = b (mod pb)."""
    if math.gcd(pa, pb) != 1:
        raise ValueError("Incorrect input to CRT")
    inv_pb = pow(pb, -1, pa) if pa != 1 else 0
    inv_pa = pow(pa, -1, pb) if pb != 1 else 0
    return (a * inv_pb * pb + b * inv_pa * pa) % (pa * pb)


def _sum_four_squares_special(n: int) -> Tuple[int, int, int, int]:
    if n < 4:
        return 1, 1, 0, 0
    root = math.isqrt(n)
    # The algorithm is randomised only for speed; no secrecy is involved.
    rng = random.Random(1)
    while True:
        x = rng.randrange(root)
        y = rng.randrange(root)
        z = n - x * x - y * y
        if z == 2:
            return x, y, 1, 1
        if z <= 0 or z & 3 != 1:
            continue
        if not probably_prime(z, 10):
            continue
        p = z
        p_len = p.bit_length()
        w = prime_sqrt(z - 1, z)
        if w is None:
            continue

        if 2 * w.bit_length() - 1 <= p_len and p > w * w:
            return x, y, z % w, w

        while True:
            z %= w
            if z == 0:
                break
            if 2 * z.bit_length() - 1 <= p_len and p > z * z:
                return x, y, z, w % z
            w %= z
            if w == 0:
                break
            if 2 * w.bit_length() - 1 <= p_len and p > w * w:
                return x, y, z % w, w


def sum_four_squares(n: int) -> Tuple[int, int, int, int]:
    """Return four integers whose squares sum to the non-negative ``n``."""
    if n == 0:
        return 0, 0, 0, 0
    low = n & 3
    if low == 2:
        return _sum_four_squares_special(n)
    if low == 0:
        d = 1
        rest = n >> 1
        while rest & 3 != 2:
            rest >>= 1
            d += 1
        if d % 2 == 1:
            rest >>= 1
            d += 1
        shift = d // 2
        return tuple(v << shift for v in sum_four_squares(rest))  # type: ignore[return-value]

    x, y, z, w = _sum_four_squares_special(n << 1)
    if x & 1 != y & 1:
        if x & 1 == z & 1:
            y, z = z, y
        else:
            y, w = w, y
    if x < y:
        x, y = y, x
    if z < w:
        z, w = w, z
    return (x + y) >> 1, (x - y) >> 1, (z + w) >> 1, (z - w) >> 1


def prime_sqrt(a: int, pa: int) -> Optional[int]:
    """Return a square root of ``a`` modulo the odd prime ``pa``, or None if there is none."""
    if a == 0:
        return 0
    if pow(a, pa >> 1, pa) != 1:
        return None
    if pa % 4 == 3:
        return pow(a, (pa >> 2) + 1, pa)

    z = 2
    while legendre_symbol(z, pa) != -1:
        z += 1

    q = pa - 1
    m = 0
    while not q & 1:
        q >>= 1
        m += 1

    c = pow(z, q, pa)
    t = pow(a, q, pa)
    r = pow(a, (q >> 1) + 1, pa)
    while t != 1:
        tp = t
        i = 0
        while tp != 1:
            tp = tp * tp % pa
            i += 1
        b = pow(c, 1 << (m - i - 1), pa)
        m = i
        c = b * b % pa
        t = t * c % pa
        r = r * b % pa
    return r


def mod_sqrt(a: int, factors: Sequence[int]) -> Optional[int]:
    """Return a square root of ``a`` modulo the product of ``factors``, or None.

    The factors must be pairwise coprime odd primes, optionally with 4.
    """
    n = 1
    result = 0
    for i, fac in enumerate(factors):
        if fac == 4:
            if (a >> 1) & 1:
                return None
            local = 2 if not a & 1 else 1
        else:
            local = prime_sqrt(a % fac, fac)
            if local is None:
                return None
        result = local if i == 0 else crt(result, n, local, fac)
        n *= fac
    return result