"""Fast reduction modulo numbers of the form 2**b - c for small c."""

from __future__ import annotations


class FastMod:
    """Reducer for a fixed positive modulus ``p``.

    When ``p`` is close below a power of two, reduction uses shifts and
    a small multiplication; otherwise it falls back to ``%``.
    """

    def __init__(self, p: int) -> None:
        if p <= 0:
            raise ValueError("modulus must be positive")
        self.p = p
        self.b = p.bit_length()
        power = 1 << self.b
        self.c = power - p
        self.enabled = self.c.bit_length() < 60
        self.mask = power - 1

    def mod(self, x: int) -> int:
        """Return ``x mod p``."""
        if not self.enabled or x < 0:
            return x % self.p
        if x < self.p:
            return x
        cur = x
        while True:
            carry = cur >> self.b
            if not carry:
                break
            cur = (cur & self.mask) + carry * self.c
        if cur >= self.p:
            cur -= self.p
        return cur