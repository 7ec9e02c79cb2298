"""Camenisch-Lysyanskaya signatures over blocks of integer messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from gabi.keys import PrivateKey, PublicKey
from gabi.mathutil import (
    NoModInverseError,
    mod_inverse,
    mod_pow,
    probably_prime,
    random_big_int,
    represent_to_bases,
)
from gabi.randomprime import random_prime_in_range


def represent_to_public_key(pk: PublicKey, exps: Sequence[int]) -> int:
    """Return the product of ``R[i] ** exps[i]`` modulo N for the key's R bases.

    Exponents longer than the maximum message length are hashed first.
    """
    return represent_to_bases(pk.r, exps, pk.n, pk.params.lm)


@dataclass
class CLSignature:
    """A Camenisch-Lysyanskaya signature (A, e, v).

    ``keyshare_p`` is R_0 raised to a key share secret, needed for
    verification when part of the secret key is held elsewhere.
    """

    a: int
    e: int
    v: int
    keyshare_p: Optional[int] = None

    def verify(self, pk: PublicKey, ms: Sequence[int]) -> bool:
        """Return whether the signature is valid for the messages ``ms``."""
        params = pk.params
        start = 1 << (params.le - 1)
        end = start + (1 << (params.le_prime - 1))
        if not start <= self.e <= end:
            return False
        if not probably_prime(self.e, 80):
            return False

        ae = pow(self.a, self.e, pk.n)
        r = represent_to_public_key(pk, ms)
        if self.keyshare_p is not None:
            r *= self.keyshare_p
        try:
            sv = mod_pow(pk.s, self.v, pk.n)
        except NoModInverseError:
            return False
        return ae * r * sv % pk.n == pk.z

    def randomize(self, pk: PublicKey) -> "CLSignature":
        """Return a randomized copy of the signature that verifies on the same messages."""
        r = random_big_int(pk.params.l_ra)
        a_prime = self.a * pow(pk.s, r, pk.n) % pk.n
        v_prime = self.v - self.e * r
        return CLSignature(a=a_prime, e=self.e, v=v_prime)


def sign_message_block_and_commitment(
    sk: PrivateKey, pk: PublicKey, u: int, ms: Sequence[int]
) -> CLSignature:
    """Sign the messages ``ms`` together with the commitment ``u``."""
    params = pk.params
    r = represent_to_public_key(pk, ms)

    v_tilde = random_big_int(params.lv - 1)
    v = (1 << (params.lv - 1)) + v_tilde

    # Q = inv(S^v * R * U) * Z
    numerator = pow(pk.s, v, pk.n) * r * u % pk.n
    q = pk.z * mod_inverse(numerator, pk.n) % pk.n

    e = random_prime_in_range(params.le - 1, params.le_prime - 1)
    d = mod_inverse(e, sk.order)
    a = pow(q, d, pk.n)
    return CLSignature(a=a, e=e, v=v)


def sign_message_block(sk: PrivateKey, pk: PublicKey, ms: Sequence[int]) -> CLSignature:
    """Sign the messages ``ms``."""
    return sign_message_block_and_commitment(sk, pk, 1, ms)