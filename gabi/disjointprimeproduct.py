"""Proof that a product of at most two primes is a product of exactly two."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from gabi.hashtool import get_hash_number
from gabi.mathutil import probably_prime

ITERATIONS = 80


@dataclass
class DisjointPrimeProductProof:
    """The proof: one response per derived challenge."""

    responses: Optional[List[Optional[int]]]


def _odd_part(value: int) -> int:
    while value and not value & 1:
        value >>= 1
    return value


def build_proof(p: int, q: int, challenge: int, index: int) -> DisjointPrimeProductProof:
    """Build the proof for N = p*q from its prime factors."""
    n = p * q
    phi_n = (p - 1) * (q - 1)
    odd_n = _odd_part(n - 1)
    try:
        odd_n_inv = pow(odd_n, -1, phi_n)
    except ValueError as exc:
        raise ValueError("P*Q is not a disjoint prime product!") from exc

    responses: List[Optional[int]] = []
    for i in range(ITERATIONS):
        curc = get_hash_number(challenge, index, i, n.bit_length()) % n
        if math.gcd(curc, n) != 1:
            raise ValueError("Generated number not in Z_N")
        responses.append(pow(curc, odd_n_inv, n))
    return DisjointPrimeProductProof(responses=responses)


def verify_structure(proof: DisjointPrimeProductProof) -> bool:
    """Return whether the proof is complete and of the right shape."""
    if proof.responses is None or len(proof.responses) != ITERATIONS:
        return False
    return all(v is not None for v in proof.responses)


def verify_proof(n: int, challenge: int, index: int, proof: DisjointPrimeProductProof) -> bool:
    """Return whether a structurally sound proof holds for ``n``."""
    # N must not be a (Fermat) prime itself.
    if probably_prime(n, 80):
        return False

    odd_n = _odd_part(n - 1)
    for i in range(ITERATIONS):
        curc = get_hash_number(challenge, index, i, n.bit_length()) % n
        if pow(proof.responses[i], odd_n, n) != curc:
            return False
    return True