"""Proof that N is the product of two almost safe primes.

N = (2*p^n + 1) * (2*q^m + 1) for primes p, q, made non-interactive with
Fiat-Shamir challenges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from gabi.fastrandom import fast_random_big_int
from gabi.hashtool import get_hash_number
from gabi.mathutil import mod_sqrt

ITERATIONS = 80
NONCE_SIZE = 128


@dataclass
class AlmostSafePrimeProductProof:
    """The proof: the nonce deriving the bases, commitments and responses."""

    nonce: Optional[int]
    commitments: Optional[List[Optional[int]]]
    responses: Optional[List[Optional[int]]]


@dataclass
class AlmostSafePrimeProductCommit:
    """Prover state kept between commitment and response."""

    nonce: int
    commitments: List[int]
    logs: List[int]


def _modulus(p_prime: int, q_prime: int) -> int:
    return (2 * p_prime + 1) * (2 * q_prime + 1)


def build_commitments(
    commitments: Sequence[int], p_prime: int, q_prime: int
) -> Tuple[List[int], AlmostSafePrimeProductCommit]:
    """Return ``commitments`` extended with this proof's commitments, and the prover state."""
    n = _modulus(p_prime, q_prime)
    phi_n = (p_prime * q_prime) << 2
    nonce = fast_random_big_int(1 << NONCE_SIZE)

    coms: List[int] = []
    logs: List[int] = []
    for i in range(ITERATIONS):
        base = get_hash_number(nonce, None, i, n.bit_length()) % n
        if math.gcd(base, n) != 1:
            raise ValueError("Generated number not in Z_N")
        log = fast_random_big_int(phi_n)
        coms.append(pow(base, log, n))
        logs.append(log)

    return [*commitments, *coms], AlmostSafePrimeProductCommit(nonce, coms, logs)


def build_proof(
    p_prime: int,
    q_prime: int,
    challenge: int,
    index: int,
    commit: AlmostSafePrimeProductCommit,
) -> AlmostSafePrimeProductProof:
    """Compute the responses for ``challenge`` from the prover state."""
    n = _modulus(p_prime, q_prime)
    phi_n = (p_prime * q_prime) << 2
    odd_phi_n = p_prime * q_prime
    half = pow(2, -1, odd_phi_n)
    factors = [p_prime, q_prime]

    responses: List[Optional[int]] = []
    for i, log_commit in enumerate(commit.logs):
        curc = get_hash_number(challenge, index, i, 2 * n.bit_length())
        log = (log_commit + curc) % phi_n

        x1 = log % odd_phi_n
        x3 = half * x1 % odd_phi_n
        for candidate in (x1, odd_phi_n - x1, x3, odd_phi_n - x3):
            root = mod_sqrt(candidate, factors)
            if root is not None:
                responses.append(root)
                break
        else:
            raise ValueError("none of +-x, +-x/2 are square")

    return AlmostSafePrimeProductProof(
        nonce=commit.nonce,
        commitments=list(commit.commitments),
        responses=responses,
    )


def verify_structure(proof: AlmostSafePrimeProductProof) -> bool:
    """Return whether the proof is complete and of the right shape."""
    if proof.nonce is None:
        return False
    if proof.commitments is None or proof.responses is None:
        return False
    if len(proof.commitments) != ITERATIONS or len(proof.responses) != ITERATIONS:
        return False
    if any(v is None for v in proof.commitments):
        return False
    return all(v is not None for v in proof.responses)


def extract_commitments(
    commitments: Sequence[int], proof: AlmostSafePrimeProductProof
) -> List[int]:
    """Return ``commitments`` extended with the commitments held in the proof."""
    return [*commitments, *proof.commitments]


def verify_proof(
    n: int, challenge: int, index: int, proof: AlmostSafePrimeProductProof
) -> bool:
    """Return whether a structurally sound proof holds for ``n``."""
    # N = 1 (mod 3) lowers the error probability from 9/10 to 4/5.
    if n % 3 != 1:
        return False

    gamma = 1 << n.bit_length()
    for i in range(ITERATIONS):
        base = get_hash_number(proof.nonce, None, i, n.bit_length()) % n
        x = get_hash_number(challenge, index, i, 2 * n.bit_length())
        y = proof.commitments[i] * pow(base, x, n) % n
        yg = pow(y, gamma, n)

        response = proof.responses[i]
        t1 = pow(pow(pow(base, gamma, n), response, n), response, n)
        t3 = pow(t1, 2, n)
        candidates = [t1, t3]
        for value in (t1, t3):
            try:
                candidates.append(pow(value, -1, n))
            except ValueError:
                pass
        if yg not in candidates:
            return False
    return True