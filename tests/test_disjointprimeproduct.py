import dataclasses

import pytest

from gabi.disjointprimeproduct import (
    ITERATIONS,
    build_proof,
    verify_proof,
    verify_structure,
)

P = 2063
Q = 1187


def test_cycle():
    proof = build_proof(P, Q, 12345, 2)
    assert verify_structure(proof) is True
    assert len(proof.responses) == ITERATIONS
    assert verify_proof(P * Q, 12345, 2, proof) is True


def test_incorrect_response():
    proof = build_proof(P, Q, 12345, 2)
    proof.responses[0] += 1
    assert verify_proof(P * Q, 12345, 2, proof) is False


def test_wrong_challenge():
    proof = build_proof(P, Q, 12345, 2)
    assert verify_proof(P * Q, 12346, 2, proof) is False


def test_wrong_index():
    proof = build_proof(P, Q, 12345, 2)
    assert verify_proof(P * Q, 12345, 3, proof) is False


def test_prime_modulus_rejected():
    proof = build_proof(P, Q, 12345, 2)
    assert verify_proof(P, 12345, 2, proof) is False


def test_not_disjoint_raises():
    with pytest.raises(ValueError):
        build_proof(7, 7, 12345, 2)


def test_verify_structure():
    proof = build_proof(P, Q, 12345, 2)

    short = dataclasses.replace(proof, responses=proof.responses[:-1])
    assert verify_structure(short) is False

    missing = list(proof.responses)
    missing[2] = None
    assert verify_structure(dataclasses.replace(proof, responses=missing)) is False

    assert verify_structure(dataclasses.replace(proof, responses=None)) is False

    assert verify_structure(proof) is True