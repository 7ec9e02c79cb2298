import pytest

from gabi.clsignature import (
    CLSignature,
    represent_to_public_key,
    sign_message_block,
    sign_message_block_and_commitment,
)
from gabi.hashtool import int_hash_sha256
from gabi.keys import generate_key_pair
from gabi.sysparams import BaseParameters, SystemParameters

PARAMS = SystemParameters.from_base(
    BaseParameters(le_prime=120, lh=256, lm=256, ln=256, lstatzk=80)
)


@pytest.fixture(scope="module")
def keys():
    return generate_key_pair(PARAMS, 4)


def test_sign_and_verify(keys):
    sk, pk = keys
    ms = [11, 22, 33, 44]
    sig = sign_message_block(sk, pk, ms)
    assert sig.verify(pk, ms) is True


def test_verify_rejects_other_messages(keys):
    sk, pk = keys
    sig = sign_message_block(sk, pk, [11, 22, 33])
    assert sig.verify(pk, [11, 22, 34]) is False


def test_signature_e_is_in_range(keys):
    sk, pk = keys
    sig = sign_message_block(sk, pk, [1])
    start = 1 << (PARAMS.le - 1)
    assert start <= sig.e <= start + (1 << (PARAMS.le_prime - 1))


def test_verify_rejects_small_e(keys):
    sk, pk = keys
    sig = sign_message_block(sk, pk, [5, 6])
    bad = CLSignature(a=sig.a, e=3, v=sig.v)
    assert bad.verify(pk, [5, 6]) is False


def test_verify_rejects_composite_e(keys):
    sk, pk = keys
    sig = sign_message_block(sk, pk, [5, 6])
    bad = CLSignature(a=sig.a, e=sig.e + 1, v=sig.v)
    assert bad.verify(pk, [5, 6]) is False


def test_randomize_keeps_validity(keys):
    sk, pk = keys
    ms = [7, 8, 9]
    sig = sign_message_block(sk, pk, ms)
    randomized = sig.randomize(pk)
    assert randomized.e == sig.e
    assert randomized.a != sig.a
    assert randomized.verify(pk, ms) is True


def test_keyshare_commitment(keys):
    sk, pk = keys
    keyshare = pow(pk.r[0], 987654321, pk.n)
    ms = [0, 5, 6]
    sig = sign_message_block_and_commitment(sk, pk, keyshare, ms)
    assert sig.verify(pk, ms) is False
    shared = CLSignature(a=sig.a, e=sig.e, v=sig.v, keyshare_p=keyshare)
    assert shared.verify(pk, ms) is True


def test_represent_is_multiplicative(keys):
    _, pk = keys
    whole = represent_to_public_key(pk, [12, 34])
    first = represent_to_public_key(pk, [12])
    second = represent_to_public_key(pk, [0, 34])
    assert whole == first * second % pk.n


def test_represent_hashes_long_exponents(keys):
    _, pk = keys
    long_exp = (1 << 300) + 12345
    hashed = int_hash_sha256(long_exp.to_bytes((long_exp.bit_length() + 7) // 8, "big"))
    assert represent_to_public_key(pk, [long_exp]) == represent_to_public_key(pk, [hashed])


def test_represent_of_empty_block_is_one(keys):
    _, pk = keys
    assert represent_to_public_key(pk, []) == 1