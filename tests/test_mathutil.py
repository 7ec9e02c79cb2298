import random

import pytest

from gabi.hashtool import int_hash_sha256
from gabi.mathutil import (
    NoModInverseError,
    crt,
    legendre_symbol,
    mod_inverse,
    mod_pow,
    mod_sqrt,
    prime_sqrt,
    probably_prime,
    random_big_int,
    represent_to_bases,
    sum_four_squares,
)


@pytest.mark.parametrize("bits", [8, 16, 32, 64, 128, 256])
def test_sum_four_squares(bits):
    rng = random.Random(1)
    for _ in range(10):
        val = rng.randrange(1 << bits)
        x, y, z, w = sum_four_squares(val)
        assert x * x + y * y + z * z + w * w == val


@pytest.mark.parametrize("val", [1, 2, 3, 4, 5, 8, 12, 16, 20, 64, 1000, 1 << 40])
def test_sum_four_squares_small(val):
    x, y, z, w = sum_four_squares(val)
    assert x * x + y * y + z * z + w * w == val


def test_sum_four_squares_zero():
    assert sum_four_squares(0) == (0, 0, 0, 0)


@pytest.mark.parametrize("n", [2, 3, 5, 7, 97, 7919, 2**127 - 1, 2**521 - 1])
def test_probably_prime_primes(n):
    assert probably_prime(n, 20)


@pytest.mark.parametrize("n", [0, 1, 4, 9, 561, 1105, 7917, (2**61 - 1) * (2**89 - 1)])
def test_probably_prime_composites(n):
    assert not probably_prime(n, 20)


def test_mod_inverse():
    for a in range(1, 97):
        assert a * mod_inverse(a, 97) % 97 == 1


def test_mod_inverse_missing():
    with pytest.raises(NoModInverseError):
        mod_inverse(6, 9)


def test_mod_pow_positive():
    assert mod_pow(2, 10, 1000) == pow(2, 10, 1000)


def test_mod_pow_negative():
    assert mod_pow(3, -1, 7) * 3 % 7 == 1
    assert mod_pow(3, -4, 101) * pow(3, 4, 101) % 101 == 1


def test_mod_pow_negative_without_inverse():
    with pytest.raises(NoModInverseError):
        mod_pow(6, -1, 9)


def test_represent_to_bases_plain():
    assert represent_to_bases([2, 3], [5, 7], 1000, 256) == (2**5 * 3**7) % 1000


def test_represent_to_bases_hashes_long_exponent():
    modulus = 1_000_003
    big = 1 << 300
    hashed = int_hash_sha256(big.to_bytes(38, "big"))
    assert represent_to_bases([5], [big], modulus, 256) == represent_to_bases(
        [5], [hashed], modulus, 256
    )


def test_random_big_int_range():
    for _ in range(200):
        assert 0 <= random_big_int(10) < 1024
    assert random_big_int(0) == 0


@pytest.mark.parametrize("p", [3, 7, 13, 17, 41, 97, 7919])
def test_legendre_symbol_matches_euler(p):
    for a in range(p):
        symbol = legendre_symbol(a, p)
        euler = pow(a, (p - 1) // 2, p)
        assert symbol == (0 if euler == 0 else (1 if euler == 1 else -1))


def test_crt():
    x = crt(3, 7, 5, 11)
    assert 0 <= x < 77
    assert x % 7 == 3
    assert x % 11 == 5


def test_crt_rejects_common_factor():
    with pytest.raises(ValueError):
        crt(1, 6, 2, 9)


@pytest.mark.parametrize("p", [7, 13, 17, 23, 41, 97, 257])
def test_prime_sqrt(p):
    squares = {x * x % p for x in range(p)}
    for a in range(p):
        root = prime_sqrt(a, p)
        if a in squares:
            assert root * root % p == a
        else:
            assert root is None


def test_mod_sqrt_with_four():
    factors = [4, 7, 11]
    n = 4 * 7 * 11
    for x in range(n):
        a = x * x % n
        root = mod_sqrt(a, factors)
        assert root * root % n == a


def test_mod_sqrt_non_square():
    assert mod_sqrt(3, [7]) is None
    assert mod_sqrt(2, [4, 7]) is None