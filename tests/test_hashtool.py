import hashlib
import itertools

from gabi.hashtool import get_hash_number, hash_commit, int_hash_sha256


def _digest_int(hex_bytes):
    return int.from_bytes(hashlib.sha256(bytes.fromhex(hex_bytes)).digest(), "big")


def test_hash_commit_differs():
    hash_a = hash_commit([1, 2, 3], False)
    hash_b = hash_commit([1, 2], False)
    assert hash_a != hash_b
    assert 0 <= hash_a < 1 << 256


def test_hash_commit_der_encoding():
    assert hash_commit([1, 2, 3], False) == _digest_int("300c020103020101020102020103")
    assert hash_commit([], False) == _digest_int("3003020100")
    assert hash_commit([], True) == _digest_int("30060101ff020100")


def test_hash_commit_integer_padding():
    # 128 needs a leading zero byte; -1 is a single 0xff byte.
    assert hash_commit([128], False) == _digest_int("30070201010202 0080".replace(" ", ""))
    assert hash_commit([-1], False) == _digest_int("30060201010201ff")


def test_hash_commit_issig_changes_result():
    assert hash_commit([5, 6], True) != hash_commit([5, 6], False)
    assert hash_commit([5, 6], True) == hash_commit([5, 6], True)


def test_hash_commit_long_sequence():
    values = [1 << 1000] * 3
    assert hash_commit(values) == hash_commit(values, False)
    assert 0 <= hash_commit(values) < 1 << 256


def test_get_hash_number_distinct():
    numbers = [
        get_hash_number(None, None, 0, 10),
        get_hash_number(1, None, 0, 10),
        get_hash_number(2, None, 0, 10),
        get_hash_number(1, 2, 0, 10),
        get_hash_number(2, 2, 0, 10),
        get_hash_number(1, 3, 0, 10),
        get_hash_number(1, 2, 1, 10),
    ]
    for x, y in itertools.combinations(numbers, 2):
        assert x != y


def test_get_hash_number_lengths():
    assert get_hash_number(None, None, 0, 10).bit_length() >= 10
    assert get_hash_number(None, None, 0, 1000).bit_length() >= 1000
    assert get_hash_number(None, None, 0, 10000).bit_length() >= 10000


def test_get_hash_number_first_chunk():
    assert get_hash_number(7, None, 3, 10) == hash_commit([7, 3, 0])
    assert get_hash_number(7, None, 3, 300) % (1 << 256) == hash_commit([7, 3, 0])


def test_int_hash_sha256():
    assert int_hash_sha256(b"") == int(
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855", 16
    )