import os

import pytest

from gabi.bigint import (
    BigIntFormatError,
    encode_base64,
    from_json,
    from_xml_text,
    rand_int,
    to_json,
    to_xml_text,
)


def _round_trip(value):
    decoded = from_json(to_json(value))
    assert decoded == value
    return decoded


def test_int():
    assert _round_trip(42) == 42


def test_zero():
    assert _round_trip(0) == 0


def test_big_int():
    s = "8931748931759284679376938475395713602744853768923750102"
    assert str(_round_trip(int(s, 10))) == s


def test_random():
    value = rand_int(1 << 100)
    assert 0 <= value < 1 << 100
    assert _round_trip(value) == value


def test_negative():
    with pytest.raises(BigIntFormatError):
        to_json(-42)
    with pytest.raises(BigIntFormatError):
        from_json("-1234567891234567890123456789012345678")


def test_pinned_encodings():
    assert encode_base64(42) == "Kg=="
    assert to_json(0) == '""'
    assert to_json(256) == '"AQA="'


def test_decimal_json():
    assert from_json("12345") == 12345
    assert from_json(b"12345678901234567890123") == 12345678901234567890123


@pytest.mark.parametrize("raw", ['"!!!"', '"Kg', "1.5", "true", "[1]", ""])
def test_invalid_json(raw):
    with pytest.raises(BigIntFormatError):
        from_json(raw)


def test_xml_round_trip():
    value = 98765432109876543210
    assert to_xml_text(value) == "98765432109876543210"
    assert from_xml_text(to_xml_text(value)) == value


@pytest.mark.parametrize("text", ["-5", "abc", "", " 12", "0x10"])
def test_xml_invalid(text):
    with pytest.raises(BigIntFormatError):
        from_xml_text(text)


def test_rand_int_deterministic_source():
    def read(n):
        return b"\xff" * n

    # With all bits set, the masked candidate is limit - 1 for a power-of-two limit.
    assert rand_int(1 << 16, read) == (1 << 16) - 1
    assert rand_int(1, read) == 0


def test_rand_int_range():
    for _ in range(50):
        assert 0 <= rand_int(1000, os.urandom) < 1000


def test_rand_int_bad_limit():
    with pytest.raises(ValueError):
        rand_int(0)


def test_rand_int_short_read():
    with pytest.raises(ValueError):
        rand_int(1 << 64, lambda n: b"")