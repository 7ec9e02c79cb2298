"""Issuer key pairs: generation, validation and their XML form."""

from __future__ import annotations

import base64
import binascii
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Iterator, List, Optional, Tuple, Union
from xml.sax.saxutils import escape

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from gabi.bigint import BigIntFormatError, from_xml_text, to_xml_text
from gabi.fastrandom import random_qr
from gabi.mathutil import legendre_symbol, probably_prime, random_big_int
from gabi.randomprime import SMALL_PRIMES
from gabi.sysparams import DEFAULT_SYSTEM_PARAMETERS, SystemParameters

XML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
DEFAULT_EPOCH_LENGTH = 432000

_NAMESPACE = "http://www.zurich.ibm.com/security/idemix"
_INDENT = "   "
_SIGNED_DECIMAL = re.compile(r"[+-]?[0-9]+")

Timestamp = Union[datetime, int]


class KeyFormatError(ValueError):
    """Raised when key material is malformed or inconsistent."""


def _unix(moment: Timestamp) -> int:
    if isinstance(moment, datetime):
        return int(moment.timestamp())
    return int(moment)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if elem is None:
        return None
    return next((c for c in elem if _local(c.tag) == name), None)


def _parse_root(data: Union[str, bytes], name: str) -> ET.Element:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise KeyFormatError(f"invalid XML: {exc}") from exc
    if root.tag != f"{{{_NAMESPACE}}}{name}":
        raise KeyFormatError(f"expected element <{name}> in name space {_NAMESPACE}")
    return root


def _parse_big(elem: Optional[ET.Element], name: str, required: bool) -> Optional[int]:
    node = _child(elem, name)
    if node is None:
        if required:
            raise KeyFormatError(f"missing element {name}")
        return None
    try:
        return from_xml_text((node.text or "").strip())
    except BigIntFormatError as exc:
        raise KeyFormatError(f"element {name}: {exc}") from exc


def _parse_plain_int(root: ET.Element, name: str) -> int:
    node = _child(root, name)
    if node is None:
        return 0
    text = (node.text or "").strip()
    if not _SIGNED_DECIMAL.fullmatch(text):
        raise KeyFormatError(f"element {name} is not an integer")
    return int(text)


def _parse_text(root: ET.Element, name: str) -> str:
    node = _child(root, name)
    return "" if node is None else (node.text or "")


def _line(depth: int, name: str, value: str) -> str:
    return f"{_INDENT * depth}<{name}>{escape(value)}</{name}>"


def _decode_der(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyFormatError(f"invalid base64 ECDSA key: {exc}") from exc


def _write_file(data: str, filename: str, force_overwrite: bool, mode: int) -> int:
    raw = data.encode("utf-8")
    if force_overwrite:
        with open(filename, "wb") as handle:
            handle.write(raw)
    else:
        fd = os.open(filename, os.O_RDWR | os.O_CREAT | os.O_EXCL, mode)
        with os.fdopen(fd, "wb") as handle:
            handle.write(raw)
    return len(raw)


@dataclass
class PrivateKey:
    """An issuer's private key: two safe primes and their halves."""

    p: int
    q: int
    p_prime: int
    q_prime: int
    counter: int = 0
    expiry_date: int = 0
    ecdsa_string: str = ""
    ecdsa: Optional[ec.EllipticCurvePrivateKey] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._parse_revocation_key()

    @property
    def n(self) -> int:
        return self.p * self.q

    @property
    def order(self) -> int:
        return self.p_prime * self.q_prime

    @classmethod
    def from_primes(
        cls, p: int, q: int, ecdsa: str = "", counter: int = 0, expiry_date: Timestamp = 0
    ) -> "PrivateKey":
        """Create a key from the safe primes ``p`` and ``q``."""
        return cls(
            p=p,
            q=q,
            p_prime=p >> 1,
            q_prime=q >> 1,
            counter=counter,
            expiry_date=_unix(expiry_date),
            ecdsa_string=ecdsa,
        )

    @classmethod
    def from_xml(cls, xml_input: Union[str, bytes], demo: bool = False) -> "PrivateKey":
        """Parse a key from XML; unless ``demo``, the key is validated."""
        root = _parse_root(xml_input, "IssuerPrivateKey")
        elements = _child(root, "Elements")
        key = cls(
            p=_parse_big(elements, "p", True),
            q=_parse_big(elements, "q", True),
            p_prime=_parse_big(elements, "pPrime", True),
            q_prime=_parse_big(elements, "qPrime", True),
            counter=_parse_plain_int(root, "Counter"),
            expiry_date=_parse_plain_int(root, "ExpiryDate"),
            ecdsa_string=_parse_text(root, "ECDSA"),
        )
        if not demo:
            key.validate()
        return key

    @classmethod
    def from_file(cls, filename: Union[str, os.PathLike], demo: bool = False) -> "PrivateKey":
        """Read a key from an XML file."""
        with open(filename, "rb") as handle:
            return cls.from_xml(handle.read(), demo)

    def validate(self) -> None:
        """Check that p and q are safe primes matching p' and q'."""
        if (self.p - 1) >> 1 != self.p_prime:
            raise KeyFormatError("Incompatible values for P and P'")
        if (self.q - 1) >> 1 != self.q_prime:
            raise KeyFormatError("Incompatible values for Q and Q'")
        if not _probably_safe_prime(self.p, 40):
            raise KeyFormatError("P is not a safe prime")
        if not _probably_safe_prime(self.q, 40):
            raise KeyFormatError("Q is not a safe prime")

    def revocation_supported(self) -> bool:
        return bool(self.ecdsa_string)

    def _parse_revocation_key(self) -> None:
        if self.ecdsa is not None or not self.revocation_supported():
            return
        data = _decode_der(self.ecdsa_string)
        try:
            key = serialization.load_der_private_key(data, None)
        except (ValueError, TypeError) as exc:
            raise KeyFormatError(f"invalid ECDSA private key: {exc}") from exc
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise KeyFormatError("revocation key is not an ECDSA key")
        self.ecdsa = key

    def to_xml(self) -> str:
        """Return the key as an XML document, header included."""
        lines = [
            f'<IssuerPrivateKey xmlns="{_NAMESPACE}">',
            _line(1, "Counter", str(self.counter)),
            _line(1, "ExpiryDate", str(self.expiry_date)),
            f"{_INDENT}<Elements>",
            _line(2, "p", to_xml_text(self.p)),
            _line(2, "q", to_xml_text(self.q)),
            _line(2, "pPrime", to_xml_text(self.p_prime)),
            _line(2, "qPrime", to_xml_text(self.q_prime)),
            f"{_INDENT}</Elements>",
        ]
        if self.ecdsa_string:
            lines.append(_line(1, "ECDSA", self.ecdsa_string))
        lines.append("</IssuerPrivateKey>")
        return XML_HEADER + "\n".join(lines)

    def write_to(self, stream: BinaryIO) -> int:
        """Write the XML form to a binary stream; return the number of bytes."""
        raw = self.to_xml().encode("utf-8")
        stream.write(raw)
        return len(raw)

    def write_to_file(self, filename: Union[str, os.PathLike], force_overwrite: bool = False) -> int:
        """Write the XML form to a file, refusing to overwrite unless forced."""
        return _write_file(self.to_xml(), filename, force_overwrite, 0o600)


@dataclass
class PublicKey:
    """An issuer's public key."""

    n: int
    z: Optional[int] = None
    s: Optional[int] = None
    r: List[int] = field(default_factory=list)
    g: Optional[int] = None
    h: Optional[int] = None
    counter: int = 0
    expiry_date: int = 0
    epoch_length: int = DEFAULT_EPOCH_LENGTH
    ecdsa_string: str = ""
    ecdsa: Optional[ec.EllipticCurvePublicKey] = field(default=None, compare=False, repr=False)
    params: Optional[SystemParameters] = None
    issuer: str = ""

    def __post_init__(self) -> None:
        if self.params is None:
            self.params = DEFAULT_SYSTEM_PARAMETERS.get(self.n.bit_length())
        self._parse_revocation_key()

    @classmethod
    def _parse(cls, data: Union[str, bytes], strict: bool) -> "PublicKey":
        root = _parse_root(data, "IssuerPublicKey")
        elements = _child(root, "Elements")
        n = _parse_big(elements, "n", True)
        if strict and n.bit_length() not in DEFAULT_SYSTEM_PARAMETERS:
            raise KeyFormatError(f"Unknown keylength {n.bit_length()}")
        features = _child(root, "Features")
        epoch = _child(features, "Epoch")
        epoch_length = 0
        if epoch is not None:
            length = epoch.get("length", "0").strip()
            if not _SIGNED_DECIMAL.fullmatch(length):
                raise KeyFormatError("epoch length is not an integer")
            epoch_length = int(length)
        return cls(
            n=n,
            z=_parse_big(elements, "Z", False),
            s=_parse_big(elements, "S", False),
            r=_parse_bases(_child(elements, "Bases")),
            g=_parse_big(elements, "G", False),
            h=_parse_big(elements, "H", False),
            counter=_parse_plain_int(root, "Counter"),
            expiry_date=_parse_plain_int(root, "ExpiryDate"),
            epoch_length=epoch_length,
            ecdsa_string=_parse_text(root, "ECDSA"),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "PublicKey":
        """Parse a key from XML bytes; the modulus must have a known length."""
        return cls._parse(data, strict=True)

    @classmethod
    def from_xml(cls, xml_input: str) -> "PublicKey":
        """Parse a key from an XML string."""
        return cls.from_bytes(xml_input.encode("utf-8"))

    @classmethod
    def from_file(cls, filename: Union[str, os.PathLike]) -> "PublicKey":
        """Read a key from an XML file."""
        with open(filename, "rb") as handle:
            return cls._parse(handle.read(), strict=False)

    def revocation_supported(self) -> bool:
        return self.g is not None and self.h is not None and bool(self.ecdsa_string)

    def _parse_revocation_key(self) -> None:
        if self.ecdsa is not None or not self.revocation_supported():
            return
        data = _decode_der(self.ecdsa_string)
        try:
            key = serialization.load_der_public_key(data)
        except (ValueError, TypeError) as exc:
            raise KeyFormatError(f"invalid ECDSA public key: {exc}") from exc
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise KeyFormatError("revocation key is not an ECDSA key")
        self.ecdsa = key

    def to_xml(self) -> str:
        """Return the key as an XML document, header included."""
        lines = [
            f'<IssuerPublicKey xmlns="{_NAMESPACE}">',
            _line(1, "Counter", str(self.counter)),
            _line(1, "ExpiryDate", str(self.expiry_date)),
            f"{_INDENT}<Elements>",
            _line(2, "n", to_xml_text(self.n)),
        ]
        for name, value in (("Z", self.z), ("S", self.s), ("G", self.g), ("H", self.h)):
            if value is not None:
                lines.append(_line(2, name, to_xml_text(value)))
        if self.r:
            lines.append(f'{_INDENT * 2}<Bases num="{len(self.r)}">')
            lines.extend(_line(3, f"Base_{i}", to_xml_text(v)) for i, v in enumerate(self.r))
            lines.append(f"{_INDENT * 2}</Bases>")
        else:
            lines.append(f'{_INDENT * 2}<Bases num="0"></Bases>')
        lines += [
            f"{_INDENT}</Elements>",
            f"{_INDENT}<Features>",
            f'{_INDENT * 2}<Epoch length="{self.epoch_length}"></Epoch>',
            f"{_INDENT}</Features>",
        ]
        if self.ecdsa_string:
            lines.append(_line(1, "ECDSA", self.ecdsa_string))
        lines.append("</IssuerPublicKey>")
        return XML_HEADER + "\n".join(lines)

    def write_to(self, stream: BinaryIO) -> int:
        """Write the XML form to a binary stream; return the number of bytes."""
        raw = self.to_xml().encode("utf-8")
        stream.write(raw)
        return len(raw)

    def write_to_file(self, filename: Union[str, os.PathLike], force_overwrite: bool = False) -> int:
        """Write the XML form to a file, refusing to overwrite unless forced."""
        return _write_file(self.to_xml(), filename, force_overwrite, 0o644)

    def base(self, name: str) -> Optional[int]:
        """Return the base called Z, S, G, H or R<i>, or None if there is none."""
        if name in ("Z", "S", "G", "H"):
            return {"Z": self.z, "S": self.s, "G": self.g, "H": self.h}[name]
        if name.startswith("R"):
            digits = name[1:]
            if not _SIGNED_DECIMAL.fullmatch(digits):
                return None
            index = int(digits)
            if 0 <= index < len(self.r):
                return self.r[index]
        return None

    def exp(self, name: str, exponent: int, modulus: int) -> Optional[int]:
        """Return the named base raised to ``exponent`` modulo ``modulus``, or None."""
        base = self.base(name)
        if base is None:
            return None
        return pow(base, exponent, modulus)

    def names(self) -> List[str]:
        """Return the names of all bases in this key."""
        result = ["Z", "S"]
        if self.g is not None and self.h is not None:
            result += ["G", "H"]
        result += [f"R{i}" for i in range(len(self.r))]
        return result


def _parse_bases(elem: Optional[ET.Element]) -> List[int]:
    if elem is None:
        return []
    num_text = elem.get("num", "0").strip()
    if not _SIGNED_DECIMAL.fullmatch(num_text):
        raise KeyFormatError("Bases num attribute is not an integer")
    num = int(num_text)
    children = list(elem)
    if num < 0 or num > len(children):
        raise KeyFormatError("Bases num attribute does not match the bases present")
    try:
        return [from_xml_text((c.text or "").strip()) for c in children[:num]]
    except BigIntFormatError as exc:
        raise KeyFormatError(f"invalid base: {exc}") from exc


def _probably_safe_prime(p: int, rounds: int) -> bool:
    return p > 4 and probably_prime(p, rounds) and probably_prime((p - 1) >> 1, rounds)


def _survives_sieve(q: int, p: int) -> bool:
    return not any(
        (q % prime == 0 and q != prime) or (p % prime == 0 and p != prime)
        for prime in SMALL_PRIMES
    )


def _safe_primes(bits: int) -> Iterator[int]:
    if bits < 3:
        raise ValueError("safe prime size must be at least 3 bits")
    while True:
        q = random_big_int(bits - 1) | (1 << (bits - 2)) | 1
        p = 2 * q + 1
        if _survives_sieve(q, p) and probably_prime(q, 20) and probably_prime(p, 20):
            yield p


def _generate_safe_prime_pair(params: SystemParameters) -> Tuple[int, int]:
    found: List[int] = []
    for p in _safe_primes(params.ln // 2):
        if (p >> 1) % 8 == 1:
            continue
        match = next(
            (
                q
                for q in found
                if (p * q).bit_length() == params.ln and p % 8 != q % 8
            ),
            None,
        )
        if match is None:
            found.append(p)
            continue
        return p, match
    raise AssertionError("unreachable")


def _generate_revocation_keypair(priv: PrivateKey, pub: PublicKey) -> None:
    if pub.revocation_supported() or priv.revocation_supported():
        raise ValueError("revocation parameters already present")
    key = ec.generate_private_key(ec.SECP256R1())
    private_der = key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    public_der = key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    priv.ecdsa_string = base64.b64encode(private_der).decode("ascii")
    priv.ecdsa = key
    pub.ecdsa_string = base64.b64encode(public_der).decode("ascii")
    pub.ecdsa = key.public_key()
    pub.g = random_qr(pub.n)
    pub.h = random_qr(pub.n)


def _random_exponent(bits: int, n: int) -> int:
    while True:
        x = random_big_int(bits)
        if 2 < x < n:
            return x


def generate_key_pair(
    params: SystemParameters,
    num_attributes: int,
    counter: int = 0,
    expiry_date: Timestamp = 0,
) -> Tuple[PrivateKey, PublicKey]:
    """Generate an issuer key pair with ``num_attributes`` R bases."""
    p, q = _generate_safe_prime_pair(params)
    expiry = _unix(expiry_date)
    priv = PrivateKey(
        p=p, q=q, p_prime=p >> 1, q_prime=q >> 1, counter=counter, expiry_date=expiry
    )
    n = priv.n

    while True:
        s = random_big_int(params.ln)
        if s > n:
            continue
        if legendre_symbol(s, p) == 1 and legendre_symbol(s, q) == 1:
            break

    prime_size = params.ln // 2
    z = pow(s, _random_exponent(prime_size, n), n)
    r = [pow(s, _random_exponent(prime_size, n), n) for _ in range(num_attributes)]

    pub = PublicKey(
        n=n,
        z=z,
        s=s,
        r=r,
        counter=counter,
        expiry_date=expiry,
        epoch_length=DEFAULT_EPOCH_LENGTH,
        params=params,
    )
    _generate_revocation_keypair(priv, pub)
    return priv, pub