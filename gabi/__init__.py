"""Idemix credential primitives: issuer keys, CL signatures, issuance and modulus proofs."""

__version__ = "0.1.0"