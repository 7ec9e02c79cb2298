"""The issuer side of credential issuance."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from gabi.bigint import rand_int
from gabi.clsignature import CLSignature, sign_message_block_and_commitment
from gabi.hashtool import hash_commit
from gabi.keys import PrivateKey, PublicKey
from gabi.mathutil import mod_inverse, random_big_int


@dataclass
class SignatureProof:
    """Proof of knowledge of the inverse of e in a signature: challenge and response."""

    c: int
    e_response: int


@dataclass
class IssueSignatureMessage:
    """The issuer's final message: signature, its proof and the issuer's blind shares."""

    proof: SignatureProof
    signature: CLSignature
    non_revocation_witness: Any = None
    m_issuer: Dict[int, int] = field(default_factory=dict)


def random_element_multiplicative_group(modulus: int) -> int:
    """Return a random element of the unit group modulo ``modulus``."""
    while True:
        r = rand_int(modulus)
        if r > 0 and math.gcd(r, modulus) == 1:
            return r


@dataclass
class Issuer:
    """Key material of a credential issuer."""

    sk: PrivateKey
    pk: PublicKey
    context: int

    def issue_signature(
        self,
        u: int,
        attributes: Sequence[Optional[int]],
        witness: Any = None,
        nonce2: int = 0,
        blind: Sequence[int] = (),
    ) -> IssueSignatureMessage:
        """Sign the commitment ``u`` and the attributes, with a proof of correctness.

        The proofs accompanying ``u`` are not checked here.
        """
        signature, m_issuer = self.sign_commitment_and_attributes(u, attributes, blind)
        proof = self.prove_signature(signature, nonce2)
        return IssueSignatureMessage(
            proof=proof,
            signature=signature,
            non_revocation_witness=witness,
            m_issuer=m_issuer,
        )

    def sign_commitment_and_attributes(
        self,
        u: int,
        attributes: Sequence[Optional[int]],
        blind: Sequence[int] = (),
    ) -> Tuple[CLSignature, Dict[int, int]]:
        """Produce a partial signature on ``u`` and the attributes.

        Attributes at the indices in ``blind`` must be None; the issuer
        supplies a random share for each, returned keyed by index + 1.
        """
        m_issuer: Dict[int, int] = {}
        ms: List[Optional[int]] = [0, *attributes]
        for j in blind:
            if attributes[j] is not None:
                raise ValueError("attribute at random blind index should be nil before issuance")
            share = random_big_int(self.pk.params.lm - 1)
            m_issuer[j + 1] = share
            ms[j + 1] = share
        signature = sign_message_block_and_commitment(self.sk, self.pk, u, ms)
        return signature, m_issuer

    def prove_signature(self, signature: CLSignature, nonce2: int) -> SignatureProof:
        """Prove knowledge of the inverse of e in the signature."""
        n = self.pk.n
        order = self.sk.order
        q = pow(signature.a, signature.e, n)
        d = mod_inverse(signature.e, order)

        e_commit = random_element_multiplicative_group(order)
        a_commit = pow(q, e_commit, n)

        c = hash_commit([self.context, q, signature.a, nonce2, a_commit], False)
        e_response = (e_commit - c * d) % order
        return SignatureProof(c=c, e_response=e_response)