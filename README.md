# gabi

Building blocks for Idemix-style attribute-based credentials: issuer key
pairs in the Idemix XML format, Camenisch–Lysyanskaya signatures over blocks
of attributes, the issuer's side of issuance, and two non-interactive proofs
about the structure of an RSA modulus.

Integers are plain Python `int` values throughout.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Modules

- `gabi.sysparams` – `BaseParameters` and `SystemParameters`.
  `SystemParameters.from_base` computes the derived bit lengths;
  `DEFAULT_SYSTEM_PARAMETERS` holds the parameters for 1024, 2048 and 4096
  bit keys, and `DEFAULT_KEY_LENGTHS` lists those lengths in order.
- `gabi.keys` – `PrivateKey` and `PublicKey`.
  - `PrivateKey.from_primes`, `PrivateKey.from_xml` (validated unless
    `demo` is true), `PrivateKey.from_file` and `PrivateKey.validate`, which
    checks that p and q are safe primes matching p' and q'.
  - `PublicKey.from_bytes` and `PublicKey.from_xml` reject a modulus whose
    length has no default parameters; `PublicKey.from_file` does not.
  - `to_xml`, `write_to` (binary stream) and `write_to_file`, which refuses
    to overwrite an existing file unless `force_overwrite` is true.
  - `PublicKey.base`, `PublicKey.exp` and `PublicKey.names` look up the
    bases Z, S, G, H and R0, R1, ….
  - `generate_key_pair` searches for a suitable pair of safe primes and
    derives S, Z and the R bases; it also creates a P-256 ECDSA key pair and
    the G and H bases used for revocation.
  - Malformed or inconsistent key material raises `KeyFormatError`.
- `gabi.clsignature` – `CLSignature` with `verify` and `randomize`, plus
  `sign_message_block`, `sign_message_block_and_commitment` and
  `represent_to_public_key`.
- `gabi.issuer` – `Issuer` signs a user's commitment together with
  attributes (`issue_signature`, `sign_commitment_and_attributes`) and proves
  the signature correct (`prove_signature`, giving a `SignatureProof`).
  Attributes at `blind` indices must be `None`; the issuer fills in random
  shares and returns them in `IssueSignatureMessage.m_issuer`, keyed by
  index + 1. The proofs that accompany the commitment are not checked.
- `gabi.almostsafeprimeproduct` – `build_commitments`, `build_proof`,
  `verify_structure`, `extract_commitments` and `verify_proof`: a proof, built
  from p' and q', that N is a product of two almost safe primes.
- `gabi.disjointprimeproduct` – `build_proof`, `verify_structure` and
  `verify_proof`: a proof, built from p and q, that N is a product of exactly
  two primes.
- `gabi.bigint` – base64 JSON (`to_json`, `from_json`) and base-10 XML
  (`to_xml_text`, `from_xml_text`) encodings of non-negative integers, and
  `rand_int` for uniform random integers below a limit. Negative values
  raise `BigIntFormatError`.
- `gabi.hashtool` – `hash_commit` (SHA-256 over a DER sequence of
  integers), `get_hash_number` and `int_hash_sha256`.
- `gabi.mathutil` – `probably_prime`, `mod_inverse` (raising
  `NoModInverseError`), `mod_pow` with negative exponents, `legendre_symbol`,
  `crt`, `prime_sqrt`, `mod_sqrt`, `sum_four_squares`, `represent_to_bases`
  and `random_big_int`.
- `gabi.randomprime` – `random_prime_in_range`.
- `gabi.fastrandom` – `CPRNG`, a seeded AES-256 counter-mode generator, and
  `fast_random_big_int` and `random_qr` drawing from a process-wide instance.
- `gabi.fastmod` – `FastMod`, reduction modulo numbers close below a power
  of two.

## Example

```python
from gabi.sysparams import DEFAULT_SYSTEM_PARAMETERS
from gabi.keys import generate_key_pair
from gabi.clsignature import sign_message_block

params = DEFAULT_SYSTEM_PARAMETERS[1024]
sk, pk = generate_key_pair(params, 6)
attributes = [1, 2, 3]
signature = sign_message_block(sk, pk, attributes)
assert signature.verify(pk, attributes)
assert signature.randomize(pk).verify(pk, attributes)
```

Generating a key pair searches for safe primes and can take a while,
especially for the larger key lengths.

## What the package does not do

- There is no user side of issuance: nothing builds the commitment `u` or
  its proofs, and nothing turns an `IssueSignatureMessage` into a
  credential.
- There are no disclosure proofs and no range proofs over attributes.
- Revocation is limited to the key material: `Issuer.issue_signature`
  passes a `witness` through to the message unchanged, and nothing creates,
  checks or updates witnesses or accumulators.
- The two modulus proofs are parts of a proof that a key was generated
  correctly; the other parts of such a proof are not included.
- There is no command-line program.