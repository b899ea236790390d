"""
Issuer signatures over credential commitments.

The signed message is a SHA-256 digest over the credential id followed
by the decimal encodings of the base commitments, in issuance order:

    m = SHA-256( cred_id ‖ dec(C_1) ‖ dec(C_2) ‖ … )

Two interchangeable schemes are provided, both with 32-byte public keys
and 64-byte deterministic signatures:

- **Ed25519** (RFC 8032) via PyNaCl / libsodium (default).
- **BIP-340 Schnorr** over secp256k1 via ``coincurve`` (libsecp256k1),
  with x-only public keys.

The algorithm is configuration, not part of the credential record; a
verifier has to know which one the issuer runs.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from coincurve import PrivateKey as _SK, PublicKeyXOnly as _XPK
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .errors import InvalidParameter
from .field import FieldElement, to_decimal
from .randomness import RandomSource, SecureRandom

PUBLIC_KEY_BYTES = 32
SIGNATURE_BYTES = 64
SEED_BYTES = 32

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class SignatureAlgorithm(str, Enum):
    """Supported issuer signature algorithms."""

    ED25519 = "ed25519"
    SCHNORR_SECP256K1 = "schnorr-secp256k1"


@dataclass(frozen=True)
class KeyPair:
    """Raw issuer key material.  ``secret_key`` never leaves the issuer."""

    secret_key: bytes
    public_key: bytes

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key.hex()[:16]}…)"


# ── message ─────────────────────────────────────────────────────────────
def credential_message(
    credential_id: str,
    commitments: Sequence[FieldElement],
) -> bytes:
    """
    Digest signed by the issuer.

    *commitments* must be in the credential's canonical attribute order;
    the same order has to be used again at verification time.
    """
    h = hashlib.sha256()
    h.update(credential_id.encode("utf-8"))
    for c in commitments:
        h.update(to_decimal(c).encode("ascii"))
    return h.digest()


# ── schemes ─────────────────────────────────────────────────────────────
class SignatureScheme(ABC):
    """Key generation, signing and verification for one algorithm."""

    algorithm: SignatureAlgorithm

    @abstractmethod
    def generate_keypair(self, rng: Optional[RandomSource] = None) -> KeyPair:
        ...

    @abstractmethod
    def sign(self, secret_key: bytes, digest: bytes) -> bytes:
        ...

    @abstractmethod
    def verify(self, public_key: bytes, digest: bytes, signature: bytes) -> bool:
        ...


class Ed25519Scheme(SignatureScheme):
    """Ed25519; the secret key is the 32-byte RFC 8032 seed."""

    algorithm = SignatureAlgorithm.ED25519

    def generate_keypair(self, rng: Optional[RandomSource] = None) -> KeyPair:
        if rng is None:
            rng = SecureRandom()
        seed = rng.token_bytes(SEED_BYTES)
        sk = SigningKey(seed)
        return KeyPair(secret_key=seed, public_key=bytes(sk.verify_key))

    def sign(self, secret_key: bytes, digest: bytes) -> bytes:
        return SigningKey(secret_key).sign(digest).signature

    def verify(self, public_key: bytes, digest: bytes, signature: bytes) -> bool:
        if len(public_key) != PUBLIC_KEY_BYTES or len(signature) != SIGNATURE_BYTES:
            return False
        try:
            VerifyKey(public_key).verify(digest, signature)
        except (BadSignatureError, ValueError):
            return False
        return True


class SchnorrScheme(SignatureScheme):
    """BIP-340 Schnorr on secp256k1 with x-only public keys."""

    algorithm = SignatureAlgorithm.SCHNORR_SECP256K1

    def generate_keypair(self, rng: Optional[RandomSource] = None) -> KeyPair:
        if rng is None:
            rng = SecureRandom()
        # uniform in [1, n-1] via rejection sampling
        while True:
            secret = rng.token_bytes(SEED_BYTES)
            if 0 < int.from_bytes(secret, "big") < SECP256K1_ORDER:
                break
        public = _XPK.from_secret(secret).format()
        return KeyPair(secret_key=secret, public_key=public)

    def sign(self, secret_key: bytes, digest: bytes) -> bytes:
        # aux_randomness=None gives the deterministic BIP-340 variant
        return _SK(secret_key).sign_schnorr(digest, None)

    def verify(self, public_key: bytes, digest: bytes, signature: bytes) -> bool:
        if len(public_key) != PUBLIC_KEY_BYTES or len(signature) != SIGNATURE_BYTES:
            return False
        try:
            return _XPK(public_key).verify(signature, digest)
        except (ValueError, TypeError):
            return False


_SCHEMES = {
    SignatureAlgorithm.ED25519: Ed25519Scheme,
    SignatureAlgorithm.SCHNORR_SECP256K1: SchnorrScheme,
}


def get_scheme(algorithm=SignatureAlgorithm.ED25519) -> SignatureScheme:
    """Instantiate the scheme for *algorithm* (enum member or its value)."""
    try:
        algorithm = SignatureAlgorithm(algorithm)
    except ValueError as exc:
        raise InvalidParameter(f"unknown signature algorithm: {algorithm!r}") from exc
    return _SCHEMES[algorithm]()


# ── hex codecs ──────────────────────────────────────────────────────────
def _encode_fixed(data: bytes, size: int, what: str) -> str:
    if len(data) != size:
        raise InvalidParameter(f"{what} must be {size} bytes, got {len(data)}")
    return data.hex()


def _decode_fixed(text: str, size: int, what: str) -> bytes:
    try:
        data = bytes.fromhex(text)
    except ValueError as exc:
        raise InvalidParameter(f"{what} is not valid hex") from exc
    if len(data) != size:
        raise InvalidParameter(f"{what} must be {size} bytes, got {len(data)}")
    return data


def encode_key(public_key: bytes) -> str:
    return _encode_fixed(public_key, PUBLIC_KEY_BYTES, "public key")


def decode_key(text: str) -> bytes:
    return _decode_fixed(text, PUBLIC_KEY_BYTES, "public key")


def encode_signature(signature: bytes) -> str:
    return _encode_fixed(signature, SIGNATURE_BYTES, "signature")


def decode_signature(text: str) -> bytes:
    return _decode_fixed(text, SIGNATURE_BYTES, "signature")
