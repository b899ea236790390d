"""
Prime-field arithmetic over the BN254 scalar field  F_q.

Every commitment, share and nonce in CRCS lives in the same field as the
downstream circom/snarkjs circuit (the scalar field of the BN254 curve),
so values can be handed to the prover as public or private inputs
without any re-encoding.

External encoding is the base-10 string of the unique representative in
[0, q), which is what snarkjs expects in its input JSON.
"""

from __future__ import annotations

import hashlib
from typing import Union

from .errors import InvalidParameter, MalformedFieldValue
from .randomness import RandomSource

# ── BN254 constants ─────────────────────────────────────────────────────
ORDER = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FIELD_BYTES = 32
U64_MAX = (1 << 64) - 1
_DECIMAL_CHUNK = 1000


# ── FieldElement  (F_q arithmetic, pure Python) ─────────────────────────
class FieldElement:
    """Element of the scalar field  F_q  where *q* = ``ORDER``."""

    __slots__ = ("_v",)

    def __init__(self, value: int) -> None:
        self._v = value % ORDER

    # constructors -----------------------------------------------------------
    @classmethod
    def zero(cls) -> FieldElement:
        return cls(0)

    @classmethod
    def random(cls, rng: RandomSource) -> FieldElement:
        """
        Sample by reducing 32 uniform bytes modulo *q*.

        No rejection loop: the bias is about 2^-3 relative to the size of
        the field, which is accepted for shares, blinding factors and
        nonces.
        """
        return cls.from_bytes_reduce(rng.token_bytes(FIELD_BYTES))

    @classmethod
    def from_bytes_reduce(cls, data: bytes) -> FieldElement:
        """Interpret *data* as a little-endian integer and reduce mod *q*."""
        return cls(int.from_bytes(data, "little"))

    @property
    def value(self) -> int:
        return self._v

    # arithmetic -------------------------------------------------------------
    def __add__(self, o: FieldElement) -> FieldElement:
        if not isinstance(o, FieldElement):
            return NotImplemented
        return FieldElement(self._v + o._v)

    def __sub__(self, o: FieldElement) -> FieldElement:
        if not isinstance(o, FieldElement):
            return NotImplemented
        return FieldElement(self._v - o._v)

    def __pow__(self, e: int) -> FieldElement:
        if e < 0:
            raise InvalidParameter("negative exponents are not supported")
        return FieldElement(pow(self._v, e, ORDER))

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, FieldElement):
            return self._v == o._v
        if isinstance(o, int):
            return self._v == o % ORDER
        return False

    def __hash__(self) -> int:
        return hash(self._v)

    def __repr__(self) -> str:
        s = str(self._v)
        return f"FieldElement({s[:8]}…)" if len(s) > 12 else f"FieldElement({s})"


# ── codec ───────────────────────────────────────────────────────────────
def encode_u64(n: int) -> FieldElement:
    """
    Map an unsigned 64-bit attribute value into the field.

    Injective because every u64 is already smaller than *q*.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise MalformedFieldValue(f"attribute value must be an integer, got {n!r}")
    if n < 0 or n > U64_MAX:
        raise MalformedFieldValue(f"attribute value out of u64 range: {n}")
    return FieldElement(n)


def hash_to_field(data: Union[bytes, str]) -> FieldElement:
    """
    SHA-256 of *data*, read as a little-endian integer, reduced mod *q*.

    Not a uniform random oracle onto F_q; the reduction bias is fine for
    domain-separation tags.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return FieldElement.from_bytes_reduce(hashlib.sha256(data).digest())


def to_decimal(e: FieldElement) -> str:
    """Canonical base-10 encoding (matches circom/snarkjs JSON inputs)."""
    return str(e.value)


def from_decimal(s: str) -> FieldElement:
    """
    Parse a base-10 string into the field.

    Only ASCII digits are accepted: no sign, whitespace or underscores.
    Values ≥ *q* are reduced rather than rejected.

    Raises
    ------
    MalformedFieldValue
        If *s* is not a non-negative decimal integer.
    """
    if not isinstance(s, str) or not s or not (s.isascii() and s.isdigit()):
        raise MalformedFieldValue(f"invalid field decimal string: {s!r}")
    # chunked so arbitrarily long strings stay under int()'s digit limit
    v = 0
    for i in range(0, len(s), _DECIMAL_CHUNK):
        chunk = s[i:i + _DECIMAL_CHUNK]
        v = (v * 10 ** len(chunk) + int(chunk)) % ORDER
    return FieldElement(v)
