r"""
MiMC commitment hash over F_q.

Keyed permutation with feed-forward, one power map per round:

    y_0 = x
    y_{i+1} = (y_i + key + c_i)^e          for  i = 0 … rounds-1
    R(x, key) = y_rounds + x

Multi-input hashing absorbs inputs left to right with a zero initial key:

    H(a, b, c, …) = R( … R(R(a, 0), b) …, c)

With the default parameters (``rounds=1``, ``e=7``, ``c_0=0``) the round
function is exactly  R(x, key) = (x + key)^7 + x, which is what the
attribute circuit implements.  Changing *any* parameter produces
commitments that the deployed circuit will reject; rounds and constants
must be changed on both sides together.

Two commitments are built on top:

    C  = H(x, r)                    base commitment to an attribute
    SC = H(C, nonce, domain)        per-session re-binding of C

References
----------
- Albrecht, Grassi, Rechberger, Roy, Tiessen (2016). "MiMC: Efficient
  Encryption and Cryptographic Hashing with Minimal Multiplicative
  Complexity."  ASIACRYPT 2016.
"""

from __future__ import annotations

import math
from typing import List, Optional, Protocol

from .errors import InvalidParameter
from .field import ORDER, FieldElement, hash_to_field

_TAG_CONSTANTS = b"CRCS/v1/mimc/constants"


class CommitmentHash(Protocol):
    """A deterministic function from one or more field elements to F_q."""

    def __call__(self, *inputs: FieldElement) -> FieldElement:
        ...


# ── round constants ─────────────────────────────────────────────────────
def derive_constants(rounds: int, seed: bytes = _TAG_CONSTANTS) -> List[FieldElement]:
    """
    Round constants  c_0 = 0,  c_i = H_F(seed ‖ i)  for  i ≥ 1.

    Keeping c_0 at zero makes the single-round instance coincide with
    the plain  (x + key)^e + x  construction.
    """
    if rounds < 1:
        raise InvalidParameter("MiMC needs at least one round")
    consts = [FieldElement.zero()]
    for i in range(1, rounds):
        consts.append(hash_to_field(seed + i.to_bytes(4, "big")))
    return consts


# ── hash ────────────────────────────────────────────────────────────────
class MiMC:
    """
    Parameterised MiMC instance.

    Parameters
    ----------
    exponent : int
        Power map exponent *e*; must satisfy  gcd(e, q − 1) = 1  so that
        x ↦ x^e is a permutation of F_q.
    rounds : int
        Number of rounds per absorbed input.
    constants : list[FieldElement] or None
        Explicit round constants.  Derived from *constants_seed* when
        omitted.
    """

    __slots__ = ("exponent", "constants")

    def __init__(
        self,
        exponent: int = 7,
        rounds: int = 1,
        constants: Optional[List[FieldElement]] = None,
        constants_seed: bytes = _TAG_CONSTANTS,
    ) -> None:
        if exponent < 3 or math.gcd(exponent, ORDER - 1) != 1:
            raise InvalidParameter(
                f"exponent {exponent} is not a permutation of F_q "
                "(need e ≥ 3 and gcd(e, q-1) = 1)"
            )
        if constants is None:
            constants = derive_constants(rounds, constants_seed)
        elif len(constants) != rounds:
            raise InvalidParameter(
                f"expected {rounds} round constants, got {len(constants)}"
            )
        self.exponent = exponent
        self.constants = tuple(constants)

    @property
    def rounds(self) -> int:
        return len(self.constants)

    def round(self, x: FieldElement, key: FieldElement) -> FieldElement:
        """Keyed permutation with feed-forward:  R(x, key)."""
        y = x
        for c in self.constants:
            y = (y + key + c) ** self.exponent
        return y + x

    def __call__(self, *inputs: FieldElement) -> FieldElement:
        if not inputs:
            raise InvalidParameter("MiMC hash needs at least one input")
        h = self.round(inputs[0], FieldElement.zero())
        for key in inputs[1:]:
            h = self.round(h, key)
        return h

    def __repr__(self) -> str:
        return f"MiMC(exponent={self.exponent}, rounds={self.rounds})"


DEFAULT_MIMC = MiMC()


def mimc2(a: FieldElement, b: FieldElement) -> FieldElement:
    """H2(a, b) = R(R(a, 0), b)  with the default parameters."""
    return DEFAULT_MIMC(a, b)


def mimc3(a: FieldElement, b: FieldElement, c: FieldElement) -> FieldElement:
    """H3(a, b, c) = R(R(R(a, 0), b), c)  with the default parameters."""
    return DEFAULT_MIMC(a, b, c)


# ── commitments ─────────────────────────────────────────────────────────
def base_commitment(
    x: FieldElement,
    r: FieldElement,
    hasher: CommitmentHash = DEFAULT_MIMC,
) -> FieldElement:
    """C = H(x, r)."""
    return hasher(x, r)


def session_commitment(
    c: FieldElement,
    nonce: FieldElement,
    domain: FieldElement,
    hasher: CommitmentHash = DEFAULT_MIMC,
) -> FieldElement:
    """SC = H(C, nonce, domain)."""
    return hasher(c, nonce, domain)


def verifier_domain(verifier_id: str) -> FieldElement:
    """Domain tag of a verifier: SHA-256(id) reduced into F_q."""
    return hash_to_field(verifier_id.encode("utf-8"))
