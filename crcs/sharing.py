"""
2-of-2 additive secret sharing over F_q.

    x1 ←$ F_q,    x2 = x − x1

Either share alone is uniformly distributed and says nothing about *x*;
together they reconstruct it with a single field addition.  The
downstream circuit recomputes  x = x1 + x2  from its private inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .field import FieldElement
from .randomness import RandomSource, SecureRandom


@dataclass(frozen=True)
class AttributeShare:
    """A pair  (x1, x2)  with  x1 + x2 ≡ x  (mod q)."""

    x1: FieldElement
    x2: FieldElement

    def reconstruct(self) -> FieldElement:
        return self.x1 + self.x2

    def __iter__(self):
        yield self.x1
        yield self.x2


def share(x: FieldElement, rng: Optional[RandomSource] = None) -> AttributeShare:
    """
    Split *x* into two additive shares.

    Randomised on every call; x1 is never reused across attributes or
    issuances.
    """
    if rng is None:
        rng = SecureRandom()
    x1 = FieldElement.random(rng)
    return AttributeShare(x1=x1, x2=x - x1)


def reconstruct(x1: FieldElement, x2: FieldElement) -> FieldElement:
    return x1 + x2
