"""
Randomness handles.

Workflows receive an explicit source instead of reaching for a global
RNG, so tests can substitute a seeded one without patching anything.
Production code uses :class:`SecureRandom`, which draws from the OS
CSPRNG through :pymod:`secrets`.
"""

from __future__ import annotations

import random
import secrets
import uuid
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can hand out uniformly random bytes."""

    def token_bytes(self, n: int) -> bytes:
        ...


class SecureRandom:
    """OS-backed cryptographically secure source."""

    def token_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)

    def __repr__(self) -> str:
        return "SecureRandom()"


class SeededRandom:
    """
    Deterministic source for tests and reproducible benchmarks.

    **Not** cryptographically secure; never use it to issue real
    credentials.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    def token_bytes(self, n: int) -> bytes:
        if n == 0:
            return b""
        return self._rng.getrandbits(8 * n).to_bytes(n, "little")

    def __repr__(self) -> str:
        return f"SeededRandom({self._seed})"


def random_uuid4(rng: RandomSource) -> uuid.UUID:
    """Version-4 UUID (122 random bits) drawn from *rng*."""
    return uuid.UUID(bytes=rng.token_bytes(16), version=4)
