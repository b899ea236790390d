"""
Per-verifier session binding.

Each presentation re-binds the credential's base commitments to a fresh
nonce and to the verifier's domain tag:

    nonce  ←$ F_q                     fresh per session
    domain = H_F(verifier_id)         SHA-256 reduced into F_q
    SC_a   = H(C_a, nonce, domain)    for every attribute a

Two sessions never share an SC (distinct nonces), and two verifiers
never see the same SC (distinct domains), so colluding verifiers cannot
link presentations of one credential.  The threshold statements
themselves are proven downstream by the circuit; nothing here checks
them.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Dict, Mapping, Optional, Tuple

from .errors import InvalidParameter, NonceReuseError
from .field import FieldElement, from_decimal, to_decimal
from .logger import get_logger
from .mimc import DEFAULT_MIMC, CommitmentHash, session_commitment, verifier_domain
from .models import Credential, Session, SessionPublic
from .randomness import RandomSource, SecureRandom

logger = get_logger(__name__)

DEFAULT_MAX_REMEMBERED = 100_000


class SessionBinder:
    """
    Creates :class:`~crcs.models.Session` records from a credential.

    The binder remembers the last *max_remembered* ``(credential,
    verifier, nonce)`` triples it has produced and refuses to emit the
    same one twice.  That memory is per instance and guarded by a lock,
    so one binder may be shared between threads; independent binders
    share nothing.  Past the bound the oldest triples are forgotten.
    """

    def __init__(
        self,
        hasher: CommitmentHash = DEFAULT_MIMC,
        max_remembered: int = DEFAULT_MAX_REMEMBERED,
    ) -> None:
        if max_remembered < 1:
            raise InvalidParameter("max_remembered must be at least 1")
        self._hasher = hasher
        self._max_remembered = max_remembered
        self._used: "OrderedDict[Tuple[str, str, int], None]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def remembered(self) -> int:
        """Number of nonce triples currently held."""
        return len(self._used)

    def bind(
        self,
        credential: Credential,
        verifier_id: str,
        thresholds: Mapping[str, int],
        rng: Optional[RandomSource] = None,
        nonce: Optional[FieldElement] = None,
    ) -> Session:
        """
        Bind *credential* to a new session with *verifier_id*.

        Parameters
        ----------
        credential : Credential
            Previously issued credential.
        verifier_id : str
            Verifier identifier, e.g. ``"BANK_A"``.
        thresholds : mapping
            Attribute name → minimum value; stored as ``"<name>_min"``.
        rng : RandomSource or None
            Source for the nonce (a fresh ``SecureRandom`` if omitted).
        nonce : FieldElement or None
            Explicit nonce, for replaying a recorded session.  Normally
            left to the binder.

        Raises
        ------
        MalformedFieldValue
            If a stored base commitment is not a decimal string.
        NonceReuseError
            If this binder already used *nonce* for the same credential
            and verifier.
        """
        if not verifier_id:
            raise InvalidParameter("verifier id must be a non-empty string")
        for name, value in thresholds.items():
            if name not in credential.attributes:
                raise InvalidParameter(f"threshold for unknown attribute {name!r}")
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidParameter(f"threshold for {name!r} must be a non-negative integer")

        if nonce is None:
            nonce = FieldElement.random(rng if rng is not None else SecureRandom())

        key = (credential.credential_id, verifier_id, nonce.value)
        self._reserve(key)
        try:
            domain = verifier_domain(verifier_id)
            public: Dict[str, SessionPublic] = {}
            for name, attr in credential.ordered_attributes():
                c = from_decimal(attr.c)
                sc = session_commitment(c, nonce, domain, self._hasher)
                public[name] = SessionPublic(sc=to_decimal(sc))
        except BaseException:
            with self._lock:
                self._used.pop(key, None)
            raise

        session = Session(
            verifier_id=verifier_id,
            nonce=to_decimal(nonce),
            thresholds={f"{name}_min": value for name, value in thresholds.items()},
            public=public,
        )
        logger.info(
            "session_bound",
            credential_id=credential.credential_id,
            verifier_id=verifier_id,
            attributes=list(public),
        )
        return session

    def _reserve(self, key: Tuple[str, str, int]) -> None:
        with self._lock:
            if key in self._used:
                raise NonceReuseError(
                    f"nonce already used for credential {key[0]} with verifier {key[1]!r}"
                )
            self._used[key] = None
            while len(self._used) > self._max_remembered:
                self._used.popitem(last=False)

    def verify_binding(self, credential: Credential, session: Session) -> bool:
        """
        Recompute every SC of *session* from *credential*.

        True iff the session was derived from this credential with the
        recorded nonce and verifier id.
        """
        if set(session.public) != set(credential.attributes):
            return False
        nonce = from_decimal(session.nonce)
        domain = verifier_domain(session.verifier_id)
        for name, attr in credential.ordered_attributes():
            expected = session_commitment(
                from_decimal(attr.c), nonce, domain, self._hasher,
            )
            if from_decimal(session.public[name].sc) != expected:
                return False
        return True
