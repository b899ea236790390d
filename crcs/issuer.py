"""
Credential issuance.

For every attribute, in the order the caller declares them:

    x      = encode(value)
    x1, x2 = share(x)                 x1 ←$ F_q,  x2 = x − x1
    r      ←$ F_q                     blinding factor
    C      = H(x, r)                  base commitment

then a fresh issuer key signs  SHA-256(cred_id ‖ C_1 ‖ C_2 ‖ …)  and the
whole thing is assembled into a :class:`~crcs.models.Credential`.

Usage
-----
::

    from crcs.issuer import CredentialIssuer, verify_credential

    issuer = CredentialIssuer()
    cred = issuer.issue({"age": 22, "income": 600_000})
    assert verify_credential(cred)
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .errors import InvalidParameter, InvalidSignature, MalformedCredential
from .field import FieldElement, encode_u64, from_decimal, to_decimal
from .logger import get_logger
from .mimc import DEFAULT_MIMC, CommitmentHash, base_commitment
from .models import AttributeData, Credential
from .randomness import RandomSource, SecureRandom, random_uuid4
from .sharing import share
from .signing import (
    Ed25519Scheme,
    KeyPair,
    SignatureScheme,
    credential_message,
    decode_key,
    decode_signature,
    encode_key,
    encode_signature,
)

logger = get_logger(__name__)


class CredentialIssuer:
    """
    Issues signed attribute credentials.

    Parameters
    ----------
    scheme : SignatureScheme or None
        Issuer signature algorithm (Ed25519 by default).
    hasher : CommitmentHash
        Commitment hash; must match the external circuit.
    keypair : KeyPair or None
        Long-lived issuer key.  When omitted a fresh key is generated for
        every credential.
    """

    def __init__(
        self,
        scheme: Optional[SignatureScheme] = None,
        hasher: CommitmentHash = DEFAULT_MIMC,
        keypair: Optional[KeyPair] = None,
    ) -> None:
        self._scheme = scheme if scheme is not None else Ed25519Scheme()
        self._hasher = hasher
        self._keypair = keypair

    def issue(
        self,
        attributes: Mapping[str, int],
        rng: Optional[RandomSource] = None,
    ) -> Credential:
        """
        Issue a credential over *attributes*.

        The mapping's iteration order becomes the credential's canonical
        attribute order, and thereby the order of commitments in the
        signed message.
        """
        if not attributes:
            raise InvalidParameter("at least one attribute is required")
        if rng is None:
            rng = SecureRandom()

        data: Dict[str, AttributeData] = {}
        commitments = []
        for name, value in attributes.items():
            if not isinstance(name, str) or not name:
                raise InvalidParameter(f"invalid attribute name: {name!r}")
            x = encode_u64(value)
            x1, x2 = share(x, rng)
            r = FieldElement.random(rng)
            c = base_commitment(x, r, self._hasher)
            commitments.append(c)
            data[name] = AttributeData(
                x1=to_decimal(x1),
                x2=to_decimal(x2),
                r=to_decimal(r),
                c=to_decimal(c),
            )

        keypair = self._keypair
        if keypair is None:
            keypair = self._scheme.generate_keypair(rng)
        credential_id = str(random_uuid4(rng))
        digest = credential_message(credential_id, commitments)
        sig = self._scheme.sign(keypair.secret_key, digest)

        credential = Credential(
            credential_id=credential_id,
            issuer_pk=encode_key(keypair.public_key),
            sig=encode_signature(sig),
            attributes=data,
            attribute_order=list(data),
        )
        logger.info(
            "credential_issued",
            credential_id=credential_id,
            attributes=credential.attribute_order,
            algorithm=self._scheme.algorithm.value,
        )
        return credential


# ── verification helpers ────────────────────────────────────────────────

def verify_credential(
    credential: Credential,
    scheme: Optional[SignatureScheme] = None,
    strict: bool = False,
) -> bool:
    """
    Check the issuer signature over the ordered commitments.

    Returns ``False`` on failure, or raises :class:`InvalidSignature`
    when *strict* is set.  Raises ``MalformedFieldValue`` if a stored
    commitment is not a decimal string.
    """
    if scheme is None:
        scheme = Ed25519Scheme()
    digest = credential_message(
        credential.credential_id, credential.ordered_commitments(),
    )
    ok = scheme.verify(
        decode_key(credential.issuer_pk),
        digest,
        decode_signature(credential.sig),
    )
    if not ok:
        logger.warning(
            "credential_signature_invalid",
            credential_id=credential.credential_id,
            algorithm=scheme.algorithm.value,
        )
        if strict:
            raise InvalidSignature(
                f"signature of credential {credential.credential_id} does not verify"
            )
    return ok


def open_attribute(
    credential: Credential,
    name: str,
    hasher: CommitmentHash = DEFAULT_MIMC,
) -> int:
    """
    Reconstruct attribute *name* and check it against its commitment.

    Verifies  H(x1 + x2, r) == C  and returns  x  as an integer.
    """
    try:
        attr = credential.attributes[name]
    except KeyError:
        raise MalformedCredential(f"credential has no attribute {name!r}") from None
    x = from_decimal(attr.x1) + from_decimal(attr.x2)
    if base_commitment(x, from_decimal(attr.r), hasher) != attr.commitment:
        raise MalformedCredential(
            f"attribute {name!r} does not open its commitment"
        )
    return x.value
