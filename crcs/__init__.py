"""
CRCS issuer node (Collusion-Resistant Credential System).

Issuer-side cryptographic core of an unlinkable attribute-credential
scheme:

- **Additive secret sharing** of numeric attributes over the BN254
  scalar field
- **MiMC commitments**  C = H(x, r)  matching the attribute circuit
- **Session re-binding**  SC = H(C, nonce, H_F(verifier))  so the same
  credential cannot be linked across verifiers or sessions
- **Issuer signatures** (Ed25519 or BIP-340 Schnorr) over the ordered
  commitments

The zero-knowledge proof itself (circuit, witness, Groth16 prove/verify)
is produced downstream from the decimal field values emitted here.

Quick start
-----------
::

    from crcs import CredentialIssuer, SessionBinder, verify_credential

    cred = CredentialIssuer().issue({"age": 22, "income": 600_000})
    assert verify_credential(cred)

    session = SessionBinder().bind(
        cred, "BANK_A", {"age": 18, "income": 500_000},
    )
    print(session.public["age"].sc)
"""

__version__ = "1.0.0"

# ── field ───────────────────────────────────────────────────────────────
from .field import (
    FieldElement,
    ORDER,
    encode_u64,
    hash_to_field,
    to_decimal,
    from_decimal,
)

# ── randomness ──────────────────────────────────────────────────────────
from .randomness import RandomSource, SecureRandom, SeededRandom

# ── sharing & commitments ───────────────────────────────────────────────
from .sharing import AttributeShare, share, reconstruct
from .mimc import (
    MiMC,
    CommitmentHash,
    mimc2,
    mimc3,
    base_commitment,
    session_commitment,
    verifier_domain,
)

# ── signatures ──────────────────────────────────────────────────────────
from .signing import (
    SignatureAlgorithm,
    SignatureScheme,
    Ed25519Scheme,
    SchnorrScheme,
    KeyPair,
    credential_message,
    get_scheme,
)

# ── records & workflows ─────────────────────────────────────────────────
from .models import AttributeData, Credential, SessionPublic, Session
from .issuer import CredentialIssuer, verify_credential, open_attribute
from .session import SessionBinder

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    CRCSError,
    InvalidParameter,
    MalformedFieldValue,
    MissingOrUnreadableFile,
    MalformedCredential,
    MalformedSession,
    NonceReuseError,
    InvalidSignature,
)

__all__ = [
    # version
    "__version__",
    # field
    "FieldElement", "ORDER", "encode_u64", "hash_to_field",
    "to_decimal", "from_decimal",
    # randomness
    "RandomSource", "SecureRandom", "SeededRandom",
    # sharing & commitments
    "AttributeShare", "share", "reconstruct",
    "MiMC", "CommitmentHash", "mimc2", "mimc3",
    "base_commitment", "session_commitment", "verifier_domain",
    # signatures
    "SignatureAlgorithm", "SignatureScheme", "Ed25519Scheme",
    "SchnorrScheme", "KeyPair", "credential_message", "get_scheme",
    # records & workflows
    "AttributeData", "Credential", "SessionPublic", "Session",
    "CredentialIssuer", "verify_credential", "open_attribute",
    "SessionBinder",
    # errors
    "CRCSError", "InvalidParameter", "MalformedFieldValue",
    "MissingOrUnreadableFile",
    "MalformedCredential", "MalformedSession", "NonceReuseError",
    "InvalidSignature",
]
