"""
Exception types raised by the CRCS core and its storage collaborator.

The core never recovers from these; they propagate to the caller, which
decides whether a failure is fatal (the CLI aborts) or retryable.
"""

from __future__ import annotations


class CRCSError(Exception):
    """Base class for every error raised by this package."""


class MalformedFieldValue(CRCSError, ValueError):
    """A value is not a valid non-negative decimal integer / attribute."""


class MissingOrUnreadableFile(CRCSError, OSError):
    """A credential or session file is absent or cannot be read/written."""


class MalformedCredential(CRCSError, ValueError):
    """A persisted credential record is structurally invalid."""


class MalformedSession(CRCSError, ValueError):
    """A persisted session record is structurally invalid."""


class NonceReuseError(CRCSError, RuntimeError):
    """A session nonce was reused for the same credential and verifier."""


class InvalidSignature(CRCSError):
    """Issuer signature does not verify over the credential message."""


class InvalidParameter(CRCSError, ValueError):
    """A caller-supplied argument or configured parameter is out of range."""
