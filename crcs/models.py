"""
Credential and session records.

Pydantic models for the two JSON documents the issuer produces.  All
field elements are carried as decimal strings so the files can be fed
straight into snarkjs / circom as circuit inputs.

Version: 1.0.0
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

from .field import FieldElement, from_decimal

_HEX_32 = r"^[0-9a-f]{64}$"
_HEX_64 = r"^[0-9a-f]{128}$"


class AttributeData(BaseModel):
    """Shares, blinding factor and base commitment of one attribute."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    x1: str = Field(..., description="Share 1 (private circuit input)")
    x2: str = Field(..., description="Share 2 (private circuit input)")
    r: str = Field(..., description="Blinding factor (private circuit input)")
    c: str = Field(..., alias="C", description="Base commitment H(x, r) (public)")

    @property
    def commitment(self) -> FieldElement:
        return from_decimal(self.c)


class Credential(BaseModel):
    """
    Long-lived credential emitted by ``crcs issue``.

    ``attribute_order`` fixes the order in which commitments enter the
    signed message.  Records written before the field existed fall back
    to the document order of ``attributes``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    credential_id: str = Field(..., min_length=1)
    issuer_pk: str = Field(..., pattern=_HEX_32, description="Issuer public key (hex)")
    sig: str = Field(..., pattern=_HEX_64, description="Issuer signature (hex)")
    attributes: Dict[str, AttributeData]
    attribute_order: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _default_order(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and not data.get("attribute_order")
            and isinstance(data.get("attributes"), dict)
        ):
            data = {**data, "attribute_order": list(data["attributes"])}
        return data

    @model_validator(mode="after")
    def _check_order(self) -> Credential:
        if (
            len(self.attribute_order) != len(self.attributes)
            or set(self.attribute_order) != set(self.attributes)
        ):
            raise ValueError(
                "attribute_order does not match the attribute names: "
                f"{self.attribute_order} vs {sorted(self.attributes)}"
            )
        return self

    def ordered_attributes(self) -> List[Tuple[str, AttributeData]]:
        """``(name, AttributeData)`` pairs in canonical order."""
        return [(name, self.attributes[name]) for name in self.attribute_order]

    def ordered_commitments(self) -> List[FieldElement]:
        return [data.commitment for _, data in self.ordered_attributes()]


class SessionPublic(BaseModel):
    """Public per-attribute value forwarded to the verifier."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sc: str = Field(..., alias="SC", description="Session commitment H(C, nonce, domain)")


class Session(BaseModel):
    """Per-verifier, per-session binding emitted by ``crcs session``."""

    model_config = ConfigDict(frozen=True)

    verifier_id: str
    nonce: str = Field(..., description="Fresh session nonce (decimal)")
    thresholds: Dict[str, NonNegativeInt] = Field(
        default_factory=dict,
        description='Minimums to prove, keyed "<attr>_min"',
    )
    public: Dict[str, SessionPublic]

    def threshold_for(self, attribute: str) -> int:
        return self.thresholds[f"{attribute}_min"]
