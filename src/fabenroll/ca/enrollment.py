"""
Enrollment request and result types exchanged with the CA client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, Field, field_validator


class AttributeRequest(BaseModel):
    """A certificate attribute requested at enrollment time."""

    name: str
    optional: bool = False


class EnrollmentRequest(BaseModel):
    """Identifier/secret pair presented to the CA.

    Attributes:
        enrollment_id: Registered identity name, e.g. ``admin``.
        enrollment_secret: Shared secret for that identity.
        profile: Optional CA signing profile (e.g. ``tls``).
        attr_reqs: Optional attribute requests embedded in the certificate.
    """

    enrollment_id: str = Field(..., description="Registered enrollment id")
    enrollment_secret: str = Field(..., repr=False, description="Enrollment secret")
    profile: Optional[str] = Field(None, description="CA signing profile")
    attr_reqs: list[AttributeRequest] = Field(default_factory=list)

    @field_validator("enrollment_id", "enrollment_secret")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("enrollment id and secret must not be empty")
        return v


@dataclass
class Enrollment:
    """Certificate and private key returned by a successful enrollment."""

    certificate: str
    key: ec.EllipticCurvePrivateKey
    root_certificate: str = ""

    def key_pem(self) -> str:
        """Export the private key as unencrypted PKCS#8 PEM."""
        return self.key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode()
