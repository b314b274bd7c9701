"""
X.509 wallet identity record.

The on-disk JSON form is::

    {
      "credentials": {"certificate": "...", "privateKey": "..."},
      "mspId": "ManufacturerMSP",
      "type": "X.509",
      "version": 1
    }
"""

from __future__ import annotations

from typing import Literal

from cryptography import x509
from pydantic import BaseModel, Field, field_validator


class X509Credentials(BaseModel):
    """Certificate and private key PEM strings."""

    model_config = {"populate_by_name": True}

    certificate: str = Field(..., description="PEM-encoded X.509 certificate")
    private_key: str = Field(..., alias="privateKey", repr=False, description="PEM private key")

    @field_validator("certificate")
    @classmethod
    def validate_certificate(cls, v: str) -> str:
        if "-----BEGIN CERTIFICATE-----" not in v:
            raise ValueError("certificate must be PEM encoded")
        return v

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: str) -> str:
        if "PRIVATE KEY-----" not in v:
            raise ValueError("private key must be PEM encoded")
        return v


class X509Identity(BaseModel):
    """An identity stored in a wallet: MSP label plus X.509 credentials."""

    model_config = {"populate_by_name": True}

    type: Literal["X.509"] = "X.509"
    msp_id: str = Field(..., alias="mspId", description="Membership service provider id")
    credentials: X509Credentials
    version: int = 1

    @field_validator("msp_id")
    @classmethod
    def validate_msp_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("mspId must not be empty")
        return v

    def to_json(self) -> str:
        """Serialize using the wallet's on-disk field names."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> "X509Identity":
        return cls.model_validate_json(data)

    def load_certificate(self) -> x509.Certificate:
        """Parse the stored certificate."""
        return x509.load_pem_x509_certificate(self.credentials.certificate.encode())


def create_identity(msp_id: str, certificate: str, private_key: str) -> X509Identity:
    """Wrap an enrolled certificate/key pair into a wallet identity.

    Args:
        msp_id: Organization membership label, e.g. ``ManufacturerMSP``.
        certificate: PEM certificate returned by the CA.
        private_key: PEM private key matching the certificate.
    """
    return X509Identity(
        msp_id=msp_id,
        credentials=X509Credentials(certificate=certificate, private_key=private_key),
    )
