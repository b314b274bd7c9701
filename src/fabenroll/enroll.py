"""
Administrator enrollment flow.

Ensures exactly one identity for the administrator exists in the wallet:

1. resolve the CA entry from the network profile;
2. read the CA's TLS trust roots;
3. open the wallet;
4. if the label is already present, stop (no CA call);
5. otherwise enroll with the CA and import the identity under the label.

Every failure surfaces as a :class:`~fabenroll.exceptions.FabEnrollError`
and leaves the wallet untouched.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, Field, field_validator

from fabenroll.ca import CAClient, EnrollmentRequest
from fabenroll.profile import load_profile
from fabenroll.wallet import FileSystemWallet, Wallet, create_identity

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_PATH = Path("connection-Manufacturer.json")
DEFAULT_CA_NAME = "ca.Manufacturer.example.com"
DEFAULT_MSP_ID = "ManufacturerMSP"
DEFAULT_ADMIN_LABEL = "admin"
DEFAULT_ADMIN_SECRET = "adminpw"


class EnrollSettings(BaseModel):
    """Inputs of the enrollment flow.

    Defaults reproduce the bootstrap constants: the Manufacturer
    organization's CA, the ``admin``/``adminpw`` registrar, and a wallet in
    ``./wallet``.
    """

    profile_path: Path = Field(default=DEFAULT_PROFILE_PATH, description="Network profile file")
    ca_name: str = Field(default=DEFAULT_CA_NAME, description="certificateAuthorities key")
    tls_base_dir: Optional[Path] = Field(
        None, description="Base directory for relative tlsCACerts paths (profile dir if unset)"
    )
    wallet_path: Path = Field(default_factory=lambda: Path.cwd() / "wallet")
    label: str = Field(default=DEFAULT_ADMIN_LABEL, description="Wallet label for the identity")
    enrollment_id: str = Field(default=DEFAULT_ADMIN_LABEL)
    enrollment_secret: str = Field(default=DEFAULT_ADMIN_SECRET, repr=False)
    msp_id: str = Field(default=DEFAULT_MSP_ID, description="MSP label stamped on the identity")
    verify_tls: Optional[bool] = Field(
        None, description="Override the profile's httpOptions.verify"
    )
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)

    @field_validator("ca_name", "label", "enrollment_id", "enrollment_secret", "msp_id")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    def resolved_tls_base_dir(self) -> Path:
        if self.tls_base_dir is not None:
            return self.tls_base_dir
        return self.profile_path.resolve().parent


class EnrollOutcome(str, enum.Enum):
    """What :func:`enroll_admin` did."""

    ENROLLED = "enrolled"
    ALREADY_ENROLLED = "already_enrolled"


@dataclass
class EnrollResult:
    outcome: EnrollOutcome
    label: str
    wallet_path: Optional[Path]
    msp_id: str


CAFactory = Callable[..., CAClient]


def enroll_admin(
    settings: EnrollSettings,
    wallet: Optional[Wallet] = None,
    ca_factory: Optional[CAFactory] = None,
) -> EnrollResult:
    """Enroll the administrator and import it into the wallet if absent.

    Args:
        settings: Profile location, CA key, credentials and wallet location.
        wallet: Wallet to use instead of ``FileSystemWallet(settings.wallet_path)``.
        ca_factory: Called as ``ca_factory(ca_info, trusted_roots, verify=...,
            timeout=...)`` to build the CA client. Defaults to
            :meth:`CAClient.from_profile`.

    Returns:
        EnrollResult describing whether a new identity was stored.

    Raises:
        FabEnrollError: On any profile, trust-root, CA, or wallet failure.
    """
    profile = load_profile(settings.profile_path)
    ca_info = profile.get_ca(settings.ca_name)
    logger.info("CA info: url=%s caName=%s", ca_info.url, ca_info.ca_name)

    trusted_roots = ca_info.read_trust_roots(settings.resolved_tls_base_dir())

    factory = ca_factory or CAClient.from_profile
    ca = factory(
        ca_info,
        trusted_roots,
        verify=settings.verify_tls,
        timeout=settings.timeout_seconds,
    )
    logger.debug("CA client: %r", ca)

    if wallet is None:
        wallet = FileSystemWallet(settings.wallet_path)
    wallet_path = getattr(wallet, "path", None)
    logger.info("Wallet: %r", wallet)

    if wallet.exists(settings.label):
        logger.info(
            "An identity for the admin user '%s' already exists in the wallet",
            settings.label,
        )
        return EnrollResult(
            outcome=EnrollOutcome.ALREADY_ENROLLED,
            label=settings.label,
            wallet_path=wallet_path,
            msp_id=wallet.get(settings.label).msp_id,
        )

    enrollment = ca.enroll(
        EnrollmentRequest(
            enrollment_id=settings.enrollment_id,
            enrollment_secret=settings.enrollment_secret,
        )
    )
    identity = create_identity(settings.msp_id, enrollment.certificate, enrollment.key_pem())
    wallet.put(settings.label, identity)

    logger.info(
        "Enrolled admin user '%s' and imported it into the wallet as %s",
        settings.enrollment_id,
        settings.label,
    )
    return EnrollResult(
        outcome=EnrollOutcome.ENROLLED,
        label=settings.label,
        wallet_path=wallet_path,
        msp_id=settings.msp_id,
    )
