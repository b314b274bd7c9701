"""
fabenroll - certificate authority enrollment for ledger administrators

Bootstraps an administrator identity: reads a network profile, enrolls the
administrator with the organization's CA, and stores the resulting X.509
identity in a local wallet. Repeated runs are no-ops.
"""

__version__ = "1.0.0"

from .ca import CAClient, Enrollment, EnrollmentRequest
from .enroll import EnrollOutcome, EnrollResult, EnrollSettings, enroll_admin
from .exceptions import (
    CAConnectionError,
    CAError,
    CAResponseError,
    EnrollmentRejectedError,
    FabEnrollError,
    IdentityNotFoundError,
    ProfileError,
    TrustRootError,
    WalletError,
)
from .profile import CertificateAuthorityInfo, NetworkProfile, load_profile
from .wallet import (
    FileSystemWallet,
    InMemoryWallet,
    Wallet,
    X509Identity,
    create_identity,
    open_wallet,
)

__all__ = [
    "__version__",
    # Enrollment
    "enroll_admin",
    "EnrollSettings",
    "EnrollOutcome",
    "EnrollResult",
    # CA
    "CAClient",
    "Enrollment",
    "EnrollmentRequest",
    # Profile
    "NetworkProfile",
    "CertificateAuthorityInfo",
    "load_profile",
    # Wallet
    "Wallet",
    "FileSystemWallet",
    "InMemoryWallet",
    "X509Identity",
    "create_identity",
    "open_wallet",
    # Exceptions
    "FabEnrollError",
    "ProfileError",
    "TrustRootError",
    "CAError",
    "CAConnectionError",
    "EnrollmentRejectedError",
    "CAResponseError",
    "WalletError",
    "IdentityNotFoundError",
]
