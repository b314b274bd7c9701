# Copyright (c) fabenroll Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for fabenroll.

All fabenroll exceptions inherit from FabEnrollError, so the command line
can report any failure of the enrollment flow in one place.
"""


class FabEnrollError(Exception):
    """Base exception for all fabenroll errors."""


class ProfileError(FabEnrollError):
    """The network profile is missing, unreadable, or malformed."""


class TrustRootError(FabEnrollError):
    """The CA trust-root bundle could not be read or parsed."""


class CAError(FabEnrollError):
    """Errors talking to the certificate authority."""


class CAConnectionError(CAError):
    """The CA could not be reached (network or TLS failure)."""


class EnrollmentRejectedError(CAError):
    """The CA refused the enrollment id/secret."""


class CAResponseError(CAError):
    """The CA answered with a reply that could not be understood."""


class WalletError(FabEnrollError):
    """Errors reading from or writing to the identity wallet."""


class IdentityNotFoundError(WalletError):
    """No identity is stored under the requested label."""


__all__ = [
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
