"""
Abstract identity wallet.

A wallet is a persisted collection of named identities. Backends implement
exists/get/put/remove/list; the enrollment flow only needs exists and put.
"""

from __future__ import annotations

import abc

from fabenroll.exceptions import WalletError
from fabenroll.wallet.identity import X509Identity


class Wallet(abc.ABC):
    """Abstract base class for identity wallets.

    Example:
        >>> wallet = InMemoryWallet()
        >>> wallet.exists("admin")
        False
    """

    @abc.abstractmethod
    def exists(self, label: str) -> bool:
        """Return ``True`` if an identity is stored under *label*."""

    @abc.abstractmethod
    def get(self, label: str) -> X509Identity:
        """Return the identity stored under *label*.

        Raises:
            IdentityNotFoundError: If *label* is not in the wallet.
        """

    @abc.abstractmethod
    def put(self, label: str, identity: X509Identity) -> None:
        """Store *identity* under *label*, replacing any previous entry."""

    @abc.abstractmethod
    def remove(self, label: str) -> None:
        """Delete the identity stored under *label*.

        Raises:
            IdentityNotFoundError: If *label* is not in the wallet.
        """

    @abc.abstractmethod
    def list(self) -> list[str]:
        """Return all labels in the wallet, sorted."""

    @staticmethod
    def validate_label(label: str) -> str:
        """Reject labels that cannot be used as a single file name."""
        if not label or not label.strip():
            raise WalletError("Identity label must not be empty")
        if label in (".", "..") or "/" in label or "\\" in label or "\x00" in label:
            raise WalletError(f"Invalid identity label: {label!r}")
        return label
