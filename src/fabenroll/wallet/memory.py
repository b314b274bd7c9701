"""
In-memory wallet.

Dictionary-backed wallet for tests and embedding. Data is lost on exit.
Labels follow the same rules as the filesystem wallet.
"""

from __future__ import annotations

from fabenroll.exceptions import IdentityNotFoundError
from fabenroll.wallet.base import Wallet
from fabenroll.wallet.identity import X509Identity


class InMemoryWallet(Wallet):
    """Wallet that keeps identities in a dict."""

    def __init__(self) -> None:
        self._identities: dict[str, X509Identity] = {}

    def exists(self, label: str) -> bool:
        return self.validate_label(label) in self._identities

    def get(self, label: str) -> X509Identity:
        if self.validate_label(label) not in self._identities:
            raise IdentityNotFoundError(f"No identity found for label: {label}")
        return self._identities[label]

    def put(self, label: str, identity: X509Identity) -> None:
        self._identities[self.validate_label(label)] = identity

    def remove(self, label: str) -> None:
        if self.validate_label(label) not in self._identities:
            raise IdentityNotFoundError(f"No identity found for label: {label}")
        del self._identities[label]

    def list(self) -> list[str]:
        return sorted(self._identities)
