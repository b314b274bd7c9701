"""
Identity wallet

Persisted collection of named X.509 identities.
"""

from .base import Wallet
from .filesystem import FileSystemWallet, open_wallet
from .identity import X509Credentials, X509Identity, create_identity
from .memory import InMemoryWallet

__all__ = [
    "FileSystemWallet",
    "InMemoryWallet",
    "Wallet",
    "X509Credentials",
    "X509Identity",
    "create_identity",
    "open_wallet",
]
