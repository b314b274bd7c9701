"""
Filesystem wallet.

Stores each identity as ``<label>.id`` (JSON) inside the wallet directory.
Writes go through a temporary file and ``os.replace`` so a failed write
never leaves a partial entry behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from fabenroll.exceptions import IdentityNotFoundError, WalletError
from fabenroll.wallet.base import Wallet
from fabenroll.wallet.identity import X509Identity

logger = logging.getLogger(__name__)

ID_FILE_SUFFIX = ".id"


class FileSystemWallet(Wallet):
    """Directory-backed wallet.

    The directory is created on first write, so opening a wallet that does
    not exist yet is not an error.

    Args:
        path: Wallet directory.

    Example:
        >>> wallet = FileSystemWallet("./wallet")  # doctest: +SKIP
        >>> wallet.exists("admin")  # doctest: +SKIP
        False
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        if self.path.exists() and not self.path.is_dir():
            raise WalletError(f"Wallet path is not a directory: {self.path}")

    def __repr__(self) -> str:
        return f"FileSystemWallet({str(self.path)!r})"

    def _id_file(self, label: str) -> Path:
        return self.path / f"{self.validate_label(label)}{ID_FILE_SUFFIX}"

    def exists(self, label: str) -> bool:
        return self._id_file(label).is_file()

    def get(self, label: str) -> X509Identity:
        id_file = self._id_file(label)
        try:
            data = id_file.read_bytes()
        except FileNotFoundError:
            raise IdentityNotFoundError(f"No identity found for label: {label}") from None
        except OSError as exc:
            raise WalletError(f"Cannot read identity {id_file}: {exc}") from exc

        try:
            return X509Identity.from_json(data)
        except ValidationError as exc:
            raise WalletError(f"Corrupt identity file {id_file}: {exc}") from exc

    def put(self, label: str, identity: X509Identity) -> None:
        id_file = self._id_file(label)
        tmp_name = None
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path, prefix=f".{label}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(identity.to_json())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, id_file)
            tmp_name = None
        except OSError as exc:
            raise WalletError(f"Cannot write identity {id_file}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info("Stored identity '%s' (%s) in %s", label, identity.msp_id, self.path)

    def remove(self, label: str) -> None:
        id_file = self._id_file(label)
        try:
            id_file.unlink()
        except FileNotFoundError:
            raise IdentityNotFoundError(f"No identity found for label: {label}") from None
        except OSError as exc:
            raise WalletError(f"Cannot remove identity {id_file}: {exc}") from exc
        logger.info("Removed identity '%s' from %s", label, self.path)

    def list(self) -> list[str]:
        if not self.path.is_dir():
            return []
        return sorted(
            child.name[: -len(ID_FILE_SUFFIX)]
            for child in self.path.iterdir()
            if child.is_file() and child.name.endswith(ID_FILE_SUFFIX)
        )


def open_wallet(path: Union[str, Path]) -> FileSystemWallet:
    """Open (lazily creating) a filesystem wallet at *path*."""
    return FileSystemWallet(path)
