"""
Network Profile

Read-only view of a connection profile: the document that maps logical
names to CA endpoints, organizations, and TLS trust material. Profiles are
JSON by default; ``.yaml``/``.yml`` files are parsed with PyYAML.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding
from pydantic import BaseModel, Field, ValidationError

from fabenroll.exceptions import ProfileError, TrustRootError

logger = logging.getLogger(__name__)


class TLSCACerts(BaseModel):
    """TLS trust roots for a CA, either a file path or inline PEM."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    path: Optional[str] = Field(None, description="Path to a PEM bundle")
    pem: Optional[Union[str, list[str]]] = Field(None, description="Inline PEM bundle")


class HTTPOptions(BaseModel):
    """HTTP client options attached to a CA entry."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    verify: bool = Field(default=False, description="Verify the CA's TLS certificate")


class CertificateAuthorityInfo(BaseModel):
    """A single ``certificateAuthorities`` entry."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    url: str = Field(..., description="CA endpoint, e.g. https://localhost:7054")
    ca_name: Optional[str] = Field(None, alias="caName", description="Name of the CA instance")
    tls_ca_certs: TLSCACerts = Field(default_factory=TLSCACerts, alias="tlsCACerts")
    http_options: HTTPOptions = Field(default_factory=HTTPOptions, alias="httpOptions")
    registrar: list[dict[str, Any]] = Field(default_factory=list)

    def read_trust_roots(self, base_dir: Union[str, Path, None] = None) -> bytes:
        """Return the CA's PEM trust bundle.

        Inline PEM wins over ``path``. A relative ``path`` is resolved
        against *base_dir* (the current directory when ``None``). The bundle is
        re-encoded from the parsed certificates, so comments and other text
        around the PEM blocks are dropped.

        Raises:
            TrustRootError: If the bundle is missing, unreadable, or holds
                no PEM certificate.
        """
        if self.tls_ca_certs.pem:
            pem = self.tls_ca_certs.pem
            if isinstance(pem, list):
                pem = "\n".join(pem)
            data = pem.encode()
            source = "inline tlsCACerts.pem"
        elif self.tls_ca_certs.path:
            cert_path = Path(self.tls_ca_certs.path)
            if not cert_path.is_absolute():
                cert_path = Path(base_dir or ".") / cert_path
            logger.debug("Reading CA trust roots from %s", cert_path)
            try:
                data = cert_path.read_bytes()
            except OSError as exc:
                raise TrustRootError(
                    f"Cannot read TLS CA certificate {cert_path}: {exc}"
                ) from exc
            source = str(cert_path)
        else:
            raise TrustRootError(
                f"CA {self.ca_name or self.url} has no tlsCACerts path or pem"
            )

        try:
            certs = x509.load_pem_x509_certificates(data)
        except ValueError as exc:
            raise TrustRootError(f"No PEM certificate found in {source}: {exc}") from exc
        logger.debug("Loaded %d trust root(s) from %s", len(certs), source)
        return b"".join(cert.public_bytes(Encoding.PEM) for cert in certs)


class OrganizationInfo(BaseModel):
    """An ``organizations`` entry."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    mspid: str
    peers: list[str] = Field(default_factory=list)
    certificate_authorities: list[str] = Field(
        default_factory=list, alias="certificateAuthorities"
    )


class NetworkProfile(BaseModel):
    """Connection profile describing one organization's view of the network.

    Example:
        >>> profile = NetworkProfile.model_validate({
        ...     "name": "first-network-manufacturer",
        ...     "certificateAuthorities": {
        ...         "ca.Manufacturer.example.com": {
        ...             "url": "https://localhost:7054",
        ...             "caName": "ca.Manufacturer.example.com",
        ...             "tlsCACerts": {"path": "ca.crt"},
        ...         },
        ...     },
        ... })
        >>> profile.get_ca("ca.Manufacturer.example.com").url
        'https://localhost:7054'
    """

    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = ""
    version: str = "1.0.0"
    client: dict[str, Any] = Field(default_factory=dict)
    organizations: dict[str, OrganizationInfo] = Field(default_factory=dict)
    certificate_authorities: dict[str, CertificateAuthorityInfo] = Field(
        default_factory=dict, alias="certificateAuthorities"
    )

    def get_ca(self, name: str) -> CertificateAuthorityInfo:
        """Look up a certificate authority by its profile key.

        Raises:
            ProfileError: If no CA is registered under *name*.
        """
        try:
            return self.certificate_authorities[name]
        except KeyError:
            known = ", ".join(sorted(self.certificate_authorities)) or "none"
            raise ProfileError(
                f"Certificate authority '{name}' not found in profile (known: {known})"
            ) from None

    def ca_for_organization(self, org: str) -> CertificateAuthorityInfo:
        """Return the first CA listed by organization *org*."""
        organization = self._get_organization(org)
        if not organization.certificate_authorities:
            raise ProfileError(f"Organization '{org}' lists no certificate authorities")
        return self.get_ca(organization.certificate_authorities[0])

    def msp_id_for_organization(self, org: str) -> str:
        """Return the MSP label of organization *org*."""
        return self._get_organization(org).mspid

    def _get_organization(self, org: str) -> OrganizationInfo:
        try:
            return self.organizations[org]
        except KeyError:
            raise ProfileError(f"Organization '{org}' not found in profile") from None


def load_profile(path: Union[str, Path]) -> NetworkProfile:
    """Load a network profile from a JSON or YAML file.

    Args:
        path: Profile location. ``.yaml``/``.yml`` selects the YAML parser.

    Returns:
        Parsed NetworkProfile.

    Raises:
        ProfileError: If the file is missing, unparsable, or invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileError(f"Cannot read network profile {path}: {exc}") from exc

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ProfileError(f"Cannot parse network profile {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProfileError(f"Network profile {path} must be a mapping")

    try:
        profile = NetworkProfile.model_validate(data)
    except ValidationError as exc:
        raise ProfileError(f"Invalid network profile {path}: {exc}") from exc

    logger.info(
        "Loaded network profile %s (%d CA(s))",
        path,
        len(profile.certificate_authorities),
    )
    return profile
