"""
Certificate Authority Client

Thin client for the CA's enroll endpoint. One call to :meth:`CAClient.enroll`
generates an ECDSA P-256 key, wraps it in a CSR, and exchanges the CSR plus
the enrollment id/secret for a signed certificate:

    POST {url}/api/v1/enroll
    Authorization: Basic base64(id:secret)
    {"certificate_request": "<csr pem>", "caname": "<ca name>"}

Usage:
    from fabenroll.ca import CAClient, EnrollmentRequest

    ca = CAClient("https://localhost:7054", trusted_roots, ca_name="ca.org1")
    enrollment = ca.enroll(EnrollmentRequest(enrollment_id="admin",
                                             enrollment_secret="adminpw"))
"""

from __future__ import annotations

import base64
import binascii
import http.client
import json
import logging
import ssl
import urllib.error
import urllib.request
from typing import Any, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from fabenroll.ca.enrollment import Enrollment, EnrollmentRequest
from fabenroll.exceptions import (
    CAConnectionError,
    CAError,
    CAResponseError,
    EnrollmentRejectedError,
    TrustRootError,
)
from fabenroll.profile import CertificateAuthorityInfo

logger = logging.getLogger(__name__)

ENROLL_PATH = "/api/v1/enroll"

# HTTP statuses the CA uses to refuse credentials or a malformed request
REJECTION_STATUSES = frozenset({400, 401, 403})


class CAClient:
    """Client for a single certificate authority instance.

    Args:
        url: Base URL of the CA, e.g. ``https://localhost:7054``.
        trusted_roots: PEM bundle used to verify the CA's TLS certificate.
        verify: Whether to verify the CA's TLS certificate at all.
        ca_name: Name of the CA instance when the server hosts several.
        timeout: Socket timeout for the enroll round-trip, in seconds.
    """

    def __init__(
        self,
        url: str,
        trusted_roots: Optional[bytes] = None,
        verify: bool = False,
        ca_name: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url.rstrip("/")
        self.trusted_roots = trusted_roots
        self.verify = verify
        self.ca_name = ca_name
        self.timeout = timeout

    @classmethod
    def from_profile(
        cls,
        ca_info: CertificateAuthorityInfo,
        trusted_roots: Optional[bytes],
        verify: Optional[bool] = None,
        timeout: float = 30.0,
    ) -> "CAClient":
        """Build a client from a profile entry.

        ``verify=None`` keeps the entry's ``httpOptions.verify`` setting.
        """
        return cls(
            url=ca_info.url,
            trusted_roots=trusted_roots,
            verify=ca_info.http_options.verify if verify is None else verify,
            ca_name=ca_info.ca_name,
            timeout=timeout,
        )

    def __repr__(self) -> str:
        return f"CAClient(url={self.url!r}, ca_name={self.ca_name!r}, verify={self.verify})"

    def create_ssl_context(self) -> ssl.SSLContext:
        """Create the TLS client context used to reach the CA."""
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        ctx.minimum_version = ssl.TLSVersion.TLSv1_2

        if self.trusted_roots:
            try:
                roots = x509.load_pem_x509_certificates(self.trusted_roots)
            except ValueError as exc:
                raise TrustRootError(f"No PEM certificate found in trusted roots: {exc}") from exc
            ctx.load_verify_locations(
                cadata=b"".join(cert.public_bytes(serialization.Encoding.DER) for cert in roots)
            )
        else:
            ctx.load_default_certs()

        if not self.verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE

        return ctx

    def enroll(self, request: EnrollmentRequest) -> Enrollment:
        """Enroll an identity and return its certificate and private key.

        Args:
            request: Enrollment id/secret and optional profile/attributes.

        Returns:
            The issued certificate, the locally generated private key and the
            CA chain reported by the server.

        Raises:
            CAConnectionError: If the CA cannot be reached.
            EnrollmentRejectedError: If the CA refuses the request.
            CAResponseError: If the reply cannot be understood.
        """
        key = ec.generate_private_key(ec.SECP256R1())
        csr = (
            x509.CertificateSigningRequestBuilder()
            .subject_name(
                x509.Name([
                    x509.NameAttribute(NameOID.COMMON_NAME, request.enrollment_id),
                ])
            )
            .sign(key, hashes.SHA256())
        )
        csr_pem = csr.public_bytes(serialization.Encoding.PEM).decode()

        payload: dict[str, Any] = {"certificate_request": csr_pem}
        if self.ca_name:
            payload["caname"] = self.ca_name
        if request.profile:
            payload["profile"] = request.profile
        if request.attr_reqs:
            payload["attr_reqs"] = [a.model_dump() for a in request.attr_reqs]

        logger.info(
            "Enrolling '%s' with CA %s at %s",
            request.enrollment_id,
            self.ca_name or "(default)",
            self.url,
        )
        body = self._post(ENROLL_PATH, payload, request)
        certificate, chain = self._parse_enroll_result(body)

        issued = x509.load_pem_x509_certificate(certificate.encode())
        if issued.public_key().public_numbers() != key.public_key().public_numbers():
            raise CAResponseError("CA returned a certificate for a different public key")

        logger.info(
            "Enrolled '%s' (serial %x)", request.enrollment_id, issued.serial_number
        )
        return Enrollment(certificate=certificate, key=key, root_certificate=chain)

    def _post(
        self,
        path: str,
        payload: dict[str, Any],
        request: EnrollmentRequest,
    ) -> dict[str, Any]:
        """POST *payload* with basic auth and return the decoded JSON reply."""
        credentials = f"{request.enrollment_id}:{request.enrollment_secret}"
        token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        req = urllib.request.Request(
            f"{self.url}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Basic {token}",
            },
            method="POST",
        )

        try:
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self.create_ssl_context()
            ) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            raise self._error_for_http(exc) from exc
        except http.client.HTTPException as exc:
            raise CAResponseError(
                f"CA at {self.url} sent a malformed HTTP reply: {exc!r}"
            ) from exc
        except (urllib.error.URLError, ssl.SSLError, OSError) as exc:
            raise CAConnectionError(f"Cannot reach CA at {self.url}: {exc}") from exc

        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CAResponseError(f"CA returned invalid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise CAResponseError("CA returned a non-object JSON reply")
        return body

    def _error_for_http(self, exc: urllib.error.HTTPError) -> CAError:
        """Map an HTTP error reply to the matching CA exception."""
        try:
            body = json.loads(exc.read().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, OSError):
            body = {}
        messages = _error_messages(body) or [exc.reason or "no reason given"]
        detail = "; ".join(str(m) for m in messages)
        if exc.code in REJECTION_STATUSES:
            return EnrollmentRejectedError(
                f"CA rejected enrollment (HTTP {exc.code}): {detail}"
            )
        return CAResponseError(f"CA returned HTTP {exc.code}: {detail}")

    @staticmethod
    def _parse_enroll_result(body: dict[str, Any]) -> tuple[str, str]:
        """Extract (certificate PEM, CA chain PEM) from an enroll reply."""
        if not body.get("success"):
            detail = "; ".join(_error_messages(body)) or "unknown error"
            raise EnrollmentRejectedError(f"CA rejected enrollment: {detail}")

        result = body.get("result")
        if not isinstance(result, dict) or not result.get("Cert"):
            raise CAResponseError("CA reply has no certificate")

        try:
            certificate = base64.b64decode(result["Cert"], validate=True).decode("utf-8")
            server_info = result.get("ServerInfo") or {}
            chain_b64 = server_info.get("CAChain") or ""
            chain = base64.b64decode(chain_b64, validate=True).decode("utf-8") if chain_b64 else ""
        except (binascii.Error, UnicodeDecodeError, AttributeError) as exc:
            raise CAResponseError(f"CA reply has a malformed certificate: {exc}") from exc

        try:
            x509.load_pem_x509_certificate(certificate.encode())
        except ValueError as exc:
            raise CAResponseError(f"CA returned an unparsable certificate: {exc}") from exc

        return certificate, chain


def _error_messages(body: Any) -> list[str]:
    if not isinstance(body, dict):
        return []
    errors = body.get("errors") or []
    messages = []
    for err in errors:
        if isinstance(err, dict):
            code = err.get("code")
            message = err.get("message", "")
            messages.append(f"[{code}] {message}" if code is not None else str(message))
        else:
            messages.append(str(err))
    return messages
