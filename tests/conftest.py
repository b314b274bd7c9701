"""Shared fixtures: a throwaway CA, a network profile on disk, and a fake enroll endpoint."""

import base64
import io
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from fabenroll.ca import Enrollment

CA_KEY = "ca.Manufacturer.example.com"


class TestCA:
    """Minimal signing CA used to answer enroll requests in tests."""

    __test__ = False

    def __init__(self, name: str = "ca.manufacturer.example.com") -> None:
        self.key = ec.generate_private_key(ec.SECP256R1())
        self.name = x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "manufacturer.example.com"),
        ])
        now = datetime.now(timezone.utc)
        self.certificate = (
            x509.CertificateBuilder()
            .subject_name(self.name)
            .issuer_name(self.name)
            .public_key(self.key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=1))
            .not_valid_after(now + timedelta(days=365))
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .sign(self.key, hashes.SHA256())
        )

    @property
    def cert_pem(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def sign_public_key(self, common_name: str, public_key) -> str:
        now = datetime.now(timezone.utc)
        cert = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)]))
            .issuer_name(self.name)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=1))
            .not_valid_after(now + timedelta(days=365))
            .sign(self.key, hashes.SHA256())
        )
        return cert.public_bytes(serialization.Encoding.PEM).decode()

    def sign_csr(self, csr_pem: str) -> str:
        csr = x509.load_pem_x509_csr(csr_pem.encode())
        cn = csr.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value
        return self.sign_public_key(cn, csr.public_key())

    def enrollment_for(self, common_name: str = "admin") -> Enrollment:
        key = ec.generate_private_key(ec.SECP256R1())
        return Enrollment(
            certificate=self.sign_public_key(common_name, key.public_key()),
            key=key,
            root_certificate=self.cert_pem.decode(),
        )


class FakeEnrollEndpoint:
    """Stand-in for ``urllib.request.urlopen`` that answers like a CA enroll endpoint."""

    def __init__(self, ca: TestCA, secrets: dict[str, str] | None = None) -> None:
        self.ca = ca
        self.secrets = secrets if secrets is not None else {"admin": "adminpw"}
        self.requests: list = []

    def __call__(self, req, timeout=None, context=None):
        self.requests.append(req)
        auth = req.get_header("Authorization")
        user, _, secret = base64.b64decode(auth.split(" ", 1)[1]).decode().partition(":")
        if self.secrets.get(user) != secret:
            body = {
                "success": False,
                "result": None,
                "errors": [{"code": 20, "message": "Authentication failure"}],
                "messages": [],
            }
            return io.BytesIO(json.dumps(body).encode())

        payload = json.loads(req.data.decode())
        cert_pem = self.ca.sign_csr(payload["certificate_request"])
        body = {
            "success": True,
            "result": {
                "Cert": base64.b64encode(cert_pem.encode()).decode(),
                "ServerInfo": {
                    "CAName": payload.get("caname", ""),
                    "CAChain": base64.b64encode(self.ca.cert_pem).decode(),
                },
            },
            "errors": [],
            "messages": [],
        }
        return io.BytesIO(json.dumps(body).encode())


class RecordingCAFactory:
    """``ca_factory`` for enroll_admin that hands out a CA double and records calls."""

    def __init__(self, ca: TestCA, error: Exception | None = None) -> None:
        self.ca = ca
        self.error = error
        self.built: list[dict] = []
        self.enroll_calls: list = []

    def __call__(self, ca_info, trusted_roots, verify=None, timeout=30.0):
        self.built.append({
            "ca_info": ca_info,
            "trusted_roots": trusted_roots,
            "verify": verify,
            "timeout": timeout,
        })
        return self

    def enroll(self, request):
        self.enroll_calls.append(request)
        if self.error is not None:
            raise self.error
        self.last_enrollment = self.ca.enrollment_for(request.enrollment_id)
        return self.last_enrollment


def write_profile(directory: Path, ca: TestCA, tls_path: str = "tls/ca.crt") -> Path:
    """Write a Manufacturer connection profile plus its TLS root into *directory*."""
    cert_file = directory / tls_path
    cert_file.parent.mkdir(parents=True, exist_ok=True)
    cert_file.write_bytes(ca.cert_pem)

    profile = {
        "name": "first-network-manufacturer",
        "version": "1.0.0",
        "client": {"organization": "Manufacturer"},
        "organizations": {
            "Manufacturer": {
                "mspid": "ManufacturerMSP",
                "peers": ["peer0.Manufacturer.example.com"],
                "certificateAuthorities": [CA_KEY],
            }
        },
        "peers": {
            "peer0.Manufacturer.example.com": {"url": "grpcs://localhost:7051"}
        },
        "certificateAuthorities": {
            CA_KEY: {
                "url": "https://localhost:7054",
                "caName": "ca.Manufacturer.example.com",
                "tlsCACerts": {"path": tls_path},
                "httpOptions": {"verify": False},
            }
        },
    }
    profile_path = directory / "connection-Manufacturer.json"
    profile_path.write_text(json.dumps(profile, indent=2))
    return profile_path


@pytest.fixture(scope="session")
def test_ca() -> TestCA:
    return TestCA()


@pytest.fixture()
def profile_path(tmp_path: Path, test_ca: TestCA) -> Path:
    return write_profile(tmp_path, test_ca)


@pytest.fixture()
def ca_factory(test_ca: TestCA) -> RecordingCAFactory:
    return RecordingCAFactory(test_ca)


@pytest.fixture()
def ca_key() -> str:
    """Profile key of the Manufacturer CA written by ``profile_path``."""
    return CA_KEY


@pytest.fixture()
def enroll_endpoint(test_ca: TestCA) -> FakeEnrollEndpoint:
    return FakeEnrollEndpoint(test_ca)


@pytest.fixture()
def failing_ca_factory(test_ca: TestCA):
    """Build a ``RecordingCAFactory`` whose enroll call raises *error*."""

    def make(error: Exception) -> RecordingCAFactory:
        return RecordingCAFactory(test_ca, error=error)

    return make
