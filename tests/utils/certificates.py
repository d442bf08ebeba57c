"""Self-signed certificate material for credential tests."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID


def generate_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def generate_certificate(
    key,
    *,
    not_before: datetime | None = None,
    not_after: datetime | None = None,
    common_name: str = "dl-membership-test",
) -> x509.Certificate:
    """Build a self-signed certificate valid for a year by default."""
    now = datetime.now(UTC)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=365))
        .sign(key, hashes.SHA256())
    )


def write_pem(
    path: Path,
    certificate: x509.Certificate,
    key,
    *,
    password: str | None = None,
    key_first: bool = False,
) -> Path:
    """Write certificate and key into one PEM bundle."""
    encryption = (
        serialization.BestAvailableEncryption(password.encode("utf-8"))
        if password
        else serialization.NoEncryption()
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        encryption,
    )
    cert_pem = certificate.public_bytes(serialization.Encoding.PEM)
    path.write_bytes(key_pem + cert_pem if key_first else cert_pem + key_pem)
    return path


def write_pfx(
    path: Path,
    certificate: x509.Certificate,
    key,
    *,
    password: str | None = None,
) -> Path:
    """Write certificate and key into a PKCS#12 bundle."""
    encryption = (
        serialization.BestAvailableEncryption(password.encode("utf-8"))
        if password
        else serialization.NoEncryption()
    )
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"dl-membership", key, certificate, None, encryption
        )
    )
    return path


def generate_ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())
