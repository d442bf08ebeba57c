"""Certificate-backed application credential.

Loads the application's X.509 certificate and RSA private key (PEM bundle
or PKCS#12/PFX), checks its validity window and hands it to msal in the
{"private_key", "thumbprint"} form msal's ConfidentialClientApplication
signs client assertions with.

Security:
    The private key never leaves this object and is never logged.
"""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import pkcs12

from dlmembership.core.enums import ErrorCode
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.errors import DirectoryAuthenticationError

_PEM_BLOCK = re.compile(
    rb"-----BEGIN (?P<label>[A-Z0-9 ]+)-----.+?-----END (?P=label)-----",
    re.DOTALL,
)
_PFX_SUFFIXES = {".pfx", ".p12"}


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateCredential:
    """Loaded certificate, key and the identity they authenticate.

    Attributes:
        client_id: Application (client) id the credential belongs to.
        certificate: Parsed X.509 certificate.
        private_key: RSA private key matching the certificate.
        thumbprint: Hex SHA-1 thumbprint, as registered on the application.
        not_valid_before: Certificate validity start (UTC).
        not_valid_after: Certificate validity end (UTC).
    """

    client_id: str
    certificate: x509.Certificate
    private_key: RSAPrivateKey = field(repr=False)
    thumbprint: str
    not_valid_before: datetime
    not_valid_after: datetime

    @classmethod
    def load(
        cls,
        path: str | Path | None,
        *,
        client_id: str,
        password: str | None = None,
        now: datetime | None = None,
    ) -> Result["CertificateCredential", DirectoryAuthenticationError]:
        """Load and validate a credential file.

        Args:
            path: PEM (certificate and key) or PFX/P12 file.
            client_id: Application (client) id.
            password: PFX password or encrypted PEM key password.
            now: Current time (UTC), injectable for tests.

        Returns:
            Success(CertificateCredential): Credential usable right now.
            Failure(DirectoryAuthenticationError): Missing or unreadable file,
                no RSA key, wrong password, not yet valid, or expired
                (is_credential_expired=True).
        """
        if not client_id:
            return _invalid("Directory client id is not configured")
        if path is None or not str(path).strip():
            return _invalid("Directory certificate path is not configured")

        cert_path = Path(path)
        try:
            data = cert_path.read_bytes()
        except OSError as e:
            return _invalid(f"Cannot read certificate file '{cert_path}': {e.strerror}")

        if cert_path.suffix.lower() in _PFX_SUFFIXES or b"-----BEGIN" not in data:
            loaded = _load_pfx(data, password)
        else:
            loaded = _load_pem(data, password)
        if isinstance(loaded, Failure):
            return loaded
        certificate, private_key = loaded.value

        if not isinstance(private_key, RSAPrivateKey):
            return _invalid(
                f"Certificate key must be RSA, got {type(private_key).__name__}"
            )

        not_before = certificate.not_valid_before_utc
        not_after = certificate.not_valid_after_utc
        current = now or datetime.now(UTC)
        if current >= not_after:
            return Failure(
                error=DirectoryAuthenticationError(
                    code=ErrorCode.CREDENTIAL_EXPIRED,
                    message=(
                        f"Directory certificate expired at {not_after.isoformat()}"
                    ),
                    operation="load_credential",
                    is_credential_expired=True,
                    details={"not_valid_after": not_after.isoformat()},
                )
            )
        if current < not_before:
            return _invalid(
                f"Directory certificate is not valid before {not_before.isoformat()}"
            )

        return Success(
            value=cls(
                client_id=client_id,
                certificate=certificate,
                private_key=private_key,
                thumbprint=compute_thumbprint(certificate),
                not_valid_before=not_before,
                not_valid_after=not_after,
            )
        )

    def msal_client_credential(self) -> dict[str, str]:
        """Credential in the form msal's ConfidentialClientApplication takes.

        The key is re-serialized as unencrypted PKCS#8 PEM, so a password
        protected bundle needs no passphrase handling in msal. msal signs the
        client assertion with it and sends the thumbprint as the x5t header.
        """
        key_pem = self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return {"private_key": key_pem.decode("ascii"), "thumbprint": self.thumbprint}


def compute_thumbprint(certificate: x509.Certificate) -> str:
    """Hex SHA-1 digest of the DER certificate (upper case)."""
    return certificate.fingerprint(hashes.SHA1()).hex().upper()


def _load_pfx(
    data: bytes, password: str | None
) -> Result[tuple[x509.Certificate, object], DirectoryAuthenticationError]:
    try:
        private_key, certificate, _ = pkcs12.load_key_and_certificates(
            data, password.encode("utf-8") if password else None
        )
    except ValueError as e:
        return _invalid(f"Cannot load PFX credential: {e}")
    if certificate is None or private_key is None:
        return _invalid("PFX credential must contain a certificate and a private key")
    return Success(value=(certificate, private_key))


def _load_pem(
    data: bytes, password: str | None
) -> Result[tuple[x509.Certificate, object], DirectoryAuthenticationError]:
    cert_block: bytes | None = None
    key_block: bytes | None = None
    for match in _PEM_BLOCK.finditer(data):
        label = match.group("label")
        if label == b"CERTIFICATE" and cert_block is None:
            cert_block = match.group(0)
        elif label.endswith(b"PRIVATE KEY") and key_block is None:
            key_block = match.group(0)

    if cert_block is None:
        return _invalid("PEM credential does not contain a CERTIFICATE block")
    if key_block is None:
        return _invalid("PEM credential does not contain a PRIVATE KEY block")

    try:
        certificate = x509.load_pem_x509_certificate(cert_block)
        private_key = serialization.load_pem_private_key(
            key_block, password.encode("utf-8") if password else None
        )
    except (ValueError, TypeError) as e:
        return _invalid(f"Cannot load PEM credential: {e}")
    return Success(value=(certificate, private_key))


def _invalid(message: str) -> Failure[DirectoryAuthenticationError]:
    return Failure(
        error=DirectoryAuthenticationError(
            code=ErrorCode.CREDENTIAL_INVALID,
            message=message,
            operation="load_credential",
        )
    )
