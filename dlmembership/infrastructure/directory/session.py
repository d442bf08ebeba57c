"""Directory session: one authenticated connection for one invocation."""

from dataclasses import dataclass, field
from datetime import datetime

import httpx

from dlmembership.infrastructure.directory.certificate_credential import (
    CertificateCredential,
)


@dataclass(slots=True, kw_only=True)
class DirectorySession:
    """Authenticated handle to the directory.

    Mutable only through the session manager, which flips `closed` during
    teardown.

    Attributes:
        session_id: Identifier used in logs.
        credential: Credential the session was established with.
        http_client: Shared client carrying the bearer token and base URL.
        api_base_url: Directory API base URL.
        established_at: Establishment time (UTC).
        expires_at: Access token expiry (UTC).
        closed: True once torn down.
    """

    session_id: str
    credential: CertificateCredential
    http_client: httpx.AsyncClient = field(repr=False)
    api_base_url: str
    established_at: datetime
    expires_at: datetime
    closed: bool = False
