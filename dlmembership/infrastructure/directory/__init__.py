"""Directory service adapters (Microsoft Graph, certificate auth).

Usage:
    from dlmembership.infrastructure.directory import (
        DirectoryConfig,
        DirectorySessionManager,
        GraphDirectoryClient,
    )
"""

from dlmembership.infrastructure.directory.certificate_credential import (
    CertificateCredential,
    compute_thumbprint,
)
from dlmembership.infrastructure.directory.directory_config import DirectoryConfig
from dlmembership.infrastructure.directory.graph_directory_client import (
    GraphDirectoryClient,
)
from dlmembership.infrastructure.directory.session import DirectorySession
from dlmembership.infrastructure.directory.session_manager import (
    DirectorySessionManager,
    load_configured_credential,
)
from dlmembership.infrastructure.directory.token_client import (
    AccessToken,
    DirectoryTokenClient,
)

__all__ = [
    "AccessToken",
    "CertificateCredential",
    "DirectoryConfig",
    "DirectorySession",
    "DirectorySessionManager",
    "DirectoryTokenClient",
    "GraphDirectoryClient",
    "compute_thumbprint",
    "load_configured_credential",
]
