"""Directory connection configuration.

Components receive this object through their constructors and never read
settings themselves, so tests can build one directly.
"""

from dataclasses import dataclass

from dlmembership.core.config import Settings
from dlmembership.core.constants import DIRECTORY_TIMEOUT_DEFAULT


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryConfig:
    """Tenant, application identity and endpoints for the directory.

    Attributes:
        tenant_id: Directory tenant (GUID or verified domain).
        client_id: Application (client) id registered in the tenant.
        authority_url: OAuth2 authority base URL.
        api_base_url: Directory API base URL (no trailing slash).
        scope: Scope requested for the app-only token.
        certificate_path: PEM or PFX credential file.
        certificate_password: Password for the PFX bundle or encrypted key.
        timeout: Per-request HTTP timeout in seconds.
    """

    tenant_id: str
    client_id: str
    authority_url: str = "https://login.microsoftonline.com"
    api_base_url: str = "https://graph.microsoft.com/v1.0"
    scope: str = "https://graph.microsoft.com/.default"
    certificate_path: str | None = None
    certificate_password: str | None = None
    timeout: float = DIRECTORY_TIMEOUT_DEFAULT

    @property
    def authority(self) -> str:
        """Tenant authority msal discovers the token endpoint from."""
        return f"{self.authority_url.rstrip('/')}/{self.tenant_id}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DirectoryConfig":
        """Build from application settings.

        Missing tenant or client id become empty strings; the session
        manager reports them as an invalid credential at first use rather
        than failing application startup.
        """
        return cls(
            tenant_id=settings.directory_tenant_id or "",
            client_id=settings.directory_client_id or "",
            authority_url=settings.directory_authority_url,
            api_base_url=settings.directory_api_base_url,
            scope=settings.directory_scope,
            certificate_path=settings.directory_certificate_path,
            certificate_password=settings.directory_certificate_password,
            timeout=settings.directory_timeout_seconds,
        )
