"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console/JSON)
- Directory configuration (derived from settings)
- Token client (certificate client assertion)
- Session manager (credential lifecycle, establishment retries)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from dlmembership.core.config import settings

if TYPE_CHECKING:
    from dlmembership.domain.protocols.directory_protocol import DirectoryClientProtocol
    from dlmembership.domain.protocols.logger_protocol import LoggerProtocol
    from dlmembership.infrastructure.directory import (
        DirectoryConfig,
        DirectorySession,
        DirectorySessionManager,
        DirectoryTokenClient,
    )


# ============================================================================
# Logging (Application-Scoped)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON, one event per line)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from dlmembership.infrastructure.logging.console_adapter import ConsoleAdapter

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
        service=settings.app_name,
    )


# ============================================================================
# Directory (Application-Scoped)
# ============================================================================


@lru_cache()
def get_directory_config() -> "DirectoryConfig":
    """Directory connection settings, derived once from settings."""
    from dlmembership.infrastructure.directory import DirectoryConfig

    return DirectoryConfig.from_settings(settings)


@lru_cache()
def get_token_client() -> "DirectoryTokenClient":
    """Token endpoint client singleton."""
    from dlmembership.infrastructure.directory import DirectoryTokenClient

    return DirectoryTokenClient(config=get_directory_config(), logger=get_logger())


@lru_cache()
def get_session_manager() -> "DirectorySessionManager":
    """Get directory session manager singleton (app-scoped).

    The manager holds no per-invocation state; each call to
    `with_session` loads the credential and opens a fresh session.

    Returns:
        DirectorySessionManager with establishment retry policy from settings.
    """
    from dlmembership.domain.value_objects import RetryPolicy
    from dlmembership.infrastructure.directory import DirectorySessionManager

    return DirectorySessionManager(
        config=get_directory_config(),
        token_client=get_token_client(),
        logger=get_logger(),
        retry_policy=RetryPolicy(
            max_attempts=settings.session_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
            max_total_wait=settings.session_max_total_wait_seconds,
        ),
    )


def create_directory_client(session: "DirectorySession") -> "DirectoryClientProtocol":
    """Build a Graph client bound to one session (per invocation)."""
    from dlmembership.infrastructure.directory import GraphDirectoryClient

    return GraphDirectoryClient(session, logger=get_logger())
