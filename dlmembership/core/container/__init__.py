"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from dlmembership.core.container import get_logger, get_session_manager

The container is organized into modules:
- infrastructure: Logging and directory services (app-scoped)
- handlers: Command handler factories (request-scoped)
"""

from dlmembership.core.container.handlers import get_apply_membership_change_handler
from dlmembership.core.container.infrastructure import (
    create_directory_client,
    get_directory_config,
    get_logger,
    get_session_manager,
    get_token_client,
)

__all__ = [
    "create_directory_client",
    "get_apply_membership_change_handler",
    "get_directory_config",
    "get_logger",
    "get_session_manager",
    "get_token_client",
]
