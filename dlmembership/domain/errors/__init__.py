"""Domain errors package.

Usage:
    from dlmembership.domain.errors import (
        DirectoryAuthenticationError,
        DirectoryError,
        DirectoryTransientError,
    )
"""

from dlmembership.domain.errors.directory_error import (
    DirectoryAuthenticationError,
    DirectoryError,
    DirectoryInvalidResponseError,
    DirectoryMemberError,
    DirectoryPermissionError,
    DirectoryTransientError,
)

__all__ = [
    "DirectoryError",
    "DirectoryAuthenticationError",
    "DirectoryPermissionError",
    "DirectoryTransientError",
    "DirectoryMemberError",
    "DirectoryInvalidResponseError",
]
