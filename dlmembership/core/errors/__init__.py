"""Core errors package.

Usage:
    from dlmembership.core.errors import DomainError, ValidationError
"""

from dlmembership.core.errors.common_errors import (
    DeadlineExceededError,
    ValidationError,
)
from dlmembership.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ValidationError",
    "DeadlineExceededError",
]
