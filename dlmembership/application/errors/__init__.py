"""Application layer errors.

Usage:
    from dlmembership.application.errors import ApplicationError, ApplicationErrorCode
"""

from dlmembership.application.errors.application_error import (
    ApplicationError,
    ApplicationErrorCode,
)

__all__ = ["ApplicationError", "ApplicationErrorCode"]
