"""Core enums package.

Usage:
    from dlmembership.core.enums import ErrorCode, Environment
"""

from dlmembership.core.enums.environment import Environment
from dlmembership.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]
