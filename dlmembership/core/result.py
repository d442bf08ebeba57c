"""Result types for railway-oriented programming.

This module implements the Result pattern to handle operations that can fail
without using exceptions. Directory calls, payload normalization and session
establishment all return Results so that failures flow through the batch as
data.

Usage:
    def parse_action(value: str) -> Result[MembershipAction, str]:
        if value.lower() not in ("add", "remove"):
            return Failure(error=f"Unsupported action: {value}")
        return Success(value=MembershipAction(value.lower()))

    match parse_action("Add"):
        case Success(value=action):
            print(f"Action: {action}")
        case Failure(error=error):
            print(f"Error: {error}")
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


# Type alias for Result union
Result: TypeAlias = Success[T] | Failure[E]
