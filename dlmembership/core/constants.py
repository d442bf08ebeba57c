"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `dlmembership/core/config.py` instead.

Example:
    >>> from dlmembership.core.constants import BEARER_PREFIX
    >>> header = f"{BEARER_PREFIX}{access_token}"
"""

# =============================================================================
# Payload
# =============================================================================

MAX_PAYLOAD_DECODE_DEPTH: int = 5
"""Maximum number of JSON decodes applied to a string-wrapped payload."""

MEMBER_SEPARATORS: str = ",;"
"""Delimiters accepted in a string-valued member list."""


# =============================================================================
# Timeouts
# =============================================================================

DIRECTORY_TIMEOUT_DEFAULT: float = 30.0
"""Default timeout for directory API and token endpoint calls in seconds."""


# =============================================================================
# Prefixes
# =============================================================================

BEARER_PREFIX: str = "Bearer "
"""HTTP Authorization header prefix for Bearer tokens."""


# =============================================================================
# Response Limits
# =============================================================================

RESPONSE_BODY_MAX_LENGTH: int = 500
"""Maximum length for response body in error messages (truncation limit)."""
