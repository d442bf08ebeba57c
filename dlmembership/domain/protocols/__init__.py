"""Domain protocols (ports).

Usage:
    from dlmembership.domain.protocols import DirectoryClientProtocol
"""

from dlmembership.domain.protocols.directory_protocol import DirectoryClientProtocol
from dlmembership.domain.protocols.directory_session_protocol import (
    DirectorySessionManagerProtocol,
)
from dlmembership.domain.protocols.logger_protocol import LoggerProtocol

__all__ = [
    "DirectoryClientProtocol",
    "DirectorySessionManagerProtocol",
    "LoggerProtocol",
]
