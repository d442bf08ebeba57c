"""Logging adapters implementing LoggerProtocol."""

from dlmembership.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
