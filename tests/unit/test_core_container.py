"""Unit tests for the dependency container.

Tests cover:
- get_logger(): adapter selection by environment, singleton
- get_session_manager(): retry policy wired from settings
- get_apply_membership_change_handler(): handler wiring
- create_directory_client(): Graph client per session

Architecture:
- Unit tests with mocked settings and adapters
- Caches cleared around each test
"""

from unittest.mock import MagicMock, patch

import pytest

from dlmembership.application.commands.handlers import ApplyMembershipChangeHandler
from dlmembership.core.container import (
    create_directory_client,
    get_apply_membership_change_handler,
    get_directory_config,
    get_logger,
    get_session_manager,
    get_token_client,
)
from dlmembership.infrastructure.directory import (
    DirectorySessionManager,
    GraphDirectoryClient,
)

_SETTINGS = "dlmembership.core.container.infrastructure.settings"


@pytest.fixture(autouse=True)
def clear_container_caches():
    caches = (get_logger, get_directory_config, get_token_client, get_session_manager)
    for factory in caches:
        factory.cache_clear()
    yield
    for factory in caches:
        factory.cache_clear()


@pytest.mark.unit
class TestGetLoggerContainer:
    """Test get_logger() container function."""

    def test_console_renderer_in_development(self):
        """Test development logs are human-readable."""
        with patch(_SETTINGS) as mock_settings:
            mock_settings.is_development = True
            mock_settings.log_level = "DEBUG"
            mock_settings.app_name = "DL Membership Webhook"

            with patch(
                "dlmembership.infrastructure.logging.console_adapter.ConsoleAdapter"
            ) as mock_console:
                mock_adapter = MagicMock()
                mock_console.return_value = mock_adapter

                logger = get_logger()

                mock_console.assert_called_once_with(
                    use_json=False, level="DEBUG", service="DL Membership Webhook"
                )
                assert logger == mock_adapter

    def test_json_outside_development(self):
        """Test testing/ci/production emit JSON lines."""
        with patch(_SETTINGS) as mock_settings:
            mock_settings.is_development = False
            mock_settings.log_level = "INFO"
            mock_settings.app_name = "svc"

            with patch(
                "dlmembership.infrastructure.logging.console_adapter.ConsoleAdapter"
            ) as mock_console:
                get_logger()

                assert mock_console.call_args.kwargs["use_json"] is True

    def test_singleton(self):
        assert get_logger() is get_logger()

    def test_protocol_methods(self):
        logger = get_logger()

        for method in ("debug", "info", "warning", "error", "critical", "bind"):
            assert callable(getattr(logger, method))


@pytest.mark.unit
class TestDirectoryContainer:
    def test_session_manager_retry_policy_from_settings(self):
        with patch(_SETTINGS) as mock_settings:
            mock_settings.session_max_attempts = 4
            mock_settings.retry_base_delay_seconds = 0.25
            mock_settings.retry_max_delay_seconds = 2.0
            mock_settings.session_max_total_wait_seconds = 5.0
            with patch(
                "dlmembership.core.container.infrastructure.get_directory_config"
            ), patch("dlmembership.core.container.infrastructure.get_token_client"):
                manager = get_session_manager()

        assert isinstance(manager, DirectorySessionManager)
        policy = manager._retry_policy
        assert policy.max_attempts == 4
        assert policy.base_delay == 0.25
        assert policy.max_total_wait == 5.0

    def test_session_manager_singleton(self):
        assert get_session_manager() is get_session_manager()

    def test_create_directory_client(self):
        client = create_directory_client(MagicMock())

        assert isinstance(client, GraphDirectoryClient)

    async def test_handler_factory(self):
        handler = await get_apply_membership_change_handler()

        assert isinstance(handler, ApplyMembershipChangeHandler)
        assert handler._session_manager is get_session_manager()
