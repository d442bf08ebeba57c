"""Command handler dependency factories.

Request-scoped handler instances wired from the application-scoped
infrastructure singletons. Used through FastAPI `Depends` and replaced in
tests with `app.dependency_overrides`.
"""

from typing import TYPE_CHECKING

from dlmembership.core.config import settings
from dlmembership.core.container.infrastructure import (
    create_directory_client,
    get_logger,
    get_session_manager,
)

if TYPE_CHECKING:
    from dlmembership.application.commands.handlers import (
        ApplyMembershipChangeHandler,
    )


async def get_apply_membership_change_handler() -> "ApplyMembershipChangeHandler":
    """Get ApplyMembershipChange command handler (request-scoped).

    Creates handler with:
    - PayloadNormalizer
    - DirectorySessionManager (app-scoped)
    - BatchExecutor (Graph client per session, per-member retry policy)

    Returns:
        ApplyMembershipChangeHandler instance.
    """
    from dlmembership.application.commands.handlers import (
        ApplyMembershipChangeHandler,
    )
    from dlmembership.application.services import BatchExecutor, PayloadNormalizer
    from dlmembership.domain.value_objects import RetryPolicy

    logger = get_logger()
    executor = BatchExecutor(
        client_factory=create_directory_client,
        retry_policy=RetryPolicy(
            max_attempts=settings.member_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
            max_total_wait=settings.member_max_total_wait_seconds,
        ),
        logger=logger,
        concurrency=settings.member_concurrency,
    )
    return ApplyMembershipChangeHandler(
        normalizer=PayloadNormalizer(),
        session_manager=get_session_manager(),
        executor=executor,
        logger=logger,
        deadline_seconds=settings.invocation_deadline_seconds,
    )
