"""API v1 routers.

Resources:
    /api/v1/webhooks/membership - Distribution list membership changes
"""

from fastapi import APIRouter

from dlmembership.core.config import settings
from dlmembership.presentation.api.v1.membership_webhooks import (
    router as webhooks_router,
)

v1_router = APIRouter(prefix=settings.api_v1_prefix)
v1_router.include_router(webhooks_router)

__all__ = [
    "v1_router",
]
