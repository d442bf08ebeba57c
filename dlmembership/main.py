"""
Main FastAPI application entry point.

Serve with:
    uvicorn dlmembership.main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI

from dlmembership.core.config import settings
from dlmembership.presentation.api.middleware.trace_middleware import TraceMiddleware
from dlmembership.presentation.api.v1 import v1_router
from dlmembership.presentation.api.v1.errors import register_exception_handlers

app = FastAPI(
    title=settings.app_name,
    description="Webhook that applies bulk distribution list membership changes",
    version=settings.app_version,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url=None,
)

# Wire trace middleware (request correlation)
app.add_middleware(TraceMiddleware)

# Register global exception handlers (RFC 7807 error responses)
register_exception_handlers(app)

app.include_router(v1_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """
    Liveness endpoint for the hosting platform.

    Returns:
        dict: Health status indicator.
    """
    return {"status": "healthy", "version": settings.app_version}
