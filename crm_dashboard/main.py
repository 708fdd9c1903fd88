"""
FastAPI application: ghl-sync function, dashboard views and health checks.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from crm_dashboard.config import settings
from crm_dashboard.infrastructure.observability.logging import get_logger, setup_logging
from crm_dashboard.middleware import CORSMiddleware, RequestContextMiddleware
from crm_dashboard.routes import dashboard, ghl_sync, health
from crm_dashboard.services.ghl.client import ghl_client

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and close the upstream HTTP client on shutdown."""
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        ghl_configured=settings.ghl_configured(),
        require_auth=settings.REQUIRE_AUTH,
    )
    if not settings.ghl_configured():
        logger.warning("GHL credentials not configured; ghl-sync actions will fail")

    yield

    logger.info("Application shutting down")
    try:
        await ghl_client.close()
    except Exception as e:
        logger.error("Error closing GHL client", error=str(e))


app = FastAPI(
    title="CRM Dashboard",
    description="GoHighLevel sync proxy and filtered dashboard views",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(ghl_sync.router)
app.include_router(dashboard.router)

# Outermost middleware is added last
app.add_middleware(CORSMiddleware, allowed_origins=settings.CORS_ALLOWED_ORIGINS)
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
