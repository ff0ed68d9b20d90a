"""Main FastAPI application entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_bill_generation_service
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.scheduler import next_monthly_run, seconds_until

logger = structlog.get_logger()


async def run_scheduled_bill_generation(run_at: datetime) -> None:
    """Run the generator for the slot planned at ``run_at``.

    The target period comes from ``run_at``, not from the wall clock at wake-up.
    """
    try:
        service = get_bill_generation_service()
        report = await service.run(run_at)
        logger.info(
            "bill_generation_run_finished",
            period=report.period.label,
            created=report.created,
            skipped=report.skipped,
            failed=report.failed,
        )
    except Exception:
        logger.exception("bill_generation_run_failed")


# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""

    async def monthly_bill_generation_loop() -> None:
        """Generate last month's bill instances once a month.

        Runs on the configured day of month at the configured UTC time. A
        failed run is logged and the loop waits for the next month; the
        generator is idempotent, so a manual rerun via generate_bills.py is
        always safe.
        """
        while True:
            now = datetime.now(timezone.utc)
            run_at = next_monthly_run(
                now,
                day=settings.bill_generation_day,
                hour=settings.bill_generation_hour,
                minute=settings.bill_generation_minute,
            )
            logger.info("bill_generation_scheduled", run_at=run_at.isoformat())
            await asyncio.sleep(seconds_until(run_at, now))
            await run_scheduled_bill_generation(run_at)

    generation_task: asyncio.Task[None] | None = None
    if settings.bill_generation_enabled:
        generation_task = asyncio.create_task(monthly_bill_generation_loop())
    else:
        logger.info("bill_generation_disabled")

    yield

    if generation_task is not None:
        generation_task.cancel()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Recurring Bill Tracker\n\n"
            "Billfold keeps track of recurring household bills grouped by "
            "profile (a property or household).\n\n"
            "### Features\n"
            "- **Profiles**: Group bills by address\n"
            "- **Bills**: Recurring bills with optional e-bill portal details\n"
            "- **Bill Instances**: One charge per bill and billing month, "
            "generated automatically at the start of every month with the "
            "previous amount carried forward\n\n"
            "### Authentication\n"
            "All endpoints (except `/health`) require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PATCH/DELETE: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        contact={
            "name": "Billfold Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "profiles",
                "description": "Profile (property/household) operations",
            },
            {
                "name": "bills",
                "description": "Recurring bill operations",
            },
            {
                "name": "bill-instances",
                "description": "Monthly bill instance operations",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
