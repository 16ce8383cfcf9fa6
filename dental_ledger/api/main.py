"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from dental_ledger.api.errors import register_exception_handlers
from dental_ledger.api.middleware import MetricsMiddleware, RateLimitMiddleware, RequestIDMiddleware
from dental_ledger.api.v1 import (
    appointments,
    budgets,
    catalog,
    ortho,
    patients,
    payables,
    professionals,
    receivables,
    reports,
    transactions,
    waitlist,
)
from dental_ledger.infrastructure.observability.logging import setup_logging
from dental_ledger.infrastructure.ratelimit import RateLimiter
from dental_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(rate_limiter: RateLimiter | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Dental Clinic Ledger",
        description="Ledger, patient records, schedule and waitlist for dental clinics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    limiter = rate_limiter or RateLimiter(
        window_seconds=settings.rate_limit_window_seconds,
        max_requests=settings.rate_limit_max_requests,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(receivables.router, prefix="/v1", tags=["receivables"])
    app.include_router(payables.router, prefix="/v1", tags=["payables"])
    app.include_router(catalog.router, prefix="/v1", tags=["catalog"])
    app.include_router(ortho.router, prefix="/v1", tags=["ortho-contracts"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(patients.router, prefix="/v1", tags=["patients"])
    app.include_router(professionals.router, prefix="/v1", tags=["professionals"])
    app.include_router(appointments.router, prefix="/v1", tags=["appointments"])
    app.include_router(waitlist.router, prefix="/v1", tags=["waitlist"])

    return app


app = create_app()
