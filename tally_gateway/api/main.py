"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tally_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from tally_gateway.api.v1 import insights, roi, subscriptions
from tally_gateway.infrastructure.observability.logging import setup_logging
from tally_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Tally Gateway",
        description="Subscription cost, ROI and spending insight service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers; fixed /subscriptions/* paths before /subscriptions/{subscription_id}
    app.include_router(roi.router, prefix="/v1", tags=["roi"])
    app.include_router(insights.router, prefix="/v1", tags=["insights"])
    app.include_router(subscriptions.router, prefix="/v1", tags=["subscriptions"])

    return app


app = create_app()
