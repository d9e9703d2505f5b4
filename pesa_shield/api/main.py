"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from pesa_shield.api.dependencies import build_fraud_service
from pesa_shield.api.middleware import RequestIDMiddleware, MetricsMiddleware
from pesa_shield.api.v1 import alerts, stats, transactions
from pesa_shield.infrastructure.observability.logging import setup_logging
from pesa_shield.config import Settings, settings
from pesa_shield.services.fraud_detection import FraudDetectionService


def create_app(
    app_settings: Settings | None = None,
    fraud_service: FraudDetectionService | None = None,
) -> FastAPI:
    """Create and configure FastAPI application; the app owns one engine instance"""
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level, app_settings.service_name)

    app = FastAPI(
        title="Pesa Shield",
        description="Mobile-money transaction risk scoring and fraud alerts",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = app_settings
    app.state.fraud_service = fraud_service or build_fraud_service(app_settings)
    app.state.fraud_service.initialize()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": app_settings.service_name,
            "engine_initialized": app.state.fraud_service.is_initialized,
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])
    app.include_router(stats.router, prefix="/v1", tags=["stats"])

    return app
