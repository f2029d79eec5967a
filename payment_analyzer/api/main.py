"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payment_analyzer.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payment_analyzer.api.v1 import analysis, export, history, rules
from payment_analyzer.infrastructure.observability.logging import setup_logging
from payment_analyzer.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payment Analyzer",
        description="Expected vs paid reconciliation for delivery driver runsheets",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # history before analysis: /analysis/history must not match /analysis/{analysis_id}
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])
    app.include_router(export.router, prefix="/v1", tags=["export"])
    app.include_router(rules.router, prefix="/v1", tags=["rules"])

    return app


app = create_app()
