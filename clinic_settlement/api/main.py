"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from clinic_settlement.api.middleware import RequestIDMiddleware, MetricsMiddleware
from clinic_settlement.api.v1 import cashflow, fees, pricing, profitability, settlements
from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.infrastructure.observability.logging import setup_logging
from clinic_settlement.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    logging.warning(
        f"Invalid input: {exc}",
        extra={"request_id": getattr(request.state, "request_id", "unknown")},
    )
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Clinic Settlement Engine",
        description="Card fees, installment settlement, pricing, profitability and cash flow",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(InvalidInputError, invalid_input_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(fees.router, prefix="/v1", tags=["fees"])
    app.include_router(settlements.router, prefix="/v1", tags=["settlements"])
    app.include_router(pricing.router, prefix="/v1", tags=["pricing"])
    app.include_router(profitability.router, prefix="/v1", tags=["profitability"])
    app.include_router(cashflow.router, prefix="/v1", tags=["cashflow"])

    return app


app = create_app()
