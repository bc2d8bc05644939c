"""
FastAPI server — risk evaluation, override recording, user trust profile.

Services (user store, policy client, Gemini client, orchestrator, recorder) are
built in the lifespan from settings and closed on shutdown, unless the app was
created with a pre-built container.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend_paypilot import __version__
from backend_paypilot.api_server.dependencies import AppServices, build_services
from backend_paypilot.api_server.risk_routes import router as risk_router
from backend_paypilot.api_server.user_routes import router as user_router
from backend_paypilot.config import get_settings
from backend_paypilot.core import exceptions as errors
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build services on startup when none were injected; close the ones we built on shutdown."""
    owned = app.state.services is None
    if owned:
        app.state.services = build_services(get_settings())
        logger.info("api_services_started")

    yield

    if owned:
        app.state.services.close()
        app.state.services = None
        logger.info("api_services_stopped")


def create_app(services: AppServices | None = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Backend PayPilot API",
        description="Pre-transaction risk gate: risk score, decision and trust tracking.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(risk_router)
    app.include_router(user_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    @app.exception_handler(errors.ValidationError)
    def validation_error_handler(request: Any, exc: errors.ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(request: Any, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    return app


app = create_app()
