"""FastAPI application wiring for the directory service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.errors import MalformedCredential, StoreUnavailable
from .domain.service import DirectoryService
from .logging_config import setup_logging
from .repository import DirectoryRepository
from .security.passwords import CredentialCodec
from .security.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit ``Settings`` instance."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Attach the directory service to the app for its lifecycle."""
        repository = DirectoryRepository(settings.users_file)
        app.state.settings = settings
        app.state.directory_service = DirectoryService(repository, CredentialCodec())
        app.state.verify_limiter = SlidingWindowRateLimiter(
            max_requests=settings.verify_rate_limit_requests,
            window_seconds=settings.verify_rate_limit_window_seconds,
        )
        logger.info("serving user directory from %s", settings.users_file)
        yield

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
        logger.error("directory store unavailable: %s", exc, exc_info=exc.__cause__ or exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "directory unavailable"},
        )

    @app.exception_handler(MalformedCredential)
    async def malformed_credential(request: Request, exc: MalformedCredential) -> JSONResponse:
        logger.error("corrupt credential in directory: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "internal error"},
        )

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(v1_router)
    return app


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings)
    uvicorn.run(create_app(settings), host=settings.http_host, port=settings.http_port, log_config=None)


if __name__ == "__main__":
    run()
