"""
Main entrypoint for the Lius FinTech API.

This module assembles the FastAPI application, sets up logging,
registers the error envelope handlers and includes the API router.
The ``create_app`` function builds and configures the app, which is
then instantiated at module import time as ``app``::

    uvicorn lius_fintech_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import COLLECTIONS, get_store
from .core.errors import FintechError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging()

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # The browser client calls the unversioned paths; ``/api/v1`` exposes
    # the same routes for clients that pin a version.
    app.include_router(v1_router, prefix="/api")
    app.include_router(v1_router, prefix="/api/v1")

    @app.exception_handler(FintechError)
    async def fintech_error_handler(request: Request, exc: FintechError) -> JSONResponse:
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Malformed request to %s: %s", request.url.path, exc.errors())
        return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")

    @app.get("/", include_in_schema=False)
    async def welcome() -> dict:
        return {
            "message": f"Welcome to the {settings.project_name}!",
            "version": settings.api_version,
            "documentation": "/docs",
            "endpoints": {
                "POST /api/register": "Create an account.",
                "POST /api/login": "Check credentials.",
                "GET /api/balance/{userId}": "Current balance.",
                "POST /api/transfer": "Send money to another user.",
                "GET /api/transactions/{userId}": "Transaction history.",
                "POST /api/users/{userId}/password": "Change password.",
                "POST /api/users/{userId}/pin": "Set or clear the transfer PIN.",
            },
        }

    @app.get("/health")
    async def health_check() -> dict:
        store = get_store()
        missing = [name for name in COLLECTIONS if not store.path_for(name).exists()]
        if missing:
            return {"status": "error", "details": f"missing collections: {', '.join(missing)}"}
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Create the data directory and empty collections if needed.
        get_store().ensure_files()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
