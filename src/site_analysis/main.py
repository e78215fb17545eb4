"""Main FastAPI application for the site analysis service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from site_analysis.api.endpoints import (
    SERVICE_NAME, SERVICE_VERSION, error_response, router as analysis_router
)
from site_analysis.config import CORS_ALLOW_ORIGINS, DEBUG, HOST, LOG_LEVEL, PORT
from site_analysis.logging_config import configure_logging
from site_analysis.middleware.cors import EmptyPreflightCORSMiddleware

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(f"Starting {SERVICE_NAME}")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 errors."""
    logger.warning(f"Rejected malformed request: {exc.errors()}")
    return error_response(400, "Invalid request body", str(exc.errors()))


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Finds obstacles and historical climate around a UK postcode for rooftop solar siting",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(analysis_router)

    @app.get("/", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": SERVICE_NAME,
            "docs": "/docs",
            "redoc": "/redoc",
            "analyze": "/analyze",
            "health": "/health"
        }

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "site_analysis.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
