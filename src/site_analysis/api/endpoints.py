"""API endpoints for the site analysis service."""

import logging
import traceback
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from site_analysis.analysis.errors import AnalysisError
from site_analysis.analysis.models import AnalysisResult, AnalyzeRequest, ErrorResponse
from site_analysis.analysis.service import AnalysisService
from site_analysis.config import (
    CLIMATE_LOOKBACK_YEARS, MAX_OBSTACLES_PER_CATEGORY,
    NOMINATIM_DOMAIN, NOMINATIM_SCHEME, OPEN_METEO_ARCHIVE_URL, OVERPASS_API_URL
)
from site_analysis.middleware.cors import PREFLIGHT_HEADERS

logger = logging.getLogger(__name__)

SERVICE_NAME = "Solar Site Analysis Service"
SERVICE_VERSION = "0.1.0"

router = APIRouter(tags=["analysis"])


async def get_analysis_service() -> AsyncGenerator[AnalysisService, None]:
    """Dependency yielding a per-request analysis service."""
    async with AnalysisService() as service:
        yield service


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    """Build a JSON error body.

    Args:
        status_code: HTTP status code
        error: Error message
        details: Optional diagnostic detail

    Returns:
        JSONResponse carrying an ErrorResponse
    """
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def analyze_site(
    request: Optional[AnalyzeRequest] = None,
    service: AnalysisService = Depends(get_analysis_service)
):
    """Analyze obstacles and historical climate around a UK postcode.

    Args:
        request: Body carrying the postcode
        service: Analysis service for this request

    Returns:
        AnalysisResult, or an error body with status 400, 404 or 500
    """
    # A JSON null body carries no postcode
    postcode = request.postcode if request is not None else None

    try:
        result = await service.analyze(postcode)
        logger.info(f"Successfully analyzed postcode {postcode!r}")
        return result

    except AnalysisError as e:
        logger.error(f"Analysis failed for {postcode!r}: {e}")
        return error_response(e.status_code, str(e))

    except Exception as e:
        logger.error(f"Unexpected error analyzing {postcode!r}: {e}")
        return error_response(500, str(e) or "Unknown error occurred", traceback.format_exc())


@router.options("/analyze")
async def analyze_preflight() -> Response:
    """Answer CORS preflight requests with an empty body."""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "site-analysis"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service information including data providers and analysis limits
    """
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "providers": {
            "geocoding": f"{NOMINATIM_SCHEME}://{NOMINATIM_DOMAIN}",
            "obstacles": OVERPASS_API_URL,
            "climate": OPEN_METEO_ARCHIVE_URL
        },
        "climate_lookback_years": CLIMATE_LOOKBACK_YEARS,
        "max_obstacles_per_category": MAX_OBSTACLES_PER_CATEGORY,
        "features": [
            "Postcode boundary lookup",
            "Nearby buildings, trees and utility poles",
            "Monthly temperature, precipitation and sunshine averages"
        ]
    }
