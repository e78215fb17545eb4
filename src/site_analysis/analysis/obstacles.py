"""Obstacle discovery backed by the Overpass API."""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from site_analysis.analysis.errors import UpstreamError
from site_analysis.analysis.models import (
    ObstacleCategory, ObstacleFeature, ObstacleSet,
    OverpassElement, OverpassResponse
)
from site_analysis.config import (
    MAX_OBSTACLES_PER_CATEGORY, OVERPASS_API_URL,
    PROVIDER_TIMEOUT_SECONDS, USER_AGENT
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Overpass"

# Evaluated in order, first match wins
CLASSIFICATION_RULES: Tuple[Tuple[ObstacleCategory, Callable[[Dict[str, str]], bool]], ...] = (
    (ObstacleCategory.BUILDING, lambda tags: "building" in tags),
    (ObstacleCategory.TREE, lambda tags: tags.get("natural") == "tree"),
    (ObstacleCategory.POLE, lambda tags: tags.get("power") == "pole"),
)


def build_overpass_query(bounding_box: Sequence[str]) -> str:
    """Build the Overpass QL query for obstacles inside a bounding box.

    Args:
        bounding_box: Geocoder bounding box as [south, north, west, east]

    Returns:
        Overpass QL query string
    """
    south, north, west, east = bounding_box
    # Overpass expects (south, west, north, east)
    bbox = f"({south},{west},{north},{east})"
    return (
        "[out:json];\n"
        "(\n"
        f'  node["building"]{bbox};\n'
        f'  way["building"]{bbox};\n'
        f'  node["natural"="tree"]{bbox};\n'
        f'  node["power"="pole"]{bbox};\n'
        ");\n"
        "out center;"
    )


def classify_element(element: OverpassElement) -> Optional[ObstacleFeature]:
    """Classify a raw element into an obstacle.

    Args:
        element: Raw Overpass element

    Returns:
        ObstacleFeature, or None if the element has no coordinates or matches no rule
    """
    lat = element.lat if element.lat is not None else (element.center.lat if element.center else None)
    lon = element.lon if element.lon is not None else (element.center.lon if element.center else None)
    if lat is None or lon is None:
        return None

    for category, matches in CLASSIFICATION_RULES:
        if matches(element.tags):
            return ObstacleFeature(category=category, latitude=lat, longitude=lon)
    return None


def group_obstacles(
    elements: Sequence[OverpassElement],
    limit: int = MAX_OBSTACLES_PER_CATEGORY
) -> ObstacleSet:
    """Classify elements and cap each category list.

    Args:
        elements: Raw elements in provider order
        limit: Maximum entries kept per category

    Returns:
        ObstacleSet with the first `limit` obstacles of each category
    """
    grouped: Dict[ObstacleCategory, List[ObstacleFeature]] = {category: [] for category in ObstacleCategory}
    for element in elements:
        feature = classify_element(element)
        if feature is not None:
            grouped[feature.category].append(feature)

    logger.info(
        f"Classified obstacles: buildings={len(grouped[ObstacleCategory.BUILDING])}, "
        f"trees={len(grouped[ObstacleCategory.TREE])}, poles={len(grouped[ObstacleCategory.POLE])}"
    )

    return ObstacleSet(
        buildings=grouped[ObstacleCategory.BUILDING][:limit],
        trees=grouped[ObstacleCategory.TREE][:limit],
        poles=grouped[ObstacleCategory.POLE][:limit],
    )


class ObstacleCollector:
    """Async client that finds buildings, trees and poles around a site."""

    def __init__(
        self,
        base_url: str = OVERPASS_API_URL,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the obstacle collector.

        Args:
            base_url: Overpass interpreter endpoint
            user_agent: User-Agent header for API requests
            transport: Optional httpx transport, used to stub the provider
        """
        self.base_url = base_url
        self.user_agent = user_agent
        self.client = httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=PROVIDER_TIMEOUT_SECONDS,
            transport=transport
        )

    async def collect(self, bounding_box: Sequence[str]) -> ObstacleSet:
        """Fetch and classify obstacles inside a bounding box.

        Args:
            bounding_box: Geocoder bounding box as [south, north, west, east]

        Returns:
            ObstacleSet, possibly empty

        Raises:
            UpstreamError: If the provider call fails or returns an invalid payload
        """
        query = build_overpass_query(bounding_box)
        logger.info(f"Fetching obstacles for bbox={list(bounding_box)}")

        try:
            response = await self.client.post(self.base_url, data={"data": query})
            response.raise_for_status()
            payload = OverpassResponse.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from Overpass API: {e.response.status_code} - {e.response.text}")
            raise UpstreamError(PROVIDER_NAME, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Request error to Overpass API: {e}")
            raise UpstreamError(PROVIDER_NAME, reason=str(e)) from e
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid Overpass API response format: {e}")
            raise UpstreamError(PROVIDER_NAME, reason="invalid response format") from e

        logger.info(f"Overpass returned {len(payload.elements)} elements")
        return group_obstacles(payload.elements)

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
