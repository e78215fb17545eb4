"""Site analysis pipeline."""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Optional

from site_analysis.analysis.assembler import assemble
from site_analysis.analysis.climate import ClimateAggregator
from site_analysis.analysis.geocoding import Geocoder
from site_analysis.analysis.models import AnalysisResult
from site_analysis.analysis.obstacles import ObstacleCollector

logger = logging.getLogger(__name__)


def utc_today() -> date:
    """Return the current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


class AnalysisService:
    """Runs geocoding, obstacle discovery and climate aggregation for a postcode."""

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        obstacle_collector: Optional[ObstacleCollector] = None,
        climate_aggregator: Optional[ClimateAggregator] = None
    ):
        """Initialize the analysis service.

        Args:
            geocoder: Geocoder instance (creates default if None)
            obstacle_collector: Obstacle collector instance (creates default if None)
            climate_aggregator: Climate aggregator instance (creates default if None)
        """
        self.geocoder = geocoder or Geocoder()
        self.obstacle_collector = obstacle_collector or ObstacleCollector()
        self.climate_aggregator = climate_aggregator or ClimateAggregator()

    async def analyze(self, postcode: str, as_of: Optional[date] = None) -> AnalysisResult:
        """Analyze the site at a postcode.

        Args:
            postcode: UK postcode
            as_of: Last day of the climate window (defaults to today in UTC)

        Returns:
            AnalysisResult with boundary, obstacles and monthly climate

        Raises:
            InvalidRequestError: If the postcode is blank
            NotFoundError: If the postcode cannot be geocoded
            UpstreamError: If any provider fails
        """
        as_of = as_of or utc_today()
        logger.info(f"Analyzing postcode: {postcode!r}")

        location = await self.geocoder.resolve(postcode)

        # Independent of each other, both only need the location
        obstacles, weather = await asyncio.gather(
            self.obstacle_collector.collect(location.bounding_box),
            self.climate_aggregator.aggregate(location.latitude, location.longitude, as_of),
        )

        result = assemble(location, obstacles, weather)
        logger.info(
            f"Analysis complete: buildings={len(result.obstacles.buildings)}, "
            f"trees={len(result.obstacles.trees)}, poles={len(result.obstacles.poles)}"
        )
        return result

    async def aclose(self):
        """Close the provider clients."""
        for client in (self.obstacle_collector, self.climate_aggregator):
            try:
                await client.aclose()
            except Exception as e:
                logger.error(f"Error closing provider client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
