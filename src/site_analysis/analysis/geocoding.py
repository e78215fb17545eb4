"""Postcode geocoding backed by Nominatim."""

import asyncio
import logging
from typing import Callable, Optional

from geopy.adapters import BaseAdapter
from geopy.exc import GeocoderServiceError
from geopy.geocoders import Nominatim
from pydantic import ValidationError

from site_analysis.analysis.errors import InvalidRequestError, NotFoundError, UpstreamError
from site_analysis.analysis.models import Location, NominatimPlace
from site_analysis.config import (
    GEOCODER_COUNTRY_SUFFIX, NOMINATIM_DOMAIN, NOMINATIM_SCHEME,
    PROVIDER_TIMEOUT_SECONDS, USER_AGENT
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Nominatim"


class Geocoder:
    """Resolves a UK postcode to a point, bounding box and optional boundary."""

    def __init__(
        self,
        geolocator: Optional[Nominatim] = None,
        adapter_factory: Optional[Callable[..., BaseAdapter]] = None
    ):
        """Initialize the geocoder.

        Args:
            geolocator: geopy Nominatim instance (creates default if None)
            adapter_factory: geopy HTTP adapter factory for the default instance
        """
        self.geolocator = geolocator or Nominatim(
            user_agent=USER_AGENT,
            domain=NOMINATIM_DOMAIN,
            scheme=NOMINATIM_SCHEME,
            timeout=PROVIDER_TIMEOUT_SECONDS,
            adapter_factory=adapter_factory,
        )

    async def resolve(self, postcode: str) -> Location:
        """Resolve a postcode to a location.

        Args:
            postcode: UK postcode, surrounding whitespace ignored

        Returns:
            Location built from the first candidate

        Raises:
            InvalidRequestError: If the postcode is blank
            NotFoundError: If the provider returns no candidate
            UpstreamError: If the provider call fails
        """
        postcode = (postcode or "").strip()
        if not postcode:
            raise InvalidRequestError("Postcode is required")

        query = f"{postcode}, {GEOCODER_COUNTRY_SUFFIX}"
        logger.info(f"Geocoding postcode: {postcode}")

        try:
            # geopy is blocking; keep the event loop free
            match = await asyncio.to_thread(
                self.geolocator.geocode, query, exactly_one=True, geometry="geojson"
            )
        except GeocoderServiceError as e:
            status = getattr(e.__cause__, "status_code", None)
            logger.error(f"Geocoding failed for '{postcode}': {e}")
            raise UpstreamError(PROVIDER_NAME, status, str(e)) from e

        if not match:
            logger.info(f"No geocoding candidate for '{postcode}'")
            raise NotFoundError("Postcode not found")

        return self._to_location(match.raw)

    def _to_location(self, raw: dict) -> Location:
        """Build a Location from a raw Nominatim candidate.

        Args:
            raw: Candidate dictionary as returned by the provider

        Returns:
            Location with coordinates parsed to floats

        Raises:
            UpstreamError: If the candidate is malformed
        """
        try:
            place = NominatimPlace.model_validate(raw)
            location = Location(
                latitude=float(place.lat),
                longitude=float(place.lon),
                bounding_box=place.boundingbox,
                boundary_geometry=place.geojson,
            )
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid geocoding candidate: {e}")
            raise UpstreamError(PROVIDER_NAME, reason="invalid response format") from e

        logger.info(
            f"Resolved to ({location.latitude}, {location.longitude}), "
            f"bbox={location.bounding_box}, boundary={'yes' if location.boundary_geometry else 'no'}"
        )
        return location
