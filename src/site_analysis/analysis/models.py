"""Data models for the site analysis service."""

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ObstacleCategory(str, Enum):
    """Kind of physical obstacle found near a site."""
    BUILDING = "Building"
    TREE = "Tree"
    POLE = "Pole"


class Location(BaseModel):
    """Geocoded site location."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    bounding_box: List[str] = Field(
        ...,
        min_length=4,
        max_length=4,
        description="Provider bounding box as [south, north, west, east] decimal strings"
    )
    boundary_geometry: Optional[Dict[str, Any]] = Field(None, description="GeoJSON geometry of the area")

    @field_validator("bounding_box")
    @classmethod
    def _check_numeric(cls, value: List[str]) -> List[str]:
        for edge in value:
            float(edge)
        return value

    def edges(self) -> Tuple[float, float, float, float]:
        """Return the bounding box as (south, north, west, east) floats."""
        south, north, west, east = (float(edge) for edge in self.bounding_box)
        return south, north, west, east


class ObstacleFeature(BaseModel):
    """Single classified obstacle."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: ObstacleCategory = Field(..., description="Obstacle category")
    latitude: float = Field(..., alias="lat", description="Latitude in decimal degrees")
    longitude: float = Field(..., alias="lon", description="Longitude in decimal degrees")


class ObstacleSet(BaseModel):
    """Obstacles grouped by category, in provider order."""
    buildings: List[ObstacleFeature] = Field(default_factory=list)
    trees: List[ObstacleFeature] = Field(default_factory=list)
    poles: List[ObstacleFeature] = Field(default_factory=list)


class MonthlyClimateAverage(BaseModel):
    """Climate averages for one calendar month pooled over the lookback window."""
    model_config = ConfigDict(populate_by_name=True)

    month_name: str = Field(..., alias="month", description="Calendar month name")
    mean_temperature_c: float = Field(
        ..., alias="temperature_2m_mean", description="Mean daily temperature in Celsius"
    )
    mean_precipitation_mm: float = Field(
        ..., alias="precipitation_sum", description="Mean daily precipitation in millimetres"
    )
    mean_sunshine_hours: float = Field(
        ..., alias="sunshine_duration", description="Mean daily sunshine in hours"
    )


class AnalysisResult(BaseModel):
    """Analysis response model."""
    boundary: Dict[str, Any] = Field(..., description="GeoJSON boundary of the site")
    obstacles: ObstacleSet = Field(..., description="Obstacles near the site")
    weather: List[MonthlyClimateAverage] = Field(
        ..., min_length=12, max_length=12, description="Monthly climate averages, January to December"
    )


class AnalyzeRequest(BaseModel):
    """Analysis request body."""
    postcode: Optional[str] = Field(None, description="UK postcode to analyse")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Additional error details")


# Provider response shapes, validated where the payload enters the pipeline

class NominatimPlace(BaseModel):
    """Candidate returned by a Nominatim search."""
    lat: str = Field(..., description="Latitude as a decimal string")
    lon: str = Field(..., description="Longitude as a decimal string")
    boundingbox: List[str] = Field(..., min_length=4, max_length=4)
    geojson: Optional[Dict[str, Any]] = None


class OverpassCenter(BaseModel):
    """Representative point of an area element."""
    lat: float
    lon: float


class OverpassElement(BaseModel):
    """Raw element returned by the Overpass interpreter."""
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[OverpassCenter] = None
    tags: Dict[str, str] = Field(default_factory=dict)


class OverpassResponse(BaseModel):
    """Raw Overpass interpreter response."""
    elements: List[OverpassElement] = Field(default_factory=list)


class OpenMeteoDaily(BaseModel):
    """Index-aligned daily arrays from the Open-Meteo archive."""
    time: List[str] = Field(default_factory=list)
    temperature_2m_mean: List[Optional[float]] = Field(default_factory=list)
    precipitation_sum: List[Optional[float]] = Field(default_factory=list)
    sunshine_duration: List[Optional[float]] = Field(default_factory=list)


class OpenMeteoArchiveResponse(BaseModel):
    """Raw Open-Meteo archive response."""
    daily: OpenMeteoDaily = Field(default_factory=OpenMeteoDaily)


class DailySample(BaseModel):
    """One day of climate values; None means the provider reported nothing."""
    date: dt.date = Field(..., description="Calendar date of the sample")
    mean_temperature_c: Optional[float] = None
    precipitation_mm: Optional[float] = None
    sunshine_seconds: Optional[float] = None
