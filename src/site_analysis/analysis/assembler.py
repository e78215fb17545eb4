"""Assembly of the analysis response."""

from typing import Any, Dict, List

from site_analysis.analysis.models import (
    AnalysisResult, Location, MonthlyClimateAverage, ObstacleSet
)


def bounding_box_polygon(location: Location) -> Dict[str, Any]:
    """Build a closed rectangle Feature from the location's bounding box.

    Vertices run (west, south), (east, south), (east, north), (west, north)
    and back to (west, south), in GeoJSON [lon, lat] order.
    """
    south, north, west, east = location.edges()
    return {
        "type": "Feature",
        "properties": {},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[
                [west, south],
                [east, south],
                [east, north],
                [west, north],
                [west, south],
            ]],
        },
    }


def assemble(
    location: Location,
    obstacles: ObstacleSet,
    weather: List[MonthlyClimateAverage]
) -> AnalysisResult:
    """Merge the pipeline outputs into the response envelope.

    The geocoder's boundary geometry is used when present, otherwise the
    bounding box rectangle stands in for it.
    """
    boundary = location.boundary_geometry or bounding_box_polygon(location)
    return AnalysisResult(boundary=boundary, obstacles=obstacles, weather=weather)
