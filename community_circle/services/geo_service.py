"""
Geo Service - Great-circle distance and bounding-box prefiltering
"""
import math
from typing import Dict

from community_circle.config import settings


class GeoService:
    """
    Pure distance helpers used by event discovery.

    The bounding box is a cheap rectangular approximation of the search
    circle. It over-includes the corners, so every candidate it lets through
    must be re-checked with haversine_distance. The fixed miles-per-degree
    factor holds at neighbourhood scale and mid latitudes; it degrades near
    the poles where cos(latitude) approaches zero.
    """

    @staticmethod
    def haversine_distance(
        lat1: float,
        lng1: float,
        lat2: float,
        lng2: float
    ) -> float:
        """Calculate haversine distance between two points in miles"""
        R = settings.EARTH_RADIUS_MILES

        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lng = math.radians(lng2 - lng1)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lng / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return R * c

    @staticmethod
    def get_bounding_box(
        lat: float,
        lng: float,
        radius_miles: float
    ) -> Dict[str, float]:
        """Rectangular prefilter around a center point"""
        miles_per_degree = settings.MILES_PER_DEGREE_LAT
        lat_delta = radius_miles / miles_per_degree
        lng_delta = radius_miles / (miles_per_degree * math.cos(math.radians(lat)))

        return {
            "min_lat": lat - lat_delta,
            "max_lat": lat + lat_delta,
            "min_lng": lng - lng_delta,
            "max_lng": lng + lng_delta,
        }

    @staticmethod
    def format_distance(miles: float) -> str:
        """Human readable distance, e.g. '~2.4 mi'"""
        if miles < 0.1:
            return "< 0.1 mi"
        return f"~{miles:.1f} mi"


# Singleton instance
geo_service = GeoService()
