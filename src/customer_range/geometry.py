"""
Geographic points, reference ellipsoids and distance calculations.

The default distance is the Andoyer-Lambert approximation of the geodesic on
an oblate spheroid, which is accurate to a few tens of meters for the
distances this tool works with. Cheaper spherical approximations and an exact
inverse geodesic (via pyproj) are provided for comparison.
"""

from enum import Enum
from typing import NamedTuple
import logging
import math

import pyproj

logger = logging.getLogger(__name__)


class GeoPoint(NamedTuple):
    """Represents a geographic position with latitude and longitude in degrees."""

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Check whether the point lies within the usual latitude/longitude ranges."""
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


class Ellipsoid(NamedTuple):
    """Reference ellipsoid given by its equatorial radius (km) and flattening."""

    semi_major_axis_km: float
    flattening: float

    @classmethod
    def from_name(cls, name: str) -> "Ellipsoid":
        """
        Look up a named reference ellipsoid in the pyproj ellipsoid table.

        Args:
            name: pyproj ellipsoid name, e.g. "WGS84" or "GRS80"

        Returns:
            Ellipsoid with the radius converted to kilometers

        Raises:
            ValueError: If pyproj does not know the ellipsoid
        """
        if name not in pyproj.get_ellps_map():
            raise ValueError(f"Unknown ellipsoid: {name}")
        geod = pyproj.Geod(ellps=name)
        return cls(semi_major_axis_km=geod.a / 1000.0, flattening=geod.f)

    def geod(self) -> pyproj.Geod:
        """Build a pyproj.Geod for this ellipsoid."""
        return pyproj.Geod(a=self.semi_major_axis_km * 1000.0, f=self.flattening)


WGS84 = Ellipsoid(semi_major_axis_km=6378.137, flattening=1 / 298.257223563)

# Mean meridian circumference used by the low precision estimate
EARTH_CIRCUMFERENCE_KM = 40000.0


class DistanceMethod(Enum):
    """Enumeration for the available distance calculations."""

    HIGH_PRECISION = "high"
    LOW_PRECISION = "low"
    SPHERICAL = "spherical"
    GEODESIC = "geodesic"

    def __str__(self) -> str:
        return self.value


def to_radians(degrees: float) -> float:
    """Convert degrees to radians."""
    return degrees * (math.pi / 180)


def to_degrees(radians: float) -> float:
    """Convert radians to degrees."""
    return radians * (180 / math.pi)


def _is_finite(*points: GeoPoint) -> bool:
    return all(
        math.isfinite(point.latitude) and math.isfinite(point.longitude)
        for point in points
    )


def distance(
    point_a: GeoPoint, point_b: GeoPoint, ellipsoid: Ellipsoid = WGS84
) -> float:
    """
    Calculate the distance between two points with the Andoyer-Lambert formula.

    Coincident points return 0.0. Non-finite coordinates, and antipodal
    configurations where C evaluates to exactly zero, return nan rather than
    raising. Close to the antipodes the approximation loses accuracy.

    Args:
        point_a: First point in degrees
        point_b: Second point in degrees
        ellipsoid: Reference ellipsoid (default: WGS84)

    Returns:
        Distance in kilometers
    """
    if not _is_finite(point_a, point_b):
        return math.nan

    lat1, long1 = to_radians(point_a.latitude), to_radians(point_a.longitude)
    lat2, long2 = to_radians(point_b.latitude), to_radians(point_b.longitude)

    F = (lat1 + lat2) / 2
    G = (lat1 - lat2) / 2
    l = (long1 - long2) / 2

    S = math.sin(G) ** 2 * math.cos(l) ** 2 + math.cos(F) ** 2 * math.sin(l) ** 2
    C = math.cos(G) ** 2 * math.cos(l) ** 2 + math.sin(F) ** 2 * math.sin(l) ** 2

    if S == 0:
        return 0.0
    if C == 0:  # S/C and H1 undefined
        logger.debug(f"Antipodal points {point_a} and {point_b}, distance undefined")
        return math.nan

    w = math.atan(math.sqrt(S / C))
    D = 2 * w * ellipsoid.semi_major_axis_km

    T = math.sqrt(S * C) / w
    H1 = (3 * T - 1) / (2 * C)
    H2 = (3 * T + 1) / (2 * S)

    f = ellipsoid.flattening
    return D * (
        1
        + f * H1 * math.sin(F) ** 2 * math.cos(G) ** 2
        - f * H2 * math.cos(F) ** 2 * math.sin(G) ** 2
    )


def central_angle(point_a: GeoPoint, point_b: GeoPoint) -> float:
    """
    Calculate the central angle between two points on a sphere.

    Uses the spherical law of cosines. The cosine is clamped to [-1, 1] so that
    rounding noise on nearly identical points does not leave the acos domain.

    Returns:
        Angle in radians, nan for non-finite input
    """
    if not _is_finite(point_a, point_b):
        return math.nan

    lat1, long1 = to_radians(point_a.latitude), to_radians(point_a.longitude)
    lat2, long2 = to_radians(point_b.latitude), to_radians(point_b.longitude)

    cos_angle = math.sin(lat1) * math.sin(lat2) + math.cos(lat1) * math.cos(
        lat2
    ) * math.cos(long2 - long1)
    return math.acos(max(-1.0, min(1.0, cos_angle)))


def spherical_distance(
    point_a: GeoPoint, point_b: GeoPoint, ellipsoid: Ellipsoid = WGS84
) -> float:
    """Distance in km on a sphere with the ellipsoid's equatorial radius (error up to ~6 km)."""
    return central_angle(point_a, point_b) * ellipsoid.semi_major_axis_km


def low_precision_distance(
    point_a: GeoPoint, point_b: GeoPoint, ellipsoid: Ellipsoid = WGS84
) -> float:
    """
    Average of the equatorial-radius and meridian-circumference estimates.

    The two spherical estimates err in opposite directions, so their mean is
    accurate to roughly 3 km.
    """
    arc = central_angle(point_a, point_b)
    return (
        arc * ellipsoid.semi_major_axis_km
        + to_degrees(arc) / 360 * EARTH_CIRCUMFERENCE_KM
    ) / 2


def geodesic_distance(
    point_a: GeoPoint, point_b: GeoPoint, ellipsoid: Ellipsoid = WGS84
) -> float:
    """Exact inverse geodesic distance in km, computed by pyproj."""
    if not _is_finite(point_a, point_b):
        return math.nan
    _, _, meters = ellipsoid.geod().inv(
        point_a.longitude, point_a.latitude, point_b.longitude, point_b.latitude
    )
    return meters / 1000.0


_DISTANCE_FUNCTIONS = {
    DistanceMethod.HIGH_PRECISION: distance,
    DistanceMethod.LOW_PRECISION: low_precision_distance,
    DistanceMethod.SPHERICAL: spherical_distance,
    DistanceMethod.GEODESIC: geodesic_distance,
}


def calculate_distance(
    point_a: GeoPoint,
    point_b: GeoPoint,
    method: DistanceMethod = DistanceMethod.HIGH_PRECISION,
    ellipsoid: Ellipsoid = WGS84,
) -> float:
    """
    Calculate the distance between two points with the selected method.

    Args:
        point_a: First point in degrees
        point_b: Second point in degrees
        method: Distance calculation to use
        ellipsoid: Reference ellipsoid

    Returns:
        Distance in kilometers
    """
    return _DISTANCE_FUNCTIONS[method](point_a, point_b, ellipsoid)
