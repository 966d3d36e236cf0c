from dataclasses import dataclass, field

from .customer import WarningMessages
from .geometry import DistanceMethod, Ellipsoid, GeoPoint, WGS84

# Future of Voice office, Berlin
DEFAULT_REFERENCE = GeoPoint(latitude=52.493256, longitude=13.446082)

# Maximum customer distance in km
DEFAULT_THRESHOLD_KM = 100.0

DEFAULT_MIN_FRACTION_DIGITS = 6


@dataclass
class CustomerRangeConfig:
    """Configuration for parsing and filtering customer files."""

    reference: GeoPoint = DEFAULT_REFERENCE
    threshold_km: float = DEFAULT_THRESHOLD_KM
    ellipsoid: Ellipsoid = WGS84
    method: DistanceMethod = DistanceMethod.HIGH_PRECISION
    min_fraction_digits: int = DEFAULT_MIN_FRACTION_DIGITS
    messages: WarningMessages = field(default_factory=WarningMessages)
    log_level: str = "WARNING"
    metrics: bool = False
