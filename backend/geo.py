"""
Geographic projection for the map viewport.

Every overlay layer goes through `project` so that a given lat/lng lands on
the same viewport position in all of them:
- x grows eastward with longitude
- y grows downward (screen space) while latitude grows northward
- results are percentages of the viewport, clamped to a per-layer margin
"""

from dataclasses import dataclass, asdict
from typing import Optional

from errors import InvalidBoundsError


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass(frozen=True)
class GeoPoint:
    """A geographic coordinate, with optional altitude in metres."""
    lat: float
    lng: float
    altitude: Optional[float] = None

    def to_dict(self) -> dict:
        result = asdict(self)
        if self.altitude is None:
            result.pop('altitude')
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "GeoPoint":
        return cls(lat=data['lat'], lng=data['lng'], altitude=data.get('altitude'))


@dataclass(frozen=True)
class GeoBounds:
    """The lat/lng rectangle mapped onto the viewport."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self):
        self.validate()

    def validate(self):
        # `not a > b` also rejects NaN
        if not self.max_lat > self.min_lat:
            raise InvalidBoundsError(
                f"max_lat ({self.max_lat}) must be greater than min_lat ({self.min_lat})"
            )
        if not self.max_lng > self.min_lng:
            raise InvalidBoundsError(
                f"max_lng ({self.max_lng}) must be greater than min_lng ({self.min_lng})"
            )

    @property
    def lat_range(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lng_range(self) -> float:
        return self.max_lng - self.min_lng

    def contains(self, point: GeoPoint) -> bool:
        return (self.min_lat <= point.lat <= self.max_lat
                and self.min_lng <= point.lng <= self.max_lng)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GeoBounds":
        return cls(
            min_lat=data['min_lat'],
            max_lat=data['max_lat'],
            min_lng=data['min_lng'],
            max_lng=data['max_lng']
        )


@dataclass(frozen=True)
class ProjectedPoint:
    """Viewport position in percent, both axes in [0, 100]."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return asdict(self)


# Kenya viewport used by the live satellite map
KENYA_BOUNDS = GeoBounds(min_lat=-4.5, max_lat=4.5, min_lng=34.0, max_lng=42.0)


# =============================================================================
# PROJECTION
# =============================================================================

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def project_unclamped(point: GeoPoint, bounds: GeoBounds) -> ProjectedPoint:
    """Affine lat/lng -> viewport transform without any clamping."""
    bounds.validate()
    x = (point.lng - bounds.min_lng) / bounds.lng_range * 100
    y = (bounds.max_lat - point.lat) / bounds.lat_range * 100
    return ProjectedPoint(x=x, y=y)


def project(point: GeoPoint, bounds: GeoBounds, margin_pct: float = 0.0) -> ProjectedPoint:
    """Project a coordinate into the viewport, clamped to [margin, 100 - margin].

    Args:
        point: Coordinate to place
        bounds: Viewport rectangle
        margin_pct: Edge margin in percent; keeps markers visible near edges

    Raises:
        InvalidBoundsError: bounds have a non-positive range
        ValueError: margin outside [0, 50]
    """
    if not 0.0 <= margin_pct <= 50.0:
        raise ValueError(f"margin_pct must be within [0, 50], got {margin_pct}")
    raw = project_unclamped(point, bounds)
    low, high = margin_pct, 100.0 - margin_pct
    return ProjectedPoint(x=_clamp(raw.x, low, high), y=_clamp(raw.y, low, high))


def unproject(projected: ProjectedPoint, bounds: GeoBounds) -> GeoPoint:
    """Inverse of the unclamped projection (viewport click -> coordinate)."""
    bounds.validate()
    lng = bounds.min_lng + projected.x / 100 * bounds.lng_range
    lat = bounds.max_lat - projected.y / 100 * bounds.lat_range
    return GeoPoint(lat=lat, lng=lng)
