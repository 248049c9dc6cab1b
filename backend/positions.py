"""
Entity position resolution - render-ready geometry for every overlay entity.

Applies the shared projector per entity type (animals, drones, sensors,
risk zones, threats) and derives secondary visual parameters:
- coverage circle size from a physical radius
- heading from a compass point or a movement vector
- marker sizes for risk zones and parks

All functions are pure.
"""

import math
from typing import Dict, List, Optional

from geo import GeoBounds, GeoPoint, ProjectedPoint, project

KM_PER_DEGREE_LAT = 111.0

COMPASS_HEADINGS: Dict[str, float] = {
    "N": 0.0, "NNE": 22.5, "NE": 45.0, "ENE": 67.5,
    "E": 90.0, "ESE": 112.5, "SE": 135.0, "SSE": 157.5,
    "S": 180.0, "SSW": 202.5, "SW": 225.0, "WSW": 247.5,
    "W": 270.0, "WNW": 292.5, "NW": 315.0, "NNW": 337.5,
}


# =============================================================================
# GEOMETRY HELPERS
# =============================================================================

def coverage_size_pct(radius_km: float, bounds: GeoBounds) -> float:
    """Convert a physical radius into percent of the viewport height.

    Uses 1 degree of latitude ~= 111 km and ignores longitude convergence.
    Good enough at park scale (extents up to ~100 km); it overstates
    east-west coverage as the viewport moves away from the equator.
    """
    bounds.validate()
    radius_deg = radius_km / KM_PER_DEGREE_LAT
    return radius_deg / bounds.lat_range * 100


def heading_degrees(value: float) -> float:
    """Normalize any heading into [0, 360)."""
    heading = math.fmod(value, 360.0)
    if heading < 0:
        heading += 360.0
    # fmod of a tiny negative can round back up to 360.0
    return 0.0 if heading >= 360.0 else heading


def compass_to_heading(direction: Optional[str]) -> Optional[float]:
    """Map a collar compass point ("NW", "E") to degrees; None if stationary/unknown."""
    if not direction:
        return None
    return COMPASS_HEADINGS.get(direction.strip().upper())


def bearing_between(origin: GeoPoint, target: GeoPoint) -> float:
    """Heading from origin toward target, 0 = north, clockwise.

    Equirectangular approximation, matching the rest of the park-scale maths.
    """
    mean_lat = math.radians((origin.lat + target.lat) / 2)
    d_east = (target.lng - origin.lng) * math.cos(mean_lat)
    d_north = target.lat - origin.lat
    if d_east == 0 and d_north == 0:
        return 0.0
    return heading_degrees(math.degrees(math.atan2(d_east, d_north)))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Equirectangular distance in km between two nearby points."""
    mean_lat = math.radians((a.lat + b.lat) / 2)
    d_east = (b.lng - a.lng) * math.cos(mean_lat) * KM_PER_DEGREE_LAT
    d_north = (b.lat - a.lat) * KM_PER_DEGREE_LAT
    return math.hypot(d_east, d_north)


def screen_angle(p1: ProjectedPoint, p2: ProjectedPoint) -> float:
    """Rotation in degrees of the screen segment p1 -> p2 (for corridor arrows)."""
    return math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))


def risk_marker_size(radius: float) -> float:
    """Pixel size of a poaching risk zone marker."""
    return min(200.0, max(60.0, radius * 8))


def park_marker_size(area_km2: float) -> float:
    """Pixel size of a park footprint marker."""
    return math.sqrt(max(0.0, area_km2)) * 0.5


# =============================================================================
# PER-ENTITY RESOLVERS
# =============================================================================

def _placed(entity_id: str, pos: ProjectedPoint, **extra) -> dict:
    result = {"id": entity_id, "x": pos.x, "y": pos.y}
    result.update(extra)
    return result


def resolve_animal(animal: dict, bounds: GeoBounds, margin_pct: float) -> dict:
    """Collared animal marker with heading (None when stationary)."""
    pos = project(GeoPoint.from_dict(animal["location"]), bounds, margin_pct)
    speed = animal.get("speed", 0)
    heading = compass_to_heading(animal.get("direction")) if speed > 0 else None
    return _placed(
        animal["id"], pos,
        species=animal.get("species", ""),
        name=animal.get("name", ""),
        speed=speed,
        heading=heading,
        is_moving=speed > 0
    )


def resolve_drone(entity, bounds: GeoBounds, margin_pct: float) -> dict:
    """Drone marker with heading and coverage circle diameter (percent)."""
    position = entity.current_position
    pos = project(GeoPoint(position.lat, position.lng), bounds, margin_pct)
    return _placed(
        entity.entity_id, pos,
        name=entity.name,
        status=entity.status.value,
        heading=heading_degrees(position.heading),
        coverage_diameter_pct=coverage_size_pct(entity.coverage_radius, bounds) * 2,
        battery=entity.battery
    )


def resolve_route(entity, bounds: GeoBounds, margin_pct: float) -> List[dict]:
    """Waypoint polyline of a patrol route."""
    points = []
    for waypoint in entity.waypoints:
        pos = project(waypoint, bounds, margin_pct)
        points.append({"x": pos.x, "y": pos.y})
    return points


def resolve_sensor(sensor: dict, bounds: GeoBounds, margin_pct: float) -> dict:
    pos = project(GeoPoint.from_dict(sensor["location"]), bounds, margin_pct)
    return _placed(sensor["id"], pos, sensor_type=sensor.get("type", ""),
                   status=sensor.get("status", ""))


def resolve_risk_zone(zone: dict, bounds: GeoBounds, margin_pct: float) -> dict:
    pos = project(GeoPoint.from_dict(zone["center"]), bounds, margin_pct)
    return _placed(
        zone["id"], pos,
        risk_level=zone.get("risk_level", 0),
        size_px=risk_marker_size(zone.get("radius", 0)),
        coverage_diameter_pct=coverage_size_pct(zone.get("radius", 0), bounds) * 2
    )


def resolve_threat(event, bounds: GeoBounds, margin_pct: float) -> dict:
    """Marker for a TimedEvent that carries a location."""
    pos = project(event.location, bounds, margin_pct)
    return _placed(
        event.event_id, pos,
        event_type=event.event_type,
        severity=event.payload.get("severity"),
        timestamp=event.timestamp.isoformat()
    )

