"""Tests for entity position resolution."""
import pytest

from fleet import DronePosition, PatrolEntity, PatrolStatus
from geo import KENYA_BOUNDS, GeoBounds, GeoPoint, ProjectedPoint
from positions import (
    bearing_between,
    compass_to_heading,
    coverage_size_pct,
    distance_km,
    heading_degrees,
    park_marker_size,
    resolve_animal,
    resolve_drone,
    resolve_risk_zone,
    resolve_route,
    resolve_sensor,
    risk_marker_size,
    screen_angle,
)


@pytest.fixture
def bounds():
    return GeoBounds(min_lat=-2, max_lat=0, min_lng=35, max_lng=37)


class TestCoverageSize:
    def test_kenya_radius(self):
        assert coverage_size_pct(2.5, KENYA_BOUNDS) == pytest.approx(2.5 / 111 / 9 * 100)

    def test_scales_linearly(self, bounds):
        assert coverage_size_pct(4, bounds) == pytest.approx(2 * coverage_size_pct(2, bounds))

    def test_zero_radius(self, bounds):
        assert coverage_size_pct(0, bounds) == 0


class TestHeadings:
    """Tests for heading normalization and derivation."""

    def test_normalize(self):
        assert heading_degrees(-90) == 270
        assert heading_degrees(720) == 0
        assert heading_degrees(359.5) == 359.5

    def test_normalize_always_in_range(self):
        for value in [-1e-15, -360, 360, 1080.25, -725]:
            assert 0 <= heading_degrees(value) < 360

    def test_compass_points(self):
        assert compass_to_heading("N") == 0
        assert compass_to_heading("nw") == 315
        assert compass_to_heading("SSE") == 157.5

    def test_stationary_has_no_heading(self):
        assert compass_to_heading("Stationary") is None
        assert compass_to_heading(None) is None
        assert compass_to_heading("") is None

    def test_bearing_cardinal_directions(self):
        origin = GeoPoint(0, 36)
        assert bearing_between(origin, GeoPoint(1, 36)) == pytest.approx(0)
        assert bearing_between(origin, GeoPoint(0, 37)) == pytest.approx(90)
        assert bearing_between(origin, GeoPoint(-1, 36)) == pytest.approx(180)
        assert bearing_between(origin, GeoPoint(0, 35)) == pytest.approx(270)

    def test_bearing_same_point(self):
        assert bearing_between(GeoPoint(0, 36), GeoPoint(0, 36)) == 0

    def test_distance_one_degree_latitude(self):
        assert distance_km(GeoPoint(0, 36), GeoPoint(1, 36)) == pytest.approx(111)


class TestScreenAngle:
    def test_horizontal_and_vertical(self):
        assert screen_angle(ProjectedPoint(0, 0), ProjectedPoint(10, 0)) == pytest.approx(0)
        assert screen_angle(ProjectedPoint(0, 0), ProjectedPoint(0, 10)) == pytest.approx(90)
        assert screen_angle(ProjectedPoint(10, 0), ProjectedPoint(0, 0)) == pytest.approx(180)


class TestMarkerSizes:
    def test_risk_marker_clamped(self):
        assert risk_marker_size(5) == 60
        assert risk_marker_size(15) == 120
        assert risk_marker_size(30) == 200

    def test_park_marker(self):
        assert park_marker_size(100) == pytest.approx(5.0)
        assert park_marker_size(-5) == 0


class TestResolvers:
    """Tests for the per-entity resolvers."""

    def test_moving_animal(self, bounds):
        animal = {"id": "a1", "species": "Elephant", "name": "Tembo",
                  "location": {"lat": -1, "lng": 36}, "speed": 3.2, "direction": "NW"}
        marker = resolve_animal(animal, bounds, 5)
        assert (marker["x"], marker["y"]) == (50, 50)
        assert marker["heading"] == 315
        assert marker["is_moving"] is True

    def test_stationary_animal(self, bounds):
        animal = {"id": "a2", "location": {"lat": -1, "lng": 36}, "speed": 0, "direction": "E"}
        marker = resolve_animal(animal, bounds, 5)
        assert marker["heading"] is None
        assert marker["is_moving"] is False

    def test_animal_outside_bounds_clamped(self, bounds):
        animal = {"id": "a3", "location": {"lat": 3, "lng": 40}, "speed": 0}
        marker = resolve_animal(animal, bounds, 5)
        assert (marker["x"], marker["y"]) == (95, 5)

    def test_drone(self, bounds):
        entity = PatrolEntity(
            entity_id="d1", drone_id="D-1", name="Eagle", park_id="p",
            route_type="perimeter",
            waypoints=[GeoPoint(-1, 36), GeoPoint(-1.5, 36.5)],
            current_position=DronePosition(lat=-1, lng=36, heading=-45),
            status=PatrolStatus.ACTIVE, battery=80, speed=40, coverage_radius=2.22
        )
        marker = resolve_drone(entity, bounds, 2)
        assert marker["id"] == "d1"
        assert marker["heading"] == 315
        assert marker["status"] == "active"
        assert marker["coverage_diameter_pct"] == pytest.approx(2 * 2.22 / 111 / 2 * 100)

        route = resolve_route(entity, bounds, 2)
        assert route == [{"x": 50, "y": 50}, {"x": 75, "y": 75}]

    def test_sensor(self, bounds):
        sensor = {"id": "s1", "type": "acoustic", "status": "online",
                  "location": {"lat": -0.5, "lng": 35.5}}
        marker = resolve_sensor(sensor, bounds, 5)
        assert marker == {"id": "s1", "x": 25, "y": 25, "sensor_type": "acoustic", "status": "online"}

    def test_risk_zone(self, bounds):
        zone = {"id": "r1", "center": {"lat": -1, "lng": 36}, "radius": 15, "risk_level": 85}
        marker = resolve_risk_zone(zone, bounds, 2)
        assert marker["size_px"] == 120
        assert marker["risk_level"] == 85
