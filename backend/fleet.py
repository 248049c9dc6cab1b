"""
Drone fleet simulation state.

This module provides:
- PatrolStatus, the closed set of drone states
- PatrolEntity, one drone with its waypoint route and live position
- FleetController, owner of the entity set (movement, battery, status)
- FleetStats, the on-demand fleet summary
"""

import copy
import math
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from errors import InvalidStatusError, UnknownEntityError
from geo import GeoPoint
from logger import setup_logger
from positions import bearing_between, distance_km, heading_degrees

logger = setup_logger("fleet")


# =============================================================================
# ENUMS
# =============================================================================

class PatrolStatus(Enum):
    """Drone mission state. Transitions are driven by mission control."""
    ACTIVE = "active"
    RETURNING = "returning"
    STANDBY = "standby"
    CHARGING = "charging"

    @classmethod
    def parse(cls, value) -> "PatrolStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise InvalidStatusError(f"Unknown patrol status '{value}' (expected one of: {allowed})")


DISCHARGING_STATES = (PatrolStatus.ACTIVE, PatrolStatus.RETURNING)


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass
class DronePosition:
    """Live drone position; heading in degrees, 0 = north."""
    lat: float
    lng: float
    altitude: float = 0.0
    heading: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "DronePosition":
        return cls(
            lat=data["lat"],
            lng=data["lng"],
            altitude=data.get("altitude", 0.0),
            heading=heading_degrees(data.get("heading", 0.0))
        )

    def as_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng, altitude=self.altitude)


@dataclass
class Capabilities:
    thermal: bool = False
    night_vision: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PatrolEntity:
    """A patrol drone. Only status, current_position and battery change in a session."""
    entity_id: str
    drone_id: str
    name: str
    park_id: str
    route_type: str
    waypoints: List[GeoPoint]
    current_position: DronePosition
    status: PatrolStatus
    battery: float  # percent, 0-100
    speed: float  # km/h
    coverage_radius: float  # km
    capabilities: Capabilities = field(default_factory=Capabilities)
    mission_start: str = ""
    estimated_end: str = ""
    next_waypoint: Optional[int] = None  # index of the waypoint being flown toward
    route_complete: bool = False

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "drone_id": self.drone_id,
            "name": self.name,
            "park_id": self.park_id,
            "route_type": self.route_type,
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "current_position": self.current_position.to_dict(),
            "status": self.status.value,
            "battery": self.battery,
            "speed": self.speed,
            "coverage_radius": self.coverage_radius,
            "capabilities": self.capabilities.to_dict(),
            "mission_start": self.mission_start,
            "estimated_end": self.estimated_end,
            "next_waypoint": self.next_waypoint,
            "route_complete": self.route_complete
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatrolEntity":
        battery = float(data.get("battery", 100))
        return cls(
            entity_id=data["entity_id"],
            drone_id=data.get("drone_id", data["entity_id"]),
            name=data.get("name", data["entity_id"]),
            park_id=data.get("park_id", ""),
            route_type=data.get("route_type", "perimeter"),
            waypoints=[GeoPoint.from_dict(wp) for wp in data.get("waypoints", [])],
            current_position=DronePosition.from_dict(data["current_position"]),
            status=PatrolStatus.parse(data.get("status", "standby")),
            battery=max(0.0, min(100.0, battery)),
            speed=float(data.get("speed", 0)),
            coverage_radius=float(data.get("coverage_radius", 0)),
            capabilities=Capabilities(**data.get("capabilities", {})),
            mission_start=data.get("mission_start", ""),
            estimated_end=data.get("estimated_end", ""),
            next_waypoint=data.get("next_waypoint"),
            route_complete=data.get("route_complete", False)
        )


@dataclass(frozen=True)
class FleetStats:
    """Fleet summary derived from the current entity set.

    total_coverage_km2 sums each active drone's circle, so overlapping
    coverage is counted twice. average_battery is None with no active patrols.
    """
    total_drones: int
    active_patrols: int
    total_coverage_km2: float
    average_battery: Optional[int]
    thermal_active: int
    night_vision_active: int
    by_status: Dict[str, int]

    def to_dict(self) -> dict:
        return asdict(self)


def compute_fleet_stats(entities: List[PatrolEntity]) -> FleetStats:
    active = [e for e in entities if e.status == PatrolStatus.ACTIVE]
    coverage = sum(math.pi * e.coverage_radius ** 2 for e in active)
    # Round half up (62.5 -> 63)
    average_battery = math.floor(sum(e.battery for e in active) / len(active) + 0.5) if active else None
    by_status = {status.value: 0 for status in PatrolStatus}
    for entity in entities:
        by_status[entity.status.value] += 1
    return FleetStats(
        total_drones=len(entities),
        active_patrols=len(active),
        total_coverage_km2=round(coverage, 1),
        average_battery=average_battery,
        thermal_active=sum(1 for e in active if e.capabilities.thermal),
        night_vision_active=sum(1 for e in active if e.capabilities.night_vision),
        by_status=by_status
    )


# =============================================================================
# FLEET CONTROLLER
# =============================================================================

BatteryModel = Callable[[PatrolEntity, float], float]


class FleetController:
    """Owns the patrol entity set; consumers only get copies."""

    def __init__(self, entities: List[PatrolEntity],
                 battery_model: Optional[BatteryModel] = None,
                 loop_routes: bool = True):
        self._entities: Dict[str, PatrolEntity] = {}
        self.battery_model = battery_model
        self.loop_routes = loop_routes
        for entity in copy.deepcopy(list(entities)):
            if entity.entity_id in self._entities:
                raise ValueError(f"Duplicate patrol entity id: {entity.entity_id}")
            if entity.waypoints and entity.next_waypoint is None:
                entity.next_waypoint = self._nearest_waypoint_index(entity)
            self._entities[entity.entity_id] = entity
        logger.info(f"Fleet initialized with {len(self._entities)} drones "
                    f"({self.get_stats().active_patrols} active)")

    @classmethod
    def from_records(cls, records: List[dict], **kwargs) -> "FleetController":
        return cls([PatrolEntity.from_dict(r) for r in records], **kwargs)

    @staticmethod
    def _nearest_waypoint_index(entity: PatrolEntity) -> int:
        here = entity.current_position.as_point()
        distances = [distance_km(here, wp) for wp in entity.waypoints]
        return distances.index(min(distances))

    # ===== READ ACCESS =====

    def get_entities(self) -> List[PatrolEntity]:
        """Snapshot copies of every entity, in mission order."""
        return [copy.deepcopy(e) for e in self._entities.values()]

    def get_entity(self, entity_id: str) -> PatrolEntity:
        return copy.deepcopy(self._get(entity_id))

    def get_stats(self) -> FleetStats:
        """Recomputed on every call; never cached across mutations."""
        return compute_fleet_stats(list(self._entities.values()))

    def _get(self, entity_id: str) -> PatrolEntity:
        entity = self._entities.get(entity_id)
        if entity is None:
            raise UnknownEntityError(f"Patrol entity not found: {entity_id}")
        return entity

    # ===== MUTATIONS =====

    def set_status(self, entity_id: str, status) -> PatrolEntity:
        """Apply an externally driven status transition."""
        entity = self._get(entity_id)
        new_status = PatrolStatus.parse(status)
        if new_status != entity.status:
            logger.info(f"Drone {entity_id} status {entity.status.value} -> {new_status.value}")
            entity.status = new_status
        return copy.deepcopy(entity)

    def advance(self, delta_seconds: float) -> List[str]:
        """Advance the simulation by delta_seconds; returns ids of drones that moved."""
        if delta_seconds < 0:
            raise ValueError(f"delta_seconds must be non-negative, got {delta_seconds}")
        moved = []
        for entity in self._entities.values():
            if entity.status == PatrolStatus.ACTIVE and entity.waypoints and not entity.route_complete:
                travel_km = entity.speed * delta_seconds / 3600.0
                if travel_km > 0 and self._move_along_route(entity, travel_km):
                    moved.append(entity.entity_id)
            if self.battery_model is not None:
                self._apply_battery(entity, self.battery_model(entity, delta_seconds))
        logger.debug(f"Fleet advanced {delta_seconds}s, {len(moved)} drones moved")
        return moved

    def _apply_battery(self, entity: PatrolEntity, proposed: float):
        level = max(0.0, min(100.0, float(proposed)))
        if entity.status in DISCHARGING_STATES and level > entity.battery:
            logger.warning(f"Battery model raised {entity.entity_id} while {entity.status.value}; held at {entity.battery}")
            level = entity.battery
        elif entity.status == PatrolStatus.CHARGING and level < entity.battery:
            logger.warning(f"Battery model drained {entity.entity_id} while charging; held at {entity.battery}")
            level = entity.battery
        entity.battery = level

    def _move_along_route(self, entity: PatrolEntity, travel_km: float) -> bool:
        """Fly travel_km along the waypoint list, looping or halting at the end."""
        position = entity.current_position
        moved = False
        idle_hops = 0
        while travel_km > 0:
            here = position.as_point()
            target = entity.waypoints[entity.next_waypoint]
            remaining = distance_km(here, target)

            if remaining > travel_km:
                fraction = travel_km / remaining
                position.heading = bearing_between(here, target)
                position.lat += (target.lat - position.lat) * fraction
                position.lng += (target.lng - position.lng) * fraction
                if target.altitude is not None:
                    position.altitude += (target.altitude - position.altitude) * fraction
                return True

            # Reached the waypoint
            if remaining > 0:
                position.heading = bearing_between(here, target)
                moved = True
                idle_hops = 0
            else:
                idle_hops += 1
                if idle_hops > len(entity.waypoints):
                    # Every waypoint coincides; nothing left to fly
                    break
            position.lat, position.lng = target.lat, target.lng
            if target.altitude is not None:
                position.altitude = target.altitude
            travel_km -= remaining

            if entity.next_waypoint == len(entity.waypoints) - 1:
                if not self.loop_routes:
                    entity.route_complete = True
                    logger.info(f"Drone {entity.entity_id} completed its route")
                    break
                entity.next_waypoint = 0
            else:
                entity.next_waypoint += 1
        return moved
