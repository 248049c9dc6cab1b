"""
Map overlay layers.

Each layer subscribes to the sync bus and renders every published frame into
render-ready markers, always through the shared projector with its own
clamp margin. A layer keeps the id of the frame it last rendered so callers
can check that all layers agree on "now".
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import config
from fleet import PatrolStatus
from geo import GeoBounds, GeoPoint, project
from positions import (
    park_marker_size,
    resolve_animal,
    resolve_drone,
    resolve_risk_zone,
    resolve_route,
    resolve_sensor,
    resolve_threat,
    screen_angle,
)
from sync_bus import OverlayFrame, OverlaySyncBus


class OverlayLayer(ABC):
    """Base overlay: one render per published frame."""

    name = "overlay"
    margin_key = "threat"

    def __init__(self, bounds: GeoBounds, margin_pct: Optional[float] = None):
        self.bounds = bounds
        self.margin_pct = config.LAYER_MARGINS[self.margin_key] if margin_pct is None else margin_pct
        self.frame_id: Optional[int] = None
        self.offset_hours: Optional[float] = None
        self.markers: List[dict] = []
        self._unsubscribe = None

    def attach(self, bus: OverlaySyncBus) -> "OverlayLayer":
        self._unsubscribe = bus.subscribe(self.on_frame)
        return self

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_frame(self, frame: OverlayFrame):
        self.markers = self.render(frame)
        self.frame_id = frame.frame_id
        self.offset_hours = frame.offset_hours

    @abstractmethod
    def render(self, frame: OverlayFrame) -> List[dict]:
        """Markers for one frame."""

    def to_dict(self) -> dict:
        return {
            "layer": self.name,
            "frame_id": self.frame_id,
            "offset_hours": self.offset_hours,
            "margin_pct": self.margin_pct,
            "markers": self.markers
        }


class ThreatLayer(OverlayLayer):
    """Threats inside the playback window around the current time."""
    name = "threats"
    margin_key = "threat"

    def render(self, frame: OverlayFrame) -> List[dict]:
        return [resolve_threat(e, self.bounds, self.margin_pct)
                for e in frame.active_events if e.location is not None]


class DronePatrolLayer(OverlayLayer):
    """Drone markers for the whole fleet; routes only for active drones."""
    name = "drone_patrols"
    margin_key = "drone_patrol"

    def render(self, frame: OverlayFrame) -> List[dict]:
        markers = []
        for entity in frame.entities:
            marker = resolve_drone(entity, self.bounds, self.margin_pct)
            if entity.status == PatrolStatus.ACTIVE:
                marker["route"] = resolve_route(entity, self.bounds, self.margin_pct)
            markers.append(marker)
        return markers


class CoverageLayer(OverlayLayer):
    """Coverage circles of active drones."""
    name = "coverage"
    margin_key = "coverage"

    def render(self, frame: OverlayFrame) -> List[dict]:
        markers = []
        for entity in frame.entities:
            if entity.status != PatrolStatus.ACTIVE:
                continue
            drone = resolve_drone(entity, self.bounds, self.margin_pct)
            markers.append({
                "id": entity.entity_id,
                "x": drone["x"],
                "y": drone["y"],
                "diameter_pct": drone["coverage_diameter_pct"],
                "thermal": entity.capabilities.thermal
            })
        return markers


class StaticOverlayLayer(OverlayLayer):
    """Layer over static records; still re-rendered per frame so it shares the frame id."""

    def __init__(self, bounds: GeoBounds, records: List[dict], margin_pct: Optional[float] = None):
        super().__init__(bounds, margin_pct)
        self.records = list(records)


class AnimalLayer(StaticOverlayLayer):
    name = "animals"
    margin_key = "animal"

    def render(self, frame: OverlayFrame) -> List[dict]:
        return [resolve_animal(a, self.bounds, self.margin_pct) for a in self.records]


class SensorLayer(StaticOverlayLayer):
    name = "sensors"
    margin_key = "sensor"

    def render(self, frame: OverlayFrame) -> List[dict]:
        return [resolve_sensor(s, self.bounds, self.margin_pct) for s in self.records]


class RiskZoneLayer(StaticOverlayLayer):
    """Poaching risk heatmap."""
    name = "risk_zones"
    margin_key = "heatmap"

    def render(self, frame: OverlayFrame) -> List[dict]:
        return [resolve_risk_zone(z, self.bounds, self.margin_pct) for z in self.records]


class ParkLayer(StaticOverlayLayer):
    name = "parks"
    margin_key = "park"

    def render(self, frame: OverlayFrame) -> List[dict]:
        markers = []
        for park in self.records:
            pos = project(GeoPoint(park["lat"], park["lng"]), self.bounds, self.margin_pct)
            markers.append({
                "id": park["id"],
                "x": pos.x,
                "y": pos.y,
                "name": park.get("name", ""),
                "status": park.get("status", ""),
                "size_px": park_marker_size(park.get("area", 0))
            })
        return markers


class CorridorLayer(StaticOverlayLayer):
    """Wildlife corridors drawn as segments between consecutive parks."""
    name = "corridors"
    margin_key = "corridor"

    def __init__(self, bounds: GeoBounds, records: List[dict], parks: List[dict],
                 margin_pct: Optional[float] = None):
        super().__init__(bounds, records, margin_pct)
        self.parks: Dict[str, dict] = {p["id"]: p for p in parks}

    def render(self, frame: OverlayFrame) -> List[dict]:
        markers = []
        for corridor in self.records:
            parks = [self.parks[pid] for pid in corridor.get("parks", []) if pid in self.parks]
            points = [project(GeoPoint(p["lat"], p["lng"]), self.bounds, self.margin_pct)
                      for p in parks]
            segments = []
            for p1, p2 in zip(points, points[1:]):
                segments.append({
                    "x1": p1.x, "y1": p1.y, "x2": p2.x, "y2": p2.y,
                    "arrow_x": (p1.x + p2.x) / 2,
                    "arrow_y": (p1.y + p2.y) / 2,
                    "arrow_angle": screen_angle(p1, p2)
                })
            markers.append({
                "id": corridor["id"],
                "name": corridor.get("name", ""),
                "status": corridor.get("status", ""),
                "segments": segments
            })
        return markers
