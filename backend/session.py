"""
Monitoring session - owner of all map engine state.

A session is built once at startup from the seed datasets (or caller data)
and owns the viewport bounds, the fleet controller, the playback controller
and the overlay bus. Every state change goes through `refresh`, which builds
exactly one frame and publishes it to all overlay layers.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional

import config
from fleet import BatteryModel, FleetController, PatrolEntity, PatrolStatus, compute_fleet_stats
from geo import KENYA_BOUNDS, GeoBounds, GeoPoint, ProjectedPoint, project
from logger import setup_logger
from overlays import (
    AnimalLayer,
    CorridorLayer,
    CoverageLayer,
    DronePatrolLayer,
    OverlayLayer,
    ParkLayer,
    RiskZoneLayer,
    SensorLayer,
    ThreatLayer,
)
from playback import PlaybackController, PlaybackWindow, TimedEvent, threat_stats
from seed_data import (
    ANIMALS_SEED,
    CORRIDORS_SEED,
    PARKS_SEED,
    RISK_ZONES_SEED,
    SENSORS_SEED,
    patrol_records,
    threat_records,
)
from sync_bus import OverlayFrame, OverlaySyncBus

logger = setup_logger("session")


class MonitoringSession:
    """One map session: bounds, fleet, playback and the overlays bound to them."""

    def __init__(self,
                 now: Optional[datetime] = None,
                 bounds: GeoBounds = KENYA_BOUNDS,
                 events: Optional[List[TimedEvent]] = None,
                 patrols: Optional[List[PatrolEntity]] = None,
                 animals: Optional[List[dict]] = None,
                 risk_zones: Optional[List[dict]] = None,
                 sensors: Optional[List[dict]] = None,
                 parks: Optional[List[dict]] = None,
                 corridors: Optional[List[dict]] = None,
                 window_hours: float = config.PLAYBACK_WINDOW_HOURS,
                 battery_model: Optional[BatteryModel] = None,
                 loop_routes: bool = config.LOOP_PATROL_ROUTES,
                 strict_seek: bool = config.STRICT_SEEK,
                 auto_tick: bool = True):
        self.started_at = now or datetime.now()
        self.bounds = bounds

        if events is None:
            events = [TimedEvent.from_dict(r) for r in threat_records(self.started_at)]
        if patrols is None:
            patrols = [PatrolEntity.from_dict(r) for r in patrol_records(self.started_at)]
        parks = PARKS_SEED if parks is None else parks

        self.fleet = FleetController(patrols, battery_model=battery_model, loop_routes=loop_routes)
        self.bus = OverlaySyncBus()
        self.playback = PlaybackController(
            events,
            PlaybackWindow.ending_at(self.started_at, window_hours),
            strict_seek=strict_seek,
            auto_tick=auto_tick,
            on_change=self._on_playback_change
        )

        self.layers: List[OverlayLayer] = [
            ThreatLayer(bounds),
            DronePatrolLayer(bounds),
            CoverageLayer(bounds),
            AnimalLayer(bounds, ANIMALS_SEED if animals is None else animals),
            SensorLayer(bounds, SENSORS_SEED if sensors is None else sensors),
            RiskZoneLayer(bounds, RISK_ZONES_SEED if risk_zones is None else risk_zones),
            ParkLayer(bounds, parks),
            CorridorLayer(bounds, CORRIDORS_SEED if corridors is None else corridors, parks),
        ]
        for layer in self.layers:
            layer.attach(self.bus)

        self.refresh()
        logger.info(f"Session started at {self.started_at.isoformat()} with "
                    f"{len(self.playback.events)} events and {len(patrols)} drones")

    # ===== FRAME PUBLISHING =====

    def _on_playback_change(self, controller: PlaybackController):
        self.refresh()

    def refresh(self) -> OverlayFrame:
        """Build one frame from current state and push it to every overlay."""
        state = self.playback.get_state()
        entities = self.fleet.get_entities()
        frame = OverlayFrame(
            frame_id=self.bus.next_frame_id(),
            offset_hours=state.offset_hours,
            current_time=state.current_time,
            is_playing=state.is_playing,
            speed_multiplier=state.speed_multiplier,
            active_events=tuple(state.active_events),
            entities=tuple(entities),
            fleet_stats=compute_fleet_stats(entities)
        )
        self.bus.publish(frame)
        return frame

    @property
    def frame(self) -> OverlayFrame:
        return self.bus.current

    # ===== FLEET =====

    def advance_fleet(self, delta_seconds: float) -> List[str]:
        moved = self.fleet.advance(delta_seconds)
        self.refresh()
        return moved

    def set_drone_status(self, entity_id: str, status) -> PatrolEntity:
        entity = self.fleet.set_status(entity_id, status)
        self.refresh()
        return entity

    # ===== MAP =====

    def project(self, point: GeoPoint, margin_pct: float = 0.0) -> ProjectedPoint:
        return project(point, self.bounds, margin_pct)

    def render_overlays(self) -> Dict[str, dict]:
        return {layer.name: layer.to_dict() for layer in self.layers}

    def overlays_in_sync(self) -> bool:
        """True when every layer rendered the bus's current frame."""
        current = self.bus.current
        return current is not None and all(l.frame_id == current.frame_id for l in self.layers)

    # ===== ASSISTANT CONTEXT =====

    def build_assistant_context(self) -> str:
        frame = self.bus.current
        stats = frame.fleet_stats
        active_names = [e.name for e in frame.entities if e.status == PatrolStatus.ACTIVE]
        summary = threat_stats(self.playback.events)
        lines = [
            f"- Playback time: {frame.current_time.isoformat(timespec='minutes')}",
            f"- Active drones ({stats.active_patrols}/{stats.total_drones}): "
            f"{', '.join(active_names) or 'none'}",
            f"- Average active battery: "
            f"{'n/a' if stats.average_battery is None else str(stats.average_battery) + '%'}",
            f"- Coverage: {stats.total_coverage_km2} km2 "
            f"(thermal {stats.thermal_active}, night vision {stats.night_vision_active})",
            f"- Threats in window: {len(frame.active_events)}; "
            f"history: {summary['total']} ({summary['resolved']} resolved)",
        ]
        for event in frame.active_events:
            location = f" at {event.location.lat:.2f}, {event.location.lng:.2f}" if event.location else ""
            lines.append(f"  * {event.event_type} ({event.payload.get('severity', 'unknown')})"
                         f"{location}: {event.payload.get('description', '')}")
        return "\n".join(lines)


# =============================================================================
# DEFAULT SESSION (backs the HTTP API)
# =============================================================================

_session: Optional[MonitoringSession] = None
_session_lock = threading.Lock()


def get_session() -> MonitoringSession:
    global _session
    with _session_lock:
        if _session is None:
            _session = MonitoringSession()
        return _session


def reset_session(session: Optional[MonitoringSession] = None) -> Optional[MonitoringSession]:
    """Replace the default session; None drops it so the next get_session rebuilds."""
    global _session
    with _session_lock:
        previous = _session
        _session = session
    if previous is not None:
        previous.playback.pause()
    return previous
