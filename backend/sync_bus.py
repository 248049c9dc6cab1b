"""
Overlay synchronisation bus.

One container holds the latest OverlayFrame. Each publish stores the frame
and hands the same object to every subscriber before returning, so every
overlay renders one "current time" per frame. Overlays read derived values
through `select` instead of polling the controllers themselves.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from fleet import PatrolStatus
from logger import setup_logger

logger = setup_logger("sync_bus")


@dataclass(frozen=True)
class OverlayFrame:
    """Immutable snapshot of everything position-dependent overlays need."""
    frame_id: int
    offset_hours: float
    current_time: datetime
    is_playing: bool
    speed_multiplier: float
    active_events: Tuple  # TimedEvent, ordered by timestamp
    entities: Tuple  # PatrolEntity copies
    fleet_stats: Any  # FleetStats

    def to_dict(self) -> dict:
        return {
            "frame_id": self.frame_id,
            "offset_hours": self.offset_hours,
            "current_time": self.current_time.isoformat(),
            "is_playing": self.is_playing,
            "speed_multiplier": self.speed_multiplier,
            "active_events": [e.to_dict() for e in self.active_events],
            "entities": [e.to_dict() for e in self.entities],
            "fleet_stats": self.fleet_stats.to_dict()
        }


Subscriber = Callable[[OverlayFrame], None]


class OverlaySyncBus:
    """Single source of truth for the current frame."""

    def __init__(self):
        self._frame: Optional[OverlayFrame] = None
        self._subscribers: Dict[int, Subscriber] = {}
        self._next_token = 0
        self._next_frame_id = 1
        self.publish_count = 0

    @property
    def current(self) -> Optional[OverlayFrame]:
        return self._frame

    def next_frame_id(self) -> int:
        frame_id = self._next_frame_id
        self._next_frame_id += 1
        return frame_id

    def subscribe(self, callback: Subscriber, replay: bool = True) -> Callable[[], None]:
        """Register an overlay; returns an unsubscribe function.

        With replay, a late subscriber immediately receives the current frame.
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def unsubscribe():
            self._subscribers.pop(token, None)

        if replay and self._frame is not None:
            self._deliver(callback, self._frame)
        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, frame: OverlayFrame):
        """Store the frame, then deliver it to every subscriber in order."""
        if self._frame is not None and frame.frame_id <= self._frame.frame_id:
            raise ValueError(f"Stale frame {frame.frame_id} (current is {self._frame.frame_id})")
        self._frame = frame
        self.publish_count += 1
        # Copy so subscribers may unsubscribe during delivery
        for callback in list(self._subscribers.values()):
            self._deliver(callback, frame)
        logger.debug(f"Published frame {frame.frame_id} at {frame.offset_hours:g}h "
                     f"to {len(self._subscribers)} overlays")

    def select(self, selector: Callable[[OverlayFrame], Any]) -> Any:
        """Compute a derived value from the current frame (None before the first publish)."""
        if self._frame is None:
            return None
        return selector(self._frame)

    def _deliver(self, callback: Subscriber, frame: OverlayFrame):
        try:
            callback(frame)
        except Exception as e:
            logger.error(f"Overlay subscriber failed on frame {frame.frame_id}: {e}")


# Common selectors

def select_active_event_ids(frame: OverlayFrame) -> List[str]:
    return [e.event_id for e in frame.active_events]


def select_active_drones(frame: OverlayFrame) -> List:
    return [e for e in frame.entities if e.status == PatrolStatus.ACTIVE]
