"""
Temporal playback over the historical event window.

This module provides:
- TimedEvent, an immutable timestamped record (threat, drone sample, ...)
- PlaybackWindow, the fixed range being scrubbed plus the current offset
- PlaybackController, a paused/playing clock that advances the offset on a
  fixed wall-clock tick and answers which events are "active" around now
"""

import asyncio
import bisect
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional

import config
from errors import InvalidSpeedError, OutOfRangeSeek
from geo import GeoPoint
from logger import setup_logger

logger = setup_logger("playback")


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass(frozen=True)
class TimedEvent:
    """A record with a point-in-time occurrence. Immutable once created."""
    event_id: str
    timestamp: datetime
    event_type: str = ""
    location: Optional[GeoPoint] = None
    payload: Dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "location": self.location.to_dict() if self.location else None,
            "payload": dict(self.payload)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimedEvent":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            event_id=data["event_id"],
            timestamp=timestamp,
            event_type=data.get("event_type", ""),
            location=GeoPoint.from_dict(data["location"]) if data.get("location") else None,
            payload=dict(data.get("payload", {}))
        )


@dataclass
class PlaybackWindow:
    """Fixed historical range; current_offset_hours is the only mutable field."""
    start_time: datetime
    end_time: datetime
    current_offset_hours: float = 0.0

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError("Playback window end_time must be after start_time")

    @property
    def total_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600.0

    @property
    def current_time(self) -> datetime:
        return self.time_at(self.current_offset_hours)

    def time_at(self, offset_hours: float) -> datetime:
        return self.start_time + timedelta(hours=offset_hours)

    @classmethod
    def ending_at(cls, end_time: datetime, hours: float = config.PLAYBACK_WINDOW_HOURS) -> "PlaybackWindow":
        """Window covering the `hours` leading up to end_time."""
        return cls(start_time=end_time - timedelta(hours=hours), end_time=end_time)


@dataclass(frozen=True)
class PlaybackState:
    offset_hours: float
    is_playing: bool
    speed_multiplier: float
    active_events: List[TimedEvent]
    current_time: datetime
    total_hours: float

    def to_dict(self) -> dict:
        return {
            "offset_hours": self.offset_hours,
            "is_playing": self.is_playing,
            "speed_multiplier": self.speed_multiplier,
            "active_events": [e.to_dict() for e in self.active_events],
            "current_time": self.current_time.isoformat(),
            "total_hours": self.total_hours
        }


# =============================================================================
# EVENT HELPERS
# =============================================================================

def events_by_park(events: Iterable[TimedEvent], park: str) -> List[TimedEvent]:
    """Events whose payload park name contains `park` (case-insensitive)."""
    needle = park.lower()
    return [e for e in events if needle in str(e.payload.get("park", "")).lower()]


def threat_stats(events: List[TimedEvent]) -> dict:
    """Resolution and severity summary of a threat dataset."""
    total = len(events)
    resolved = sum(1 for e in events if e.payload.get("resolved"))
    response_times = [e.payload.get("response_time_min", 0) for e in events]
    by_severity = {"critical": 0, "high": 0, "medium": 0, "low": 0}
    for event in events:
        severity = event.payload.get("severity")
        if severity in by_severity:
            by_severity[severity] += 1
    return {
        "total": total,
        "resolved": resolved,
        "avg_response_time_min": sum(response_times) / total if total else None,
        "by_severity": by_severity
    }


# =============================================================================
# PLAYBACK CONTROLLER
# =============================================================================

class PlaybackController:
    """Scrubbable, variable-speed clock over a fixed event window.

    Offsets are hours since window.start_time. While playing, an asyncio
    ticker calls `tick()` every `tick_interval` seconds; the step per tick is
    `speed_multiplier * base_step_hours` so the tick rate never depends on
    speed. Reaching the end of the window pauses playback.
    """

    def __init__(self,
                 events: Iterable[TimedEvent],
                 window: PlaybackWindow,
                 half_window_hours: float = config.HALF_WINDOW_HOURS,
                 base_step_hours: float = config.BASE_STEP_HOURS,
                 tick_interval: float = config.TICK_INTERVAL_SECONDS,
                 skip_hours: float = config.SKIP_HOURS,
                 strict_seek: bool = config.STRICT_SEEK,
                 auto_tick: bool = True,
                 on_change: Optional[Callable[["PlaybackController"], None]] = None):
        self.window = window
        self.half_window = timedelta(hours=half_window_hours)
        self.base_step_hours = base_step_hours
        self.tick_interval = tick_interval
        self.skip_hours = skip_hours
        self.strict_seek = strict_seek
        self.auto_tick = auto_tick
        self.on_change = on_change
        self.speed_multiplier: float = 1.0
        self.is_playing: bool = False
        self._ticker: Optional[asyncio.Task] = None
        self._stopped_ticker: Optional[asyncio.Task] = None  # cancelled, may still be unwinding

        # Sorted once; the window lookup is a pair of binary searches
        aligned = [_align_timestamp(e, window.start_time) for e in events]
        self._events: List[TimedEvent] = sorted(aligned, key=lambda e: e.timestamp)
        self._timestamps: List[datetime] = [e.timestamp for e in self._events]
        logger.info(f"Playback loaded {len(self._events)} events over {self.total_hours:g}h "
                    f"starting {window.start_time.isoformat()}")

    # ===== READ ACCESS =====

    @property
    def total_hours(self) -> float:
        return self.window.total_hours

    @property
    def offset_hours(self) -> float:
        return self.window.current_offset_hours

    @property
    def events(self) -> List[TimedEvent]:
        return list(self._events)

    def active_events(self, offset_hours: Optional[float] = None) -> List[TimedEvent]:
        """Events with |timestamp - target| <= half window, both bounds inclusive."""
        if offset_hours is None:
            offset_hours = self.window.current_offset_hours
        target = self.window.time_at(offset_hours)
        low = bisect.bisect_left(self._timestamps, target - self.half_window)
        high = bisect.bisect_right(self._timestamps, target + self.half_window)
        return self._events[low:high]

    def get_state(self) -> PlaybackState:
        return PlaybackState(
            offset_hours=self.window.current_offset_hours,
            is_playing=self.is_playing,
            speed_multiplier=self.speed_multiplier,
            active_events=self.active_events(),
            current_time=self.window.current_time,
            total_hours=self.total_hours
        )

    @property
    def has_ticker(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    # ===== CONTROLS =====

    def seek(self, offset_hours: float) -> float:
        """Move to an offset; out-of-range values clamp unless strict_seek is set."""
        total = self.total_hours
        if not 0.0 <= offset_hours <= total:
            if self.strict_seek:
                raise OutOfRangeSeek(offset_hours, total)
            logger.debug(f"Seek {offset_hours}h clamped to [0, {total:g}]")
        self._set_offset(max(0.0, min(total, offset_hours)))
        logger.info(f"Playback seek to {self.offset_hours:g}h")
        self._notify()
        return self.offset_hours

    def skip_back(self) -> float:
        return self.seek(max(0.0, self.offset_hours - self.skip_hours))

    def skip_forward(self) -> float:
        return self.seek(min(self.total_hours, self.offset_hours + self.skip_hours))

    def set_speed(self, multiplier: float):
        """Change the speed multiplier; the current offset is kept."""
        if multiplier not in config.ALLOWED_SPEEDS:
            allowed = ", ".join(f"{s:g}" for s in config.ALLOWED_SPEEDS)
            raise InvalidSpeedError(f"Speed {multiplier} not allowed (expected one of: {allowed})")
        self.speed_multiplier = float(multiplier)
        logger.info(f"Playback speed set to {self.speed_multiplier:g}x")
        self._notify()

    def play(self) -> bool:
        """Start playback; returns whether the controller is now playing."""
        if self.is_playing:
            return True
        if self.offset_hours >= self.total_hours:
            logger.info("Play requested at end of window; staying paused")
            return False
        if self.auto_tick:
            # Needs a running event loop; raises RuntimeError otherwise
            self._start_ticker()
        self.is_playing = True
        logger.info(f"Playback started at {self.offset_hours:g}h ({self.speed_multiplier:g}x)")
        self._notify()
        return True

    def pause(self):
        """Stop playback and the ticker. Safe to call repeatedly."""
        was_playing = self.is_playing
        self.is_playing = False
        self._stop_ticker()
        if was_playing:
            logger.info(f"Playback paused at {self.offset_hours:g}h")
            self._notify()

    def tick(self) -> float:
        """Advance one step while playing; auto-pauses at the end of the window."""
        if not self.is_playing:
            return self.offset_hours
        step = self.speed_multiplier * self.base_step_hours
        self._set_offset(min(self.total_hours, self.offset_hours + step))
        logger.debug(f"Playback tick -> {self.offset_hours:g}h")
        if self.offset_hours >= self.total_hours:
            self.is_playing = False
            self._stop_ticker()
            logger.info("Playback reached end of window; paused")
        self._notify()
        return self.offset_hours

    async def aclose(self):
        """Pause and wait for the ticker task to finish, even if pause() already ran."""
        self.pause()
        task, self._stopped_ticker = self._stopped_ticker, None
        if task is not None and task is not _current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ===== INTERNALS =====

    def _set_offset(self, offset_hours: float):
        self.window.current_offset_hours = offset_hours

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self)

    def _start_ticker(self):
        if self.has_ticker:
            return
        loop = asyncio.get_running_loop()
        self._ticker = loop.create_task(self._run_ticker())

    def _stop_ticker(self):
        task = self._ticker
        self._ticker = None
        if task is None:
            return
        self._stopped_ticker = task
        if not task.done() and task is not _current_task():
            task.cancel()

    async def _run_ticker(self):
        while self.is_playing:
            try:
                await asyncio.sleep(self.tick_interval)
            except asyncio.CancelledError:
                break
            self.tick()


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def _align_timestamp(event: TimedEvent, reference: datetime) -> TimedEvent:
    """Match the event's timestamp to the window's awareness; naive means UTC."""
    timestamp = event.timestamp
    if reference.tzinfo is None and timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    elif reference.tzinfo is not None and timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    else:
        return event
    return replace(event, timestamp=timestamp)
