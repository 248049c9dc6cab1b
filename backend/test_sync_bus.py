"""Tests for the overlay sync bus."""
from datetime import datetime

import pytest

from fleet import compute_fleet_stats
from sync_bus import OverlayFrame, OverlaySyncBus, select_active_event_ids


def make_frame(bus, offset_hours=0.0, frame_id=None):
    return OverlayFrame(
        frame_id=bus.next_frame_id() if frame_id is None else frame_id,
        offset_hours=offset_hours,
        current_time=datetime(2024, 6, 1),
        is_playing=False,
        speed_multiplier=1.0,
        active_events=(),
        entities=(),
        fleet_stats=compute_fleet_stats([])
    )


class TestOverlaySyncBus:
    """Tests for publish/subscribe delivery."""

    def test_no_frame_before_publish(self):
        bus = OverlaySyncBus()
        assert bus.current is None
        assert bus.select(select_active_event_ids) is None

    def test_every_subscriber_sees_same_frame(self):
        bus = OverlaySyncBus()
        seen = {"a": [], "b": []}
        bus.subscribe(seen["a"].append)
        bus.subscribe(seen["b"].append)
        frame = make_frame(bus, 12)
        bus.publish(frame)
        assert seen["a"] == [frame]
        assert seen["b"][0] is seen["a"][0]
        assert bus.current is frame

    def test_late_subscriber_gets_replay(self):
        bus = OverlaySyncBus()
        frame = make_frame(bus)
        bus.publish(frame)
        received = []
        bus.subscribe(received.append)
        assert received == [frame]

    def test_subscribe_without_replay(self):
        bus = OverlaySyncBus()
        bus.publish(make_frame(bus))
        received = []
        bus.subscribe(received.append, replay=False)
        assert received == []

    def test_unsubscribe(self):
        bus = OverlaySyncBus()
        received = []
        unsubscribe = bus.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        bus.publish(make_frame(bus))
        assert received == []
        assert bus.subscriber_count == 0

    def test_stale_frame_rejected(self):
        bus = OverlaySyncBus()
        bus.publish(make_frame(bus, frame_id=5))
        with pytest.raises(ValueError):
            bus.publish(make_frame(bus, frame_id=5))
        assert bus.current.frame_id == 5
        assert bus.publish_count == 1

    def test_failing_subscriber_does_not_block_others(self):
        bus = OverlaySyncBus()
        received = []

        def broken(frame):
            raise RuntimeError("render failed")

        bus.subscribe(broken)
        bus.subscribe(received.append)
        bus.publish(make_frame(bus))
        assert len(received) == 1

    def test_unsubscribe_during_delivery(self):
        bus = OverlaySyncBus()
        received = []
        holder = {}

        def once(frame):
            received.append(frame.frame_id)
            holder["unsubscribe"]()

        holder["unsubscribe"] = bus.subscribe(once)
        bus.publish(make_frame(bus))
        bus.publish(make_frame(bus))
        assert received == [1]

    def test_select(self):
        bus = OverlaySyncBus()
        bus.publish(make_frame(bus, offset_hours=7))
        assert bus.select(lambda f: f.offset_hours) == 7
        assert bus.select(select_active_event_ids) == []
