"""Tests for frame-paced rerouting."""

import pytest

from splicemap.models import Obstacle, ObstacleSet, Rect
from splicemap.router import RouteCancelled
from splicemap.scheduler import RerouteScheduler


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def cable_out_move(diagram, dy):
    endpoints = [
        ep.moved_to(ep.exit_point.offset(0, dy))
        for ep in diagram.endpoints.values()
        if ep.owner_id == "cable-out"
    ]
    body = Obstacle("cable-out", Rect(940, 50 + dy, 50, 300))
    return endpoints, ObstacleSet(cables=(body,))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(diagram, clock):
    return RerouteScheduler(diagram, min_interval=0.1, clock=clock)


class TestRequests:
    """Tests for queuing and superseding moves."""

    def test_request_is_pending(self, scheduler, diagram):
        """Test a request waits until flushed."""
        scheduler.request("cable-out", *cable_out_move(diagram, 50))
        assert scheduler.has_pending

    def test_newer_request_supersedes(self, scheduler, diagram):
        """Test a second request for the same owner cancels the first."""
        first = scheduler.request("cable-out", *cable_out_move(diagram, 50))
        second = scheduler.request("cable-out", *cable_out_move(diagram, 80))
        assert first.token.cancelled
        assert not second.token.cancelled
        assert scheduler.superseded == 1
        assert list(scheduler.pending.values()) == [second]

    def test_cancel_all(self, scheduler, diagram):
        """Test cancel_all drops and cancels everything."""
        move = scheduler.request("cable-out", *cable_out_move(diagram, 50))
        scheduler.cancel_all()
        assert move.token.cancelled
        assert not scheduler.has_pending

    def test_negative_interval(self, diagram):
        """Test a negative interval is rejected."""
        with pytest.raises(ValueError):
            RerouteScheduler(diagram, min_interval=-1)


class TestFlush:
    """Tests for applying moves on a frame cadence."""

    def test_flush_applies_latest(self, scheduler, diagram):
        """Test only the newest move for an owner is applied."""
        connection = diagram.connect("in-0", "out-0")
        scheduler.request("cable-out", *cable_out_move(diagram, 50))
        scheduler.request("cable-out", *cable_out_move(diagram, 80))
        assert scheduler.flush() == 1
        assert diagram.endpoints["out-0"].exit_point.y == 205
        assert diagram.connections[connection.id].path[-1].y == 205
        assert not scheduler.has_pending

    def test_throttled_within_interval(self, scheduler, diagram, clock):
        """Test a second flush inside the interval does nothing."""
        scheduler.request("cable-out", *cable_out_move(diagram, 10))
        assert scheduler.flush() == 1
        clock.now = 0.05
        scheduler.request("cable-out", *cable_out_move(diagram, 10))
        assert scheduler.flush() == 0
        assert scheduler.has_pending
        clock.now = 0.2
        assert scheduler.flush() == 1

    def test_force_ignores_interval(self, scheduler, diagram):
        """Test a forced flush runs immediately."""
        scheduler.request("cable-out", *cable_out_move(diagram, 10))
        scheduler.flush()
        scheduler.request("cable-out", *cable_out_move(diagram, 10))
        assert scheduler.flush(force=True) == 1

    def test_cancelled_move_dropped(self, scheduler, diagram):
        """Test a move whose token was cancelled is skipped."""
        move = scheduler.request("cable-out", *cable_out_move(diagram, 10))
        move.token.cancel()
        assert scheduler.flush() == 0

    def test_route_cancelled_is_swallowed(self, scheduler, diagram, monkeypatch):
        """Test a move cancelled mid-route is dropped without raising."""

        def cancelled_move(*args, **kwargs):
            raise RouteCancelled("stale")

        monkeypatch.setattr(diagram, "move_owner", cancelled_move)
        scheduler.request("cable-out", *cable_out_move(diagram, 10))
        assert scheduler.flush() == 0
