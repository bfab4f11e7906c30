"""Pytest configuration and shared fixtures for SpliceMap tests."""

import pytest

from splicemap import (
    Endpoint,
    ExitDirection,
    Obstacle,
    ObstacleSet,
    Point,
    Rect,
    RoutingConfig,
    SpliceDiagram,
)


@pytest.fixture
def canvas():
    """Standard 1000x700 canvas with its centerlines at x=500, y=350."""
    return Rect(0, 0, 1000, 700)


@pytest.fixture
def config():
    """Default routing configuration."""
    return RoutingConfig()


@pytest.fixture
def no_obstacles():
    """Empty obstacle snapshot."""
    return ObstacleSet()


@pytest.fixture
def left_fiber():
    """Fiber on an incoming cable on the left edge, exiting right."""
    return Endpoint("f-left", Point(60, 200), "cable-in", ExitDirection.RIGHT)


@pytest.fixture
def right_fiber():
    """Fiber on an outgoing cable on the right edge, exiting left."""
    return Endpoint("f-right", Point(940, 400), "cable-out", ExitDirection.LEFT)


@pytest.fixture
def bare_endpoint():
    """Factory for endpoints without an exit direction."""

    def make(eid, x, y, owner="owner"):
        return Endpoint(eid, Point(x, y), owner)

    return make


@pytest.fixture
def diagram(canvas):
    """
    Closure with two vertical cables of three fibers each.

    Incoming fibers in-0..in-2 exit right at x=60, outgoing fibers
    out-0..out-2 exit left at x=940.
    """
    d = SpliceDiagram(canvas)
    d.add_owner_body("cable", Obstacle("cable-in", Rect(10, 50, 50, 300)))
    d.add_owner_body("cable", Obstacle("cable-out", Rect(940, 50, 50, 300)))
    for i, color in enumerate(["blue", "orange", "green"]):
        y = 100 + i * 50
        d.add_endpoint(
            Endpoint(f"in-{i}", Point(60, y), "cable-in", ExitDirection.RIGHT),
            Obstacle(f"in-{i}", Rect(10, y - 5, 50, 10), "cable-in"),
            color=color,
        )
        d.add_endpoint(
            Endpoint(f"out-{i}", Point(940, y + 25), "cable-out", ExitDirection.LEFT),
            Obstacle(f"out-{i}", Rect(940, y + 20, 50, 10), "cable-out"),
            color=color,
            marked=(i == 0),
        )
    return d


@pytest.fixture
def splitter_diagram(diagram):
    """The two-cable closure plus a 1:2 splitter below the cables."""
    diagram.add_owner_body("splitter", Obstacle("sp", Rect(470, 500, 60, 80)))
    diagram.add_endpoint(Endpoint("sp-in", Point(470, 540), "sp", ExitDirection.LEFT, 60))
    for i in range(2):
        diagram.add_endpoint(
            Endpoint(f"sp-out-{i}", Point(530, 520 + 40 * i), "sp", ExitDirection.RIGHT, 60)
        )
        diagram.link_internal("sp-in", f"sp-out-{i}")
    return diagram
