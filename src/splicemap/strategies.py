"""
Candidate path strategies.

Each strategy is an independent function that takes a ``RouteContext`` and
returns raw orthogonal polylines anchored at ``p1`` and ``p2``. Strategies
are composed through a fixed ordered list, so generation order (and therefore
the final tie-break) is deterministic:

1. direct          - straight line when already axis-aligned
2. single_bend     - the two L-shapes
3. midpoint        - Z-shapes through the overall midpoint
4. central_channel - Z-shapes through lanes around the canvas centerlines
5. extended_exit   - leave the endpoint's body straight before turning
6. channel_grid    - doglegs through (lane x, lane y) waypoints
7. edge            - lanes just inside the canvas border
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence, Tuple

from .config import DEFAULT_CONFIG, RoutingConfig
from .geometry import AXIS_EPS
from .models import Endpoint, ExitDirection, Point, Rect

RawPath = List[Point]


@dataclass(frozen=True)
class RouteContext:
    """Everything a strategy needs to propose paths."""

    start: Endpoint
    end: Endpoint
    canvas: Rect
    config: RoutingConfig = DEFAULT_CONFIG

    @property
    def p1(self) -> Point:
        return self.start.exit_point

    @property
    def p2(self) -> Point:
        return self.end.exit_point

    @property
    def center_x(self) -> float:
        return self.canvas.center_x

    @property
    def center_y(self) -> float:
        return self.canvas.center_y


Strategy = Callable[[RouteContext], List[RawPath]]


def _via_x(p1: Point, p2: Point, x: float) -> RawPath:
    """H-V-H path through a vertical lane at ``x``."""
    return [p1, Point(x, p1.y), Point(x, p2.y), p2]


def _via_y(p1: Point, p2: Point, y: float) -> RawPath:
    """V-H-V path through a horizontal lane at ``y``."""
    return [p1, Point(p1.x, y), Point(p2.x, y), p2]


def direct(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    if abs(p1.x - p2.x) < AXIS_EPS or abs(p1.y - p2.y) < AXIS_EPS:
        return [[p1, p2]]
    return []


def single_bend(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    return [
        [p1, Point(p1.x, p2.y), p2],  # V-H
        [p1, Point(p2.x, p1.y), p2],  # H-V
    ]


def midpoint(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    mid_x = (p1.x + p2.x) / 2
    mid_y = (p1.y + p2.y) / 2
    return [_via_x(p1, p2, mid_x), _via_y(p1, p2, mid_y)]


def central_channel(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    paths: List[RawPath] = []
    for offset in ctx.config.channel_offsets:
        paths.append(_via_x(p1, p2, ctx.center_x + offset))
        paths.append(_via_y(p1, p2, ctx.center_y + offset))
    return paths


def _exit_paths(endpoint: Endpoint, other: Point, distances: Sequence[float]) -> List[RawPath]:
    """Paths leaving ``endpoint`` straight out of its body before turning."""
    direction = endpoint.direction
    if direction == ExitDirection.NONE:
        return []

    start = endpoint.exit_point
    paths: List[RawPath] = []
    for distance in distances:
        if direction.is_horizontal:
            paths.append(_via_x(start, other, start.x + direction.dx * distance))
        else:
            paths.append(_via_y(start, other, start.y + direction.dy * distance))
    return paths


def extended_exit(ctx: RouteContext) -> List[RawPath]:
    start_distances = [ctx.start.owner_extent + c for c in ctx.config.exit_clearances]
    end_distances = [ctx.end.owner_extent + c for c in ctx.config.exit_clearances]

    paths = _exit_paths(ctx.start, ctx.p2, start_distances)
    # Generated from the end side, then reversed so every path runs p1 -> p2
    for path in _exit_paths(ctx.end, ctx.p1, end_distances):
        paths.append(list(reversed(path)))
    return paths


def channel_grid(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    lanes_x = [ctx.center_x + o for o in ctx.config.channel_offsets]
    lanes_y = [ctx.center_y + o for o in ctx.config.channel_offsets]

    paths: List[RawPath] = []
    for x in lanes_x:
        for y in lanes_y:
            paths.append([p1, Point(x, p1.y), Point(x, y), Point(p2.x, y), p2])
            paths.append([p1, Point(p1.x, y), Point(x, y), Point(x, p2.y), p2])
    return paths


def edge(ctx: RouteContext) -> List[RawPath]:
    p1, p2 = ctx.p1, ctx.p2
    pad = ctx.config.edge_padding
    canvas = ctx.canvas

    paths: List[RawPath] = []
    for x in (canvas.x + pad, canvas.x2 - pad):
        paths.append(_via_x(p1, p2, x))
    for y in (canvas.y + pad, canvas.y2 - pad):
        paths.append(_via_y(p1, p2, y))
    return paths


DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("direct", direct),
    ("single_bend", single_bend),
    ("midpoint", midpoint),
    ("central_channel", central_channel),
    ("extended_exit", extended_exit),
    ("channel_grid", channel_grid),
    ("edge", edge),
)


def generate_candidates(
    ctx: RouteContext,
    strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES,
) -> Iterator[Tuple[str, RawPath]]:
    """Yield ``(strategy_name, raw_path)`` pairs in strategy order."""
    for name, strategy in strategies:
        for path in strategy(ctx):
            yield name, path
