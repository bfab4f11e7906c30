"""
Orthogonal connection router.

Routes one splice connection at a time:

1. Every strategy proposes raw orthogonal polylines between the two exit
   points.
2. Each raw path is cleaned, nudged and scored against snapshots of the other
   connections and the obstacle bodies.
3. The cheapest candidate wins. Ties break on fewer bends, then shorter
   length, then generation order, so identical inputs always give identical
   output.

Candidates are scored in their final drawn form: before scoring, each path
has its ends nudged along the exit directions so the plug segment stays
visually distinct from the trunk, and that nudged path is what is returned.
The nudge is therefore part of cost computation, rather than being applied
to the winner alone after selection.

Routing is a pure computation: it reads only its arguments and never raises
for degenerate geometry. When no candidate survives, the direct two-point
path is returned.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, RoutingConfig
from .geometry import (
    clean_path,
    is_horizontal,
    is_vertical,
    merge_close_points,
    points_close,
)
from .models import Connection, Endpoint, ExitDirection, ObstacleSet, Point, Rect
from .scoring import Candidate, CostEvaluator
from .strategies import DEFAULT_STRATEGIES, RouteContext, Strategy, generate_candidates
from .tracer import RoutingTrace

logger = logging.getLogger(__name__)


class RouteCancelled(Exception):
    """Raised when a routing request was cancelled before it finished."""

    pass


class CancelToken:
    """Cooperative cancellation flag checked while candidates are scored."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def offset_exit_point(endpoint: Endpoint, offset: float) -> Point:
    """The endpoint's exit point pushed ``offset`` units outward."""
    direction = endpoint.direction
    return endpoint.exit_point.offset(direction.dx * offset, direction.dy * offset)


def _nudge_start(path: List[Point], endpoint: Endpoint, offset: float) -> List[Point]:
    direction = endpoint.direction
    if direction == ExitDirection.NONE or offset == 0 or not path:
        return path
    if not points_close(path[0], endpoint.exit_point):
        return path

    dx, dy = direction.dx * offset, direction.dy * offset
    first = path[0].offset(dx, dy)
    if len(path) == 1:
        return [first]

    a, b = path[0], path[1]
    along_offset = is_horizontal(a, b) if direction.is_horizontal else is_vertical(a, b)
    if along_offset:
        return [first] + path[1:]

    # First segment is perpendicular to the nudge: slide it when the next
    # segment runs along the nudge axis, otherwise insert a short jog.
    if len(path) >= 3:
        c = path[2]
        next_along = is_horizontal(b, c) if direction.is_horizontal else is_vertical(b, c)
        if next_along:
            return [first, b.offset(dx, dy)] + path[2:]
    return [first, b.offset(dx, dy)] + path[1:]


def apply_endpoint_offset(
    path: Sequence[Point],
    start: Endpoint,
    end: Endpoint,
    config: RoutingConfig = DEFAULT_CONFIG,
) -> List[Point]:
    """
    Nudge the path's ends by ``config.visual_offset`` along their exit directions.

    Only ends still sitting exactly on the raw exit point are moved, and the
    result stays orthogonal. Endpoints without a direction are left alone.
    """
    offset = config.visual_offset
    nudged = _nudge_start(list(path), start, offset)
    nudged = list(reversed(_nudge_start(list(reversed(nudged)), end, offset)))
    merged = merge_close_points(nudged)
    if len(merged) < 2 and len(nudged) >= 2:
        # Self-loop: keep the repeated point
        return [nudged[0], nudged[-1]]
    return merged


def reanchor_path(
    path: Sequence[Point],
    start: Endpoint,
    end: Endpoint,
    config: RoutingConfig = DEFAULT_CONFIG,
) -> List[Point]:
    """
    Move only the two end vertices of a hand-edited path.

    Interior vertices are user edits and are kept as they are; the ends are
    placed on the endpoints' exit points plus the visual offset.
    """
    first = offset_exit_point(start, config.visual_offset)
    last = offset_exit_point(end, config.visual_offset)
    if len(path) < 2:
        return [first, last]

    anchored = [first] + list(path[1:-1]) + [last]
    merged = merge_close_points(anchored)
    if len(merged) < 2 and not points_close(first, last):
        return [first, last]
    return merged


def _fallback_path(start: Endpoint, end: Endpoint) -> List[Point]:
    p1 = start.exit_point
    if start.id == end.id:
        return [p1, p1]
    return [p1, end.exit_point]


def route_connection(
    start: Endpoint,
    end: Endpoint,
    connections: Iterable[Connection],
    obstacles: ObstacleSet,
    canvas: Rect,
    config: Optional[RoutingConfig] = None,
    exclude_connection_id: Optional[str] = None,
    strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES,
    trace: Optional[RoutingTrace] = None,
    cancel_token: Optional[CancelToken] = None,
) -> List[Point]:
    """
    Route a connection between two endpoints.

    Args:
        start: Endpoint the path starts at
        end: Endpoint the path ends at
        connections: Existing connections (snapshot); the connection being
                     updated is skipped via ``exclude_connection_id``
        obstacles: Obstacle bodies (snapshot); those belonging to the two
                   endpoints are ignored
        canvas: Canvas bounds, used for central and edge lanes
        config: Routing weights and tolerances
        exclude_connection_id: Id of the connection being rerouted
        strategies: Ordered candidate strategies
        trace: Optional RoutingTrace to record the decision in
        cancel_token: Optional token; when cancelled, RouteCancelled is raised

    Returns:
        Non-empty list of points with only axis-aligned segments
        (unless start and end coincide)

    Raises:
        RouteCancelled: If ``cancel_token`` was cancelled mid-routing
    """
    config = config or DEFAULT_CONFIG
    p1, p2 = start.exit_point, end.exit_point
    connections = tuple(connections)
    relevant = obstacles.excluding({start.id, end.id, start.owner_id, end.owner_id})

    evaluator = CostEvaluator(
        connections,
        relevant,
        canvas,
        config,
        exclude_connection_id=exclude_connection_id,
    )
    ctx = RouteContext(start, end, canvas, config)

    candidates: List[Candidate] = []
    discarded = 0
    for order, (strategy, raw) in enumerate(generate_candidates(ctx, strategies)):
        if cancel_token is not None and cancel_token.cancelled:
            raise RouteCancelled(f"Routing {start.id} -> {end.id} cancelled")

        cleaned = clean_path(raw, p1, p2)
        if cleaned is None:
            discarded += 1
            continue
        nudged = apply_endpoint_offset(cleaned, start, end, config)
        candidates.append(evaluator.evaluate(nudged, strategy, order))

    if trace is not None:
        trace.p1, trace.p2, trace.canvas = p1, p2, canvas
        trace.connections = [
            c for c in connections if c.id != exclude_connection_id
        ]
        trace.obstacles = relevant
        trace.add_stage(
            "generated",
            {"candidates": len(candidates) + discarded, "discarded": discarded},
        )
        for candidate in candidates:
            trace.add_candidate(candidate)
        trace.add_stage("scored", {"candidates": len(candidates)})

    if not candidates:
        logger.warning(
            "No candidate paths for %s -> %s, using direct fallback", start.id, end.id
        )
        result = apply_endpoint_offset(_fallback_path(start, end), start, end, config)
        if trace is not None:
            trace.fallback_used = True
    else:
        best = min(candidates, key=Candidate.sort_key)
        logger.debug("Chose %s for %s -> %s", best, start.id, end.id)
        result = list(best.path)
        if trace is not None:
            trace.selected = best

    if trace is not None:
        trace.result = list(result)
        trace.add_stage(
            "selected",
            {
                "fallback": trace.fallback_used,
                "cost": trace.selected.cost if trace.selected else None,
                "points": len(result),
            },
        )
    return result


class ConnectionRouter:
    """
    Routes connections with one fixed configuration and strategy list.

    A thin wrapper around ``route_connection`` for callers that keep a
    router around, such as the connection store.
    """

    def __init__(
        self,
        config: Optional[RoutingConfig] = None,
        strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES,
    ):
        self.config = config or DEFAULT_CONFIG
        self.strategies = tuple(strategies)

    def route(
        self,
        start: Endpoint,
        end: Endpoint,
        connections: Iterable[Connection],
        obstacles: ObstacleSet,
        canvas: Rect,
        exclude_connection_id: Optional[str] = None,
        trace: Optional[RoutingTrace] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> List[Point]:
        return route_connection(
            start,
            end,
            connections,
            obstacles,
            canvas,
            config=self.config,
            exclude_connection_id=exclude_connection_id,
            strategies=self.strategies,
            trace=trace,
            cancel_token=cancel_token,
        )

    def reanchor(self, path: Sequence[Point], start: Endpoint, end: Endpoint) -> List[Point]:
        return reanchor_path(path, start, end, self.config)
