"""
Cost evaluation for candidate connection paths.

A candidate is scored against immutable snapshots of the other connections
and the obstacle bodies:

    cost = length
         + bends * bend_penalty
         + crossings * crossing_penalty
         + proximity_penalty       if too close to another connection
         + hard_collision_penalty  if sharing a lane with another connection
         + fiber_penalty           if through an unrelated fiber
         + cable_penalty           if through an unrelated cable body
         + splitter_penalty        if through an unrelated splitter body
         - central_channel_reward  if running along a canvas centerline
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, RoutingConfig
from .geometry import (
    count_bends,
    is_horizontal,
    is_vertical,
    path_length,
    path_segments,
    segment_intersects_rect,
    segments_collinear_overlap,
    segments_cross,
)
from .models import Connection, ObstacleSet, Point, Rect, Segment
from .spatial_index import ObstacleIndex, SegmentIndex


@dataclass
class Candidate:
    """One generated, cost-scored path considered for a routing request."""

    path: Tuple[Point, ...]
    length: float = 0.0
    bends: int = 0
    hard_collides: bool = False
    too_close: bool = False
    crossings: int = 0
    intersects_fibers: bool = False
    intersects_cables: bool = False
    intersects_splitters: bool = False
    uses_central_channel: bool = False
    cost: float = 0.0
    strategy: str = ""
    order: int = 0

    def sort_key(self) -> Tuple[float, int, float, int]:
        """Cost first, then fewer bends, shorter length, generation order."""
        return (self.cost, self.bends, self.length, self.order)

    def __str__(self) -> str:
        flags = []
        if self.hard_collides:
            flags.append("HARD")
        if self.too_close:
            flags.append("close")
        if self.intersects_fibers:
            flags.append("fiber")
        if self.intersects_cables:
            flags.append("cable")
        if self.intersects_splitters:
            flags.append("splitter")
        if self.uses_central_channel:
            flags.append("central")
        flag_text = f" [{', '.join(flags)}]" if flags else ""
        return (
            f"#{self.order} {self.strategy}: cost={self.cost:.1f} "
            f"len={self.length:.1f} bends={self.bends} "
            f"crossings={self.crossings}{flag_text}"
        )


class CostEvaluator:
    """
    Scores candidate paths against a snapshot of the diagram.

    The evaluator indexes the other connections' segments and the obstacle
    rectangles once, then scores any number of candidates against them.
    """

    def __init__(
        self,
        connections: Iterable[Connection],
        obstacles: ObstacleSet,
        canvas: Rect,
        config: RoutingConfig = DEFAULT_CONFIG,
        exclude_connection_id: Optional[str] = None,
    ):
        self.canvas = canvas
        self.config = config
        self.exclude_connection_id = exclude_connection_id

        self.segments = SegmentIndex(config.index_cell_size)
        for connection in connections:
            if exclude_connection_id is not None and connection.id == exclude_connection_id:
                continue
            self.segments.add_path(connection.id, path_segments(connection.path))

        self.obstacles = ObstacleIndex(config.index_cell_size)
        for kind, items in obstacles.by_kind():
            for obstacle in items:
                self.obstacles.add(kind, obstacle)

    def _margin(self, kind: str) -> float:
        if kind == "fiber":
            return self.config.fiber_margin
        if kind == "cable":
            return self.config.cable_margin
        return self.config.splitter_margin

    def _connection_metrics(
        self, segments: Sequence[Segment]
    ) -> Tuple[bool, bool, int]:
        """Return (hard_collides, too_close, crossings) against other connections."""
        config = self.config
        hard = False
        close = False
        crossings = 0

        for segment in segments:
            for _, other in self.segments.query(segment, config.proximity_tolerance):
                if segments_collinear_overlap(segment, other, config.collision_tolerance):
                    hard = True
                elif not hard and segments_collinear_overlap(
                    segment, other, config.proximity_tolerance
                ):
                    close = True
                if segments_cross(segment, other):
                    crossings += 1

        # Proximity only matters when there is no hard collision
        return hard, close and not hard, crossings

    def _obstacle_hits(self, segments: Sequence[Segment]) -> Tuple[bool, bool, bool]:
        hits = {"fiber": False, "cable": False, "splitter": False}
        margin = self.config.max_margin

        for segment in segments:
            for kind, obstacle in self.obstacles.query(segment, margin):
                if hits[kind]:
                    continue
                if segment_intersects_rect(segment, obstacle.rect, self._margin(kind)):
                    hits[kind] = True
        return hits["fiber"], hits["cable"], hits["splitter"]

    def _uses_central_channel(self, segments: Sequence[Segment]) -> bool:
        tolerance = self.config.central_channel_tolerance
        for a, b in segments:
            if is_horizontal(a, b):
                if abs(a.y - self.canvas.center_y) < tolerance:
                    return True
            elif is_vertical(a, b):
                if abs(a.x - self.canvas.center_x) < tolerance:
                    return True
        return False

    def evaluate(self, path: Sequence[Point], strategy: str = "", order: int = 0) -> Candidate:
        """Score a cleaned path."""
        segments = list(path_segments(path))

        hard, close, crossings = self._connection_metrics(segments)
        fibers, cables, splitters = self._obstacle_hits(segments)

        candidate = Candidate(
            path=tuple(path),
            length=path_length(path),
            bends=count_bends(path),
            hard_collides=hard,
            too_close=close,
            crossings=crossings,
            intersects_fibers=fibers,
            intersects_cables=cables,
            intersects_splitters=splitters,
            uses_central_channel=self._uses_central_channel(segments),
            strategy=strategy,
            order=order,
        )
        candidate.cost = self.cost_of(candidate)
        return candidate

    def cost_of(self, candidate: Candidate) -> float:
        config = self.config
        cost = candidate.length
        cost += candidate.bends * config.bend_penalty
        cost += candidate.crossings * config.crossing_penalty
        if candidate.too_close:
            cost += config.proximity_penalty
        if candidate.hard_collides:
            cost += config.hard_collision_penalty
        if candidate.intersects_fibers:
            cost += config.fiber_penalty
        if candidate.intersects_cables:
            cost += config.cable_penalty
        if candidate.intersects_splitters:
            cost += config.splitter_penalty
        if candidate.uses_central_channel:
            cost -= config.central_channel_reward
        return cost
