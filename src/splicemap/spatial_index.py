"""
Grid-based spatial indexes over connection segments and obstacle rectangles.

Scoring a candidate against every segment of every other connection and
every obstacle is the hot loop of routing, and it runs on every drag frame.
These indexes bucket items into a uniform grid so a query only sees the items
whose cells overlap the query bounds. They only prune: a query may return
items that do not actually touch the query, and callers still run the exact
geometry test.
"""

import math
from collections import defaultdict
from typing import Dict, Generic, Iterable, List, Tuple, TypeVar

from .models import Obstacle, Rect, Segment

T = TypeVar("T")

Cell = Tuple[int, int]


class GridIndex(Generic[T]):
    """Uniform grid of buckets keyed by integer cell coordinates."""

    def __init__(self, cell_size: float = 100.0):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be > 0, got {cell_size}")
        self.cell_size = cell_size
        self.cells: Dict[Cell, List[int]] = defaultdict(list)
        self.items: List[T] = []

    def __len__(self) -> int:
        return len(self.items)

    def _cell_range(
        self, x1: float, y1: float, x2: float, y2: float
    ) -> Iterable[Cell]:
        size = self.cell_size
        min_cx = math.floor(min(x1, x2) / size)
        max_cx = math.floor(max(x1, x2) / size)
        min_cy = math.floor(min(y1, y2) / size)
        max_cy = math.floor(max(y1, y2) / size)
        for cx in range(min_cx, max_cx + 1):
            for cy in range(min_cy, max_cy + 1):
                yield (cx, cy)

    def insert(self, item: T, x1: float, y1: float, x2: float, y2: float) -> None:
        index = len(self.items)
        self.items.append(item)
        for cell in self._cell_range(x1, y1, x2, y2):
            self.cells[cell].append(index)

    def query(self, x1: float, y1: float, x2: float, y2: float) -> List[T]:
        """Return items whose cells overlap the bounds, in insertion order."""
        found = set()
        for cell in self._cell_range(x1, y1, x2, y2):
            bucket = self.cells.get(cell)
            if bucket:
                found.update(bucket)
        return [self.items[i] for i in sorted(found)]


class SegmentIndex:
    """Index of other connections' segments, tagged with their connection id."""

    def __init__(self, cell_size: float = 100.0):
        self._grid: GridIndex[Tuple[str, Segment]] = GridIndex(cell_size)

    def __len__(self) -> int:
        return len(self._grid)

    def add(self, connection_id: str, segment: Segment) -> None:
        a, b = segment
        self._grid.insert((connection_id, segment), a.x, a.y, b.x, b.y)

    def add_path(self, connection_id: str, segments: Iterable[Segment]) -> None:
        for segment in segments:
            self.add(connection_id, segment)

    def query(self, segment: Segment, pad: float = 0.0) -> List[Tuple[str, Segment]]:
        a, b = segment
        return self._grid.query(
            min(a.x, b.x) - pad,
            min(a.y, b.y) - pad,
            max(a.x, b.x) + pad,
            max(a.y, b.y) + pad,
        )


class ObstacleIndex:
    """Index of obstacle rectangles, tagged with their kind."""

    def __init__(self, cell_size: float = 100.0):
        self._grid: GridIndex[Tuple[str, Obstacle]] = GridIndex(cell_size)

    def __len__(self) -> int:
        return len(self._grid)

    def add(self, kind: str, obstacle: Obstacle) -> None:
        rect: Rect = obstacle.rect
        if rect.is_empty:
            return
        self._grid.insert((kind, obstacle), rect.x, rect.y, rect.x2, rect.y2)

    def query(self, segment: Segment, margin: float = 0.0) -> List[Tuple[str, Obstacle]]:
        a, b = segment
        return self._grid.query(
            min(a.x, b.x) - margin,
            min(a.y, b.y) - margin,
            max(a.x, b.x) + margin,
            max(a.y, b.y) + margin,
        )
