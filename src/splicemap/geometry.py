"""
Geometry primitives for orthogonal connection paths.

Everything here works on axis-aligned segments: a segment is horizontal when
its endpoints share a y (within ``AXIS_EPS``) and vertical when they share an
x. Diagonal segments never appear in a valid path, so the rectangle test
does not handle them.
"""

from typing import Iterator, List, Optional, Sequence

from .models import Point, Rect, Segment

# Tolerance for deciding a segment's orientation
AXIS_EPS = 0.1

# Minimum 1D overlap before two collinear segments count as sharing a lane
OVERLAP_EPS = 0.1

# Points closer than this are merged when cleaning a path
MERGE_EPS = 0.01


def is_horizontal(a: Point, b: Point, eps: float = AXIS_EPS) -> bool:
    return abs(a.y - b.y) < eps


def is_vertical(a: Point, b: Point, eps: float = AXIS_EPS) -> bool:
    return abs(a.x - b.x) < eps


def is_degenerate(segment: Segment, eps: float = AXIS_EPS) -> bool:
    """True for a zero-length segment."""
    a, b = segment
    return is_horizontal(a, b, eps) and is_vertical(a, b, eps)


def segments_collinear_overlap(s1: Segment, s2: Segment, tolerance: float) -> bool:
    """
    Check whether two segments occupy the same lane.

    Both segments must have the same orientation, lie within ``tolerance``
    of the same line, and overlap along it by more than ``OVERLAP_EPS``.
    Perpendicular segments never overlap; use ``segments_cross`` for those.
    """
    (a1, a2), (b1, b2) = s1, s2

    if is_horizontal(a1, a2) and is_horizontal(b1, b2):
        if abs(a1.y - b1.y) >= tolerance:
            return False
        lo = max(min(a1.x, a2.x), min(b1.x, b2.x))
        hi = min(max(a1.x, a2.x), max(b1.x, b2.x))
        return lo < hi - OVERLAP_EPS

    if is_vertical(a1, a2) and is_vertical(b1, b2):
        if abs(a1.x - b1.x) >= tolerance:
            return False
        lo = max(min(a1.y, a2.y), min(b1.y, b2.y))
        hi = min(max(a1.y, a2.y), max(b1.y, b2.y))
        return lo < hi - OVERLAP_EPS

    return False


def segments_cross(s1: Segment, s2: Segment) -> bool:
    """
    Check for a perpendicular crossing strictly inside both segments.

    Touching at an endpoint (a T-junction or shared corner) is not a crossing,
    and parallel segments never cross.
    """
    (a1, a2), (b1, b2) = s1, s2

    if is_horizontal(a1, a2) and is_vertical(b1, b2):
        h1, h2, v1, v2 = a1, a2, b1, b2
    elif is_vertical(a1, a2) and is_horizontal(b1, b2):
        h1, h2, v1, v2 = b1, b2, a1, a2
    else:
        return False

    hy = h1.y
    vx = v1.x
    return (
        min(h1.x, h2.x) < vx < max(h1.x, h2.x)
        and min(v1.y, v2.y) < hy < max(v1.y, v2.y)
    )


def segment_intersects_rect(segment: Segment, rect: Rect, margin: float) -> bool:
    """
    Check whether a segment passes through ``rect`` expanded by ``margin``.

    Bounds are inclusive: running exactly along the expanded border counts
    as an intersection. Zero-area rectangles are ignored.
    """
    if rect.is_empty:
        return False

    a, b = segment
    box = rect.expanded(margin)

    if is_degenerate(segment):
        return False

    if is_horizontal(a, b):
        if box.y <= a.y <= box.y2:
            return max(a.x, b.x) >= box.x and min(a.x, b.x) <= box.x2
        return False

    if is_vertical(a, b):
        if box.x <= a.x <= box.x2:
            return max(a.y, b.y) >= box.y and min(a.y, b.y) <= box.y2
        return False

    return False


def path_segments(path: Sequence[Point]) -> Iterator[Segment]:
    """Yield consecutive non-degenerate segments of a path."""
    for i in range(len(path) - 1):
        segment = (path[i], path[i + 1])
        if not is_degenerate(segment):
            yield segment


def path_length(path: Sequence[Point]) -> float:
    """Total Manhattan length of a path."""
    length = 0.0
    for i in range(len(path) - 1):
        length += abs(path[i + 1].x - path[i].x) + abs(path[i + 1].y - path[i].y)
    return length


def count_bends(path: Sequence[Point]) -> int:
    """
    Count true turns in a path.

    A vertex is a bend when the incoming segment moves along one axis and
    the outgoing segment along the other; straight continuations are not
    counted.
    """
    if len(path) < 3:
        return 0

    bends = 0
    for i in range(1, len(path) - 1):
        prev, curr, nxt = path[i - 1], path[i], path[i + 1]
        dx1, dy1 = curr.x - prev.x, curr.y - prev.y
        dx2, dy2 = nxt.x - curr.x, nxt.y - curr.y
        if (abs(dx1) > MERGE_EPS and abs(dy2) > MERGE_EPS) or (
            abs(dy1) > MERGE_EPS and abs(dx2) > MERGE_EPS
        ):
            bends += 1
    return bends


def is_orthogonal(path: Sequence[Point], eps: float = AXIS_EPS) -> bool:
    """True if every consecutive pair differs in exactly one coordinate."""
    for i in range(len(path) - 1):
        a, b = path[i], path[i + 1]
        if is_horizontal(a, b, eps) == is_vertical(a, b, eps):
            return False
    return True


def points_close(a: Point, b: Point, eps: float = MERGE_EPS) -> bool:
    return abs(a.x - b.x) < eps and abs(a.y - b.y) < eps


def merge_close_points(path: Sequence[Point], eps: float = MERGE_EPS) -> List[Point]:
    """
    Merge runs of points closer than ``eps``.

    When the last point lands on the previous one it replaces it, so the
    path still ends exactly at its final point.
    """
    merged: List[Point] = []
    for index, point in enumerate(path):
        if not merged or not points_close(point, merged[-1], eps):
            merged.append(point)
        elif index == len(path) - 1:
            merged[-1] = point
    return merged


def clean_path(path: Sequence[Point], p1: Point, p2: Point) -> Optional[List[Point]]:
    """
    Clean a raw candidate path.

    Consecutive points closer than ``MERGE_EPS`` are merged. If that leaves
    fewer than two points while ``p1`` and ``p2`` differ, the missing endpoint
    is re-appended once; a path that is still degenerate is discarded by
    returning None. A true self-loop cleans to ``[p1, p2]``.
    """
    cleaned = merge_close_points(path)
    same_point = points_close(p1, p2, AXIS_EPS)

    if len(cleaned) < 2:
        if same_point:
            return [p1, p2]
        if len(cleaned) == 1 and points_close(cleaned[0], p1, AXIS_EPS):
            cleaned.append(p2)
        else:
            return None

    if len(cleaned) < 2:
        return None
    return cleaned
