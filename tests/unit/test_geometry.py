"""Tests for orthogonal path geometry primitives."""

from splicemap.geometry import (
    clean_path,
    count_bends,
    is_degenerate,
    is_horizontal,
    is_orthogonal,
    is_vertical,
    merge_close_points,
    path_length,
    path_segments,
    segment_intersects_rect,
    segments_collinear_overlap,
    segments_cross,
)
from splicemap.models import Point, Rect


def P(x, y):
    return Point(x, y)


class TestOrientation:
    """Tests for horizontal/vertical classification."""

    def test_horizontal(self):
        """Test same y within tolerance counts as horizontal."""
        assert is_horizontal(P(0, 10), P(50, 10.05))
        assert not is_horizontal(P(0, 10), P(50, 11))

    def test_vertical(self):
        """Test same x within tolerance counts as vertical."""
        assert is_vertical(P(5, 0), P(5, 100))
        assert not is_vertical(P(5, 0), P(6, 100))

    def test_degenerate(self):
        """Test zero-length segments are degenerate."""
        assert is_degenerate((P(3, 3), P(3, 3)))
        assert not is_degenerate((P(3, 3), P(3, 4)))


class TestCollinearOverlap:
    """Tests for shared-lane detection."""

    def test_overlapping_horizontal(self):
        """Test two horizontal segments on the same line overlap."""
        assert segments_collinear_overlap(
            (P(0, 10), P(100, 10)), (P(50, 10), P(150, 10)), 1.0
        )

    def test_within_tolerance(self):
        """Test a lane half a unit away still collides at tolerance 1."""
        assert segments_collinear_overlap(
            (P(0, 10), P(100, 10)), (P(20, 10.5), P(80, 10.5)), 1.0
        )

    def test_outside_tolerance(self):
        """Test a parallel lane farther than the tolerance does not collide."""
        assert not segments_collinear_overlap(
            (P(0, 10), P(100, 10)), (P(20, 12), P(80, 12)), 1.0
        )

    def test_touching_ends_do_not_overlap(self):
        """Test segments meeting end to end do not share a lane."""
        assert not segments_collinear_overlap(
            (P(0, 10), P(50, 10)), (P(50, 10), P(100, 10)), 1.0
        )

    def test_vertical_overlap(self):
        """Test vertical segments overlapping along y."""
        assert segments_collinear_overlap(
            (P(5, 0), P(5, 100)), (P(5, 90), P(5, 200)), 1.0
        )

    def test_perpendicular_never_overlap(self):
        """Test perpendicular segments are never collinear."""
        assert not segments_collinear_overlap(
            (P(0, 10), P(100, 10)), (P(50, 0), P(50, 100)), 1.0
        )


class TestCrossing:
    """Tests for perpendicular crossings."""

    def test_plus_crossing(self):
        """Test a proper plus-shaped crossing is detected."""
        assert segments_cross((P(0, 50), P(100, 50)), (P(50, 0), P(50, 100)))
        assert segments_cross((P(50, 0), P(50, 100)), (P(0, 50), P(100, 50)))

    def test_t_junction_is_not_crossing(self):
        """Test touching at an endpoint is not a crossing."""
        assert not segments_cross((P(0, 50), P(100, 50)), (P(50, 50), P(50, 100)))
        assert not segments_cross((P(0, 50), P(50, 50)), (P(50, 0), P(50, 100)))

    def test_parallel_never_cross(self):
        """Test parallel segments never cross."""
        assert not segments_cross((P(0, 0), P(100, 0)), (P(0, 0), P(100, 0)))


class TestSegmentRect:
    """Tests for segment/rectangle intersection."""

    def test_horizontal_through_rect(self):
        """Test a horizontal segment crossing a rectangle."""
        rect = Rect(40, 40, 20, 20)
        assert segment_intersects_rect((P(0, 50), P(100, 50)), rect, 0)

    def test_margin_extends_rect(self):
        """Test the margin grows the rectangle on every side."""
        rect = Rect(40, 40, 20, 20)
        segment = (P(0, 65), P(100, 65))
        assert not segment_intersects_rect(segment, rect, 4)
        assert segment_intersects_rect(segment, rect, 5)

    def test_inclusive_border(self):
        """Test running exactly along the expanded border counts."""
        rect = Rect(40, 40, 20, 20)
        assert segment_intersects_rect((P(0, 60), P(100, 60)), rect, 0)

    def test_short_of_rect(self):
        """Test a segment ending before the rectangle misses it."""
        rect = Rect(40, 40, 20, 20)
        assert not segment_intersects_rect((P(0, 50), P(30, 50)), rect, 0)

    def test_vertical_through_rect(self):
        """Test a vertical segment crossing a rectangle."""
        rect = Rect(40, 40, 20, 20)
        assert segment_intersects_rect((P(50, 0), P(50, 100)), rect, 0)
        assert not segment_intersects_rect((P(70, 0), P(70, 100)), rect, 0)

    def test_empty_rect_ignored(self):
        """Test zero-area rectangles never intersect."""
        assert not segment_intersects_rect((P(0, 50), P(100, 50)), Rect(40, 40, 0, 20), 8)

    def test_zero_length_segment_ignored(self):
        """Test a degenerate segment never intersects."""
        assert not segment_intersects_rect((P(50, 50), P(50, 50)), Rect(40, 40, 20, 20), 0)


class TestPathMetrics:
    """Tests for path length, bends and segments."""

    def test_length(self):
        """Test Manhattan length sums segment lengths."""
        assert path_length([P(0, 0), P(30, 0), P(30, 40)]) == 70

    def test_bends(self):
        """Test only true turns are counted."""
        assert count_bends([P(0, 0), P(10, 0)]) == 0
        assert count_bends([P(0, 0), P(10, 0), P(10, 10)]) == 1
        assert count_bends([P(0, 0), P(10, 0), P(10, 10), P(20, 10)]) == 2

    def test_straight_continuation_is_not_bend(self):
        """Test a collinear middle vertex does not count as a bend."""
        assert count_bends([P(0, 0), P(10, 0), P(20, 0)]) == 0

    def test_segments_skip_degenerate(self):
        """Test zero-length steps are not yielded as segments."""
        segments = list(path_segments([P(0, 0), P(0, 0), P(10, 0)]))
        assert segments == [(P(0, 0), P(10, 0))]

    def test_orthogonal(self):
        """Test diagonal or zero-length steps break orthogonality."""
        assert is_orthogonal([P(0, 0), P(10, 0), P(10, 5)])
        assert not is_orthogonal([P(0, 0), P(10, 5)])
        assert not is_orthogonal([P(0, 0), P(0, 0)])


class TestCleaning:
    """Tests for merging points and cleaning candidate paths."""

    def test_merge_close_points(self):
        """Test points within the merge distance collapse."""
        merged = merge_close_points([P(0, 0), P(0.001, 0), P(10, 0)])
        assert merged == [P(0, 0), P(10, 0)]

    def test_merge_keeps_last_point(self):
        """Test the final point replaces a close predecessor."""
        merged = merge_close_points([P(0, 0), P(10, 0), P(10.005, 0)])
        assert merged == [P(0, 0), P(10.005, 0)]

    def test_clean_removes_duplicates(self):
        """Test an L-shape with a duplicated corner is cleaned."""
        cleaned = clean_path([P(0, 0), P(10, 0), P(10, 0), P(10, 10)], P(0, 0), P(10, 10))
        assert cleaned == [P(0, 0), P(10, 0), P(10, 10)]

    def test_clean_reappends_end(self):
        """Test a path collapsed onto p1 gets p2 re-appended."""
        cleaned = clean_path([P(0, 0), P(0, 0)], P(0, 0), P(0, 5))
        assert cleaned == [P(0, 0), P(0, 5)]

    def test_clean_discards_degenerate(self):
        """Test a path collapsed away from p1 is discarded."""
        assert clean_path([P(5, 5)], P(0, 0), P(10, 0)) is None

    def test_clean_self_loop(self):
        """Test a self-loop cleans to the two coincident points."""
        assert clean_path([P(3, 3), P(3, 3)], P(3, 3), P(3, 3)) == [P(3, 3), P(3, 3)]
