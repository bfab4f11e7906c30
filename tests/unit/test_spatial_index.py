"""Tests for the grid spatial indexes."""

import random

import pytest

from splicemap.config import RoutingConfig
from splicemap.models import Connection, Obstacle, ObstacleSet, Point, Rect
from splicemap.scoring import CostEvaluator
from splicemap.spatial_index import GridIndex, ObstacleIndex, SegmentIndex

CANVAS = Rect(0, 0, 1000, 700)


def random_orthogonal_path(rng, points=5):
    """Alternating horizontal and vertical steps on a 5-unit grid."""
    x, y = rng.randrange(0, 1001, 5), rng.randrange(0, 701, 5)
    path = [Point(x, y)]
    for i in range(points - 1):
        if i % 2 == 0:
            x = rng.randrange(0, 1001, 5)
        else:
            y = rng.randrange(0, 701, 5)
        path.append(Point(x, y))
    return path


def random_rect(rng):
    return Rect(
        rng.randrange(0, 950, 5),
        rng.randrange(0, 650, 5),
        rng.randrange(5, 120, 5),
        rng.randrange(5, 120, 5),
    )


def random_snapshot(rng):
    connections = [
        Connection(f"c{i}", f"a{i}", f"b{i}", tuple(random_orthogonal_path(rng)))
        for i in range(20)
    ]
    obstacles = ObstacleSet(
        fibers=tuple(Obstacle(f"f{i}", random_rect(rng), "cable") for i in range(10)),
        cables=tuple(Obstacle(f"cable{i}", random_rect(rng)) for i in range(10)),
        splitters=tuple(Obstacle(f"sp{i}", random_rect(rng)) for i in range(5)),
    )
    return connections, obstacles


class TestGridIndex:
    """Tests for the generic grid bucket index."""

    def test_invalid_cell_size(self):
        """Test a non-positive cell size is rejected."""
        with pytest.raises(ValueError):
            GridIndex(0)

    def test_query_finds_overlapping_cells(self):
        """Test items in overlapping cells are returned."""
        grid = GridIndex(100)
        grid.insert("a", 10, 10, 20, 20)
        grid.insert("b", 510, 510, 520, 520)
        assert grid.query(0, 0, 50, 50) == ["a"]
        assert grid.query(450, 450, 550, 550) == ["b"]

    def test_no_duplicates_and_insertion_order(self):
        """Test items spanning many cells are returned once, in insertion order."""
        grid = GridIndex(100)
        grid.insert("long", 0, 50, 900, 50)
        grid.insert("short", 150, 40, 160, 60)
        assert grid.query(0, 0, 1000, 100) == ["long", "short"]

    def test_negative_coordinates(self):
        """Test cells with negative coordinates work."""
        grid = GridIndex(100)
        grid.insert("neg", -250, -250, -240, -240)
        assert grid.query(-300, -300, -200, -200) == ["neg"]
        assert grid.query(0, 0, 10, 10) == []

    def test_len(self):
        """Test the index counts inserted items."""
        grid = GridIndex(50)
        grid.insert(1, 0, 0, 1, 1)
        grid.insert(2, 0, 0, 1, 1)
        assert len(grid) == 2


class TestSegmentIndex:
    """Tests for the connection segment index."""

    def test_query_with_padding(self):
        """Test padding widens the query bounds."""
        index = SegmentIndex(10)
        segment = (Point(0, 25), Point(100, 25))
        index.add("c1", segment)
        query_segment = (Point(0, 12), Point(100, 12))
        assert index.query(query_segment) == []
        assert index.query(query_segment, pad=10) == [("c1", segment)]

    def test_add_path(self):
        """Test every segment of a path is indexed."""
        index = SegmentIndex()
        index.add_path("c1", [(Point(0, 0), Point(10, 0)), (Point(10, 0), Point(10, 10))])
        assert len(index) == 2


class TestObstacleIndex:
    """Tests for the obstacle rectangle index."""

    def test_kind_is_returned(self):
        """Test queries return the obstacle kind with the obstacle."""
        index = ObstacleIndex()
        cable = Obstacle("c", Rect(100, 100, 50, 200))
        index.add("cable", cable)
        hits = index.query((Point(0, 150), Point(300, 150)))
        assert hits == [("cable", cable)]

    def test_empty_rect_skipped(self):
        """Test zero-area obstacles are not indexed."""
        index = ObstacleIndex()
        index.add("fiber", Obstacle("f", Rect(10, 10, 0, 0)))
        assert len(index) == 0


class TestIndexMatchesFullScan:
    """Tests that indexed scoring gives the same answers as scanning everything."""

    METRICS = (
        "cost",
        "crossings",
        "hard_collides",
        "too_close",
        "intersects_fibers",
        "intersects_cables",
        "intersects_splitters",
        "uses_central_channel",
    )

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_fine_grid_matches_single_cell(self, seed):
        """Test a fine grid finds every collision a single all-covering cell finds."""
        rng = random.Random(seed)
        connections, obstacles = random_snapshot(rng)
        fine = CostEvaluator(
            connections, obstacles, CANVAS, RoutingConfig(index_cell_size=7)
        )
        full = CostEvaluator(
            connections, obstacles, CANVAS, RoutingConfig(index_cell_size=1e9)
        )
        for _ in range(100):
            path = random_orthogonal_path(rng, rng.randint(2, 6))
            indexed = fine.evaluate(path)
            scanned = full.evaluate(path)
            for metric in self.METRICS:
                assert getattr(indexed, metric) == getattr(scanned, metric), (
                    f"{metric} differs for {path}"
                )

    def test_collision_spanning_many_cells_found(self):
        """Test a long shared lane is found when it covers many small cells."""
        existing = Connection("c0", "x", "y", (Point(0, 350), Point(1000, 350)))
        evaluator = CostEvaluator(
            [existing], ObstacleSet(), CANVAS, RoutingConfig(index_cell_size=7)
        )
        candidate = evaluator.evaluate([Point(600, 350), Point(610, 350)])
        assert candidate.hard_collides
