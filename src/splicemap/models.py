"""
Data models for splice diagram routing.

This module contains the dataclasses shared by the router and the connection
store: plane coordinates, obstacle rectangles, connectable endpoints and the
connections between them. Everything here is immutable so that snapshots can
be handed to the router without being captured by reference.

Classes:
    Point: A plane coordinate.
    Rect: An axis-aligned bounding box (fiber, cable or splitter body).
    ExitDirection: Outward direction of an endpoint.
    Endpoint: A fiber or splitter port that a connection can attach to.
    Obstacle: A rectangle that paths should avoid.
    ObstacleSet: Immutable snapshot of all obstacles, grouped by kind.
    Connection: A routed splice between two endpoints.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class Point:
    """A coordinate on the diagram canvas."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


Path = Tuple[Point, ...]
Segment = Tuple[Point, Point]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def is_empty(self) -> bool:
        """True for zero-area rectangles, which never block a path."""
        return self.width <= 0 or self.height <= 0

    def expanded(self, margin: float) -> "Rect":
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains(self, point: Point) -> bool:
        return self.x <= point.x <= self.x2 and self.y <= point.y <= self.y2

    def clamp(self, point: Point) -> Point:
        """Clamp a point into this rectangle."""
        return Point(
            max(self.x, min(self.x2, point.x)),
            max(self.y, min(self.y2, point.y)),
        )


class CableOrientation(Enum):
    """How a cable body is laid out on the canvas."""

    VERTICAL = "vertical"  # Along the left/right edge
    HORIZONTAL = "horizontal"  # Along the top/bottom edge


class CableType(Enum):
    """Whether a cable enters or leaves the splice closure."""

    IN = "in"
    OUT = "out"


class ExitDirection(Enum):
    """Outward direction in which a connection leaves an endpoint."""

    LEFT = (-1, 0)
    RIGHT = (1, 0)
    UP = (0, -1)
    DOWN = (0, 1)
    NONE = (0, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        return self.dx != 0

    @property
    def is_vertical(self) -> bool:
        return self.dy != 0

    @classmethod
    def for_cable(
        cls,
        orientation: CableOrientation,
        cable_type: CableType,
        in_upper_half: bool = True,
    ) -> "ExitDirection":
        """
        Derive the exit direction of a cable's fibers.

        Vertical cables expose fibers sideways: an incoming cable sits on the
        left edge and its fibers exit to the right, an outgoing cable the
        reverse. Horizontal cables expose fibers toward the canvas middle:
        downward when the cable is in the upper half, upward otherwise.
        """
        if orientation == CableOrientation.VERTICAL:
            return cls.RIGHT if cable_type == CableType.IN else cls.LEFT
        return cls.DOWN if in_upper_half else cls.UP


# Default thickness of a cable body, used as the base exit distance
DEFAULT_OWNER_EXTENT = 50.0


@dataclass(frozen=True)
class Endpoint:
    """
    A connectable fiber or splitter port.

    Attributes:
        id: Endpoint identifier (fiber id or splitter port id).
        exit_point: Where a connection starts/ends.
        owner_id: Id of the owning cable or splitter.
        direction: Outward direction used for extended exits and the
                   visual endpoint offset.
        owner_extent: Thickness of the owning body along the exit direction.
    """

    id: str
    exit_point: Point
    owner_id: str
    direction: ExitDirection = ExitDirection.NONE
    owner_extent: float = DEFAULT_OWNER_EXTENT

    def moved_to(self, exit_point: Point) -> "Endpoint":
        return replace(self, exit_point=exit_point)


@dataclass(frozen=True)
class Obstacle:
    """An obstacle body; ``owner_id`` links a fiber rect to its cable."""

    id: str
    rect: Rect
    owner_id: Optional[str] = None


@dataclass(frozen=True)
class ObstacleSet:
    """Immutable snapshot of every obstacle on the canvas."""

    fibers: Tuple[Obstacle, ...] = ()
    cables: Tuple[Obstacle, ...] = ()
    splitters: Tuple[Obstacle, ...] = ()

    def excluding(self, ids: Iterable[str]) -> "ObstacleSet":
        """
        Drop obstacles belonging to the endpoints being connected.

        Pass the endpoint ids (removes their own fiber rects) together with
        their owner ids (removes the cable or splitter bodies).
        """
        skip = set(ids)
        return ObstacleSet(
            fibers=tuple(o for o in self.fibers if o.id not in skip),
            cables=tuple(o for o in self.cables if o.id not in skip),
            splitters=tuple(o for o in self.splitters if o.id not in skip),
        )

    def without_owner(self, owner_id: str) -> "ObstacleSet":
        """Drop every obstacle that is, or belongs to, ``owner_id``."""
        return ObstacleSet(
            fibers=tuple(o for o in self.fibers if owner_id not in (o.id, o.owner_id)),
            cables=tuple(o for o in self.cables if owner_id not in (o.id, o.owner_id)),
            splitters=tuple(
                o for o in self.splitters if owner_id not in (o.id, o.owner_id)
            ),
        )

    def merged(self, other: "ObstacleSet") -> "ObstacleSet":
        return ObstacleSet(
            fibers=self.fibers + other.fibers,
            cables=self.cables + other.cables,
            splitters=self.splitters + other.splitters,
        )

    def by_kind(self) -> Tuple[Tuple[str, Tuple[Obstacle, ...]], ...]:
        return (
            ("fiber", self.fibers),
            ("cable", self.cables),
            ("splitter", self.splitters),
        )

    def __len__(self) -> int:
        return len(self.fibers) + len(self.cables) + len(self.splitters)


@dataclass(frozen=True)
class Connection:
    """
    A splice between two endpoints.

    The path holds only horizontal or vertical segments, never zero-length
    ones, and at least two points unless both endpoints coincide.
    ``user_edited`` is set once a control point has been dragged by hand; such
    connections are re-anchored on moves instead of being rerouted.
    """

    id: str
    endpoint1_id: str
    endpoint2_id: str
    path: Path = ()
    color1: str = ""
    color2: str = ""
    marked1: bool = False
    marked2: bool = False
    user_edited: bool = False

    def with_path(self, path: Iterable[Point], user_edited: Optional[bool] = None) -> "Connection":
        edited = self.user_edited if user_edited is None else user_edited
        return replace(self, path=tuple(path), user_edited=edited)

    def endpoint_ids(self) -> Tuple[str, str]:
        return (self.endpoint1_id, self.endpoint2_id)


@dataclass(frozen=True)
class Presplice:
    """Two selected endpoints waiting to be committed into a Connection."""

    endpoint1_id: str
    endpoint2_id: str
    line_start: Point
    line_end: Point
    plus_icon: Point = field(default=Point(0.0, 0.0))
