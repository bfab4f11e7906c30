"""
Connection store for a splice diagram.

SpliceDiagram holds the editor-side state that the router works against:
registered endpoints and obstacle bodies (supplied by the external layout
step), committed connections, and the current presplice selection. It hands
the router immutable snapshots and stores the paths it gets back.

Splices are kept in a networkx multigraph whose nodes are endpoints. Splice
edges carry their connection id; splitters add "internal" edges between
their input and output ports so a circuit can be traced end to end.
"""

import itertools
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from .config import RoutingConfig
from .geometry import merge_close_points
from .models import Connection, Endpoint, Obstacle, ObstacleSet, Point, Presplice, Rect
from .router import CancelToken, ConnectionRouter, offset_exit_point

logger = logging.getLogger(__name__)

SPLICE = "splice"
INTERNAL = "internal"


class DiagramError(Exception):
    """Raised when an editing operation is not allowed."""

    pass


class UnknownEndpointError(DiagramError, KeyError):
    """Raised when an endpoint id is not registered."""

    pass


class UnknownConnectionError(DiagramError, KeyError):
    """Raised when a connection id does not exist."""

    pass


class EndpointInUseError(DiagramError):
    """Raised when an endpoint already has a splice."""

    pass


class SpliceDiagram:
    """
    Editable set of endpoints, obstacles and routed splice connections.

    Example:
        >>> diagram = SpliceDiagram(Rect(0, 0, 1000, 700))
        >>> diagram.add_endpoint(fiber_a, Obstacle("a", rect_a, "cable-1"))
        >>> diagram.add_endpoint(fiber_b, Obstacle("b", rect_b, "cable-2"))
        >>> connection = diagram.connect("a", "b")
    """

    def __init__(
        self,
        canvas: Rect,
        config: Optional[RoutingConfig] = None,
        router: Optional[ConnectionRouter] = None,
    ):
        self.canvas = canvas
        self.router = router or ConnectionRouter(config)
        self.graph = nx.MultiGraph()
        self.endpoints: Dict[str, Endpoint] = {}
        self.obstacles = ObstacleSet()
        self.connections: Dict[str, Connection] = {}
        self.selected_endpoint_id: Optional[str] = None
        self.presplice: Optional[Presplice] = None
        self._ids = itertools.count(1)

    @property
    def config(self) -> RoutingConfig:
        return self.router.config

    # --- Geometry registration ---

    def add_endpoint(
        self,
        endpoint: Endpoint,
        obstacle: Optional[Obstacle] = None,
        color: str = "",
        marked: bool = False,
    ) -> None:
        """Register a fiber or splitter port, optionally with its own rect."""
        self.endpoints[endpoint.id] = endpoint
        self.graph.add_node(
            endpoint.id, owner=endpoint.owner_id, color=color, marked=marked
        )
        if obstacle is not None:
            self.obstacles = self.obstacles.merged(ObstacleSet(fibers=(obstacle,)))

    def add_owner_body(self, kind: str, obstacle: Obstacle) -> None:
        """Register a cable or splitter body."""
        if kind == "cable":
            extra = ObstacleSet(cables=(obstacle,))
        elif kind == "splitter":
            extra = ObstacleSet(splitters=(obstacle,))
        else:
            raise DiagramError(f"Unknown body kind: {kind!r}")
        self.obstacles = self.obstacles.merged(extra)

    def link_internal(self, endpoint1_id: str, endpoint2_id: str) -> None:
        """Record a splitter's internal input-to-output link."""
        self._endpoint(endpoint1_id)
        self._endpoint(endpoint2_id)
        self.graph.add_edge(endpoint1_id, endpoint2_id, key=INTERNAL, kind=INTERNAL)

    def update_geometry(
        self, endpoints: Iterable[Endpoint], obstacles: Optional[ObstacleSet] = None
    ) -> None:
        """Replace endpoint geometry (and optionally all obstacles) without rerouting."""
        for endpoint in endpoints:
            self._endpoint(endpoint.id)
            self.endpoints[endpoint.id] = endpoint
        if obstacles is not None:
            self.obstacles = obstacles

    # --- Queries ---

    def _endpoint(self, endpoint_id: str) -> Endpoint:
        try:
            return self.endpoints[endpoint_id]
        except KeyError:
            raise UnknownEndpointError(endpoint_id) from None

    def _connection(self, connection_id: str) -> Connection:
        try:
            return self.connections[connection_id]
        except KeyError:
            raise UnknownConnectionError(connection_id) from None

    def is_connected(self, endpoint_id: str) -> bool:
        self._endpoint(endpoint_id)
        return self.connection_for_endpoint(endpoint_id) is not None

    def free_endpoints(self) -> List[str]:
        return [eid for eid in self.endpoints if not self.is_connected(eid)]

    def connection_for_endpoint(self, endpoint_id: str) -> Optional[Connection]:
        if endpoint_id not in self.graph:
            return None
        for _, _, data in self.graph.edges(endpoint_id, data=True):
            if data.get("kind") == SPLICE:
                return self.connections[data["connection_id"]]
        return None

    def connections_for_owner(self, owner_id: str) -> List[Connection]:
        """Connections with at least one endpoint on ``owner_id``, in store order."""
        owned = {eid for eid, ep in self.endpoints.items() if ep.owner_id == owner_id}
        return [
            c
            for c in self.connections.values()
            if c.endpoint1_id in owned or c.endpoint2_id in owned
        ]

    def trace_circuit(self, endpoint_id: str) -> Set[str]:
        """All endpoints reachable through splices and splitter links."""
        self._endpoint(endpoint_id)
        return set(nx.node_connected_component(self.graph, endpoint_id))

    def snapshot(self) -> Tuple[Tuple[Connection, ...], ObstacleSet]:
        """Immutable view handed to the router."""
        return tuple(self.connections.values()), self.obstacles

    # --- Presplice ---

    def select_endpoint(self, endpoint_id: str) -> Optional[Presplice]:
        """
        Two-click presplice selection.

        The first click selects an endpoint; a second click on a different
        free endpoint creates the presplice, with its confirm icon at the
        midpoint between the two exit points.

        Raises:
            EndpointInUseError: If the endpoint already has a splice
        """
        endpoint = self._endpoint(endpoint_id)
        if self.is_connected(endpoint_id):
            raise EndpointInUseError(f"Endpoint {endpoint_id} is already spliced")

        if self.selected_endpoint_id is None:
            self.selected_endpoint_id = endpoint_id
            self.presplice = None
            return None

        if self.selected_endpoint_id == endpoint_id:
            return self.presplice

        first = self.endpoints[self.selected_endpoint_id]
        p1, p2 = first.exit_point, endpoint.exit_point
        self.presplice = Presplice(
            endpoint1_id=first.id,
            endpoint2_id=endpoint.id,
            line_start=p1,
            line_end=p2,
            plus_icon=Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2),
        )
        return self.presplice

    def cancel_presplice(self) -> None:
        self.selected_endpoint_id = None
        self.presplice = None

    def commit_presplice(self, connection_id: Optional[str] = None) -> Connection:
        """Turn the active presplice into a routed connection."""
        if self.presplice is None:
            raise DiagramError("No active presplice to commit")
        presplice = self.presplice
        connection = self.connect(
            presplice.endpoint1_id, presplice.endpoint2_id, connection_id
        )
        self.cancel_presplice()
        return connection

    # --- Connections ---

    def connect(
        self,
        endpoint1_id: str,
        endpoint2_id: str,
        connection_id: Optional[str] = None,
    ) -> Connection:
        """Route and store a new splice between two free endpoints."""
        start = self._endpoint(endpoint1_id)
        end = self._endpoint(endpoint2_id)
        if endpoint1_id == endpoint2_id:
            raise DiagramError(f"Cannot splice {endpoint1_id} to itself")
        for eid in (endpoint1_id, endpoint2_id):
            if self.is_connected(eid):
                raise EndpointInUseError(f"Endpoint {eid} is already spliced")

        connection_id = connection_id or f"conn-{next(self._ids)}"
        if connection_id in self.connections:
            raise DiagramError(f"Connection {connection_id} already exists")

        connections, obstacles = self.snapshot()
        path = self.router.route(start, end, connections, obstacles, self.canvas)

        node1 = self.graph.nodes[endpoint1_id]
        node2 = self.graph.nodes[endpoint2_id]
        connection = Connection(
            id=connection_id,
            endpoint1_id=endpoint1_id,
            endpoint2_id=endpoint2_id,
            path=tuple(path),
            color1=node1.get("color", ""),
            color2=node2.get("color", ""),
            marked1=node1.get("marked", False),
            marked2=node2.get("marked", False),
        )
        self.connections[connection_id] = connection
        self.graph.add_edge(
            endpoint1_id,
            endpoint2_id,
            key=connection_id,
            kind=SPLICE,
            connection_id=connection_id,
        )
        logger.debug("Connected %s -> %s as %s", endpoint1_id, endpoint2_id, connection_id)
        return connection

    def delete_connection(self, connection_id: str) -> Connection:
        connection = self._connection(connection_id)
        self.graph.remove_edge(
            connection.endpoint1_id, connection.endpoint2_id, key=connection_id
        )
        del self.connections[connection_id]
        return connection

    def _rerouted(
        self,
        connection: Connection,
        connections: Dict[str, Connection],
        endpoints: Dict[str, Endpoint],
        obstacles: ObstacleSet,
        cancel_token: Optional[CancelToken] = None,
    ) -> Connection:
        start = endpoints[connection.endpoint1_id]
        end = endpoints[connection.endpoint2_id]
        if connection.user_edited:
            return connection.with_path(self.router.reanchor(connection.path, start, end))

        path = self.router.route(
            start,
            end,
            connections.values(),
            obstacles,
            self.canvas,
            exclude_connection_id=connection.id,
            cancel_token=cancel_token,
        )
        return connection.with_path(path)

    def reroute(self, connection_id: str) -> Connection:
        """Recompute one connection against the current state of all others."""
        connection = self._connection(connection_id)
        updated = self._rerouted(
            connection, self.connections, self.endpoints, self.obstacles
        )
        self.connections[connection_id] = updated
        return updated

    def move_owner(
        self,
        owner_id: str,
        endpoints: Iterable[Endpoint],
        obstacles: ObstacleSet,
        cancel_token: Optional[CancelToken] = None,
    ) -> List[Connection]:
        """
        Apply a moved cable or splitter and update its connections.

        The owner's old obstacles are replaced by ``obstacles`` and its
        endpoints by ``endpoints``. Every attached connection is then rerouted
        in store order, each against the already-updated others; hand-edited
        connections only have their ends re-anchored. Nothing is stored if
        ``cancel_token`` fires part way.

        Raises:
            RouteCancelled: If ``cancel_token`` was cancelled while routing
        """
        moved_endpoints = dict(self.endpoints)
        for endpoint in endpoints:
            self._endpoint(endpoint.id)
            moved_endpoints[endpoint.id] = endpoint
        moved_obstacles = self.obstacles.without_owner(owner_id).merged(obstacles)

        working = dict(self.connections)
        updated: List[Connection] = []
        for connection in self.connections_for_owner(owner_id):
            rerouted = self._rerouted(
                connection, working, moved_endpoints, moved_obstacles, cancel_token
            )
            working[connection.id] = rerouted
            updated.append(rerouted)

        self.endpoints = moved_endpoints
        self.obstacles = moved_obstacles
        self.connections = working
        logger.debug("Moved %s, updated %d connections", owner_id, len(updated))
        return updated

    # --- Control points ---

    def drag_control_point(self, connection_id: str, index: int, point: Point) -> Connection:
        """
        Move one vertex of a connection by hand.

        The point is clamped to the canvas. Ends that were not dragged are
        re-anchored to their endpoints, coincident points are merged, and the
        connection is marked as user-edited.
        """
        connection = self._connection(connection_id)
        path = list(connection.path)
        if not 0 <= index < len(path):
            raise DiagramError(
                f"Control point {index} out of range for {connection_id}"
            )

        path[index] = self.canvas.clamp(point)
        offset = self.config.visual_offset
        start = self.endpoints[connection.endpoint1_id]
        end = self.endpoints[connection.endpoint2_id]
        if index != 0:
            path[0] = offset_exit_point(start, offset)
        if index != len(path) - 1:
            path[-1] = offset_exit_point(end, offset)

        cleaned = merge_close_points(path)
        if len(cleaned) < 2:
            cleaned = merge_close_points([path[0], path[-1]])

        updated = connection.with_path(cleaned, user_edited=True)
        self.connections[connection_id] = updated
        return updated

    def insert_control_point(
        self, connection_id: str, segment_index: int, point: Point
    ) -> Tuple[Connection, int]:
        """
        Split segment ``segment_index`` at ``point``.

        Returns:
            Tuple of (updated connection, index of the new vertex)
        """
        connection = self._connection(connection_id)
        path = list(connection.path)
        if not 0 <= segment_index < len(path) - 1:
            raise DiagramError(
                f"Segment {segment_index} out of range for {connection_id}"
            )

        new_index = segment_index + 1
        path.insert(new_index, self.canvas.clamp(point))
        updated = connection.with_path(path, user_edited=True)
        self.connections[connection_id] = updated
        return updated, new_index
