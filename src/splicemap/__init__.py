"""
SpliceMap - Orthogonal connection routing for splice diagrams

A Python library that routes fiber splice connections as horizontal/vertical
polylines around cables, splitters and already-routed connections.

Example:
    >>> from splicemap import Endpoint, ExitDirection, ObstacleSet, Point, Rect
    >>> from splicemap import route_connection
    >>> a = Endpoint("f1", Point(60, 100), "cable-in", ExitDirection.RIGHT)
    >>> b = Endpoint("f2", Point(940, 300), "cable-out", ExitDirection.LEFT)
    >>> path = route_connection(a, b, [], ObstacleSet(), Rect(0, 0, 1000, 700))

Debug Mode Example:
    >>> trace = RoutingTrace()
    >>> path = route_connection(a, b, [], ObstacleSet(), canvas, trace=trace)
    >>> print(trace.summary())
"""

from .config import DEFAULT_CONFIG, ConfigError, RoutingConfig
from .diagram import (
    DiagramError,
    EndpointInUseError,
    SpliceDiagram,
    UnknownConnectionError,
    UnknownEndpointError,
)
from .models import (
    CableOrientation,
    CableType,
    Connection,
    Endpoint,
    ExitDirection,
    Obstacle,
    ObstacleSet,
    Point,
    Presplice,
    Rect,
)
from .png_renderer import TraceRenderer, render_trace_png
from .router import (
    CancelToken,
    ConnectionRouter,
    RouteCancelled,
    apply_endpoint_offset,
    reanchor_path,
    route_connection,
)
from .scheduler import RerouteScheduler
from .scoring import Candidate, CostEvaluator
from .strategies import DEFAULT_STRATEGIES, RouteContext, generate_candidates
from .tracer import RoutingStage, RoutingTrace

__version__ = "0.1.0"

__all__ = [
    # Main API
    "route_connection",
    "ConnectionRouter",
    "RouteCancelled",
    "CancelToken",
    "apply_endpoint_offset",
    "reanchor_path",
    # Models
    "Point",
    "Rect",
    "Endpoint",
    "ExitDirection",
    "CableOrientation",
    "CableType",
    "Obstacle",
    "ObstacleSet",
    "Connection",
    "Presplice",
    # Configuration
    "RoutingConfig",
    "DEFAULT_CONFIG",
    "ConfigError",
    # Candidates and scoring
    "RouteContext",
    "DEFAULT_STRATEGIES",
    "generate_candidates",
    "Candidate",
    "CostEvaluator",
    # Connection store
    "SpliceDiagram",
    "DiagramError",
    "UnknownEndpointError",
    "UnknownConnectionError",
    "EndpointInUseError",
    "RerouteScheduler",
    # Debug/Tracing (for development and debugging)
    "RoutingTrace",
    "RoutingStage",
    "TraceRenderer",
    "render_trace_png",
]
