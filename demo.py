#!/usr/bin/env python3
"""
Demo script for the splice diagram router.

Builds a small closure with an incoming cable, an outgoing cable and a
splitter, splices a few fibers and prints the routed paths. Pass --debug to
see routing decisions and write a trace image.
"""

import argparse
import logging

from splicemap import (
    Endpoint,
    ExitDirection,
    Obstacle,
    ObstacleSet,
    Point,
    Rect,
    RoutingTrace,
    SpliceDiagram,
    render_trace_png,
    route_connection,
)

CANVAS = Rect(0, 0, 1000, 700)


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def format_path(path):
    return " -> ".join(f"({p.x:g}, {p.y:g})" for p in path)


def build_diagram():
    """A closure with two vertical cables and a 1:2 splitter in the middle."""
    diagram = SpliceDiagram(CANVAS)

    diagram.add_owner_body("cable", Obstacle("cable-in", Rect(10, 50, 50, 400)))
    diagram.add_owner_body("cable", Obstacle("cable-out", Rect(940, 50, 50, 400)))
    diagram.add_owner_body("splitter", Obstacle("splitter-1", Rect(470, 500, 60, 80)))

    colors = ["blue", "orange", "green", "brown"]
    for i, color in enumerate(colors):
        y = 100 + i * 40
        diagram.add_endpoint(
            Endpoint(f"in-{i}", Point(60, y), "cable-in", ExitDirection.RIGHT),
            Obstacle(f"in-{i}", Rect(10, y - 5, 50, 10), "cable-in"),
            color=color,
        )
        diagram.add_endpoint(
            Endpoint(f"out-{i}", Point(940, y + 20), "cable-out", ExitDirection.LEFT),
            Obstacle(f"out-{i}", Rect(940, y + 15, 50, 10), "cable-out"),
            color=color,
        )

    diagram.add_endpoint(
        Endpoint("sp-in", Point(470, 540), "splitter-1", ExitDirection.LEFT, 60)
    )
    for i in range(2):
        diagram.add_endpoint(
            Endpoint(f"sp-out-{i}", Point(530, 520 + i * 40), "splitter-1",
                     ExitDirection.RIGHT, 60)
        )
        diagram.link_internal("sp-in", f"sp-out-{i}")
    return diagram


def demo_splices(diagram):
    """Demo 1: Straight-through splices and a splitter feed."""
    print_header("Demo 1: Splicing fibers")

    pairs = [("in-0", "out-0"), ("in-1", "out-2"), ("in-2", "sp-in"), ("sp-out-0", "out-3")]
    for a, b in pairs:
        connection = diagram.connect(a, b)
        print(f"{connection.id}: {a} -> {b}")
        print(f"  {format_path(connection.path)}")

    print("\nCircuit through the splitter:")
    print("  " + ", ".join(sorted(diagram.trace_circuit("in-2"))))


def demo_move(diagram):
    """Demo 2: Moving the splitter reroutes its connections."""
    print_header("Demo 2: Moving the splitter")

    dy = -60
    moved = [
        ep.moved_to(ep.exit_point.offset(0, dy))
        for ep in diagram.endpoints.values()
        if ep.owner_id == "splitter-1"
    ]
    body = ObstacleSet(splitters=(Obstacle("splitter-1", Rect(470, 500 + dy, 60, 80)),))
    for connection in diagram.move_owner("splitter-1", moved, body):
        print(f"{connection.id}: {format_path(connection.path)}")


def demo_trace(diagram, image_path):
    """Demo 3: Tracing one routing decision."""
    print_header("Demo 3: Routing trace")

    connections, obstacles = diagram.snapshot()
    trace = RoutingTrace()
    route_connection(
        diagram.endpoints["in-3"],
        diagram.endpoints["out-1"],
        connections,
        obstacles,
        CANVAS,
        trace=trace,
    )
    print(trace.summary())
    print(f"\nTrace image written to {render_trace_png(trace, image_path)}")


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--debug", action="store_true", help="Log routing decisions")
    parser.add_argument("--trace-image", default="route_trace.png")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    diagram = build_diagram()
    demo_splices(diagram)
    demo_move(diagram)
    if args.debug:
        demo_trace(diagram, args.trace_image)


if __name__ == "__main__":
    main()
