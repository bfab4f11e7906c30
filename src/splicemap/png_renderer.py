"""
PNG rendering of routing traces.

Draws one RoutingTrace as an image for debugging: obstacle bodies, the other
connections the call was scored against, the best few candidates and the
returned path. This is a diagnostic aid, not the editor's own drawing.
"""

from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .models import Point, Rect
from .tracer import RoutingTrace

Color = Tuple[int, int, int]


class TraceRenderer:
    """Renders a RoutingTrace as a PNG image."""

    def __init__(
        self,
        scale: int = 1,
        margin: int = 20,
        top_candidates: int = 5,
        line_width: int = 2,
    ):
        self.scale = scale
        self.margin = margin
        self.top_candidates = top_candidates
        self.line_width = line_width

        # Colors
        self.bg_color = (255, 255, 255)
        self.canvas_outline = (200, 200, 200)
        self.center_line = (235, 235, 235)
        self.fiber_fill = (200, 225, 255)
        self.cable_fill = (210, 210, 210)
        self.splitter_fill = (240, 220, 180)
        self.obstacle_outline = (120, 120, 120)
        self.connection_color = (0, 0, 0)
        self.candidate_color = (255, 190, 120)
        self.result_color = (220, 30, 30)
        self.endpoint_color = (30, 120, 30)

    def _bounds(self, trace: RoutingTrace) -> Rect:
        if trace.canvas is not None and not trace.canvas.is_empty:
            return trace.canvas

        points = list(trace.result)
        if trace.p1 is not None:
            points.append(trace.p1)
        if trace.p2 is not None:
            points.append(trace.p2)
        if not points:
            return Rect(0, 0, 100, 100)
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return Rect(min(xs), min(ys), max(max(xs) - min(xs), 1), max(max(ys) - min(ys), 1))

    def _to_pixel(self, point: Point, bounds: Rect) -> Tuple[int, int]:
        x = (point.x - bounds.x) * self.scale + self.margin
        y = (point.y - bounds.y) * self.scale + self.margin
        return (int(round(x)), int(round(y)))

    def _draw_rect(
        self, draw: ImageDraw.ImageDraw, rect: Rect, bounds: Rect, fill: Color
    ) -> None:
        if rect.is_empty:
            return
        top_left = self._to_pixel(Point(rect.x, rect.y), bounds)
        bottom_right = self._to_pixel(Point(rect.x2, rect.y2), bounds)
        draw.rectangle([top_left, bottom_right], fill=fill, outline=self.obstacle_outline)

    def _draw_path(
        self,
        draw: ImageDraw.ImageDraw,
        path: Sequence[Point],
        bounds: Rect,
        color: Color,
        width: int,
    ) -> None:
        if len(path) < 2:
            return
        draw.line([self._to_pixel(p, bounds) for p in path], fill=color, width=width)

    def render(self, trace: RoutingTrace, output_path: str = "route_trace.png") -> str:
        """
        Render a trace as a PNG image.

        Args:
            trace: Trace filled in by a routing call
            output_path: Path to save the PNG file

        Returns:
            Path to the saved PNG file
        """
        bounds = self._bounds(trace)
        width = int(bounds.width * self.scale) + 2 * self.margin
        height = int(bounds.height * self.scale) + 2 * self.margin

        img = Image.new("RGB", (width, height), self.bg_color)
        draw = ImageDraw.Draw(img)

        # Canvas frame and centerlines
        draw.rectangle(
            [
                self._to_pixel(Point(bounds.x, bounds.y), bounds),
                self._to_pixel(Point(bounds.x2, bounds.y2), bounds),
            ],
            outline=self.canvas_outline,
        )
        self._draw_path(
            draw,
            [Point(bounds.center_x, bounds.y), Point(bounds.center_x, bounds.y2)],
            bounds,
            self.center_line,
            1,
        )
        self._draw_path(
            draw,
            [Point(bounds.x, bounds.center_y), Point(bounds.x2, bounds.center_y)],
            bounds,
            self.center_line,
            1,
        )

        fills = {
            "fiber": self.fiber_fill,
            "cable": self.cable_fill,
            "splitter": self.splitter_fill,
        }
        for kind, obstacles in trace.obstacles.by_kind():
            for obstacle in obstacles:
                self._draw_rect(draw, obstacle.rect, bounds, fills[kind])

        for connection in trace.connections:
            self._draw_path(
                draw, connection.path, bounds, self.connection_color, self.line_width
            )

        # Runners-up first so the winner is drawn on top
        for candidate in reversed(trace.ranked()[: self.top_candidates]):
            self._draw_path(draw, candidate.path, bounds, self.candidate_color, 1)

        self._draw_path(
            draw, trace.result, bounds, self.result_color, self.line_width + 1
        )

        for point in (trace.p1, trace.p2):
            if point is None:
                continue
            x, y = self._to_pixel(point, bounds)
            r = 2 * self.scale + 1
            draw.ellipse([x - r, y - r, x + r, y + r], fill=self.endpoint_color)

        img.save(output_path)
        return output_path


def render_trace_png(
    trace: RoutingTrace,
    output_path: str = "route_trace.png",
    renderer: Optional[TraceRenderer] = None,
) -> str:
    """Render ``trace`` to ``output_path`` with a default TraceRenderer."""
    return (renderer or TraceRenderer()).render(trace, output_path)
