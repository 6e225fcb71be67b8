"""
PNG snapshots of a routing call, for debugging.

Draws the obstacles, their clearance margins, and the routed wire with
its stand-off legs highlighted, so a surprising detour can be inspected
visually.

Usage:
    >>> elbows = find_smart_path(start, end, n1, n2, obstacles)
    >>> render_route_png(start, end, elbows, obstacles, "route.png")
"""

import math
from typing import Iterable, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from .edge_routing import ObstacleLike, RoutingConfig, as_rect
from .geometry import bounding_box

BG_COLOR = (255, 255, 255)
OBSTACLE_FILL = (220, 220, 220)
OBSTACLE_OUTLINE = (90, 90, 90)
CLEARANCE_COLOR = (170, 190, 230)
WIRE_COLOR = (20, 20, 20)
STANDOFF_COLOR = (210, 60, 40)
ELBOW_COLOR = (40, 120, 200)


def render_route_png(
    start: Tuple[float, float],
    end: Tuple[float, float],
    elbows: Sequence[Tuple[float, float]],
    obstacles: Iterable[ObstacleLike],
    filename: Optional[str] = None,
    scale: int = 2,
    margin: int = 40,
    config: Optional[RoutingConfig] = None,
) -> Image.Image:
    """
    Render one routed wire and its obstacles.

    Args:
        start: Start port position.
        end: End port position.
        elbows: Elbow points returned by ``find_smart_path``.
        obstacles: Obstacles the wire was routed around.
        filename: If given, the image is also saved there as PNG.
        scale: Pixels per canvas unit.
        margin: Blank border around the drawing, in canvas units.
        config: Routing config, used for the clearance outline.

    Returns:
        The rendered PIL image.
    """
    config = config or RoutingConfig()
    rects = [as_rect(o) for o in obstacles]
    inflated = [r.inflate(config.clearance) for r in rects]
    points = [tuple(start), *(tuple(p) for p in elbows), tuple(end)]

    extent_points = list(points)
    for rect in inflated:
        extent_points.extend([(rect.x, rect.y), (rect.x2, rect.y2)])
    box = bounding_box(extent_points)
    origin_x = box.x - margin
    origin_y = box.y - margin
    width = max(1, math.ceil((box.width + 2 * margin) * scale))
    height = max(1, math.ceil((box.height + 2 * margin) * scale))

    def to_px(p):
        return ((p[0] - origin_x) * scale, (p[1] - origin_y) * scale)

    img = Image.new("RGB", (width, height), BG_COLOR)
    draw = ImageDraw.Draw(img)

    # Clearance margins first, then the device bodies on top
    for rect in inflated:
        draw.rectangle(
            [to_px((rect.x, rect.y)), to_px((rect.x2, rect.y2))],
            outline=CLEARANCE_COLOR,
            width=1,
        )
    for rect in rects:
        draw.rectangle(
            [to_px((rect.x, rect.y)), to_px((rect.x2, rect.y2))],
            fill=OBSTACLE_FILL,
            outline=OBSTACLE_OUTLINE,
            width=scale,
        )

    line_width = max(1, scale)
    for i, (p1, p2) in enumerate(zip(points, points[1:])):
        is_standoff = i == 0 or i == len(points) - 2
        color = STANDOFF_COLOR if is_standoff and len(points) > 2 else WIRE_COLOR
        draw.line([to_px(p1), to_px(p2)], fill=color, width=line_width)

    dot = 2 * scale
    for p in points[1:-1]:
        x, y = to_px(p)
        draw.ellipse([x - dot, y - dot, x + dot, y + dot], fill=ELBOW_COLOR)
    for p in (points[0], points[-1]):
        x, y = to_px(p)
        draw.rectangle([x - dot, y - dot, x + dot, y + dot], fill=STANDOFF_COLOR)

    if filename:
        img.save(filename, "PNG")
    return img
