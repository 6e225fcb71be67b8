"""
Drawable wire paths.

Turns a wire (start, end, shape, control points) into SVG path data:
- Orthogonal wires get rounded corners and semicircular hops where they
  jump over another wire
- Curved wires become a cubic Bezier whose handles follow the port normals
- Straight wires are a single line

Jumps are assigned to vertical segments only: where a vertical segment of
one wire crosses a horizontal segment of another, the vertical wire hops.
That way exactly one of two crossing wires draws the hop.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .geometry import bounding_box, find_intersection
from .models import ConnectionShape, Point

# =============================================================================
# DRAWING CONFIGURATION
# =============================================================================

# Radius of the semicircular hop drawn where a wire jumps another
JUMP_RADIUS = 6

# A jump point further than this (cross product) from a segment is not on it
JUMP_TOLERANCE = 1

# Length of the stand-off leg for orthogonal wires without control points
ORTHOGONAL_BUFFER = 40

# Bezier handle length: a share of the endpoint distance, with a floor
CURVE_HANDLE_RATIO = 0.4
CURVE_HANDLE_MIN = 50

# Segments shorter than this in x are treated as vertical
VERTICAL_TOLERANCE = 0.1

# =============================================================================


@dataclass
class Segment:
    """One straight piece of a wire."""

    p1: Point
    p2: Point
    is_vertical: bool


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _pt(point: Tuple[float, float]) -> str:
    return f"{_fmt(point[0])} {_fmt(point[1])}"


def orthogonal_segments(
    start: Tuple[float, float],
    end: Tuple[float, float],
    control_points: Sequence[Tuple[float, float]] = (),
) -> List[Segment]:
    """Split the polyline start -> control points -> end into segments."""
    points = [Point(*start), *(Point(*p) for p in control_points), Point(*end)]
    return [
        Segment(a, b, abs(a.x - b.x) < VERTICAL_TOLERANCE)
        for a, b in zip(points, points[1:])
    ]


def _boxes_overlap(a, b) -> bool:
    return not (a.x2 < b.x or a.x > b.x2 or a.y2 < b.y or a.y > b.y2)


def find_wire_jumps(
    points: Sequence[Tuple[float, float]],
    other_wires: Iterable[Sequence[Tuple[float, float]]],
) -> List[Point]:
    """
    Points where this wire must hop over other wires.

    Args:
        points: Full polyline of this wire, start and end included.
        other_wires: Full polylines of the other orthogonal wires on the page.

    Returns:
        Crossing points of this wire's vertical segments with the other
        wires' horizontal segments, in discovery order. Crossings at a
        segment endpoint (a T-junction or shared corner) are not jumps.
    """
    if len(points) < 2:
        return []
    my_box = bounding_box(points)
    my_segments = orthogonal_segments(points[0], points[-1], points[1:-1])

    jumps: List[Point] = []
    for other in other_wires:
        if len(other) < 2:
            continue
        if not _boxes_overlap(my_box, bounding_box(other)):
            continue
        other_segments = orthogonal_segments(other[0], other[-1], other[1:-1])

        for mine in my_segments:
            if not mine.is_vertical:
                continue
            for theirs in other_segments:
                if theirs.is_vertical:
                    continue
                crossing = find_intersection(mine.p1, mine.p2, theirs.p1, theirs.p2)
                if crossing is None:
                    continue
                if crossing in (mine.p1, mine.p2, theirs.p1, theirs.p2):
                    continue
                jumps.append(crossing)
    return jumps


def _segment_jumps(prev: Point, curr: Point, jumps: Sequence[Point]) -> List[Point]:
    dx = curr.x - prev.x
    dy = curr.y - prev.y
    length_sq = dx * dx + dy * dy
    on_segment = []
    for jump in jumps:
        cross = abs(dx * (prev.y - jump[1]) - (prev.x - jump[0]) * dy)
        if cross > JUMP_TOLERANCE:
            continue
        dot = (jump[0] - prev.x) * dx + (jump[1] - prev.y) * dy
        if 0 < dot < length_sq:
            on_segment.append(Point(*jump))
    on_segment.sort(key=lambda j: (j.x - prev.x) ** 2 + (j.y - prev.y) ** 2)
    return on_segment


def round_polyline(
    points: Sequence[Tuple[float, float]],
    radius: float,
    jumps: Sequence[Tuple[float, float]] = (),
) -> str:
    """
    SVG path data for a polyline with rounded corners and jump hops.

    Each interior vertex is replaced by a circular arc of radius
    ``min(radius, len_in / 2, len_out / 2)``; a radius of 0 keeps sharp
    corners. Each jump point lying on a segment is drawn as a semicircle
    of JUMP_RADIUS.

    Returns:
        Path data such as ``"M 0 0 L 100 0"``, or "" for fewer than two
        points.
    """
    pts = []
    for p in points:
        point = Point(*p)
        if not pts or pts[-1] != point:
            pts.append(point)
    if len(pts) < 2:
        return ""

    lengths = [math.dist(a, b) for a, b in zip(pts, pts[1:])]
    # Corner radius at each interior vertex
    corner_r = [0.0] * len(pts)
    for i in range(1, len(pts) - 1):
        a, b, c = pts[i - 1], pts[i], pts[i + 1]
        if (b.x - a.x) * (c.y - b.y) - (b.y - a.y) * (c.x - b.x) == 0:
            continue  # straight through, nothing to round
        corner_r[i] = max(0.0, min(radius, lengths[i - 1] / 2, lengths[i] / 2))

    parts = [f"M {_pt(pts[0])}"]
    for i in range(1, len(pts)):
        prev, curr = pts[i - 1], pts[i]
        length = lengths[i - 1]
        ux = (curr.x - prev.x) / length
        uy = (curr.y - prev.y) / length

        # The previous corner arc already carried the pen this far
        cursor = corner_r[i - 1]
        for jump in _segment_jumps(prev, curr, jumps):
            along = math.dist(prev, jump)
            approach = along - JUMP_RADIUS
            if approach > cursor:
                approach_point = (prev.x + ux * approach, prev.y + uy * approach)
                parts.append(f"L {_pt(approach_point)}")
            hop_end = (jump.x + ux * JUMP_RADIUS, jump.y + uy * JUMP_RADIUS)
            hop = _fmt(JUMP_RADIUS)
            parts.append(f"A {hop} {hop} 0 0 1 {_pt(hop_end)}")
            cursor = along + JUMP_RADIUS

        r = corner_r[i] if i < len(pts) - 1 else 0.0
        stop = length - r
        if stop > cursor:
            parts.append(f"L {_pt((prev.x + ux * stop, prev.y + uy * stop))}")

        if r > 0:
            nxt = pts[i + 1]
            vx = (nxt.x - curr.x) / lengths[i]
            vy = (nxt.y - curr.y) / lengths[i]
            sweep = 1 if ux * vy - uy * vx > 0 else 0
            arc_end = (curr.x + vx * r, curr.y + vy * r)
            parts.append(f"A {_fmt(r)} {_fmt(r)} 0 0 {sweep} {_pt(arc_end)}")

    return " ".join(parts)


def build_route_path(
    start: Tuple[float, float],
    end: Tuple[float, float],
    shape: ConnectionShape = ConnectionShape.CURVED,
    control_points: Optional[Sequence[Tuple[float, float]]] = None,
    start_normal: Optional[Tuple[float, float]] = None,
    end_normal: Optional[Tuple[float, float]] = None,
    radius: float = 0,
    jumps: Sequence[Tuple[float, float]] = (),
) -> str:
    """
    SVG path data for a wire of any shape.

    Args:
        start: Position of the ``from`` port.
        end: Position of the ``to`` port.
        shape: Wire shape.
        control_points: Intermediate points owned by the connection.
        start_normal: Outward normal at the start port.
        end_normal: Outward normal at the end port.
        radius: Corner radius for orthogonal wires.
        jumps: Jump points, usually from ``find_wire_jumps``.

    Returns:
        SVG path data string.
    """
    start = Point(*start)
    end = Point(*end)
    shape = ConnectionShape(shape)

    if control_points:
        if shape is ConnectionShape.ORTHOGONAL:
            return round_polyline([start, *control_points, end], radius, jumps)
        # Straight and curved wires through control points are polylines
        return " ".join(
            [f"M {_pt(start)}"]
            + [f"L {_pt(p)}" for p in control_points]
            + [f"L {_pt(end)}"]
        )

    if shape is ConnectionShape.STRAIGHT:
        return f"M {_pt(start)} L {_pt(end)}"

    if shape is ConnectionShape.ORTHOGONAL:
        # Unrouted wire: leave along the start normal, then a Z to the end
        snx, sny = start_normal if start_normal is not None else (0, 1)
        p1 = Point(start.x + snx * ORTHOGONAL_BUFFER, start.y + sny * ORTHOGONAL_BUFFER)
        mid_x = (p1.x + end.x) / 2
        points = [start, p1, Point(mid_x, p1.y), Point(mid_x, end.y), end]
        return round_polyline(points, radius, jumps)

    distance = math.dist(start, end)
    handle = max(distance * CURVE_HANDLE_RATIO, CURVE_HANDLE_MIN)
    snx, sny = start_normal if start_normal is not None else (0, 0)
    enx, eny = end_normal if end_normal is not None else (0, 0)
    cp1 = (start.x + snx * handle, start.y + sny * handle)
    cp2 = (end.x + enx * handle, end.y + eny * handle)
    return f"M {_pt(start)} C {_pt(cp1)}, {_pt(cp2)}, {_pt(end)}"
