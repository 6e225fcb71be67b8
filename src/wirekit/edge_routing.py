"""
Orthogonal wire routing between device ports.

Implements ``find_smart_path`` with:
- Stand-off legs so wires leave and enter ports perpendicular to the device,
  cut short where an obstacle sits closer than the stand-off distance
- A channel graph built from guide lines along obstacle edges
- A* search (networkx) with a bend penalty over the channel graph
- Collinear simplification of the resulting polyline

Obstacles are sparse axis-aligned rectangles, so instead of searching a
fine occupancy grid the router only considers turning points where guide
lines cross: the stand-off coordinates, their midpoints, the edges of every
obstacle grown by a clearance margin, and a frame around everything.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from .models import Point, Rect
from .tracer import RouteTrace

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTING CONFIGURATION - Adjust these values to tune routing behavior
# =============================================================================

# --- Distance/Spacing Parameters (canvas units) ---

# Length of the first and last leg, travelled along the port normal
# before the wire is allowed to turn
STANDOFF_DISTANCE = 40

# Margin kept between a wire and any device body it routes around
OBSTACLE_CLEARANCE = 20

# Extra room around all obstacles for the outermost detour lines
FRAME_MARGIN = 60

# --- Scoring ---

# Cost of a 90-degree turn, in canvas units of wire length
BEND_PENALTY = 30

# =============================================================================

HORIZONTAL = "h"
VERTICAL = "v"

ObstacleLike = Union[Rect, Tuple[float, float, float, float]]


@dataclass(frozen=True)
class RoutingConfig:
    """Per-call overrides for the routing constants above."""

    standoff: float = STANDOFF_DISTANCE
    clearance: float = OBSTACLE_CLEARANCE
    bend_penalty: float = BEND_PENALTY
    frame_margin: float = FRAME_MARGIN


def axis_normal(normal: Tuple[float, float]) -> Point:
    """
    Snap a normal to its dominant axis.

    Rotated devices can produce diagonal normals; the router only works
    with the four axis directions. A zero vector means "down".
    """
    dx, dy = normal
    if dx == 0 and dy == 0:
        return Point(0.0, 1.0)
    if abs(dx) >= abs(dy):
        return Point(1.0 if dx > 0 else -1.0, 0.0)
    return Point(0.0, 1.0 if dy > 0 else -1.0)


def _axis_of(normal: Point) -> str:
    return HORIZONTAL if normal.x != 0 else VERTICAL


def as_rect(obstacle: ObstacleLike) -> Rect:
    if isinstance(obstacle, Rect):
        return obstacle
    x, y, w, h = obstacle
    return Rect(x, y, w, h)


class ChannelGraph:
    """
    Turning-point graph for one routing attempt.

    Every free crossing of a vertical and a horizontal guide line becomes
    two nodes, one per travel axis. Moving along a guide line keeps the
    axis; switching axis at a node is a bend and costs the bend penalty.
    The graph is directed so that individual moves can be forbidden (a
    wire must not double back along its own stand-off leg).
    """

    def __init__(
        self,
        blockers: Sequence[Rect],
        xs: Iterable[float],
        ys: Iterable[float],
        bend_penalty: float = BEND_PENALTY,
    ):
        self.blockers = list(blockers)
        self.xs = sorted(set(xs))
        self.ys = sorted(set(ys))
        self.bend_penalty = bend_penalty
        self.graph = nx.DiGraph()

    def is_free(self, x: float, y: float) -> bool:
        """A point is free unless it is strictly inside a blocker."""
        for rect in self.blockers:
            if rect.contains_point(x, y):
                return False
        return True

    def build(self, forbidden: Set[Tuple[Tuple[float, float], Tuple[float, float]]]):
        """
        Populate the graph.

        Args:
            forbidden: Directed (from_point, to_point) moves to leave out.
        """
        free = {(x, y) for x in self.xs for y in self.ys if self.is_free(x, y)}

        for x in self.xs:
            for y in self.ys:
                if (x, y) not in free:
                    continue
                point = (x, y)
                self.graph.add_edge(
                    (point, HORIZONTAL), (point, VERTICAL), weight=self.bend_penalty
                )
                self.graph.add_edge(
                    (point, VERTICAL), (point, HORIZONTAL), weight=self.bend_penalty
                )

        # Blocker edges are guide lines, so a span between neighbouring
        # guide lines crosses a blocker only if its midpoint is inside it
        for y in self.ys:
            for xa, xb in zip(self.xs, self.xs[1:]):
                a, b = (xa, y), (xb, y)
                if a in free and b in free and self.is_free((xa + xb) / 2, y):
                    self._add_span(a, b, HORIZONTAL, xb - xa, forbidden)

        for x in self.xs:
            for ya, yb in zip(self.ys, self.ys[1:]):
                a, b = (x, ya), (x, yb)
                if a in free and b in free and self.is_free(x, (ya + yb) / 2):
                    self._add_span(a, b, VERTICAL, yb - ya, forbidden)

        return self

    def _add_span(self, a, b, axis, length, forbidden):
        if (a, b) not in forbidden:
            self.graph.add_edge((a, axis), (b, axis), weight=length)
        if (b, a) not in forbidden:
            self.graph.add_edge((b, axis), (a, axis), weight=length)

    def search(
        self, source: Point, source_axis: str, target: Point, target_axis: str
    ) -> Optional[List[Point]]:
        """
        Shortest bend-penalised path between two grid points.

        Returns:
            The turning points from source to target, or None if the target
            cannot be reached.
        """
        goal = tuple(target)

        def heuristic(node, _):
            (x, y), _axis = node
            return abs(x - goal[0]) + abs(y - goal[1])

        try:
            nodes = nx.astar_path(
                self.graph,
                (tuple(source), source_axis),
                (goal, target_axis),
                heuristic=heuristic,
                weight="weight",
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

        points: List[Point] = []
        for (x, y), _axis in nodes:
            point = Point(x, y)
            if not points or points[-1] != point:
                points.append(point)
        return points


def simplify_waypoints(points: Sequence[Tuple[float, float]]) -> List[Point]:
    """
    Drop repeated points and points in the middle of a straight run.

    A point where the path doubles back on itself is kept, so a stand-off
    leg is never folded away.
    """
    deduped: List[Point] = []
    for p in points:
        point = Point(*p)
        if not deduped or deduped[-1] != point:
            deduped.append(point)

    if len(deduped) < 3:
        return deduped

    simplified = [deduped[0]]
    for curr, nxt in zip(deduped[1:], deduped[2:]):
        prev = simplified[-1]
        passes_through = (
            prev.x == curr.x == nxt.x and (prev.y - curr.y) * (nxt.y - curr.y) < 0
        ) or (prev.y == curr.y == nxt.y and (prev.x - curr.x) * (nxt.x - curr.x) < 0)
        if not passes_through:
            simplified.append(curr)
    simplified.append(deduped[-1])
    return simplified


def path_length(points: Sequence[Tuple[float, float]]) -> float:
    """Total Manhattan length of a polyline."""
    return sum(
        abs(b[0] - a[0]) + abs(b[1] - a[1]) for a, b in zip(points, points[1:])
    )


def count_bends(points: Sequence[Tuple[float, float]]) -> int:
    """Number of direction changes along a polyline."""
    simplified = simplify_waypoints(points)
    return max(0, len(simplified) - 2)


def is_orthogonal(points: Sequence[Tuple[float, float]]) -> bool:
    """True if every segment is horizontal or vertical."""
    return all(a[0] == b[0] or a[1] == b[1] for a, b in zip(points, points[1:]))


def path_crosses_obstacles(
    points: Sequence[Tuple[float, float]], obstacles: Iterable[ObstacleLike]
) -> bool:
    """True if any segment of the polyline enters an obstacle's interior."""
    rects = [as_rect(o) for o in obstacles]
    for a, b in zip(points, points[1:]):
        for rect in rects:
            if rect.segment_crosses(a, b):
                return True
    return False


def _guide_lines(
    s: Point, e: Point, blockers: Sequence[Rect], frame_margin: float
) -> Tuple[List[float], List[float]]:
    xs = [s.x, e.x, (s.x + e.x) / 2]
    ys = [s.y, e.y, (s.y + e.y) / 2]
    for rect in blockers:
        xs.extend((rect.x, rect.x2))
        ys.extend((rect.y, rect.y2))
    xs.extend((min(xs) - frame_margin, max(xs) + frame_margin))
    ys.extend((min(ys) - frame_margin, max(ys) + frame_margin))
    return xs, ys


def _forbidden_moves(s: Point, n_s: Point, e: Point, n_e: Point, xs, ys):
    """
    Moves that would double back along a stand-off leg.

    Leaving ``s`` towards the start port, or arriving at ``e`` from the
    side of the end port.
    """
    forbidden = set()
    xs = sorted(set(xs))
    ys = sorted(set(ys))
    for point, direction, leaving in ((s, n_s, True), (e, n_e, False)):
        # Neighbour on the device side of the stand-off point
        dx, dy = -direction.x, -direction.y
        neighbour = _grid_neighbour(point, dx, dy, xs, ys)
        if neighbour is None:
            continue
        move = (tuple(point), neighbour) if leaving else (neighbour, tuple(point))
        forbidden.add(move)
    return forbidden


def _grid_neighbour(point, dx, dy, xs, ys):
    x, y = point
    if dx > 0:
        candidates = [v for v in xs if v > x]
        return (candidates[0], y) if candidates else None
    if dx < 0:
        candidates = [v for v in xs if v < x]
        return (candidates[-1], y) if candidates else None
    if dy > 0:
        candidates = [v for v in ys if v > y]
        return (x, candidates[0]) if candidates else None
    candidates = [v for v in ys if v < y]
    return (x, candidates[-1]) if candidates else None


def _standoff_length(port: Point, normal: Point, standoff: float, blockers) -> float:
    """
    Length of a stand-off leg, cut short at the first blocker it would enter.

    A blocker sitting closer to the port than the stand-off distance ends
    the leg on its near edge, so the leg itself never crosses it.
    """
    tip = (port.x + normal.x * standoff, port.y + normal.y * standoff)
    length = standoff
    for rect in blockers:
        if not rect.segment_crosses(port, tip):
            continue
        if normal.x > 0:
            gap = rect.x - port.x
        elif normal.x < 0:
            gap = port.x - rect.x2
        elif normal.y > 0:
            gap = rect.y - port.y
        else:
            gap = port.y - rect.y2
        length = min(length, max(gap, 0.0))
    return length


def _fallback_path(s: Point, e: Point, n_s: Point) -> List[Point]:
    """Unrouted Z shape between the stand-off points."""
    if _axis_of(n_s) == HORIZONTAL:
        mid_x = (s.x + e.x) / 2
        return [s, Point(mid_x, s.y), Point(mid_x, e.y), e]
    mid_y = (s.y + e.y) / 2
    return [s, Point(s.x, mid_y), Point(e.x, mid_y), e]


def find_smart_path(
    start: Tuple[float, float],
    end: Tuple[float, float],
    start_normal: Tuple[float, float],
    end_normal: Tuple[float, float],
    obstacles: Iterable[ObstacleLike],
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> List[Point]:
    """
    Route an orthogonal wire from ``start`` to ``end`` around obstacles.

    Args:
        start: Start port position.
        end: End port position.
        start_normal: Outward normal at the start port.
        end_normal: Outward normal at the end port.
        obstacles: Device rectangles to route around.
        config: Optional routing overrides.
        trace: Optional RouteTrace to record routing stages into.

    Returns:
        The elbow points between start and end (start and end themselves
        are not included). An empty list means the wire is a straight run.

    Example:
        >>> find_smart_path((0, 0), (200, 0), (0, 1), (0, 1), [])
        [Point(x=0.0, y=40.0), Point(x=200.0, y=40.0)]
    """
    config = config or RoutingConfig()
    start = Point(float(start[0]), float(start[1]))
    end = Point(float(end[0]), float(end[1]))
    n_s = axis_normal(start_normal)
    n_e = axis_normal(end_normal)

    rects = [as_rect(o) for o in obstacles]
    # An obstacle enclosing an endpoint is the wire's own device body
    blockers = [
        r for r in rects if not (r.contains_point(*start) or r.contains_point(*end))
    ]

    start_leg = _standoff_length(start, n_s, config.standoff, blockers)
    end_leg = _standoff_length(end, n_e, config.standoff, blockers)
    if start_leg < config.standoff or end_leg < config.standoff:
        logger.debug(
            "Stand-off shortened by an obstacle: start %s, end %s", start_leg, end_leg
        )
    s = Point(start.x + n_s.x * start_leg, start.y + n_s.y * start_leg)
    e = Point(end.x + n_e.x * end_leg, end.y + n_e.y * end_leg)

    if trace is not None:
        trace.add_stage(
            "standoff",
            {
                "start": start,
                "end": end,
                "start_normal": n_s,
                "end_normal": n_e,
                "start_standoff": s,
                "end_standoff": e,
                "start_standoff_length": start_leg,
                "end_standoff_length": end_leg,
                "obstacles": len(rects),
                "ignored_obstacles": len(rects) - len(blockers),
            },
        )

    clearances = [config.clearance]
    if config.clearance:
        clearances.append(0)

    route = None
    for clearance in clearances:
        inflated = [r.inflate(clearance) for r in blockers]
        xs, ys = _guide_lines(s, e, inflated, config.frame_margin)
        channels = ChannelGraph(inflated, xs, ys, config.bend_penalty)
        channels.build(_forbidden_moves(s, n_s, e, n_e, xs, ys))
        route = channels.search(s, _axis_of(n_s), e, _axis_of(n_e))

        if trace is not None:
            trace.add_stage(
                "channel_graph",
                {
                    "clearance": clearance,
                    "vertical_lines": len(channels.xs),
                    "horizontal_lines": len(channels.ys),
                    "nodes": channels.graph.number_of_nodes(),
                    "edges": channels.graph.number_of_edges(),
                },
            )
            trace.add_stage(
                "search", {"clearance": clearance, "found": route is not None}
            )
        if route is not None:
            break
        logger.debug("No channel route with clearance %s", clearance)

    if route is None:
        logger.warning(
            "Could not route around obstacles from %s to %s; using direct path",
            start,
            end,
        )
        route = _fallback_path(s, e, n_s)
        if trace is not None:
            trace.add_stage("fallback", {"points": route})

    elbows = simplify_waypoints([start, *route, end])[1:-1]

    if trace is not None:
        trace.add_stage("result", {"elbows": elbows, "bends": len(elbows)})
    return elbows
