"""
Geometry provider for device instances and their ports.

Port positions are stored on templates as percentages of the template's
image bounds. They are resolved here against the instance's effective size
(its own width/height override, or the template's nominal size), then
mirrored and rotated about the instance center.

Geometry never raises during interactive dragging: a port id that is not
on the template resolves to the instance origin (position) or to a
downward normal.
"""

import math
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

from .models import (
    DeviceInstance,
    DeviceTemplate,
    ExitDirection,
    Point,
    Rect,
    index_by_id,
)

# =============================================================================
# GEOMETRY CONFIGURATION
# =============================================================================

# Canvas snapping grid (canvas units)
SNAP_GRID_SIZE = 20

# Size used when an instance references a template that no longer exists
DEFAULT_DEVICE_SIZE = 100

# Percentage band along each edge within which a port is considered to sit
# on that edge when it has no explicit exit direction
EDGE_PROXIMITY_PERCENT = 10

DEFAULT_NORMAL = Point(0.0, 1.0)

_DIRECTION_VECTORS = {
    ExitDirection.TOP: (0.0, -1.0),
    ExitDirection.BOTTOM: (0.0, 1.0),
    ExitDirection.LEFT: (-1.0, 0.0),
    ExitDirection.RIGHT: (1.0, 0.0),
}

# =============================================================================


def snap_to_grid(value: float, grid: float = SNAP_GRID_SIZE) -> float:
    """Round a coordinate to the nearest grid line."""
    return round(value / grid) * grid


def effective_size(
    instance: DeviceInstance, template: Optional[DeviceTemplate]
) -> Tuple[float, float]:
    """Rendered (width, height) of an instance: override, template, default."""
    width = instance.width or (template.width if template else 0) or DEFAULT_DEVICE_SIZE
    height = (
        instance.height or (template.height if template else 0) or DEFAULT_DEVICE_SIZE
    )
    return width, height


def _rotate(dx: float, dy: float, degrees: float) -> Tuple[float, float]:
    if not degrees:
        return dx, dy
    angle = math.radians(degrees)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return dx * cos_a - dy * sin_a, dx * sin_a + dy * cos_a


def get_port_position(
    instance: DeviceInstance, template: DeviceTemplate, port_id: str
) -> Point:
    """
    Absolute canvas position of a port on a placed instance.

    Args:
        instance: The placed device.
        template: The template the instance was placed from.
        port_id: Port identifier on the template.

    Returns:
        The port position, or the instance origin if the port is unknown.
    """
    port = template.get_port(port_id)
    if port is None:
        return Point(instance.x, instance.y)

    width, height = effective_size(instance, template)
    port_x = width * (port.x / 100)
    port_y = height * (port.y / 100)
    if instance.mirrored:
        port_x = width - port_x

    # Offsets from the center, rotated about it
    dx, dy = _rotate(port_x - width / 2, port_y - height / 2, instance.rotation)
    return Point(instance.x + width / 2 + dx, instance.y + height / 2 + dy)


def get_port_normal(
    instance: DeviceInstance, template: DeviceTemplate, port_id: str
) -> Point:
    """
    Unit vector pointing away from the device body at a port.

    The port's explicit exit direction wins. Without one, the side is
    inferred from which edge the percentage position is closest to; ports
    deep inside the body exit through the nearer of top or bottom.
    """
    port = template.get_port(port_id)
    if port is None:
        return DEFAULT_NORMAL

    if port.exit_direction is not None:
        nx, ny = _DIRECTION_VECTORS[port.exit_direction]
        if instance.mirrored:
            nx = -nx
    else:
        px = 100 - port.x if instance.mirrored else port.x
        nx, ny = 0.0, 0.0
        if port.y < EDGE_PROXIMITY_PERCENT:
            ny = -1.0
        elif port.y > 100 - EDGE_PROXIMITY_PERCENT:
            ny = 1.0
        elif px < EDGE_PROXIMITY_PERCENT:
            nx = -1.0
        elif px > 100 - EDGE_PROXIMITY_PERCENT:
            nx = 1.0
        else:
            ny = -1.0 if port.y < 50 else 1.0

    rx, ry = _rotate(nx, ny, instance.rotation)
    # Clean up float noise so 90-degree rotations stay axis-aligned
    return Point(round(rx, 12) + 0.0, round(ry, 12) + 0.0)


def get_instance_rect(
    instance: DeviceInstance,
    templates: Union[Mapping[str, DeviceTemplate], Sequence[DeviceTemplate]],
) -> Rect:
    """
    Axis-aligned bounding box of an instance, for use as a routing obstacle.

    Rotation is not taken into account.
    """
    template = index_by_id(templates).get(instance.template_id)
    width, height = effective_size(instance, template)
    return Rect(instance.x, instance.y, width, height)


def find_intersection(
    p1: Tuple[float, float],
    p2: Tuple[float, float],
    p3: Tuple[float, float],
    p4: Tuple[float, float],
) -> Optional[Point]:
    """
    Intersection of segments p1-p2 and p3-p4.

    Only proper crossings count: the point must lie strictly inside both
    segments. Parallel segments never intersect.
    """
    det = (p2[0] - p1[0]) * (p4[1] - p3[1]) - (p4[0] - p3[0]) * (p2[1] - p1[1])
    if det == 0:
        return None

    lam = (
        (p4[1] - p3[1]) * (p4[0] - p1[0]) + (p3[0] - p4[0]) * (p4[1] - p1[1])
    ) / det
    gamma = (
        (p1[1] - p2[1]) * (p4[0] - p1[0]) + (p2[0] - p1[0]) * (p4[1] - p1[1])
    ) / det

    if 0 < lam < 1 and 0 < gamma < 1:
        return Point(p1[0] + lam * (p2[0] - p1[0]), p1[1] + lam * (p2[1] - p1[1]))
    return None


def bounding_box(points: Iterable[Tuple[float, float]]) -> Optional[Rect]:
    """Smallest Rect containing all points, or None for no points."""
    points = list(points)
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))
