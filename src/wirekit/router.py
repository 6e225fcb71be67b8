"""
Page-level routing: turns stored connections into orthogonal wires.

Resolves each connection's endpoints through the geometry provider,
collects the other devices on the page as obstacles and hands everything
to ``find_smart_path``.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Collection, Iterable, List, Mapping, Optional, Sequence, Union

from .edge_routing import ObstacleLike, RoutingConfig, find_smart_path
from .geometry import get_instance_rect, get_port_normal, get_port_position
from .models import (
    Connection,
    ConnectionShape,
    DeviceInstance,
    DeviceTemplate,
    Point,
    Rect,
    index_by_id,
    resolve_endpoints,
)
from .tracer import RouteTrace

logger = logging.getLogger(__name__)

Instances = Union[Mapping[str, DeviceInstance], Sequence[DeviceInstance]]
Templates = Union[Mapping[str, DeviceTemplate], Sequence[DeviceTemplate]]


@dataclass
class RoutedWire:
    """
    A routed connection.

    Attributes:
        connection_id: The connection this wire belongs to.
        start: Position of the ``from`` port.
        end: Position of the ``to`` port.
        elbows: Turning points between start and end.
    """

    connection_id: str
    start: Point
    end: Point
    elbows: List[Point]

    @property
    def points(self) -> List[Point]:
        """Full polyline including both endpoints."""
        return [self.start, *self.elbows, self.end]


def collect_obstacles(
    instances: Instances, templates: Templates, exclude: Collection[str] = ()
) -> List[Rect]:
    """
    Bounding rectangles of every instance, except the excluded ids.

    Instances are visited in their given order so routing stays
    deterministic.
    """
    templates = index_by_id(templates)
    instances = index_by_id(instances)
    return [
        get_instance_rect(instance, templates)
        for instance_id, instance in instances.items()
        if instance_id not in exclude
    ]


def route_connection(
    connection: Connection,
    instances: Instances,
    templates: Templates,
    obstacles: Optional[Iterable[ObstacleLike]] = None,
    config: Optional[RoutingConfig] = None,
    trace: Optional[RouteTrace] = None,
) -> Optional[RoutedWire]:
    """
    Route one connection around the devices on the page.

    Every device on the page is an obstacle, including the two the wire
    connects: a port on a body edge is not inside the body, so the wire
    leaves along its stand-off leg and then keeps clear of its own device.

    Args:
        connection: The connection to route.
        instances: Instances by id (or a sequence of instances).
        templates: Templates by id (or a sequence of templates).
        obstacles: Explicit obstacles; by default every device on the page.
        config: Optional routing overrides.
        trace: Optional RouteTrace to record routing stages into.

    Returns:
        The routed wire, or None if an endpoint no longer resolves.
    """
    instances = index_by_id(instances)
    templates = index_by_id(templates)
    resolved = resolve_endpoints(connection, instances, templates)
    if resolved is None:
        return None
    (from_instance, from_template, _), (to_instance, to_template, _) = resolved

    start = get_port_position(from_instance, from_template, connection.from_port_id)
    end = get_port_position(to_instance, to_template, connection.to_port_id)
    start_normal = get_port_normal(
        from_instance, from_template, connection.from_port_id
    )
    end_normal = get_port_normal(to_instance, to_template, connection.to_port_id)

    if obstacles is None:
        obstacles = collect_obstacles(instances, templates)
    elbows = find_smart_path(
        start, end, start_normal, end_normal, obstacles, config=config, trace=trace
    )
    logger.debug("Routed %s with %d elbows", connection.id, len(elbows))
    return RoutedWire(connection.id, start, end, elbows)


def route_connections(
    connections: Iterable[Connection],
    instances: Instances,
    templates: Templates,
    config: Optional[RoutingConfig] = None,
) -> List[RoutedWire]:
    """Route every connection; dangling ones are left out."""
    instances = index_by_id(instances)
    templates = index_by_id(templates)
    wires = []
    for connection in connections:
        wire = route_connection(connection, instances, templates, config=config)
        if wire is not None:
            wires.append(wire)
    return wires


def auto_route(
    connection: Connection,
    instances: Instances,
    templates: Templates,
    config: Optional[RoutingConfig] = None,
) -> Connection:
    """
    Return a copy of ``connection`` reshaped as an orthogonal wire.

    The elbows become the connection's control points. A dangling
    connection is returned unchanged.
    """
    wire = route_connection(connection, instances, templates, config=config)
    if wire is None:
        return connection
    return dataclasses.replace(
        connection,
        shape=ConnectionShape.ORTHOGONAL,
        control_points=list(wire.elbows),
    )
