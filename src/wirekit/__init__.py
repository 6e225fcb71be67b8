"""
wirekit - Schematic connectivity engine

Decides whether two device ports may be wired together, where the wire
runs once they are, and which wirings to propose automatically.

Example:
    >>> from wirekit import find_smart_path, run_drc
    >>> elbows = find_smart_path((0, 0), (200, 0), (0, 1), (0, 1), [])
    >>> result = run_drc(connections, instances, templates)
    >>> result.is_valid
    True

Debug Mode Example:
    >>> from wirekit import RouteTrace
    >>> trace = RouteTrace()
    >>> elbows = find_smart_path(start, end, n1, n2, obstacles, trace=trace)
    >>> print(trace.summary())
"""

import logging

from .autowire import (
    SIGNAL_GROUPS,
    are_ports_compatible,
    find_signal_group,
    normalize_pin_name,
    suggest_connections,
    suggest_power_connections,
)
from .connectors import ConnectorType, connector_label, connectors_match
from .debug import render_route_png
from .drc import (
    ConnectionCheck,
    check_connection_validity,
    parse_voltage,
    run_drc,
    validate_connection,
    validate_port_compatibility,
)
from .edge_drawing import (
    Segment,
    build_route_path,
    find_wire_jumps,
    orthogonal_segments,
    round_polyline,
)
from .edge_routing import RoutingConfig, find_smart_path, simplify_waypoints
from .geometry import (
    find_intersection,
    get_instance_rect,
    get_port_normal,
    get_port_position,
    snap_to_grid,
)
from .models import (
    Connection,
    ConnectionShape,
    DeviceInstance,
    DeviceTemplate,
    DRCIssue,
    DRCResult,
    ExitDirection,
    FlowType,
    IssueKind,
    Point,
    Port,
    PortIssue,
    PowerKind,
    Rect,
    Severity,
    WiringSuggestion,
    index_by_id,
    resolve_endpoints,
    resolve_port,
)
from .router import (
    RoutedWire,
    auto_route,
    collect_obstacles,
    route_connection,
    route_connections,
)
from .tracer import RouteStage, RouteTrace

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Point",
    "Rect",
    "Port",
    "DeviceTemplate",
    "DeviceInstance",
    "Connection",
    "ConnectionShape",
    "ConnectorType",
    "ExitDirection",
    "FlowType",
    "PowerKind",
    "IssueKind",
    "Severity",
    "PortIssue",
    "DRCIssue",
    "DRCResult",
    "WiringSuggestion",
    "index_by_id",
    "resolve_port",
    "resolve_endpoints",
    "connector_label",
    "connectors_match",
    # Geometry
    "get_port_position",
    "get_port_normal",
    "get_instance_rect",
    "snap_to_grid",
    "find_intersection",
    # DRC
    "ConnectionCheck",
    "parse_voltage",
    "validate_port_compatibility",
    "check_connection_validity",
    "validate_connection",
    "run_drc",
    # Routing
    "RoutingConfig",
    "find_smart_path",
    "simplify_waypoints",
    "RoutedWire",
    "collect_obstacles",
    "route_connection",
    "route_connections",
    "auto_route",
    # Drawing
    "Segment",
    "orthogonal_segments",
    "find_wire_jumps",
    "round_polyline",
    "build_route_path",
    # Auto-wire
    "SIGNAL_GROUPS",
    "normalize_pin_name",
    "find_signal_group",
    "are_ports_compatible",
    "suggest_connections",
    "suggest_power_connections",
    # Debug/Tracing (for development and debugging)
    "RouteTrace",
    "RouteStage",
    "render_route_png",
]
