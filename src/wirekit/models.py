"""
Data models for the schematic connectivity engine.

This module contains the dataclasses shared by the geometry provider, the
compatibility validator, the orthogonal router and the auto-wire matcher.
All of them are plain values: the engine never mutates them and holds no
state between calls.

Classes:
    Point: A canvas coordinate or a 2D direction vector.
    Rect: Axis-aligned rectangle, used as a routing obstacle.
    Port: A connection point defined on a device template.
    DeviceTemplate: A library device with its nominal size and ports.
    DeviceInstance: A placed occurrence of a template on a page.
    Connection: A wire between two (instance, port) endpoints.
    PortIssue: A compatibility problem between two ports.
    DRCIssue: A PortIssue attached to a stored connection.
    DRCResult: Errors and warnings of a full design rule check.
    WiringSuggestion: A proposed connection from the auto-wire matcher.

Lookups:
    index_by_id, resolve_port, resolve_endpoints
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import (
    Iterable,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from .connectors import ConnectorType

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    """A canvas coordinate, also used as a 2D vector (port normals)."""

    x: float
    y: float


Vector = Point


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in canvas units.

    Obstacle rectangles are derived from device instances for every routing
    call and never stored.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def inflate(self, margin: float) -> "Rect":
        """Return a copy grown by ``margin`` on every side."""
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains_point(self, x: float, y: float) -> bool:
        """True if (x, y) lies strictly inside the rectangle (not on its edge)."""
        return self.x < x < self.x2 and self.y < y < self.y2

    def segment_crosses(self, p1: Tuple[float, float], p2: Tuple[float, float]) -> bool:
        """
        Check whether an axis-aligned segment enters the rectangle's interior.

        Segments running along an edge or touching a corner do not count.
        """
        x1, y1 = p1
        x2, y2 = p2
        if y1 == y2:  # Horizontal
            if not self.y < y1 < self.y2:
                return False
            return max(x1, x2) > self.x and min(x1, x2) < self.x2
        if x1 == x2:  # Vertical
            if not self.x < x1 < self.x2:
                return False
            return max(y1, y2) > self.y and min(y1, y2) < self.y2
        # Diagonal segments are not produced by the router; test the midpoint
        return self.contains_point((x1 + x2) / 2, (y1 + y2) / 2)


class FlowType(Enum):
    """Signal direction of a port."""

    INPUT = "input"
    OUTPUT = "output"
    BIDIRECTIONAL = "bidirectional"

    @classmethod
    def parse(cls, value: Union[str, "FlowType", None]) -> "FlowType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown flow type %r, treating as bidirectional", value)
            return cls.BIDIRECTIONAL


class ExitDirection(Enum):
    """Preferred side for a wire to leave a port."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class PowerKind(Enum):
    AC = "AC"
    DC = "DC"


class ConnectionShape(Enum):
    CURVED = "curved"
    STRAIGHT = "straight"
    ORTHOGONAL = "orthogonal"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueKind(Enum):
    """Kinds of compatibility problems, in the order the rules run."""

    INPUT_TO_INPUT = "input-to-input"
    OUTPUT_TO_OUTPUT = "output-to-output"
    CONNECTOR_MISMATCH = "connector-mismatch"
    GROUND_MISMATCH = "ground-mismatch"
    VOLTAGE_MISMATCH = "voltage-mismatch"
    POWER_TYPE_MISMATCH = "power-type-mismatch"

    @property
    def severity(self) -> Severity:
        if self in (IssueKind.INPUT_TO_INPUT, IssueKind.OUTPUT_TO_OUTPUT):
            return Severity.WARNING
        return Severity.ERROR


def _parse_optional_enum(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for candidate in (text, text.lower(), text.upper()):
        try:
            return enum_cls(candidate)
        except ValueError:
            continue
    if text:
        logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, value)
    return None


@dataclass
class Port:
    """
    A connection point on a device template.

    Attributes:
        id: Identifier, unique within the template.
        label: Display name, used by the auto-wire matcher.
        x: Horizontal position as a percentage (0-100) of the template width.
        y: Vertical position as a percentage (0-100) of the template height.
        flow_type: Input, output or bidirectional.
        connector_type: Physical connector family.
        exit_direction: Preferred side for the wire to leave, if any.
        is_power: Port carries power.
        is_ground: Port is a ground/return.
        power_kind: AC or DC, if known.
        voltage: Free-form voltage such as "12V" or "3.3 V".
        amperage: Free-form current rating.
    """

    id: str
    label: str = ""
    x: float = 50.0
    y: float = 50.0
    flow_type: FlowType = FlowType.BIDIRECTIONAL
    connector_type: ConnectorType = ConnectorType.GENERIC
    exit_direction: Optional[ExitDirection] = None
    is_power: bool = False
    is_ground: bool = False
    power_kind: Optional[PowerKind] = None
    voltage: Optional[str] = None
    amperage: Optional[str] = None

    def __post_init__(self):
        # Accept the string forms stored in diagrams
        self.flow_type = FlowType.parse(self.flow_type)
        self.connector_type = ConnectorType.parse(self.connector_type)
        self.exit_direction = _parse_optional_enum(ExitDirection, self.exit_direction)
        self.power_kind = _parse_optional_enum(PowerKind, self.power_kind)


@dataclass
class DeviceTemplate:
    """A library device: nominal size in canvas units plus its ports."""

    id: str
    name: str = ""
    width: float = 100.0
    height: float = 100.0
    ports: List[Port] = field(default_factory=list)

    def get_port(self, port_id: str) -> Optional[Port]:
        for port in self.ports:
            if port.id == port_id:
                return port
        return None


@dataclass
class DeviceInstance:
    """
    A placed device on a page.

    Ports are not owned by the instance; they are inherited from the
    template referenced by ``template_id``.

    Attributes:
        id: Instance identifier.
        template_id: Template this instance was placed from.
        x: Left edge in canvas units.
        y: Top edge in canvas units.
        width: Optional override of the template width.
        height: Optional override of the template height.
        rotation: Rotation in degrees, clockwise on screen.
        mirrored: Horizontal flip.
    """

    id: str
    template_id: str
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: float = 0.0
    mirrored: bool = False


@dataclass
class Connection:
    """A wire between two (instance, port) endpoints."""

    id: str
    from_instance_id: str
    from_port_id: str
    to_instance_id: str
    to_port_id: str
    shape: ConnectionShape = ConnectionShape.CURVED
    control_points: List[Point] = field(default_factory=list)
    corner_radius: float = 0.0

    def __post_init__(self):
        if not isinstance(self.shape, ConnectionShape):
            self.shape = _parse_optional_enum(ConnectionShape, self.shape) or (
                ConnectionShape.CURVED
            )
        self.control_points = [Point(*p) for p in self.control_points]

    def touches(self, instance_id: str, port_id: str) -> bool:
        """True if either end of this wire is the given port."""
        return (
            self.from_instance_id == instance_id and self.from_port_id == port_id
        ) or (self.to_instance_id == instance_id and self.to_port_id == port_id)


@dataclass
class PortIssue:
    """A compatibility problem found between two ports."""

    kind: IssueKind
    message: str

    @property
    def severity(self) -> Severity:
        return self.kind.severity


@dataclass
class DRCIssue:
    """
    A rule violation on a stored connection.

    Attributes:
        id: Stable identifier, ``drc-<connection id>-<kind>``.
        kind: Which rule was violated.
        severity: ERROR or WARNING.
        connection_id: The offending connection.
        from_port: Port definition at the ``from`` end.
        to_port: Port definition at the ``to`` end.
        message: Human-readable description.
    """

    id: str
    kind: IssueKind
    severity: Severity
    connection_id: str
    from_port: Port
    to_port: Port
    message: str


@dataclass
class DRCResult:
    """Result of running the design rule check over a connection set."""

    errors: List[DRCIssue] = field(default_factory=list)
    warnings: List[DRCIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class WiringSuggestion:
    """A connection proposed by the auto-wire matcher."""

    from_instance_id: str
    from_port_id: str
    to_instance_id: str
    to_port_id: str
    confidence: int
    reason: str


# =============================================================================
# Lookups
# =============================================================================

T = TypeVar("T")

InstanceIndex = Mapping[str, DeviceInstance]
TemplateIndex = Mapping[str, DeviceTemplate]


def index_by_id(items: Union[Mapping[str, T], Iterable[T]]) -> Mapping[str, T]:
    """
    Build a read-only id -> item map.

    Mappings are returned unchanged so that callers who already keep an
    index pay nothing. For duplicate ids the first item wins.
    """
    if isinstance(items, Mapping):
        return items
    index = {}
    for item in items:
        index.setdefault(item.id, item)
    return MappingProxyType(index)


def resolve_port(
    instance_id: str,
    port_id: str,
    instances: Union[InstanceIndex, Sequence[DeviceInstance]],
    templates: Union[TemplateIndex, Sequence[DeviceTemplate]],
) -> Optional[Tuple[DeviceInstance, DeviceTemplate, Port]]:
    """Resolve an endpoint to (instance, template, port), or None if dangling."""
    instances = index_by_id(instances)
    templates = index_by_id(templates)

    instance = instances.get(instance_id)
    if instance is None:
        return None
    template = templates.get(instance.template_id)
    if template is None:
        return None
    port = template.get_port(port_id)
    if port is None:
        return None
    return instance, template, port


def resolve_endpoints(
    connection: Connection,
    instances: Union[InstanceIndex, Sequence[DeviceInstance]],
    templates: Union[TemplateIndex, Sequence[DeviceTemplate]],
) -> Optional[
    Tuple[
        Tuple[DeviceInstance, DeviceTemplate, Port],
        Tuple[DeviceInstance, DeviceTemplate, Port],
    ]
]:
    """Resolve both ends of a connection; None if either end is dangling."""
    source = resolve_port(
        connection.from_instance_id, connection.from_port_id, instances, templates
    )
    target = resolve_port(
        connection.to_instance_id, connection.to_port_id, instances, templates
    )
    if source is None or target is None:
        logger.debug("Skipping connection %s with dangling endpoint", connection.id)
        return None
    return source, target
