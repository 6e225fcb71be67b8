"""
Auto-wire matcher.

Proposes connections for a newly placed device by matching port labels
against a table of well-known signal groups (I2C, SPI, UART, power, CAN,
video), and pairs power supplies with consumers of the same voltage.

Suggestions are plain data. Nothing here creates connections, and no
de-duplication happens beyond skipping ports that are already wired: a
caller accepting one suggestion must drop the overlapping ones itself.
"""

import logging
import re
import unicodedata
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .connectors import connectors_match
from .models import (
    Connection,
    DeviceInstance,
    DeviceTemplate,
    FlowType,
    Port,
    WiringSuggestion,
    index_by_id,
)

logger = logging.getLogger(__name__)

# Fixed confidence of a label-group match
LABEL_MATCH_CONFIDENCE = 85

# Fixed confidence of a same-voltage power pairing
POWER_MATCH_CONFIDENCE = 90

# Signal group -> accepted label aliases. Groups are checked in this order
# and the first match wins.
SIGNAL_GROUPS: Dict[str, Tuple[str, ...]] = {
    # I2C
    "SDA": ("SDA", "I2C_SDA", "DATA"),
    "SCL": ("SCL", "I2C_SCL", "CLOCK", "CLK"),
    # SPI
    "MOSI": ("MOSI", "SDI", "DI", "SPI_MOSI"),
    "MISO": ("MISO", "SDO", "DO", "SPI_MISO"),
    "SCLK": ("SCLK", "SCK", "SPI_CLK", "SPI_SCLK"),
    "CS": ("CS", "SS", "NSS", "SPI_CS", "CHIP_SELECT"),
    # UART
    "TX": ("TX", "TXD", "UART_TX"),
    "RX": ("RX", "RXD", "UART_RX"),
    # Power
    "VCC": ("VCC", "VDD", "3V3", "3.3V", "5V", "12V", "POWER", "PWR"),
    "GND": ("GND", "VSS", "GROUND", "0V"),
    # CAN bus
    "CANH": ("CANH", "CAN_H", "CAN_HIGH"),
    "CANL": ("CANL", "CAN_L", "CAN_LOW"),
    # Video
    "VIDEO_IN": ("VIDEO_IN", "AV_IN", "CAM_IN"),
    "VIDEO_OUT": ("VIDEO_OUT", "VOUT", "AV_OUT", "DISPLAY"),
}

_NON_ALNUM = re.compile(r"[^A-Z0-9]")

Instances = Union[Mapping[str, DeviceInstance], Sequence[DeviceInstance]]
Templates = Union[Mapping[str, DeviceTemplate], Sequence[DeviceTemplate]]


def normalize_pin_name(label: str) -> str:
    """
    Canonical form of a port label for matching.

    Accents are folded, letters upper-cased and everything that is not
    A-Z or 0-9 removed: "i²c_sda" -> "I2CSDA", "Çıkış" -> "CIKIS".
    """
    if not label:
        return ""
    folded = unicodedata.normalize("NFKD", str(label))
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", folded.upper())


_NORMALIZED_GROUPS = [
    (group, tuple(normalize_pin_name(alias) for alias in aliases))
    for group, aliases in SIGNAL_GROUPS.items()
]


def find_signal_group(label: str) -> Optional[str]:
    """
    Signal group a port label belongs to, or None.

    A label belongs to a group if it equals or contains one of the group's
    aliases, after normalization on both sides.
    """
    normalized = normalize_pin_name(label)
    if not normalized:
        return None
    for group, aliases in _NORMALIZED_GROUPS:
        for alias in aliases:
            if alias and alias in normalized:
                return group
    return None


def are_ports_compatible(port_a: Port, port_b: Port) -> bool:
    """
    Loose compatibility used for suggestions.

    Connector families must match (GENERIC matches anything) and the two
    ports must not share a direction unless it is BIDIRECTIONAL.
    """
    if not connectors_match(port_a.connector_type, port_b.connector_type):
        return False
    if (
        port_a.flow_type is port_b.flow_type
        and port_a.flow_type is not FlowType.BIDIRECTIONAL
    ):
        return False
    return True


def _connected_ports(connections: Iterable[Connection]) -> Set[Tuple[str, str]]:
    used = set()
    for conn in connections:
        used.add((conn.from_instance_id, conn.from_port_id))
        used.add((conn.to_instance_id, conn.to_port_id))
    return used


def suggest_connections(
    new_instance_id: str,
    instances: Instances,
    templates: Templates,
    connections: Iterable[Connection] = (),
) -> List[WiringSuggestion]:
    """
    Suggest wires for a newly placed instance.

    Every unconnected port of the new instance whose label resolves to a
    signal group is paired with every unconnected, compatible port of the
    same group on the other instances.

    Args:
        new_instance_id: The instance that was just placed.
        instances: Instances by id (or a sequence of instances).
        templates: Templates by id (or a sequence of templates).
        connections: Existing connections on the page.

    Returns:
        Suggestions oriented output -> input, highest confidence first.
        Empty if the instance or its template cannot be found.
    """
    instances = index_by_id(instances)
    templates = index_by_id(templates)

    new_instance = instances.get(new_instance_id)
    if new_instance is None:
        logger.debug("Instance %s not found, no suggestions", new_instance_id)
        return []
    new_template = templates.get(new_instance.template_id)
    if new_template is None:
        logger.debug("Template %s not found, no suggestions", new_instance.template_id)
        return []

    used = _connected_ports(connections)
    suggestions = []

    for new_port in new_template.ports:
        if (new_instance_id, new_port.id) in used:
            continue
        group = find_signal_group(new_port.label)
        if group is None:
            continue

        for other in instances.values():
            if other.id == new_instance_id:
                continue
            other_template = templates.get(other.template_id)
            if other_template is None:
                continue

            for other_port in other_template.ports:
                if (other.id, other_port.id) in used:
                    continue
                if find_signal_group(other_port.label) != group:
                    continue
                if not are_ports_compatible(new_port, other_port):
                    continue

                source = (new_instance_id, new_port.id)
                target = (other.id, other_port.id)
                if (
                    new_port.flow_type is FlowType.INPUT
                    and other_port.flow_type is FlowType.OUTPUT
                ):
                    source, target = target, source

                reason = f"{group} match: {new_port.label} <-> {other_port.label}"
                suggestions.append(
                    WiringSuggestion(
                        from_instance_id=source[0],
                        from_port_id=source[1],
                        to_instance_id=target[0],
                        to_port_id=target[1],
                        confidence=LABEL_MATCH_CONFIDENCE,
                        reason=reason,
                    )
                )

    suggestions.sort(key=lambda s: -s.confidence)
    return suggestions


def suggest_power_connections(
    instances: Instances,
    templates: Templates,
    connections: Iterable[Connection] = (),
) -> List[WiringSuggestion]:
    """
    Pair power outputs with power inputs of the identical voltage string.

    Only the consumer has to be free: a supply may feed several devices.
    """
    instances = index_by_id(instances)
    templates = index_by_id(templates)

    sources = []
    consumers = []
    for instance in instances.values():
        template = templates.get(instance.template_id)
        if template is None:
            continue
        for port in template.ports:
            if not port.is_power or not port.voltage:
                continue
            if port.flow_type is FlowType.OUTPUT:
                sources.append((instance.id, port))
            elif port.flow_type is FlowType.INPUT:
                consumers.append((instance.id, port))

    used = _connected_ports(connections)
    suggestions = []
    for consumer_id, consumer in consumers:
        if (consumer_id, consumer.id) in used:
            continue
        for source_id, source in sources:
            if source_id == consumer_id or source.voltage != consumer.voltage:
                continue
            suggestions.append(
                WiringSuggestion(
                    from_instance_id=source_id,
                    from_port_id=source.id,
                    to_instance_id=consumer_id,
                    to_port_id=consumer.id,
                    confidence=POWER_MATCH_CONFIDENCE,
                    reason=f"Power: {source.voltage} supply to {consumer.label}",
                )
            )

    suggestions.sort(key=lambda s: -s.confidence)
    return suggestions
