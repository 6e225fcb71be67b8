"""
Design rule check (DRC) for wiring between device ports.

Compatibility rules run in a fixed order so that results are reproducible:

1. Direction - input wired to input, or output wired to output.
2. Connector - two different connector families (GENERIC matches anything).
3. Power - only when both ports carry power: ground status must match;
   non-ground ends must agree on voltage (0.5 V tolerance), then on AC/DC.

Problems are reported as data, never raised. Direction conflicts are
warnings (a loop-back harness is legitimate); everything else is an error.
Connections whose endpoints no longer resolve are skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from .connectors import connectors_match
from .models import (
    Connection,
    DeviceInstance,
    DeviceTemplate,
    DRCIssue,
    DRCResult,
    FlowType,
    IssueKind,
    Port,
    PortIssue,
    Severity,
    index_by_id,
    resolve_endpoints,
)

logger = logging.getLogger(__name__)

# Voltages closer than this are considered equal (e.g. 5V vs 5.2V)
VOLTAGE_TOLERANCE = 0.5

# A minus sign counts only when it does not join two words ("DC-12V", "12-24V")
_VOLTAGE_PATTERN = re.compile(
    r"((?<![A-Za-z0-9.])-)?(\d+(?:\.\d+)?|\.\d+)\s*(?:V\b)?", re.IGNORECASE
)


@dataclass
class ConnectionCheck:
    """Outcome of a pre-flight check before a wire is created."""

    valid: bool
    issues: List[PortIssue] = field(default_factory=list)


def parse_voltage(text: Optional[str]) -> Optional[float]:
    """
    Parse a free-form voltage string.

    Examples: "12V" -> 12.0, "3.3 v" -> 3.3, "24VDC" -> 24.0, "5" -> 5.0,
    "-12V" -> -12.0.
    Anything without a number yields None.
    """
    if not text:
        return None
    match = _VOLTAGE_PATTERN.search(str(text))
    if match is None:
        return None
    value = float(match.group(2))
    return -value if match.group(1) else value


def _check_direction(port_a: Port, port_b: Port) -> Optional[PortIssue]:
    if port_a.flow_type is FlowType.INPUT and port_b.flow_type is FlowType.INPUT:
        return PortIssue(
            IssueKind.INPUT_TO_INPUT,
            f"Input port '{port_a.label}' is wired to input port '{port_b.label}'",
        )
    if port_a.flow_type is FlowType.OUTPUT and port_b.flow_type is FlowType.OUTPUT:
        return PortIssue(
            IssueKind.OUTPUT_TO_OUTPUT,
            f"Output port '{port_a.label}' is wired to output port '{port_b.label}'",
        )
    return None


def _check_connector(port_a: Port, port_b: Port) -> Optional[PortIssue]:
    if connectors_match(port_a.connector_type, port_b.connector_type):
        return None
    return PortIssue(
        IssueKind.CONNECTOR_MISMATCH,
        f"Connector mismatch: {port_a.connector_type.label} <-> "
        f"{port_b.connector_type.label}",
    )


def _check_power(port_a: Port, port_b: Port) -> Optional[PortIssue]:
    if not (port_a.is_power and port_b.is_power):
        return None

    if bool(port_a.is_ground) != bool(port_b.is_ground):
        return PortIssue(
            IssueKind.GROUND_MISMATCH,
            "Power and ground (GND) cannot be wired together",
        )
    if port_a.is_ground:
        # Both ends are ground: voltage and AC/DC do not apply
        return None

    volts_a = parse_voltage(port_a.voltage)
    volts_b = parse_voltage(port_b.voltage)
    if (
        volts_a is not None
        and volts_b is not None
        and abs(volts_a - volts_b) > VOLTAGE_TOLERANCE
    ):
        return PortIssue(
            IssueKind.VOLTAGE_MISMATCH,
            f"Voltage mismatch: {port_a.voltage} -> {port_b.voltage}",
        )

    if port_a.power_kind and port_b.power_kind:
        if port_a.power_kind is not port_b.power_kind:
            return PortIssue(
                IssueKind.POWER_TYPE_MISMATCH,
                f"Power type mismatch: {port_a.power_kind.value} source wired to "
                f"{port_b.power_kind.value} device",
            )
    return None


_RULES = (_check_direction, _check_connector, _check_power)


def validate_port_compatibility(port_a: Port, port_b: Port) -> List[PortIssue]:
    """
    Run every compatibility rule on a pair of ports.

    Args:
        port_a: Port at the ``from`` end of the wire.
        port_b: Port at the ``to`` end of the wire.

    Returns:
        Issues in rule order; empty when the ports are compatible.
    """
    issues = []
    for rule in _RULES:
        issue = rule(port_a, port_b)
        if issue is not None:
            issues.append(issue)
    return issues


def check_connection_validity(port_a: Port, port_b: Port) -> ConnectionCheck:
    """
    Pre-flight check used while the user is dragging a new wire.

    The wire is valid unless an error-severity issue is found; direction
    warnings are reported but do not block it.
    """
    issues = validate_port_compatibility(port_a, port_b)
    valid = not any(issue.severity is Severity.ERROR for issue in issues)
    return ConnectionCheck(valid=valid, issues=issues)


def validate_connection(
    connection: Connection,
    instances: Union[Mapping[str, DeviceInstance], Sequence[DeviceInstance]],
    templates: Union[Mapping[str, DeviceTemplate], Sequence[DeviceTemplate]],
) -> List[PortIssue]:
    """Compatibility issues of a stored connection; [] if it is dangling."""
    resolved = resolve_endpoints(connection, instances, templates)
    if resolved is None:
        return []
    (_, _, from_port), (_, _, to_port) = resolved
    return validate_port_compatibility(from_port, to_port)


def run_drc(
    connections: Iterable[Connection],
    instances: Union[Mapping[str, DeviceInstance], Sequence[DeviceInstance]],
    templates: Union[Mapping[str, DeviceTemplate], Sequence[DeviceTemplate]],
) -> DRCResult:
    """
    Check every connection and classify the findings.

    Args:
        connections: Connections on the page.
        instances: Instances by id (or a sequence of instances).
        templates: Templates by id (or a sequence of templates).

    Returns:
        DRCResult with errors and warnings in connection order.
    """
    instances = index_by_id(instances)
    templates = index_by_id(templates)
    result = DRCResult()

    for connection in connections:
        resolved = resolve_endpoints(connection, instances, templates)
        if resolved is None:
            continue
        (_, _, from_port), (_, _, to_port) = resolved

        for issue in validate_port_compatibility(from_port, to_port):
            drc_issue = DRCIssue(
                id=f"drc-{connection.id}-{issue.kind.value}",
                kind=issue.kind,
                severity=issue.severity,
                connection_id=connection.id,
                from_port=from_port,
                to_port=to_port,
                message=issue.message,
            )
            if issue.severity is Severity.ERROR:
                result.errors.append(drc_issue)
            else:
                result.warnings.append(drc_issue)

    logger.debug(
        "DRC finished: %d errors, %d warnings",
        len(result.errors),
        len(result.warnings),
    )
    return result
