"""
Tests for the auto-wire matcher.

Label matching goes through a normalizing step and a table of signal
groups; power pairing only looks at direction and the voltage string.
"""

import pytest

from wirekit.autowire import (
    LABEL_MATCH_CONFIDENCE,
    POWER_MATCH_CONFIDENCE,
    SIGNAL_GROUPS,
    are_ports_compatible,
    find_signal_group,
    normalize_pin_name,
    suggest_connections,
    suggest_power_connections,
)
from wirekit.connectors import ConnectorType
from wirekit.models import (
    Connection,
    DeviceInstance,
    DeviceTemplate,
    FlowType,
    Port,
)


def pairs(suggestions):
    return [
        (s.from_instance_id, s.from_port_id, s.to_instance_id, s.to_port_id)
        for s in suggestions
    ]


class TestNormalizePinName:
    """Tests for normalize_pin_name."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("sda", "SDA"),
            ("I2C_SDA", "I2CSDA"),
            ("CAN-H", "CANH"),
            ("3.3 V", "33V"),
            ("Çıkış", "CIKIS"),
            ("", ""),
        ],
    )
    def test_normalize(self, label, expected):
        """Upper-cased, accents folded, punctuation removed."""
        assert normalize_pin_name(label) == expected


class TestFindSignalGroup:
    """Tests for find_signal_group."""

    @pytest.mark.parametrize(
        "label, group",
        [
            ("SDA", "SDA"),
            ("i2c_scl", "SCL"),
            ("SPI MOSI", "MOSI"),
            ("UART_TX", "TX"),
            ("RXD", "RX"),
            ("VDD", "VCC"),
            ("3V3", "VCC"),
            ("GND", "GND"),
            ("Ground", "GND"),
            ("CAN_HIGH", "CANH"),
            ("CAN-L", "CANL"),
            ("AV_OUT", "VIDEO_OUT"),
            ("cam in", "VIDEO_IN"),
            ("VIDEO_IN", "VIDEO_IN"),
        ],
    )
    def test_known_labels(self, label, group):
        """Aliases and labels containing an alias resolve to their group."""
        assert find_signal_group(label) == group

    @pytest.mark.parametrize("label", ["VIN", "Relay", "", "+", "-"])
    def test_unknown_labels(self, label):
        """Labels without any alias resolve to no group."""
        assert find_signal_group(label) is None

    def test_first_group_wins(self):
        """Overlapping aliases resolve in table order."""
        # "SDA_CLK" contains aliases of both SDA and SCL
        assert find_signal_group("SDA_CLK") == "SDA"
        # "DISPLAYIN" contains the MOSI alias "DI" ahead of VIDEO_OUT "DISPLAY"
        assert find_signal_group("DISPLAY_IN") == "MOSI"

    def test_table_order(self):
        """Groups are declared in the documented order."""
        assert list(SIGNAL_GROUPS)[:4] == ["SDA", "SCL", "MOSI", "MISO"]
        assert list(SIGNAL_GROUPS)[-2:] == ["VIDEO_IN", "VIDEO_OUT"]


class TestArePortsCompatible:
    """Tests for are_ports_compatible."""

    def test_output_input(self):
        """Opposite directions are compatible."""
        assert are_ports_compatible(
            Port(id="a", flow_type="output"), Port(id="b", flow_type="input")
        )

    def test_same_direction(self):
        """Two inputs are not compatible."""
        assert not are_ports_compatible(
            Port(id="a", flow_type="input"), Port(id="b", flow_type="input")
        )

    def test_bidirectional_pair(self):
        """Two bidirectional ports are compatible."""
        assert are_ports_compatible(Port(id="a"), Port(id="b"))

    def test_connector_mismatch(self):
        """Different concrete connectors are not compatible."""
        assert not are_ports_compatible(
            Port(id="a", connector_type=ConnectorType.JST_XH),
            Port(id="b", connector_type=ConnectorType.JST_PH),
        )

    def test_generic_connector(self):
        """GENERIC matches a concrete connector."""
        assert are_ports_compatible(
            Port(id="a", connector_type=ConnectorType.GENERIC),
            Port(id="b", connector_type=ConnectorType.JST_PH),
        )


class TestSuggestConnections:
    """Tests for suggest_connections."""

    def test_i2c_suggestions(self, instances, templates):
        """Matching I2C pins are proposed at the label confidence."""
        suggestions = suggest_connections("sensor", instances, templates, [])
        assert pairs(suggestions) == [
            ("sensor", "sda", "mcu", "sda"),
            ("mcu", "scl", "sensor", "scl"),
            ("mcu", "gnd", "sensor", "gnd"),
        ]
        assert all(s.confidence == LABEL_MATCH_CONFIDENCE for s in suggestions)

    def test_oriented_output_to_input(self, instances, templates):
        """The output side is always the source."""
        suggestions = suggest_connections("sensor", instances, templates, [])
        scl = [s for s in suggestions if s.to_port_id == "scl"][0]
        assert scl.from_instance_id == "mcu"
        assert scl.to_instance_id == "sensor"

    def test_reason_mentions_group_and_labels(self, instances, templates):
        """The reason names the group and both labels."""
        suggestion = suggest_connections("sensor", instances, templates, [])[0]
        assert "SDA" in suggestion.reason
        assert "I2C_SDA" in suggestion.reason

    def test_connected_ports_skipped(self, instances, templates, i2c_connection):
        """Ports that already have a wire are never proposed."""
        suggestions = suggest_connections(
            "sensor", instances, templates, [i2c_connection]
        )
        for s in suggestions:
            assert not i2c_connection.touches(s.from_instance_id, s.from_port_id)
            assert not i2c_connection.touches(s.to_instance_id, s.to_port_id)
        assert ("sensor", "sda", "mcu", "sda") not in pairs(suggestions)

    def test_unknown_instance(self, instances, templates):
        """An unknown instance gives no suggestions."""
        assert suggest_connections("ghost", instances, templates, []) == []

    def test_missing_template(self, instances):
        """An instance whose template is gone gives no suggestions."""
        assert suggest_connections("sensor", instances, [], []) == []

    def test_incompatible_connectors_skipped(self):
        """Same group but different connectors is not proposed."""
        left = DeviceTemplate(
            id="l", ports=[Port(id="h", label="CANH", connector_type="jst-xh")]
        )
        right = DeviceTemplate(
            id="r", ports=[Port(id="h", label="CAN_H", connector_type="jst-ph")]
        )
        instances = [
            DeviceInstance(id="a", template_id="l"),
            DeviceInstance(id="b", template_id="r"),
        ]
        assert suggest_connections("a", instances, [left, right]) == []

    def test_sorted_by_confidence(self, instances, templates):
        """Results come highest confidence first."""
        suggestions = suggest_connections("sensor", instances, templates, [])
        confidences = [s.confidence for s in suggestions]
        assert confidences == sorted(confidences, reverse=True)


@pytest.fixture
def power_page():
    psu = DeviceTemplate(
        id="psu",
        ports=[
            Port(id="out", label="VCC", flow_type=FlowType.OUTPUT, is_power=True,
                 voltage="5V"),
            Port(id="out12", label="12V OUT", flow_type=FlowType.OUTPUT,
                 is_power=True, voltage="12V"),
        ],
    )
    board = DeviceTemplate(
        id="board",
        ports=[
            Port(id="vin", label="VIN", flow_type=FlowType.INPUT, is_power=True,
                 voltage="5V"),
        ],
    )
    instances = [
        DeviceInstance(id="A", template_id="psu"),
        DeviceInstance(id="B", template_id="board", x=300),
        DeviceInstance(id="C", template_id="board", x=600),
    ]
    return instances, [psu, board]


class TestSuggestPowerConnections:
    """Tests for suggest_power_connections."""

    def test_same_voltage_pairs(self, power_page):
        """A 5V supply is proposed for every 5V consumer."""
        instances, templates = power_page
        suggestions = suggest_power_connections(instances, templates, [])
        assert pairs(suggestions) == [
            ("A", "out", "B", "vin"),
            ("A", "out", "C", "vin"),
        ]
        assert all(s.confidence == POWER_MATCH_CONFIDENCE for s in suggestions)

    def test_voltage_string_must_match_exactly(self, power_page):
        """Voltage strings are compared verbatim, "5V" is not "5 V"."""
        instances, templates = power_page
        templates[1].ports[0].voltage = "5 V"
        assert suggest_power_connections(instances, templates, []) == []

    def test_connected_consumer_skipped(self, power_page):
        """A consumer that is already wired is not proposed again."""
        instances, templates = power_page
        existing = [Connection("c1", "A", "out", "B", "vin")]
        suggestions = suggest_power_connections(instances, templates, existing)
        assert pairs(suggestions) == [("A", "out", "C", "vin")]

    def test_missing_voltage_not_paired(self):
        """Ports without a voltage are never paired."""
        template = DeviceTemplate(
            id="t",
            ports=[
                Port(id="o", flow_type="output", is_power=True),
                Port(id="i", flow_type="input", is_power=True),
            ],
        )
        instances = [
            DeviceInstance(id="x", template_id="t"),
            DeviceInstance(id="y", template_id="t"),
        ]
        assert suggest_power_connections(instances, [template]) == []

    def test_same_instance_not_paired(self):
        """A device is never proposed to power itself."""
        template = DeviceTemplate(
            id="t",
            ports=[
                Port(id="o", flow_type="output", is_power=True, voltage="5V"),
                Port(id="i", flow_type="input", is_power=True, voltage="5V"),
            ],
        )
        instances = [DeviceInstance(id="x", template_id="t")]
        assert suggest_power_connections(instances, [template]) == []
