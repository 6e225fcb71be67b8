"""Pytest configuration and shared fixtures for wirekit tests."""

import pytest

from wirekit import (
    Connection,
    ConnectorType,
    DeviceInstance,
    DeviceTemplate,
    FlowType,
    Port,
)


@pytest.fixture
def sensor_template():
    """Small I2C sensor: SDA/SCL on the left, power on top, ground at the bottom."""
    return DeviceTemplate(
        id="tpl-sensor",
        name="Sensor",
        width=100,
        height=100,
        ports=[
            Port(id="sda", label="SDA", x=0, y=30, flow_type=FlowType.BIDIRECTIONAL),
            Port(id="scl", label="SCL", x=0, y=70, flow_type=FlowType.INPUT),
            Port(
                id="vin",
                label="VIN",
                x=50,
                y=0,
                flow_type=FlowType.INPUT,
                is_power=True,
                voltage="5V",
            ),
            Port(
                id="gnd",
                label="GND",
                x=50,
                y=100,
                flow_type=FlowType.INPUT,
                is_power=True,
                is_ground=True,
            ),
        ],
    )


@pytest.fixture
def controller_template():
    """Controller with matching I2C pins on the right and a 5V supply output."""
    return DeviceTemplate(
        id="tpl-mcu",
        name="Controller",
        width=200,
        height=100,
        ports=[
            Port(id="sda", label="I2C_SDA", x=100, y=30),
            Port(id="scl", label="I2C_SCL", x=100, y=70, flow_type=FlowType.OUTPUT),
            Port(
                id="vcc",
                label="VCC",
                x=50,
                y=0,
                flow_type=FlowType.OUTPUT,
                is_power=True,
                voltage="5V",
            ),
            Port(
                id="gnd",
                label="GND",
                x=50,
                y=100,
                flow_type=FlowType.OUTPUT,
                is_power=True,
                is_ground=True,
            ),
            Port(
                id="can",
                label="CAN_H",
                x=20,
                y=100,
                connector_type=ConnectorType.M12_A_CODED_5PIN,
            ),
        ],
    )


@pytest.fixture
def templates(sensor_template, controller_template):
    """Template index for the sensor/controller page."""
    return {t.id: t for t in (sensor_template, controller_template)}


@pytest.fixture
def instances():
    """Controller on the left, sensor to its right."""
    mcu = DeviceInstance(id="mcu", template_id="tpl-mcu", x=0, y=0)
    sensor = DeviceInstance(id="sensor", template_id="tpl-sensor", x=400, y=0)
    return {i.id: i for i in (mcu, sensor)}


@pytest.fixture
def i2c_connection():
    """SDA wire from the controller to the sensor."""
    return Connection(
        id="c-sda",
        from_instance_id="mcu",
        from_port_id="sda",
        to_instance_id="sensor",
        to_port_id="sda",
    )


def make_port(**kwargs):
    """Port with sensible defaults for compatibility tests."""
    kwargs.setdefault("id", "p")
    kwargs.setdefault("label", kwargs["id"])
    return Port(**kwargs)


@pytest.fixture
def port_factory():
    """Factory for ad-hoc ports."""
    return make_port
