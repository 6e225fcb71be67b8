"""
Connector families for device ports.

Every physical connector a port can carry is a member of ``ConnectorType``.
The member value is the stable slug used in stored diagrams and the label is
the human-readable name shown in DRC messages. Adding a family means adding
one member here; the label travels with it.

``GENERIC`` is a wildcard: it is compatible with every other family.
"""

import logging
from enum import Enum
from typing import Dict, Union

logger = logging.getLogger(__name__)


class ConnectorType(Enum):
    """Closed set of connector families, each with a display label."""

    def __new__(cls, slug: str, label: str):
        member = object.__new__(cls)
        member._value_ = slug
        member.label = label
        return member

    GENERIC = ("generic", "Generic / Unspecified")

    # Analog camera interfaces (proprietary)
    BRIGADE_VBV_4PIN = ("brigade-vbv-4pin", "VBV 4-Pin (Select Series)")
    BRIGADE_VBV_5PIN_SHUTTER = ("brigade-vbv-5pin-shutter", "VBV 5-Pin (Shutter)")
    BRIGADE_ELITE_4PIN = (
        "brigade-elite-4pin",
        "BE 4-Pin (Elite Series Waterproof)",
    )
    BRIGADE_BACKEYE_360 = ("brigade-backeye-360", "Brigade 360 BN360 Port")

    # Industrial and network
    M12_D_CODED_4PIN = ("m12-d-coded-4pin", "M12 Ethernet (D-Coded 4-Pin)")
    M12_A_CODED_5PIN = ("m12-a-coded-5pin", "M12 Power/Analog (A-Coded 5-Pin)")
    M12_A_CODED_8PIN = ("m12-a-coded-8pin", "M12 Power/Analog (A-Coded 8-Pin)")
    FAKRA_C_BLUE = ("fakra-c-blue", "FAKRA C (Blue - GPS)")
    FAKRA_D_PURPLE = ("fakra-d-purple", "FAKRA D (Purple - GSM)")
    FAKRA_E_GREEN = ("fakra-e-green", "FAKRA E (Green - Video)")

    # Heavy duty truck/trailer bulkhead
    SP7_HEAVY_DUTY = ("sp7-heavy-duty", "SP-7 Heavy Duty (7-Pin)")
    MDR_15PIN_HEAVY_DUTY = (
        "mdr-15pin-heavy-duty",
        "MDR/Omnivue Heavy Duty (15-Pin)",
    )

    # Legacy AV
    RCA_CONNECTOR = ("rca-connector", "RCA (Phono)")
    BNC_CONNECTOR = ("bnc-connector", "BNC (Bayonet)")

    # Internal wiring and power (flying leads)
    FLYING_LEAD_POWER = ("flying-lead-power", "Flying Lead (Power +/-)")
    FLYING_LEAD_TRIGGER = ("flying-lead-trigger", "Flying Lead (Trigger/Signal)")
    TERMINAL_BLOCK = ("terminal-block", "Terminal Block")
    D_SUB_DB9 = ("d-sub-db9", "D-Sub DB9 (Serial/MDR)")
    D_SUB_DB15 = ("d-sub-db15", "D-Sub DB15 (VGA/MDR)")
    D_SUB_DB25 = ("d-sub-db25", "D-Sub DB25 (Parallel/Expansion)")

    # Sensors and radar
    ULTRASONIC_SENSOR_2PIN = (
        "ultrasonic-sensor-2pin",
        "Ultrasonic Sensor (2-Pin Waterproof)",
    )
    ULTRASONIC_SENSOR_3PIN = (
        "ultrasonic-sensor-3pin",
        "Ultrasonic Sensor (3-Pin Waterproof)",
    )
    DEUTSCH_DT04_2PIN = ("deutsch-dt04-2pin", "Deutsch DT04 (2-Pin)")
    DEUTSCH_DT04_3PIN = ("deutsch-dt04-3pin", "Deutsch DT04 (3-Pin)")
    DEUTSCH_DT04_4PIN = ("deutsch-dt04-4pin", "Deutsch DT04 (4-Pin)")
    DEUTSCH_DT04_6PIN = ("deutsch-dt04-6pin", "Deutsch DT04 (6-Pin)")
    AMP_SUPERSEAL_1_5 = ("amp-superseal-1.5", "AMP Superseal 1.5 Series")

    # Data and CAN
    CAN_BUS_J1939 = ("can-bus-j1939", "CAN Bus (J1939)")
    OBD2_16PIN = ("obd2-16pin", "OBD-II (16-Pin Diag)")
    USB_TYPE_A = ("usb-type-a", "USB Type-A")
    USB_MINI_B = ("usb-mini-b", "USB Mini-B")

    # RF and antenna
    SMA_CONNECTOR = ("sma-connector", "SMA (GPS/4G)")
    RP_SMA_CONNECTOR = ("rp-sma-connector", "RP-SMA (Wi-Fi)")
    TNC_CONNECTOR = ("tnc-connector", "TNC (Wireless Video)")

    # Internal ECU and panel
    MOLEX_MINIFIT = ("molex-minifit", "Molex Mini-Fit")
    MOLEX_MICROFIT = ("molex-microfit", "Molex Micro-Fit")
    JST_XH = ("jst-xh", "JST XH Series")
    JST_PH = ("jst-ph", "JST PH Series")

    # Accessories
    FUSE_HOLDER_BLADE = ("fuse-holder-blade", "Fuse Holder (Blade)")
    RELAY_SOCKET_5PIN = ("relay-socket-5pin", "Relay Socket (Automotive)")
    RING_TERMINAL = ("ring-terminal", "Ring Terminal (Chassis)")

    @property
    def is_wildcard(self) -> bool:
        return self is ConnectorType.GENERIC

    @classmethod
    def parse(cls, value: Union[str, "ConnectorType", None]) -> "ConnectorType":
        """
        Coerce a slug (or member) to a ConnectorType.

        Unknown slugs map to GENERIC so that a diagram saved by a newer
        library never breaks validation of an older one.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.GENERIC
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown connector type %r, treating as generic", value)
            return cls.GENERIC


CONNECTOR_LABELS: Dict[ConnectorType, str] = {ct: ct.label for ct in ConnectorType}


def connector_label(connector: ConnectorType) -> str:
    """Human-readable label for a connector family."""
    return connector.label


def connectors_match(a: ConnectorType, b: ConnectorType) -> bool:
    """True when two families may mate (identical, or either is GENERIC)."""
    return a.is_wildcard or b.is_wildcard or a is b
