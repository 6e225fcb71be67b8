"""Tests for the connectors module."""

from wirekit.connectors import (
    CONNECTOR_LABELS,
    ConnectorType,
    connector_label,
    connectors_match,
)


class TestConnectorType:
    """Tests for the ConnectorType enum."""

    def test_family_count(self):
        """All 42 connector families are defined."""
        assert len(ConnectorType) == 42

    def test_value_is_slug(self):
        """Member values are the stored slugs."""
        assert ConnectorType.M12_D_CODED_4PIN.value == "m12-d-coded-4pin"
        assert ConnectorType("amp-superseal-1.5") is ConnectorType.AMP_SUPERSEAL_1_5

    def test_every_member_has_label(self):
        """Every family carries a non-empty display label."""
        for connector in ConnectorType:
            assert connector.label
            assert CONNECTOR_LABELS[connector] == connector.label

    def test_generic_is_wildcard(self):
        """Only GENERIC is a wildcard."""
        assert ConnectorType.GENERIC.is_wildcard
        assert not ConnectorType.JST_XH.is_wildcard

    def test_parse_known_slug(self):
        """Slugs parse case-insensitively."""
        assert ConnectorType.parse("JST-XH") is ConnectorType.JST_XH
        assert ConnectorType.parse(ConnectorType.BNC_CONNECTOR) is (
            ConnectorType.BNC_CONNECTOR
        )

    def test_parse_unknown_falls_back_to_generic(self):
        """Unknown connector strings never raise."""
        assert ConnectorType.parse("banana-plug") is ConnectorType.GENERIC
        assert ConnectorType.parse(None) is ConnectorType.GENERIC


class TestConnectorsMatch:
    """Tests for connectors_match."""

    def test_identical(self):
        """Identical families match."""
        assert connectors_match(ConnectorType.USB_TYPE_A, ConnectorType.USB_TYPE_A)

    def test_generic_matches_anything(self):
        """GENERIC on either side matches."""
        assert connectors_match(ConnectorType.GENERIC, ConnectorType.M12_D_CODED_4PIN)
        assert connectors_match(ConnectorType.M12_D_CODED_4PIN, ConnectorType.GENERIC)

    def test_different_families(self):
        """Two different concrete families do not match."""
        assert not connectors_match(ConnectorType.JST_XH, ConnectorType.JST_PH)

    def test_connector_label(self):
        """connector_label returns the display label."""
        assert connector_label(ConnectorType.RCA_CONNECTOR) == "RCA (Phono)"
