"""
Tests for the tracer module.

These tests verify the debug tracing infrastructure used to capture
the stages of a routing call.
"""

from wirekit.edge_routing import find_smart_path
from wirekit.models import Rect
from wirekit.tracer import RouteStage, RouteTrace


class TestRouteStage:
    """Tests for RouteStage dataclass."""

    def test_creation(self):
        """Test basic creation of a RouteStage."""
        stage = RouteStage(name="search", data={"found": True})
        assert stage.name == "search"
        assert stage.data == {"found": True}

    def test_str(self):
        """String form lists the stage name and its data."""
        result = str(RouteStage(name="search", data={"found": True}))
        assert "=== Stage: search ===" in result
        assert "found: True" in result

    def test_str_truncates_long_values(self):
        """Long values are cut at 100 characters."""
        result = str(RouteStage(name="result", data={"elbows": "x" * 300}))
        assert "x" * 100 + "..." in result
        assert "x" * 101 not in result


class TestRouteTrace:
    """Tests for RouteTrace."""

    def test_empty(self):
        """A new trace has no stages."""
        trace = RouteTrace()
        assert trace.stages == []
        assert trace.get_stage("search") is None
        assert not trace.used_fallback

    def test_add_stage_copies_data(self):
        """Stage data is copied on add."""
        trace = RouteTrace()
        data = {"found": False}
        trace.add_stage("search", data)
        data["found"] = True
        assert trace.get_stage("search").data["found"] is False

    def test_get_stages(self):
        """All stages with a name are returned in order."""
        trace = RouteTrace()
        trace.add_stage("search", {"clearance": 20})
        trace.add_stage("search", {"clearance": 0})
        assert [s.data["clearance"] for s in trace.get_stages("search")] == [20, 0]
        assert trace.stage_names == ["search", "search"]

    def test_used_fallback(self):
        """used_fallback reflects a fallback stage."""
        trace = RouteTrace()
        trace.add_stage("fallback", {"points": []})
        assert trace.used_fallback

    def test_summary(self):
        """The summary counts attempts and shows the result."""
        trace = RouteTrace()
        find_smart_path((0, 0), (200, 0), (0, 1), (0, 1), [], trace=trace)
        summary = trace.summary()
        assert "ROUTE TRACE SUMMARY" in summary
        assert "Search attempts: 1 (1 successful)" in summary
        assert "Fallback used: no" in summary
        assert "Elbows:" in summary

    def test_summary_with_fallback(self):
        """A fallback route is reported in the summary."""
        # Start walled in on all four sides
        walls = [
            Rect(-100, -100, 200, 20),
            Rect(-100, 80, 200, 20),
            Rect(-100, -100, 20, 200),
            Rect(80, -100, 20, 200),
        ]
        trace = RouteTrace()
        find_smart_path((0, 0), (300, 0), (0, 1), (0, 1), walls, trace=trace)
        summary = trace.summary()
        assert "Search attempts: 2 (0 successful)" in summary
        assert "Fallback used: yes" in summary

    def test_dump(self):
        """dump includes the summary and every stage."""
        trace = RouteTrace()
        find_smart_path((0, 0), (200, 0), (0, 1), (0, 1), [], trace=trace)
        dump = trace.dump()
        assert "DETAILED TRACE" in dump
        assert "=== Stage: standoff ===" in dump
        assert "=== Stage: result ===" in dump

    def test_dump_to_file(self, tmp_path):
        """dump_to_file writes the dump."""
        trace = RouteTrace()
        trace.add_stage("result", {"elbows": []})
        path = tmp_path / "trace.txt"
        trace.dump_to_file(str(path))
        assert path.read_text(encoding="utf-8") == trace.dump()
