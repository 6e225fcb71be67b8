"""
Debug tracing for wire routing.

When a ``RouteTrace`` is passed to ``find_smart_path`` the router records
every stage of its work: the stand-off points it derived, each channel
graph it built (one per clearance attempt), the A* outcome and the final
simplified path.

This is primarily useful for:
1. Debugging routing issues (why did the wire take this detour?)
2. Writing targeted tests (which attempt produced the route?)

Usage:
    >>> trace = RouteTrace()
    >>> elbows = find_smart_path(start, end, n1, n2, obstacles, trace=trace)
    >>> print(trace.summary())
    >>> trace.dump_to_file("route_trace.txt")
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RouteStage:
    """
    Snapshot of router state at one stage.

    Stages recorded by the router, in order:
    1. standoff - axis-snapped normals and stand-off points
    2. channel_graph - guide lines and graph size, once per attempt
    3. search - A* outcome for that attempt
    4. fallback - only when no attempt found a path
    5. result - the simplified elbow points

    Attributes:
        name: Name of this stage.
        data: Dictionary of relevant data at this stage.
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class RouteTrace:
    """
    Complete trace of one routing call.

    Attributes:
        stages: Stages in the order they were recorded.
    """

    stages: List[RouteStage] = field(default_factory=list)

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """Record a stage; the data dict is copied."""
        self.stages.append(RouteStage(name, dict(data)))

    def get_stage(self, name: str) -> Optional[RouteStage]:
        """First stage with the given name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def get_stages(self, name: str) -> List[RouteStage]:
        """All stages with the given name (e.g. one search per attempt)."""
        return [stage for stage in self.stages if stage.name == name]

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    @property
    def used_fallback(self) -> bool:
        return self.get_stage("fallback") is not None

    def summary(self) -> str:
        lines = [
            "=" * 60,
            "ROUTE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  - {stage.name}")

        searches = self.get_stages("search")
        found = [s for s in searches if s.data.get("found")]
        lines.extend(
            [
                "",
                f"Search attempts: {len(searches)} ({len(found)} successful)",
                f"Fallback used: {'yes' if self.used_fallback else 'no'}",
            ]
        )
        result = self.get_stage("result")
        if result is not None:
            lines.append(f"Elbows: {result.data.get('elbows')}")
        return "\n".join(lines)

    def dump(self) -> str:
        """Summary followed by every stage with its full data."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
