"""
Debug tracing infrastructure for splicemap.

This module provides data structures for capturing detailed traces of a
routing call. When a trace is passed to the router, it records every stage
of processing and every scored candidate.

This is primarily useful for:
1. Debugging routing decisions (understanding why a path won)
2. Tuning penalty weights (seeing how close the runners-up were)
3. Writing targeted tests (verifying a specific strategy was considered)

Usage:
    >>> trace = RoutingTrace()
    >>> path = route_connection(start, end, [], ObstacleSet(), canvas, trace=trace)
    >>> print(trace.summary())
    >>> trace.dump_to_file("route_trace.txt")

The trace captures:
- Routing stages (generated, scored, selected)
- Every candidate with its metrics and cost
- The winner, and whether the direct fallback was used
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import Connection, ObstacleSet, Point, Rect
from .scoring import Candidate


@dataclass
class RoutingStage:
    """
    Snapshot of state at a routing stage.

    Attributes:
        name: Name of this stage
        data: Dictionary of relevant data at this stage
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
class RoutingTrace:
    """
    Complete trace of one routing call.

    Attributes:
        stages: Stages with their data
        candidates: Every scored candidate, in generation order
        selected: The winning candidate (None when the fallback was used)
        fallback_used: True if no candidate survived cleaning
        p1, p2: Raw endpoint exit points
        canvas: Canvas bounds of the call
        connections: The other connections the call was scored against
        obstacles: The obstacles the call was scored against
        result: The path returned to the caller (after endpoint offsets)
    """

    stages: List[RoutingStage] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    selected: Optional[Candidate] = None
    fallback_used: bool = False
    p1: Optional[Point] = None
    p2: Optional[Point] = None
    canvas: Optional[Rect] = None
    connections: List[Connection] = field(default_factory=list)
    obstacles: ObstacleSet = field(default_factory=ObstacleSet)
    result: List[Point] = field(default_factory=list)

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        self.stages.append(RoutingStage(name, data.copy()))

    def add_candidate(self, candidate: Candidate) -> None:
        self.candidates.append(candidate)

    def get_stage(self, name: str) -> Optional[RoutingStage]:
        """Get a specific stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def get_candidates(self, strategy: str) -> List[Candidate]:
        """Get all candidates produced by one strategy."""
        return [c for c in self.candidates if c.strategy == strategy]

    def ranked(self) -> List[Candidate]:
        """Candidates in selection order, best first."""
        return sorted(self.candidates, key=Candidate.sort_key)

    def best(self) -> Optional[Candidate]:
        ranked = self.ranked()
        return ranked[0] if ranked else None

    def summary(self) -> str:
        """
        Generate a human-readable summary of the trace.

        Returns a string with:
        - Endpoints
        - Stages overview
        - Candidate counts per strategy and the top five candidates
        """
        lines = [
            "=" * 60,
            "ROUTING TRACE SUMMARY",
            "=" * 60,
            "",
            f"From: {self.p1}",
            f"To:   {self.p2}",
            f"Fallback used: {self.fallback_used}",
            "",
            f"Stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  {stage.name}")

        lines.extend(["", f"Total candidates: {len(self.candidates)}", ""])

        strategy_counts: Dict[str, int] = {}
        for candidate in self.candidates:
            strategy_counts[candidate.strategy] = (
                strategy_counts.get(candidate.strategy, 0) + 1
            )
        lines.append("Candidates by strategy:")
        for strategy, count in strategy_counts.items():
            lines.append(f"  {strategy}: {count}")

        lines.extend(["", "Top candidates:"])
        for candidate in self.ranked()[:5]:
            lines.append(f"  {candidate}")

        return "\n".join(lines)

    def dump(self) -> str:
        """
        Generate a complete human-readable dump of the trace.

        This includes all stages with their full data and every candidate.
        """
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]

        lines.append("STAGES:")
        lines.append("-" * 40)
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")

        lines.append("CANDIDATES:")
        lines.append("-" * 40)
        for candidate in self.candidates:
            lines.append(str(candidate))
            lines.append(
                "    " + " -> ".join(f"({p.x:g},{p.y:g})" for p in candidate.path)
            )

        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
