"""
Routing configuration.

All penalty weights, tolerances and lane offsets used by the router live in a
single frozen ``RoutingConfig`` value that is passed into every routing call.
Tests can build configs with controlled weights via ``with_overrides``.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple


class ConfigError(ValueError):
    """Raised when a routing configuration is invalid."""

    pass


def alternating_offsets(step: float, count: int) -> Tuple[float, ...]:
    """Build ``0, +step, -step, +2*step, -2*step, ...`` with ``count`` lanes each side."""
    offsets = [0.0]
    for i in range(1, count + 1):
        offsets.extend([i * step, -i * step])
    return tuple(offsets)


def doubling_offsets(start: float, count: int) -> Tuple[float, ...]:
    """Build ``0, +s, -s, +2s, -2s, +4s, -4s, ...`` with ``count`` lanes each side."""
    offsets = [0.0]
    value = start
    for _ in range(count):
        offsets.extend([value, -value])
        value *= 2
    return tuple(offsets)


@dataclass(frozen=True)
class RoutingConfig:
    """
    Tuning values for connection routing.

    Penalties are expressed in canvas units of path length. They are ordered
    so that hard collisions and body intersections dominate, proximity and
    bends act as tie-breakers, and the central channel reward is a small
    nudge toward shared trunk routing.
    """

    # --- Cost weights ---

    # Cost of each 90-degree turn, roughly 30px of extra length
    bend_penalty: float = 30.0

    # Cost of each perpendicular crossing with another connection
    crossing_penalty: float = 20.0

    # Cost when a path runs next to another connection's lane
    proximity_penalty: float = 60.0

    # Cost when a path shares a lane with another connection
    hard_collision_penalty: float = 100000.0

    # Cost when a path runs through an unrelated fiber
    fiber_penalty: float = 5000000.0

    # Cost when a path runs through an unrelated cable body
    cable_penalty: float = 40000.0

    # Cost when a path runs through an unrelated splitter body
    splitter_penalty: float = 40000.0

    # Reward for running along the canvas centerline
    central_channel_reward: float = 70.0

    # --- Tolerances and margins ---

    # Segments closer than this on the same line share a lane
    collision_tolerance: float = 1.0

    # Extra distance on top of collision_tolerance that counts as "too close"
    proximity_buffer: float = 1.0

    fiber_margin: float = 8.0
    cable_margin: float = 4.0
    splitter_margin: float = 4.0

    # How close a segment must be to a centerline to count as using it
    central_channel_tolerance: float = 5.0

    # --- Candidate generation ---

    # Lane offsets swept around the canvas centerlines
    channel_offsets: Tuple[float, ...] = (0, 25, -25, 50, -50, 75, -75, 100, -100)

    # Added to an endpoint's owner extent for extended exits
    exit_clearances: Tuple[float, ...] = (10, 30, 50)

    # Inset of edge routing lanes from the canvas border
    edge_padding: float = 15.0

    # --- Presentation ---

    # Nudge of path endpoints along the exit direction, applied before scoring
    visual_offset: float = 10.0

    # --- Indexing ---

    # Bucket size of the spatial index over segments and obstacles
    index_cell_size: float = 100.0

    def __post_init__(self):
        self.validate()

    @property
    def proximity_tolerance(self) -> float:
        return self.collision_tolerance + self.proximity_buffer

    @property
    def max_margin(self) -> float:
        return max(self.fiber_margin, self.cable_margin, self.splitter_margin)

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        non_negative = (
            "collision_tolerance",
            "proximity_buffer",
            "fiber_margin",
            "cable_margin",
            "splitter_margin",
            "central_channel_tolerance",
            "edge_padding",
            "visual_offset",
        )
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")

        if self.index_cell_size <= 0:
            raise ConfigError(
                f"index_cell_size must be > 0, got {self.index_cell_size}"
            )
        if not self.channel_offsets:
            raise ConfigError("channel_offsets must not be empty")
        if not self.exit_clearances:
            raise ConfigError("exit_clearances must not be empty")

    def with_overrides(self, **overrides: Any) -> "RoutingConfig":
        """Return a copy with some values replaced."""
        return replace(self, **_normalize(overrides))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "RoutingConfig":
        """
        Build a config from a plain mapping.

        Raises:
            ConfigError: If the mapping contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown routing config keys: {', '.join(unknown)}")
        return cls(**_normalize(values))


def _normalize(values: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = dict(values)
    for key in ("channel_offsets", "exit_clearances"):
        if key in normalized:
            normalized[key] = tuple(normalized[key])
    return normalized


DEFAULT_CONFIG = RoutingConfig()
