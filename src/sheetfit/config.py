"""
Configuration and type definitions for sheet packing.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any
from enum import Enum

# Type aliases
Position = Tuple[float, float]  # (x, y)


class FinderStrategy(Enum):
    """Available position search strategies."""
    GRID = "grid"
    HEX = "hex"
    FALLBACK = "fallback"


@dataclass
class PackingConfig:
    """
    Configuration parameters for the packing engine.

    Geometry:
        overlap_tolerance: Slack absorbed by the overlap test, in sheet units
            (0.1 suits centimetres; lower it for coarser units)
        grid_step_factor: Grid scan step as a fraction of the circle radius
        min_grid_step: Grid scan never steps finer than this, in sheet units
        min_grid_step_fraction: Caps min_grid_step at this fraction of the shorter
            sheet side, so sheets measured in large units (metres) still get a fine scan
        use_fallback_probe: Try corners and center after both scans fail

    Search budget:
        timeout_ms: Wall-clock budget for one top-level call
        attempts: Number of independent attempts run by the optimizer
        seed: Base seed, attempt i uses seed + i
        failures_per_type: Consecutive failures allowed per distinct circle type
        min_failure_ceiling: Lower bound for the consecutive failure ceiling
        empty_sheet_failure_limit: Give up after this many failures when nothing
            has been placed yet (None disables the fast-fail)

    Sequencing:
        compatibility_ratio: Diameters within this ratio share a group
        sequence_slack: Multiplier applied to the estimated sheet capacity
        max_sequence_length: Hard cap on the number of circles offered per attempt

    Suggestions:
        fill_threshold: Above this fill ratio every circle is scaled down
        target_fill: Fill ratio aimed at when scaling uniformly
        shrink_factor: Scale applied to the largest circles otherwise
        shrink_count: How many of the largest circles get shrunk
        suggestion_precision: Decimal places kept in suggested diameters
    """
    # Geometry
    overlap_tolerance: float = 0.1
    grid_step_factor: float = 0.2
    min_grid_step: float = 1.0
    min_grid_step_fraction: float = 0.01
    use_fallback_probe: bool = True

    # Search budget
    timeout_ms: float = 20000
    attempts: int = 15
    seed: int = 0
    failures_per_type: int = 10
    min_failure_ceiling: int = 50
    empty_sheet_failure_limit: Optional[int] = 50

    # Sequencing
    compatibility_ratio: float = 1.5
    sequence_slack: float = 1.5
    max_sequence_length: int = 5000

    # Suggestions
    fill_threshold: float = 0.7
    target_fill: float = 0.6
    shrink_factor: float = 0.85
    shrink_count: int = 2
    suggestion_precision: int = 1

    # Output
    verbose: bool = False


@dataclass
class OptimizerOptions:
    """Per-call overrides for the optimizer; fields left as None fall back to PackingConfig."""
    attempts: Optional[int] = None
    timeout_ms: Optional[float] = None


@dataclass
class PackingProgress:
    """Tracks the current state of a packing attempt."""
    circles_placed: int = 0
    failed_attempts: int = 0
    max_failed_attempts: int = 50
    phase: str = ""

    @property
    def progress_ratio(self) -> float:
        """How close to stopping (0.0 = just started, 1.0 = done)."""
        return self.failed_attempts / self.max_failed_attempts if self.max_failed_attempts > 0 else 0

    def __str__(self) -> str:
        phase_str = f"[{self.phase}] " if self.phase else ""
        return f"{phase_str}Placed: {self.circles_placed} | Failed: {self.failed_attempts}/{self.max_failed_attempts} ({self.progress_ratio:.0%})"


class Deadline:
    """Wall-clock budget shared by everything running inside one call."""

    def __init__(self, timeout_ms: float):
        self.start = time.monotonic()
        self.expires_at = self.start + timeout_ms / 1000.0

    def expired(self) -> bool:
        return time.monotonic() > self.expires_at

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start) * 1000.0


# =========================================================================
# Data model
# =========================================================================

@dataclass(frozen=True)
class CircleSpec:
    """A requested circle: its diameter and an opaque display color."""
    diameter: float
    color: str = ""

    @property
    def radius(self) -> float:
        return self.diameter / 2

    def resized(self, diameter: float) -> "CircleSpec":
        return CircleSpec(diameter=diameter, color=self.color)


@dataclass(frozen=True)
class PlacedCircle:
    """A circle bound to a center position in sheet coordinates (origin top-left)."""
    diameter: float
    color: str
    x: float
    y: float

    @classmethod
    def at(cls, spec: CircleSpec, position: Position) -> "PlacedCircle":
        return cls(diameter=spec.diameter, color=spec.color,
                   x=float(position[0]), y=float(position[1]))

    @property
    def radius(self) -> float:
        return self.diameter / 2

    @property
    def position(self) -> Position:
        return (self.x, self.y)


@dataclass(frozen=True)
class Sheet:
    """The usable rectangle and the minimum clearance between circles."""
    width: float
    height: float
    gap: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass
class FitResult:
    """Outcome of placing one of each requested circle."""
    fits: bool
    circles: List[PlacedCircle] = field(default_factory=list)
    suggestions: Optional[List[CircleSpec]] = None
    timeout: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fits": self.fits,
            "circles": [
                {"diameter": c.diameter, "color": c.color, "x": c.x, "y": c.y}
                for c in self.circles
            ],
        }
        if self.suggestions is not None:
            out["suggestions"] = [
                {"diameter": s.diameter, "color": s.color} for s in self.suggestions
            ]
        if self.timeout:
            out["timeout"] = True
        return out


@dataclass
class CircleTypeSummary:
    """Placed count and positions for one distinct diameter."""
    diameter: float
    color: str
    count: int = 0
    positions: List[Position] = field(default_factory=list)


@dataclass
class MaxCirclesResult:
    """Outcome of packing as many circles as possible."""
    total_count: int
    circles_by_type: List[CircleTypeSummary] = field(default_factory=list)
    timeout: bool = False

    @property
    def counts(self) -> List[int]:
        return [t.count for t in self.circles_by_type]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "totalCount": self.total_count,
            "circlesByType": [
                {
                    "diameter": t.diameter,
                    "color": t.color,
                    "count": t.count,
                    "positions": [{"x": x, "y": y} for x, y in t.positions],
                }
                for t in self.circles_by_type
            ],
        }
        if self.timeout:
            out["timeout"] = True
        return out
