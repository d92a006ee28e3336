"""
Geometry utilities for sheet packing.

Contains:
- is_valid_position / valid_mask: the pairwise overlap test, scalar and batched
- find_grid_position, find_hex_position, find_fallback_position: position finders
- find_position: grid scan, then hex scan, then the fallback probe
"""

import numpy as np
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import Deadline, FinderStrategy, PackingConfig, PlacedCircle, Position

# Number of scan rows evaluated between deadline checks
ROWS_PER_CHUNK = 8

# Upper bound on candidate/circle pairs held in memory by one distance batch
MAX_BATCH_ELEMENTS = 500_000


def placed_arrays(placed: Sequence[PlacedCircle]) -> Tuple[np.ndarray, np.ndarray]:
    """Centers (n, 2) and radii (n,) of the circles placed so far."""
    if len(placed) == 0:
        return np.empty((0, 2)), np.empty(0)
    centers = np.array([(c.x, c.y) for c in placed], dtype=float)
    radii = np.array([c.radius for c in placed], dtype=float)
    return centers, radii


def is_valid_position(
    x: float,
    y: float,
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    tolerance: float = 0.1,
) -> bool:
    """True if a circle at (x, y) keeps at least `gap` clearance from every placed circle."""
    for other in placed:
        distance = np.hypot(x - other.x, y - other.y)
        if distance < radius + other.radius + gap - tolerance:
            return False
    return True


def valid_mask(
    points: np.ndarray,
    radius: float,
    centers: np.ndarray,
    radii: np.ndarray,
    gap: float,
    tolerance: float,
) -> np.ndarray:
    """
    Vectorized is_valid_position for an (m, 2) array of candidate centers.

    Points are processed in slices so no intermediate holds more than
    MAX_BATCH_ELEMENTS point/circle pairs.
    """
    if len(points) == 0:
        return np.zeros(0, dtype=bool)
    if len(centers) == 0:
        return np.ones(len(points), dtype=bool)

    min_allowed = np.maximum(radius + radii + gap - tolerance, 0.0)
    min_allowed_sq = min_allowed * min_allowed
    cx, cy = centers[:, 0], centers[:, 1]

    mask = np.empty(len(points), dtype=bool)
    batch = max(1, MAX_BATCH_ELEMENTS // len(centers))
    for start in range(0, len(points), batch):
        px = points[start:start + batch, 0]
        py = points[start:start + batch, 1]
        dx = px[:, np.newaxis] - cx[np.newaxis, :]
        dx *= dx
        dy = py[:, np.newaxis] - cy[np.newaxis, :]
        dy *= dy
        dx += dy
        mask[start:start + batch] = np.all(dx >= min_allowed_sq, axis=1)
    return mask


def _near_band(centers: np.ndarray, radii: np.ndarray, reach: float, y_min: float, y_max: float) -> np.ndarray:
    """Placed circles that can conflict with any candidate whose y lies in [y_min, y_max]."""
    extent = radii + reach
    return (centers[:, 1] + extent >= y_min) & (centers[:, 1] - extent <= y_max)


def _axis(lo: float, hi: float, step: float) -> np.ndarray:
    if hi < lo:
        return np.empty(0)
    # Small epsilon keeps the upper bound when it lands exactly on a step
    return np.arange(lo, hi + 1e-9, step)


def _first_valid(
    rows: Iterator[np.ndarray],
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    tolerance: float,
    deadline: Optional[Deadline],
) -> Optional[Position]:
    """Scan candidate rows in order, checking the deadline between chunks."""
    centers, radii = placed_arrays(placed)
    chunk: List[np.ndarray] = []

    def scan(batch: List[np.ndarray]) -> Optional[Position]:
        points = np.vstack(batch)
        near = _near_band(centers, radii, radius + gap, points[:, 1].min(), points[:, 1].max())
        mask = valid_mask(points, radius, centers[near], radii[near], gap, tolerance)
        hits = np.flatnonzero(mask)
        if len(hits) == 0:
            return None
        best = points[hits[0]]
        return (float(best[0]), float(best[1]))

    for row in rows:
        if len(row) == 0:
            continue
        chunk.append(row)
        if len(chunk) < ROWS_PER_CHUNK:
            continue
        if deadline is not None and deadline.expired():
            return None
        found = scan(chunk)
        if found is not None:
            return found
        chunk = []

    if chunk:
        if deadline is not None and deadline.expired():
            return None
        return scan(chunk)
    return None


# =========================================================================
# Position Finders
# =========================================================================

def grid_step(width: float, height: float, radius: float, config: PackingConfig) -> float:
    """max(radius * grid_step_factor, min_grid_step), the floor scaled down for small sheets."""
    floor = min(config.min_grid_step, min(width, height) * config.min_grid_step_fraction)
    return max(radius * config.grid_step_factor, floor)


def find_grid_position(
    width: float,
    height: float,
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    deadline: Optional[Deadline] = None,
    config: Optional[PackingConfig] = None,
) -> Optional[Position]:
    """Row-major scan of a uniform grid over the inset rectangle."""
    config = config or PackingConfig()
    step = grid_step(width, height, radius, config)
    if step <= 0:
        return None
    xs = _axis(radius, width - radius, step)
    ys = _axis(radius, height - radius, step)
    if len(xs) == 0 or len(ys) == 0:
        return None

    def rows() -> Iterator[np.ndarray]:
        for y in ys:
            yield np.column_stack([xs, np.full(len(xs), y)])

    return _first_valid(rows(), radius, placed, gap, config.overlap_tolerance, deadline)


def find_hex_position(
    width: float,
    height: float,
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    deadline: Optional[Deadline] = None,
    config: Optional[PackingConfig] = None,
) -> Optional[Position]:
    """
    Row-major scan of a hexagonal lattice.

    Rows are radius * sqrt(3) apart, columns 2 * radius apart, and every other
    row is shifted by one radius: the close-packed arrangement for equal circles.
    """
    config = config or PackingConfig()
    if radius <= 0:
        return None
    dy = radius * np.sqrt(3)
    ys = _axis(radius, height - radius, dy)
    if len(ys) == 0 or width - radius < radius:
        return None

    def rows() -> Iterator[np.ndarray]:
        for row, y in enumerate(ys):
            x_offset = radius if row % 2 else 0.0
            xs = _axis(radius + x_offset, width - radius, 2 * radius)
            yield np.column_stack([xs, np.full(len(xs), y)])

    return _first_valid(rows(), radius, placed, gap, config.overlap_tolerance, deadline)


def find_fallback_position(
    width: float,
    height: float,
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    deadline: Optional[Deadline] = None,
    config: Optional[PackingConfig] = None,
) -> Optional[Position]:
    """Probe the four inset corners and the sheet center."""
    config = config or PackingConfig()
    if width < 2 * radius or height < 2 * radius:
        return None
    if deadline is not None and deadline.expired():
        return None

    probes = [
        (radius, radius),
        (width - radius, radius),
        (radius, height - radius),
        (width - radius, height - radius),
        (width / 2, height / 2),
    ]
    for x, y in probes:
        if is_valid_position(x, y, radius, placed, gap, config.overlap_tolerance):
            return (float(x), float(y))
    return None


FINDERS = {
    FinderStrategy.GRID: find_grid_position,
    FinderStrategy.HEX: find_hex_position,
    FinderStrategy.FALLBACK: find_fallback_position,
}


def find_position(
    width: float,
    height: float,
    radius: float,
    placed: Sequence[PlacedCircle],
    gap: float,
    deadline: Optional[Deadline] = None,
    config: Optional[PackingConfig] = None,
) -> Optional[Position]:
    """
    Composed finder: grid scan first (better for mixed sizes), then the hex
    lattice (better for uniform sizes), then the fallback probe if enabled.
    """
    config = config or PackingConfig()
    strategies = [FinderStrategy.GRID, FinderStrategy.HEX]
    if config.use_fallback_probe:
        strategies.append(FinderStrategy.FALLBACK)

    for strategy in strategies:
        if deadline is not None and deadline.expired():
            return None
        position = FINDERS[strategy](width, height, radius, placed, gap, deadline, config)
        if position is not None:
            return position
    return None
