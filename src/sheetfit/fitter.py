import math
from typing import List, Optional, Sequence

from .config import CircleSpec, Deadline, FitResult, PackingConfig, PlacedCircle, Sheet
from .geometry import find_grid_position


def generate_suggestions(
    width: float,
    height: float,
    circles: Sequence[CircleSpec],
    config: Optional[PackingConfig] = None,
) -> List[CircleSpec]:
    """
    Propose smaller diameters for a list that did not fit.

    When the circles cover more than `fill_threshold` of the sheet, every
    diameter is scaled so the total lands at `target_fill`. Otherwise only the
    `shrink_count` largest circles are shrunk by `shrink_factor`.
    """
    config = config or PackingConfig()
    precision = config.suggestion_precision
    total_area = sum(math.pi * c.radius ** 2 for c in circles)
    sheet_area = width * height

    if total_area > sheet_area * config.fill_threshold:
        scale = math.sqrt(sheet_area * config.target_fill / total_area)
        return [c.resized(round(c.diameter * scale, precision)) for c in circles]

    ordered = sorted(circles, key=lambda c: c.diameter, reverse=True)
    return [
        c.resized(round(c.diameter * config.shrink_factor, precision)) if i < config.shrink_count else c
        for i, c in enumerate(ordered)
    ]


class CircleFitter:
    """Checks whether one of each requested circle fits on a sheet."""

    def __init__(self, sheet: Sheet, config: Optional[PackingConfig] = None):
        self.sheet = sheet
        self.config = config or PackingConfig()

    def _failed(self, circles: Sequence[CircleSpec], placed: List[PlacedCircle], timeout: bool) -> FitResult:
        suggestions = generate_suggestions(self.sheet.width, self.sheet.height, circles, self.config)
        return FitResult(fits=False, circles=placed, suggestions=suggestions, timeout=timeout)

    def fit(self, circles: Sequence[CircleSpec], deadline: Optional[Deadline] = None) -> FitResult:
        """Place circles largest first using the grid scan only."""
        deadline = deadline or Deadline(self.config.timeout_ms)
        sheet = self.sheet
        placed: List[PlacedCircle] = []

        for spec in sorted(circles, key=lambda c: c.diameter, reverse=True):
            if deadline.expired():
                return self._failed(circles, placed, timeout=True)

            position = find_grid_position(
                sheet.width, sheet.height, spec.radius, placed, sheet.gap, deadline, self.config
            )
            if position is None:
                if self.config.verbose:
                    print(f"Could not place {spec.diameter} after {len(placed)} circles")
                return self._failed(circles, placed, timeout=deadline.expired())

            placed.append(PlacedCircle.at(spec, position))

        if self.config.verbose:
            print(f"All {len(placed)} circles fit")

        return FitResult(fits=True, circles=placed)


def try_fit_circles(
    width: float,
    height: float,
    circles: Sequence[CircleSpec],
    gap: float,
    config: Optional[PackingConfig] = None,
) -> FitResult:
    """Check whether one of each circle fits on a width x height sheet."""
    return CircleFitter(Sheet(width, height, gap), config).fit(circles)
