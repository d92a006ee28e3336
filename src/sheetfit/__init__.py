"""
sheetfit - Fit and maximize circles on a rectangular sheet.

Usage:
    from sheetfit import CircleSpec, PackingConfig, Sheet, SheetPacker
    from sheetfit import try_fit_circles, calculate_max_circles_for_all

    circles = [CircleSpec(75, "#ff6b6b"), CircleSpec(50, "#4ecdc4")]

    # Does one of each fit?
    result = try_fit_circles(250, 250, circles, gap=5)
    if not result.fits:
        print(result.suggestions)

    # How many can be cut, drawing repeatedly from the list?
    result = calculate_max_circles_for_all(250, 250, circles, gap_size=5)
    print(result.total_count, result.counts)

    # With configuration
    config = PackingConfig(overlap_tolerance=0.05, verbose=True)
    packer = SheetPacker(Sheet(250, 250, gap=5), circles, config)
    result = packer.maximize(attempts=40)

Search strategies:
    - Grid scan: uniform step over the sheet, first free cell wins
    - Hex scan: close-packed lattice, best for equal circles
    - Fallback: corners and center, last resort for a large leftover circle
"""

from .config import (
    PackingConfig,
    PackingProgress,
    OptimizerOptions,
    FinderStrategy,
    Deadline,
    CircleSpec,
    PlacedCircle,
    Sheet,
    FitResult,
    CircleTypeSummary,
    MaxCirclesResult,
    Position,
)
from .geometry import (
    is_valid_position,
    find_grid_position,
    find_hex_position,
    find_fallback_position,
    find_position,
    grid_step,
)
from .sequence import LinearCongruentialGenerator, SequenceGenerator, compatibility_groups
from .packer import SheetPacker, calculate_max_circles_for_all, evaluate_result, group_circles_by_type
from .fitter import CircleFitter, generate_suggestions, try_fit_circles
from .parsing import CircleInput, parse_number, validate_number_input, validate_circles

__all__ = [
    "CircleFitter",
    "CircleInput",
    "CircleSpec",
    "CircleTypeSummary",
    "Deadline",
    "FinderStrategy",
    "FitResult",
    "LinearCongruentialGenerator",
    "MaxCirclesResult",
    "OptimizerOptions",
    "PackingConfig",
    "PackingProgress",
    "PlacedCircle",
    "Position",
    "SequenceGenerator",
    "Sheet",
    "SheetPacker",
    "calculate_max_circles_for_all",
    "compatibility_groups",
    "evaluate_result",
    "find_fallback_position",
    "find_grid_position",
    "find_hex_position",
    "find_position",
    "generate_suggestions",
    "grid_step",
    "group_circles_by_type",
    "is_valid_position",
    "parse_number",
    "try_fit_circles",
    "validate_circles",
    "validate_number_input",
]

__version__ = "0.1.0"
