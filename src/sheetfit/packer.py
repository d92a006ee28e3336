import math
from typing import List, Optional, Sequence

from .config import (
    CircleSpec,
    CircleTypeSummary,
    Deadline,
    MaxCirclesResult,
    OptimizerOptions,
    PackingConfig,
    PackingProgress,
    PlacedCircle,
    Sheet,
)
from .geometry import find_position
from .sequence import SequenceGenerator, distinct_specs


def group_circles_by_type(
    circles: Sequence[CircleSpec], placed: Sequence[PlacedCircle]
) -> List[CircleTypeSummary]:
    """One summary per distinct requested diameter, largest first."""
    summaries = []
    for spec in distinct_specs(circles):
        positions = [p.position for p in placed if p.diameter == spec.diameter]
        summaries.append(CircleTypeSummary(
            diameter=spec.diameter,
            color=spec.color,
            count=len(positions),
            positions=positions,
        ))
    return summaries


def evaluate_result(result: MaxCirclesResult) -> float:
    """
    Score a packing, rewarding an even spread across circle types.

    The base is ten points per circle. The balance gap (most placed type minus
    least placed type) earns a bonus when small and a quadratic penalty
    otherwise; having every type present earns a final bonus.
    """
    if result.total_count == 0:
        return 0

    counts = result.counts
    score = result.total_count * 10
    gap = max(counts) - min(counts)

    if gap == 0:
        score += 1000
    elif gap == 1 and result.total_count >= 12:
        score += 500
    elif gap == 2 and result.total_count >= 12:
        score += 200

    score -= gap ** 2 * (5 if gap >= 3 else 2)

    if all(c > 0 for c in counts):
        score += 100

    return score


class SheetPacker:
    """Packs as many circles as possible onto a rectangular sheet."""

    def __init__(self, sheet: Sheet, circles: Sequence[CircleSpec], config: Optional[PackingConfig] = None):
        self.sheet = sheet
        self.config = config or PackingConfig()
        self.circles = list(circles)
        self.types = distinct_specs(self.circles)
        self.sequencer = SequenceGenerator(self.circles, self.config.compatibility_ratio)
        self.progress = PackingProgress(max_failed_attempts=self.failure_ceiling)

    @property
    def failure_ceiling(self) -> int:
        return max(self.config.failures_per_type * len(self.types), self.config.min_failure_ceiling)

    def sequence_length(self) -> int:
        """Estimated sheet capacity for the smallest circle, with slack, plus the failure ceiling."""
        if not self.types:
            return 0
        smallest = self.types[-1].diameter + self.sheet.gap
        cell_area = smallest * smallest * math.sqrt(3) / 2
        capacity = self.sheet.area / cell_area if cell_area > 0 else self.config.max_sequence_length
        length = int(math.ceil(capacity * self.config.sequence_slack)) + self.failure_ceiling
        return min(max(length, len(self.types)), self.config.max_sequence_length)

    def _empty_result(self, timeout: bool = False) -> MaxCirclesResult:
        return MaxCirclesResult(
            total_count=0,
            circles_by_type=group_circles_by_type(self.circles, []),
            timeout=timeout,
        )

    def _summarize(self, placed: Sequence[PlacedCircle], timeout: bool) -> MaxCirclesResult:
        return MaxCirclesResult(
            total_count=len(placed),
            circles_by_type=group_circles_by_type(self.circles, placed),
            timeout=timeout,
        )

    # =========================================================================
    # Single Attempt
    # =========================================================================

    def pack_sequence(self, sequence: Sequence[CircleSpec], deadline: Optional[Deadline] = None) -> MaxCirclesResult:
        """
        Offer circles in order, keeping each one that fits.

        Stops when the consecutive failure ceiling is reached, when nothing has
        been placed after `empty_sheet_failure_limit` failures, or when the
        deadline passes. Whatever was placed before stopping is kept.
        """
        deadline = deadline or Deadline(self.config.timeout_ms)
        sheet = self.sheet
        placed: List[PlacedCircle] = []
        ceiling = self.failure_ceiling
        empty_limit = self.config.empty_sheet_failure_limit
        if empty_limit is not None:
            empty_limit = min(ceiling, empty_limit)
        self.progress = PackingProgress(max_failed_attempts=ceiling, phase="attempt")

        for spec in sequence:
            if deadline.expired():
                if self.config.verbose:
                    print(f"Timed out! {self.progress}")
                return self._summarize(placed, timeout=True)

            position = find_position(
                sheet.width, sheet.height, spec.radius, placed, sheet.gap, deadline, self.config
            )

            if position is not None:
                placed.append(PlacedCircle.at(spec, position))
                self.progress.circles_placed += 1
                self.progress.failed_attempts = 0

                if self.config.verbose and self.progress.circles_placed % 25 == 0:
                    print(self.progress)
                continue

            if deadline.expired():
                if self.config.verbose:
                    print(f"Timed out! {self.progress}")
                return self._summarize(placed, timeout=True)

            self.progress.failed_attempts += 1
            if not placed and empty_limit is not None and self.progress.failed_attempts >= empty_limit:
                break
            if self.progress.failed_attempts >= ceiling:
                break

        if self.config.verbose:
            print(f"Done! {self.progress}")

        return self._summarize(placed, timeout=False)

    def pack_attempt(self, seed: int = 0, deadline: Optional[Deadline] = None) -> MaxCirclesResult:
        """Run one attempt with the sequence generated from `seed`."""
        sequence = self.sequencer.generate(self.sequence_length(), seed)
        return self.pack_sequence(sequence, deadline)

    # =========================================================================
    # Multi-Attempt Optimizer
    # =========================================================================

    def maximize(self, attempts: Optional[int] = None, timeout_ms: Optional[float] = None) -> MaxCirclesResult:
        """Run several seeded attempts inside one time budget and keep the best scoring."""
        attempts = self.config.attempts if attempts is None else attempts
        timeout_ms = self.config.timeout_ms if timeout_ms is None else timeout_ms
        overall = Deadline(timeout_ms)

        best: Optional[MaxCirclesResult] = None
        best_score = -math.inf
        timed_out = False

        for attempt in range(attempts):
            if overall.expired():
                timed_out = True
                break

            result = self.pack_attempt(self.config.seed + attempt, overall)
            timed_out = timed_out or result.timeout
            score = evaluate_result(result)

            if self.config.verbose:
                print(f"Attempt {attempt + 1}/{attempts}: {result.total_count} circles, "
                      f"counts {result.counts}, score {score} ({overall.elapsed_ms:.0f} ms)")

            if score > best_score:
                best, best_score = result, score

            if result.timeout:
                break

        if best is None or best.total_count == 0:
            return self._empty_result(timeout=timed_out)

        best.timeout = timed_out
        return best


def calculate_max_circles_for_all(
    width: float,
    height: float,
    circles_to_fit: Sequence[CircleSpec],
    gap_size: float,
    options: Optional[OptimizerOptions] = None,
    config: Optional[PackingConfig] = None,
) -> MaxCirclesResult:
    """Pack as many circles as possible, drawn repeatedly from `circles_to_fit`."""
    config = config or PackingConfig()
    options = options or OptimizerOptions()
    packer = SheetPacker(Sheet(width, height, gap_size), circles_to_fit, config)
    return packer.maximize(attempts=options.attempts, timeout_ms=options.timeout_ms)
