import itertools
import math
import unittest
from sheetfit.config import (
    CircleSpec,
    CircleTypeSummary,
    Deadline,
    MaxCirclesResult,
    OptimizerOptions,
    PackingConfig,
    PlacedCircle,
    Sheet,
)
from sheetfit.packer import (
    SheetPacker,
    calculate_max_circles_for_all,
    evaluate_result,
    group_circles_by_type,
)

MIXED = [CircleSpec(75, "#ff6b6b"), CircleSpec(60, "#4ecdc4"), CircleSpec(50, "#45b7d1"), CircleSpec(40, "#96ceb4")]


def result_with_counts(counts):
    types = [CircleTypeSummary(diameter=10 * (i + 1), color="", count=c, positions=[(0.0, 0.0)] * c)
             for i, c in enumerate(counts)]
    return MaxCirclesResult(total_count=sum(counts), circles_by_type=types)


def flatten(result):
    return [(t.diameter / 2, x, y) for t in result.circles_by_type for x, y in t.positions]


class PackingInvariants:
    """Checks shared by every packing result."""

    def assert_well_formed(self, result, width, height, gap, tolerance=0.1):
        self.assertEqual(result.total_count, sum(t.count for t in result.circles_by_type))
        self.assertEqual(result.total_count, sum(len(t.positions) for t in result.circles_by_type))

        circles = flatten(result)
        for r, x, y in circles:
            self.assertTrue(r - 1e-9 <= x <= width - r + 1e-9)
            self.assertTrue(r - 1e-9 <= y <= height - r + 1e-9)
        for (r1, x1, y1), (r2, x2, y2) in itertools.combinations(circles, 2):
            self.assertGreaterEqual(math.hypot(x1 - x2, y1 - y2), r1 + r2 + gap - tolerance - 1e-9)


class TestScoring(unittest.TestCase):
    def test_empty_result_scores_zero(self):
        self.assertEqual(evaluate_result(result_with_counts([0, 0])), 0)

    def test_perfect_balance(self):
        self.assertEqual(evaluate_result(result_with_counts([3, 3, 3, 3])), 120 + 1000 + 100)

    def test_gap_of_one(self):
        self.assertEqual(evaluate_result(result_with_counts([4, 3, 3, 3])), 130 + 500 - 2 + 100)

    def test_gap_of_two(self):
        self.assertEqual(evaluate_result(result_with_counts([5, 3, 4, 3])), 150 + 200 - 8 + 100)

    def test_small_results_get_no_balance_bonus(self):
        self.assertEqual(evaluate_result(result_with_counts([1, 1, 0])), 20 - 2)

    def test_large_gap_is_penalized(self):
        self.assertEqual(evaluate_result(result_with_counts([6, 1, 2, 3])), 120 - 25 * 5 + 100)

    def test_balance_beats_raw_count(self):
        balanced = result_with_counts([4, 4, 4, 4])
        lopsided = result_with_counts([12, 2, 2, 2])
        self.assertGreater(evaluate_result(balanced), evaluate_result(lopsided))


class TestResultGrouper(unittest.TestCase):
    def test_groups_in_descending_order(self):
        circles = [CircleSpec(20, "red"), CircleSpec(50, "blue"), CircleSpec(20, "green")]
        placed = [
            PlacedCircle(20, "red", 10.0, 10.0),
            PlacedCircle(50, "blue", 60.0, 30.0),
            PlacedCircle(20, "red", 30.0, 10.0),
        ]
        summary = group_circles_by_type(circles, placed)

        self.assertEqual([t.diameter for t in summary], [50, 20])
        self.assertEqual([t.count for t in summary], [1, 2])
        self.assertEqual(summary[1].color, "red")
        self.assertEqual(summary[1].positions, [(10.0, 10.0), (30.0, 10.0)])

    def test_unplaced_types_are_listed(self):
        summary = group_circles_by_type(MIXED, [])
        self.assertEqual([t.count for t in summary], [0, 0, 0, 0])


class TestSingleAttempt(unittest.TestCase, PackingInvariants):
    def setUp(self):
        self.sheet = Sheet(100, 100, gap=0)
        self.small = CircleSpec(20, "red")

    def test_explicit_sequence_fills_first_row(self):
        packer = SheetPacker(self.sheet, [self.small])
        result = packer.pack_sequence([self.small] * 4)
        self.assertEqual(result.total_count, 4)
        self.assertEqual(result.circles_by_type[0].positions,
                         [(10.0, 10.0), (30.0, 10.0), (50.0, 10.0), (70.0, 10.0)])

    def test_same_seed_same_layout(self):
        packer = SheetPacker(Sheet(250, 250, gap=5), MIXED)
        first = packer.pack_attempt(seed=3)
        second = SheetPacker(Sheet(250, 250, gap=5), MIXED).pack_attempt(seed=3)
        self.assertEqual(first, second)

    def test_attempt_result_is_valid(self):
        result = SheetPacker(Sheet(250, 250, gap=5), MIXED).pack_attempt(seed=0)
        self.assertGreater(result.total_count, 0)
        self.assertFalse(result.timeout)
        self.assert_well_formed(result, 250, 250, 5)

    def test_unplaceable_circle_fails_fast(self):
        packer = SheetPacker(self.sheet, [CircleSpec(200, "huge")])
        result = packer.pack_attempt()
        self.assertEqual(result.total_count, 0)
        self.assertFalse(result.timeout)
        self.assertEqual(packer.progress.failed_attempts, 50)

    def test_empty_sheet_limit_is_tunable(self):
        config = PackingConfig(min_failure_ceiling=80)
        packer = SheetPacker(self.sheet, [CircleSpec(200, "huge")], config)
        packer.pack_attempt()
        self.assertEqual(packer.progress.failed_attempts, 50)

        config = PackingConfig(min_failure_ceiling=80, empty_sheet_failure_limit=None)
        packer = SheetPacker(self.sheet, [CircleSpec(200, "huge")], config)
        packer.pack_attempt()
        self.assertEqual(packer.progress.failed_attempts, 80)

    def test_failure_ceiling_scales_with_types(self):
        circles = [CircleSpec(d) for d in range(10, 80, 10)]
        self.assertEqual(SheetPacker(self.sheet, circles).failure_ceiling, 70)
        self.assertEqual(SheetPacker(self.sheet, circles[:2]).failure_ceiling, 50)

    def test_expired_deadline_keeps_partial_result(self):
        packer = SheetPacker(self.sheet, [self.small])
        result = packer.pack_sequence([self.small] * 4, Deadline(-1))
        self.assertTrue(result.timeout)
        self.assertEqual(result.total_count, 0)


class TestOptimizer(unittest.TestCase, PackingInvariants):
    def test_single_type_fits(self):
        result = calculate_max_circles_for_all(100, 100, [CircleSpec(50, "red")], 5)
        self.assertGreaterEqual(result.total_count, 1)
        self.assert_well_formed(result, 100, 100, 5)

    def test_mixed_types_are_balanced(self):
        result = calculate_max_circles_for_all(250, 250, MIXED, 5, OptimizerOptions(attempts=40))
        counts = result.counts
        self.assertGreaterEqual(result.total_count, 8)
        self.assertLessEqual(max(counts) - min(counts), 4)
        self.assert_well_formed(result, 250, 250, 5)

    def test_nothing_fits(self):
        result = calculate_max_circles_for_all(50, 50, [CircleSpec(80, "a"), CircleSpec(60, "b")], 5,
                                               OptimizerOptions(attempts=3))
        self.assertEqual(result.total_count, 0)
        self.assertEqual([(t.diameter, t.count) for t in result.circles_by_type], [(80, 0), (60, 0)])

    def test_tiny_budget_times_out(self):
        result = calculate_max_circles_for_all(250, 250, MIXED, 5, OptimizerOptions(timeout_ms=1))
        self.assertTrue(result.timeout)
        self.assertGreaterEqual(result.total_count, 0)
        self.assert_well_formed(result, 250, 250, 5)

    def test_options_fall_back_to_config(self):
        """Options left unset keep the budget given in the config."""
        result = calculate_max_circles_for_all(250, 250, MIXED, 5, OptimizerOptions(attempts=2),
                                               config=PackingConfig(timeout_ms=1))
        self.assertTrue(result.timeout)

    def test_options_override_config(self):
        config = PackingConfig(timeout_ms=1)
        result = calculate_max_circles_for_all(100, 100, [CircleSpec(30, "red")], 2,
                                               OptimizerOptions(attempts=1, timeout_ms=20000), config=config)
        self.assertFalse(result.timeout)
        self.assertGreater(result.total_count, 0)

    def test_more_attempts_never_score_worse(self):
        packer = SheetPacker(Sheet(200, 150, gap=3), MIXED)
        few = packer.maximize(attempts=2)
        many = packer.maximize(attempts=6)
        self.assertGreaterEqual(evaluate_result(many), evaluate_result(few))

    def test_dict_shape(self):
        result = calculate_max_circles_for_all(100, 100, [CircleSpec(30, "red")], 2,
                                               OptimizerOptions(attempts=2))
        data = result.to_dict()
        self.assertEqual(set(data), {"totalCount", "circlesByType"})
        entry = data["circlesByType"][0]
        self.assertEqual(entry["count"], len(entry["positions"]))
        self.assertEqual(set(entry["positions"][0]), {"x", "y"})


if __name__ == '__main__':
    unittest.main()
