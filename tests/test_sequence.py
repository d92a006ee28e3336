import unittest
from collections import Counter
from sheetfit.config import CircleSpec
from sheetfit.sequence import (
    LinearCongruentialGenerator,
    SequenceGenerator,
    compatibility_groups,
    distinct_specs,
)


def diameters(specs):
    return [s.diameter for s in specs]


class TestLinearCongruentialGenerator(unittest.TestCase):
    def test_first_value_from_zero_seed(self):
        """One step from state 0 leaves just the increment."""
        self.assertAlmostEqual(LinearCongruentialGenerator(0).random(), 1013904223 / 2 ** 32)

    def test_same_seed_same_stream(self):
        a, b = LinearCongruentialGenerator(42), LinearCongruentialGenerator(42)
        self.assertEqual([a.random() for _ in range(20)], [b.random() for _ in range(20)])

    def test_values_in_unit_interval(self):
        rng = LinearCongruentialGenerator(7)
        for _ in range(1000):
            value = rng.random()
            self.assertGreaterEqual(value, 0.0)
            self.assertLess(value, 1.0)

    def test_choice_returns_a_member(self):
        rng = LinearCongruentialGenerator(3)
        items = ["a", "b", "c"]
        for _ in range(50):
            self.assertIn(rng.choice(items), items)


class TestCompatibilityGroups(unittest.TestCase):
    def test_mixed_sizes(self):
        circles = [CircleSpec(75), CircleSpec(60), CircleSpec(50), CircleSpec(40)]
        groups = compatibility_groups(circles, 1.5)
        self.assertEqual([diameters(g) for g in groups], [[40, 50, 60], [75]])

    def test_ratio_is_measured_from_group_smallest(self):
        circles = [CircleSpec(10), CircleSpec(14), CircleSpec(16), CircleSpec(30)]
        groups = compatibility_groups(circles, 1.5)
        self.assertEqual([diameters(g) for g in groups], [[10, 14], [16], [30]])

    def test_duplicate_diameters_collapse(self):
        circles = [CircleSpec(20, "red"), CircleSpec(20, "blue"), CircleSpec(50, "green")]
        specs = distinct_specs(circles)
        self.assertEqual(diameters(specs), [50, 20])
        self.assertEqual(specs[1].color, "red")

    def test_empty_input(self):
        self.assertEqual(compatibility_groups([]), [])


class TestSequenceGenerator(unittest.TestCase):
    def setUp(self):
        self.circles = [CircleSpec(75, "a"), CircleSpec(60, "b"), CircleSpec(50, "c"), CircleSpec(40, "d")]
        self.generator = SequenceGenerator(self.circles)

    def test_length(self):
        self.assertEqual(len(self.generator.generate(37, seed=1)), 37)

    def test_deterministic_for_a_seed(self):
        first = self.generator.generate(60, seed=5)
        second = SequenceGenerator(self.circles).generate(60, seed=5)
        self.assertEqual(first, second)

    def test_seeds_diverge(self):
        self.assertNotEqual(self.generator.generate(60, seed=0), self.generator.generate(60, seed=1))

    def test_types_are_offered_evenly(self):
        """Every prefix keeps per-type offer counts within two of each other."""
        sequence = self.generator.generate(80, seed=9)
        for end in range(1, len(sequence) + 1):
            counts = Counter(s.diameter for s in sequence[:end])
            values = [counts.get(c.diameter, 0) for c in self.circles]
            if end >= len(self.circles) * 2:
                self.assertLessEqual(max(values) - min(values), 2)

    def test_balance_is_per_type(self):
        """Groups are balanced on their least offered member, so each type gets about a quarter."""
        counts = Counter(s.diameter for s in self.generator.generate(100, seed=2))
        for circle in self.circles:
            self.assertTrue(23 <= counts[circle.diameter] <= 27)

    def test_single_type(self):
        sequence = SequenceGenerator([CircleSpec(10, "x")]).generate(5, seed=0)
        self.assertEqual(diameters(sequence), [10] * 5)

    def test_no_circles(self):
        self.assertEqual(SequenceGenerator([]).generate(10, seed=0), [])


if __name__ == '__main__':
    unittest.main()
