"""
Deterministic ordering of the circles offered to the packer.

Circle types are clustered into compatibility groups (diameters within a
small ratio of each other) and the sequence always draws from the group that
has been offered least so far, so an attempt that stops early still has every
group represented about evenly.
"""

from typing import Dict, List, Sequence

from .config import CircleSpec

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2 ** 32


class LinearCongruentialGenerator:
    """Seeded LCG returning floats in [0, 1). Same seed, same stream."""

    def __init__(self, seed: int = 0):
        self.state = int(seed) % LCG_MODULUS

    def random(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def choice(self, items: Sequence):
        index = int(self.random() * len(items))
        return items[min(index, len(items) - 1)]


def distinct_specs(circles: Sequence[CircleSpec]) -> List[CircleSpec]:
    """One spec per diameter (first color wins), largest first."""
    seen: Dict[float, CircleSpec] = {}
    for circle in circles:
        seen.setdefault(circle.diameter, circle)
    return sorted(seen.values(), key=lambda c: c.diameter, reverse=True)


def compatibility_groups(circles: Sequence[CircleSpec], ratio: float = 1.5) -> List[List[CircleSpec]]:
    """
    Greedy grouping by diameter ratio.

    Scanning ascending, each ungrouped diameter opens a group and absorbs every
    larger ungrouped diameter that is at most `ratio` times its size.
    """
    ordered = sorted(distinct_specs(circles), key=lambda c: c.diameter)
    grouped = [False] * len(ordered)
    groups: List[List[CircleSpec]] = []

    for i, smallest in enumerate(ordered):
        if grouped[i]:
            continue
        group = [smallest]
        grouped[i] = True
        for j in range(i + 1, len(ordered)):
            if not grouped[j] and ordered[j].diameter <= smallest.diameter * ratio:
                group.append(ordered[j])
                grouped[j] = True
        groups.append(group)

    return groups


class SequenceGenerator:
    """Produces balanced, reproducible circle orderings for packing attempts."""

    def __init__(self, circles: Sequence[CircleSpec], ratio: float = 1.5):
        self.groups = compatibility_groups(circles, ratio)

    def generate(self, length: int, seed: int = 0) -> List[CircleSpec]:
        if not self.groups or length <= 0:
            return []

        rng = LinearCongruentialGenerator(seed)
        offered: Dict[float, int] = {c.diameter: 0 for group in self.groups for c in group}
        sequence: List[CircleSpec] = []

        for _ in range(length):
            group_minima = [min(offered[c.diameter] for c in group) for group in self.groups]
            lowest = min(group_minima)
            candidates = [g for g, m in zip(self.groups, group_minima) if m == lowest]
            group = candidates[0] if len(candidates) == 1 else rng.choice(candidates)

            # Members lagging behind inside the group get picked first
            least = min(offered[c.diameter] for c in group)
            members = [c for c in group if offered[c.diameter] == least]
            pick = rng.choice(members)

            offered[pick.diameter] += 1
            sequence.append(pick)

        return sequence
