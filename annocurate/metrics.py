"""Agreement metrics over curation positions."""
from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

ABSENT = ""


def percent_agreement(unit_values: Iterable[Sequence[str | None]]) -> float:
    """Share of units on which every rater gave the same value.

    A ``None`` value means the rater did not annotate the unit; it counts as
    a distinct answer rather than being skipped, so a span annotated by only
    some users is a disagreement.
    """
    total = 0
    agree = 0
    for values in unit_values:
        if not values:
            continue
        total += 1
        if len({ABSENT if value is None else value for value in values}) == 1:
            agree += 1
    return agree / total if total else 0.0


def cohens_kappa(pairs: Sequence[tuple[str | None, str | None]]) -> float:
    """Cohen's kappa for two users over the same positions."""
    if not pairs:
        return 0.0
    normalized = [(ABSENT if a is None else a, ABSENT if b is None else b) for a, b in pairs]
    total = len(normalized)
    observed = sum(1 for a, b in normalized if a == b) / total
    counts_a = Counter(a for a, _ in normalized)
    counts_b = Counter(b for _, b in normalized)
    categories = set(counts_a) | set(counts_b)
    expected = sum((counts_a[cat] / total) * (counts_b[cat] / total) for cat in categories)
    if expected == 1.0:
        return 1.0
    return (observed - expected) / (1 - expected)
