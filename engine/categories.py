"""Weight-converging category allocation for upcoming questions."""
from __future__ import annotations

from typing import Dict, Sequence

from .types import CATEGORIES, CATEGORY_WEIGHTS, Category


def category_deviations(asked: Sequence[Category], question_number: int) -> Dict[Category, float]:
    """Return ``expected - actual`` per category for the upcoming question."""

    counts = {category: 0 for category in CATEGORIES}
    for category in asked:
        if category in counts:
            counts[category] += 1
    return {
        category: question_number * CATEGORY_WEIGHTS[category] - counts[category]
        for category in CATEGORIES
    }


def next_category(asked: Sequence[Category], question_number: int) -> Category:
    """Pick the most under-represented category relative to its target weight.

    ``question_number`` is 1-based and counts the question being chosen. Ties
    resolve to the earliest entry of ``CATEGORIES``.
    """

    deviations = category_deviations(asked, question_number)
    best = CATEGORIES[0]
    for category in CATEGORIES[1:]:
        if deviations[category] > deviations[best]:
            best = category
    return best


__all__ = ["category_deviations", "next_category"]
