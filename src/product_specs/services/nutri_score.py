"""Nutri-Score calculation from per-100g nutrient values."""

import operator
from collections.abc import Callable, Sequence

from product_specs.domain.nutrition import NutriScoreResult, NutritionValues

StepTable = Sequence[tuple[float, int]]

# Malus tables
ENERGY_KJ_TABLE: StepTable = (
    (335.0, 0),
    (335.01, 1),
    (670.01, 2),
    (1005.01, 3),
    (1340.01, 4),
    (1675.01, 5),
    (2010.01, 6),
    (2345.01, 7),
    (2680.01, 8),
    (3015.01, 9),
    (3350.01, 10),
)

SATURATED_FAT_TABLE: StepTable = (
    (1.0, 0),
    (1.01, 1),
    (2.01, 2),
    (3.01, 3),
    (4.01, 4),
    (5.01, 5),
    (6.01, 6),
    (7.01, 7),
    (8.01, 8),
    (9.01, 9),
    (10.01, 10),
)

SUGARS_TABLE: StepTable = (
    (3.4, 0),
    (3.41, 1),
    (6.81, 2),
    (10.01, 3),
    (14.01, 4),
    (17.01, 5),
    (20.01, 6),
    (24.01, 7),
    (27.01, 8),
    (31.01, 9),
    (34.01, 10),
    (37.01, 11),
    (41.01, 12),
    (44.01, 13),
    (48.01, 14),
    (51.01, 15),
)

SALT_TABLE: StepTable = (
    (0.2, 0),
    (0.20001, 1),
    (0.40001, 2),
    (0.60001, 3),
    (0.80001, 4),
    (1.0001, 5),
    (1.20001, 6),
    (1.40001, 7),
    (1.60001, 8),
    (1.80001, 9),
    (2.0001, 10),
    (2.20001, 11),
    (2.40001, 12),
    (2.60001, 13),
    (2.80001, 14),
    (3.00001, 15),
    (3.200001, 16),
    (3.40001, 17),
    (3.60001, 18),
    (3.80001, 19),
    (4.0001, 20),
)

# Bonus tables
FRUIT_VEG_LEGUME_TABLE: StepTable = (
    (40.0, 0),
    (40.01, 1),
    (60.01, 2),
    (80.01, 5),
)

FIBER_TABLE: StepTable = (
    (3.0, 0),
    (3.01, 1),
    (4.01, 2),
    (5.21, 3),
    (6.31, 4),
    (7.41, 5),
)

PROTEIN_TABLE: StepTable = (
    (2.4, 0),
    (2.41, 1),
    (4.81, 2),
    (7.21, 3),
    (9.61, 4),
    (12.01, 5),
    (14.01, 6),
    (17.01, 7),
)

# Upper bound of final score for each grade, best grade first.
GRADE_CUTOFFS: Sequence[tuple[int, str]] = (
    (-15, "A"),
    (1, "B"),
    (3, "C"),
    (11, "D"),
)
WORST_GRADE = "E"

HIGHER = operator.ge
LOWER = operator.le


def meets(value: float, threshold: float, direction: Callable = HIGHER) -> bool:
    """Return True when the value reaches the threshold in the given direction.

    ``HIGHER`` means the value must be at least the threshold, ``LOWER`` at
    most. Both are boundary inclusive.
    """
    return direction(value, threshold)


def score_for(value: float, table: StepTable) -> int:
    """Return the points of the highest threshold met by the value, else 0."""
    for threshold, points in reversed(table):
        if meets(value, threshold):
            return points
    return 0


def grade_for(final_score: int) -> str:
    """Map a final score to its Nutri-Score letter."""
    for cutoff, grade in GRADE_CUTOFFS:
        if meets(final_score, cutoff, LOWER):
            return grade
    return WORST_GRADE


def compute_nutri_score(values: NutritionValues) -> NutriScoreResult:
    """Compute sub-scores, totals and grade for a nutrition record."""
    energy_score = score_for(values.energy_kj, ENERGY_KJ_TABLE)
    saturated_fat_score = score_for(values.saturated_fat, SATURATED_FAT_TABLE)
    sugar_score = score_for(values.sugars, SUGARS_TABLE)
    salt_score = score_for(values.salt, SALT_TABLE)
    malus_score = energy_score + saturated_fat_score + sugar_score + salt_score

    fruit_veg_legume_score = score_for(
        values.fruit_veg_legume_content or 0.0, FRUIT_VEG_LEGUME_TABLE
    )
    fiber_score = score_for(values.fiber, FIBER_TABLE)
    protein_score = score_for(values.protein, PROTEIN_TABLE)
    bonus_score = fruit_veg_legume_score + fiber_score + protein_score

    final_score = malus_score - bonus_score
    return NutriScoreResult(
        energy_score=energy_score,
        saturated_fat_score=saturated_fat_score,
        sugar_score=sugar_score,
        salt_score=salt_score,
        fruit_veg_legume_score=fruit_veg_legume_score,
        fiber_score=fiber_score,
        protein_score=protein_score,
        malus_score=malus_score,
        bonus_score=bonus_score,
        final_score=final_score,
        grade=grade_for(final_score),
    )


def format_nutri_score_details(result: NutriScoreResult) -> str:
    """Render a plain-text breakdown of a Nutri-Score result."""
    lines = [
        f"Malus Score: {result.malus_score}",
        f"- Energy: {result.energy_score}",
        f"- Saturated Fat: {result.saturated_fat_score}",
        f"- Sugar: {result.sugar_score}",
        f"- Salt: {result.salt_score}",
        "",
        f"Bonus Score: {result.bonus_score}",
        f"- Fruit/Veg/Legume: {result.fruit_veg_legume_score}",
        f"- Fiber: {result.fiber_score}",
        f"- Protein: {result.protein_score}",
        "",
        f"Final Score: {result.final_score}",
        f"Grade: {result.grade}",
    ]
    return "\n".join(lines)
