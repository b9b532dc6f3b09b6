"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionValues:
    """Per-100g nutrient snapshot for a product."""

    energy_kj: float
    energy_kcal: float
    fat: float
    saturated_fat: float
    carbohydrates: float
    sugars: float
    fiber: float
    protein: float
    salt: float
    fruit_veg_legume_content: float | None = 0.0


@dataclass(frozen=True)
class NutriScoreResult:
    """Nutri-Score sub-scores, totals and grade."""

    energy_score: int
    saturated_fat_score: int
    sugar_score: int
    salt_score: int
    fruit_veg_legume_score: int
    fiber_score: int
    protein_score: int
    malus_score: int
    bonus_score: int
    final_score: int
    grade: str


@dataclass(frozen=True)
class SourceHighClaims:
    """Claim tiers for nutrients where more is better."""

    can_claim_source: bool
    can_claim_high: bool
    best_claim: str | None


@dataclass(frozen=True)
class SaltClaims:
    """Claim tiers for salt."""

    can_claim_low: bool
    can_claim_very_low: bool
    can_claim_free: bool
    best_claim: str | None


@dataclass(frozen=True)
class LowFreeClaims:
    """Claim tiers for sugar and fat."""

    can_claim_low: bool
    can_claim_free: bool
    best_claim: str | None


@dataclass(frozen=True)
class LowClaims:
    """Claim tier for saturated fat."""

    can_claim_low: bool
    best_claim: str | None


@dataclass(frozen=True)
class ClaimsResult:
    """Claim eligibility per nutrient family."""

    protein: SourceHighClaims
    fiber: SourceHighClaims
    salt: SaltClaims
    sugar: LowFreeClaims
    fat: LowFreeClaims
    saturated_fat: LowClaims
