"""Nutrient claim eligibility based on EU per-100g thresholds."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from product_specs.domain.nutrition import (
    ClaimsResult,
    LowClaims,
    LowFreeClaims,
    SaltClaims,
    SourceHighClaims,
)
from product_specs.services.nutri_score import HIGHER, LOWER, meets


class ClaimsInput(Protocol):
    """Nutrient values needed to evaluate claims."""

    protein: float
    fiber: float
    salt: float
    sugars: float
    fat: float
    saturated_fat: float


@dataclass(frozen=True)
class ClaimTier:
    """A named threshold a nutrient value can qualify for."""

    name: str
    threshold: float
    label: str


@dataclass(frozen=True)
class ClaimFamily:
    """Claim tiers for one nutrient, strongest tier first."""

    nutrient: str
    direction: Callable
    tiers: tuple[ClaimTier, ...]


CLAIM_FAMILIES: dict[str, ClaimFamily] = {
    "protein": ClaimFamily(
        nutrient="protein",
        direction=HIGHER,
        tiers=(
            ClaimTier("high", 20.0, "High in protein"),
            ClaimTier("source", 12.0, "Source of protein"),
        ),
    ),
    "fiber": ClaimFamily(
        nutrient="fiber",
        direction=HIGHER,
        tiers=(
            ClaimTier("high", 6.0, "High in fiber"),
            ClaimTier("source", 3.0, "Source of fiber"),
        ),
    ),
    "salt": ClaimFamily(
        nutrient="salt",
        direction=LOWER,
        tiers=(
            ClaimTier("free", 0.01, "Salt-free"),
            ClaimTier("very_low", 0.1, "Very low salt"),
            ClaimTier("low", 0.3, "Low salt"),
        ),
    ),
    "sugar": ClaimFamily(
        nutrient="sugars",
        direction=LOWER,
        tiers=(
            ClaimTier("free", 0.5, "Sugar-free"),
            ClaimTier("low", 5.0, "Low sugar"),
        ),
    ),
    "fat": ClaimFamily(
        nutrient="fat",
        direction=LOWER,
        tiers=(
            ClaimTier("free", 0.5, "Fat-free"),
            ClaimTier("low", 3.0, "Low fat"),
        ),
    ),
    "saturated_fat": ClaimFamily(
        nutrient="saturated_fat",
        direction=LOWER,
        tiers=(ClaimTier("low", 1.5, "Low saturated fat"),),
    ),
}

_FAMILY_TITLES = {
    "protein": "Protein",
    "fiber": "Fiber",
    "salt": "Salt",
    "sugar": "Sugar",
    "fat": "Fat",
    "saturated_fat": "Saturated Fat",
}


def _evaluate(
    family: ClaimFamily, values: ClaimsInput
) -> tuple[dict[str, bool], str | None]:
    """Return per-tier eligibility and the strongest satisfied label."""
    value = getattr(values, family.nutrient)
    flags = {
        tier.name: meets(value, tier.threshold, family.direction)
        for tier in family.tiers
    }
    best = next((tier.label for tier in family.tiers if flags[tier.name]), None)
    return flags, best


def compute_claims(values: ClaimsInput) -> ClaimsResult:
    """Evaluate every claim family for a nutrition record."""
    protein, protein_best = _evaluate(CLAIM_FAMILIES["protein"], values)
    fiber, fiber_best = _evaluate(CLAIM_FAMILIES["fiber"], values)
    salt, salt_best = _evaluate(CLAIM_FAMILIES["salt"], values)
    sugar, sugar_best = _evaluate(CLAIM_FAMILIES["sugar"], values)
    fat, fat_best = _evaluate(CLAIM_FAMILIES["fat"], values)
    saturated_fat, saturated_fat_best = _evaluate(
        CLAIM_FAMILIES["saturated_fat"], values
    )
    return ClaimsResult(
        protein=SourceHighClaims(
            can_claim_source=protein["source"],
            can_claim_high=protein["high"],
            best_claim=protein_best,
        ),
        fiber=SourceHighClaims(
            can_claim_source=fiber["source"],
            can_claim_high=fiber["high"],
            best_claim=fiber_best,
        ),
        salt=SaltClaims(
            can_claim_low=salt["low"],
            can_claim_very_low=salt["very_low"],
            can_claim_free=salt["free"],
            best_claim=salt_best,
        ),
        sugar=LowFreeClaims(
            can_claim_low=sugar["low"],
            can_claim_free=sugar["free"],
            best_claim=sugar_best,
        ),
        fat=LowFreeClaims(
            can_claim_low=fat["low"],
            can_claim_free=fat["free"],
            best_claim=fat_best,
        ),
        saturated_fat=LowClaims(
            can_claim_low=saturated_fat["low"],
            best_claim=saturated_fat_best,
        ),
    )


def valid_claims(values: ClaimsInput) -> list[str]:
    """Return the best claim of each family that has one."""
    claims = compute_claims(values)
    best_claims = [
        claims.protein.best_claim,
        claims.fiber.best_claim,
        claims.salt.best_claim,
        claims.sugar.best_claim,
        claims.fat.best_claim,
        claims.saturated_fat.best_claim,
    ]
    return [claim for claim in best_claims if claim]


def claim_gap(family: str, tier: str, values: ClaimsInput) -> float:
    """Return how far a value is from qualifying for a tier, 0.0 if eligible.

    For "more is better" families this is the amount still missing, for
    "less is better" families the amount that has to be cut.
    """
    claim_family = CLAIM_FAMILIES[family]
    claim_tier = next((t for t in claim_family.tiers if t.name == tier), None)
    if claim_tier is None:
        raise KeyError(f"{family} has no claim tier {tier!r}")
    value = getattr(values, claim_family.nutrient)
    if claim_family.direction is HIGHER:
        gap = claim_tier.threshold - value
    else:
        gap = value - claim_tier.threshold
    return round(max(gap, 0.0), 2)


def format_claims_details(claims: ClaimsResult) -> str:
    """Render one line per claim family."""
    best_by_family = {
        "protein": claims.protein.best_claim,
        "fiber": claims.fiber.best_claim,
        "salt": claims.salt.best_claim,
        "sugar": claims.sugar.best_claim,
        "fat": claims.fat.best_claim,
        "saturated_fat": claims.saturated_fat.best_claim,
    }
    return "\n".join(
        f"{_FAMILY_TITLES[family]}: {best or 'No claims available'}"
        for family, best in best_by_family.items()
    )
