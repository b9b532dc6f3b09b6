"""Product sheet assembly for preview and PDF export."""

import logging
import re
from dataclasses import dataclass

from product_specs.domain.ingredients import (
    CompositionResult,
    FlatIngredientRow,
    IngredientSet,
)
from product_specs.domain.nutrition import (
    ClaimsResult,
    NutriScoreResult,
    NutritionValues,
)
from product_specs.services.claims import compute_claims, valid_claims
from product_specs.services.composition import (
    composition_html,
    ingredients_by_percentage,
    resolve_composition,
    round_half_up,
)
from product_specs.services.nutri_score import compute_nutri_score

_logger = logging.getLogger(__name__)

_SERVING_GRAMS = re.compile(r"(\d+(?:[.,]\d+)?)\s*g\b", re.IGNORECASE)
_FIRST_NUMBER = re.compile(r"(\d+(?:[.,]\d+)?)")

_PER_SERVING_FIELDS = (
    "energy_kj",
    "energy_kcal",
    "fat",
    "saturated_fat",
    "carbohydrates",
    "sugars",
    "fiber",
    "protein",
    "salt",
)


@dataclass(frozen=True)
class ProductSheet:
    """Everything the document template needs besides the raw form data."""

    nutri_score: NutriScoreResult | None
    claims: ClaimsResult | None
    valid_claims: list[str]
    composition: CompositionResult
    sorted_table: list[FlatIngredientRow]
    composition_html: str
    serving_size_g: float
    per_serving: dict[str, float]


def per_serving(value_per_100g: float, serving_size_g: float) -> float:
    """Scale a per-100g value to one serving."""
    return round_half_up(value_per_100g * serving_size_g / 100)


def parse_serving_size(raw: str | None, default: float) -> float:
    """Read a gram amount from a free-text serving size like ``"1 bar (25 g)"``."""
    if not raw:
        return default
    match = _SERVING_GRAMS.search(raw) or _FIRST_NUMBER.search(raw)
    if not match:
        return default
    value = float(match.group(1).replace(",", "."))
    return value if value > 0 else default


@dataclass
class SheetService:
    """Composes scoring, claims and composition for one product."""

    default_serving_size_g: float = 40.0

    def build_sheet(
        self,
        nutrition: NutritionValues | None,
        ingredients: IngredientSet,
        serving_size: str | None = None,
    ) -> ProductSheet:
        """Compute the derived sheet data from current form values."""
        serving_size_g = parse_serving_size(serving_size, self.default_serving_size_g)
        composition = resolve_composition(ingredients)

        nutri_score = compute_nutri_score(nutrition) if nutrition else None
        claims = compute_claims(nutrition) if nutrition else None
        per_serving_values: dict[str, float] = {}
        if nutrition:
            per_serving_values = {
                name: per_serving(getattr(nutrition, name), serving_size_g)
                for name in _PER_SERVING_FIELDS
            }

        _logger.info(
            "Built product sheet: grade=%s rows=%s",
            nutri_score.grade if nutri_score else "n/a",
            len(composition.table),
        )
        return ProductSheet(
            nutri_score=nutri_score,
            claims=claims,
            valid_claims=valid_claims(nutrition) if nutrition else [],
            composition=composition,
            sorted_table=ingredients_by_percentage(ingredients),
            composition_html=composition_html(composition.text),
            serving_size_g=serving_size_g,
            per_serving=per_serving_values,
        )
