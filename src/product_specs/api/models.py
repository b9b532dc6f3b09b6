"""Pydantic models for the product info HTTP API."""

from dataclasses import asdict
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from product_specs.domain.ingredients import (
    CompositionResult,
    FlatIngredientRow,
    Ingredient,
    IngredientSet,
)
from product_specs.domain.nutrition import (
    ClaimsResult,
    NutriScoreResult,
    NutritionValues,
)
from product_specs.domain.sessions import ProductSessionRecord
from product_specs.services.product_sheet import ProductSheet


class CamelModel(BaseModel):
    """Base model using camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngredientModel(CamelModel):
    """Ingredient payload; percentage is a share of the direct parent."""

    name: str
    percentage: float | None = None
    origin: str | None = None
    is_marked_as_base: bool = False
    is_wholegrain: bool = False
    sub_ingredients: list["IngredientModel"] = Field(default_factory=list)

    def to_domain(self) -> Ingredient:
        """Convert to the core ingredient record."""
        return Ingredient(
            name=self.name,
            percentage=self.percentage,
            origin=self.origin,
            is_marked_as_base=self.is_marked_as_base,
            is_wholegrain=self.is_wholegrain,
            sub_ingredients=tuple(sub.to_domain() for sub in self.sub_ingredients),
        )


class EnergyModel(CamelModel):
    """Energy per 100g."""

    kj: float = Field(ge=0.0)
    kcal: float = Field(ge=0.0)


class NutritionModel(CamelModel):
    """Nutrition values per 100g."""

    energy: EnergyModel
    fat: float = Field(ge=0.0)
    saturated_fat: float = Field(ge=0.0)
    carbohydrates: float = Field(ge=0.0)
    sugars: float = Field(ge=0.0)
    fiber: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    salt: float = Field(ge=0.0)
    fruit_veg_legume_content: float = Field(default=0.0, ge=0.0, le=100.0)

    def to_domain(self) -> NutritionValues:
        """Convert to the core nutrition record."""
        return NutritionValues(
            energy_kj=self.energy.kj,
            energy_kcal=self.energy.kcal,
            fat=self.fat,
            saturated_fat=self.saturated_fat,
            carbohydrates=self.carbohydrates,
            sugars=self.sugars,
            fiber=self.fiber,
            protein=self.protein,
            salt=self.salt,
            fruit_veg_legume_content=self.fruit_veg_legume_content,
        )


class Declarations(CamelModel):
    """Declarations ticked in the wizard."""

    high_fiber: bool = False
    high_protein: bool = False
    wholegrain: bool = False
    other: str | None = None


class CompositionRequest(CamelModel):
    """Final and base recipe ingredient lists."""

    ingredients: list[IngredientModel] = Field(default_factory=list)
    base_product_ingredients: list[IngredientModel] = Field(default_factory=list)

    def ingredient_set(self) -> IngredientSet:
        """Build the core ingredient set; raises ValueError on double marking."""
        return IngredientSet.from_lists(
            [ing.to_domain() for ing in self.ingredients],
            [ing.to_domain() for ing in self.base_product_ingredients],
        )


class ProductInfo(CompositionRequest):
    """Full product wizard form data."""

    product_number: str
    product_name: str
    description: str | None = None
    category: str | None = None
    package_size: str | None = None
    serving_size: str | None = None
    prepared_by: str | None = None
    job_title: str | None = None
    current_step: int = Field(default=1, ge=1, le=5)
    product_image: str | None = None
    ingredient_image: str | None = None
    nutrition_image: str | None = None
    nutrition: NutritionModel | None = None
    nutri_score: str | None = None
    allergy_advice: str | None = None
    storage_conditions: str | None = None
    preparation: str | None = None
    product_type: str | None = None
    shelf_life_months: int | None = None
    declarations: Declarations | None = None


class NutriScoreResponse(CamelModel):
    """Nutri-Score sub-scores and grade."""

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

    @classmethod
    def from_result(cls, result: NutriScoreResult) -> "NutriScoreResponse":
        return cls(**asdict(result))


class SourceHighClaimsModel(CamelModel):
    """Source and high claim flags for a more-is-better nutrient."""

    can_claim_source: bool
    can_claim_high: bool
    best_claim: str | None


class SaltClaimsModel(CamelModel):
    """Salt claim flags."""

    can_claim_low: bool
    can_claim_very_low: bool
    can_claim_free: bool
    best_claim: str | None


class LowFreeClaimsModel(CamelModel):
    """Low and free claim flags for a less-is-better nutrient."""

    can_claim_low: bool
    can_claim_free: bool
    best_claim: str | None


class LowClaimsModel(CamelModel):
    """Low claim flag for saturated fat."""

    can_claim_low: bool
    best_claim: str | None


class ClaimsResponse(CamelModel):
    """Claim eligibility per nutrient family."""

    protein: SourceHighClaimsModel
    fiber: SourceHighClaimsModel
    salt: SaltClaimsModel
    sugar: LowFreeClaimsModel
    fat: LowFreeClaimsModel
    saturated_fat: LowClaimsModel
    valid_claims: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls, result: ClaimsResult, valid_claims: list[str]
    ) -> "ClaimsResponse":
        return cls(**asdict(result), valid_claims=valid_claims)


class FlatIngredientRowModel(CamelModel):
    """One row of the flattened whole-product ingredient table."""

    name: str
    whole_product_percentage: float
    origin: str
    is_final_product: bool
    level: str
    is_wholegrain: bool

    @classmethod
    def from_row(cls, row: FlatIngredientRow) -> "FlatIngredientRowModel":
        return cls(**asdict(row))


class CompositionResponse(CamelModel):
    """Flattened ingredient tables and composition strings."""

    table: list[FlatIngredientRowModel]
    sorted_table: list[FlatIngredientRowModel]
    text: str
    html: str

    @classmethod
    def build(
        cls,
        result: CompositionResult,
        sorted_rows: list[FlatIngredientRow],
        html: str,
    ) -> "CompositionResponse":
        return cls(
            table=[FlatIngredientRowModel.from_row(row) for row in result.table],
            sorted_table=[FlatIngredientRowModel.from_row(row) for row in sorted_rows],
            text=result.text,
            html=html,
        )


class SheetResponse(CamelModel):
    """Derived data for the product sheet preview and PDF."""

    nutri_score: NutriScoreResponse | None
    claims: ClaimsResponse | None
    composition: CompositionResponse
    serving_size_g: float
    per_serving: dict[str, float]

    @classmethod
    def from_sheet(cls, sheet: ProductSheet) -> "SheetResponse":
        return cls(
            nutri_score=(
                NutriScoreResponse.from_result(sheet.nutri_score)
                if sheet.nutri_score
                else None
            ),
            claims=(
                ClaimsResponse.from_result(sheet.claims, sheet.valid_claims)
                if sheet.claims
                else None
            ),
            composition=CompositionResponse.build(
                sheet.composition, sheet.sorted_table, sheet.composition_html
            ),
            serving_size_g=sheet.serving_size_g,
            per_serving={
                to_camel(name): value for name, value in sheet.per_serving.items()
            },
        )


class ProductSessionResponse(CamelModel):
    """Persisted product info session."""

    id: UUID
    session_data: dict[str, Any]
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_record(cls, record: ProductSessionRecord) -> "ProductSessionResponse":
        return cls(**asdict(record))
