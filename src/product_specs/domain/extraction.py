"""Models for label extraction results."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from product_specs.domain.ingredients import Ingredient
from product_specs.domain.nutrition import NutritionValues


class ExtractedIngredient(BaseModel):
    """Single ingredient read from a recipe screenshot."""

    name: str
    percentage: float | None = Field(default=None, ge=0.0)


class ExtractedIngredients(BaseModel):
    """Structured output for ingredient extraction."""

    ingredients: list[ExtractedIngredient]

    def to_ingredients(self) -> list[Ingredient]:
        """Convert to core ingredient records, dropping unnamed entries."""
        return [
            Ingredient(name=item.name.strip(), percentage=item.percentage)
            for item in self.ingredients
            if item.name.strip()
        ]


class ExtractedEnergy(BaseModel):
    """Energy values read from a nutrition table."""

    kj: float = Field(ge=0.0)
    kcal: float = Field(ge=0.0)


class ExtractedNutrition(BaseModel):
    """Structured output for nutrition table extraction (per 100g)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    energy: ExtractedEnergy
    fat: float = Field(ge=0.0)
    saturated_fat: float = Field(ge=0.0)
    carbohydrates: float = Field(ge=0.0)
    sugars: float = Field(ge=0.0)
    fiber: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    salt: float = Field(ge=0.0)

    def to_nutrition_values(
        self, fruit_veg_legume_content: float = 0.0
    ) -> NutritionValues:
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
            fruit_veg_legume_content=fruit_veg_legume_content,
        )
