"""Label extraction service using LLM vision."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from product_specs.domain.extraction import ExtractedIngredients, ExtractedNutrition

_logger = logging.getLogger(__name__)

_NUMBER = {"type": "number", "minimum": 0.0}

INGREDIENTS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "percentage": {"anyOf": [_NUMBER, {"type": "null"}]},
                },
                "required": ["name", "percentage"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["ingredients"],
    "additionalProperties": False,
}

NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "energy": {
            "type": "object",
            "properties": {"kj": _NUMBER, "kcal": _NUMBER},
            "required": ["kj", "kcal"],
            "additionalProperties": False,
        },
        "fat": _NUMBER,
        "saturated_fat": _NUMBER,
        "carbohydrates": _NUMBER,
        "sugars": _NUMBER,
        "fiber": _NUMBER,
        "protein": _NUMBER,
        "salt": _NUMBER,
    },
    "required": [
        "energy",
        "fat",
        "saturated_fat",
        "carbohydrates",
        "sugars",
        "fiber",
        "protein",
        "salt",
    ],
    "additionalProperties": False,
}

_BASE_PRODUCT_CONTEXT = (
    "This is a base product recipe screenshot. The base product is a component "
    "that will be included within a final product. Extract the ingredient "
    "composition of this base component."
)
_FINAL_PRODUCT_CONTEXT = (
    "This is a final product recipe screenshot. Extract all ingredients of the "
    "complete final product, which may include base products as components."
)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        schema_name: str,
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass
class ExtractionService:
    """Service that prepares label prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract_ingredients(
        self, image_bytes: bytes, is_base_product: bool = False
    ) -> ExtractedIngredients:
        """Extract ingredient names and percentages from a recipe image."""
        context = _BASE_PRODUCT_CONTEXT if is_base_product else _FINAL_PRODUCT_CONTEXT
        prompt = (
            f"{context} "
            "Return every ingredient with its percentage if visible, otherwise null. "
            "Extract only ingredient names (e.g. 'Haferflocken', 'Weizenmehl'), "
            "never recipe numbers, material numbers or product codes. "
            "Round percentages to one decimal place."
        )
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=INGREDIENTS_SCHEMA,
            schema_name="ingredients_extract",
            prompt=prompt,
        )
        result = ExtractedIngredients.model_validate(raw)
        _logger.info(
            "Extracted ingredients: base=%s count=%s",
            is_base_product,
            len(result.ingredients),
        )
        return result

    async def extract_nutrition(self, image_bytes: bytes) -> ExtractedNutrition:
        """Extract per-100g nutrition values from a nutrition table image."""
        prompt = (
            "Read the nutrition table in the image and return the values per 100g: "
            "energy in kJ and kcal, fat, saturated fat, carbohydrates, sugars, "
            "fiber, protein and salt in grams. Use 0 for values that are not shown."
        )
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=NUTRITION_SCHEMA,
            schema_name="nutrition_extract",
            prompt=prompt,
        )
        result = ExtractedNutrition.model_validate(raw)
        _logger.info("Extracted nutrition: energy_kj=%s", result.energy.kj)
        return result


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    if not image_bytes:
        raise ValueError("No image data provided")
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
