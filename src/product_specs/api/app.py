"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile, status

from product_specs.api.models import (
    ClaimsResponse,
    CompositionRequest,
    CompositionResponse,
    NutriScoreResponse,
    NutritionModel,
    ProductInfo,
    ProductSessionResponse,
    SheetResponse,
)
from product_specs.app_logging import configure_logging
from product_specs.containers import AppContainer
from product_specs.domain.extraction import ExtractedIngredients, ExtractedNutrition
from product_specs.domain.ingredients import IngredientSet
from product_specs.services.claims import compute_claims, valid_claims
from product_specs.services.composition import (
    composition_html,
    ingredients_by_percentage,
    resolve_composition,
)
from product_specs.services.nutri_score import compute_nutri_score
from product_specs.services.product_sessions import SessionNotFoundError


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/product-info/sessions")
    async def create_session(
        product: ProductInfo, request: Request
    ) -> ProductSessionResponse:
        """Create a wizard session from submitted product data."""
        state_container: AppContainer = request.app.state.container
        record = state_container.product_session_service.create(
            product.model_dump(by_alias=True, mode="json")
        )
        return ProductSessionResponse.from_record(record)

    @app.get("/api/product-info/sessions/{session_id}")
    async def get_session(session_id: UUID, request: Request) -> ProductSessionResponse:
        """Return a wizard session."""
        state_container: AppContainer = request.app.state.container
        record = state_container.product_session_service.get(session_id)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
            )
        return ProductSessionResponse.from_record(record)

    @app.put("/api/product-info/sessions/{session_id}")
    async def update_session(
        session_id: UUID, product: ProductInfo, request: Request
    ) -> ProductSessionResponse:
        """Replace the product data of a wizard session."""
        state_container: AppContainer = request.app.state.container
        try:
            record = state_container.product_session_service.update(
                session_id, product.model_dump(by_alias=True, mode="json")
            )
        except SessionNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
            ) from exc
        return ProductSessionResponse.from_record(record)

    @app.delete("/api/product-info/sessions/{session_id}")
    async def delete_session(session_id: UUID, request: Request) -> dict[str, str]:
        """Delete a wizard session."""
        state_container: AppContainer = request.app.state.container
        state_container.product_session_service.delete(session_id)
        return {"message": "Session deleted successfully"}

    async def _read_image(image: UploadFile | None, max_bytes: int) -> bytes:
        if image is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No image file provided",
            )
        data = await image.read()
        if not data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No image file provided",
            )
        if len(data) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image file too large",
            )
        return data

    @app.post("/api/extract/ingredients")
    async def extract_ingredients(
        request: Request,
        image: UploadFile | None = File(default=None),
        is_base_product: bool = Form(default=False),
    ) -> ExtractedIngredients:
        """Extract ingredients from a recipe screenshot."""
        state_container: AppContainer = request.app.state.container
        data = await _read_image(image, state_container.settings.max_upload_bytes)
        try:
            return await state_container.extraction_service.extract_ingredients(
                data, is_base_product=is_base_product
            )
        except Exception as exc:
            logger.exception("Ingredient extraction failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Error extracting ingredients: {exc}",
            ) from exc

    @app.post("/api/extract/nutrition")
    async def extract_nutrition(
        request: Request,
        image: UploadFile | None = File(default=None),
    ) -> ExtractedNutrition:
        """Extract per-100g nutrition values from a nutrition table image."""
        state_container: AppContainer = request.app.state.container
        data = await _read_image(image, state_container.settings.max_upload_bytes)
        try:
            return await state_container.extraction_service.extract_nutrition(data)
        except Exception as exc:
            logger.exception("Nutrition extraction failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Error extracting nutrition: {exc}",
            ) from exc

    @app.post("/api/nutri-score")
    async def nutri_score(nutrition: NutritionModel) -> NutriScoreResponse:
        """Compute the Nutri-Score for per-100g values."""
        result = compute_nutri_score(nutrition.to_domain())
        return NutriScoreResponse.from_result(result)

    @app.post("/api/claims")
    async def claims(nutrition: NutritionModel) -> ClaimsResponse:
        """Evaluate nutrient claims for per-100g values."""
        values = nutrition.to_domain()
        return ClaimsResponse.from_result(compute_claims(values), valid_claims(values))

    @app.post("/api/ingredients/composition")
    async def composition(payload: CompositionRequest) -> CompositionResponse:
        """Flatten final and base recipes into whole-product percentages."""
        ingredient_set = _ingredient_set_or_422(payload)
        result = resolve_composition(ingredient_set)
        return CompositionResponse.build(
            result,
            ingredients_by_percentage(ingredient_set),
            composition_html(result.text),
        )

    @app.post("/api/product-info/sheet")
    async def product_sheet(product: ProductInfo, request: Request) -> SheetResponse:
        """Compute everything the sheet preview and PDF export need."""
        state_container: AppContainer = request.app.state.container
        sheet = state_container.sheet_service.build_sheet(
            product.nutrition.to_domain() if product.nutrition else None,
            _ingredient_set_or_422(product),
            serving_size=product.serving_size,
        )
        return SheetResponse.from_sheet(sheet)

    return app


def _ingredient_set_or_422(payload: CompositionRequest) -> IngredientSet:
    """Build an ingredient set, mapping a double base marking to a 422."""
    try:
        return payload.ingredient_set()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
