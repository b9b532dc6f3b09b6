"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from product_specs.config import Settings
from product_specs.containers import AppContainer
from product_specs.domain.nutrition import NutritionValues
from product_specs.domain.sessions import ProductSessionRecord
from product_specs.services.extraction import ExtractionService, VisionClient
from product_specs.services.product_sessions import (
    ProductSessionRepository,
    ProductSessionService,
)
from product_specs.services.product_sheet import SheetService


@dataclass
class InMemoryProductSessionRepository(ProductSessionRepository):
    """In-memory product session repository for tests."""

    sessions: dict[UUID, ProductSessionRecord] = field(default_factory=dict)

    def create_session(self, session_data: dict[str, object]) -> ProductSessionRecord:
        now = datetime.now(tz=UTC)
        record = ProductSessionRecord(
            id=uuid4(),
            session_data=session_data,
            created_at=now,
            updated_at=now,
        )
        self.sessions[record.id] = record
        return record

    def get_session(self, session_id: UUID) -> ProductSessionRecord | None:
        return self.sessions.get(session_id)

    def update_session(
        self, session_id: UUID, session_data: dict[str, object]
    ) -> ProductSessionRecord | None:
        existing = self.sessions.get(session_id)
        if existing is None:
            return None
        updated = ProductSessionRecord(
            id=session_id,
            session_data=session_data,
            created_at=existing.created_at,
            updated_at=datetime.now(tz=UTC),
        )
        self.sessions[session_id] = updated
        return updated

    def delete_session(self, session_id: UUID) -> None:
        self.sessions.pop(session_id, None)


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload per schema."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "ingredients_extract": {
                "ingredients": [
                    {"name": "Haferflocken", "percentage": 45.5},
                    {"name": "Schokolade", "percentage": 20.0},
                    {"name": "Salz", "percentage": None},
                ]
            },
            "nutrition_extract": {
                "energy": {"kj": 1800.0, "kcal": 430.0},
                "fat": 15.0,
                "saturated_fat": 4.0,
                "carbohydrates": 60.0,
                "sugars": 20.0,
                "fiber": 6.0,
                "protein": 10.0,
                "salt": 0.3,
            },
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

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
        self.calls.append(
            {
                "model": model,
                "image_data_url": image_data_url,
                "schema_name": schema_name,
                "prompt": prompt,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payloads[schema_name]


def make_nutrition(**overrides: float) -> NutritionValues:
    """Return a neutral nutrition record with selected fields overridden."""
    values: dict[str, float] = {
        "energy_kj": 0.0,
        "energy_kcal": 0.0,
        "fat": 0.0,
        "saturated_fat": 0.0,
        "carbohydrates": 0.0,
        "sugars": 0.0,
        "fiber": 0.0,
        "protein": 0.0,
        "salt": 0.0,
        "fruit_veg_legume_content": 0.0,
    }
    values.update(overrides)
    return NutritionValues(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def session_repository() -> InMemoryProductSessionRepository:
    return InMemoryProductSessionRepository()


@pytest.fixture
def container(
    settings: Settings,
    vision_client: FakeVisionClient,
    session_repository: InMemoryProductSessionRepository,
) -> AppContainer:
    extraction_service = ExtractionService(
        client=vision_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        extraction_service=extraction_service,
        product_session_service=ProductSessionService(session_repository),
        sheet_service=SheetService(
            default_serving_size_g=settings.default_serving_size_g
        ),
        close_resources=close_resources,
    )
