"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from product_specs.adapters.openai_vision_client import OpenAIVisionClient
from product_specs.adapters.supabase_product_session_repository import (
    SupabaseProductSessionRepository,
)
from product_specs.config import Settings
from product_specs.services.extraction import ExtractionService
from product_specs.services.product_sessions import ProductSessionService
from product_specs.services.product_sheet import SheetService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    extraction_service: ExtractionService
    product_session_service: ProductSessionService
    sheet_service: SheetService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseProductSessionRepository(supabase_client)
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    extraction_service = ExtractionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        extraction_service=extraction_service,
        product_session_service=ProductSessionService(session_repository),
        sheet_service=SheetService(
            default_serving_size_g=resolved_settings.default_serving_size_g
        ),
        close_resources=close_resources,
    )
