"""Tests for container wiring."""

import asyncio

from product_specs.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.extraction_service is not None
    assert container.product_session_service is not None
    assert container.sheet_service.default_serving_size_g == 40.0
    asyncio.run(container.close_resources())
