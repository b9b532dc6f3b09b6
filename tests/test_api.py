"""Tests for the product info HTTP API."""

from uuid import uuid4

from fastapi.testclient import TestClient

from product_specs.api.app import create_app
from tests.conftest import FakeVisionClient, InMemoryProductSessionRepository

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8

NUTRITION = {
    "energy": {"kj": 1500, "kcal": 360},
    "fat": 20,
    "saturatedFat": 8,
    "carbohydrates": 60,
    "sugars": 25,
    "fiber": 2,
    "protein": 20,
    "salt": 1.5,
    "fruitVegLegumeContent": 0,
}

GRANOLA = {
    "ingredients": [
        {"name": "Granola", "percentage": 90, "isMarkedAsBase": True},
        {
            "name": "Chocolate",
            "percentage": 10,
            "subIngredients": [{"name": "Cocoa", "percentage": 70}],
        },
    ],
    "baseProductIngredients": [
        {"name": "Oats", "percentage": 50},
        {"name": "Bran", "percentage": 50},
    ],
}


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_session_lifecycle(
    container, session_repository: InMemoryProductSessionRepository
) -> None:
    client = TestClient(create_app(container))
    product = {"productNumber": "P-100", "productName": "Granola Bar", **GRANOLA}

    created = client.post("/api/product-info/sessions", json=product)
    assert created.status_code == 200
    session_id = created.json()["id"]
    assert created.json()["sessionData"]["productName"] == "Granola Bar"
    assert created.json()["sessionData"]["currentStep"] == 1

    updated = client.put(
        f"/api/product-info/sessions/{session_id}",
        json={**product, "currentStep": 3},
    )
    assert updated.status_code == 200
    assert updated.json()["sessionData"]["currentStep"] == 3

    fetched = client.get(f"/api/product-info/sessions/{session_id}")
    assert fetched.status_code == 200
    assert fetched.json()["sessionData"]["baseProductIngredients"][0]["name"] == "Oats"

    deleted = client.delete(f"/api/product-info/sessions/{session_id}")
    assert deleted.json() == {"message": "Session deleted successfully"}
    assert session_repository.sessions == {}


def test_session_not_found(container) -> None:
    client = TestClient(create_app(container))
    product = {"productNumber": "P-100", "productName": "Granola Bar"}

    missing = client.get(f"/api/product-info/sessions/{uuid4()}")
    not_updated = client.put(f"/api/product-info/sessions/{uuid4()}", json=product)

    assert missing.status_code == 404
    assert missing.json() == {"detail": "Session not found"}
    assert not_updated.status_code == 404


def test_session_requires_product_identity(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/product-info/sessions", json={"productName": "Bar"})

    assert response.status_code == 422


def test_extract_ingredients(container, vision_client: FakeVisionClient) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/extract/ingredients",
        files={"image": ("recipe.png", PNG_BYTES, "image/png")},
        data={"is_base_product": "true"},
    )

    assert response.status_code == 200
    assert response.json()["ingredients"][0] == {
        "name": "Haferflocken",
        "percentage": 45.5,
    }
    assert "base product" in str(vision_client.calls[0]["prompt"])


def test_extract_nutrition_returns_camel_case(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/extract/nutrition",
        files={"image": ("table.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["energy"] == {"kj": 1800.0, "kcal": 430.0}
    assert body["saturatedFat"] == 4.0


def test_extract_without_image_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    missing = client.post("/api/extract/nutrition", data={"note": "none"})
    empty = client.post(
        "/api/extract/nutrition",
        files={"image": ("empty.png", b"", "image/png")},
    )

    assert missing.status_code == 400
    assert missing.json() == {"detail": "No image file provided"}
    assert empty.status_code == 400


def test_extract_rejects_large_image(container) -> None:
    container.settings = container.settings.model_copy(update={"max_upload_bytes": 8})
    client = TestClient(create_app(container))

    response = client.post(
        "/api/extract/ingredients",
        files={"image": ("recipe.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 413
    assert response.json() == {"detail": "Image file too large"}


def test_extract_failure_maps_to_bad_gateway(
    container, vision_client: FakeVisionClient
) -> None:
    vision_client.error = RuntimeError("model unavailable")
    client = TestClient(create_app(container))

    response = client.post(
        "/api/extract/ingredients",
        files={"image": ("recipe.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 502
    assert response.json() == {
        "detail": "Error extracting ingredients: model unavailable"
    }


def test_nutri_score_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/nutri-score", json=NUTRITION)

    assert response.status_code == 200
    body = response.json()
    assert body["malusScore"] == 25
    assert body["proteinScore"] == 7
    assert body["finalScore"] == 18
    assert body["grade"] == "E"


def test_nutri_score_rejects_negative_values(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/nutri-score", json={**NUTRITION, "salt": -1})

    assert response.status_code == 422


def test_claims_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/claims", json=NUTRITION)

    assert response.status_code == 200
    body = response.json()
    assert body["protein"] == {
        "canClaimSource": True,
        "canClaimHigh": True,
        "bestClaim": "High in protein",
    }
    assert body["saturatedFat"]["bestClaim"] is None
    assert body["validClaims"] == ["High in protein"]


def test_composition_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/ingredients/composition", json=GRANOLA)

    assert response.status_code == 200
    body = response.json()
    assert [
        (row["name"], row["wholeProductPercentage"], row["level"])
        for row in body["table"]
    ] == [
        ("Granola", 90.0, "main"),
        ("Oats", 45.0, "base"),
        ("Bran", 45.0, "base"),
        ("Chocolate", 10.0, "main"),
        ("Cocoa", 7.0, "sub"),
    ]
    assert body["table"][1]["isFinalProduct"] is False
    assert body["sortedTable"][0]["name"] == "Granola"
    assert body["text"] == (
        "**Granola (90.0%)** [Oats 50.0%*, Bran 50.0%*], "
        "**Chocolate (10.0%)** (Cocoa 70.0%)"
    )
    assert body["html"].startswith(
        "<strong>Ingredients:</strong> <strong>Granola (90.0%)</strong>"
    )


def test_composition_rejects_two_marked_ingredients(container) -> None:
    client = TestClient(create_app(container))
    payload = {
        "ingredients": [
            {"name": "A", "percentage": 50, "isMarkedAsBase": True},
            {"name": "B", "percentage": 50, "isMarkedAsBase": True},
        ]
    }

    response = client.post("/api/ingredients/composition", json=payload)

    assert response.status_code == 422
    assert response.json() == {
        "detail": "At most one ingredient can be marked as base"
    }


def test_product_sheet_endpoint(container) -> None:
    client = TestClient(create_app(container))
    product = {
        "productNumber": "P-100",
        "productName": "Granola Bar",
        "servingSize": "1 bar (25 g)",
        "nutrition": NUTRITION,
        **GRANOLA,
    }

    response = client.post("/api/product-info/sheet", json=product)

    assert response.status_code == 200
    body = response.json()
    assert body["nutriScore"]["grade"] == "E"
    assert body["claims"]["validClaims"] == ["High in protein"]
    assert body["servingSizeG"] == 25.0
    assert body["perServing"]["energyKj"] == 375.0
    assert body["perServing"]["saturatedFat"] == 2.0
    assert len(body["composition"]["table"]) == 5


def test_product_sheet_without_nutrition(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/product-info/sheet",
        json={"productNumber": "P-1", "productName": "Empty"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["nutriScore"] is None
    assert body["claims"] is None
    assert body["servingSizeG"] == 40.0
    assert body["composition"]["text"] == "No ingredients extracted yet..."
