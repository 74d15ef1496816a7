import json

import cv2
import httpx
import numpy as np
import pytest
from fastapi.testclient import TestClient

from skinadvisor.api.essential_endpoints import get_cosmily_relay
from skinadvisor.core.config import settings
from skinadvisor.main import app
from skinadvisor.services.cosmily_relay import CosmilyRelay
from skinadvisor.services.gemini_service import RoutineGenerationError, get_gemini_service

ROUTINE = (
    "Morning: cleanse, apply Vitamin C serum and finish with zinc oxide sunscreen.\n"
    "Evening: niacinamide, then hyaluronic acid. Avoid fragrance."
)


class FakeGemini:
    def __init__(self, text=ROUTINE, error=None):
        self.text = text
        self.error = error
        self.assessments = []

    async def generate_routine(self, assessment):
        self.assessments.append(assessment)
        if self.error:
            raise self.error
        return self.text


def cosmily_handler(request):
    return httpx.Response(201, json={
        "analysis": {
            "positive": {
                "anti-acne": {"list": [{"title": "Salicylic Acid"}, {"title": "Tea Tree Oil"}]},
            }
        }
    })


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def client(gemini, monkeypatch):
    monkeypatch.setattr(settings, "TYPING_DELAY_MS", 0)
    relay = CosmilyRelay("https://cosmily.test/analyze", transport=httpx.MockTransport(cosmily_handler))
    app.dependency_overrides[get_gemini_service] = lambda: gemini
    app.dependency_overrides[get_cosmily_relay] = lambda: relay
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "Skin Advisor API"

    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.json()["ingredients"] > 0


def test_analyze_upload(client):
    ok, buffer = cv2.imencode(".png", np.full((120, 160, 3), 200, dtype=np.uint8))
    res = client.post("/api/analyze", files={"file": ("face.png", buffer.tobytes(), "image/png")})

    assert res.status_code == 200
    data = res.json()
    assert data["assessment"]["acne"] == "clear"
    assert data["assessment"]["oiliness"] == "high"
    assert data["filename"] == "face.png"


def test_analyze_rejects_non_image(client):
    res = client.post("/api/analyze", files={"file": ("face.png", b"nope", "image/png")})

    assert res.status_code == 400


def test_toggle_trait(client):
    res = client.post("/api/traits/toggle", json={
        "assessment": {"acne": "mild"},
        "trait": "acne",
        "level": "mild",
    })
    assert res.status_code == 200
    assert res.json()["assessment"]["acne"] == "clear"

    res = client.post("/api/traits/toggle", json={"trait": "wrinkles", "level": "early"})
    assert res.json()["assessment"]["wrinkles"] == "early"


def test_toggle_invalid_level(client):
    res = client.post("/api/traits/toggle", json={"trait": "acne", "level": "extreme"})

    assert res.status_code == 400


def test_routine_lists_detected_ingredients(client, gemini):
    res = client.post("/api/routine", json={"acne": "moderate", "oiliness": "high"})

    assert res.status_code == 200
    data = res.json()
    assert data["routine"] == ROUTINE
    assert [i["title"] for i in data["ingredients"]] == [
        "Vitamin C", "Zinc Oxide", "Niacinamide", "Hyaluronic Acid", "Fragrance"
    ]
    assert gemini.assessments[0].acne.value == "moderate"


def test_routine_stream_reveals_text_and_ingredients(client):
    res = client.post("/api/routine/stream", json={})

    assert res.status_code == 200
    events = [json.loads(line) for line in res.text.splitlines() if line]
    text = "".join(e["text"] for e in events if e["type"] == "text")
    found = [e["ingredient"]["title"] for e in events if e["type"] == "ingredient"]

    assert text == ROUTINE
    assert found == ["Vitamin C", "Zinc Oxide", "Niacinamide", "Hyaluronic Acid", "Fragrance"]
    assert events[-1] == {"type": "done"}


def test_routine_generation_failure(client, gemini):
    gemini.error = RoutineGenerationError("Routine generation failed: quota exceeded")

    res = client.post("/api/routine", json={})

    assert res.status_code == 502
    assert res.json() == {"message": "Routine generation failed: quota exceeded"}


def test_detect_and_lookup_ingredients(client):
    res = client.post("/api/ingredients/detect", json={"text": "Retinol at night, retinol again."})
    assert [i["title"] for i in res.json()["ingredients"]] == ["Retinol"]

    res = client.get("/api/ingredients/tea tree oil")
    assert res.status_code == 200
    assert res.json()["safety_class"] == "low_hazard"

    assert client.get("/api/ingredients/unobtainium").status_code == 404


def test_recommendations(client):
    res = client.post("/api/recommendations", json={"acne": "mild"})

    assert res.status_code == 200
    data = res.json()
    assert data["query"]["ingredientGroup"] == "acne_treatment"
    assert data["recommendations"] == ["Salicylic Acid", "Tea Tree Oil"]
    assert "Salicylic Acid, Tea Tree Oil" in data["summary"]


def test_relay_rejects_get(client):
    res = client.get("/analyzeIngredientList")

    assert res.status_code == 405
    assert res.json() == {"message": "Method Not Allowed. Use POST."}


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "OPTIONS", "PURGE"])
def test_relay_rejects_non_post(client, method):
    res = client.request(method, "/analyzeIngredientList", json={"ingredients": "Water"})

    assert res.status_code == 405
    assert res.json() == {"message": "Method Not Allowed. Use POST."}


def test_relay_rejects_head(client):
    res = client.head("/analyzeIngredientList")

    assert res.status_code == 405


def test_unknown_method_elsewhere_keeps_default_error(client):
    res = client.request("PURGE", "/api/health")

    assert res.status_code == 405
    assert res.json() == {"detail": "Method Not Allowed"}


def test_relay_requires_fields(client):
    res = client.post("/analyzeIngredientList", json={})

    assert res.status_code == 400
    assert "Missing 'ingredients' or 'ingredientGroup'" in res.json()["message"]


def test_relay_invalid_json_counts_as_missing(client):
    res = client.post(
        "/analyzeIngredientList",
        content=b"ingredients=water",
        headers={"Content-Type": "application/json"},
    )

    assert res.status_code == 400


def test_relay_passes_upstream_response_through(client):
    res = client.post("/analyzeIngredientList", json={
        "ingredients": "Salicylic Acid, Tea Tree Oil",
        "ingredientGroup": "acne_treatment",
    })

    assert res.status_code == 201
    assert res.json()["analysis"]["positive"]["anti-acne"]["list"][0]["title"] == "Salicylic Acid"


def test_relay_upstream_failure(client):
    def failing(request):
        return httpx.Response(401, json={"message": "Invalid access token"})

    relay = CosmilyRelay("https://cosmily.test/analyze", transport=httpx.MockTransport(failing))
    app.dependency_overrides[get_cosmily_relay] = lambda: relay

    res = client.post("/analyzeIngredientList", json={"ingredients": "Water", "ingredientGroup": "x"})

    assert res.status_code == 401
    assert res.json() == {"message": "Invalid access token"}
