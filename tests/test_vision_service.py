"""Tests for vision service."""

import asyncio

import pytest

from nutriplus.domain.errors import CollaboratorError, ValidationError
from nutriplus.domain.vision import AnalysisResult
from nutriplus.services.vision import VisionService, to_data_url
from tests.conftest import FakeNutritionModelClient


def _service(client: FakeNutritionModelClient) -> VisionService:
    return VisionService(
        client=client,
        model="gpt-5.2",
        reasoning_effort="low",
        store=False,
    )


def test_vision_service_returns_analysis() -> None:
    client = FakeNutritionModelClient()

    result = asyncio.run(_service(client).analyze(b"\xff\xd8\xffimage"))

    assert result.food_name == "Grilled chicken salad"
    assert result.calories == 420
    assert client.calls[0]["image_data_url"].startswith("data:image/jpeg;base64,")


def test_vision_service_rejects_empty_image() -> None:
    with pytest.raises(ValidationError):
        asyncio.run(_service(FakeNutritionModelClient()).analyze(b""))


def test_vision_service_rejects_negative_estimate() -> None:
    client = FakeNutritionModelClient()
    client.payloads["meal_analysis"] = {
        **client.payloads["meal_analysis"],
        "calories": -5,
    }

    with pytest.raises(CollaboratorError):
        asyncio.run(_service(client).analyze(b"image"))


def test_analysis_accepts_camel_case_name() -> None:
    result = AnalysisResult.model_validate(
        {
            "foodName": "Toast",
            "portion": "2 slices",
            "calories": 180,
            "protein": 6,
            "carbs": 30,
            "fat": 3,
            "ingredients": ["bread"],
        }
    )

    assert result.food_name == "Toast"
    assert result.description == ""


def test_to_data_url_uses_png_header() -> None:
    data = b"\x89PNG\r\n\x1a\n" + b"rest"
    url = to_data_url(data)

    assert url.startswith("data:image/png;base64,")


def test_to_data_url_defaults_to_jpeg() -> None:
    data = b"unknown"
    url = to_data_url(data)

    assert url.startswith("data:image/jpeg;base64,")
