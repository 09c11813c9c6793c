"""
Tests for recipe image generation
"""

import asyncio
import json

import httpx
import pytest

from fitfuel import images


@pytest.fixture(autouse=True)
def clean_cache():
    images.image_cache.clear()
    yield
    images.image_cache.clear()


def test_prompt_uses_first_five_ingredients():
    ingredients = [{"item": f"item-{i}"} for i in range(7)]
    ingredients[1] = {"name": "basil"}
    prompt = images.build_image_prompt("Pesto Pasta", ingredients)

    assert "Professional food photography of Pesto Pasta." in prompt
    assert "featuring item-0, basil, item-2, item-3, item-4." in prompt
    assert "item-5" not in prompt


def test_no_key_means_no_image(monkeypatch):
    monkeypatch.setattr(images, "OPENAI_API_KEY", "")
    assert asyncio.run(images.generate_recipe_image("Oats", [], "recipe-oats")) is None


def test_cached_image_is_reused(monkeypatch):
    monkeypatch.setattr(images, "OPENAI_API_KEY", "")
    images.image_cache["recipe-oats"] = "https://images.example.com/oats.png"

    url = asyncio.run(images.generate_recipe_image("Oats", [], "recipe-oats"))
    assert url == "https://images.example.com/oats.png"


@pytest.fixture
def openai_key(monkeypatch):
    monkeypatch.setattr(images, "OPENAI_API_KEY", "test-key")


def test_generated_image_is_cached(openai_key, mock_httpx):
    seen = mock_httpx(lambda request: httpx.Response(200, json={"data": [{"url": "https://img.example.com/1.png"}]}))

    for _ in range(2):
        url = asyncio.run(images.generate_recipe_image("Oats", [{"item": "oats"}], "recipe-oats"))
        assert url == "https://img.example.com/1.png"
    assert len(seen) == 1
    assert json.loads(seen[0].content)["model"] == images.IMAGE_MODEL


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json=["unexpected"]),
    httpx.Response(200, json={"data": []}),
    httpx.Response(200, json={"data": {"url": "x"}}),
    httpx.Response(200, json={"data": [{}]}),
    httpx.Response(400, json={"error": {"message": "content policy"}}),
])
def test_unusable_image_response_gives_none(openai_key, mock_httpx, response):
    mock_httpx(lambda request: response)
    assert asyncio.run(images.generate_recipe_image("Oats", [], "recipe-oats")) is None
    assert "recipe-oats" not in images.image_cache


def test_image_transport_error_gives_none(openai_key, mock_httpx):
    def refuse(request):
        raise httpx.ConnectError("refused")
    mock_httpx(refuse)
    assert asyncio.run(images.generate_recipe_image("Oats", [])) is None
