"""
Shared fixtures: sample LLM documents and a clean in-memory store per test
"""

import json

import httpx
import pytest

from fitfuel import storage
from tests.samples import meal, recipe


@pytest.fixture(autouse=True)
def clean_storage():
    storage.meal_plans_storage.clear()
    storage.recipe_books_storage.clear()
    yield
    storage.meal_plans_storage.clear()
    storage.recipe_books_storage.clear()


@pytest.fixture
def meal_plan_doc():
    return {
        "days": [
            {
                "day": 1,
                "dayName": "Monday",
                "meals": [
                    meal("Breakfast", "8:00 AM", recipe("Oats", 300, 10, 40, 5, fiber=6)),
                    meal("Lunch", "1:00 PM", recipe("Chicken Salad", 450, 35, 20, 18)),
                ],
            },
            {
                "day": 2,
                "dayName": "Tuesday",
                "meals": [
                    meal("Breakfast", "8:00 AM", recipe("Pan \"Cake\" {special}", 380, 12, 55, 11, fiber=3)),
                    meal("Dinner", "7:00 PM", recipe("Lentil Stew", 520, 28, 70, 9, fiber=14)),
                ],
            },
        ]
    }


@pytest.fixture
def meal_plan_text(meal_plan_doc):
    return json.dumps(meal_plan_doc)


@pytest.fixture
def recipe_book_doc():
    return {
        "title": "Weeknight Takeaway",
        "description": "Fakeaway classics",
        "recipes": [
            recipe("Katsu Curry", 650, 35, 80, 20, instructions=("Fry", "Simmer")),
            recipe("Pad Thai", 540, 22, 70, 16, fiber=4),
            recipe("Burrito Bowl", 610, 30, 75, 18, fiber=12),
        ],
    }


@pytest.fixture
def recipe_book_text(recipe_book_doc):
    return json.dumps(recipe_book_doc)


@pytest.fixture
def mock_httpx(monkeypatch):
    """
    Route every httpx.AsyncClient through a MockTransport.

    Call the fixture with a handler taking an httpx.Request; it returns the
    list of requests the handler has seen.
    """
    real_client = httpx.AsyncClient

    def install(handler):
        seen = []

        def record(request):
            seen.append(request)
            return handler(request)

        def client(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(record)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client)
        return seen

    return install
