"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import httpx
import pytest

from replate.client.transport import Transport

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require a running backend)"
    )


BASE_URL = "http://testserver/api"

# 2025-01-01T00:00:00Z
NEW_YEAR_EPOCH = 1735689600


# =============================================================================
# Transport Fixtures
# =============================================================================


@pytest.fixture
def make_transport() -> Callable[..., Transport]:
    """Build a Transport whose requests are answered by ``handler``."""

    def _make(handler, **kwargs) -> Transport:
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("max_retries", 0)
        return Transport(transport=httpx.MockTransport(handler), **kwargs)

    return _make


# =============================================================================
# Backend Payload Fixtures
# =============================================================================


@pytest.fixture
def ingredient_records():
    """Ingredient records in the mixed field styles the backend has used."""
    return [
        {
            "id": "ing-1",
            "name": "Milk",
            "quantity": {"amount": 1, "unit": "liter"},
            "category": "Dairy",
            "addedDate": "2024-12-20T08:30:00.000Z",
            "expirationDate": "2025-01-01T00:00:00Z",
        },
        {
            "_id": {"$oid": "65a1f0c2e4b0a1b2c3d4e5f6"},
            "name": "Tomatoes",
            "quantity": "3",
            "unit": "pieces",
            "category": "vegetables",
            "expiration_date": NEW_YEAR_EPOCH,
            "location": "fridge",
        },
        {
            "id": 42,
            "name": "Flour",
            "quantity": "500g",
            "category": "Baking Supplies",
            "expirationDate": {"_seconds": NEW_YEAR_EPOCH, "_nanoseconds": 0},
        },
    ]


@pytest.fixture
def scan_response():
    """Scan response with a fractional amount and a server timestamp object."""
    return {
        "success": True,
        "ingredients": [
            {
                "name": "Heavy Cream",
                "quantity": {"amount": "1/2", "unit": "cup"},
                "estimatedExpiration": {"_seconds": NEW_YEAR_EPOCH},
                "confidence": 0.92,
            },
            {
                "name": "Eggs",
                "quantity": {"amount": 12, "unit": "pieces"},
                "estimatedExpiration": None,
                "confidence": 0.81,
            },
        ],
    }


@pytest.fixture
def recipe_record():
    """A generated recipe as returned by /recipes/generate."""
    return {
        "id": "rec-1",
        "name": "Tomato Basil Pasta",
        "description": "Quick weeknight pasta.",
        "matchScore": 0.8,
        "ingredients": [
            {"name": "Pasta", "quantity": {"amount": 200, "unit": "g"}, "available": True},
            {"name": "Tomatoes", "quantity": {"amount": "3", "unit": "pieces"}, "available": True},
            {"name": "Basil", "amount": "1/4", "unit": "cup", "isOptional": True},
            {"name": "Parmesan Cheese", "quantity": "50g"},
        ],
        "instructions": ["Boil the pasta.", "Simmer the tomatoes.", "Toss together."],
        "tips": ["Save some pasta water."],
        "nutritionalInfo": {"calories": 520, "protein": 18.5, "carbs": 80.0, "fat": 12},
        "prepTime": 10,
        "cookTime": "15 minutes",
        "difficulty": "easy",
        "cuisine": "Italian",
        "servings": 2,
        "imageUrl": "https://example.com/pasta.png",
    }


@pytest.fixture
def recipes_response(recipe_record):
    """Recipe list wrapped the canonical way."""
    return {
        "recipes": [
            recipe_record,
            {
                "_id": "rec-2",
                "title": "Veggie Omelette",
                "ingredients": ["2 eggs", "spinach"],
                "instructions": "Whisk the eggs.\nCook with spinach.",
                "rating": 9,
                "lastCooked": "2025-01-02T18:00:00+00:00",
            },
        ]
    }
