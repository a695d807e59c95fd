"""Tests for recipe availability matching against the inventory."""

import pytest

from replate.matching import (
    compute_match_score,
    ingredient_availability,
    missing_ingredients,
    normalize_ingredient_name,
)
from replate.models import Ingredient, Recipe, RecipeIngredient


def make_recipe(*names: str, optional: tuple[str, ...] = ()) -> Recipe:
    ingredients = [RecipeIngredient(name=name) for name in names]
    ingredients += [RecipeIngredient(name=name, optional=True) for name in optional]
    return Recipe(name="Test Recipe", ingredients=ingredients)


def make_inventory(*names: str) -> list[Ingredient]:
    return [Ingredient(id=str(i), name=name) for i, name in enumerate(names)]


class TestNormalizeIngredientName:
    """Tests for ingredient name normalization."""

    def test_basic(self):
        assert normalize_ingredient_name("Chicken Breast") == "chicken breast"
        assert normalize_ingredient_name("  Garlic  ") == "garlic"

    def test_removes_measurements(self):
        """Test that leading measurements are removed."""
        assert normalize_ingredient_name("2 eggs") == "eggs"
        assert normalize_ingredient_name("2 cups flour") == "flour"
        assert normalize_ingredient_name("1/2 tsp salt") == "salt"

    def test_removes_preparation_words(self):
        assert normalize_ingredient_name("Fresh Basil") == "basil"
        assert normalize_ingredient_name("chopped onion") == "onion"

    def test_removes_parentheticals(self):
        assert normalize_ingredient_name("butter (softened)") == "butter"

    def test_empty(self):
        assert normalize_ingredient_name("") == ""


class TestAvailability:
    """Tests for per-ingredient availability."""

    def test_exact_and_fuzzy(self):
        """Test exact names and reordered words both match."""
        recipe = make_recipe("Tomatoes", "Parmesan Cheese", "Saffron")
        inventory = make_inventory("tomatoes", "Cheese Parmesan")

        assert ingredient_availability(recipe, inventory) == {
            "Tomatoes": True,
            "Parmesan Cheese": True,
            "Saffron": False,
        }

    def test_preparation_words_ignored(self):
        recipe = make_recipe("2 large eggs", "fresh basil")
        inventory = make_inventory("Eggs", "Basil")

        assert all(ingredient_availability(recipe, inventory).values())

    def test_unavailable_inventory_ignored(self):
        """Test items marked unavailable do not count."""
        recipe = make_recipe("Milk")
        inventory = [Ingredient(name="Milk", available=False)]

        assert ingredient_availability(recipe, inventory) == {"Milk": False}

    def test_missing_ingredients(self):
        """Test missing ingredients keep recipe order."""
        recipe = make_recipe("Pasta", "Parmesan Cheese", "Tomatoes", "Basil")
        inventory = make_inventory("Pasta", "Parmesan")

        missing = missing_ingredients(recipe, inventory)
        assert [item.name for item in missing] == ["Parmesan Cheese", "Tomatoes", "Basil"]


class TestMatchScore:
    """Tests for compute_match_score."""

    def test_partial_match(self):
        recipe = make_recipe("Pasta", "Tomatoes", "Garlic", "Onion")
        inventory = make_inventory("Pasta", "Tomatoes")

        assert compute_match_score(recipe, inventory) == pytest.approx(0.5)

    def test_optional_ingredients_ignored(self):
        """Test optional ingredients do not lower the score."""
        recipe = make_recipe("Pasta", optional=("Basil", "Pine Nuts"))
        inventory = make_inventory("Pasta")

        assert compute_match_score(recipe, inventory) == 1.0

    def test_no_required_ingredients(self):
        """Test a recipe without required ingredients scores 1.0."""
        assert compute_match_score(make_recipe(), make_inventory("Milk")) == 1.0
        assert compute_match_score(make_recipe(optional=("Salt",)), []) == 1.0

    def test_empty_inventory(self):
        assert compute_match_score(make_recipe("Pasta"), []) == 0.0
