"""Endpoint operations for the Replate backend."""

import base64
from typing import Any

from replate.client.base import DecodingError
from replate.client.decoding import decode_list, decode_object
from replate.client.transport import Transport
from replate.logging_config import get_logger
from replate.models import (
    CookedRecipeRequest,
    Ingredient,
    IngredientUpdate,
    PreferenceOverrides,
    Preferences,
    PreferencesUpdate,
    Recipe,
    RecipeGenerationRequest,
    RecipeImageRequest,
    ScannedIngredient,
    UpdateIngredientsRequest,
)
from replate.normalize.fields import coerce_str, first_present

logger = get_logger(__name__)

INGREDIENT_KEYS = ("ingredients",)
SCAN_KEYS = ("ingredients", "scannedIngredients", "scanned_ingredients")
RECIPE_KEYS = ("recipes",)
PREFERENCE_KEYS = ("preferences",)


def _image_url(data: dict[str, Any]) -> str:
    url = coerce_str(first_present(data, "imageUrl", "url"))
    if url is None:
        raise DecodingError("Recipe image response has no image URL")
    return url


class ReplateClient:
    """Client for the Replate recipe and inventory API."""

    def __init__(self, transport: Transport | None = None, **transport_kwargs: Any):
        self.transport = transport or Transport(**transport_kwargs)

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    # -------------------------------------------------------------------------
    # Ingredients
    # -------------------------------------------------------------------------

    async def scan_ingredients(self, image: bytes) -> list[ScannedIngredient]:
        """
        Detect ingredients in a photo.

        Args:
            image: Encoded image bytes (JPEG or PNG).

        Returns:
            Unconfirmed ingredient candidates.
        """
        logger.info(f"Scanning ingredients from image ({len(image)} bytes)")
        body = {"image": base64.b64encode(image).decode("ascii")}
        raw = await self.transport.send("/ingredients/scan", "POST", body=body)

        scanned = decode_list(raw, SCAN_KEYS, ScannedIngredient.from_api_response)
        logger.info(f"Scan found {len(scanned)} ingredients")
        return scanned

    async def fetch_ingredients(self) -> list[Ingredient]:
        """Fetch the current inventory."""
        logger.info("Fetching ingredients")
        raw = await self.transport.send("/ingredients", "GET")

        ingredients = decode_list(raw, INGREDIENT_KEYS, Ingredient.from_api_response)
        logger.info(f"Fetched {len(ingredients)} ingredients")
        return ingredients

    async def update_ingredients(self, ingredients: list[IngredientUpdate]) -> None:
        """
        Upsert the full inventory snapshot.

        Args:
            ingredients: Every ingredient the user currently holds.
        """
        logger.info(f"Syncing {len(ingredients)} ingredients")
        body = UpdateIngredientsRequest(ingredients=ingredients)
        await self.transport.send("/ingredients/update", "POST", body=body)

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------

    async def generate_recipes(
        self,
        must_use_ingredients: list[str] | None = None,
        cuisine_preferences: list[str] | None = None,
        cooking_time: str | None = None,
    ) -> list[Recipe]:
        """
        Ask the backend to generate recipes from the current inventory.

        Args:
            must_use_ingredients: Ingredient names every recipe must include.
            cuisine_preferences: Cuisines overriding the stored preferences.
            cooking_time: Cooking time overriding the stored preference.

        Returns:
            Generated recipes.
        """
        logger.info(f"Generating recipes (must use: {must_use_ingredients or []})")
        overrides = None
        if cuisine_preferences is not None or cooking_time is not None:
            overrides = PreferenceOverrides(
                cuisine_preferences=cuisine_preferences,
                cooking_time=cooking_time,
            )
        body = RecipeGenerationRequest(
            must_use_ingredients=must_use_ingredients,
            preference_overrides=overrides,
        )
        raw = await self.transport.send("/recipes/generate", "POST", body=body)

        recipes = decode_list(raw, RECIPE_KEYS, Recipe.from_api_response)
        logger.info(f"Generated {len(recipes)} recipes")
        return recipes

    async def generate_recipe_image(
        self, recipe_id: str, recipe_name: str, description: str
    ) -> str:
        """Request an illustration for a recipe and return its URL."""
        logger.info(f"Generating image for recipe {recipe_id}")
        body = RecipeImageRequest(
            recipe_id=recipe_id,
            recipe_name=recipe_name,
            description=description,
        )
        raw = await self.transport.send("/recipes/image", "POST", body=body)
        return decode_object(raw, ("image",), _image_url)

    async def mark_recipe_cooked(
        self, recipe_id: str, rating: float, notes: str | None = None
    ) -> None:
        """Record that a recipe was cooked, with the user's rating."""
        logger.info(f"Marking recipe {recipe_id} as cooked (rating={rating})")
        body = CookedRecipeRequest(recipe_id=recipe_id, rating=rating, notes=notes)
        await self.transport.send("/recipes/cooked", "POST", body=body)

    async def fetch_recipes(self, status: str = "all", sort: str = "recent") -> list[Recipe]:
        """
        Fetch saved recipes.

        Args:
            status: Server-side status filter, e.g. "all" or "cooked".
            sort: Server-side sort order, e.g. "recent".

        Returns:
            Saved recipes.
        """
        logger.info(f"Fetching recipes (status={status}, sort={sort})")
        raw = await self.transport.send(
            "/recipes", "GET", query={"status": status, "sort": sort}
        )

        recipes = decode_list(raw, RECIPE_KEYS, Recipe.from_api_response)
        logger.info(f"Fetched {len(recipes)} recipes")
        return recipes

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    async def fetch_preferences(self) -> Preferences:
        """Fetch the user's cooking preferences."""
        logger.debug("Fetching preferences")
        raw = await self.transport.send("/preferences", "GET")
        return decode_object(raw, PREFERENCE_KEYS, Preferences.from_api_response)

    async def update_preferences(self, update: PreferencesUpdate) -> Preferences:
        """Update preferences; only fields that are set are sent."""
        logger.info("Updating preferences")
        raw = await self.transport.send("/preferences", "POST", body=update)
        return decode_object(raw, PREFERENCE_KEYS, Preferences.from_api_response)

    async def __aenter__(self) -> "ReplateClient":
        """Async context manager entry."""
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
