"""Client-side state store holding the user's inventory and recipes.

Collections are immutable tuples replaced under a single writer lock, so
concurrent loads resolve last-write-wins and readers always see a complete
snapshot. State only changes after a request succeeded and decoded.
"""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum

from replate.client.base import APIError
from replate.client.service import ReplateClient
from replate.logging_config import get_logger
from replate.matching import compute_match_score
from replate.models import Ingredient, IngredientCategory, Recipe, ScannedIngredient

logger = get_logger(__name__)

FAVORITE_RATING = 8.0


class RecipeFilter(str, Enum):
    ALL = "All"
    RECENT = "Recent"
    FAVORITES = "Favorites"


class AppStore:
    """Single-writer store for ingredients, recipes and the pending error."""

    def __init__(self, client: ReplateClient):
        self.client = client
        self.ingredients: tuple[Ingredient, ...] = ()
        self.recipes: tuple[Recipe, ...] = ()
        self.is_loading = False
        self._error: str | None = None
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def _record_error(self, error: APIError) -> None:
        logger.warning(f"Request failed: {error}")
        self._error = error.user_message

    def take_error(self) -> str | None:
        """Return the pending error message once, then clear it."""
        message, self._error = self._error, None
        return message

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_ingredients(self) -> bool:
        """Replace the inventory with the server's copy."""
        self.is_loading = True
        try:
            ingredients = await self.client.fetch_ingredients()
        except APIError as e:
            self._record_error(e)
            return False
        finally:
            self.is_loading = False

        async with self._lock:
            self.ingredients = tuple(ingredients)
        return True

    async def load_recipes(self, status: str = "all", sort: str = "recent") -> bool:
        """Replace the recipe list with the server's copy."""
        self.is_loading = True
        try:
            recipes = await self.client.fetch_recipes(status=status, sort=sort)
        except APIError as e:
            self._record_error(e)
            return False
        finally:
            self.is_loading = False

        async with self._lock:
            self.recipes = tuple(recipes)
        return True

    async def generate_recipes(
        self,
        must_use_ingredients: list[str] | None = None,
        cuisine_preferences: list[str] | None = None,
    ) -> list[Recipe]:
        """Generate recipes and put them ahead of the existing ones."""
        self.is_loading = True
        try:
            recipes = await self.client.generate_recipes(
                must_use_ingredients=must_use_ingredients,
                cuisine_preferences=cuisine_preferences,
            )
        except APIError as e:
            self._record_error(e)
            return []
        finally:
            self.is_loading = False

        async with self._lock:
            self.recipes = tuple(recipes) + self.recipes
        return recipes

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    async def scan_ingredients(self, image: bytes) -> list[ScannedIngredient]:
        """Scan a photo; candidates are not added until confirmed."""
        self.is_loading = True
        try:
            return await self.client.scan_ingredients(image)
        except APIError as e:
            self._record_error(e)
            return []
        finally:
            self.is_loading = False

    async def confirm_scanned(
        self,
        scanned: Iterable[ScannedIngredient],
        category: IngredientCategory = IngredientCategory.OTHER,
    ) -> list[Ingredient]:
        """Add confirmed scan candidates to the inventory and sync."""
        confirmed = [item.to_ingredient(category) for item in scanned]
        async with self._lock:
            self.ingredients = self.ingredients + tuple(confirmed)
        await self.sync_ingredients()
        return confirmed

    async def add_ingredient(self, ingredient: Ingredient) -> None:
        async with self._lock:
            self.ingredients = self.ingredients + (ingredient,)
        await self.sync_ingredients()

    async def update_ingredient(
        self, ingredient: Ingredient, previous: Ingredient | None = None
    ) -> bool:
        """
        Replace one held ingredient and sync.

        The held item is found by id. An ingredient without an id replaces
        ``previous``, the exact instance being edited. Returns False when
        nothing matches.
        """
        async with self._lock:
            if ingredient.id is not None:
                index = next(
                    (i for i, item in enumerate(self.ingredients) if item.id == ingredient.id),
                    None,
                )
            elif previous is not None:
                index = next(
                    (i for i, item in enumerate(self.ingredients) if item == previous), None
                )
            else:
                index = None
            if index is None:
                return False
            items = list(self.ingredients)
            items[index] = ingredient
            self.ingredients = tuple(items)
        await self.sync_ingredients()
        return True

    async def remove_ingredient(self, ingredient: Ingredient) -> None:
        async with self._lock:
            self.ingredients = tuple(item for item in self.ingredients if item != ingredient)
        await self.sync_ingredients()

    async def sync_ingredients(self) -> bool:
        """Upload the full inventory snapshot."""
        snapshot = self.ingredients
        try:
            await self.client.update_ingredients([item.to_update_request() for item in snapshot])
        except APIError as e:
            self._record_error(e)
            return False
        return True

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------

    async def mark_recipe_cooked(
        self, recipe: Recipe, rating: float, notes: str | None = None
    ) -> Recipe | None:
        """Record the rating locally, then report it to the server."""
        async with self._lock:
            if recipe not in self.recipes:
                return None
            cooked = recipe.model_copy(
                update={
                    "rating": rating,
                    "cooked": True,
                    "last_cooked": datetime.now(timezone.utc),
                }
            )
            self.recipes = tuple(cooked if item == recipe else item for item in self.recipes)

        try:
            await self.client.mark_recipe_cooked(recipe.recipe_key, rating, notes)
        except APIError as e:
            self._record_error(e)
        return cooked

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def ingredients_in_category(self, category: IngredientCategory | None) -> list[Ingredient]:
        if category is None:
            return list(self.ingredients)
        return [item for item in self.ingredients if item.category == category]

    def ingredients_by_category(self) -> dict[IngredientCategory, list[Ingredient]]:
        """Group the inventory by category, in category declaration order."""
        grouped: dict[IngredientCategory, list[Ingredient]] = {}
        for category in IngredientCategory:
            items = self.ingredients_in_category(category)
            if items:
                grouped[category] = items
        return grouped

    def filter_recipes(self, recipe_filter: RecipeFilter = RecipeFilter.ALL) -> list[Recipe]:
        if recipe_filter == RecipeFilter.RECENT:
            return [recipe for recipe in self.recipes if recipe.is_cooked]
        if recipe_filter == RecipeFilter.FAVORITES:
            return [recipe for recipe in self.recipes if (recipe.rating or 0) >= FAVORITE_RATING]
        return list(self.recipes)

    def recently_cooked(self) -> list[Recipe]:
        """Cooked recipes, most recent first."""
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            (recipe for recipe in self.recipes if recipe.is_cooked),
            key=lambda recipe: recipe.last_cooked or oldest,
            reverse=True,
        )

    def match_score(self, recipe: Recipe) -> float:
        """Overlap of the recipe with the current inventory."""
        return compute_match_score(recipe, self.ingredients)
