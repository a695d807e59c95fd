"""Recipe ingredient availability against the user's inventory."""

import re
from collections.abc import Iterable

from rapidfuzz import fuzz, process

from replate.models import Ingredient, Recipe, RecipeIngredient

# Words in recipe lines that do not change what the ingredient is
PREPARATION_WORDS = frozenset(
    "chopped diced minced sliced grated crushed ground shredded peeled "
    "softened melted beaten cubed halved rinsed drained".split()
)
STATE_WORDS = frozenset(
    "fresh dried raw cooked frozen canned organic ripe boneless skinless".split()
)
SIZE_WORDS = frozenset("large medium small whole".split())

STOP_WORDS = PREPARATION_WORDS | STATE_WORDS | SIZE_WORDS

FUZZY_THRESHOLD = 90


def normalize_ingredient_name(name: str) -> str:
    """
    Normalize an ingredient name for matching.

    - Lowercase
    - Remove leading measurements ("2 cups flour" -> "flour")
    - Remove parenthetical notes
    - Remove preparation words (fresh, chopped, ...)
    """
    normalized = (name or "").lower().strip()
    normalized = re.sub(
        r"^[\d½¼¾⅓⅔]+(?:/\d+)?\s*(?:[\d½¼¾⅓⅔]+(?:/\d+)?)?\s*(cups?|tbsp|tsp|oz|g|kg|ml|l|lb)?\s+",
        "",
        normalized,
    )
    normalized = re.sub(r"\([^)]*\)", "", normalized)
    words = [w for w in normalized.split() if w not in STOP_WORDS]
    return " ".join(words).strip()


def _inventory_names(inventory: Iterable[Ingredient]) -> list[str]:
    names = {normalize_ingredient_name(item.name) for item in inventory if item.available}
    names.discard("")
    return sorted(names)


def _is_available(name: str, inventory_names: list[str]) -> bool:
    normalized = normalize_ingredient_name(name)
    if not normalized or not inventory_names:
        return False
    if normalized in inventory_names:
        return True
    best = process.extractOne(normalized, inventory_names, scorer=fuzz.token_sort_ratio)
    return best is not None and best[1] >= FUZZY_THRESHOLD


def ingredient_availability(recipe: Recipe, inventory: Iterable[Ingredient]) -> dict[str, bool]:
    """Map each recipe ingredient name to whether the inventory holds it."""
    names = _inventory_names(inventory)
    return {item.name: _is_available(item.name, names) for item in recipe.ingredients}


def missing_ingredients(
    recipe: Recipe, inventory: Iterable[Ingredient]
) -> list[RecipeIngredient]:
    """Recipe ingredients not found in the inventory, in recipe order."""
    names = _inventory_names(inventory)
    return [item for item in recipe.ingredients if not _is_available(item.name, names)]


def compute_match_score(recipe: Recipe, inventory: Iterable[Ingredient]) -> float:
    """
    Share of required recipe ingredients present in the inventory.

    Optional ingredients are ignored; a recipe with no required
    ingredients scores 1.0.
    """
    required = [item for item in recipe.ingredients if not item.optional]
    if not required:
        return 1.0
    names = _inventory_names(inventory)
    found = sum(1 for item in required if _is_available(item.name, names))
    return found / len(required)
