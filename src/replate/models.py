"""Canonical entities and request bodies for the Replate backend."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from replate.normalize.fields import (
    coerce_bool,
    coerce_float,
    coerce_int,
    coerce_str,
    coerce_str_list,
    extract_quantity,
    first_present,
    record_identifier,
)
from replate.normalize.quantities import (
    DEFAULT_AMOUNT,
    DEFAULT_UNIT,
    normalize_unit,
    parse_amount,
    parse_minutes,
)
from replate.normalize.timestamps import format_timestamp, normalize_timestamp

# =============================================================================
# Enumerations
# =============================================================================


class _LenientEnum(str, Enum):
    """String enum that maps unknown values onto a fallback member."""

    # Overridden by each concrete enum to name its catch-all member
    @classmethod
    def _fallback(cls) -> "_LenientEnum":
        raise NotImplementedError(f"{cls.__name__} must define _fallback")

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def parse(cls, raw: Any):
        """Map a raw backend value to a member; never raises."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return cls._fallback()
        key = raw.strip().lower()
        for member in cls:
            if member.value.lower() == key or member.name.lower() == key:
                return member
        alias = cls._aliases().get(key)
        if alias is not None:
            return cls(alias)
        return cls._fallback()


class IngredientCategory(_LenientEnum):
    PRODUCE = "Produce"
    DAIRY = "Dairy"
    PROTEIN = "Protein"
    GRAINS = "Grains"
    SPICES = "Spices"
    OTHER = "Other"

    @classmethod
    def _fallback(cls) -> "IngredientCategory":
        return cls.OTHER

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return CATEGORY_ALIASES


# Common backend spellings for the closed category set
CATEGORY_ALIASES: dict[str, str] = {
    "vegetable": "Produce",
    "vegetables": "Produce",
    "fruit": "Produce",
    "fruits": "Produce",
    "milk": "Dairy",
    "cheese": "Dairy",
    "meat": "Protein",
    "fish": "Protein",
    "seafood": "Protein",
    "poultry": "Protein",
    "eggs": "Protein",
    "grain": "Grains",
    "bread": "Grains",
    "bakery": "Grains",
    "pasta": "Grains",
    "spice": "Spices",
    "herbs": "Spices",
    "seasoning": "Spices",
    "condiments": "Spices",
}


class DifficultyLevel(_LenientEnum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def _fallback(cls) -> "DifficultyLevel":
        return cls.MEDIUM


class CuisineType(_LenientEnum):
    ITALIAN = "Italian"
    MEXICAN = "Mexican"
    ASIAN = "Asian"
    AMERICAN = "American"
    MEDITERRANEAN = "Mediterranean"
    INDIAN = "Indian"
    FRENCH = "French"
    OTHER = "Other"

    @classmethod
    def _fallback(cls) -> "CuisineType":
        return cls.OTHER


class ExpirationStatus(str, Enum):
    FRESH = "fresh"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    NO_EXPIRATION = "no_expiration"


EXPIRING_SOON_DAYS = 2

# =============================================================================
# Canonical entities
# =============================================================================


class Quantity(BaseModel):
    """Numeric amount plus a non-empty unit."""

    model_config = ConfigDict(frozen=True)

    amount: float = DEFAULT_AMOUNT
    unit: str = DEFAULT_UNIT

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        """Ensure amount is finite and non-negative."""
        return parse_amount(v)

    @field_validator("unit", mode="before")
    @classmethod
    def coerce_unit(cls, v: Any) -> str:
        """Ensure unit is never empty."""
        return normalize_unit(v)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Quantity":
        amount, unit = extract_quantity(record)
        return cls(amount=amount, unit=unit)


class Ingredient(BaseModel):
    """An inventory ingredient."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str
    quantity: Quantity = Field(default_factory=Quantity)
    category: IngredientCategory = IngredientCategory.OTHER
    expiration_date: datetime | None = None
    added_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    purchase_date: datetime | None = None
    location: str | None = None
    notes: str | None = None
    available: bool = True

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> IngredientCategory:
        """Unknown categories fall back to Other."""
        return IngredientCategory.parse(v)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Ingredient | None":
        """Build from a raw record; returns None when it has neither id nor name."""
        identifier = record_identifier(data)
        name = coerce_str(first_present(data, "name"))
        if identifier is None and name is None:
            return None

        return cls(
            id=identifier,
            name=name or "Unknown Ingredient",
            quantity=Quantity.from_record(data),
            category=first_present(data, "category"),
            expiration_date=normalize_timestamp(
                first_present(data, "expirationDate", "expiresAt", "estimatedExpiration")
            ),
            added_date=normalize_timestamp(first_present(data, "addedDate", "dateAdded")),
            created_at=normalize_timestamp(first_present(data, "createdAt")),
            updated_at=normalize_timestamp(first_present(data, "updatedAt")),
            purchase_date=normalize_timestamp(first_present(data, "purchaseDate")),
            location=coerce_str(first_present(data, "location")),
            notes=coerce_str(first_present(data, "notes")),
            available=coerce_bool(first_present(data, "isAvailable", "available"), default=True),
        )

    def days_until_expiration(self, now: datetime | None = None) -> int | None:
        """Whole days until expiration, negative once expired."""
        if self.expiration_date is None:
            return None
        now = now or datetime.now(timezone.utc)
        return (self.expiration_date - now).days

    def expiration_status(self, now: datetime | None = None) -> ExpirationStatus:
        days = self.days_until_expiration(now)
        if days is None:
            return ExpirationStatus.NO_EXPIRATION
        if days < 0:
            return ExpirationStatus.EXPIRED
        if days <= EXPIRING_SOON_DAYS:
            return ExpirationStatus.EXPIRING_SOON
        return ExpirationStatus.FRESH

    def to_update_request(self) -> "IngredientUpdate":
        return IngredientUpdate(
            id=self.id,
            name=self.name,
            quantity=self.quantity,
            category=self.category.value,
            expiration_date=format_timestamp(self.expiration_date),
        )


class ScannedIngredient(BaseModel):
    """An unconfirmed ingredient candidate produced by the image scan."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: Quantity = Field(default_factory=Quantity)
    estimated_expiration: datetime | None = None
    confidence: float | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ScannedIngredient | None":
        name = coerce_str(first_present(data, "name"))
        if name is None and record_identifier(data) is None:
            return None

        confidence = coerce_float(first_present(data, "confidence"))
        if confidence is not None:
            confidence = min(max(confidence, 0.0), 1.0)

        return cls(
            name=name or "Unknown Ingredient",
            quantity=Quantity.from_record(data),
            estimated_expiration=normalize_timestamp(
                first_present(data, "estimatedExpiration", "expirationDate")
            ),
            confidence=confidence,
        )

    def to_ingredient(
        self, category: IngredientCategory = IngredientCategory.OTHER
    ) -> Ingredient:
        """Confirm the candidate as an inventory ingredient with a client-local id."""
        return Ingredient(
            id=str(uuid.uuid4()),
            name=self.name,
            quantity=self.quantity,
            category=category,
            expiration_date=self.estimated_expiration,
            added_date=datetime.now(timezone.utc),
            available=True,
        )


class RecipeIngredient(BaseModel):
    """A display-only ingredient line inside a recipe."""

    model_config = ConfigDict(frozen=True)

    name: str
    amount: float = DEFAULT_AMOUNT
    unit: str = DEFAULT_UNIT
    optional: bool = False
    available: bool | None = None

    @classmethod
    def from_api_response(cls, data: Any) -> "RecipeIngredient | None":
        if isinstance(data, str):
            name = data.strip()
            return cls(name=name) if name else None
        if not isinstance(data, dict):
            return None

        name = coerce_str(first_present(data, "name", "ingredient"))
        if name is None:
            return None
        amount, unit = extract_quantity(data)
        available = first_present(data, "available", "isAvailable")
        return cls(
            name=name,
            amount=amount,
            unit=unit,
            optional=coerce_bool(first_present(data, "isOptional", "optional")),
            available=None if available is None else coerce_bool(available),
        )


def _display_number(raw: Any) -> str:
    if raw is None or isinstance(raw, bool):
        return "0"
    if isinstance(raw, (int, float)):
        value = coerce_float(raw)
        if value is None:
            return "0"
        return str(int(value)) if value.is_integer() else f"{value:.1f}"
    return coerce_str(raw) or "0"


class NutritionInfo(BaseModel):
    """Nutrition summary; every value is a display string."""

    model_config = ConfigDict(frozen=True)

    calories: str = "0"
    protein: str = "0"
    carbs: str = "0"
    fat: str = "0"
    fiber: str = "0"

    @classmethod
    def from_api_response(cls, data: Any) -> "NutritionInfo":
        if not isinstance(data, dict):
            return cls()
        return cls(
            calories=_display_number(first_present(data, "calories", "kcal")),
            protein=_display_number(first_present(data, "protein")),
            carbs=_display_number(first_present(data, "carbs", "carbohydrates")),
            fat=_display_number(first_present(data, "fat")),
            fiber=_display_number(first_present(data, "fiber", "fibre")),
        )


def _normalize_match_score(raw: Any) -> float:
    score = coerce_float(raw)
    if score is None:
        return 1.0
    # Some responses send a percentage
    if 1.0 < score <= 100.0:
        score = score / 100
    return min(max(score, 0.0), 1.0)


def _instruction_steps(raw: Any) -> list[str]:
    if isinstance(raw, str):
        return [line.strip() for line in raw.splitlines() if line.strip()]
    if not isinstance(raw, list):
        return []
    steps = []
    for item in raw:
        if isinstance(item, dict):
            item = first_present(item, "description", "text", "step", "instruction")
        if (text := coerce_str(item)) is not None:
            steps.append(text)
    return steps


class Recipe(BaseModel):
    """A generated or saved recipe."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str
    description: str = ""
    instructions: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    cuisine: str = CuisineType.OTHER.value
    difficulty: str = DifficultyLevel.MEDIUM.value
    servings: int = 2
    prep_time: int = 0
    cook_time: int = 0
    total_time: int = 0
    nutrition: NutritionInfo = Field(default_factory=NutritionInfo)
    rating: float | None = None
    last_cooked: datetime | None = None
    image_url: str | None = None
    match_score: float = Field(default=1.0, ge=0.0, le=1.0)
    dietary_restrictions: list[str] = Field(default_factory=list)
    cooked: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Recipe | None":
        """Build from a raw record; returns None when it has neither id nor name."""
        identifier = record_identifier(data, "recipeId", "recipe_id")
        name = coerce_str(first_present(data, "name", "title"))
        if identifier is None and name is None:
            return None

        raw_ingredients = first_present(data, "ingredients")
        if not isinstance(raw_ingredients, list):
            raw_ingredients = []
        ingredients = [
            ingredient
            for item in raw_ingredients
            if (ingredient := RecipeIngredient.from_api_response(item)) is not None
        ]

        prep_time = parse_minutes(first_present(data, "prepTime", "prepTimeMinutes"))
        cook_time = parse_minutes(first_present(data, "cookTime", "cookTimeMinutes"))
        total_raw = first_present(data, "totalTime", "totalTimeMinutes", "cookingTime")
        total_time = parse_minutes(total_raw) if total_raw is not None else prep_time + cook_time

        last_cooked = normalize_timestamp(
            first_present(data, "lastCooked", "cookedDate", "cookedAt")
        )

        return cls(
            id=identifier,
            name=name or "Untitled Recipe",
            description=coerce_str(first_present(data, "description")) or "",
            instructions=_instruction_steps(first_present(data, "instructions", "steps")),
            tips=coerce_str_list(first_present(data, "tips")),
            ingredients=ingredients,
            cuisine=coerce_str(first_present(data, "cuisine", "cuisineType"))
            or CuisineType.OTHER.value,
            difficulty=coerce_str(first_present(data, "difficulty")) or DifficultyLevel.MEDIUM.value,
            servings=coerce_int(first_present(data, "servings"), default=2),
            prep_time=prep_time,
            cook_time=cook_time,
            total_time=total_time,
            nutrition=NutritionInfo.from_api_response(
                first_present(data, "nutritionalInfo", "nutrition", "nutritionInfo")
            ),
            rating=coerce_float(first_present(data, "rating")),
            last_cooked=last_cooked,
            image_url=coerce_str(first_present(data, "imageUrl", "image", "imageName")),
            match_score=_normalize_match_score(first_present(data, "matchScore")),
            dietary_restrictions=coerce_str_list(first_present(data, "dietaryRestrictions", "tags")),
            cooked=coerce_bool(first_present(data, "isCooked", "cooked")) or last_cooked is not None,
        )

    @property
    def cuisine_type(self) -> CuisineType:
        return CuisineType.parse(self.cuisine)

    @property
    def difficulty_level(self) -> DifficultyLevel:
        return DifficultyLevel.parse(self.difficulty)

    @property
    def is_cooked(self) -> bool:
        return self.cooked or self.last_cooked is not None

    @property
    def slug(self) -> str:
        """Name-derived key used when the server assigned no id."""
        return self.name.lower().replace(" ", "_")

    @property
    def recipe_key(self) -> str:
        return self.id or self.slug


class Preferences(BaseModel):
    """User cooking preferences."""

    model_config = ConfigDict(frozen=True)

    dietary_restrictions: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)
    cooking_time: str | None = None
    skill_level: str = DifficultyLevel.MEDIUM.value

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Preferences":
        return cls(
            dietary_restrictions=coerce_str_list(first_present(data, "dietaryRestrictions")),
            allergens=coerce_str_list(first_present(data, "allergens")),
            cuisine_preferences=coerce_str_list(first_present(data, "cuisinePreferences")),
            cooking_time=coerce_str(first_present(data, "cookingTime")),
            skill_level=coerce_str(first_present(data, "skillLevel")) or DifficultyLevel.MEDIUM.value,
        )


# =============================================================================
# Request bodies
# =============================================================================


class RequestBody(BaseModel):
    """Request payload serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngredientUpdate(RequestBody):
    id: str | None = None
    name: str
    quantity: Quantity
    category: str | None = None
    expiration_date: str | None = None


class UpdateIngredientsRequest(RequestBody):
    ingredients: list[IngredientUpdate]


class PreferenceOverrides(RequestBody):
    cuisine_preferences: list[str] | None = None
    cooking_time: str | None = None


class RecipeGenerationRequest(RequestBody):
    must_use_ingredients: list[str] | None = None
    preference_overrides: PreferenceOverrides | None = None


class RecipeImageRequest(RequestBody):
    recipe_id: str
    recipe_name: str
    description: str


class CookedRecipeRequest(RequestBody):
    recipe_id: str
    rating: float
    notes: str | None = None


class PreferencesUpdate(RequestBody):
    dietary_restrictions: list[str] | None = None
    allergens: list[str] | None = None
    cuisine_preferences: list[str] | None = None
    cooking_time: str | None = None
    skill_level: str | None = None
