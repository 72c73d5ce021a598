from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Cuisine(str, Enum):
    ITALIAN = "Italian"
    INDIAN = "Indian"
    MEXICAN = "Mexican"
    CHINESE = "Chinese"
    AMERICAN = "American"
    FRENCH = "French"
    OTHER = "Other"


class DietaryRestriction(str, Enum):
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    DAIRY_FREE = "Dairy-Free"
    NUT_FREE = "Nut-Free"
    NONE = "None"


_CUISINES = {c.value.lower(): c for c in Cuisine}
_RESTRICTIONS = {r.value.lower(): r for r in DietaryRestriction}


class RecipeRecord(BaseModel):
    """Provide information on the given image."""

    title: str = Field(..., description="The title of the recipe of image")
    ingredients: list[str] = Field(
        default_factory=list,
        description="A list of ingredients needed for the recipe of image",
    )
    instructions: list[str] = Field(
        default_factory=list,
        description="Step-by-step instructions to prepare the recipe of image",
    )
    preparationTime: float = Field(..., ge=0, description="Estimated preparation time in minutes of image")
    cookingTime: float = Field(..., ge=0, description="Estimated cooking time in minutes of image")
    servings: int = Field(..., ge=1, description="Number of servings the recipe yields of image")
    cuisine: Cuisine = Field(..., description="Type of cuisine the recipe belongs to of image")
    dietaryRestrictions: Optional[list[DietaryRestriction]] = Field(
        None,
        description="Optional: Dietary restrictions associated with the recipe of image",
    )

    @field_validator("cuisine", mode="before")
    @classmethod
    def _coerce_cuisine(cls, value: Any) -> Any:
        if isinstance(value, Cuisine):
            return value
        if isinstance(value, str):
            return _CUISINES.get(value.strip().lower(), Cuisine.OTHER)
        return Cuisine.OTHER

    @field_validator("dietaryRestrictions", mode="before")
    @classmethod
    def _drop_unknown_restrictions(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, list):
            value = [value]
        out: list[DietaryRestriction] = []
        for item in value:
            if isinstance(item, DietaryRestriction):
                restriction = item
            elif isinstance(item, str):
                restriction = _RESTRICTIONS.get(item.strip().lower())
            else:
                restriction = None
            if restriction is not None and restriction not in out:
                out.append(restriction)
        return out


class InferenceServiceConfig(BaseModel):
    """Declarative binding of the recipe inference endpoint."""

    path: str = "recipe"
    public: bool = True
    cache: str = "Individual"
    contentType: str = "image"
    model: str = "gemini-2.5-flash"
