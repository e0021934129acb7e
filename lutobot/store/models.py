"""Pydantic data models for recipe documents."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SkillLevel = Literal["beginner", "intermediate", "advanced"]


# ════════════════════════════════════════════════════════════
# RECIPE DOCUMENTS
# ════════════════════════════════════════════════════════════


class Recipe(BaseModel):
    """Recipe header as stored under ``recipes/{id}``."""

    id: str
    title: str
    description: str = ""
    category: str = "Main Dish"
    difficulty: str = "Medium"
    prep_time: str = ""
    cook_time: str = ""
    servings: int = 4
    instructions: str = ""
    image_url: str | None = None


class Ingredient(BaseModel):
    """One entry under ``ingredients/{recipe_id}/{id}``."""

    id: str
    name: str
    quantity: str = ""
    unit: str = ""
    is_optional: bool = False
    has_substitutions: bool = False


class RecipeStep(BaseModel):
    """One entry under ``steps/{recipe_id}/{id}``."""

    id: str
    number: int
    instruction: str
    time_in_minutes: int = 0
    is_critical: bool = False
    image_url: str | None = None


class RecipeBundle(BaseModel):
    """A recipe together with its ingredients and steps."""

    recipe: Recipe
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[RecipeStep] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """Per-user cooking preferences (``userPreferences/{user_id}``)."""

    dietary_restrictions: list[str] = Field(default_factory=list)
    skill_level: SkillLevel | None = None
    favorite_cuisines: list[str] = Field(default_factory=list)
    saved_recipes: list[str] = Field(default_factory=list)
    cooking_history: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.dietary_restrictions
            or self.skill_level
            or self.favorite_cuisines
            or self.saved_recipes
            or self.cooking_history
        )
