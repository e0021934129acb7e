"""RecipeRepository — typed reads/writes over the document store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from lutobot.store.documents import DocumentStore
from lutobot.store.models import (
    Ingredient,
    Recipe,
    RecipeBundle,
    RecipeStep,
    UserPreferences,
)

_M = TypeVar("_M", bound=BaseModel)


class RecipeRepository:
    """Recipe, ingredient, step, substitute and preference documents.

    Layout::

        recipes/{recipe_id}                  -> Recipe (without id)
        ingredients/{recipe_id}/{id}         -> Ingredient (without id)
        steps/{recipe_id}/{id}               -> RecipeStep (without id)
        substitutes/{ingredient_id}          -> [str]
        userPreferences/{user_id}            -> UserPreferences
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # ── Recipes ─────────────────────────────────────────────

    async def fetch_recipes(self) -> list[Recipe]:
        data = await self.store.get("recipes")
        return _parse_children(Recipe, data, "recipes")

    async def fetch_recipe_by_id(self, recipe_id: str) -> Recipe | None:
        data = await self.store.get(f"recipes/{recipe_id}")
        if not isinstance(data, dict):
            logger.debug(f"No recipe found with id: {recipe_id}")
            return None
        try:
            return Recipe(**{**data, "id": recipe_id})
        except ValidationError as e:
            logger.warning(f"Invalid recipe document {recipe_id}: {e}")
            return None

    async def search_by_title(self, query: str) -> list[Recipe]:
        """Case-insensitive title substring match, in store order."""
        needle = query.lower().strip()
        if not needle:
            return []
        return [r for r in await self.fetch_recipes() if needle in r.title.lower()]

    async def fetch_ingredients(self, recipe_id: str) -> list[Ingredient]:
        data = await self.store.get(f"ingredients/{recipe_id}")
        return _parse_children(Ingredient, data, f"ingredients/{recipe_id}")

    async def fetch_steps(self, recipe_id: str) -> list[RecipeStep]:
        """Steps ordered by step number."""
        data = await self.store.get(f"steps/{recipe_id}")
        steps = _parse_children(RecipeStep, data, f"steps/{recipe_id}")
        return sorted(steps, key=lambda s: s.number)

    async def fetch_substitutes(self, ingredient_id: str) -> list[str]:
        data = await self.store.get(f"substitutes/{ingredient_id}")
        if not isinstance(data, list):
            return []
        return [str(s) for s in data if s]

    async def set_substitutes(self, ingredient_id: str, substitutes: list[str]) -> None:
        await self.store.set(f"substitutes/{ingredient_id}", list(substitutes))

    async def save_recipe(self, bundle: RecipeBundle) -> None:
        """Write recipe header, ingredients and steps."""
        recipe_id = bundle.recipe.id
        await self.store.set(
            f"recipes/{recipe_id}", bundle.recipe.model_dump(exclude={"id"})
        )
        await self.store.set(
            f"ingredients/{recipe_id}",
            {i.id: i.model_dump(exclude={"id"}) for i in bundle.ingredients},
        )
        await self.store.set(
            f"steps/{recipe_id}",
            {s.id: s.model_dump(exclude={"id"}) for s in bundle.steps},
        )
        logger.info(f"Saved recipe {recipe_id}: {bundle.recipe.title}")

    # ── Preferences ─────────────────────────────────────────

    async def get_user_preferences(self, user_id: str) -> UserPreferences:
        data = await self.store.get(f"userPreferences/{user_id}")
        if not isinstance(data, dict):
            return UserPreferences()
        try:
            return UserPreferences(**data)
        except ValidationError as e:
            logger.warning(f"Invalid preferences for {user_id}, ignoring: {e}")
            return UserPreferences()

    async def save_user_preferences(self, user_id: str, prefs: UserPreferences) -> None:
        await self.store.set(
            f"userPreferences/{user_id}", prefs.model_dump(exclude_none=True)
        )

    # ── Seeding ─────────────────────────────────────────────

    async def seed_from_file(self, path: str | Path) -> int:
        """Load recipes (and substitutes) from a JSON seed file.

        Format::

            {"recipes": [{"id": ..., "title": ..., "ingredients": [...],
                          "steps": [...]}],
             "substitutes": {"<ingredient_id>": ["...", ...]}}

        Returns the number of recipes written.
        """
        with open(path, encoding="utf-8") as f:
            payload: dict[str, Any] = json.load(f)

        count = 0
        for raw in payload.get("recipes", []):
            raw = dict(raw)
            ingredients = raw.pop("ingredients", [])
            steps = raw.pop("steps", [])
            bundle = RecipeBundle(
                recipe=Recipe(**raw),
                ingredients=[Ingredient(**i) for i in ingredients],
                steps=[RecipeStep(**s) for s in steps],
            )
            await self.save_recipe(bundle)
            count += 1

        for ingredient_id, subs in payload.get("substitutes", {}).items():
            await self.set_substitutes(ingredient_id, subs)

        logger.info(f"Seeded {count} recipes from {path}")
        return count


def _parse_children(model: type[_M], data: Any, where: str) -> list[_M]:
    """Turn an ``{id: {...}}`` subtree into models, skipping invalid entries."""
    if not isinstance(data, dict):
        return []
    result: list[_M] = []
    for key, value in data.items():
        if not isinstance(value, dict):
            continue
        try:
            result.append(model(**{**value, "id": key}))
        except ValidationError as e:
            logger.warning(f"Skipping invalid document {where}/{key}: {e}")
    return result
