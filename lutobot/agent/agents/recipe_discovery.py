"""RecipeDiscovery — finds recipes in the store, or generates and saves one via the LLM."""

from __future__ import annotations

import re
import uuid
from typing import Any

from loguru import logger
from pydantic import ValidationError

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext, AgentResponse, SuggestedAction
from lutobot.agent.router import RECIPE_DISCOVERY
from lutobot.core.providers.base import BaseLLMProvider, ProviderError
from lutobot.core.providers.json_repair import extract_json
from lutobot.store.documents import StoreError
from lutobot.store.models import Ingredient, Recipe, RecipeBundle, RecipeStep
from lutobot.store.recipes import RecipeRepository

_QUERY_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"recipe for ([\w\s]+)",
        r"how to make ([\w\s]+)",
        r"find me a ([\w\s]+) recipe",
        r"search for ([\w\s]+)",
        r"looking for ([\w\s]+)",
        r"i want to cook ([\w\s]+)",
        r"i want to make ([\w\s]+)",
    )
]

RECIPE_SYSTEM_PROMPT = """\
You are an AI Cooking Assistant specialized in {cuisine} cuisine and desserts.
When asked for a recipe, reply with ONLY a JSON object of this shape:
{{
  "recipe": {{
    "title": "Full Recipe Name",
    "description": "Brief cultural or flavor description",
    "category": "Main Dish/Dessert/Soup/Appetizer/etc.",
    "difficulty": "Easy/Medium/Hard",
    "prep_time": "Preparation time, e.g. 20 mins",
    "cook_time": "Cooking time, e.g. 45 mins",
    "servings": 4,
    "instructions": "Brief overview of the cooking process"
  }},
  "ingredients": [
    {{"name": "minced garlic", "quantity": "2", "unit": "tbsp",
      "is_optional": false, "has_substitutions": false}}
  ],
  "steps": [
    {{"number": 1, "instruction": "Clear cooking instruction",
      "time_in_minutes": 5, "is_critical": false}}
  ]
}}
List EVERY ingredient with exact measurements and EVERY step in order.
Mark critical steps. Never return an incomplete recipe and add no text
before or after the JSON."""

# camelCase keys some models still emit
_KEY_ALIASES = {
    "prepTime": "prep_time",
    "cookTime": "cook_time",
    "imageUrl": "image_url",
    "isOptional": "is_optional",
    "hasSubstitutions": "has_substitutions",
    "timeInMinutes": "time_in_minutes",
    "isCritical": "is_critical",
}


def extract_recipe_query(utterance: str) -> str:
    """Pull the dish name out of common phrasings; whole utterance otherwise."""
    for pattern in _QUERY_PATTERNS:
        match = pattern.search(utterance)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return utterance.strip()


def _normalize_keys(raw: dict[str, Any]) -> dict[str, Any]:
    return {_KEY_ALIASES.get(k, k): v for k, v in raw.items() if v is not None}


def _stringify(fields: dict[str, Any], *keys: str) -> dict[str, Any]:
    # models often emit numbers for free-text fields
    return {k: str(v) if k in keys else v for k, v in fields.items()}


def _recipe_actions(recipe_id: str) -> list[SuggestedAction]:
    return [
        SuggestedAction(type="viewRecipe", label="View Recipe", value=recipe_id),
        SuggestedAction(type="startCooking", label="Start Cooking", value=recipe_id),
    ]


class RecipeDiscoveryAgent(BaseAgent):
    """Recipe lookup: local store first, LLM-generated recipe second.

    Generated recipes are saved so the next lookup hits the store.
    """

    name = RECIPE_DISCOVERY

    def __init__(
        self,
        recipes: RecipeRepository,
        llm: BaseLLMProvider | None = None,
        cuisine: str = "Filipino",
    ) -> None:
        self.recipes = recipes
        self.llm = llm
        self.cuisine = cuisine

    async def handle(
        self, utterance: str, context: AgentContext | None = None
    ) -> AgentResponse:
        query = extract_recipe_query(utterance)
        if not query:
            return AgentResponse.failure(
                "I couldn't determine which recipe you're looking for. "
                "Could you please specify the recipe you'd like me to find?"
            )

        try:
            local = await self._find_local(query)
        except StoreError as e:
            logger.error(f"RecipeDiscovery store lookup failed: {e}")
            return AgentResponse.failure(
                "I'm sorry, I encountered an error while searching for recipes. "
                "Please try again.",
                error=str(e),
            )
        if local is not None:
            return AgentResponse(
                message=f"I found the recipe for {local.title} in our collection.",
                data=local.model_dump(),
                suggested_actions=_recipe_actions(local.id),
                source="database",
                success=True,
            )

        logger.info(f"No local match for '{query}', asking the LLM")
        bundle = await self.search_online(query)
        if bundle is None:
            return AgentResponse.failure(
                f'I couldn\'t find a recipe for "{query}". '
                "Would you like to try a different search?"
            )

        try:
            await self.recipes.save_recipe(bundle)
        except StoreError as e:
            logger.warning(f"Generated recipe '{bundle.recipe.title}' not saved: {e}")

        return AgentResponse(
            message=f"I found a recipe for {bundle.recipe.title} online. Here it is!",
            data=bundle.model_dump(),
            suggested_actions=_recipe_actions(bundle.recipe.id),
            source="ai",
            success=True,
        )

    async def _find_local(self, query: str) -> Recipe | None:
        matches = await self.recipes.search_by_title(query)
        if not matches:
            return None
        return await self.recipes.fetch_recipe_by_id(matches[0].id)

    async def search_online(self, query: str) -> RecipeBundle | None:
        """Ask the LLM for a structured recipe; None when unavailable or unusable."""
        if self.llm is None:
            return None
        try:
            reply = await self.llm.acomplete(
                f"Give me the complete recipe for {query}.",
                system=RECIPE_SYSTEM_PROMPT.format(cuisine=self.cuisine),
                json_mode=True,
            )
            payload = extract_json(reply)
            return self.parse_bundle(payload, fallback_title=query)
        except (ProviderError, ValueError, ValidationError) as e:
            logger.warning(f"Online recipe search for '{query}' failed: {e}")
            return None

    @staticmethod
    def parse_bundle(payload: Any, fallback_title: str) -> RecipeBundle:
        """Build a RecipeBundle with fresh ids from the LLM JSON payload."""
        if not isinstance(payload, dict):
            raise ValueError("Recipe payload is not a JSON object")

        raw_recipe = payload.get("recipe") or {}
        if not isinstance(raw_recipe, dict):
            raise ValueError("'recipe' is not an object")
        recipe_fields = _normalize_keys(raw_recipe)
        recipe_fields.setdefault("title", fallback_title)
        recipe_fields["id"] = str(uuid.uuid4())
        if "servings" in recipe_fields:
            recipe_fields["servings"] = int(recipe_fields["servings"])
        recipe_fields = _stringify(recipe_fields, "prep_time", "cook_time")

        ingredients = [
            Ingredient(
                **{
                    **_stringify(_normalize_keys(i), "quantity", "unit"),
                    "id": f"ing-{uuid.uuid4()}",
                }
            )
            for i in payload.get("ingredients") or []
            if isinstance(i, dict) and i.get("name")
        ]

        steps = [
            RecipeStep(**{**_normalize_keys(s), "id": f"step-{uuid.uuid4()}"})
            for s in payload.get("steps") or []
            if isinstance(s, dict) and s.get("instruction")
        ]
        if not steps:
            raise ValueError("Recipe payload has no steps")

        return RecipeBundle(
            recipe=Recipe(**recipe_fields), ingredients=ingredients, steps=steps
        )
