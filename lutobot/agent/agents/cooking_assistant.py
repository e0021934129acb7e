"""CookingAssistant — walks the user through the recipe they are cooking."""

from __future__ import annotations

import re

from loguru import logger

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext, AgentResponse
from lutobot.agent.router import COOKING_ASSISTANT
from lutobot.store.documents import StoreError
from lutobot.store.models import Ingredient, RecipeStep
from lutobot.store.recipes import RecipeRepository

_NEXT_STEP = ("next step", "what next", "proceed", "continue", "what do i do next")
_TIMER = ("timer", "set timer", "how long", "start timer")
_SUBSTITUTE = ("substitute", "replacement", "instead of", "don't have")
_HOW_TO = ("how do i", "how to", "what is", "technique")

_INGREDIENT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"substitute for ([\w\s]+)",
        r"replacement for ([\w\s]+)",
        r"instead of ([\w\s]+)",
        r"don't have any ([\w\s]+)",
        r"don't have ([\w\s]+)",
    )
]
_TECHNIQUE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"how do i ([\w\s]+)", r"how to ([\w\s]+)", r"what is ([\w\s]+)")
]
_STEP_NUMBER_RE = re.compile(r"step (\d+)", re.IGNORECASE)


def _contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(p in lowered for p in phrases)


def _first_group(text: str, patterns: list[re.Pattern[str]]) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def format_step(step: RecipeStep) -> str:
    suffix = " (This is a critical step!)" if step.is_critical else ""
    return f"Step {step.number}: {step.instruction}{suffix}"


class CookingAssistantAgent(BaseAgent):
    """Step-by-step guidance, timers, substitutes and technique tips.

    Needs ``context.current_recipe_id``; ``current_step_number`` tracks
    progress (0 or unset = not started).
    """

    name = COOKING_ASSISTANT

    def __init__(self, recipes: RecipeRepository, cuisine: str = "Filipino") -> None:
        self.recipes = recipes
        self.cuisine = cuisine

    async def handle(
        self, utterance: str, context: AgentContext | None = None
    ) -> AgentResponse:
        context = context or AgentContext()
        recipe_id = context.current_recipe_id
        if not recipe_id:
            return AgentResponse.failure(
                "I need to know which recipe you're cooking to help you. "
                "Could you select a recipe first?"
            )

        try:
            recipe = await self.recipes.fetch_recipe_by_id(recipe_id)
            if recipe is None:
                return AgentResponse.failure(
                    "I couldn't find the recipe you're referring to. "
                    "Could you select a recipe first?"
                )
            ingredients = await self.recipes.fetch_ingredients(recipe_id)
            steps = await self.recipes.fetch_steps(recipe_id)

            if _contains_any(utterance, _NEXT_STEP):
                return self._next_step(steps, context.current_step_number or 0)

            if _contains_any(utterance, _TIMER):
                return self._timer(steps, context.current_step_number or 1)

            if _contains_any(utterance, _SUBSTITUTE):
                return await self._substitute(utterance, ingredients)

            if _contains_any(utterance, _HOW_TO):
                technique = _first_group(utterance, _TECHNIQUE_PATTERNS) or utterance.strip()
                return AgentResponse(
                    message=self.cooking_advice(technique), source="combined", success=True
                )

            number_match = _STEP_NUMBER_RE.search(utterance)
            if number_match:
                number = int(number_match.group(1))
                step = next((s for s in steps if s.number == number), None)
                if step is not None:
                    return AgentResponse(
                        message=format_step(step),
                        data={"step": step.model_dump(), "total_steps": len(steps)},
                        source="database",
                        success=True,
                    )

            return AgentResponse(
                message=(
                    f"You're cooking {recipe.title}, a {recipe.difficulty} "
                    f"{recipe.category} recipe. It takes about {recipe.prep_time} to "
                    f"prepare and {recipe.cook_time} to cook. There are "
                    f"{len(ingredients)} ingredients and {len(steps)} steps. Would you "
                    "like me to guide you through the steps or answer a specific question?"
                ),
                data={
                    "recipe": recipe.model_dump(),
                    "ingredient_count": len(ingredients),
                    "step_count": len(steps),
                },
                source="database",
                success=True,
            )
        except StoreError as e:
            logger.error(f"CookingAssistant store error for recipe {recipe_id}: {e}")
            return AgentResponse.failure(
                "I'm sorry, I encountered an error while helping you with cooking. "
                "Please try again.",
                error=str(e),
            )

    # ── Intents ─────────────────────────────────────────────

    @staticmethod
    def _next_step(steps: list[RecipeStep], current: int) -> AgentResponse:
        step = next((s for s in steps if s.number == current + 1), None)
        if step is None:
            return AgentResponse(
                message="That's it! You've completed all the steps for this recipe. "
                "Enjoy your meal!",
                success=True,
            )
        return AgentResponse(
            message=format_step(step),
            data={"current_step": step.model_dump(), "total_steps": len(steps)},
            source="database",
            success=True,
        )

    @staticmethod
    def _timer(steps: list[RecipeStep], current: int) -> AgentResponse:
        step = next((s for s in steps if s.number == current), None)
        if step is None or step.time_in_minutes <= 0:
            return AgentResponse.failure(
                "The current step doesn't have a specific time associated with it."
            )
        return AgentResponse(
            message=f"Starting a {step.time_in_minutes} minute timer for step {step.number}.",
            data={"timer_minutes": step.time_in_minutes, "step": step.model_dump()},
            source="database",
            success=True,
        )

    async def _substitute(
        self, utterance: str, ingredients: list[Ingredient]
    ) -> AgentResponse:
        wanted = _first_group(utterance, _INGREDIENT_PATTERNS)
        if not wanted:
            return AgentResponse.failure("Which ingredient are you looking to substitute?")

        ingredient = next(
            (i for i in ingredients if wanted.lower() in i.name.lower()), None
        )
        if ingredient is not None and ingredient.has_substitutions:
            substitutes = await self.recipes.fetch_substitutes(ingredient.id)
            if substitutes:
                return AgentResponse(
                    message=f"For {ingredient.name}, you can substitute: {', '.join(substitutes)}",
                    data={"ingredient": ingredient.model_dump(), "substitutes": substitutes},
                    source="database",
                    success=True,
                )

        return AgentResponse(
            message=(
                f"I don't have specific substitutes for {wanted} in this recipe. "
                f"In {self.cuisine} cooking, you might try using similar ingredients "
                "that match the flavor profile."
            ),
            success=True,
        )

    def cooking_advice(self, technique: str) -> str:
        """Canned technique tips; generic guidance for anything unrecognised."""
        lowered = technique.lower()
        if "saute" in lowered or "sauté" in lowered or "gisa" in lowered:
            return (
                "To sauté in Filipino cooking (known as 'gisa'), heat oil in a pan over "
                "medium heat. Add aromatics like garlic, onions, and sometimes ginger, and "
                "cook until fragrant and softened but not browned. This forms the flavor "
                "base of many Filipino dishes."
            )
        if "adobo" in lowered or "marinate" in lowered:
            return (
                "Marinating is key in Filipino cooking, especially for adobo. Combine your "
                "protein with vinegar, soy sauce, garlic, bay leaves, and peppercorns. For "
                "best results, marinate for at least 30 minutes, though overnight in the "
                "refrigerator is ideal for maximum flavor absorption."
            )
        if "simmer" in lowered:
            return (
                "Simmering is essential for developing deep flavors in Filipino stews. "
                "Maintain a gentle bubbling, not a rolling boil. Cover the pot partially to "
                "allow some evaporation and flavor concentration while preventing the liquid "
                "from reducing too quickly."
            )
        return (
            f"For {technique}, take your time and pay attention to visual cues in the food. "
            f"{self.cuisine} cooking often relies on sensory judgment rather than strict "
            "timing. Look for changes in color, smell, and texture as indicators of doneness."
        )
