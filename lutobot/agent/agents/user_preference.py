"""UserPreference — reads and updates per-user cooking preferences."""

from __future__ import annotations

import re

from loguru import logger

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext, AgentResponse, SuggestedAction
from lutobot.agent.router import USER_PREFERENCE
from lutobot.store.documents import StoreError
from lutobot.store.recipes import RecipeRepository

ANONYMOUS_USER = "anonymous-user"

DIETARY = "dietary restrictions"
SKILL = "skill level"
CUISINES = "favorite cuisines"

_GET_PHRASES = ("what are my", "show me my", "tell me my", "my preferences")
_SET_PHRASES = ("i am", "i'm", "my", "set my", "change my", "update my")

_ALLERGY_RE = re.compile(r"allergic to ([\w\s,]+)", re.IGNORECASE)
_CUISINE_RES = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"like ([\w\s,]+) food",
        r"favorite ([\w\s,]+) food",
        r"love ([\w\s,]+) food",
        r"prefer ([\w\s,]+) food",
    )
]


def extract_preference(utterance: str) -> tuple[str | None, str | None]:
    """Return (preference type, value) stated in ``utterance``."""
    lowered = utterance.lower()

    if any(w in lowered for w in ("vegetarian", "vegan", "gluten", "allergic", "allergy")):
        value = None
        if "vegetarian" in lowered:
            value = "vegetarian"
        elif "vegan" in lowered:
            value = "vegan"
        elif "gluten" in lowered:
            value = "gluten-free"
        allergy = _ALLERGY_RE.search(utterance)
        if allergy and allergy.group(1).strip():
            value = allergy.group(1).strip()
        return DIETARY, value

    if any(
        w in lowered
        for w in ("beginner", "intermediate", "advanced", "expert", "novice", "skill level")
    ):
        value = None
        if "beginner" in lowered or "novice" in lowered:
            value = "beginner"
        elif "intermediate" in lowered:
            value = "intermediate"
        elif "advanced" in lowered or "expert" in lowered:
            value = "advanced"
        return SKILL, value

    if any(w in lowered for w in ("cuisine", "food", "like")):
        for pattern in _CUISINE_RES:
            match = pattern.search(utterance)
            if match and match.group(1).strip():
                return CUISINES, match.group(1).strip()

    return None, None


def extract_preference_type(utterance: str) -> str | None:
    lowered = utterance.lower()
    if any(w in lowered for w in ("diet", "allerg", "restriction")):
        return DIETARY
    if any(w in lowered for w in ("skill", "level", "experience")):
        return SKILL
    if any(w in lowered for w in ("cuisine", "favorite food", "like to eat")):
        return CUISINES
    return None


def _split(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class UserPreferenceAgent(BaseAgent):
    """Set, query and summarize dietary restrictions, skill level and cuisines.

    Requests without a ``user_id`` act on the shared anonymous profile.
    """

    name = USER_PREFERENCE

    def __init__(self, recipes: RecipeRepository) -> None:
        self.recipes = recipes

    async def handle(
        self, utterance: str, context: AgentContext | None = None
    ) -> AgentResponse:
        user_id = (context.user_id if context else None) or ANONYMOUS_USER
        lowered = utterance.lower()
        try:
            if any(p in lowered for p in _SET_PHRASES):
                pref_type, value = extract_preference(utterance)
                if pref_type and value:
                    await self.save_preference(user_id, pref_type, value)
                    return AgentResponse(
                        message=f"I've updated your {pref_type} preference to {value}.",
                        success=True,
                    )

            if any(p in lowered for p in _GET_PHRASES):
                pref_type = extract_preference_type(utterance)
                if pref_type:
                    return await self._describe_one(user_id, pref_type)

            return await self._describe_all(user_id)
        except StoreError as e:
            logger.error(f"UserPreference store error for {user_id}: {e}")
            return AgentResponse.failure(
                "I'm sorry, I encountered an error while managing your preferences. "
                "Please try again.",
                error=str(e),
            )

    async def save_preference(self, user_id: str, pref_type: str, value: str) -> None:
        prefs = await self.recipes.get_user_preferences(user_id)
        if pref_type == DIETARY:
            prefs.dietary_restrictions = _split(value)
        elif pref_type == SKILL:
            prefs.skill_level = value
        elif pref_type == CUISINES:
            prefs.favorite_cuisines = _split(value)
        await self.recipes.save_user_preferences(user_id, prefs)
        logger.info(f"Updated {pref_type} for {user_id}")

    async def _describe_one(self, user_id: str, pref_type: str) -> AgentResponse:
        prefs = await self.recipes.get_user_preferences(user_id)
        if pref_type == DIETARY and prefs.dietary_restrictions:
            return AgentResponse(
                message=f"Your dietary restrictions are: {', '.join(prefs.dietary_restrictions)}",
                data=prefs.dietary_restrictions,
                success=True,
            )
        if pref_type == SKILL and prefs.skill_level:
            return AgentResponse(
                message=f"Your cooking skill level is set to: {prefs.skill_level}",
                data=prefs.skill_level,
                success=True,
            )
        if pref_type == CUISINES and prefs.favorite_cuisines:
            return AgentResponse(
                message=f"Your favorite cuisines are: {', '.join(prefs.favorite_cuisines)}",
                data=prefs.favorite_cuisines,
                success=True,
            )
        return AgentResponse.failure(
            f"I don't have any information about your {pref_type} preferences yet."
        )

    async def _describe_all(self, user_id: str) -> AgentResponse:
        prefs = await self.recipes.get_user_preferences(user_id)
        if prefs.is_empty():
            return AgentResponse(
                message=(
                    "I don't have any preference information for you yet. You can set "
                    "preferences like dietary restrictions, skill level, or favorite cuisines."
                ),
                suggested_actions=[
                    SuggestedAction(
                        type="other", label="Set Dietary Restrictions", value="I am vegetarian"
                    ),
                    SuggestedAction(
                        type="other",
                        label="Set Skill Level",
                        value="My cooking skill level is intermediate",
                    ),
                ],
                success=True,
            )

        lines = ["Here are your current preferences:"]
        if prefs.dietary_restrictions:
            lines.append(f"Dietary Restrictions: {', '.join(prefs.dietary_restrictions)}")
        if prefs.skill_level:
            lines.append(f"Cooking Skill Level: {prefs.skill_level}")
        if prefs.favorite_cuisines:
            lines.append(f"Favorite Cuisines: {', '.join(prefs.favorite_cuisines)}")
        return AgentResponse(
            message="\n".join(lines),
            data=prefs.model_dump(),
            success=True,
        )
