"""ChatSupport — general cooking Q&A answered by the LLM."""

from __future__ import annotations

import re

from loguru import logger

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext, AgentResponse
from lutobot.agent.router import CHAT_SUPPORT
from lutobot.core.providers.base import BaseLLMProvider, ProviderError

_ARTIFACT_RE = re.compile(r"```json|```|[{}\[\]]")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_PREFIX_RE = re.compile(r"^(AI:|Assistant:)", re.MULTILINE)


class ChatSupportAgent(BaseAgent):
    """Free-form questions about the cuisine, techniques and ingredients."""

    name = CHAT_SUPPORT

    def __init__(
        self,
        llm: BaseLLMProvider,
        cuisine: str = "Filipino",
        history_window: int = 3,
    ) -> None:
        self.llm = llm
        self.cuisine = cuisine
        self.history_window = history_window

    async def handle(
        self, utterance: str, context: AgentContext | None = None
    ) -> AgentResponse:
        prompt = self.build_prompt(utterance, context or AgentContext())
        try:
            reply = await self.llm.acomplete(prompt)
        except ProviderError as e:
            logger.error(f"ChatSupport LLM call failed: {e}")
            return AgentResponse.failure(
                "I'm sorry, I encountered an error while processing your question. "
                "Please try again.",
                error=str(e),
            )

        cleaned = clean_reply(reply)
        if not cleaned:
            return AgentResponse.failure(
                "I couldn't come up with an answer to that. Could you rephrase it?",
                error="empty reply",
            )
        return AgentResponse(message=cleaned, source="ai", success=True)

    def build_prompt(self, utterance: str, context: AgentContext) -> str:
        """Prepend preferences, recipe flag and recent turns to the question."""
        parts: list[str] = []

        prefs = context.user_preferences
        if prefs is not None:
            if prefs.dietary_restrictions:
                parts.append(
                    "The user has the following dietary restrictions: "
                    f"{', '.join(prefs.dietary_restrictions)}. "
                )
            if prefs.skill_level:
                parts.append(f"The user's cooking skill level is {prefs.skill_level}. ")
            if prefs.favorite_cuisines:
                parts.append(
                    f"The user's favorite cuisines are: {', '.join(prefs.favorite_cuisines)}. "
                )

        if context.current_recipe_id:
            parts.append("The user is currently viewing or cooking a recipe. ")

        recent = context.previous_messages[-self.history_window :] if self.history_window else ()
        if recent:
            parts.append("Recent conversation history: ")
            for msg in recent:
                speaker = "User" if msg.sender == "user" else "Assistant"
                parts.append(f"\n{speaker}: {msg.content}")
            parts.append("\n")

        parts.append(
            f'\nUser question about {self.cuisine} cooking: "{utterance}"\n\n'
            f"Please provide a helpful, concise response about {self.cuisine} cuisine, "
            "cooking techniques, ingredients, or cultural context. Focus on being accurate "
            "and educational. If you don't know, say so rather than making up information."
        )
        return "".join(parts)


def clean_reply(text: str) -> str:
    """Strip JSON/code-fence artifacts and speaker prefixes from a model reply."""
    cleaned = _ARTIFACT_RE.sub("", text)
    cleaned = _BLANK_LINES_RE.sub("\n\n", cleaned)
    cleaned = _PREFIX_RE.sub("", cleaned, count=1)
    return cleaned.strip()
