"""AgentOrchestrator — routes utterances to agents and keeps the history."""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable

from loguru import logger

from lutobot.agent.base import BaseAgent
from lutobot.agent.conversation import ConversationStore
from lutobot.agent.models import AgentContext, AgentMessage, AgentResponse
from lutobot.agent.registry import AgentRegistry
from lutobot.agent.router import NoAgentsRegisteredError, Router, select_agent

GENERIC_ERROR_MESSAGE = (
    "Sorry, I encountered an error while processing your request. Please try again."
)
FAILURE_NOTIFICATION = "Something went wrong. Please try again."
TIMEOUT_ERROR = "timeout"

# (notification text, request context) -> None or awaitable; fire-and-forget
Notifier = Callable[[str, AgentContext], "Awaitable[None] | None"]


class AgentOrchestrator:
    """
    Single entry point for conversational requests.

    Flow:
        1. Find/create conversation
        2. Record the user message
        3. Inject history into the context (includes the new message)
        4. Resolve agent — explicit name if registered, else router
        5. await agent.handle() — exactly once, no retry
        6. Success → record agent message, return response unchanged
           Fault   → record nothing, notify, return generic failure

    The user turn is always recorded; the agent turn only when the agent
    returned a response. Collaborators are injected so tests and the API
    composition root control their lifetime.
    """

    def __init__(
        self,
        registry: AgentRegistry | None = None,
        conversations: ConversationStore | None = None,
        notifier: Notifier | None = None,
        router: Router = select_agent,
    ) -> None:
        self.registry = registry if registry is not None else AgentRegistry()
        self.conversations = conversations if conversations is not None else ConversationStore()
        self.notifier = notifier
        self.router = router
        self._pending: set[asyncio.Future] = set()

    # ── Registry / conversation surface ─────────────────────

    def register_agent(self, agent: BaseAgent) -> None:
        self.registry.register(agent)

    @property
    def agents(self) -> list[BaseAgent]:
        return self.registry.list()

    def create_new_conversation(self) -> str:
        return self.conversations.create_conversation()

    def get_conversation_messages(self, conversation_id: str) -> list[AgentMessage]:
        return self.conversations.get_messages(conversation_id)

    def ensure_ready(self) -> None:
        """Fail fast at startup when no agent is registered."""
        if not len(self.registry):
            raise NoAgentsRegisteredError("Orchestrator has no agents registered")
        logger.info(f"Orchestrator ready with agents: {', '.join(self.registry.names())}")

    # ── Request processing ──────────────────────────────────

    def resolve_agent(
        self,
        utterance: str,
        agent_name: str | None = None,
        context: AgentContext | None = None,
    ) -> BaseAgent:
        """Explicitly named agent if registered, otherwise the router's pick."""
        if agent_name:
            agent = self.registry.get(agent_name)
            if agent is not None:
                return agent
            logger.debug(f"Requested agent '{agent_name}' not registered, routing instead")
        return self.router(utterance, context, self.registry)

    async def process_request(
        self,
        utterance: str,
        agent_name: str | None = None,
        context: AgentContext | None = None,
        timeout: float | None = None,
    ) -> AgentResponse:
        """Handle one utterance and return the normalized response."""
        response, _ = await self.process(utterance, agent_name, context, timeout)
        return response

    async def process(
        self,
        utterance: str,
        agent_name: str | None = None,
        context: AgentContext | None = None,
        timeout: float | None = None,
    ) -> tuple[AgentResponse, str]:
        """Handle one utterance and return (response, conversation_id).

        Parameters
        ----------
        utterance : str
            Raw user text.
        agent_name : str, optional
            Bypass routing when this agent is registered.
        context : AgentContext, optional
            Caller hints. Never mutated; a derived copy is passed on.
        timeout : float, optional
            Deadline set by the calling layer. Expiry is reported as a
            failure with ``error="timeout"``. No deadline by default.

        Raises
        ------
        NoAgentsRegisteredError
            If the registry is empty (startup ordering bug).
        """
        context = context or AgentContext()

        # 1. Conversation
        conversation_id = context.conversation_id
        if not conversation_id:
            conversation_id = self.conversations.create_conversation()

        # 2-3. Record user turn, inject history
        self.conversations.append_message(conversation_id, AgentMessage.from_user(utterance))
        context = context.model_copy(
            update={
                "conversation_id": conversation_id,
                "previous_messages": tuple(self.conversations.get_messages(conversation_id)),
            }
        )

        # 4. Resolve agent (outside the error boundary: empty registry is fatal)
        agent = self.resolve_agent(utterance, agent_name, context)
        name = agent.identify()
        logger.info(f"Selected agent: {name} for request: {utterance[:80]}")

        # 5. Invoke once
        try:
            response = await self._invoke(agent, utterance, context, timeout)
        except Exception as e:
            if timeout is not None and isinstance(e, asyncio.TimeoutError):
                logger.error(
                    f"Agent {name} timed out after {timeout}s (conversation {conversation_id})"
                )
                return self._fault(TIMEOUT_ERROR, context), conversation_id
            logger.exception(f"Agent {name} failed (conversation {conversation_id}): {e}")
            return self._fault(str(e) or type(e).__name__, context), conversation_id

        # 6. Record agent turn
        self.conversations.append_message(
            conversation_id, AgentMessage.from_agent(response.message, name)
        )
        if not response.success:
            logger.info(f"Agent {name} reported failure: {response.error or response.message}")
        return response, conversation_id

    async def _invoke(
        self,
        agent: BaseAgent,
        utterance: str,
        context: AgentContext,
        timeout: float | None,
    ) -> AgentResponse:
        call = agent.handle(utterance, context)
        if timeout is not None:
            response = await asyncio.wait_for(call, timeout)
        else:
            response = await call
        if not isinstance(response, AgentResponse):
            raise TypeError(
                f"{agent.identify()} returned {type(response).__name__}, expected AgentResponse"
            )
        return response

    def _fault(self, detail: str, context: AgentContext) -> AgentResponse:
        self._notify(FAILURE_NOTIFICATION, context)
        return AgentResponse.failure(GENERIC_ERROR_MESSAGE, error=detail)

    # ── Notification hook ───────────────────────────────────

    def _notify(self, text: str, context: AgentContext) -> None:
        """Fire the notification hook; its failures are logged, never raised."""
        if self.notifier is None:
            return
        try:
            result = self.notifier(text, context)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._notification_done)
        except Exception as e:
            logger.warning(f"Notification hook failed: {e}")

    def _notification_done(self, task: asyncio.Future) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Notification hook failed: {task.exception()}")
