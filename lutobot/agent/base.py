"""Agent capability contract."""

from __future__ import annotations

import abc

from lutobot.agent.models import AgentContext, AgentResponse


class BaseAgent(abc.ABC):
    """Contract every agent implements: a stable name and ``handle``.

    The orchestrator and router only ever call ``identify()`` and
    ``handle()``; nothing else about an agent is inspected.
    Instances are built once at startup and shared across requests, so
    ``handle`` must not keep per-request state on ``self``.
    """

    name: str = ""

    def identify(self) -> str:
        """Registry key for this agent."""
        return self.name

    @abc.abstractmethod
    async def handle(
        self, utterance: str, context: AgentContext | None = None
    ) -> AgentResponse:
        """Answer one utterance.

        Return ``success=False`` for expected failures (missing recipe,
        nothing found). Raising is reserved for faults; the orchestrator
        turns those into a generic failure response.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
