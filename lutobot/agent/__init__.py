"""Agent contract, registry, router and orchestrator."""

from lutobot.agent.base import BaseAgent
from lutobot.agent.conversation import ConversationStore
from lutobot.agent.models import AgentContext, AgentMessage, AgentResponse, SuggestedAction
from lutobot.agent.orchestrator import AgentOrchestrator
from lutobot.agent.registry import AgentRegistry
from lutobot.agent.router import NoAgentsRegisteredError, select_agent

__all__ = [
    "AgentContext",
    "AgentMessage",
    "AgentOrchestrator",
    "AgentRegistry",
    "AgentResponse",
    "BaseAgent",
    "ConversationStore",
    "NoAgentsRegisteredError",
    "SuggestedAction",
    "select_agent",
]
