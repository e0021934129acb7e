"""Core API routes — chat, conversations, agents, health."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from loguru import logger

from lutobot import __version__
from lutobot.agent.models import AgentContext
from lutobot.agent.orchestrator import AgentOrchestrator
from lutobot.api.deps import get_config, get_orchestrator, get_recipes
from lutobot.api.models import (
    AgentInfo,
    ChatRequest,
    ChatResponse,
    ConversationCreated,
    ConversationMessages,
    HealthResponse,
)
from lutobot.core.config.schema import Config
from lutobot.store.documents import StoreError
from lutobot.store.recipes import RecipeRepository

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    orchestrator: AgentOrchestrator | None = getattr(request.app.state, "orchestrator", None)
    count = len(orchestrator.agents) if orchestrator is not None else 0
    return HealthResponse(
        status="ok", agent_ready=count > 0, version=__version__, agents=count
    )


@router.get("/agents", response_model=list[AgentInfo])
async def list_agents(orchestrator: AgentOrchestrator = Depends(get_orchestrator)):
    """Registered agents in registration order."""
    return [AgentInfo(name=a.identify()) for a in orchestrator.agents]


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
    recipes: RecipeRepository = Depends(get_recipes),
    config: Config = Depends(get_config),
):
    """Send an utterance and get the agent response.

    Agent faults come back as ``success=False`` bodies, not HTTP errors.
    """
    preferences = None
    if body.user_id:
        try:
            preferences = await recipes.get_user_preferences(body.user_id)
        except StoreError as e:
            logger.warning(f"Could not load preferences for {body.user_id}: {e}")

    context = AgentContext(
        user_id=body.user_id,
        user_preferences=preferences,
        current_recipe_id=body.current_recipe_id,
        current_step_number=body.current_step_number,
        conversation_id=body.conversation_id,
        additional_context=body.additional_context,
    )
    response, conversation_id = await orchestrator.process(
        body.message,
        agent_name=body.agent_name,
        context=context,
        timeout=config.assistant.request_timeout_s,
    )
    return ChatResponse(conversation_id=conversation_id, response=response)


@router.post("/conversations", response_model=ConversationCreated, status_code=201)
async def create_conversation(orchestrator: AgentOrchestrator = Depends(get_orchestrator)):
    return ConversationCreated(conversation_id=orchestrator.create_new_conversation())


@router.get("/conversations/{conversation_id}/messages", response_model=ConversationMessages)
async def conversation_messages(
    conversation_id: str,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """Retained history, oldest first; empty for unknown ids."""
    return ConversationMessages(
        conversation_id=conversation_id,
        messages=orchestrator.get_conversation_messages(conversation_id),
    )
