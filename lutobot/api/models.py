"""Request/response bodies for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from lutobot.agent.models import AgentMessage, AgentResponse


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    agent_name: str | None = None
    conversation_id: str | None = None
    user_id: str | None = None
    current_recipe_id: str | None = None
    current_step_number: int | None = None
    additional_context: dict[str, Any] = Field(default_factory=dict)


class ChatResponse(BaseModel):
    conversation_id: str
    response: AgentResponse


class ConversationCreated(BaseModel):
    conversation_id: str


class ConversationMessages(BaseModel):
    conversation_id: str
    messages: list[AgentMessage]


class AgentInfo(BaseModel):
    name: str


class HealthResponse(BaseModel):
    status: str
    agent_ready: bool
    version: str = ""
    agents: int = 0
