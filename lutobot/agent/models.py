"""Agent data types — context, messages, responses."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lutobot.store.models import UserPreferences

Sender = Literal["user", "agent"]
ResponseSource = Literal["database", "ai", "combined"]
ActionType = Literal["viewRecipe", "startCooking", "searchRecipe", "askQuestion", "other"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AgentMessage(BaseModel):
    """One conversation turn. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str
    timestamp: datetime = Field(default_factory=_now)
    sender: Sender
    agent_name: str | None = None

    @model_validator(mode="after")
    def _agent_name_only_on_agent_turns(self) -> AgentMessage:
        if self.sender == "user" and self.agent_name is not None:
            raise ValueError("agent_name is only set on agent messages")
        if self.sender == "agent" and not self.agent_name:
            raise ValueError("agent messages must carry the producing agent's name")
        return self

    @classmethod
    def from_user(cls, content: str) -> AgentMessage:
        return cls(content=content, sender="user")

    @classmethod
    def from_agent(cls, content: str, agent_name: str) -> AgentMessage:
        return cls(content=content, sender="agent", agent_name=agent_name)


class AgentContext(BaseModel):
    """Per-request situational data handed to an agent.

    Callers set the routing hints (user, preferences, current recipe/step,
    extras, optionally an existing ``conversation_id``). The orchestrator
    derives a copy with ``conversation_id`` and ``previous_messages`` filled
    in; callers never need to set ``previous_messages``.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    user_preferences: UserPreferences | None = None
    current_recipe_id: str | None = None
    current_step_number: int | None = None
    conversation_id: str | None = None
    previous_messages: tuple[AgentMessage, ...] = ()
    additional_context: dict[str, Any] = Field(default_factory=dict)


class SuggestedAction(BaseModel):
    """Follow-up the UI can offer as a button."""

    type: ActionType
    label: str
    value: str


class AgentResponse(BaseModel):
    """Uniform result of one request.

    A failed response must still carry a readable ``message``; raw failure
    detail goes in ``error`` only.
    """

    message: str
    success: bool
    data: Any = None
    suggested_actions: list[SuggestedAction] | None = None
    source: ResponseSource | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _failure_is_legible(self) -> AgentResponse:
        if not self.success and not self.message.strip():
            raise ValueError("failed responses need a human-readable message")
        return self

    @classmethod
    def failure(cls, message: str, error: str | None = None) -> AgentResponse:
        return cls(message=message, success=False, error=error)
