"""FastAPI dependency injection — pull singletons from app.state."""

from __future__ import annotations

from fastapi import Request

from lutobot.agent.orchestrator import AgentOrchestrator
from lutobot.core.config.schema import Config
from lutobot.store.recipes import RecipeRepository


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_orchestrator(request: Request) -> AgentOrchestrator:
    return request.app.state.orchestrator


def get_recipes(request: Request) -> RecipeRepository:
    return request.app.state.recipes
