"""FastAPI application factory."""

from __future__ import annotations

import time
from collections import defaultdict
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from lutobot import __version__
from lutobot.agent.agents import make_agents
from lutobot.agent.conversation import ConversationStore
from lutobot.agent.orchestrator import AgentOrchestrator
from lutobot.api.routes import router as core_router
from lutobot.api.ws import ConnectionManager
from lutobot.api.ws import router as ws_router
from lutobot.core.config.loader import load_config
from lutobot.core.config.schema import Config
from lutobot.core.providers import create_provider
from lutobot.store import RecipeRepository, create_store

_WINDOW_S = 60.0


# ── Rate Limiting Middleware ─────────────────────────────────


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP sliding window limiter, one minute wide."""

    _EXEMPT = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._last_sweep = 0.0

    async def dispatch(self, request: Request, call_next):
        config: Config | None = getattr(request.app.state, "config", None)
        if not config or not config.api.rate_limit.enabled:
            return await call_next(request)
        if request.url.path in self._EXEMPT:
            return await call_next(request)

        rpm = config.api.rate_limit.requests_per_minute
        ip = request.client.host if request.client else "unknown"
        now = time.time()

        self._sweep(now)
        self._requests[ip] = [t for t in self._requests[ip] if now - t < _WINDOW_S]
        if len(self._requests[ip]) >= rpm:
            logger.warning(f"Rate limit hit for {ip}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests"},
                headers={"Retry-After": "60"},
            )

        self._requests[ip].append(now)
        return await call_next(request)

    def _sweep(self, now: float) -> None:
        # forget clients idle for a whole window, at most once per window
        if now - self._last_sweep < _WINDOW_S:
            return
        self._last_sweep = now
        for ip in [k for k, v in self._requests.items() if not v or now - v[-1] >= _WINDOW_S]:
            del self._requests[ip]


# ── Composition root ─────────────────────────────────────────


def build_orchestrator(
    config: Config, recipes: RecipeRepository, ws_manager: ConnectionManager | None = None
) -> AgentOrchestrator:
    """Provider → agents → orchestrator, checked for readiness."""
    llm = create_provider(config)
    orchestrator = AgentOrchestrator(
        conversations=ConversationStore(limit=config.assistant.history_limit),
        notifier=ws_manager.notify if ws_manager is not None else None,
    )
    for agent in make_agents(config, recipes, llm):
        orchestrator.register_agent(agent)
    orchestrator.ensure_ready()
    return orchestrator


async def seed_if_configured(config: Config, recipes: RecipeRepository) -> None:
    seed_path = config.store.seed_path
    if not seed_path:
        return
    if not Path(seed_path).exists():
        logger.warning(f"Seed file not found: {seed_path}")
        return
    if await recipes.fetch_recipes():
        logger.debug("Store already has recipes, skipping seed")
        return
    await recipes.seed_from_file(seed_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: Config → store → seed → provider → agents → orchestrator. Shutdown: close store."""
    config: Config = getattr(app.state, "config", None) or load_config()
    store = create_store(config)
    recipes = RecipeRepository(store)
    await seed_if_configured(config, recipes)

    ws_manager = ConnectionManager()
    orchestrator = build_orchestrator(config, recipes, ws_manager)

    app.state.config = config
    app.state.store = store
    app.state.recipes = recipes
    app.state.ws_manager = ws_manager
    app.state.orchestrator = orchestrator

    logger.info(f"{config.assistant.name} API started — model: {config.llm.model}")
    yield

    store.close()
    logger.info(f"{config.assistant.name} API shutting down")


def create_app(config: Config | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_config()
    app = FastAPI(
        title=f"{config.assistant.name} API",
        description="Conversational cooking assistant API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware)

    app.include_router(core_router)
    app.include_router(ws_router)
    return app


app = create_app()
