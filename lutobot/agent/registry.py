"""AgentRegistry — name -> agent mapping populated at startup."""

from __future__ import annotations

import threading

from loguru import logger

from lutobot.agent.base import BaseAgent


class AgentRegistry:
    """Agents keyed by ``identify()``, kept in registration order.

    Registering a second agent under an existing name replaces the first
    (last write wins) and keeps the original position in ``list()``.
    That replacement is intentional, e.g. for swapping in test doubles,
    and is only logged as a warning.
    """

    def __init__(self) -> None:
        self._agents: dict[str, BaseAgent] = {}
        self._lock = threading.Lock()

    def register(self, agent: BaseAgent) -> None:
        """Add ``agent`` under its ``identify()`` name.

        Raises
        ------
        ValueError
            If the agent reports an empty name.
        """
        name = agent.identify()
        if not name:
            raise ValueError(f"Cannot register {agent!r}: agent name is empty")
        with self._lock:
            previous = self._agents.get(name)
            self._agents[name] = agent
        if previous is not None and previous is not agent:
            logger.warning(f"Agent '{name}' re-registered, replacing {previous!r}")
        else:
            logger.info(f"Registered agent: {name}")

    def get(self, name: str) -> BaseAgent | None:
        with self._lock:
            return self._agents.get(name)

    def list(self) -> list[BaseAgent]:
        """All agents in registration order."""
        with self._lock:
            return list(self._agents.values())

    def names(self) -> list[str]:
        with self._lock:
            return list(self._agents)

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: str) -> bool:
        return name in self._agents
