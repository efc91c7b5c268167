from __future__ import annotations

from typing import Dict, Iterable
from threading import RLock
import logging

from .schema import Agent
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class AgentRegistry:
    """
    Run-scoped directory of agent definitions.

    Constructed at run start and passed explicitly to the workflow
    engine. Looking up an unregistered id is a configuration error.
    """

    def __init__(self, agents: Iterable[Agent] = ()) -> None:
        self._agents: Dict[str, Agent] = {}
        self._lock = RLock()

        for agent in agents:
            self.register(agent)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, agent: Agent) -> None:

        with self._lock:
            if agent.id in self._agents:
                raise ConfigurationError(f"Agent '{agent.id}' is already registered.")

            self._agents[agent.id] = agent

            logger.info(
                "[AGENT REGISTRY] Agent registered: %s (%s) | tools=%s",
                agent.id,
                agent.role,
                list(agent.tools),
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, agent_id: str) -> Agent:

        with self._lock:
            try:
                return self._agents[agent_id]
            except KeyError:
                logger.error(
                    "[AGENT REGISTRY] Lookup FAILED: %s | available=%s",
                    agent_id,
                    sorted(self._agents),
                )
                raise ConfigurationError(f"Agent '{agent_id}' is not registered.") from None

    def has_agent(self, agent_id: str) -> bool:
        with self._lock:
            return agent_id in self._agents

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return isinstance(agent_id, str) and self.has_agent(agent_id)
