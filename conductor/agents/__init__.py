from .schema import Agent
from .registry import AgentRegistry

__all__ = ["Agent", "AgentRegistry"]
