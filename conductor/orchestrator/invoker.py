from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union
import logging
import time

from ..agents.schema import Agent
from ..config import DEFAULT_MAX_TOOL_CALLS, DEFAULT_TEMPERATURE
from ..context.store import ContextSnapshot, ContextStore
from ..llm.backend import LLMBackend
from ..llm.tool_loop import ToolCallingLoop
from ..models import ExecutionRecord, ToolCall
from ..prompt.builder import build_prompt
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationResult:
    record: ExecutionRecord
    tool_calls: List[ToolCall] = field(default_factory=list)


class AgentInvoker:
    """
    Runs one agent against one context view.

    Agents without tools get a single backend call. Agents that declare
    tools run through a ToolCallingLoop over a registry scoped to their
    allow-list and tool overrides. The invoker never writes to the
    ContextStore: committing the record is the caller's job.
    """

    def __init__(
        self,
        backend: LLMBackend,
        tool_registry: Optional[ToolRegistry] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tool_calls: int = DEFAULT_MAX_TOOL_CALLS,
    ) -> None:
        self.backend = backend
        self.tool_registry = tool_registry
        self.temperature = temperature
        self.max_tool_calls = max_tool_calls

    def invoke(self, agent: Agent, context: Union[ContextStore, ContextSnapshot]) -> InvocationResult:

        started_at = time.time()
        prompt = build_prompt(agent, context)

        logger.info("[AGENT] Invoking %s (%s)", agent.id, agent.role)

        tool_calls: List[ToolCall] = []

        if agent.uses_tools and self.tool_registry is not None:
            scoped = self.tool_registry.scoped(agent.tools, agent.tool_config)
            loop = ToolCallingLoop(self.backend, scoped, max_tool_calls=self.max_tool_calls)
            result = loop.run(
                prompt.system,
                prompt.user,
                tools=scoped.list_tools(),
                temperature=self.temperature,
            )
            output = result.output
            tool_calls = result.tool_calls
        else:
            if agent.uses_tools:
                logger.warning(
                    "[AGENT] %s declares tools %s but no tool registry was supplied",
                    agent.id,
                    list(agent.tools),
                )
            output = self.backend.generate(
                system=prompt.system,
                user=prompt.user,
                temperature=self.temperature,
            )

        ended_at = time.time()

        logger.info(
            "[AGENT] %s finished in %.2fs | tool_calls=%d",
            agent.id,
            ended_at - started_at,
            len(tool_calls),
        )

        record = ExecutionRecord(
            agent_id=agent.id,
            role=agent.role,
            output=output,
            started_at=started_at,
            ended_at=ended_at,
        )
        return InvocationResult(record=record, tool_calls=tool_calls)
