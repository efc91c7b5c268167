from __future__ import annotations

from typing import List, Sequence
import logging

from .invoker import AgentInvoker, InvocationResult
from ..agents.registry import AgentRegistry
from ..config import StepConfig
from ..context.store import ContextStore

logger = logging.getLogger(__name__)


def run_sequential_workflow(
    steps: Sequence[StepConfig],
    registry: AgentRegistry,
    context: ContextStore,
    invoker: AgentInvoker,
) -> List[InvocationResult]:
    """
    Run steps strictly in order.

    Step n+1 starts only after step n's record is committed, so its
    prompt always includes step n's output.
    """
    results: List[InvocationResult] = []

    for index, step in enumerate(steps, start=1):
        agent = registry.get(step.agent)

        logger.info("[WORKFLOW] Sequential step %d/%d: %s", index, len(steps), agent.id)

        result = invoker.invoke(agent, context.snapshot())
        context.append(result.record)
        results.append(result)

    return results
