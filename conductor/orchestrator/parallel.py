from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence
import logging

from .invoker import AgentInvoker, InvocationResult
from ..agents.registry import AgentRegistry
from ..context.store import ContextStore
from ..errors import BranchExecutionError

logger = logging.getLogger(__name__)


def run_branches(
    branches: Sequence[str],
    registry: AgentRegistry,
    context: ContextStore,
    invoker: AgentInvoker,
    max_workers: Optional[int] = None,
) -> List[InvocationResult]:
    """
    Invoke every branch concurrently against one shared snapshot.

    Acts as a barrier: returns only after every branch finished, with
    results in declaration order. If any branch failed, raises
    BranchExecutionError for the first failing branch in declaration
    order and nothing is returned for merging.
    """
    agents = [registry.get(agent_id) for agent_id in branches]
    snapshot = context.snapshot()

    logger.info("[WORKFLOW] Parallel branches: %s", [a.id for a in agents])

    workers = max_workers or len(agents)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="branch") as pool:
        futures = [pool.submit(invoker.invoke, agent, snapshot) for agent in agents]
        wait(futures)

    results: List[InvocationResult] = []

    for agent, future in zip(agents, futures):
        error = future.exception()
        if error is not None:
            logger.error("[WORKFLOW] Branch %s failed: %s", agent.id, error)
            raise BranchExecutionError(agent.id, error) from error
        results.append(future.result())

    return results


def merge_results(context: ContextStore, results: Sequence[InvocationResult]) -> None:
    """Commit branch records in declaration order."""
    for result in results:
        context.append(result.record)


def run_parallel_workflow(
    branches: Sequence[str],
    then_agent: str,
    registry: AgentRegistry,
    context: ContextStore,
    invoker: AgentInvoker,
    max_workers: Optional[int] = None,
) -> List[InvocationResult]:
    """
    Fan out the branches, join, merge, then run the "then" agent.

    Returns every invocation in timeline order; the "then" result is last.
    """
    results = run_branches(branches, registry, context, invoker, max_workers)
    merge_results(context, results)

    final_agent = registry.get(then_agent)

    logger.info("[WORKFLOW] Running 'then' agent: %s", final_agent.id)

    final = invoker.invoke(final_agent, context.snapshot())
    context.append(final.record)

    return results + [final]
