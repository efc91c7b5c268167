from __future__ import annotations

from typing import List, Optional, Sequence
import logging

from .convergence import ConvergenceCheck
from .invoker import AgentInvoker, InvocationResult
from .parallel import run_parallel_workflow
from ..agents.registry import AgentRegistry
from ..context.store import ContextStore

logger = logging.getLogger(__name__)


def run_iterative_parallel_workflow(
    branches: Sequence[str],
    then_agent: str,
    registry: AgentRegistry,
    context: ContextStore,
    invoker: AgentInvoker,
    max_iterations: int,
    convergence_check: ConvergenceCheck,
    max_workers: Optional[int] = None,
) -> List[InvocationResult]:
    """
    Repeat branches + "then" until the check passes or the budget runs out.

    Each cycle appends fresh records, so branches in cycle k+1 see the
    "then" output of cycle k in their prompt. Running out of iterations
    is not an error: the last "then" result is kept as the outcome.

    Returns every invocation in timeline order; the last element is the
    final "then" result.
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1.")

    results: List[InvocationResult] = []

    for iteration in range(1, max_iterations + 1):

        logger.info("[WORKFLOW] Feedback iteration %d/%d", iteration, max_iterations)

        cycle = run_parallel_workflow(
            branches,
            then_agent,
            registry,
            context,
            invoker,
            max_workers=max_workers,
        )
        results.extend(cycle)

        if convergence_check(cycle[-1].record.output, iteration):
            logger.info("[WORKFLOW] Converged after %d iteration(s)", iteration)
            return results

    logger.warning(
        "[WORKFLOW] No convergence after %d iteration(s); keeping last output",
        max_iterations,
    )
    return results
