from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import time

from .convergence import ConvergenceCheck, build_convergence_check
from .invoker import AgentInvoker, InvocationResult
from .iterative import run_iterative_parallel_workflow
from .parallel import run_parallel_workflow
from .sequential import run_sequential_workflow
from ..agents.registry import AgentRegistry
from ..config import (
    DEFAULT_MAX_TOOL_CALLS,
    DEFAULT_TEMPERATURE,
    PARALLEL,
    SEQUENTIAL,
    WorkflowConfig,
)
from ..context.store import ContextStore
from ..errors import ConfigurationError
from ..llm.backend import LLMBackend
from ..models import ToolCall
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """
    Top-level workflow state machine.

    Selects the Sequential, Parallel or IterativeParallel strategy from
    the workflow config and drives it against a ContextStore. The config
    and every referenced agent id are checked before any backend call.
    """

    def __init__(
        self,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tool_calls: int = DEFAULT_MAX_TOOL_CALLS,
        max_workers: Optional[int] = None,
        convergence_check: Optional[ConvergenceCheck] = None,
    ) -> None:
        self.temperature = temperature
        self.max_tool_calls = max_tool_calls
        self.max_workers = max_workers
        self.convergence_check = convergence_check

        self.tool_audit: List[Tuple[str, ToolCall]] = []
        """(agent_id, ToolCall) pairs from the most recent run, in timeline order."""

    # ============================================================
    # PUBLIC ENTRY POINT
    # ============================================================

    def run(
        self,
        config: Union[WorkflowConfig, Dict[str, Any]],
        registry: AgentRegistry,
        context: ContextStore,
        backend: LLMBackend,
        tool_registry: Optional[ToolRegistry] = None,
    ) -> None:

        if isinstance(config, dict):
            config = WorkflowConfig.from_dict(config)

        self._validate(config, registry)
        self.tool_audit = []

        invoker = AgentInvoker(
            backend,
            tool_registry=tool_registry,
            temperature=self.temperature,
            max_tool_calls=self.max_tool_calls,
        )

        total_start = time.time()
        logger.info("====================================================")
        logger.info("[WORKFLOW] Run started | type=%s", self._variant(config))
        logger.info("====================================================")

        if config.type == SEQUENTIAL:
            results = run_sequential_workflow(config.steps, registry, context, invoker)

        elif config.is_iterative:
            feedback = config.then.feedback_loop
            check = self.convergence_check or build_convergence_check(feedback)

            results = run_iterative_parallel_workflow(
                config.branches,
                config.then.agent,
                registry,
                context,
                invoker,
                max_iterations=feedback.max_iterations,
                convergence_check=check,
                max_workers=self.max_workers,
            )

        else:
            results = run_parallel_workflow(
                config.branches,
                config.then.agent,
                registry,
                context,
                invoker,
                max_workers=self.max_workers,
            )

        self._audit(results)

        logger.info(
            "[WORKFLOW] Run complete in %.2fs | records=%d",
            time.time() - total_start,
            len(context.timeline),
        )

    # ============================================================
    # VALIDATION
    # ============================================================

    def _validate(self, config: WorkflowConfig, registry: AgentRegistry) -> None:
        if config.type not in (SEQUENTIAL, PARALLEL):
            raise ConfigurationError(f"Unknown workflow type: {config.type!r}")

        config.validate()

        for agent_id in config.referenced_agents():
            registry.get(agent_id)

    @staticmethod
    def _variant(config: WorkflowConfig) -> str:
        if config.type == SEQUENTIAL:
            return "sequential"
        return "parallel-iterative" if config.is_iterative else "parallel"

    def _audit(self, results: List[InvocationResult]) -> None:
        for result in results:
            for call in result.tool_calls:
                self.tool_audit.append((result.record.agent_id, call))


def run_workflow(
    config: Union[WorkflowConfig, Dict[str, Any]],
    registry: AgentRegistry,
    context: ContextStore,
    backend: LLMBackend,
    tool_registry: Optional[ToolRegistry] = None,
    **engine_options: Any,
) -> None:
    WorkflowEngine(**engine_options).run(config, registry, context, backend, tool_registry)
