from .convergence import ConvergenceCheck, KeywordConvergence, never_converge
from .engine import WorkflowEngine, run_workflow
from .invoker import AgentInvoker, InvocationResult

__all__ = [
    "AgentInvoker",
    "ConvergenceCheck",
    "InvocationResult",
    "KeywordConvergence",
    "WorkflowEngine",
    "never_converge",
    "run_workflow",
]
