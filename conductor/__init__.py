"""
Conductor: multi-agent workflow orchestration with a tool-calling loop.
"""

from .agents import Agent, AgentRegistry
from .app import ConductorApp, configure_logging
from .config import RootConfig, WorkflowConfig, load_config
from .context import ContextSnapshot, ContextStore
from .errors import (
    BranchExecutionError,
    ConfigurationError,
    LLMBackendError,
    ToolLoopExhaustedError,
)
from .llm import LLMBackend, ToolCallingLoop
from .models import ExecutionRecord, ToolCall, ToolResult
from .orchestrator import WorkflowEngine, run_workflow
from .prompt import build_prompt
from .tools import ToolProvider, ToolRegistry, ToolSchema

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentRegistry",
    "BranchExecutionError",
    "ConductorApp",
    "ConfigurationError",
    "ContextSnapshot",
    "ContextStore",
    "ExecutionRecord",
    "LLMBackend",
    "LLMBackendError",
    "RootConfig",
    "ToolCall",
    "ToolCallingLoop",
    "ToolLoopExhaustedError",
    "ToolProvider",
    "ToolRegistry",
    "ToolResult",
    "ToolSchema",
    "WorkflowConfig",
    "WorkflowEngine",
    "build_prompt",
    "configure_logging",
    "load_config",
    "run_workflow",
]
