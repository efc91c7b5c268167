from __future__ import annotations

from typing import Optional, Union
import logging
import os

from .agents.registry import AgentRegistry
from .config import RootConfig, load_config
from .context.store import ContextStore
from .llm.backend import LLMBackend
from .llm.factory import create_backend
from .orchestrator.convergence import ConvergenceCheck
from .orchestrator.engine import WorkflowEngine
from .tools.builtin import register_builtin_tools
from .tools.events import ToolEventSink
from .tools.registry import ToolRegistry

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging for scripts and examples.

    The level defaults to $CONDUCTOR_LOG_LEVEL, then INFO.
    """
    level = level or os.getenv("CONDUCTOR_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)


class ConductorApp:
    """
    Top-level facade for running a configured multi-agent workflow.

    Design Principles
    -----------------
    • Registries are explicit objects built per app, never globals
    • The backend can be injected (tests, custom transports)
    • Each call to `run()` gets a fresh ContextStore
    """

    def __init__(
        self,
        config: RootConfig,
        agents: AgentRegistry,
        tools: ToolRegistry,
        backend: LLMBackend,
        convergence_check: Optional[ConvergenceCheck] = None,
    ) -> None:
        self.config = config
        self.agents = agents
        self.tools = tools
        self.backend = backend
        self.engine = WorkflowEngine(
            temperature=config.llm.temperature,
            max_tool_calls=config.llm.max_tool_calls,
            convergence_check=convergence_check,
        )

    @classmethod
    def from_config(
        cls,
        config: RootConfig,
        *,
        backend: Optional[LLMBackend] = None,
        events: Optional[ToolEventSink] = None,
        convergence_check: Optional[ConvergenceCheck] = None,
    ) -> "ConductorApp":
        """
        Assemble registries and backend from a validated RootConfig.

        Parameters
        ----------
        config : RootConfig
            Parsed run configuration.

        backend : LLMBackend, optional
            Overrides the backend described by `config.llm`.

        events : ToolEventSink, optional
            Observability sink for tool events. Defaults to logging.

        convergence_check : callable, optional
            Overrides the keyword check of an iterative workflow.
        """
        agents = AgentRegistry(config.agents)

        tools = ToolRegistry(events=events)
        register_builtin_tools(tools, config.tool_config)

        return cls(
            config=config,
            agents=agents,
            tools=tools,
            backend=backend or create_backend(config.llm),
            convergence_check=convergence_check,
        )

    @classmethod
    def from_file(cls, path, **kwargs) -> "ConductorApp":
        return cls.from_config(load_config(path), **kwargs)

    def run(self, user_input: str) -> ContextStore:
        context = ContextStore(user_input=user_input)

        self.engine.run(
            self.config.workflow,
            self.agents,
            context,
            self.backend,
            self.tools,
        )

        return context

    def shutdown(self) -> None:
        self.tools.shutdown_all()
