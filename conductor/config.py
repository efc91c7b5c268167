"""
Run configuration for the orchestration engine.

A config file looks like::

    llm:
      backend: ollama
      model: llama3.1
    agents:
      - id: researcher
        role: Researcher
        goal: Collect facts about the topic
        tools: [code_execution]
    workflow:
      type: parallel
      branches: [researcher, critic]
      then:
        agent: editor
        feedback_loop:
          enabled: true
          max_iterations: 3
    tool_config:
      code_execution:
        timeout: 5000
        memory_limit: 16
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import os

import yaml

from .agents.schema import Agent
from .errors import ConfigurationError

SEQUENTIAL = "sequential"
PARALLEL = "parallel"
WORKFLOW_TYPES = {SEQUENTIAL, PARALLEL}

LLM_BACKENDS = {"ollama", "groq"}

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOOL_CALLS = 5


def _require_mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{where}' must be a mapping, got {type(value).__name__}")
    return value


# ============================================================
# LLM BACKEND
# ============================================================

@dataclass(frozen=True)
class LLMConfig:
    """
    Controls which language-model backend is constructed.
    """

    backend: str = "ollama"
    model: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    timeout_seconds: int = 120
    max_tool_calls: int = DEFAULT_MAX_TOOL_CALLS

    def __post_init__(self):
        self._validate()

    def _validate(self):
        if self.backend not in LLM_BACKENDS:
            raise ConfigurationError(f"Unsupported llm backend: {self.backend}")

        if not 0.0 <= float(self.temperature) <= 2.0:
            raise ConfigurationError("temperature must be within [0, 2]")

        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")

        if self.max_tool_calls < 1:
            raise ConfigurationError("max_tool_calls must be at least 1")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LLMConfig":
        data = _require_mapping(data or {}, "llm")
        return cls(
            backend=data.get("backend", "ollama"),
            model=data.get("model"),
            base_url=data.get("base_url"),
            temperature=float(data.get("temperature", DEFAULT_TEMPERATURE)),
            timeout_seconds=int(data.get("timeout_seconds", 120)),
            max_tool_calls=int(data.get("max_tool_calls", DEFAULT_MAX_TOOL_CALLS)),
        )


# ============================================================
# WORKFLOW
# ============================================================

@dataclass(frozen=True)
class StepConfig:
    agent: str

    @classmethod
    def from_dict(cls, data: Any) -> "StepConfig":
        data = _require_mapping(data, "workflow.steps[]")
        agent = data.get("agent")
        if not agent or not isinstance(agent, str):
            raise ConfigurationError("Each workflow step needs an 'agent' id")
        return cls(agent=agent)


@dataclass(frozen=True)
class FeedbackLoopConfig:
    """
    Feedback loop settings for an iterative parallel workflow.

    The default convergence check passes once `convergence_keyword`
    appears in the "then" agent's output.
    """

    enabled: bool = False
    max_iterations: int = 3
    convergence_keyword: str = "APPROVED"

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ConfigurationError("feedback_loop.max_iterations must be at least 1")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["FeedbackLoopConfig"]:
        if data is None:
            return None
        data = _require_mapping(data, "workflow.then.feedback_loop")
        return cls(
            enabled=bool(data.get("enabled", False)),
            max_iterations=int(data.get("max_iterations", 3)),
            convergence_keyword=str(data.get("convergence_keyword", "APPROVED")),
        )


@dataclass(frozen=True)
class ParallelThenConfig:
    agent: str
    feedback_loop: Optional[FeedbackLoopConfig] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ParallelThenConfig":
        data = _require_mapping(data, "workflow.then")
        agent = data.get("agent")
        if not agent or not isinstance(agent, str):
            raise ConfigurationError("workflow.then needs an 'agent' id")
        return cls(
            agent=agent,
            feedback_loop=FeedbackLoopConfig.from_dict(data.get("feedback_loop")),
        )


@dataclass(frozen=True)
class WorkflowConfig:
    """
    Workflow shape.

    `type` is "sequential" (ordered `steps`) or "parallel" (`branches`
    followed by a `then` agent, optionally with a feedback loop).
    """

    type: str
    steps: Tuple[StepConfig, ...] = field(default_factory=tuple)
    branches: Tuple[str, ...] = field(default_factory=tuple)
    then: Optional[ParallelThenConfig] = None

    @property
    def is_iterative(self) -> bool:
        return bool(
            self.type == PARALLEL
            and self.then is not None
            and self.then.feedback_loop is not None
            and self.then.feedback_loop.enabled
        )

    def referenced_agents(self) -> List[str]:
        """Agent ids in declared execution order."""
        if self.type == SEQUENTIAL:
            return [s.agent for s in self.steps]
        ids = list(self.branches)
        if self.then is not None:
            ids.append(self.then.agent)
        return ids

    def validate(self) -> None:
        if self.type not in WORKFLOW_TYPES:
            raise ConfigurationError(f"Unknown workflow type: {self.type!r}")

        if self.type == SEQUENTIAL and not self.steps:
            raise ConfigurationError("Sequential workflow needs at least one step")

        if self.type == PARALLEL:
            if not self.branches:
                raise ConfigurationError("Parallel workflow needs at least one branch")
            if self.then is None:
                raise ConfigurationError("Parallel workflow needs a 'then' agent")

    @classmethod
    def from_dict(cls, data: Any) -> "WorkflowConfig":
        data = _require_mapping(data, "workflow")
        wf_type = data.get("type")

        if wf_type == SEQUENTIAL:
            steps = data.get("steps") or []
            if not isinstance(steps, list):
                raise ConfigurationError("workflow.steps must be a list")
            config = cls(type=wf_type, steps=tuple(StepConfig.from_dict(s) for s in steps))

        elif wf_type == PARALLEL:
            branches = data.get("branches") or []
            if not isinstance(branches, list) or not all(isinstance(b, str) for b in branches):
                raise ConfigurationError("workflow.branches must be a list of agent ids")
            config = cls(
                type=wf_type,
                branches=tuple(branches),
                then=ParallelThenConfig.from_dict(data.get("then")),
            )

        else:
            raise ConfigurationError(f"Unknown workflow type: {wf_type!r}")

        config.validate()
        return config


# ============================================================
# ROOT
# ============================================================

@dataclass(frozen=True)
class RootConfig:
    workflow: WorkflowConfig
    agents: Tuple[Agent, ...] = field(default_factory=tuple)
    llm: LLMConfig = field(default_factory=LLMConfig)
    tool_config: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        self._validate()

    def _validate(self):
        seen = set()
        for agent in self.agents:
            if agent.id in seen:
                raise ConfigurationError(f"Duplicate agent id: {agent.id}")
            seen.add(agent.id)

        missing = [a for a in self.workflow.referenced_agents() if a not in seen]
        if missing:
            raise ConfigurationError(f"Workflow references unknown agents: {missing}")

    @classmethod
    def from_dict(cls, data: Any) -> "RootConfig":
        data = _require_mapping(data, "<root>")

        raw_agents = data.get("agents") or []
        if not isinstance(raw_agents, list):
            raise ConfigurationError("'agents' must be a list")

        try:
            agents = tuple(Agent.from_dict(_require_mapping(a, "agents[]")) for a in raw_agents)
        except ConfigurationError:
            raise
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        tool_config = _require_mapping(data.get("tool_config") or {}, "tool_config")

        return cls(
            workflow=WorkflowConfig.from_dict(data.get("workflow")),
            agents=agents,
            llm=LLMConfig.from_dict(data.get("llm")),
            tool_config={k: dict(v or {}) for k, v in tool_config.items()},
        )


def load_config(path: str | os.PathLike) -> RootConfig:
    """
    Load and validate a YAML run configuration.
    """
    config_path = Path(path)

    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    return RootConfig.from_dict(data or {})
