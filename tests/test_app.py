"""End-to-end tests for the ConductorApp facade with an injected backend."""

import logging

import pytest

from conductor import ConductorApp, ConfigurationError, configure_logging
from conductor.config import RootConfig
from conductor.orchestrator import never_converge

from fakes import RecordingBackend, RoleBackend, ScriptedBackend

AGENTS = [
    {"id": "researcher", "role": "Researcher", "goal": "Collect facts"},
    {"id": "critic", "role": "Critic", "goal": "Challenge the facts"},
    {"id": "editor", "role": "Editor", "goal": "Write the final answer"},
]


def make_config(workflow, agents=AGENTS, **extra):
    return RootConfig.from_dict({"agents": agents, "workflow": workflow, **extra})


def test_sequential_run_returns_populated_context():
    config = make_config({
        "type": "sequential",
        "steps": [{"agent": "researcher"}, {"agent": "editor"}],
    })
    app = ConductorApp.from_config(config, backend=RoleBackend())

    context = app.run("Explain tides")

    assert context.user_input == "Explain tides"
    assert [r.agent_id for r in context.timeline] == ["researcher", "editor"]
    assert context.final_output == "Editor output"


def test_each_run_gets_a_fresh_context():
    config = make_config({"type": "sequential", "steps": [{"agent": "researcher"}]})
    app = ConductorApp.from_config(config, backend=RoleBackend())

    first = app.run("one")
    second = app.run("two")

    assert len(first.timeline) == 1
    assert len(second.timeline) == 1
    assert first is not second


def test_iterative_run_with_injected_convergence():
    config = make_config({
        "type": "parallel",
        "branches": ["researcher", "critic"],
        "then": {"agent": "editor", "feedback_loop": {"enabled": True, "max_iterations": 2}},
    })
    backend = RecordingBackend(lambda system, user: "APPROVED")
    app = ConductorApp.from_config(config, backend=backend, convergence_check=never_converge)

    context = app.run("Plan a trip")

    assert len(context.timeline) == 6


def test_llm_settings_reach_the_engine():
    config = make_config(
        {"type": "sequential", "steps": [{"agent": "researcher"}]},
        llm={"temperature": 0.7, "max_tool_calls": 2},
    )
    backend = RecordingBackend()

    ConductorApp.from_config(config, backend=backend).run("hi")

    assert backend.calls[0]["temperature"] == 0.7


def test_code_execution_tool_is_registered_and_scoped():
    agents = [{
        "id": "coder",
        "role": "Coder",
        "goal": "Compute things",
        "tools": ["code_execution"],
        "tool_config": {"code_execution": {"timeout": 750}},
    }]
    config = make_config(
        {"type": "sequential", "steps": [{"agent": "coder"}]},
        agents=agents,
        tool_config={"code_execution": {"timeout": 2000, "memory_limit": 24}},
    )
    app = ConductorApp.from_config(config, backend=ScriptedBackend(["done"]))

    assert "code_execution" in app.tools
    assert app.tools.get_tool("code_execution").timeout_ms == 2000

    scoped = app.tools.scoped(["code_execution"], config.agents[0].tool_config)
    assert scoped.get_tool("code_execution").timeout_ms == 750
    assert scoped.get_tool("code_execution").memory_limit_mb == 24

    context = app.run("What is 2 + 2?")
    assert context.final_output == "done"


def test_from_file(tmp_path):
    path = tmp_path / "workflow.yaml"
    path.write_text(
        "agents:\n"
        "  - {id: a, role: Writer, goal: Write}\n"
        "workflow:\n"
        "  type: sequential\n"
        "  steps:\n"
        "    - agent: a\n",
        encoding="utf-8",
    )

    app = ConductorApp.from_file(path, backend=RoleBackend())

    assert app.run("hello").final_output == "Writer output"


def test_from_file_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        ConductorApp.from_file(tmp_path / "nope.yaml", backend=RoleBackend())


def test_groq_backend_requires_api_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    config = make_config(
        {"type": "sequential", "steps": [{"agent": "researcher"}]},
        llm={"backend": "groq"},
    )

    with pytest.raises(RuntimeError, match="GROQ_API_KEY"):
        ConductorApp.from_config(config)


def test_configure_logging_reads_environment(monkeypatch):
    monkeypatch.setenv("CONDUCTOR_LOG_LEVEL", "debug")
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    root.handlers = []

    try:
        configure_logging()
        assert root.level == logging.DEBUG
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
