"""Shared fixtures for the orchestration engine tests."""

import pytest

from conductor.agents import Agent, AgentRegistry
from conductor.context import ContextStore
from conductor.tools import ToolRegistry

from fakes import EchoTool, RecordingSink


@pytest.fixture
def agents():
    return AgentRegistry([
        Agent(id="a", role="Researcher", goal="Find facts"),
        Agent(id="b", role="Critic", goal="Find flaws"),
        Agent(id="c", role="Analyst", goal="Find numbers"),
        Agent(id="d", role="Editor", goal="Merge everything"),
    ])


@pytest.fixture
def context():
    return ContextStore(user_input="Summarize the solar system")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def tool_registry(sink):
    registry = ToolRegistry(events=sink)
    registry.register(EchoTool())
    return registry
