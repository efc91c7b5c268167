"""Tests for ToolResult invariants, ContextStore and the prompt builder."""

import pytest

from conductor.agents import Agent
from conductor.context import ContextStore
from conductor.models import ExecutionRecord, ToolResult
from conductor.prompt import build_prompt


# ========== ToolResult ==========

def test_failed_result_requires_error():
    with pytest.raises(ValueError):
        ToolResult(success=False)


def test_failed_result_cannot_carry_payload():
    with pytest.raises(ValueError):
        ToolResult(success=False, result={"x": 1}, error="boom")


def test_to_dict_omits_result_on_failure():
    data = ToolResult.fail("boom", execution_time_ms=7).to_dict()

    assert data == {"success": False, "error": "boom", "execution_time_ms": 7}


def test_negative_execution_time_is_clamped():
    assert ToolResult.ok("x", execution_time_ms=-5).execution_time_ms == 0


# ========== ContextStore ==========

def test_record_output_overwrites_and_appends():
    store = ContextStore(user_input="hi")

    store.record_output("a", "first", role="Writer")
    store.record_output("a", "second", role="Writer")

    assert store.outputs == {"a": "second"}
    assert [r.output for r in store.timeline] == ["first", "second"]
    assert store.final_output == "second"


def test_snapshot_is_isolated_from_later_writes():
    store = ContextStore(user_input="hi")
    store.record_output("a", "one")

    snap = store.snapshot()
    store.record_output("b", "two")

    assert len(snap.timeline) == 1
    assert "b" not in snap.outputs
    with pytest.raises(TypeError):
        snap.outputs["c"] = "nope"


def test_records_for_filters_by_agent():
    store = ContextStore(user_input="hi")
    store.record_output("a", "1")
    store.record_output("b", "2")
    store.record_output("a", "3")

    assert [r.output for r in store.records_for("a")] == ["1", "3"]


# ========== Prompt builder ==========

AGENT = Agent(id="w", role="Writer", goal="Write a short poem")


def test_prompt_with_empty_timeline():
    prompt = build_prompt(AGENT, ContextStore(user_input="about the sea"))

    assert "Writer" in prompt.system
    assert "Write a short poem" in prompt.system
    assert "about the sea" in prompt.user
    assert "Previous agent outputs" not in prompt.user


def test_prompt_renders_timeline_in_order():
    store = ContextStore(user_input="about the sea")
    store.append(ExecutionRecord(agent_id="r1", role="Researcher", output="Waves are water"))
    store.append(ExecutionRecord(agent_id="c1", role="Critic", output="Too literal"))

    prompt = build_prompt(AGENT, store)

    first = prompt.user.index("--- Researcher (r1) ---\nWaves are water")
    second = prompt.user.index("--- Critic (c1) ---\nToo literal")
    assert prompt.user.index("about the sea") < first < second


def test_prompt_is_deterministic():
    store = ContextStore(user_input="x")
    store.record_output("a", "y", role="R")

    assert build_prompt(AGENT, store) == build_prompt(AGENT, store.snapshot())
