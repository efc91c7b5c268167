"""Tests for the bounded tool-calling loop and tool-call parsing."""

import pytest

from conductor.errors import ToolLoopExhaustedError
from conductor.llm.tool_loop import ToolCallingLoop, ToolCallParseError, parse_tool_call

from fakes import ScriptedBackend

CALL_ECHO = '<tool_call>{"tool": "echo", "parameters": {"text": "ping"}}</tool_call>'


# ========== parse_tool_call ==========

def test_parse_returns_none_without_block():
    assert parse_tool_call("Just an answer.") is None


def test_parse_extracts_first_block_only():
    text = (
        'thinking <tool_call>{"tool": "first", "parameters": {"a": 1}}</tool_call> '
        '<tool_call>{"tool": "second"}</tool_call>'
    )

    assert parse_tool_call(text) == ("first", {"a": 1})


def test_parse_spans_multiple_lines():
    text = '<tool_call>\n{\n  "tool": "echo",\n  "parameters": {"text": "x"}\n}\n</tool_call>'

    assert parse_tool_call(text) == ("echo", {"text": "x"})


def test_parse_defaults_parameters_to_empty():
    assert parse_tool_call('<tool_call>{"tool": "now"}</tool_call>') == ("now", {})


@pytest.mark.parametrize("body", ["not json", '{"parameters": {}}', "[1, 2]", '{"tool": 5}'])
def test_parse_rejects_malformed_blocks(body):
    with pytest.raises(ToolCallParseError):
        parse_tool_call(f"<tool_call>{body}</tool_call>")


# ========== ToolCallingLoop ==========

def test_plain_answer_finishes_in_one_round(tool_registry):
    backend = ScriptedBackend(["The answer is 42."])
    loop = ToolCallingLoop(backend, tool_registry)

    result = loop.run("You are helpful.", "What is the answer?")

    assert result.output == "The answer is 42."
    assert result.tool_calls == []
    assert result.rounds == 1
    assert len(backend.calls) == 1


def test_tool_result_is_fed_back_to_model(tool_registry, sink):
    backend = ScriptedBackend([CALL_ECHO, "Echo said ping."])
    loop = ToolCallingLoop(backend, tool_registry)

    result = loop.run("You are helpful.", "Echo ping please")

    assert result.output == "Echo said ping."
    assert [c.tool_name for c in result.tool_calls] == ["echo"]
    assert result.tool_calls[0].parameters == {"text": "ping"}

    second_prompt = backend.calls[1]["user"]
    assert second_prompt.startswith("Echo ping please")
    assert "<tool_result>" in second_prompt
    assert '"text": "ping"' in second_prompt
    assert ("detected", "echo", 1) in sink.events


def test_system_prompt_lists_tools(tool_registry):
    backend = ScriptedBackend(["done"])
    ToolCallingLoop(backend, tool_registry).run("Base system.", "hi")

    system = backend.calls[0]["system"]
    assert system.startswith("Base system.")
    assert "Tool: echo" in system
    assert "Echo back text" in system
    assert "<tool_call>" in system


def test_tool_failure_does_not_abort_loop(tool_registry):
    backend = ScriptedBackend([
        '<tool_call>{"tool": "missing", "parameters": {}}</tool_call>',
        "Could not use the tool, answering anyway.",
    ])

    result = ToolCallingLoop(backend, tool_registry).run("sys", "hi")

    assert result.output == "Could not use the tool, answering anyway."
    assert "Tool missing not found" in backend.calls[1]["user"]


def test_malformed_tool_call_is_treated_as_final(tool_registry, sink):
    response = "<tool_call>{not json}</tool_call>"
    backend = ScriptedBackend([response])

    result = ToolCallingLoop(backend, tool_registry).run("sys", "hi")

    assert result.output == response
    assert result.tool_calls == []
    assert any(e[0] == "parse_failed" for e in sink.events)


def test_exhaustion_raises_with_full_audit(tool_registry, sink):
    backend = ScriptedBackend([CALL_ECHO])
    loop = ToolCallingLoop(backend, tool_registry, max_tool_calls=3)

    with pytest.raises(ToolLoopExhaustedError) as excinfo:
        loop.run("sys", "loop forever")

    assert excinfo.value.max_tool_calls == 3
    assert len(excinfo.value.tool_calls) == 3
    assert len(backend.calls) == 3
    assert ("exhausted", 3, 3) in sink.events


def test_default_bound_is_five(tool_registry):
    backend = ScriptedBackend([CALL_ECHO])

    with pytest.raises(ToolLoopExhaustedError) as excinfo:
        ToolCallingLoop(backend, tool_registry).run("sys", "hi")

    assert len(excinfo.value.tool_calls) == 5


def test_invalid_bound_rejected(tool_registry):
    with pytest.raises(ValueError):
        ToolCallingLoop(ScriptedBackend(["x"]), tool_registry, max_tool_calls=0)
