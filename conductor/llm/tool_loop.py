from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging
import re

from .backend import LLMBackend
from ..config import DEFAULT_MAX_TOOL_CALLS, DEFAULT_TEMPERATURE
from ..errors import ToolLoopExhaustedError
from ..models import ToolCall, ToolResult
from ..tools.events import ToolEventSink
from ..tools.registry import ToolRegistry
from ..tools.schema import ToolSchema

logger = logging.getLogger(__name__)

TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"

_TOOL_CALL_PATTERN = re.compile(
    re.escape(TOOL_CALL_OPEN) + r"(.*?)" + re.escape(TOOL_CALL_CLOSE),
    re.DOTALL,
)


class ToolCallParseError(ValueError):
    """A tool-call block was present but did not hold a usable call."""

    def __init__(self, message: str, raw: str) -> None:
        self.raw = raw
        super().__init__(message)


def parse_tool_call(text: str) -> Optional[Tuple[str, Dict[str, Any]]]:
    """
    Extract the first tool-call block from a model response.

    Returns (tool_name, parameters), or None when the response holds no
    block. Only the first block is considered; any later block is
    ignored. Raises ToolCallParseError when that first block is not a
    JSON object with a string `tool` field.
    """
    match = _TOOL_CALL_PATTERN.search(text or "")
    if not match:
        return None

    raw = match.group(1).strip()

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ToolCallParseError(f"Invalid JSON: {e}", raw) from None

    if not isinstance(data, dict):
        raise ToolCallParseError("Tool call must be a JSON object", raw)

    tool_name = data.get("tool")
    if not tool_name or not isinstance(tool_name, str):
        raise ToolCallParseError("Tool call is missing a 'tool' name", raw)

    parameters = data.get("parameters") or {}
    if not isinstance(parameters, dict):
        raise ToolCallParseError("Tool call 'parameters' must be a JSON object", raw)

    return tool_name, parameters


@dataclass(frozen=True)
class ToolLoopResult:
    output: str
    tool_calls: List[ToolCall] = field(default_factory=list)
    rounds: int = 1


class ToolCallingLoop:
    """
    Bounded conversation between a backend and a ToolRegistry.

    Each round the backend sees the base system prompt extended with the
    permitted tools. A response holding a tool-call block triggers one
    tool execution whose result is appended to the running prompt; any
    other response is the final answer. A malformed block is treated as
    a final answer as well.

    Reaching `max_tool_calls` rounds without a final answer raises
    ToolLoopExhaustedError.
    """

    def __init__(
        self,
        backend: LLMBackend,
        tool_registry: ToolRegistry,
        max_tool_calls: int = DEFAULT_MAX_TOOL_CALLS,
        events: Optional[ToolEventSink] = None,
    ) -> None:
        if max_tool_calls < 1:
            raise ValueError("max_tool_calls must be at least 1.")

        self.backend = backend
        self.tool_registry = tool_registry
        self.max_tool_calls = max_tool_calls
        self.events = events or tool_registry.events

    # ============================================================
    # MAIN LOOP
    # ============================================================

    def run(
        self,
        system: str,
        user: str,
        tools: Optional[Sequence[ToolSchema]] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ToolLoopResult:

        tools = list(self.tool_registry.list_tools() if tools is None else tools)
        system_with_tools = self.build_tool_prompt(system, tools)

        logger.info(
            "[TOOL LOOP] Starting | tools=%s | max_rounds=%d",
            [t.name for t in tools],
            self.max_tool_calls,
        )

        tool_calls: List[ToolCall] = []
        current_prompt = user

        for round_number in range(1, self.max_tool_calls + 1):

            response = self.backend.generate(
                system=system_with_tools,
                user=current_prompt,
                temperature=temperature,
            )

            try:
                parsed = parse_tool_call(response)
            except ToolCallParseError as e:
                self.events.tool_call_parse_failed(str(e), e.raw)
                parsed = None

            if parsed is None:
                logger.info(
                    "[TOOL LOOP] Complete after %d round(s) | tool_calls=%d",
                    round_number,
                    len(tool_calls),
                )
                return ToolLoopResult(output=response, tool_calls=tool_calls, rounds=round_number)

            tool_name, parameters = parsed
            self.events.tool_call_detected(tool_name, round_number)

            call = ToolCall(tool_name=tool_name, parameters=parameters)
            result = self.tool_registry.execute_tool(tool_name, parameters)
            tool_calls.append(call)

            current_prompt = self.build_tool_result_prompt(current_prompt, call, result)

        self.events.loop_exhausted(self.max_tool_calls, len(tool_calls))
        raise ToolLoopExhaustedError(self.max_tool_calls, tool_calls)

    # ============================================================
    # PROMPT RENDERING
    # ============================================================

    @staticmethod
    def build_tool_prompt(base_system: str, tools: Sequence[ToolSchema]) -> str:
        if not tools:
            return base_system

        blocks = ["You have access to the following tools:"]

        for tool in tools:
            blocks.append(
                f"Tool: {tool.name}\n"
                f"Description: {tool.description}\n"
                f"Parameters: {json.dumps(tool.parameters.to_dict(), indent=2)}"
            )

        blocks.append(
            "To use a tool, respond with ONLY this format (no other text):\n"
            f"{TOOL_CALL_OPEN}\n"
            "{\n"
            '  "tool": "tool_name",\n'
            '  "parameters": { ... }\n'
            "}\n"
            f"{TOOL_CALL_CLOSE}\n\n"
            "Only one tool call per response is honored. When you have the "
            "information you need from tools, respond normally without the "
            "tool_call tags."
        )

        return base_system + "\n\n" + "\n\n".join(blocks)

    @staticmethod
    def build_tool_result_prompt(previous_prompt: str, call: ToolCall, result: ToolResult) -> str:
        return (
            f"{previous_prompt}\n\n"
            "<tool_result>\n"
            f"Tool: {call.tool_name}\n"
            f"Parameters: {json.dumps(call.parameters, default=str)}\n"
            f"Result: {json.dumps(result.to_dict(), indent=2, default=str)}\n"
            "</tool_result>\n\n"
            "Based on this tool result, provide your final response "
            "(without using more tools unless necessary)."
        )
