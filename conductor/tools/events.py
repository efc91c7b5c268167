"""
Observability side channel for tool registration and tool calls.

A ToolEventSink is handed to the ToolRegistry and the ToolCallingLoop.
The base class ignores every event; LoggingEventSink writes them to the
standard logging hierarchy.
"""

from __future__ import annotations

from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class ToolEventSink:

    def tool_registered(self, name: str, executor: str) -> None:
        pass

    def execution_started(self, name: str, parameters: Dict[str, Any]) -> None:
        pass

    def execution_completed(self, name: str, success: bool, execution_time_ms: int) -> None:
        pass

    def execution_failed(self, name: str, error: str) -> None:
        pass

    def tool_call_detected(self, name: str, round_number: int) -> None:
        pass

    def tool_call_parse_failed(self, error: str, raw: str) -> None:
        pass

    def loop_exhausted(self, max_tool_calls: int, tool_calls: int) -> None:
        pass


class LoggingEventSink(ToolEventSink):

    def __init__(self, log: logging.Logger = logger) -> None:
        self._log = log

    def tool_registered(self, name: str, executor: str) -> None:
        self._log.info("[TOOL REGISTRY] Tool registered: %s | executor=%s", name, executor)

    def execution_started(self, name: str, parameters: Dict[str, Any]) -> None:
        self._log.info("[TOOL] Executing tool: %s", name)
        self._log.debug("[TOOL] Parameters for %s: %s", name, parameters)

    def execution_completed(self, name: str, success: bool, execution_time_ms: int) -> None:
        self._log.info(
            "[TOOL] Execution %s: %s | %dms",
            "succeeded" if success else "failed",
            name,
            execution_time_ms,
        )

    def execution_failed(self, name: str, error: str) -> None:
        self._log.error("[TOOL] Execution error: %s | %s", name, error)

    def tool_call_detected(self, name: str, round_number: int) -> None:
        self._log.info("[TOOL LOOP] Tool call detected: %s | round=%d", name, round_number)

    def tool_call_parse_failed(self, error: str, raw: str) -> None:
        self._log.error("[TOOL LOOP] Failed to parse tool call: %s", error)
        self._log.debug("[TOOL LOOP] Raw tool call content:\n%s", raw)

    def loop_exhausted(self, max_tool_calls: int, tool_calls: int) -> None:
        self._log.warning(
            "[TOOL LOOP] Max tool call iterations (%d) reached | calls=%d",
            max_tool_calls,
            tool_calls,
        )
