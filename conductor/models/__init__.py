"""
Core runtime data models for the Conductor orchestration engine.

These dataclasses define the structured records that move between the
workflow engine, the tool-calling loop and the tool registry.
"""

from .execution_record import ExecutionRecord
from .tool_call import ToolCall
from .tool_result import ToolResult

__all__ = ["ExecutionRecord", "ToolCall", "ToolResult"]
