from dataclasses import dataclass, field
from typing import Any, Dict
import time


@dataclass(frozen=True)
class ToolCall:
    """
    Represents a model-issued request to execute a tool.

    Produced by the ToolCallingLoop when a backend response contains a
    tool-call block, and retained in the loop's audit list.

    Architectural Role
    ------------------
    Backend text → ToolCall → ToolRegistry.execute_tool
    """

    tool_name: str
    """Name of the tool the model asked for."""

    parameters: Dict[str, Any] = field(default_factory=dict)
    """Opaque parameter mapping, passed to the provider unchanged."""

    timestamp: float = field(default_factory=time.time)
    """Unix timestamp when the call was detected."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool_name,
            "parameters": dict(self.parameters),
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"ToolCall(tool='{self.tool_name}', params={sorted(self.parameters)})"
