"""
Built-in tool registration helper.

Usage
-----
from conductor.tools.builtin import register_builtin_tools

register_builtin_tools(
    registry=tool_registry,
    tool_config={"code_execution": {"timeout": 5000, "memory_limit": 16}},
)
"""

from typing import Any, Dict, Mapping, Optional

from .code_execution import SandboxedCodeExecutionTool, SandboxLanguage


def register_builtin_tools(
    registry,
    tool_config: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> None:
    """
    Register the built-in tools with run-wide configuration.

    Parameters
    ----------
    registry : ToolRegistry
        The tool registry instance.

    tool_config : Mapping, optional
        Global per-tool settings, keyed by tool name.
    """
    tool_config = tool_config or {}

    code_config = tool_config.get("code_execution") or {}
    registry.register(
        SandboxedCodeExecutionTool(
            timeout_ms=int(code_config.get("timeout", 5000)),
            memory_limit_mb=int(code_config.get("memory_limit", 16)),
        )
    )


__all__ = ["SandboxedCodeExecutionTool", "SandboxLanguage", "register_builtin_tools"]
