"""
Exception hierarchy for the orchestration engine.

Tool execution failures are never raised; they travel as ToolResult
values. The exceptions below are the caller-visible failure modes.
"""


class ConfigurationError(ValueError):
    """Unknown workflow type, unregistered agent, or malformed config."""


class LLMBackendError(RuntimeError):
    """Transport or response-format failure of a language-model backend."""


class ToolLoopExhaustedError(RuntimeError):
    """Raised when the tool-calling loop hits its round limit without a final answer."""

    def __init__(self, max_tool_calls: int, tool_calls=None) -> None:
        self.max_tool_calls = max_tool_calls
        self.tool_calls = list(tool_calls or [])
        super().__init__(f"Max tool call iterations ({max_tool_calls}) reached")


class BranchExecutionError(RuntimeError):
    """A parallel branch failed, failing the whole join."""

    def __init__(self, agent_id: str, cause: BaseException) -> None:
        self.agent_id = agent_id
        self.cause = cause
        super().__init__(f"Branch '{agent_id}' failed: {cause}")
