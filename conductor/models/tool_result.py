from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable record of a single tool execution.

    Attributes
    ----------
    success : bool
        Whether the tool produced a result.

    result : Any
        Tool payload on success. Always None on failure.

    error : Optional[str]
        Error message. Always present on failure.

    execution_time_ms : int
        Elapsed time in milliseconds. Zero when no provider code ran.
    """

    success: bool
    result: Any = None
    error: Optional[str] = None
    execution_time_ms: int = 0

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def __post_init__(self):
        if not self.success:
            if self.result is not None:
                raise ValueError("A failed ToolResult cannot carry a result.")
            if not self.error:
                raise ValueError("A failed ToolResult must carry an error message.")

        object.__setattr__(self, "execution_time_ms", max(0, int(self.execution_time_ms)))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def ok(cls, result: Any, execution_time_ms: int = 0) -> "ToolResult":
        return cls(success=True, result=result, execution_time_ms=execution_time_ms)

    @classmethod
    def fail(cls, error: str, execution_time_ms: int = 0) -> "ToolResult":
        return cls(success=False, error=error or "Unknown error", execution_time_ms=execution_time_ms)

    # ------------------------------------------------------------------
    # Safe Serialization Boundary
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-safe dictionary.

        Used when rendering results back into a model prompt.
        """
        data: Dict[str, Any] = {
            "success": self.success,
            "execution_time_ms": self.execution_time_ms,
        }
        if self.success:
            data["result"] = self.result
        else:
            data["error"] = self.error
        return data
