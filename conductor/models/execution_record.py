from dataclasses import dataclass, field
from typing import Any, Dict
import time


@dataclass(frozen=True)
class ExecutionRecord:
    """
    One timeline entry: a single agent invocation and its output.

    Records are appended to a ContextStore timeline exactly once and
    never mutated afterwards. Timeline order is declared execution
    order, and later prompts are rendered from it.
    """

    agent_id: str
    role: str
    output: str

    started_at: float = field(default_factory=time.time)
    """Unix timestamp when the invocation started."""

    ended_at: float = field(default_factory=time.time)
    """Unix timestamp when the output became available."""

    @property
    def duration_seconds(self) -> float:
        return max(0.0, self.ended_at - self.started_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "role": self.role,
            "output": self.output,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }

    def __repr__(self) -> str:
        return (
            f"ExecutionRecord(agent={self.agent_id}, role={self.role}, "
            f"chars={len(self.output)})"
        )
