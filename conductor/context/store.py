from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
import time

from ..models.execution_record import ExecutionRecord


@dataclass(frozen=True)
class ContextSnapshot:
    """
    Read-only view of a ContextStore at one point in time.

    Parallel branches all render their prompts from the same snapshot,
    so none of them can observe a sibling's output.
    """

    user_input: str
    outputs: Mapping[str, str]
    timeline: Tuple[ExecutionRecord, ...]


@dataclass
class ContextStore:
    """
    Shared state of exactly one workflow run.

    This is NOT long-term memory. It holds the user input, the latest
    output of every agent, and the ordered execution timeline. Only the
    workflow strategies write to it, and only with complete outputs.
    """

    # ------------------------------------------------------------------
    # Run Input
    # ------------------------------------------------------------------

    user_input: str
    """Original user request. Set once at run start."""

    # ------------------------------------------------------------------
    # Agent Outputs
    # ------------------------------------------------------------------

    outputs: Dict[str, str] = field(default_factory=dict)
    """Latest output per agent id. Later writes overwrite earlier ones."""

    timeline: List[ExecutionRecord] = field(default_factory=list)
    """Append-only record of every invocation, in declared order."""

    _lock: RLock = field(default_factory=RLock, init=False, repr=False, compare=False)

    # ------------------------------------------------------------------
    # State Update Helpers
    # ------------------------------------------------------------------

    def record_output(
        self,
        agent_id: str,
        output: str,
        role: str = "",
        started_at: Optional[float] = None,
        ended_at: Optional[float] = None,
    ) -> ExecutionRecord:
        """Overwrite the agent's latest output and append one timeline record."""
        now = time.time()
        record = ExecutionRecord(
            agent_id=agent_id,
            role=role or agent_id,
            output=output,
            started_at=now if started_at is None else started_at,
            ended_at=now if ended_at is None else ended_at,
        )
        self.append(record)
        return record

    def append(self, record: ExecutionRecord) -> None:
        """Commit a finished ExecutionRecord."""
        with self._lock:
            self.outputs[record.agent_id] = record.output
            self.timeline.append(record)

    def snapshot(self) -> ContextSnapshot:
        with self._lock:
            return ContextSnapshot(
                user_input=self.user_input,
                outputs=MappingProxyType(dict(self.outputs)),
                timeline=tuple(self.timeline),
            )

    # ------------------------------------------------------------------
    # Convenience Accessors
    # ------------------------------------------------------------------

    @property
    def final_output(self) -> Optional[str]:
        with self._lock:
            return self.timeline[-1].output if self.timeline else None

    def records_for(self, agent_id: str) -> List[ExecutionRecord]:
        with self._lock:
            return [r for r in self.timeline if r.agent_id == agent_id]

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "user_input": self.user_input,
                "outputs": dict(self.outputs),
                "timeline": [r.to_dict() for r in self.timeline],
            }
