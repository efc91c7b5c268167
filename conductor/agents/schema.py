from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class Agent:
    """
    Declarative definition of one role + goal persona.

    An Agent is loaded once per run and never changes afterwards. It
    optionally names the tools it may invoke and per-tool configuration
    overrides applied only to its own invocations.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    id: str
    role: str
    goal: str

    # ------------------------------------------------------------------
    # Tool Permissions
    # ------------------------------------------------------------------

    # NOTE: Tuple used instead of List to preserve immutability
    tools: Tuple[str, ...] = field(default_factory=tuple)
    tool_config: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("Agent id must be a non-empty string.")

        if not isinstance(self.role, str) or not self.role:
            raise ValueError(f"Agent '{self.id}' must declare a role.")

        if not isinstance(self.goal, str) or not self.goal:
            raise ValueError(f"Agent '{self.id}' must declare a goal.")

        object.__setattr__(self, "tools", tuple(self.tools or ()))
        object.__setattr__(
            self,
            "tool_config",
            MappingProxyType({k: dict(v or {}) for k, v in (self.tool_config or {}).items()}),
        )

    # ------------------------------------------------------------------
    # Derived Properties
    # ------------------------------------------------------------------

    @property
    def uses_tools(self) -> bool:
        return bool(self.tools)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agent":
        return cls(
            id=data.get("id", ""),
            role=data.get("role", ""),
            goal=data.get("goal", ""),
            tools=tuple(data.get("tools") or ()),
            tool_config=data.get("tool_config") or {},
        )
