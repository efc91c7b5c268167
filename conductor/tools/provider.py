from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from .schema import ToolSchema
from ..models import ToolResult


class ToolProvider(ABC):
    """
    Abstract tool implementation registered in a ToolRegistry.

    The contract has two operations:
        • get_schema() describes the tool to the model
        • execute() performs the action and returns a ToolResult

    Providers should report failures as ToolResult values. The registry
    still captures anything they raise, so an exception never escapes
    a tool call.
    """

    @property
    def name(self) -> str:
        return self.get_schema().name

    @abstractmethod
    def get_schema(self) -> ToolSchema:
        raise NotImplementedError

    @abstractmethod
    def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        """
        Execute the tool.

        Parameters
        ----------
        parameters : Dict[str, Any]
            Model-supplied arguments, already checked against the
            schema's required fields and type tags. MUST NOT be mutated.
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Optional Hooks
    # ------------------------------------------------------------------

    def configure(self, overrides: Optional[Mapping[str, Any]]) -> "ToolProvider":
        """
        Return a provider that applies per-agent configuration overrides.

        The default implementation ignores overrides and returns self.
        """
        return self

    def shutdown(self) -> None:
        """Release any resources held by the provider."""
        pass
