from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional
from threading import RLock
import logging
import time

from .events import LoggingEventSink, ToolEventSink
from .provider import ToolProvider
from .schema import ToolSchema
from .validator import ParameterValidationError, ParameterValidator
from ..models import ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name-indexed directory of tool providers.

    This forms the capability boundary: if a tool is not registered here,
    a model cannot invoke it. `execute_tool` never raises; every failure
    comes back as a ToolResult.
    """

    def __init__(self, events: Optional[ToolEventSink] = None) -> None:
        self._tools: Dict[str, ToolProvider] = {}
        self._lock = RLock()
        self._validator = ParameterValidator()
        self.events = events or LoggingEventSink()
        logger.debug("[TOOL REGISTRY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, provider: ToolProvider) -> None:
        """
        Register a provider under its schema name.

        Re-registering a name replaces the earlier provider.
        """

        if not isinstance(provider, ToolProvider):
            raise TypeError("Tool must implement ToolProvider.")

        schema = provider.get_schema()

        with self._lock:
            replaced = schema.name in self._tools
            self._tools[schema.name] = provider

            if replaced:
                logger.info("[TOOL REGISTRY] Tool replaced: %s", schema.name)

            logger.debug("[TOOL REGISTRY] total=%d", len(self._tools))

        self.events.tool_registered(schema.name, schema.executor.value)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_tool(self, name: str) -> Optional[ToolProvider]:
        with self._lock:
            return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def list_tools(self) -> List[ToolSchema]:
        with self._lock:
            providers = list(self._tools.values())
        return [p.get_schema() for p in providers]

    def list_tool_names(self) -> List[str]:
        with self._lock:
            return list(self._tools)

    def get_tools_for_agent(self, names: Iterable[str]) -> List[ToolProvider]:
        """
        Providers for an allow-list, in allow-list order.

        Names absent from the registry are silently dropped.
        """
        with self._lock:
            return [self._tools[n] for n in names if n in self._tools]

    def scoped(
        self,
        names: Iterable[str],
        tool_config: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> "ToolRegistry":
        """
        Build a registry holding only the permitted tools.

        Each provider is passed through `configure()` with its entry in
        `tool_config`, so per-agent overrides never leak to other agents.
        """
        tool_config = tool_config or {}
        scoped = ToolRegistry(events=self.events)

        for provider in self.get_tools_for_agent(names):
            overrides = tool_config.get(provider.name)
            configured = provider.configure(overrides) if overrides else provider
            with scoped._lock:
                scoped._tools[provider.name] = configured

        return scoped

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_tool(name)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute_tool(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ToolResult:

        provider = self.get_tool(name)

        if provider is None:
            logger.error(
                "[TOOL REGISTRY] Tool not found: %s | available=%s",
                name,
                self.list_tool_names(),
            )
            self.events.execution_failed(name, "not found")
            return ToolResult.fail(f"Tool {name} not found", execution_time_ms=0)

        parameters = parameters if parameters is not None else {}

        try:
            self._validator.validate(provider.get_schema().parameters, parameters)
        except ParameterValidationError as e:
            self.events.execution_failed(name, str(e))
            return ToolResult.fail(f"Invalid parameters: {e}", execution_time_ms=0)
        except Exception as e:
            # Broken schema or get_schema(); the provider never runs
            error = f"Parameter validation failed: {str(e) or type(e).__name__}"
            logger.error("[TOOL REGISTRY] %s | tool=%s", error, name)
            self.events.execution_failed(name, error)
            return ToolResult.fail(error, execution_time_ms=0)

        self.events.execution_started(name, parameters)
        start = time.monotonic()

        try:
            result = provider.execute(parameters)
        except Exception as e:
            error = str(e) or type(e).__name__
            self.events.execution_failed(name, error)
            return ToolResult.fail(error, execution_time_ms=self._elapsed_ms(start))

        if not isinstance(result, ToolResult):
            error = f"Tool {name} returned {type(result).__name__} instead of ToolResult"
            self.events.execution_failed(name, error)
            return ToolResult.fail(error, execution_time_ms=self._elapsed_ms(start))

        self.events.execution_completed(name, result.success, result.execution_time_ms)
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown_all(self) -> None:
        with self._lock:
            providers = list(self._tools.items())

        for name, provider in providers:
            try:
                provider.shutdown()
            except Exception:
                logger.warning("[TOOL REGISTRY] Shutdown failed for tool '%s'", name)

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
