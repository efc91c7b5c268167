"""
Tool layer: schemas, providers, the registry and built-in tools.
"""

from .events import LoggingEventSink, ToolEventSink
from .provider import ToolProvider
from .registry import ToolRegistry
from .schema import ExecutorCategory, ParameterSchema, ToolSchema

__all__ = [
    "ExecutorCategory",
    "LoggingEventSink",
    "ParameterSchema",
    "ToolEventSink",
    "ToolProvider",
    "ToolRegistry",
    "ToolSchema",
]
