"""
LLM transport layer.

Exposes:
- LLMBackend (abstract interface)
- OllamaBackend (local backend)
- GroqBackend (remote backend)
- ToolCallingLoop (multi-turn tool protocol on top of any backend)
"""

from .backend import LLMBackend
from .factory import create_backend
from .ollama_backend import OllamaBackend
from .groq_backend import GroqBackend
from .tool_loop import ToolCallingLoop, ToolLoopResult, parse_tool_call

__all__ = [
    "LLMBackend",
    "OllamaBackend",
    "GroqBackend",
    "ToolCallingLoop",
    "ToolLoopResult",
    "create_backend",
    "parse_tool_call",
]
