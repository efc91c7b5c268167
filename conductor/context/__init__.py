from .store import ContextSnapshot, ContextStore

__all__ = ["ContextSnapshot", "ContextStore"]
