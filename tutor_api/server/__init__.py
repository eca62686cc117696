from .context import ContextState, ExecutionContext
from .factory import create_application

__all__ = ["ContextState", "ExecutionContext", "create_application"]
