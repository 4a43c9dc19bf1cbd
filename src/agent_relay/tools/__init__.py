"""External tool execution."""

from .executor import FunctionToolExecutor, RegisteredTool, ToolListener

__all__ = [
    "ToolListener",
    "FunctionToolExecutor",
    "RegisteredTool",
]
