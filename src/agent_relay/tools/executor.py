"""External tool execution for agent-relay.

The orchestration engine hands every non-orchestration tool call to a
``ToolListener``. ``FunctionToolExecutor`` is a registry-backed listener
that maps tool names to plain Python callables.
"""

import asyncio
import inspect
import json
from typing import Any, Callable, Optional, Protocol

from ..models import Agent, ToolCall, ToolDefinition, ToolExecutionResult
from ..utils import get_logger

logger = get_logger(__name__)


class ToolListener(Protocol):
    """Executes external tool calls on behalf of agents."""

    async def on_tool_call_requested(
        self,
        session_id: str,
        agent: Agent,
        user_message: Optional[str],
        tool_call: ToolCall,
    ) -> ToolExecutionResult:
        ...


class RegisteredTool:
    """A callable plus the definition advertised to the model.

    Attributes:
        definition: Tool definition
        func: Sync or async callable receiving the parsed arguments as keywords
    """

    def __init__(self, definition: ToolDefinition, func: Callable[..., Any]) -> None:
        self.definition = definition
        self.func = func

    @property
    def name(self) -> str:
        return self.definition.name

    async def execute(self, **arguments: Any) -> Any:
        if inspect.iscoroutinefunction(self.func):
            return await self.func(**arguments)
        return await asyncio.to_thread(self.func, **arguments)


class FunctionToolExecutor:
    """Registry of Python callables exposed as tools.

    Results that are not already a ``ToolExecutionResult`` are wrapped as
    successes. Unknown tools, invalid arguments and exceptions become
    ``ERROR`` results so the calling agent can react to them.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        description: str = "",
        parameters: Optional[dict[str, Any]] = None,
    ) -> ToolDefinition:
        """Register a callable under a tool name.

        Args:
            name: Tool name
            func: Callable receiving the tool arguments as keywords
            description: Description shown to the model (defaults to the docstring)
            parameters: JSON Schema for the arguments

        Returns:
            The definition to attach to agents

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        definition = ToolDefinition(
            name=name,
            description=description or inspect.getdoc(func) or "",
            **({"parameters": parameters} if parameters is not None else {}),
        )
        self._tools[name] = RegisteredTool(definition, func)
        return definition

    def tool(
        self,
        name: Optional[str] = None,
        description: str = "",
        parameters: Optional[dict[str, Any]] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register``."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name or func.__name__, func, description=description, parameters=parameters)
            return func

        return decorator

    def get(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def definitions(self) -> list[ToolDefinition]:
        """Definitions of every registered tool, in registration order."""
        return [tool.definition for tool in self._tools.values()]

    def to_llm_list(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI function calling format."""
        return [tool.definition.to_llm_format() for tool in self._tools.values()]

    async def on_tool_call_requested(
        self,
        session_id: str,
        agent: Agent,
        user_message: Optional[str],
        tool_call: ToolCall,
    ) -> ToolExecutionResult:
        """Execute a tool call.

        Args:
            session_id: Session key
            agent: Agent that requested the call
            user_message: User message of the turn
            tool_call: The call, with raw JSON arguments

        Returns:
            Execution result; never raises for tool-level failures
        """
        tool = self.get(tool_call.name)
        if tool is None:
            return ToolExecutionResult.error(f"Tool not found: {tool_call.name}")

        try:
            arguments = json.loads(tool_call.arguments or "{}")
        except json.JSONDecodeError as e:
            return ToolExecutionResult.error(f"Invalid JSON arguments: {e}")
        if not isinstance(arguments, dict):
            return ToolExecutionResult.error("Tool arguments must be a JSON object")

        logger.debug(f"Executing tool '{tool_call.name}' for agent '{agent.identifier}' in {session_id}")
        try:
            result = await tool.execute(**arguments)
        except Exception as e:
            logger.warning(f"Tool '{tool_call.name}' failed: {e}")
            return ToolExecutionResult.error(f"{type(e).__name__}: {e}")

        if isinstance(result, ToolExecutionResult):
            return result
        return ToolExecutionResult.success(result)
