"""agent-relay.

Orchestrates a tree of LLM agents that delegate sub-tasks to each other,
keeping a per-session episodic memory for every agent.
"""

from .client import ModelClient, OpenAIModelClient
from .config import (
    AgentConfig,
    EngineConfig,
    LLMEndpointConfig,
    ProviderConfig,
    RelayConfig,
    load_relay_config,
)
from .errors import (
    GraphError,
    ModelCallError,
    NoParentError,
    OrchestrationError,
    PayloadParseError,
    ResolutionError,
)
from .execution import TaskDispatcher
from .graph import AgentGraph, AgentGraphBuilder, build_agent_graph
from .memory import EpisodicMemoryStore, InMemoryEpisodicStore
from .models import (
    Agent,
    AgentRequest,
    Answer,
    ModelRequest,
    ModelResponse,
    RecordEvent,
    Status,
    ToolCall,
    ToolDefinition,
    ToolExecutionResult,
)
from .orchestration import AnswerSink, OrchestrationEngine, StepFailure, ToolKind, ToolRouter
from .prompt import ContextAssembler, JinjaTemplateRenderer
from .tools import FunctionToolExecutor, ToolListener

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "Agent",
    "Status",
    "RecordEvent",
    "ToolDefinition",
    "ToolCall",
    "ToolExecutionResult",
    "AgentRequest",
    "Answer",
    "ModelRequest",
    "ModelResponse",
    # Configuration
    "RelayConfig",
    "AgentConfig",
    "ProviderConfig",
    "LLMEndpointConfig",
    "EngineConfig",
    "load_relay_config",
    # Graph
    "AgentGraph",
    "AgentGraphBuilder",
    "build_agent_graph",
    # Memory
    "EpisodicMemoryStore",
    "InMemoryEpisodicStore",
    # Orchestration
    "OrchestrationEngine",
    "StepFailure",
    "ToolRouter",
    "ToolKind",
    "AnswerSink",
    "ContextAssembler",
    "JinjaTemplateRenderer",
    "TaskDispatcher",
    # Model and tools
    "ModelClient",
    "OpenAIModelClient",
    "ToolListener",
    "FunctionToolExecutor",
    # Errors
    "OrchestrationError",
    "GraphError",
    "ResolutionError",
    "NoParentError",
    "PayloadParseError",
    "ModelCallError",
]
