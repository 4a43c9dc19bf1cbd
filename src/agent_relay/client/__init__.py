"""Model clients."""

from .base import ModelClient
from .openai_client import OpenAIModelClient

__all__ = [
    "ModelClient",
    "OpenAIModelClient",
]
