"""Command-line interface for agent-relay."""

from .main import main

__all__ = ["main"]
