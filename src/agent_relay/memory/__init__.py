"""Episodic memory stores."""

from .episodic import EpisodicMemoryStore, InMemoryEpisodicStore

__all__ = [
    "EpisodicMemoryStore",
    "InMemoryEpisodicStore",
]
