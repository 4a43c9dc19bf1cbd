"""Prompt rendering and context assembly."""

from .assembler import ContextAssembler
from .renderer import JinjaTemplateRenderer, TemplateRenderer

__all__ = [
    "ContextAssembler",
    "JinjaTemplateRenderer",
    "TemplateRenderer",
]
