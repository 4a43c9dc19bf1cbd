"""Template rendering for agent prompts.

Agent prompts and handoff messages are Jinja templates rendered in a
sandboxed environment, so prompt text loaded from configuration cannot
reach into Python internals.
"""

from functools import lru_cache
from typing import Any, Mapping, Protocol

from jinja2 import Template
from jinja2.sandbox import SandboxedEnvironment


class TemplateRenderer(Protocol):
    """Renders a template string with a set of variables."""

    def render(self, template: str, variables: Mapping[str, Any]) -> str:
        ...


class JinjaTemplateRenderer:
    """``TemplateRenderer`` backed by a Jinja2 sandboxed environment.

    Unknown variables render as empty strings. Compiled templates are
    cached by source text.
    """

    def __init__(self, cache_size: int = 256) -> None:
        """Initialize the renderer.

        Args:
            cache_size: Number of compiled templates to keep
        """
        self.env = SandboxedEnvironment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=False)
        self._compile = lru_cache(maxsize=cache_size)(self._compile_uncached)

    def render(self, template: str, variables: Mapping[str, Any]) -> str:
        """Render a template.

        Args:
            template: Template source
            variables: Template variables

        Returns:
            Rendered text
        """
        return self._compile(template).render(**dict(variables))

    def _compile_uncached(self, template: str) -> Template:
        return self.env.from_string(template)
