"""Supervisor prompt generation.

A supervisor is an agent that only orchestrates its children. Its
system prompt can be generated from its goal instead of being written
by hand.
"""

from pydantic import BaseModel, Field

DEFAULT_LANGUAGE = "pt-BR"
DEFAULT_TONE = "concise"


class SupervisorSpec(BaseModel):
    """Inputs for ``build_supervisor_prompt``.

    Attributes:
        goal: What the supervisor is responsible for
        language: Response language, ``pt-BR`` when blank
        tone: Response tone, ``concise`` when blank
        additional_instructions: Appended verbatim when not blank
    """

    goal: str = Field(..., min_length=1)
    language: str | None = None
    tone: str | None = None
    additional_instructions: str | None = None


def _blank_to_default(value: str | None, default: str) -> str:
    return value.strip() if value and value.strip() else default


def build_supervisor_prompt(spec: SupervisorSpec, child_count: int) -> str:
    """Render the supervisor system prompt.

    Args:
        spec: Supervisor inputs
        child_count: Number of child agents linked to the supervisor

    Returns:
        Prompt text
    """
    language = _blank_to_default(spec.language, DEFAULT_LANGUAGE)
    tone = _blank_to_default(spec.tone, DEFAULT_TONE)

    sections = [
        "You are the SUPERVISOR agent.\n",
        f"OBJECTIVE:\n{spec.goal}\n",
        "PROCEDURAL RULES (STRICT):\n"
        "- You only orchestrate; you do NOT execute domain work yourself.\n"
        "- Routing decisions must be performed using the routing tool (when enabled).\n"
        "- If the user request is ambiguous, ask ONE clarification question and wait.\n"
        "- Never claim an action is completed unless a tool/agent result confirms it.\n",
        "LANGUAGE & STYLE:\n"
        f"- Respond in: {language}\n"
        f"- Tone: {tone}\n"
        "- Keep responses short and actionable.\n",
        f"CONTEXT:\n- Linked child agents: {child_count}\n",
    ]
    if spec.additional_instructions and spec.additional_instructions.strip():
        sections.append(f"ADDITIONAL INSTRUCTIONS:\n{spec.additional_instructions}\n")

    return "\n".join(sections)
