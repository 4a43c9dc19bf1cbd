"""System message templates used during handoffs.

Templates use Jinja syntax and are rendered through ``TemplateRenderer``.
"""

from ..models import Status

AGENT_REQUEST_HANDOFF = """\
HANDOFF: AGENT-REQUEST

Objective: {{ objective }}
{% if input %}
Input: {{ input }}
{% endif %}
Constraints:
 - Do not assume missing data.
"""

PARENT_SELF_REFLECTION_HANDOFF = """\
HANDOFF: SELF-REFLECTION (PARENT)

Objective:
Analyze whether there is still anything missing to be executed in order to fully complete the request.

Summary (what was done by the child agent):
{{ summary }}

Completion rule:
- If no further actions, inputs, or delegations are required, produce a final closing message
  summarizing the outcome and confirming that the request has been fully completed.

Constraints:
- Do not assume missing data.
- Use the summary and episodic context to determine what is missing or if execution is complete.
- Do not expand or redefine the original objective.
"""

CHILD_FINISHED_HANDOFF = """\
HANDOFF: CHILD FINISHED

The agent '{{ child_name }}' finished its execution. Result:
{{ content }}

Check whether all required tasks have been completed.
If so, produce the final user-facing response.
If not, continue processing until the completion criteria are met.
"""

SELF_REFLECTION_HANDOFF = """\
HANDOFF: SELF-REFLECTION

You are performing an internal self-reflection step within an agentic execution flow.

Your role is to evaluate the current execution state based on:
- The objective you were assigned
- What has already been executed
- The current and historical execution context

Guidelines:
- Reflect only on what has already happened and what is still missing.
- Do not perform domain work, calculations, or data transformations.
- Do not assume or infer missing information.
- Do not expand or redefine the objective.
- Do not communicate decisions directly to the user.

Focus:
- Identify gaps, incomplete steps, or missing information.
- Analyze whether there are pending actions waiting to be executed (e.g., agents selected but not yet executed, queued or pending executions).
- Determine if execution can continue, must pause, or must wait for a pending execution to be processed.

This step exists solely to support correct continuation or completion of the execution flow.
"""

NEW_SESSION_HANDOFF = (
    "Process the user message and identify whether all the required data is collected "
    "and the execution is finished, calling the specific tool."
)

STATUS_USAGE = {
    Status.USER_INPUT_REQUEST: "The system is explicitly requesting information from the user to continue execution.",
    Status.WAIT_USER_INPUT: "Execution is blocked while waiting for the user to provide the requested information.",
    Status.AGENT_EXECUTION: "An agent has started executing the assigned objective.",
    Status.WAIT_AGENT_EXECUTION: "The system delegated work to an agent and is actively waiting for its execution or result.",
    Status.FINISHED_AGENT_EXECUTION: "The agent has completed execution of its assigned objective.",
    Status.WAIT_TOOL_EXECUTION: "A tool execution was triggered and the system is waiting for its result.",
    Status.FINISHED_TOOL_EXECUTION: "The tool finished execution and its result has been received.",
    Status.FINISHED: "The overall objective has been fully completed.",
}

EPISODIC_MEMORY = """\
# EPISODIC MEMORY.

episodic memory purpose:
- Capture the current state and the execution history so the system can resume correctly:
  what happened so far, where it stopped, and what is expected next.

StatusType usage:
{% for status, usage in status_usage.items() %}
 - {{ status.value }}: {{ usage }}
{% endfor %}

Content guidelines:
- Clearly reflect the latest state while considering the full history.

Current execution state (most recent):
- status: {{ current.status.value }}
- context: {{ current.content | trim }}

Execution history (oldest -> newest):
{% for record in records %}
{{ loop.index }}. {{ record.status.value }} - {{ record.content | trim }}
{% endfor %}"""

# Memory record contents
DELEGATOR_WAITING = "Waiting for agent '{name}' execution with the aim of: {objective}"
TARGET_INVOKED = "You are being invoked to fulfill the following objective: {objective}"
CHILD_FINISHED = "Agent execution finished. Summary: {summary}"
ASKED_USER = "The agent then asked the user the following question: {content}"
USER_INPUT = "The user input is: {content}"
TOOL_WAITING = "The system is waiting for the tool '{name}' execution to complete."
TOOL_FINISHED = "The tool '{name}' finished with status {status}. Details: {details}"
