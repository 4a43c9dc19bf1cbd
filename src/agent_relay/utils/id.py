"""ID generation utilities for agent-relay.

This module provides UUID v4 based identifiers for sessions, model
requests and tool calls.
"""

import uuid


def generate_uuid() -> str:
    """Generate a UUID v4 as a string.

    Returns:
        UUID v4 string (without dashes)
    """
    return uuid.uuid4().hex


def generate_session_id() -> str:
    """Generate a unique session identifier.

    Returns:
        Session ID prefixed with "session_"
    """
    return f"session_{generate_uuid()}"


def generate_request_id() -> str:
    """Generate a unique identifier for a single model call.

    Returns:
        Request ID prefixed with "req_"
    """
    return f"req_{generate_uuid()}"


def generate_tool_call_id() -> str:
    """Generate a tool call identifier for providers that omit one.

    Returns:
        Tool call ID prefixed with "call_"
    """
    return f"call_{generate_uuid()}"
