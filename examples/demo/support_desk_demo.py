#!/usr/bin/env python3
"""
Support Desk Demo

A supervisor agent routes requests to an "orders" agent (with an external
order lookup tool) and an "invoices" agent.

Run this demo:
    python examples/demo/support_desk_demo.py

Or with custom settings:
    OPENAI_BASE_URL=https://api.siliconflow.cn/v1 \
    OPENAI_API_KEY=your-key \
    DEFAULT_MODEL=Qwen/Qwen3-8B \
    python examples/demo/support_desk_demo.py
"""

import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

from agent_relay import FunctionToolExecutor, OrchestrationEngine, load_relay_config
from agent_relay.cli.main import EchoAnswerListener
from agent_relay.utils import generate_session_id, setup_logging

load_dotenv()

CONFIG_PATH = Path(__file__).parent.parent / "config" / "relay.yaml"

ORDERS = {
    "A-1001": {"status": "shipped", "carrier": "UPS", "eta": "2 days"},
    "A-1002": {"status": "processing"},
}

tools = FunctionToolExecutor()


@tools.tool(name="lookup_order", description="Look up an order by its number.")
def lookup_order(order_number: str) -> dict:
    order = ORDERS.get(order_number.strip().upper())
    if order is None:
        raise KeyError(f"Order {order_number} does not exist")
    return order


async def run_demo() -> None:
    """Run a short scripted conversation."""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key or api_key.startswith("sk-xxxxx"):
        print("⚠️  OPENAI_API_KEY not set. Put it in .env or export it before running the demo.")
        return

    config = load_relay_config(CONFIG_PATH)
    engine = OrchestrationEngine.from_config(
        config,
        tool_listener=tools,
        answer_listeners=[EchoAnswerListener()],
    )
    engine.add_error_listener(lambda failure: print(f"✗ {failure.agent_id}: {failure.error}"))

    session_id = generate_session_id()
    for message in ["Hi! Where is my order?", "It's A-1001"]:
        print(f"\nyou: {message}")
        await engine.converse(session_id, message)


if __name__ == "__main__":
    setup_logging(level="WARNING")
    asyncio.run(run_demo())
