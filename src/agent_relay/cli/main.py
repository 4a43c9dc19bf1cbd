"""Main CLI entry point for agent-relay.

This module provides commands to inspect an agent tree and to talk to it.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from tabulate import tabulate

from .. import __version__
from ..config import RelayConfig, load_relay_config
from ..errors import GraphError
from ..graph import AgentGraph, build_agent_graph
from ..models import Answer
from ..orchestration import OrchestrationEngine, StepFailure
from ..utils import LoggerContext, generate_session_id, get_logger, setup_logging

logger = get_logger(__name__)


class EchoAnswerListener:
    """Prints answers to the terminal."""

    def __init__(self, show_interim: bool = True) -> None:
        self.show_interim = show_interim

    def on_answer(self, answer: Answer) -> None:
        if answer.interim:
            if self.show_interim:
                click.echo(click.style(f"  ({answer.agent_name}) {answer.text}", dim=True))
            return
        click.echo(f"{click.style(answer.agent_name, fg='green', bold=True)}: {answer.text}")


def _load(ctx: click.Context) -> tuple[RelayConfig, AgentGraph]:
    config_path: Optional[Path] = ctx.obj.get("config_path")
    try:
        config = load_relay_config(config_path)
        return config, build_agent_graph(config)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except (ValidationError, GraphError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")


def _report_failure(failure: StepFailure) -> None:
    click.echo(
        click.style(f"Step of agent '{failure.agent_id}' failed: {failure.error}", fg="red"),
        err=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Relay configuration file (default: ~/.agent-relay/relay.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """agent-relay CLI.

    Inspect and talk to a tree of cooperating LLM agents.
    """
    load_dotenv()
    setup_logging(level="DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@main.command()
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", help="Output format")
@click.pass_context
def agents(ctx: click.Context, output_format: str) -> None:
    """Show the agent tree and the tools each agent is offered."""
    _, graph = _load(ctx)

    rows = []
    for depth, agent in graph.walk():
        parent = graph.parent_of(agent)
        rows.append({
            "identifier": agent.identifier,
            "name": agent.name,
            "parent": parent.identifier if parent else None,
            "depth": depth,
            "model": agent.provider.model,
            "tools": [tool.name for tool in graph.tools(agent)],
        })

    if output_format == "json":
        click.echo(json.dumps(rows, indent=2))
        return

    table = [
        ["  " * row["depth"] + row["identifier"], row["name"], row["model"], ", ".join(row["tools"])]
        for row in rows
    ]
    click.echo(tabulate(table, headers=["Agent", "Name", "Model", "Tools"], tablefmt="grid"))


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configuration and build the agent tree."""
    config, graph = _load(ctx)
    click.echo(f"✓ Configuration is valid: {len(graph)} agents, root '{graph.root.identifier}'")
    click.echo(f"  Endpoint: {config.llm.endpoint} ({config.llm.api_type})")


@main.command()
@click.argument("message")
@click.option("--session", "session_id", default=None, help="Session ID (a new one when omitted)")
@click.option("--agent", "agent_id", default=None, help="Agent to address (the root when omitted)")
@click.pass_context
def ask(ctx: click.Context, message: str, session_id: Optional[str], agent_id: Optional[str]) -> None:
    """Send a single MESSAGE and print the answers."""
    config, _ = _load(ctx)
    engine = OrchestrationEngine.from_config(config, answer_listeners=[EchoAnswerListener()])
    engine.add_error_listener(_report_failure)
    asyncio.run(engine.converse(session_id or generate_session_id(), message, agent_id))


@main.command()
@click.option("--session", "session_id", default=None, help="Session ID (a new one when omitted)")
@click.option("--quiet", is_flag=True, help="Hide interim messages")
@click.pass_context
def chat(ctx: click.Context, session_id: Optional[str], quiet: bool) -> None:
    """Start an interactive conversation. Type 'exit' to quit."""
    config, _ = _load(ctx)
    engine = OrchestrationEngine.from_config(config, answer_listeners=[EchoAnswerListener(show_interim=not quiet)])
    engine.add_error_listener(_report_failure)
    session_id = session_id or generate_session_id()

    click.echo(f"Session {session_id}. Type 'exit' to quit.")
    with LoggerContext(logger, {"session_id": session_id}):
        asyncio.run(_chat_loop(engine, session_id))


async def _chat_loop(engine: OrchestrationEngine, session_id: str) -> None:
    while True:
        try:
            message = await asyncio.to_thread(click.prompt, click.style("you", fg="cyan", bold=True))
        except (EOFError, click.Abort):
            click.echo()
            break
        if message.strip().lower() in {"exit", "quit"}:
            break
        if not message.strip():
            continue
        logger.debug(f"Sending message to '{engine.active_agent(session_id).identifier}'")
        await engine.converse(session_id, message)
    await engine.shutdown()


if __name__ == "__main__":
    main()
