"""Unit tests for the command line interface."""

import json
import logging

import pytest
from click.testing import CliRunner

from agent_relay.cli import main

CONFIG = """\
llm:
  endpoint: http://localhost:11434/v1
  api_type: ollama
provider:
  model: llama3
agent:
  identifier: supervisor
  name: supervisor
  goal: Route requests
  supervisor:
    tone: formal
  children:
    - identifier: orders
      name: orders
      goal: Track orders
      prompt: You track orders.
      tools:
        - name: lookup_order
          description: Look up an order
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "relay.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestAgentsCommand:
    """Tests for 'agents'."""

    def test_table(self, runner, config_file):
        """Test the table listing."""
        result = runner.invoke(main, ["--config", str(config_file), "agents"])
        assert result.exit_code == 0, result.output
        assert "supervisor" in result.output
        assert "lookup_order, route_to_parent, record_event" in result.output

    def test_json(self, runner, config_file):
        """Test the JSON listing."""
        result = runner.invoke(main, ["--config", str(config_file), "agents", "--format", "json"])
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [row["identifier"] for row in rows] == ["supervisor", "orders"]
        assert rows[1]["parent"] == "supervisor"
        assert rows[0]["tools"] == ["route_to_agent", "record_event"]


class TestValidateCommand:
    """Tests for 'validate'."""

    def test_valid(self, runner, config_file):
        """Test validating a correct configuration."""
        result = runner.invoke(main, ["--config", str(config_file), "validate"])
        assert result.exit_code == 0, result.output
        assert "2 agents" in result.output

    def test_invalid(self, runner, tmp_path):
        """Test that invalid configuration is reported as an error."""
        path = tmp_path / "relay.yaml"
        path.write_text("llm:\n  endpoint: x\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", str(path), "validate"])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output
