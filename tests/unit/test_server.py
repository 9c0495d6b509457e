"""Tests for server assembly and the command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from sentry_autopilot.__main__ import main, parse_args
from sentry_autopilot.config.schema import AppConfig
from sentry_autopilot.server import create_server

VALID_YAML = """
sentry:
  auth_token: sntrys_test
  org_slug: acme
  project_slug: web
github:
  token: ghp_test
  owner: acme
  repo: web
logging:
  format: console
"""


class TestCreateServer:
    """Test wiring of clients and tools."""

    async def test_server_exposes_tools(self) -> None:
        """Test the assembled server registers every tool and owns its clients."""
        config = AppConfig.model_validate(
            {
                "github": {"owner": "acme", "repo": "web"},
                "server": {"name": "autopilot-test", "transport": "sse", "port": 8123},
            }
        )

        server = create_server(config)
        try:
            tools = await server.mcp.list_tools()
            assert len(tools) == 8
            assert server.mcp.name == "autopilot-test"
            assert server.transport == "sse"
            assert server.github.default_ref == "main"
        finally:
            await server.close()


class TestParseArgs:
    """Test command line parsing."""

    def test_defaults(self) -> None:
        """Test the environment is the default configuration source."""
        args = parse_args([])

        assert args.config is None
        assert args.transport is None
        assert args.format == "console"
        assert not args.dry_run
        assert not args.check_config

    def test_flags(self) -> None:
        """Test every flag is parsed."""
        args = parse_args(
            ["-c", "cfg.yaml", "--debug", "--format", "json", "--transport", "sse", "--dry-run"]
        )

        assert args.config == Path("cfg.yaml")
        assert args.debug
        assert args.format == "json"
        assert args.transport == "sse"
        assert args.dry_run

    def test_unknown_transport_rejected(self) -> None:
        """Test argparse refuses unsupported transports."""
        with pytest.raises(SystemExit):
            parse_args(["--transport", "websocket"])


class TestMain:
    """Test the entry point exit codes."""

    def test_dry_run_valid_config(self, tmp_path: Path) -> None:
        """Test a valid file passes the dry run."""
        path = tmp_path / "config.yaml"
        path.write_text(VALID_YAML)

        assert main(["--config", str(path), "--dry-run"]) == 0

    def test_check_config_passes_when_complete(self, tmp_path: Path) -> None:
        """Test strict validation passes with every credential set."""
        path = tmp_path / "config.yaml"
        path.write_text(VALID_YAML)

        assert main(["--config", str(path), "--check-config"]) == 0

    def test_check_config_fails_when_incomplete(self, tmp_path: Path) -> None:
        """Test strict validation fails without credentials."""
        path = tmp_path / "config.yaml"
        path.write_text("sentry:\n  org_slug: acme\n")

        assert main(["--config", str(path), "--check-config"]) == 1

    def test_missing_config_file(self, tmp_path: Path) -> None:
        """Test a missing file exits with an error."""
        assert main(["--config", str(tmp_path / "missing.yaml"), "--dry-run"]) == 1

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Test a schema violation exits with an error."""
        path = tmp_path / "config.yaml"
        path.write_text("diagnosis:\n  default_radius: 0\n")

        assert main(["--config", str(path), "--dry-run"]) == 1
