"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sentry_autopilot.config.loader import load_config, substitute_env_vars, validate_config
from sentry_autopilot.config.schema import (
    AppConfig,
    DiagnosisConfig,
    GitHubConfig,
    SentryConfig,
    ServerConfig,
)

FULL_YAML = """
sentry:
  auth_token: ${TEST_SENTRY_TOKEN}
  org_slug: acme
  project_slug: web

github:
  token: ${TEST_GITHUB_TOKEN}
  owner: acme
  repo: web
  ref: ${TEST_GITHUB_REF:-main}

diagnosis:
  default_radius: 10
  candidate_prefixes:
    - apps/site
    - web/

server:
  transport: sse
  port: 8080
"""


class TestSubstituteEnvVars:
    """Test environment variable substitution."""

    def test_substitute_single_var(self, monkeypatch):
        """Test substituting a single environment variable."""
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert substitute_env_vars("Value is ${TEST_VAR}") == "Value is test_value"

    def test_substitute_multiple_vars(self, monkeypatch):
        """Test substituting multiple environment variables."""
        monkeypatch.setenv("VAR1", "value1")
        monkeypatch.setenv("VAR2", "value2")
        assert substitute_env_vars("${VAR1} and ${VAR2}") == "value1 and value2"

    def test_default_used_when_unset(self, monkeypatch):
        """Test ${VAR:-default} falls back to the default."""
        monkeypatch.delenv("UNSET_VAR", raising=False)
        assert substitute_env_vars("ref: ${UNSET_VAR:-main}") == "ref: main"

    def test_default_ignored_when_set(self, monkeypatch):
        """Test a set variable wins over its default."""
        monkeypatch.setenv("SET_VAR", "release")
        assert substitute_env_vars("${SET_VAR:-main}") == "release"

    def test_missing_env_var_raises(self, monkeypatch):
        """Test that missing environment variables raise ValueError."""
        monkeypatch.delenv("MISSING", raising=False)
        with pytest.raises(ValueError, match="Environment variable MISSING not found"):
            substitute_env_vars("Value is ${MISSING}")

    def test_no_substitution_needed(self):
        """Test text without environment variables passes through unchanged."""
        assert substitute_env_vars("plain text without vars") == "plain text without vars"


class TestSentryConfig:
    """Test SentryConfig validation."""

    def test_defaults(self):
        """Test the hosted Sentry API is the default."""
        config = SentryConfig()
        assert config.base_url == "https://sentry.io/api/0"
        assert config.auth_token == ""

    def test_trailing_slash_removed(self):
        """Test a self-hosted base URL is normalized."""
        config = SentryConfig(base_url="https://sentry.example.com/api/0/")
        assert config.base_url == "https://sentry.example.com/api/0"

    def test_invalid_url_rejected(self):
        """Test a non-HTTP base URL is rejected."""
        with pytest.raises(ValidationError, match="Invalid URL"):
            SentryConfig(base_url="ftp://sentry.example.com")

    def test_blank_url_uses_default(self):
        """Test an empty base URL from an unset variable falls back."""
        assert SentryConfig(base_url="").base_url == "https://sentry.io/api/0"

    def test_values_are_trimmed(self):
        """Test whitespace around slugs and tokens is removed."""
        config = SentryConfig(auth_token=" tok ", org_slug=" acme ")
        assert config.auth_token == "tok"
        assert config.org_slug == "acme"


class TestGitHubConfig:
    """Test GitHubConfig validation."""

    def test_valid_github_config(self):
        """Test creating valid GitHub config."""
        config = GitHubConfig(owner="acme", repo="web", token="ghp_x")
        assert config.full_name == "acme/web"
        assert config.ref == "main"

    @pytest.mark.parametrize(
        "owner,repo",
        [
            ("owner", "repo; rm -rf /"),
            ("owner", "repo$(whoami)"),
            ("..", "../etc/passwd"),
            ("owner", "repo\nmalicious"),
            ("owner", "repo|cat"),
        ],
    )
    def test_invalid_repo_name_rejected(self, owner, repo):
        """Test that malicious repository names are rejected."""
        with pytest.raises(ValidationError, match="Invalid repository format"):
            GitHubConfig(owner=owner, repo=repo)

    def test_owner_without_repo_rejected(self):
        """Test owner and repo must come together."""
        with pytest.raises(ValidationError, match="configured together"):
            GitHubConfig(owner="acme")

    def test_blank_ref_defaults_to_main(self):
        """Test an empty ref falls back to main."""
        assert GitHubConfig(ref="  ").ref == "main"


class TestDiagnosisConfig:
    """Test DiagnosisConfig validation."""

    def test_default_values(self):
        """Test default diagnosis settings."""
        config = DiagnosisConfig()
        assert config.default_radius == 12
        assert config.propose_radius == 80
        assert config.preview_chars == 2000
        assert config.candidate_prefixes[0] == "apps/web/"
        assert config.redact_secrets is False

    def test_radius_bounds(self):
        """Test radius must be between 1 and 200."""
        DiagnosisConfig(default_radius=1)
        DiagnosisConfig(default_radius=200)

        with pytest.raises(ValidationError):
            DiagnosisConfig(default_radius=0)
        with pytest.raises(ValidationError):
            DiagnosisConfig(default_radius=201)

    def test_prefixes_normalized(self):
        """Test prefixes get a trailing slash and lose a leading one."""
        config = DiagnosisConfig(candidate_prefixes=["/apps/site", "web/"])
        assert config.candidate_prefixes == ["apps/site/", "web/"]

    def test_parent_prefix_rejected(self):
        """Test a prefix escaping the repository is rejected."""
        with pytest.raises(ValidationError, match="Invalid candidate prefix"):
            DiagnosisConfig(candidate_prefixes=["../secrets"])


class TestServerConfig:
    """Test ServerConfig validation."""

    def test_unknown_transport_rejected(self):
        """Test only supported MCP transports are accepted."""
        with pytest.raises(ValidationError):
            ServerConfig(transport="websocket")


class TestLoadConfig:
    """Test configuration loading from YAML and the environment."""

    def test_load_valid_config(self, tmp_path, monkeypatch):
        """Test loading a valid configuration file."""
        monkeypatch.setenv("TEST_SENTRY_TOKEN", "sntrys_abc")
        monkeypatch.setenv("TEST_GITHUB_TOKEN", "ghp_abc")
        monkeypatch.delenv("TEST_GITHUB_REF", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(FULL_YAML)

        config = load_config(path)

        assert config.sentry.auth_token == "sntrys_abc"
        assert config.github.full_name == "acme/web"
        assert config.github.ref == "main"
        assert config.diagnosis.default_radius == 10
        assert config.diagnosis.candidate_prefixes == ["apps/site/", "web/"]
        assert config.server.transport == "sse"
        assert config.server.port == 8080

    def test_load_config_missing_file(self):
        """Test that loading non-existent file raises error."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("/nonexistent/config.yaml"))

    def test_load_config_missing_env_var(self, tmp_path, monkeypatch):
        """Test that missing environment variable raises error."""
        monkeypatch.delenv("MISSING_VAR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("sentry:\n  auth_token: ${MISSING_VAR}\n")

        with pytest.raises(ValueError, match="Environment variable MISSING_VAR not found"):
            load_config(path)

    def test_load_config_not_a_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(path)

    def test_empty_file_gives_defaults(self, tmp_path):
        """Test an empty file loads the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.server.transport == "stdio"
        assert config.github.ref == "main"

    def test_load_from_environment(self, tmp_path, monkeypatch):
        """Test nested environment variables configure the server without a file."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SENTRY__ORG_SLUG", "acme")
        monkeypatch.setenv("GITHUB__OWNER", "acme")
        monkeypatch.setenv("GITHUB__REPO", "web")

        config = load_config()

        assert config.sentry.org_slug == "acme"
        assert config.github.full_name == "acme/web"

    def test_strict_reports_missing_values(self, tmp_path):
        """Test strict loading lists every missing credential."""
        path = tmp_path / "config.yaml"
        path.write_text("sentry:\n  org_slug: acme\n")

        with pytest.raises(ValueError, match="Missing required configuration") as exc_info:
            load_config(path, strict=True)

        message = str(exc_info.value)
        assert "sentry.auth_token" in message
        assert "sentry.org_slug" not in message
        assert "github.repo" in message


class TestValidateConfig:
    """Test cross-field configuration validation."""

    def test_radii_are_independent(self, tmp_path, monkeypatch):
        """Test a default radius above the propose radius is accepted."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DIAGNOSIS__DEFAULT_RADIUS", "100")

        config = load_config()
        validate_config(config)

        assert config.diagnosis.default_radius == 100
        assert config.diagnosis.propose_radius == 80

    def test_complete_config_passes_strict(self):
        """Test a complete configuration passes strict validation."""
        config = AppConfig.model_validate(
            {
                "sentry": {"auth_token": "t", "org_slug": "acme", "project_slug": "web"},
                "github": {"token": "g", "owner": "acme", "repo": "web"},
            }
        )
        validate_config(config, strict=True)

