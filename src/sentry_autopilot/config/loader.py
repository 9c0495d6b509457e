"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import AppConfig


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    ``${VAR_NAME:-default}`` falls back to ``default`` when the variable is unset.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        value = os.environ.get(var_name)
        if value is None:
            if default is not None:
                return default
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}:]+)(?::-([^}]*))?\}", replacer, text)


def load_config(path: Path | None = None, strict: bool = False) -> AppConfig:
    """
    Load configuration from a YAML file, or from the environment alone.

    When ``path`` is None the configuration comes from environment variables
    (nested keys use ``__``, e.g. ``SENTRY__AUTH_TOKEN``) and an optional
    ``.env`` file.

    Args:
        path: Path to YAML configuration file
        strict: Require every credential and identifier needed by the tools

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if path is None:
        config = AppConfig()
    else:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with path.open() as f:
            raw_yaml = f.read()

        yaml_with_env = substitute_env_vars(raw_yaml)
        config_dict = yaml.safe_load(yaml_with_env) or {}
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")

        config = AppConfig.model_validate(config_dict)

    validate_config(config, strict=strict)

    return config


def validate_config(config: AppConfig, strict: bool = False) -> None:
    """
    Perform additional cross-field validation.

    The server can start without credentials (each tool then fails with the
    upstream's authentication error), so the completeness checks only run
    when ``strict`` is set.

    Args:
        config: Configuration to validate
        strict: Require every credential and identifier needed by the tools

    Raises:
        ValueError: If strict and the configuration is incomplete
    """
    if not strict:
        return

    missing: list[str] = []
    if not config.sentry.auth_token:
        missing.append("sentry.auth_token")
    if not config.sentry.org_slug:
        missing.append("sentry.org_slug")
    if not config.sentry.project_slug:
        missing.append("sentry.project_slug")
    if not config.github.token:
        missing.append("github.token")
    if not config.github.owner:
        missing.append("github.owner")
    if not config.github.repo:
        missing.append("github.repo")

    if missing:
        raise ValueError(f"Missing required configuration: {', '.join(missing)}")
