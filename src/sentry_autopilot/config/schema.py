"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Monorepo layout guesses tried after the bare and src/-prefixed paths
DEFAULT_CANDIDATE_PREFIXES = [
    "apps/web/",
    "apps/frontend/",
    "frontend/",
    "client/",
    "packages/web/",
]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _check_http_url(value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"Invalid URL: {value}. Expected http:// or https://")
    return value.rstrip("/")


class SentryConfig(BaseModel):
    """Sentry API configuration."""

    base_url: str = "https://sentry.io/api/0"
    auth_token: str = ""
    org_slug: str = ""
    project_slug: str = ""

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_base_url(cls, v: Any) -> Any:
        """Validate the API base URL, falling back to the default when blank."""
        v = _blank_to_none(v)
        if v is None:
            return "https://sentry.io/api/0"
        return _check_http_url(str(v))

    @field_validator("auth_token", "org_slug", "project_slug", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        """Trim whitespace; blanks become empty strings."""
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class GitHubConfig(BaseModel):
    """GitHub API configuration."""

    base_url: str = "https://api.github.com"
    web_url: str = "https://github.com"
    token: str = ""
    owner: str = ""
    repo: str = ""
    ref: str = "main"

    @field_validator("base_url", "web_url", mode="before")
    @classmethod
    def validate_urls(cls, v: Any, info: ValidationInfo) -> Any:
        """Validate URLs, falling back to the defaults when blank."""
        v = _blank_to_none(v)
        if v is None:
            if info.field_name == "base_url":
                return "https://api.github.com"
            return "https://github.com"
        return _check_http_url(str(v))

    @field_validator("token", "owner", "repo", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        """Trim whitespace; blanks become empty strings."""
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("ref", mode="before")
    @classmethod
    def default_ref(cls, v: Any) -> Any:
        """Blank refs fall back to ``main``."""
        v = _blank_to_none(v)
        return "main" if v is None else str(v).strip()

    @model_validator(mode="after")
    def check_repository(self) -> "GitHubConfig":
        """Validate owner/repo when both are configured."""
        from ..utils.security import validate_repo_name

        if self.owner and self.repo and not validate_repo_name(self.full_name):
            raise ValueError(f"Invalid repository format: {self.full_name}. Expected: owner/repo")
        if bool(self.owner) != bool(self.repo):
            raise ValueError("GitHub owner and repo must be configured together")
        return self

    @property
    def full_name(self) -> str:
        """Repository in ``owner/repo`` form."""
        return f"{self.owner}/{self.repo}"


class DiagnosisConfig(BaseModel):
    """Diagnosis and context extraction configuration."""

    default_radius: int = Field(12, ge=1, le=200)
    propose_radius: int = Field(80, ge=1, le=200)
    preview_chars: int = Field(2000, ge=1)
    candidate_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_CANDIDATE_PREFIXES))
    redact_secrets: bool = False

    @field_validator("candidate_prefixes")
    @classmethod
    def validate_prefixes(cls, v: list[str]) -> list[str]:
        """Prefixes are repository-relative directories ending in a slash."""
        cleaned: list[str] = []
        for prefix in v:
            prefix = prefix.strip().lstrip("/")
            if not prefix or ".." in prefix.split("/"):
                raise ValueError(f"Invalid candidate prefix: {prefix!r}")
            cleaned.append(prefix if prefix.endswith("/") else f"{prefix}/")
        return cleaned


class HttpConfig(BaseModel):
    """HTTP client configuration shared by the upstream clients."""

    timeout: float = Field(30.0, gt=0, le=300)


class ServerConfig(BaseModel):
    """MCP server configuration."""

    name: str = "sentry-autopilot"
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(3000, ge=1, le=65535)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/sentry-autopilot/server.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class AppConfig(BaseSettings):
    """Root configuration for Sentry Autopilot."""

    sentry: SentryConfig = SentryConfig()
    github: GitHubConfig = GitHubConfig()
    diagnosis: DiagnosisConfig = DiagnosisConfig()
    http: HttpConfig = HttpConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )
