"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AppConfig,
    DiagnosisConfig,
    GitHubConfig,
    HttpConfig,
    LoggingConfig,
    SentryConfig,
    ServerConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "AppConfig",
    # Sections
    "DiagnosisConfig",
    "GitHubConfig",
    "HttpConfig",
    "LoggingConfig",
    "SentryConfig",
    "ServerConfig",
]
