"""Configuration loading for mcp-terragrunt-docs.

Configuration is supplied by the host environment (e.g., MCP client config), not by the agent.
The GitHub token is deliberately not part of the config: it is resolved per tool call by
`credentials.resolve_github_token` so a rotated token takes effect without a restart.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import config_error

logger = logging.getLogger(__name__)

_VALID_LEVELS = ("NOTSET", "DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RepoConfig:
    """Where the documentation and issues live."""

    owner: str = "gruntwork-io"
    repo: str = "terragrunt"
    docs_path: str = "docs/_docs"
    api_base_url: str = "https://api.github.com"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Network and pagination limits."""

    total_timeout_s: float = 30.0
    connect_timeout_s: float = 5.0

    issues_per_page: int = 30
    # Ceiling for get_all_open_issues; a huge backlog must not mean unbounded requests.
    issues_max_pages: int = 10


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Log sinks. stderr is always on; stdout belongs to the MCP transport."""

    level: str = "INFO"
    file_enabled: bool = False
    file_path: Path = Path("./app.log")
    file_level: str = "DEBUG"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Top-level server configuration."""

    repo: RepoConfig = field(default_factory=RepoConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _parse_level(name: str, value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    level = value.strip().upper()
    if level not in _VALID_LEVELS:
        logger.warning('Invalid log level specified for %s: "%s". Defaulting to %s.', name, value, default)
        return default
    return "WARNING" if level == "WARN" else level


def _parse_int(name: str, value: str | None, default: int, *, minimum: int, maximum: int | None = None) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise config_error(f"{name} must be an integer") from exc
    if parsed < minimum or (maximum is not None and parsed > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise config_error(f"{name} must be {bounds}")
    return parsed


def _parse_timeout(name: str, value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise config_error(f"{name} must be a number") from exc
    if parsed <= 0:
        raise config_error(f"{name} must be greater than 0")
    return parsed


def load_config_from_env(environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Load and validate configuration from environment variables.

    Raises:
        SafeError: If a value is present but invalid.
    """
    env = os.environ if environ is None else environ
    defaults = RepoConfig()

    api_base_url = (env.get("TERRAGRUNT_MCP_API_BASE_URL") or defaults.api_base_url).rstrip("/")
    if not api_base_url.startswith("https://"):
        raise config_error("TERRAGRUNT_MCP_API_BASE_URL must be an https URL")

    docs_path = (env.get("TERRAGRUNT_MCP_DOCS_PATH") or defaults.docs_path).strip("/")
    if not docs_path:
        raise config_error("TERRAGRUNT_MCP_DOCS_PATH must not be empty")

    repo = RepoConfig(
        owner=env.get("TERRAGRUNT_MCP_REPO_OWNER") or defaults.owner,
        repo=env.get("TERRAGRUNT_MCP_REPO_NAME") or defaults.repo,
        docs_path=docs_path,
        api_base_url=api_base_url,
    )

    limits = LimitsConfig(
        total_timeout_s=_parse_timeout("TERRAGRUNT_MCP_TIMEOUT_S", env.get("TERRAGRUNT_MCP_TIMEOUT_S"), 30.0),
        issues_per_page=_parse_int(
            "TERRAGRUNT_MCP_ISSUES_PER_PAGE",
            env.get("TERRAGRUNT_MCP_ISSUES_PER_PAGE"),
            30,
            minimum=1,
            maximum=100,
        ),
        issues_max_pages=_parse_int(
            "TERRAGRUNT_MCP_ISSUES_MAX_PAGES",
            env.get("TERRAGRUNT_MCP_ISSUES_MAX_PAGES"),
            10,
            minimum=1,
        ),
    )

    logging_config = LoggingConfig(
        level=_parse_level("LOG_LEVEL", env.get("LOG_LEVEL"), "INFO"),
        file_enabled=_parse_bool(env.get("LOG_FILE_ENABLED")),
        file_path=Path(env.get("LOG_FILE_PATH") or "./app.log"),
        file_level=_parse_level("LOG_FILE_LEVEL", env.get("LOG_FILE_LEVEL"), "DEBUG"),
    )

    return ServerConfig(repo=repo, limits=limits, logging=logging_config)
