"""
Runtime configuration for the secure Gmail MCP server.

All persisted state (OAuth client, token, audit log, downloads) lives under a
single configuration directory. Values come from environment variables with
sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_CONFIG_DIR = Path.home() / ".secure-gmail-mcp"
DEFAULT_RATE_LIMIT = "50/minute"


# =============================================================================
# Environment Getters
# =============================================================================


def get_config_dir() -> Path:
    """Get the configuration directory from environment or default."""
    path = os.getenv("GMAIL_MCP_CONFIG_DIR")
    if not path:
        return DEFAULT_CONFIG_DIR
    return Path(path).expanduser().resolve()


def get_credentials_path(config_dir: Path) -> Path:
    """Get path to the OAuth client credentials file."""
    path = os.getenv("GMAIL_MCP_CREDENTIALS_PATH")
    if not path:
        return config_dir / "credentials.json"
    return Path(path).expanduser().resolve()


def get_token_path(config_dir: Path) -> Path:
    """Get path to the stored authorized-user token."""
    path = os.getenv("GMAIL_MCP_TOKEN_PATH")
    if not path:
        return config_dir / "token.json"
    return Path(path).expanduser().resolve()


def get_rate_limit() -> str:
    """Get rate limit from environment or default (e.g. '50/minute')."""
    return os.getenv("GMAIL_MCP_RATE_LIMIT", DEFAULT_RATE_LIMIT)


def get_log_level() -> str:
    """Get diagnostic log level."""
    return os.getenv("GMAIL_MCP_LOG_LEVEL", "INFO").upper()


# =============================================================================
# Server Config
# =============================================================================


@dataclass(frozen=True)
class ServerConfig:
    """Resolved server settings."""
    config_dir: Path
    credentials_path: Path
    token_path: Path
    rate_limit: str = DEFAULT_RATE_LIMIT
    log_level: str = "INFO"

    @property
    def audit_log_path(self) -> Path:
        return self.config_dir / "audit.log"

    @property
    def downloads_dir(self) -> Path:
        return self.config_dir / "downloads"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        config_dir = get_config_dir()
        return cls(
            config_dir=config_dir,
            credentials_path=get_credentials_path(config_dir),
            token_path=get_token_path(config_dir),
            rate_limit=get_rate_limit(),
            log_level=get_log_level(),
        )

    @classmethod
    def for_directory(cls, config_dir: Path, rate_limit: Optional[str] = None) -> "ServerConfig":
        """Build a config rooted at ``config_dir`` with default file names."""
        config_dir = Path(config_dir)
        return cls(
            config_dir=config_dir,
            credentials_path=config_dir / "credentials.json",
            token_path=config_dir / "token.json",
            rate_limit=rate_limit or DEFAULT_RATE_LIMIT,
        )
