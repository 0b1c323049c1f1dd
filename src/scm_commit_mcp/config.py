"""Configuration management for scm-commit-mcp."""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """Where repositories are found."""

    # Repositories live in <root>/<namespace>/<name>
    root: str = "~/.scm-commit-mcp/repositories"


@dataclass
class ServerConfig:
    """Server configuration."""

    log_level: str = "INFO"
    chunk_size: int = 20


@dataclass
class Config:
    """Main configuration."""

    repositories: RepositoryConfig = field(default_factory=RepositoryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config() -> Config:
    """
    Load configuration from multiple sources (in priority order):
    1. Environment variables (highest priority)
    2. Local config file (./config.json)
    3. Config file (~/.config/scm-commit-mcp/config.json)
    4. Default values (lowest priority)
    """
    config = Config()

    config_paths = [
        Path("./config.json"),
        Path.home() / ".config" / "scm-commit-mcp" / "config.json",
    ]

    for config_path in reversed(config_paths):  # Lower priority first
        if config_path.exists():
            try:
                with open(config_path) as f:
                    _apply_config_dict(config, json.load(f))
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse config file {config_path}: {e}")
            except IOError as e:
                logger.warning(f"Failed to read config file {config_path}: {e}")

    _apply_env_vars(config)

    return config


def _parse_chunk_size(value, source: str) -> int | None:
    try:
        chunk_size = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid chunk size {value!r} from {source}")
        return None
    if chunk_size < 1:
        logger.warning(f"Ignoring non-positive chunk size {chunk_size} from {source}")
        return None
    return chunk_size


def _apply_config_dict(config: Config, data: dict) -> None:
    """Apply configuration from a dictionary."""
    if "repositories" in data:
        repositories_data = data["repositories"]
        if "root" in repositories_data:
            config.repositories.root = repositories_data["root"]

    if "server" in data:
        server_data = data["server"]
        if "log_level" in server_data:
            config.server.log_level = server_data["log_level"]
        if "chunk_size" in server_data:
            if (chunk_size := _parse_chunk_size(server_data["chunk_size"], "config file")) is not None:
                config.server.chunk_size = chunk_size


def _apply_env_vars(config: Config) -> None:
    """Apply environment variables to config."""
    if root := os.getenv("SCM_COMMIT_MCP_REPOSITORIES_ROOT"):
        config.repositories.root = root

    if log_level := os.getenv("SCM_COMMIT_MCP_LOG_LEVEL"):
        config.server.log_level = log_level

    if chunk_size := os.getenv("SCM_COMMIT_MCP_CHUNK_SIZE"):
        if (parsed := _parse_chunk_size(chunk_size, "SCM_COMMIT_MCP_CHUNK_SIZE")) is not None:
            config.server.chunk_size = parsed


# Thread-safe global config instance
_config: Config | None = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get the global configuration instance (thread-safe)."""
    global _config
    if _config is None:
        with _config_lock:
            # Double-check locking pattern
            if _config is None:
                _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from sources (thread-safe)."""
    global _config
    with _config_lock:
        _config = load_config()
        return _config
