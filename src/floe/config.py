"""
Configuration management with YAML loading and environment variable support.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import DOCKER_RUNNERS

# Runner options that are forwarded to the container runner
RUNNER_OPTION_KEYS = (
    "network",
    "pull_policy",
    "namespace",
    "kubeconfig",
    "context",
    "root",
    "runroot",
    "storage_driver",
    "log_level",
)


@dataclass
class RunnerConfig:
    """Container runner configuration - the runner can be overridden via environment variable."""

    docker_runner: str = field(default_factory=lambda: os.environ.get("FLOE_DOCKER_RUNNER", "docker"))
    network: str | None = None
    pull_policy: str | None = None
    # Kubernetes only
    namespace: str | None = None
    kubeconfig: str | None = None
    context: str | None = None
    # Podman only
    root: str | None = None
    runroot: str | None = None
    storage_driver: str | None = None
    log_level: str | None = None

    def options(self) -> dict[str, Any]:
        """Options for the runner, without unset values."""
        return {key: getattr(self, key) for key in RUNNER_OPTION_KEYS if getattr(self, key) is not None}


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: os.environ.get("FLOE_LOG_LEVEL", "WARNING"))
    console_logging: bool = True


@dataclass
class AppConfig:
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "AppConfig":
        """Create config from dictionary."""
        config = cls()

        for section in ("runner", "logging"):
            for key, value in (data.get(section) or {}).items():
                if hasattr(getattr(config, section), key):
                    setattr(getattr(config, section), key, value)

        return config

    def _to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {section: dict(vars(getattr(self, section))) for section in ("runner", "logging")}


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    # Check environment variable first
    if config_dir := os.environ.get("FLOE_CONFIG_DIR"):
        return Path(config_dir)

    # Check XDG config home
    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "floe"

    # Fall back to ~/.config
    return Path.home() / ".config" / "floe"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Path to config file (default: searches standard locations)
        config_dir: Config directory to search

    Returns:
        AppConfig, with defaults when no file is found
    """
    if config_dir is None:
        config_dir = _get_default_config_dir()

    if config_path is None:
        search_paths = [
            config_dir / "config.yaml",
            Path.cwd() / "floe.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    return AppConfig.from_yaml(config_path) if config_path else AppConfig()


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configuration values.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    if config.runner.docker_runner not in DOCKER_RUNNERS:
        errors.append(
            f"runner.docker_runner must be one of {', '.join(DOCKER_RUNNERS)}, got {config.runner.docker_runner!r}"
        )

    return errors
