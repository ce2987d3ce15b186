"""
Configuration file parsing and management.

Supports YAML configuration files (JSON for ``.json`` paths).
Merges configurations from multiple sources (project → user → system → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".gobin-rebuild.yml",                               # Project root (highest priority)
    ".gobin-rebuild.yaml",                              # Alternative extension
    os.path.expanduser("~/.config/gobin-rebuild/config.yml"),  # User global
    os.path.expanduser("~/.config/gobin-rebuild/config.yaml"),
    "/etc/gobin-rebuild/config.yml",                    # System global
    "/etc/gobin-rebuild/config.yaml",
]

GO_COMMAND_ENV_VAR = "GOBIN_REBUILD_GO"

DEFAULT_GO_COMMAND = "go"
DEFAULT_ENV_TIMEOUT = 1
DEFAULT_INSPECT_TIMEOUT = 10


@dataclass(frozen=True)
class Timeouts:
    """
    Timeouts for the discovery commands.

    ``go install`` itself is never bounded: compiling a large module
    graph can legitimately take minutes.

    Attributes:
        env_seconds: Timeout for ``go env`` and ``go version``
        inspect_seconds: Timeout for ``go version -m <gobin>``
    """
    env_seconds: int = DEFAULT_ENV_TIMEOUT
    inspect_seconds: int = DEFAULT_INSPECT_TIMEOUT

    def __post_init__(self):
        if self.env_seconds < 1 or self.env_seconds > 60:
            raise ValueError(
                f"Invalid timeouts.env_seconds: {self.env_seconds}. "
                "Must be between 1 and 60"
            )
        if self.inspect_seconds < 1 or self.inspect_seconds > 300:
            raise ValueError(
                f"Invalid timeouts.inspect_seconds: {self.inspect_seconds}. "
                "Must be between 1 and 300"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Timeouts:
        """Create Timeouts from dictionary."""
        return Timeouts(
            env_seconds=data.get("env_seconds", DEFAULT_ENV_TIMEOUT),
            inspect_seconds=data.get("inspect_seconds", DEFAULT_INSPECT_TIMEOUT),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for gobin-rebuild.

    Attributes:
        version: Config schema version
        go_command: Executable used for every go invocation
        upgrade: Default for the ``-u`` flag
        timeouts: Discovery command timeouts
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    go_command: str = DEFAULT_GO_COMMAND
    upgrade: bool = False
    timeouts: Timeouts = field(default_factory=Timeouts)
    source: str = ""

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")
        if not self.go_command or not str(self.go_command).strip():
            raise ValueError("go_command must not be empty")
        if not isinstance(self.upgrade, bool):
            raise ValueError(f"upgrade must be true or false, got {self.upgrade!r}")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        return Config(
            version=data.get("version", 1),
            go_command=data.get("go_command", DEFAULT_GO_COMMAND),
            upgrade=data.get("upgrade", False),
            timeouts=Timeouts.from_dict(data.get("timeouts") or {}),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_timeouts = Timeouts(
            env_seconds=(
                self.timeouts.env_seconds
                if self.timeouts.env_seconds != DEFAULT_ENV_TIMEOUT
                else other.timeouts.env_seconds
            ),
            inspect_seconds=(
                self.timeouts.inspect_seconds
                if self.timeouts.inspect_seconds != DEFAULT_INSPECT_TIMEOUT
                else other.timeouts.inspect_seconds
            ),
        )

        return Config(
            version=self.version,
            go_command=self.go_command if self.go_command != DEFAULT_GO_COMMAND else other.go_command,
            upgrade=self.upgrade or other.upgrade,
            timeouts=merged_timeouts,
            source=self.source or other.source,
        )

    def with_env_overrides(self) -> Config:
        """Apply environment variable overrides."""
        go_command = os.environ.get(GO_COMMAND_ENV_VAR)
        if not go_command:
            return self
        return Config(
            version=self.version,
            go_command=go_command,
            upgrade=self.upgrade,
            timeouts=self.timeouts,
            source=self.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if file unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError, AttributeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .gobin-rebuild.yml
    3. User ~/.config/gobin-rebuild/config.yml
    4. System /etc/gobin-rebuild/config.yml
    5. Default configuration

    The ``GOBIN_REBUILD_GO`` environment variable overrides ``go_command``
    of the merged result.

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config().with_env_overrides()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged.with_env_overrides()
