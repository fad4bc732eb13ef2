"""Configuration management for gh-merge."""

import copy
import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pytz
from rich.console import Console

try:
    import tomllib
except ImportError:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# Constants for allowed config directories
ALLOWED_CONFIG_DIRS = [
    Path.cwd(),  # Current working directory
    Path.home() / ".config" / "gh-merge",  # User config directory
    Path.home(),  # User home directory
]

TOKEN_ENV_VARS = ["GH_TOKEN", "GITHUB_TOKEN"]


def _validate_config_path(config_path: Path) -> bool:
    """
    Validate that config path is within allowed directories.

    Args:
        config_path: Path to validate

    Returns:
        True if path is safe, False otherwise
    """
    try:
        resolved_path = config_path.resolve()

        for allowed_dir in ALLOWED_CONFIG_DIRS:
            try:
                resolved_path.relative_to(allowed_dir.resolve())
                return True
            except ValueError:
                continue

        logger.warning(f"Config path not in allowed directories: {resolved_path}")
        return False

    except (OSError, RuntimeError) as e:
        logger.warning(f"Failed to validate config path {config_path}: {e}")
        return False


@dataclass
class MergeOptions:
    """Merge plugin options scoped to a set of orgs or org/repo names."""

    repos: list[str] = field(default_factory=list)


@dataclass
class OwnersOptions:
    """OWNERS-file handling options."""

    skip_collaborators: list[str] = field(default_factory=list)


@dataclass
class PluginConfiguration:
    """
    Plugin configuration shared by every handler.

    Attributes:
        merge: Ordered merge option entries; the first matching entry wins
        owners: OWNERS-file options
    """

    merge: list[MergeOptions] = field(default_factory=list)
    owners: OwnersOptions = field(default_factory=OwnersOptions)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PluginConfiguration":
        """
        Build plugin configuration from a parsed config dictionary.

        Args:
            data: Dictionary with optional 'merge' and 'owners' keys

        Returns:
            PluginConfiguration instance
        """
        merge_entries = [
            MergeOptions(repos=list(entry.get("repos", [])))
            for entry in data.get("merge", [])
        ]
        owners = data.get("owners", {})
        return cls(
            merge=merge_entries,
            owners=OwnersOptions(
                skip_collaborators=list(owners.get("skip_collaborators", []))
            ),
        )


class ConfigManager:
    """Manage configuration for gh-merge."""

    DEFAULT_CONFIG = {
        "github": {
            "token": None,
            "timeout": 30,
        },
        "webhook": {
            "host": "127.0.0.1",
            "port": 8080,
            "secret": None,
            "rate_limit": 100,  # requests per minute per client
        },
        "merge": [],
        "owners": {
            "skip_collaborators": [],
        },
        "logging": {
            "level": "INFO",
            "console_output": True,
            "file_output": False,
            "log_file": None,  # Auto-generated if None
            "timezone": "UTC",
            "syslog_output": False,
            "syslog_address": None,  # None for local, or ["host", 514] for remote
            "syslog_facility": "LOG_USER",
        },
    }

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize ConfigManager.

        Args:
            config_path: Path to config file
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.config_path = self._find_config_file(config_path)

        if self.config_path and self.config_path.exists():
            self._load_config()

    def _find_config_file(self, config_path: Optional[str] = None) -> Optional[Path]:
        """
        Find configuration file.

        Args:
            config_path: Explicit config path

        Returns:
            Path object or None
        """
        if config_path:
            path = Path(config_path)
            if _validate_config_path(path):
                return path
            console = Console(stderr=True)
            console.print(f"[yellow]Warning: Config path '{config_path}' is not in an allowed directory[/yellow]")
            return None

        # Check locations in order of precedence
        locations = [
            Path(".gh-merge.toml"),  # Project-specific
            Path.home() / ".config" / "gh-merge" / "config.toml",  # User config
        ]

        for location in locations:
            if location.exists() and _validate_config_path(location):
                return location

        return None

    def _load_config(self) -> None:
        """Load configuration from file."""
        try:
            with open(self.config_path, "rb") as f:
                loaded_config = tomllib.load(f)

            self._merge_config(self.config, loaded_config)
        except (FileNotFoundError, PermissionError, tomllib.TOMLDecodeError) as e:
            # If config loading fails, use defaults
            logger.debug(f"Failed to load config from {self.config_path}: {e}")

    def _merge_config(self, base: dict[str, Any], update: dict[str, Any]) -> None:
        """
        Recursively merge configuration dictionaries.

        Nested dictionaries are merged key by key; any other value,
        including lists such as the ``merge`` entries, replaces the base.

        Args:
            base: Base configuration dictionary (modified in place)
            update: Update configuration dictionary (values to merge in)
        """
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key (dot-separated)
            default: Default value

        Returns:
            Configuration value
        """
        value = self.config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_github_token(self) -> Optional[str]:
        """
        Get the GitHub token.

        The config file wins over GH_TOKEN, which wins over GITHUB_TOKEN.

        Returns:
            Token string or None if none is configured
        """
        token = self.get("github.token")
        if token:
            return token

        for env_var in TOKEN_ENV_VARS:
            token = os.environ.get(env_var)
            if token:
                return token

        return None

    def get_plugin_configuration(self) -> PluginConfiguration:
        """
        Build the plugin configuration from the loaded settings.

        Returns:
            PluginConfiguration instance
        """
        return PluginConfiguration.from_dict(self.config)

    def get_logging_config(self) -> dict[str, Any]:
        """
        Get logging configuration.

        Returns:
            Dictionary containing logging configuration
        """
        return self.get("logging", self.DEFAULT_CONFIG["logging"])

    def setup_logging(self) -> None:
        """
        Setup application logging using the configured settings.

        Initializes the main RichLogger from the ``[logging]`` section.
        """
        from .rich_logger import setup_logging

        log_config = self.get_logging_config()

        level_str = str(log_config.get("level", "INFO")).upper()
        level = getattr(logging, level_str, logging.INFO)

        try:
            timezone_obj = pytz.timezone(log_config.get("timezone", "UTC"))
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone {log_config.get('timezone')}, using UTC")
            timezone_obj = pytz.UTC

        facility_name = log_config.get("syslog_facility", "LOG_USER")
        syslog_facility = getattr(
            logging.handlers.SysLogHandler,
            facility_name,
            logging.handlers.SysLogHandler.LOG_USER,
        )

        syslog_address = log_config.get("syslog_address")
        if syslog_address and isinstance(syslog_address, list) and len(syslog_address) == 2:
            syslog_address = tuple(syslog_address)

        setup_logging(
            level=level,
            log_file=log_config.get("log_file"),
            console_output=log_config.get("console_output", True),
            file_output=log_config.get("file_output", False),
            syslog_output=log_config.get("syslog_output", False),
            syslog_address=syslog_address,
            syslog_facility=syslog_facility,
            timezone=timezone_obj,
        )
