"""Utility modules for gh-merge."""

from .config import ConfigManager, MergeOptions, OwnersOptions, PluginConfiguration
from .rich_logger import RichLogger, get_logger, setup_logging

__all__ = [
    "ConfigManager",
    "MergeOptions",
    "OwnersOptions",
    "PluginConfiguration",
    "RichLogger",
    "get_logger",
    "setup_logging",
]
