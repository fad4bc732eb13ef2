"""
Comment command plugins for gh-merge.

Plugins are bound into a PluginRegistry at startup; the webhook
dispatcher routes every comment event to each registered handler.
"""

from .base import (
    HelpCommand,
    PluginClient,
    PluginHelp,
    PluginRegistration,
    PluginRegistrationError,
    PluginRegistry,
)
from . import merge


def default_registry() -> PluginRegistry:
    """
    Build the registry of built-in plugins.

    Returns:
        A frozen registry
    """
    registry = PluginRegistry()
    merge.register(registry)
    registry.freeze()
    return registry


__all__ = [
    'HelpCommand',
    'PluginClient',
    'PluginHelp',
    'PluginRegistration',
    'PluginRegistrationError',
    'PluginRegistry',
    'default_registry',
]
