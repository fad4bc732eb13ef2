"""
Plugin contract and registration table.

Defines the help structures plugins describe themselves with, the
per-invocation client bundle handed to handlers, and the name-keyed
registry the webhook dispatcher routes events through.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..core.github import GitHubClientProtocol
from ..utils.config import PluginConfiguration
from ..webhooks.events import GenericCommentEvent

logger = logging.getLogger(__name__)

PLUGIN_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')


class PluginRegistrationError(Exception):
    """Raised when a plugin cannot be bound into a registry."""


@dataclass
class HelpCommand:
    """
    A command a plugin responds to.

    Attributes:
        usage: Command syntax, e.g. "/merge [cancel]"
        description: What the command does
        featured: Whether help pages should highlight the command
        who_can_use: Audience allowed to issue the command
        examples: Example invocations
    """

    usage: str
    description: str
    featured: bool = False
    who_can_use: str = ""
    examples: List[str] = field(default_factory=list)


@dataclass
class PluginHelp:
    """Self-description a plugin offers to the help aggregator."""

    description: str
    commands: List[HelpCommand] = field(default_factory=list)

    def add_command(self, command: HelpCommand) -> None:
        """Document a command."""
        self.commands.append(command)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the help endpoint."""
        return {
            'description': self.description,
            'commands': [
                {
                    'usage': command.usage,
                    'description': command.description,
                    'featured': command.featured,
                    'who_can_use': command.who_can_use,
                    'examples': list(command.examples),
                }
                for command in self.commands
            ],
        }


@dataclass
class PluginClient:
    """
    Runtime collaborators provided to a plugin handler.

    Attributes:
        github_client: GitHub operations available to the plugin
        config: Plugin configuration
        logger: Logger for the invocation
        owners_client: OWNERS file resolver, when one is configured
    """

    github_client: GitHubClientProtocol
    config: PluginConfiguration
    logger: Any
    owners_client: Optional[Any] = None


GenericCommentHandler = Callable[[PluginClient, GenericCommentEvent], Any]
HelpProvider = Callable[[PluginConfiguration, List[str]], PluginHelp]


@dataclass(frozen=True)
class PluginRegistration:
    """A plugin bound into a registry."""

    name: str
    handler: GenericCommentHandler
    help_provider: HelpProvider


class PluginRegistry:
    """
    Name-keyed table of generic comment plugins.

    Built once at startup, frozen, then passed to the dispatcher.
    """

    def __init__(self):
        """Initialize an empty, writable registry."""
        self._registrations: Dict[str, PluginRegistration] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        handler: GenericCommentHandler,
        help_provider: HelpProvider
    ) -> PluginRegistration:
        """
        Bind a plugin under a unique name.

        Args:
            name: Plugin name
            handler: Function handling generic comment events
            help_provider: Function describing the plugin

        Returns:
            The new registration

        Raises:
            PluginRegistrationError: If the registry is frozen, the name is
                malformed or already taken
        """
        if self._frozen:
            raise PluginRegistrationError(
                f"Cannot register plugin {name!r}: registry is frozen"
            )
        if not name or not PLUGIN_NAME_PATTERN.match(name):
            raise PluginRegistrationError(f"Invalid plugin name format: {name!r}")
        if name in self._registrations:
            raise PluginRegistrationError(f"Plugin {name!r} is already registered")

        registration = PluginRegistration(name, handler, help_provider)
        self._registrations[name] = registration
        logger.info(f"Registered plugin: {name}")
        return registration

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[PluginRegistration]:
        """Get a registration by name."""
        return self._registrations.get(name)

    def names(self) -> List[str]:
        """Get registered plugin names in registration order."""
        return list(self._registrations)

    def collect_help(
        self,
        config: PluginConfiguration,
        enabled_repos: Optional[List[str]] = None
    ) -> Dict[str, PluginHelp]:
        """
        Gather help from every registered plugin.

        Args:
            config: Plugin configuration
            enabled_repos: Repositories the plugins are enabled for

        Returns:
            Help keyed by plugin name
        """
        return {
            name: registration.help_provider(config, enabled_repos or [])
            for name, registration in self._registrations.items()
        }

    def __contains__(self, name: object) -> bool:
        return name in self._registrations

    def __iter__(self) -> Iterator[PluginRegistration]:
        return iter(list(self._registrations.values()))

    def __len__(self) -> int:
        return len(self._registrations)
