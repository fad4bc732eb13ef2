"""
Webhook event dispatch.

Turns raw webhook events into generic comment events and routes them
to every plugin in a PluginRegistry.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional

from ..core.github import GitHubClientProtocol
from ..plugins.base import PluginClient, PluginRegistration, PluginRegistry
from ..utils.config import PluginConfiguration
from ..utils.rich_logger import get_logger
from .events import EventType, GenericCommentEvent, WebhookEvent

logger = logging.getLogger(__name__)

EVENT_TYPE_MAP = {event_type.value: event_type for event_type in EventType}


class WebhookHandler:
    """
    Routes webhook events to registered plugins.

    Plugins run concurrently for each event; synchronous handlers run in
    a worker thread. A failing plugin does not affect the others.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        github_client: GitHubClientProtocol,
        config: PluginConfiguration,
        owners_client: Optional[Any] = None
    ):
        """
        Initialize webhook handler.

        Args:
            registry: Plugins to route events to
            github_client: GitHub client handed to plugins
            config: Plugin configuration handed to plugins
            owners_client: OWNERS file resolver handed to plugins
        """
        self.registry = registry
        self.github_client = github_client
        self.config = config
        self.owners_client = owners_client
        self._statistics = {
            'total_events': 0,
            'events_by_type': {},
            'errors': 0,
            'last_event': None
        }

    def _plugin_client(self, name: str) -> PluginClient:
        return PluginClient(
            github_client=self.github_client,
            config=self.config,
            logger=get_logger(f"gh_merge.plugins.{name}"),
            owners_client=self.owners_client,
        )

    async def handle(self, event: WebhookEvent) -> Dict[str, Any]:
        """
        Process a webhook event through all plugins.

        Args:
            event: Webhook event to process

        Returns:
            Processing results
        """
        self._statistics['total_events'] += 1
        event_type = event.type.value
        self._statistics['events_by_type'][event_type] = \
            self._statistics['events_by_type'].get(event_type, 0) + 1
        self._statistics['last_event'] = datetime.now(timezone.utc).isoformat()

        results: Dict[str, Any] = {
            'event_id': event.delivery_id,
            'event_type': event_type,
            'plugins': []
        }

        if not event.is_comment_event():
            logger.debug(f"Ignoring {event_type} event {event.delivery_id}")
            return results

        comment_event = GenericCommentEvent.from_webhook(event)
        if comment_event is None:
            logger.debug(f"Event {event_type}/{event.action} carries no comment")
            return results

        registrations = list(self.registry)
        tasks = [
            asyncio.create_task(self._run_plugin(registration, comment_event))
            for registration in registrations
        ]
        plugin_results = await asyncio.gather(*tasks, return_exceptions=True)

        for registration, result in zip(registrations, plugin_results):
            if isinstance(result, Exception):
                self._statistics['errors'] += 1
                results['plugins'].append({
                    'plugin': registration.name,
                    'error': str(result)
                })
            else:
                if isinstance(result, Enum):
                    result = result.value
                results['plugins'].append({
                    'plugin': registration.name,
                    'result': result
                })

        return results

    async def _run_plugin(
        self,
        registration: PluginRegistration,
        event: GenericCommentEvent
    ) -> Any:
        """
        Run a plugin handler with error logging.

        Args:
            registration: Plugin to run
            event: Event to process

        Returns:
            Plugin result
        """
        client = self._plugin_client(registration.name)
        try:
            if inspect.iscoroutinefunction(registration.handler):
                return await registration.handler(client, event)
            return await asyncio.to_thread(registration.handler, client, event)
        except Exception as e:
            logger.error(
                f"Plugin {registration.name} failed on {event.repo.full_name}#{event.number}: {e}",
                exc_info=True
            )
            raise

    def get_statistics(self) -> Dict[str, Any]:
        """Get handler statistics."""
        return self._statistics.copy()

    def parse_github_event(self, headers: Dict[str, str], payload: Dict[str, Any]) -> WebhookEvent:
        """
        Parse GitHub webhook headers and payload into a WebhookEvent.

        Args:
            headers: Request headers
            payload: Decoded JSON payload

        Returns:
            WebhookEvent, typed OTHER for unknown event names
        """
        github_event = headers.get('X-GitHub-Event', '')
        return WebhookEvent(
            type=EVENT_TYPE_MAP.get(github_event, EventType.OTHER),
            delivery_id=headers.get('X-GitHub-Delivery', ''),
            payload=payload,
            headers=dict(headers)
        )
