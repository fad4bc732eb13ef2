"""
Webhook support for GitHub comment events.

The event model lives here; the dispatcher and HTTP server are in
``gh_merge.webhooks.handlers`` and ``gh_merge.webhooks.server`` and are
imported directly, since they depend on the plugin registry which in
turn depends on the event model.
"""

from .events import (
    EventType,
    GenericCommentAction,
    GenericCommentEvent,
    Repo,
    WebhookEvent,
)

__all__ = [
    'EventType',
    'GenericCommentAction',
    'GenericCommentEvent',
    'Repo',
    'WebhookEvent',
]
