"""
Webhook server implementation for GitHub events.

Provides a lightweight HTTP server to receive GitHub webhooks, validate
them and hand them to the plugin dispatcher.
"""

import asyncio
import hashlib
import hmac
import json
import logging
import ssl
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, List, Set

from aiohttp import web

from ..utils.config import ConfigManager
from .events import EventType, WebhookEvent
from .handlers import EVENT_TYPE_MAP, WebhookHandler

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'X-Hub-Signature-256'
EVENT_HEADER = 'X-GitHub-Event'
DELIVERY_HEADER = 'X-GitHub-Delivery'
MAX_PAYLOAD_SIZE = 10 * 1024 * 1024  # 10MB max payload


@dataclass
class WebhookConfig:
    """Configuration for webhook server."""

    host: str = '127.0.0.1'
    port: int = 8080
    secret: Optional[str] = None
    ssl_cert: Optional[Path] = None
    ssl_key: Optional[Path] = None
    rate_limit: int = 100  # requests per minute

    def __post_init__(self):
        if not self.secret:
            logger.warning("No webhook secret configured, signatures will not be verified")

    @classmethod
    def from_config(cls, config: ConfigManager) -> "WebhookConfig":
        """
        Build server configuration from the ``[webhook]`` section.

        Args:
            config: Loaded configuration

        Returns:
            WebhookConfig instance
        """
        ssl_cert = config.get("webhook.ssl_cert")
        ssl_key = config.get("webhook.ssl_key")
        return cls(
            host=config.get("webhook.host", cls.host),
            port=int(config.get("webhook.port", cls.port)),
            secret=config.get("webhook.secret"),
            ssl_cert=Path(ssl_cert) if ssl_cert else None,
            ssl_key=Path(ssl_key) if ssl_key else None,
            rate_limit=int(config.get("webhook.rate_limit", cls.rate_limit)),
        )


class WebhookServer:
    """
    Async webhook server for GitHub events.

    Provides a webhook endpoint with HMAC validation and rate limiting,
    plus health, status and plugin help endpoints.
    """

    def __init__(self, config: WebhookConfig, handler: WebhookHandler):
        """
        Initialize webhook server.

        Args:
            config: Server configuration
            handler: Event dispatcher
        """
        self.config = config
        self.handler = handler
        self.app = web.Application(client_max_size=MAX_PAYLOAD_SIZE)
        self._setup_routes()
        self._rate_limiter: Dict[str, List[float]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def _setup_routes(self) -> None:
        """Configure server routes."""
        self.app.router.add_post('/webhook', self._handle_webhook)
        self.app.router.add_get('/health', self._health_check)
        self.app.router.add_get('/status', self._status_endpoint)
        self.app.router.add_get('/plugins/help', self._plugin_help_endpoint)

    def _verify_signature(self, payload: bytes, signature: str) -> bool:
        """
        Verify webhook signature using HMAC.

        Args:
            payload: Request body bytes
            signature: GitHub signature header

        Returns:
            True if signature is valid
        """
        if not self.config.secret:
            return True

        expected = 'sha256=' + hmac.new(
            self.config.secret.encode(),
            payload,
            hashlib.sha256
        ).hexdigest()

        return hmac.compare_digest(expected, signature)

    def _check_rate_limit(self, client_ip: str) -> bool:
        """
        Check if client has exceeded rate limit.

        Args:
            client_ip: Client IP address

        Returns:
            True if within rate limit
        """
        now = time.time()
        minute_ago = now - 60

        # Forget clients with no requests left in the window
        stale = [
            ip for ip, times in self._rate_limiter.items()
            if not times or times[-1] <= minute_ago
        ]
        for ip in stale:
            del self._rate_limiter[ip]

        recent =[t for t in self._rate_limiter.get(client_ip, []) if t > minute_ago]
        if len(recent) >= self.config.rate_limit:
            self._rate_limiter[client_ip] = recent
            return False

        recent.append(now)
        self._rate_limiter[client_ip] = recent
        return True

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        """
        Handle incoming webhook request.

        Args:
            request: Incoming HTTP request

        Returns:
            HTTP response
        """
        client_ip = request.remote or 'unknown'
        if not self._check_rate_limit(client_ip):
            logger.warning(f"Rate limit exceeded for {client_ip}")
            return web.Response(status=429, text="Rate limit exceeded")

        payload = await request.read()

        signature = request.headers.get(SIGNATURE_HEADER, '')
        if not self._verify_signature(payload, signature):
            logger.warning(f"Invalid signature from {client_ip}")
            return web.Response(status=401, text="Invalid signature")

        event_type = EVENT_TYPE_MAP.get(request.headers.get(EVENT_HEADER, ''))
        if event_type is None:
            logger.info(f"Unsupported event type: {request.headers.get(EVENT_HEADER, '')}")
            return web.Response(status=200, text="Event type not supported")

        if event_type == EventType.PING:
            return web.Response(status=200, text="pong")

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON payload: {e}")
            return web.Response(status=400, text="Invalid JSON")

        event = WebhookEvent(
            type=event_type,
            delivery_id=request.headers.get(DELIVERY_HEADER, ''),
            payload=data,
            headers=dict(request.headers)
        )

        # Acknowledge immediately; plugins run in the background
        task = asyncio.create_task(self._process_event(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return web.Response(status=200, text="OK")

    async def _process_event(self, event: WebhookEvent) -> None:
        """
        Process webhook event asynchronously.

        Args:
            event: Webhook event to process
        """
        try:
            results = await self.handler.handle(event)
            logger.debug(f"Processed delivery {event.delivery_id}: {results}")
        except Exception as e:
            logger.error(f"Event processing error: {e}", exc_info=True)

    async def _health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.Response(text="OK")

    async def _status_endpoint(self, request: web.Request) -> web.Response:
        """
        Status endpoint with server statistics.

        Returns:
            JSON response with server status
        """
        status = {
            'status': 'running',
            'config': {
                'host': self.config.host,
                'port': self.config.port,
                'rate_limit': self.config.rate_limit,
            },
            'plugins': self.handler.registry.names(),
            'statistics': self.handler.get_statistics()
        }
        return web.json_response(status)

    async def _plugin_help_endpoint(self, request: web.Request) -> web.Response:
        """Help for every registered plugin."""
        help_by_plugin = self.handler.registry.collect_help(self.handler.config)
        return web.json_response({
            name: plugin_help.to_dict() for name, plugin_help in help_by_plugin.items()
        })

    async def start(self) -> None:
        """Start webhook server and serve until cancelled."""
        runner = web.AppRunner(self.app)
        await runner.setup()

        ssl_context = None
        if self.config.ssl_cert and self.config.ssl_key:
            ssl_context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
            ssl_context.load_cert_chain(
                str(self.config.ssl_cert),
                str(self.config.ssl_key)
            )

        site = web.TCPSite(
            runner,
            self.config.host,
            self.config.port,
            ssl_context=ssl_context
        )

        await site.start()

        protocol = 'https' if ssl_context else 'http'
        logger.info(
            f"Webhook server started at {protocol}://{self.config.host}:{self.config.port}/webhook"
        )

        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()
            logger.info("Webhook server stopped")
