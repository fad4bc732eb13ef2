#!/usr/bin/env python3
"""Command-line interface for gh-merge."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .core.github import GitHubClient
from .plugins import default_registry
from .utils.config import ConfigManager
from .webhooks.handlers import WebhookHandler
from .webhooks.server import WebhookConfig, WebhookServer

console = Console()


def _load_config(config_path: Optional[str]) -> ConfigManager:
    config = ConfigManager(config_path)
    config.setup_logging()
    return config


def _build_handler(config: ConfigManager) -> WebhookHandler:
    """Build the dispatcher with the built-in plugins and a GitHub client."""
    token = config.get_github_token()
    if not token:
        console.print("[red]Error: No GitHub token found.[/red]")
        console.print("Set GH_TOKEN or GITHUB_TOKEN, or add [github] token to the config file.")
        sys.exit(1)

    github_client = GitHubClient(token, timeout=config.get("github.timeout", 30))
    return WebhookHandler(
        default_registry(),
        github_client,
        config.get_plugin_configuration(),
    )


@click.group()
@click.version_option(package_name="gh-merge")
def main() -> None:
    """Comment-command bot that gates merges with the ok-to-merge label."""


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to config file")
@click.option("--host", help="Address to bind (overrides config)")
@click.option("--port", type=click.IntRange(1, 65535), help="Port to bind (overrides config)")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Receive GitHub webhooks and dispatch comment commands."""
    config = _load_config(config_path)
    handler = _build_handler(config)

    webhook_config = WebhookConfig.from_config(config)
    if host:
        webhook_config.host = host
    if port:
        webhook_config.port = port

    login = handler.github_client.get_current_user_login()
    if login:
        console.print(f"Acting as [bold]{login}[/bold]")
    console.print(f"Plugins: {', '.join(handler.registry.names())}")

    server = WebhookServer(webhook_config, handler)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to config file")
def plugins(config_path: Optional[str]) -> None:
    """Show help for every registered plugin."""
    config = ConfigManager(config_path)
    registry = default_registry()
    help_by_plugin = registry.collect_help(config.get_plugin_configuration())

    for name, plugin_help in help_by_plugin.items():
        console.print(f"[bold cyan]{name}[/bold cyan]: {plugin_help.description}")

        table = Table(show_header=True, header_style="bold")
        table.add_column("Command")
        table.add_column("Description")
        table.add_column("Who can use")
        table.add_column("Examples")
        for command in plugin_help.commands:
            usage = f"{command.usage} ★" if command.featured else command.usage
            table.add_row(
                usage,
                command.description,
                command.who_can_use,
                "\n".join(command.examples),
            )
        console.print(table)


@main.command()
@click.argument("event_type")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to config file")
def replay(event_type: str, payload_file: str, config_path: Optional[str]) -> None:
    """
    Dispatch a saved webhook payload once.

    EVENT_TYPE is the X-GitHub-Event name, e.g. issue_comment.
    """
    config = _load_config(config_path)
    handler = _build_handler(config)

    try:
        payload = json.loads(Path(payload_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON in {payload_file}: {e}[/red]")
        sys.exit(1)

    event = handler.parse_github_event(
        {"X-GitHub-Event": event_type, "X-GitHub-Delivery": "replay"},
        payload,
    )
    results = asyncio.run(handler.handle(event))
    console.print_json(data=results)

    if any("error" in entry for entry in results["plugins"]):
        sys.exit(1)


if __name__ == "__main__":
    main()
