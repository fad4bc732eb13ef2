"""
Merge plugin.

Applies or removes the ``ok-to-merge`` label in response to ``/merge``
and ``/merge cancel`` comments on open pull requests.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..core.commands import MergeCommand, classify_comment
from ..core.labels import MERGE_LABEL, LabelReconciler, ReconcileOutcome
from ..utils.config import MergeOptions, PluginConfiguration
from ..webhooks.events import GenericCommentAction, GenericCommentEvent, Repo
from .base import HelpCommand, PluginClient, PluginHelp, PluginRegistry

PLUGIN_NAME = "merge"


@dataclass(frozen=True)
class ReviewContext:
    """Information about the comment being handled."""

    author: str
    issue_author: str
    body: str
    html_url: str
    repo: Repo
    number: int


def help_provider(config: PluginConfiguration, enabled_repos: List[str]) -> PluginHelp:
    """Describe the merge plugin. The plugin has no per-repo settings to show."""
    plugin_help = PluginHelp(
        description=(
            f"The merge plugin manages the application and removal of the '{MERGE_LABEL}' "
            "label which is typically used to gate merging."
        ),
    )
    plugin_help.add_command(HelpCommand(
        usage="/merge [cancel]",
        description=(
            f"Adds or removes the '{MERGE_LABEL}' label which is typically used to gate merging."
        ),
        featured=True,
        who_can_use="Collaborators on the repository and the PR author.",
        examples=["/merge", "/merge cancel"],
    ))
    return plugin_help


def options_for_repo(config: PluginConfiguration, org: str, repo: str) -> MergeOptions:
    """
    Get the merge options that apply to a repository.

    Args:
        config: Plugin configuration
        org: Repository owner
        repo: Repository name

    Returns:
        The first entry listing the org or "org/repo", else empty options
    """
    full_name = f"{org}/{repo}"
    for options in config.merge:
        if org in options.repos or full_name in options.repos:
            return options
    return MergeOptions()


def skip_collaborators(config: PluginConfiguration, org: str, repo: str) -> bool:
    """
    Check whether collaborator checks are skipped for a repository.

    When they are, OWNERS files rather than collaborator status decide who
    may merge. Nothing in the handler consults this yet.
    """
    full_name = f"{org}/{repo}"
    return any(
        entry in (org, full_name) for entry in config.owners.skip_collaborators
    )


def is_applicable(event: GenericCommentEvent) -> bool:
    """Only new comments on open pull requests are considered."""
    return (
        event.is_pr
        and event.issue_state == "open"
        and event.action is GenericCommentAction.CREATED
    )


def handle_generic_comment(
    client: PluginClient,
    event: GenericCommentEvent
) -> Optional[ReconcileOutcome]:
    """
    Handle a comment event.

    Args:
        client: Plugin runtime collaborators
        event: The comment event

    Returns:
        What happened to the label, or None if the event was ignored

    Raises:
        GithubException: If adding or removing the label fails
    """
    if not is_applicable(event):
        return None

    command = classify_comment(event.body)
    if command is MergeCommand.NO_COMMAND:
        return None

    rc = ReviewContext(
        author=event.user,
        issue_author=event.issue_author,
        body=event.body,
        html_url=event.html_url,
        repo=event.repo,
        number=event.number,
    )
    return handle(command is MergeCommand.MERGE_REQUESTED, client, rc)


def handle(want_merge: bool, client: PluginClient, rc: ReviewContext) -> ReconcileOutcome:
    """Reconcile the merge label for a review context."""
    # TODO: check that rc.author is a collaborator or the PR author before
    # touching the label; skip_collaborators() decides whether OWNERS files
    # should be used instead.
    reconciler = LabelReconciler(client.github_client, client.logger)
    return reconciler.reconcile(rc.repo.owner, rc.repo.name, rc.number, want_merge)


def register(registry: PluginRegistry) -> None:
    """Bind the merge plugin into a registry."""
    registry.register(PLUGIN_NAME, handle_generic_comment, help_provider)
