"""Idempotent reconciliation of the merge gate label."""

from enum import Enum
from typing import Any

import requests
from github import GithubException

from .github import GitHubClientProtocol, has_label

MERGE_LABEL = "ok-to-merge"


class ReconcileOutcome(Enum):
    """What a reconciliation did to the label."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class LabelReconciler:
    """
    Bring the merge label on an issue in line with the requested intent.

    Label state is read from GitHub on every call and at most one write
    is issued. Write failures propagate to the caller.
    """

    def __init__(self, client: GitHubClientProtocol, logger: Any, label: str = MERGE_LABEL):
        """
        Initialize LabelReconciler.

        Args:
            client: GitHub client used for label reads and writes
            logger: Logger for this invocation
            label: Name of the gating label
        """
        self.client = client
        self.logger = logger
        self.label = label

    def reconcile(self, org: str, repo: str, number: int, want_merge: bool) -> ReconcileOutcome:
        """
        Add or remove the label so its presence matches want_merge.

        Args:
            org: Repository owner
            repo: Repository name
            number: Issue or pull request number
            want_merge: Whether the label should be present

        Returns:
            The change that was made

        Raises:
            GithubException: If adding or removing the label fails
        """
        labels: list[str] = []
        try:
            labels = self.client.get_issue_labels(org, repo, number)
        except (GithubException, requests.RequestException) as e:
            # Continue as if the label were absent
            self.logger.error(
                f"Failed to get the labels on {org}/{repo}#{number}.",
                error=str(e),
            )

        has = has_label(self.label, labels)

        if has and not want_merge:
            self.logger.info("Removing merge label.", repo=f"{org}/{repo}", number=number)
            self.client.remove_label(org, repo, number, self.label)
            return ReconcileOutcome.REMOVED

        if not has and want_merge:
            self.logger.info("Adding merge label.", repo=f"{org}/{repo}", number=number)
            self.client.add_label(org, repo, number, self.label)
            return ReconcileOutcome.ADDED

        return ReconcileOutcome.UNCHANGED
