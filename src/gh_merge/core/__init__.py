"""Core functionality for gh-merge."""

from .commands import MergeCommand, classify_comment
from .github import GitHubClient, GitHubClientProtocol, has_label
from .labels import MERGE_LABEL, LabelReconciler, ReconcileOutcome

__all__ = [
    "GitHubClient",
    "GitHubClientProtocol",
    "has_label",
    "MergeCommand",
    "classify_comment",
    "MERGE_LABEL",
    "LabelReconciler",
    "ReconcileOutcome",
]
