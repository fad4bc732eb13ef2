"""GitHub API client wrapper for comment-command plugins."""

from typing import Any, Optional, Protocol, runtime_checkable

import requests
from github import Auth, Github, GithubException
from github.PullRequest import PullRequest
from github.Repository import Repository

DEFAULT_TIMEOUT = 30


@runtime_checkable
class GitHubClientProtocol(Protocol):
    """
    Operations a plugin may perform against GitHub.

    Plugins receive an object satisfying this protocol through their
    PluginClient, so tests can substitute a Mock with the same surface.
    """

    def is_collaborator(self, owner: str, repo: str, login: str) -> bool: ...

    def add_label(self, owner: str, repo: str, number: int, label: str) -> None: ...

    def remove_label(self, owner: str, repo: str, number: int, label: str) -> None: ...

    def get_issue_labels(self, owner: str, repo: str, number: int) -> list[str]: ...

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest: ...

    def list_issue_comments(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]: ...

    def delete_comment(self, owner: str, repo: str, number: int, comment_id: int) -> None: ...

    def bot_name(self) -> str: ...


def has_label(label: str, labels: list[str]) -> bool:
    """
    Check whether a label name is present, ignoring case.

    Args:
        label: Label name to look for
        labels: Label names currently on the issue

    Returns:
        True if the label is present
    """
    wanted = label.lower()
    return any(name.lower() == wanted for name in labels)


class GitHubClient:
    """Wrapper for GitHub API operations used by plugins."""

    def __init__(self, token: str, timeout: int = DEFAULT_TIMEOUT):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub authentication token
            timeout: Request timeout in seconds
        """
        # Store token privately to avoid accidental exposure
        self._token = token
        self.timeout = timeout
        auth = Auth.Token(token)
        self.github = Github(auth=auth, timeout=timeout)
        self._user = None

    @property
    def user(self):
        """Get the authenticated user."""
        if not self._user:
            self._user = self.github.get_user()
        return self._user

    def get_repository(self, owner: str, repo: str) -> Repository:
        """
        Get a repository object.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Repository object

        Raises:
            GithubException: If repository not found or access denied
        """
        return self.github.get_repo(f"{owner}/{repo}")

    def is_collaborator(self, owner: str, repo: str, login: str) -> bool:
        """
        Check whether a user is a collaborator on a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            login: User login to check

        Returns:
            True if the user is a collaborator
        """
        return self.get_repository(owner, repo).has_in_collaborators(login)

    def add_label(self, owner: str, repo: str, number: int, label: str) -> None:
        """
        Add a label to an issue or pull request.

        Raises:
            GithubException: If the label could not be added
        """
        issue = self.get_repository(owner, repo).get_issue(number)
        issue.add_to_labels(label)

    def remove_label(self, owner: str, repo: str, number: int, label: str) -> None:
        """
        Remove a label from an issue or pull request.

        Raises:
            GithubException: If the label could not be removed
        """
        issue = self.get_repository(owner, repo).get_issue(number)
        issue.remove_from_labels(label)

    def get_issue_labels(self, owner: str, repo: str, number: int) -> list[str]:
        """
        Get the names of labels on an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or pull request number

        Returns:
            List of label names

        Raises:
            GithubException: If the issue could not be read
        """
        issue = self.get_repository(owner, repo).get_issue(number)
        return [label.name for label in issue.get_labels()]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """
        Get a pull request object.

        Raises:
            GithubException: If PR not found or access denied
        """
        return self.get_repository(owner, repo).get_pull(number)

    def list_issue_comments(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        """
        Get issue comments for an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or pull request number

        Returns:
            List of issue comment dictionaries
        """
        issue = self.get_repository(owner, repo).get_issue(number)
        return [
            {
                "id": comment.id,
                "author": comment.user.login if comment.user else "Unknown",
                "body": comment.body,
                "html_url": comment.html_url,
                "created_at": comment.created_at.isoformat() if comment.created_at else None,
                "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
            }
            for comment in issue.get_comments()
        ]

    def delete_comment(self, owner: str, repo: str, number: int, comment_id: int) -> None:
        """
        Delete a comment on an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or pull request number the comment belongs to
            comment_id: Comment ID

        Raises:
            GithubException: If the comment could not be deleted
        """
        issue = self.get_repository(owner, repo).get_issue(number)
        issue.get_comment(comment_id).delete()

    def bot_name(self) -> str:
        """
        Get the login the bot acts as.

        Returns:
            Login of the authenticated user
        """
        return self.user.login

    def get_current_user_login(self) -> Optional[str]:
        """
        Get the login of the current authenticated user.

        Returns:
            User login string or None if error
        """
        try:
            return self.bot_name()
        except (GithubException, requests.RequestException):
            return None
