"""Pytest configuration and shared fixtures for gh-merge tests."""

from unittest.mock import Mock

import pytest

from gh_merge.core.github import GitHubClient
from gh_merge.plugins.base import PluginClient
from gh_merge.utils.config import PluginConfiguration
from gh_merge.webhooks.events import GenericCommentAction, GenericCommentEvent, Repo


@pytest.fixture
def mock_github_client():
    """Create a mock GitHub client with no labels on any issue."""
    mock_client = Mock(spec=GitHubClient)
    mock_client.get_issue_labels.return_value = []
    return mock_client


@pytest.fixture
def plugin_client(mock_github_client):
    """Create a plugin client around the mock GitHub client."""
    return PluginClient(
        github_client=mock_github_client,
        config=PluginConfiguration(),
        logger=Mock(),
    )


@pytest.fixture
def make_comment_event():
    """Factory for generic comment events on an open pull request."""
    def _make(body="/merge", **overrides):
        fields = {
            'action': GenericCommentAction.CREATED,
            'is_pr': True,
            'body': body,
            'html_url': 'https://github.com/org/repo/pull/5#issuecomment-1',
            'user': 'commenter',
            'issue_author': 'author',
            'repo': Repo(owner='org', name='repo'),
            'number': 5,
            'issue_state': 'open',
        }
        fields.update(overrides)
        return GenericCommentEvent(**fields)

    return _make


@pytest.fixture
def issue_comment_payload():
    """Sample issue_comment webhook payload for a pull request."""
    return {
        'action': 'created',
        'issue': {
            'number': 5,
            'state': 'open',
            'user': {'login': 'author'},
            'pull_request': {'url': 'https://api.github.com/repos/org/repo/pulls/5'},
        },
        'comment': {
            'body': '/merge',
            'html_url': 'https://github.com/org/repo/pull/5#issuecomment-1',
            'user': {'login': 'commenter'},
        },
        'repository': {
            'name': 'repo',
            'full_name': 'org/repo',
            'owner': {'login': 'org'},
        },
    }
