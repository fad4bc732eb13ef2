"""
Unit tests for cli module.

Tests the serve, plugins and replay commands.
"""

import json
import unittest
from unittest.mock import Mock, patch

from click.testing import CliRunner

from gh_merge.cli import main
from gh_merge.core.labels import MERGE_LABEL
from gh_merge.utils.config import ConfigManager, PluginConfiguration


def _config(token="test_token"):
    config = Mock(spec=ConfigManager)
    config.get_github_token.return_value = token
    config.get_plugin_configuration.return_value = PluginConfiguration()
    config.get.side_effect = lambda key, default=None: default
    return config


class TestPluginsCommand(unittest.TestCase):
    """Test the plugins command."""

    def test_lists_merge_plugin(self):
        """Help for the merge plugin is printed."""
        runner = CliRunner()
        with patch('gh_merge.cli.ConfigManager', return_value=_config()):
            result = runner.invoke(main, ['plugins'])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("merge", result.output)
        self.assertIn("/merge", result.output)
        self.assertIn("ok-to-merge", result.output)


class TestServeCommand(unittest.TestCase):
    """Test the serve command."""

    @patch('gh_merge.cli.WebhookServer')
    @patch('gh_merge.cli.GitHubClient')
    @patch('gh_merge.cli.ConfigManager')
    def test_serve_overrides(self, mock_config_class, mock_client_class, mock_server_class):
        """Host and port options override the config file."""
        mock_config_class.return_value = _config()
        mock_client_class.return_value.get_current_user_login.return_value = "merge-bot"
        mock_server_class.return_value.start = Mock(return_value=None)

        with patch('gh_merge.cli.asyncio.run') as mock_run:
            result = CliRunner().invoke(main, ['serve', '--host', '0.0.0.0', '--port', '9999'])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("merge-bot", result.output)
        webhook_config = mock_server_class.call_args[0][0]
        self.assertEqual(webhook_config.host, '0.0.0.0')
        self.assertEqual(webhook_config.port, 9999)
        mock_run.assert_called_once()

    @patch('gh_merge.cli.ConfigManager')
    def test_serve_without_token(self, mock_config_class):
        """Serving without a token fails."""
        mock_config_class.return_value = _config(token=None)

        result = CliRunner().invoke(main, ['serve'])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("No GitHub token", result.output)


class TestReplayCommand(unittest.TestCase):
    """Test the replay command."""

    def setUp(self):
        """Set up test fixtures."""
        self.payload = {
            'action': 'created',
            'issue': {
                'number': 5,
                'state': 'open',
                'user': {'login': 'author'},
                'pull_request': {},
            },
            'comment': {
                'body': '/merge',
                'html_url': 'https://github.com/org/repo/pull/5#issuecomment-1',
                'user': {'login': 'commenter'},
            },
            'repository': {'name': 'repo', 'owner': {'login': 'org'}},
        }

    @patch('gh_merge.cli.GitHubClient')
    @patch('gh_merge.cli.ConfigManager')
    def test_replay_adds_label(self, mock_config_class, mock_client_class):
        """Replaying a /merge comment adds the label."""
        mock_config_class.return_value = _config()
        github_client = mock_client_class.return_value
        github_client.get_issue_labels.return_value = []

        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("payload.json", "w") as f:
                json.dump(self.payload, f)
            result = runner.invoke(main, ['replay', 'issue_comment', 'payload.json'])

        self.assertEqual(result.exit_code, 0, result.output)
        github_client.add_label.assert_called_once_with('org', 'repo', 5, MERGE_LABEL)
        self.assertIn('"added"', result.output)

    @patch('gh_merge.cli.GitHubClient')
    @patch('gh_merge.cli.ConfigManager')
    def test_replay_reports_failure(self, mock_config_class, mock_client_class):
        """A failing plugin makes replay exit non-zero."""
        mock_config_class.return_value = _config()
        github_client = mock_client_class.return_value
        github_client.get_issue_labels.return_value = []
        github_client.add_label.side_effect = RuntimeError("write failed")

        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("payload.json", "w") as f:
                json.dump(self.payload, f)
            result = runner.invoke(main, ['replay', 'issue_comment', 'payload.json'])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("write failed", result.output)

    @patch('gh_merge.cli.ConfigManager')
    def test_replay_invalid_json(self, mock_config_class):
        """Malformed payload files are reported."""
        mock_config_class.return_value = _config()

        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("payload.json", "w") as f:
                f.write("{not json")
            with patch('gh_merge.cli.GitHubClient'):
                result = runner.invoke(main, ['replay', 'issue_comment', 'payload.json'])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid JSON", result.output)
