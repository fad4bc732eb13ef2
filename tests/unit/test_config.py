"""
Unit tests for utils.config module.

Tests configuration loading and plugin configuration building.
"""

import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from gh_merge.utils.config import (
    ConfigManager, MergeOptions, OwnersOptions, PluginConfiguration, _validate_config_path
)

SAMPLE_CONFIG = """
[github]
token = "file_token"

[webhook]
port = 9000

[[merge]]
repos = ["orgA"]

[[merge]]
repos = ["orgB/repoX"]

[owners]
skip_collaborators = ["orgC"]

[logging]
level = "DEBUG"
"""


class TestValidateConfigPath(unittest.TestCase):
    """Test _validate_config_path function."""

    def test_allowed_directory(self):
        """Paths under the working directory are allowed."""
        self.assertTrue(_validate_config_path(Path.cwd() / "config.toml"))

    def test_disallowed_directory(self):
        """Paths outside the allowed directories are refused."""
        with patch('gh_merge.utils.config.ALLOWED_CONFIG_DIRS', [Path("/nonexistent-dir")]):
            self.assertFalse(_validate_config_path(Path("/etc/passwd")))


class TestConfigManager(unittest.TestCase):
    """Test ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config_path = self.temp_dir / "config.toml"
        self.config_path.write_text(SAMPLE_CONFIG)
        self.allowed = patch('gh_merge.utils.config.ALLOWED_CONFIG_DIRS', [self.temp_dir])
        self.allowed.start()

    def tearDown(self):
        """Clean up test fixtures."""
        self.allowed.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults_without_file(self):
        """Defaults apply when no file is found."""
        with patch.object(ConfigManager, '_find_config_file', return_value=None):
            config = ConfigManager()

        self.assertEqual(config.get("webhook.port"), 8080)
        self.assertEqual(config.get("merge"), [])
        self.assertEqual(config.get("missing.key", "fallback"), "fallback")

    def test_defaults_not_shared(self):
        """Changing one manager's settings leaves the defaults alone."""
        with patch.object(ConfigManager, '_find_config_file', return_value=None):
            config = ConfigManager()
        config.config["webhook"]["port"] = 1

        self.assertEqual(ConfigManager.DEFAULT_CONFIG["webhook"]["port"], 8080)

    def test_load_and_merge(self):
        """File values override defaults section by section."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("webhook.port"), 9000)
        self.assertEqual(config.get("webhook.host"), "127.0.0.1")
        self.assertEqual(config.get("logging.level"), "DEBUG")

    def test_invalid_toml_uses_defaults(self):
        """A broken file falls back to defaults."""
        self.config_path.write_text("[github\ntoken = ")

        config = ConfigManager(str(self.config_path))

        self.assertIsNone(config.get("github.token"))

    def test_path_outside_allowed_dirs_ignored(self):
        """Explicit paths outside allowed directories are not loaded."""
        with patch('gh_merge.utils.config.ALLOWED_CONFIG_DIRS', [Path("/nonexistent-dir")]):
            config = ConfigManager(str(self.config_path))

        self.assertIsNone(config.config_path)
        self.assertEqual(config.get("webhook.port"), 8080)

    def test_plugin_configuration(self):
        """Merge and owners sections become typed options."""
        plugin_config = ConfigManager(str(self.config_path)).get_plugin_configuration()

        self.assertEqual(plugin_config.merge, [
            MergeOptions(repos=["orgA"]),
            MergeOptions(repos=["orgB/repoX"]),
        ])
        self.assertEqual(plugin_config.owners, OwnersOptions(skip_collaborators=["orgC"]))

    def test_token_from_file(self):
        """A token in the file wins over the environment."""
        with patch.dict(os.environ, {"GH_TOKEN": "env_token"}):
            config = ConfigManager(str(self.config_path))
            self.assertEqual(config.get_github_token(), "file_token")

    def test_token_from_environment(self):
        """GH_TOKEN is preferred over GITHUB_TOKEN."""
        with patch.object(ConfigManager, '_find_config_file', return_value=None):
            config = ConfigManager()

        with patch.dict(os.environ, {"GH_TOKEN": "gh", "GITHUB_TOKEN": "github"}):
            self.assertEqual(config.get_github_token(), "gh")
        with patch.dict(os.environ, {"GITHUB_TOKEN": "github"}, clear=True):
            self.assertEqual(config.get_github_token(), "github")
        with patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(config.get_github_token())

    @patch('gh_merge.utils.rich_logger.setup_logging')
    def test_setup_logging(self, mock_setup):
        """The logging section drives logger setup."""
        ConfigManager(str(self.config_path)).setup_logging()

        kwargs = mock_setup.call_args.kwargs
        self.assertEqual(kwargs["level"], logging.DEBUG)
        self.assertTrue(kwargs["console_output"])
        self.assertFalse(kwargs["file_output"])


class TestPluginConfiguration(unittest.TestCase):
    """Test PluginConfiguration.from_dict."""

    def test_empty(self):
        """Missing sections give empty options."""
        self.assertEqual(PluginConfiguration.from_dict({}), PluginConfiguration())

    def test_entries_keep_order(self):
        """Merge entries keep their file order."""
        plugin_config = PluginConfiguration.from_dict({
            "merge": [{"repos": ["b"]}, {"repos": ["a"]}, {}],
        })

        self.assertEqual(
            [entry.repos for entry in plugin_config.merge],
            [["b"], ["a"], []]
        )
