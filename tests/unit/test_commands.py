"""
Unit tests for core.commands module.

Tests classification of comment bodies into merge commands.
"""

import unittest

import pytest

from gh_merge.core.commands import MergeCommand, classify_comment


class TestClassifyComment(unittest.TestCase):
    """Test classify_comment."""

    def test_merge_line(self):
        """A standalone /merge requests a merge."""
        self.assertEqual(classify_comment("/merge"), MergeCommand.MERGE_REQUESTED)

    def test_cancel_line(self):
        """A standalone /merge cancel cancels the merge."""
        self.assertEqual(classify_comment("/merge cancel"), MergeCommand.MERGE_CANCELLED)

    def test_case_insensitive(self):
        """Upper-case commands classify like lower-case ones."""
        self.assertEqual(classify_comment("/MERGE"), classify_comment("/merge"))
        self.assertEqual(classify_comment("/Merge Cancel"), MergeCommand.MERGE_CANCELLED)

    def test_surrounding_whitespace_tolerated(self):
        """Whitespace around the command on its line is ignored."""
        self.assertEqual(classify_comment("  /merge \t"), MergeCommand.MERGE_REQUESTED)
        self.assertEqual(classify_comment("\t/merge cancel  "), MergeCommand.MERGE_CANCELLED)

    def test_command_among_other_lines(self):
        """The command may sit on any line of a longer comment."""
        body = "Looks good to me.\n\n/merge\nThanks!"
        self.assertEqual(classify_comment(body), MergeCommand.MERGE_REQUESTED)

    def test_windows_line_endings(self):
        """CRLF-separated bodies are split into lines."""
        body = "LGTM\r\n/merge cancel\r\n"
        self.assertEqual(classify_comment(body), MergeCommand.MERGE_CANCELLED)

    def test_old_mac_line_endings(self):
        """Bare CR separates lines too."""
        self.assertEqual(classify_comment("LGTM\r/merge"), MergeCommand.MERGE_REQUESTED)

    def test_other_separators_do_not_break_lines(self):
        """Form feeds and Unicode separators keep text on the same line."""
        self.assertEqual(classify_comment("see\x0c/merge"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("x\u2028/merge"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("x\x85/merge cancel"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("x\x1e/merge"), MergeCommand.NO_COMMAND)

    def test_command_not_alone_on_line(self):
        """Text around the command on the same line disqualifies it."""
        self.assertEqual(classify_comment("foo /merge bar"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("/merge now"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("please /merge cancel"), MergeCommand.NO_COMMAND)

    def test_no_command(self):
        """Bodies without a command line yield no command."""
        self.assertEqual(classify_comment("Nice work"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment(""), MergeCommand.NO_COMMAND)

    def test_similar_commands_do_not_match(self):
        """Prefixes and near-misses are not the merge command."""
        self.assertEqual(classify_comment("/merged"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("/mergecancel"), MergeCommand.NO_COMMAND)
        self.assertEqual(classify_comment("merge"), MergeCommand.NO_COMMAND)

    def test_cancel_requires_single_space(self):
        """Only one space may separate /merge from cancel."""
        self.assertEqual(classify_comment("/merge  cancel"), MergeCommand.NO_COMMAND)

    def test_merge_wins_over_cancel(self):
        """A body with both commands requests a merge regardless of order."""
        self.assertEqual(
            classify_comment("/merge cancel\n/merge"),
            MergeCommand.MERGE_REQUESTED
        )
        self.assertEqual(
            classify_comment("/merge\n/merge cancel"),
            MergeCommand.MERGE_REQUESTED
        )


@pytest.mark.parametrize("body,expected", [
    ("/merge", MergeCommand.MERGE_REQUESTED),
    ("/MERGE", MergeCommand.MERGE_REQUESTED),
    ("/merge cancel", MergeCommand.MERGE_CANCELLED),
    ("/MERGE CANCEL", MergeCommand.MERGE_CANCELLED),
    ("foo /merge bar", MergeCommand.NO_COMMAND),
    ("> /merge", MergeCommand.NO_COMMAND),
])
def test_classify_comment_table(body, expected):
    """Spot-check classification across forms."""
    assert classify_comment(body) is expected
