"""
Comment command classification.

Turns a comment body into the merge intent it expresses by scanning
it line by line for a standalone ``/merge`` or ``/merge cancel``.
"""

import re
from enum import Enum

MERGE_COMMAND = "/merge"
CANCEL_ARGUMENT = "cancel"

# Only real line breaks; str.splitlines() also splits on form feeds and U+2028
LINE_BREAK = re.compile(r'\r\n|\r|\n')


class MergeCommand(Enum):
    """Intent expressed by a comment."""

    MERGE_REQUESTED = "merge_requested"
    MERGE_CANCELLED = "merge_cancelled"
    NO_COMMAND = "no_command"


def _is_merge_line(line: str) -> bool:
    return line.strip().lower() == MERGE_COMMAND


def _is_cancel_line(line: str) -> bool:
    stripped = line.strip().lower()
    # Exactly one space between the command and its argument
    return stripped == f"{MERGE_COMMAND} {CANCEL_ARGUMENT}"


def classify_comment(body: str) -> MergeCommand:
    """
    Classify a comment body into a merge command.

    A command must stand alone on its line; case and whitespace around
    it are ignored. The whole body is checked for ``/merge`` before it
    is checked for ``/merge cancel``, so a body holding both requests a
    merge.

    Args:
        body: Comment body, possibly multi-line

    Returns:
        The merge command the body expresses
    """
    if not body:
        return MergeCommand.NO_COMMAND

    lines = LINE_BREAK.split(body)
    if any(_is_merge_line(line) for line in lines):
        return MergeCommand.MERGE_REQUESTED
    if any(_is_cancel_line(line) for line in lines):
        return MergeCommand.MERGE_CANCELLED
    return MergeCommand.NO_COMMAND
