"""gh-merge - comment commands that gate pull request merges."""

__version__ = "0.1.0"
