"""Print commit history as JSON Lines, one record per commit."""

__version__ = "0.1.0"
