"""potluck: a git-versioned recipe collection with merged grocery lists."""

__version__ = "0.1.0"
