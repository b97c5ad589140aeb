"""Version control backends for the recipe repository."""

from potluck.vcs.base import VersionControl
from potluck.vcs.git import GitVersionControl

__all__ = [
    "GitVersionControl",
    "VersionControl",
]
