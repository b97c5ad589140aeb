"""Base interface for version control backends."""

from abc import ABC, abstractmethod
from pathlib import Path


class VersionControl(ABC):
    """Abstract version control working tree used by mutating commands."""

    def __init__(self, repo_dir: str | Path):
        self.repo_dir = Path(repo_dir)

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend name for logging and identification."""
        pass

    @abstractmethod
    def stage(self, path: str | Path) -> None:
        """
        Stage additions, modifications and deletions under ``path``.

        Raises:
            VCSError: If staging fails.
        """
        pass

    @abstractmethod
    def remove(self, path: str | Path) -> None:
        """Delete ``path`` from the working tree and stage the deletion."""
        pass

    @abstractmethod
    def unstage_all(self) -> None:
        """Drop everything staged but not committed. Used for rollback."""
        pass

    @abstractmethod
    def has_changes(self, cached: bool) -> bool:
        """
        Report pending changes.

        Args:
            cached: Compare the staging area against HEAD instead of the
                working tree against the staging area.
        """
        pass

    @abstractmethod
    def commit(self, message: str) -> None:
        """Commit staged changes."""
        pass

    @abstractmethod
    def init(self) -> None:
        """Create an empty repository in ``repo_dir``."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check if ``repo_dir`` is inside a repository of this backend."""
        pass
