"""Access to a recipe repository directory: index, records, images and VCS."""

from pathlib import Path

from potluck.config import Settings, get_settings
from potluck.exceptions import RecipeNotFoundError, RepositoryError
from potluck.index import RecipeIndex
from potluck.logging_config import get_logger
from potluck.models import Recipe
from potluck.vcs.base import VersionControl
from potluck.vcs.git import GitVersionControl

logger = get_logger(__name__)


class RecipeRepository:
    """A directory under version control holding recipe records and the index."""

    def __init__(
        self,
        repo_dir: str | Path,
        vcs: VersionControl | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.repo_dir = Path(repo_dir)
        self.vcs = vcs or GitVersionControl(self.repo_dir, binary=self.settings.git_binary)
        self.index = RecipeIndex(self.repo_dir, filename=self.settings.index_filename)

    def check(self) -> None:
        """
        Verify both halves of a repository are present.

        Raises:
            RepositoryError: With a message naming the missing half.
        """
        default_error = f"Seems not to be a potluck repository in '{self.repo_dir}'"

        vcs_exists = self.vcs.exists()
        index_exists = self.index.exists()

        if not vcs_exists and index_exists:
            raise RepositoryError(
                f"{default_error}: There is an index, but no {self.vcs.name} repository",
                str(self.repo_dir),
            )
        if vcs_exists and not index_exists:
            raise RepositoryError(
                f"{default_error}: There is a {self.vcs.name} repository, but no index",
                str(self.repo_dir),
            )
        if not vcs_exists and not index_exists:
            raise RepositoryError(default_error, str(self.repo_dir))

    def open(self) -> "RecipeRepository":
        """Check the directory and load the index."""
        self.check()
        self.index.load()
        return self

    def recipe_path(self, name: str) -> Path:
        return self.repo_dir / name

    @property
    def images_root(self) -> Path:
        return self.repo_dir / self.settings.images_dirname

    def image_dir(self, name: str) -> Path:
        return self.images_root / name

    def relative(self, path: str | Path) -> str:
        """Path relative to the repository root, as stored in records."""
        return Path(path).resolve().relative_to(self.repo_dir.resolve()).as_posix()

    def load_recipe(self, name: str) -> Recipe:
        """Parse a recipe known to the index."""
        if not self.index.contains(name):
            raise RecipeNotFoundError(name)
        return Recipe.parse(self.recipe_path(name))
