"""The recipe-set index kept at the repository root."""

from pathlib import Path

import yaml

from potluck.config import get_settings
from potluck.exceptions import RecipeFormatError
from potluck.logging_config import get_logger

logger = get_logger(__name__)


class RecipeIndex:
    """
    Mapping of recipe name to presence flag, persisted as YAML.

    A name is present if and only if the matching record file exists;
    callers keep that true by saving after every structural change.
    """

    def __init__(self, repo_dir: str | Path, filename: str | None = None):
        self.repo_dir = Path(repo_dir)
        self.path = self.repo_dir / (filename or get_settings().index_filename)
        self.recipes: dict[str, bool] = {}

    @property
    def filename(self) -> str:
        """Index file name relative to the repository root."""
        return self.path.name

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> "RecipeIndex":
        """Read the index from disk."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise RecipeFormatError(f"Reading index {self.path} ({e})", str(self.path)) from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise RecipeFormatError(
                f"Seems like index {self.path} is not valid yaml ({e})", str(self.path)
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise RecipeFormatError(f"Index {self.path} is not a mapping", str(self.path))

        self.recipes = {str(name): bool(present) for name, present in data.items()}
        logger.debug(f"Loaded index {self.path} with {len(self.recipes)} recipes")
        return self

    def save(self) -> None:
        """Write the index to disk."""
        content = yaml.safe_dump(self.recipes, sort_keys=True, default_flow_style=False)
        self.path.write_text(content, encoding="utf-8")
        logger.debug(f"Saved index {self.path} with {len(self.recipes)} recipes")

    def contains(self, name: str) -> bool:
        return name in self.recipes

    def add(self, name: str) -> None:
        self.recipes[name] = True

    def remove(self, name: str) -> None:
        self.recipes.pop(name, None)

    def names(self) -> list[str]:
        """Recipe names in sorted order."""
        return sorted(self.recipes)

    def __len__(self) -> int:
        return len(self.recipes)
