"""Recipe records stored as YAML files inside the repository."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from potluck.exceptions import RecipeFormatError
from potluck.logging_config import get_logger

logger = get_logger(__name__)


class RecipeDuration(BaseModel):
    """Free-form preparation/cooking/total durations, e.g. "45m" or "1h30m"."""

    preparation: str = ""
    cooking: str = ""
    total: str = ""

    @field_validator("preparation", "cooking", "total", mode="before")
    @classmethod
    def coerce_duration(cls, v: Any) -> str:
        """YAML turns bare numbers into ints; keep durations as text."""
        if v is None:
            return ""
        return str(v)


class Recipe(BaseModel):
    """A single recipe record."""

    name: str = ""
    category: str = ""
    persons: int = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list)
    duration: RecipeDuration = Field(default_factory=RecipeDuration)
    ingredients: list[str] = Field(default_factory=list)
    spices: list[str] = Field(default_factory=list)
    complementaries: list[str] = Field(default_factory=list)
    recipe: list[str] = Field(default_factory=list)

    @field_validator("ingredients", "spices", "complementaries", "recipe", "images", mode="before")
    @classmethod
    def coerce_lines(cls, v: Any) -> list[str]:
        """Treat an empty YAML list as empty and stringify scalar entries."""
        if v is None:
            return []
        return [str(item) for item in v]

    @field_validator("name", "category", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_missing_duration(cls, v: Any) -> Any:
        if v is None:
            return {}
        return v

    @classmethod
    def parse(cls, path: str | Path) -> "Recipe":
        """Load a record file.

        Raises:
            OSError: The file cannot be read.
            RecipeFormatError: The file is not valid YAML or not a recipe mapping.
        """
        path = Path(path)
        content = path.read_text(encoding="utf-8")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise RecipeFormatError(f"Possibly not valid yaml in '{path}' ({e})", str(path)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise RecipeFormatError(f"Recipe '{path}' is not a mapping", str(path))

        try:
            recipe = cls.model_validate(data)
        except ValidationError as e:
            raise RecipeFormatError(f"Invalid recipe in '{path}' ({e})", str(path)) from e

        logger.debug(f"Parsed recipe {path}: {len(recipe.ingredients)} ingredients")
        return recipe

    def dumps(self) -> str:
        """Serialize to YAML, keeping field order."""
        return yaml.safe_dump(
            self.model_dump(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    def save(self, path: str | Path) -> None:
        """Write the record to disk."""
        Path(path).write_text(self.dumps(), encoding="utf-8")

    def image_exists(self, image: str) -> bool:
        """Check if an image path is already referenced by the record."""
        return image in self.images
