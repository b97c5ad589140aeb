"""Pytest configuration and shared fixtures."""

import shutil
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from potluck.config import Settings, get_settings
from potluck.exceptions import VCSError
from potluck.models import Recipe
from potluck.repository import RecipeRepository
from potluck.vcs.base import VersionControl

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that drive the real git binary"
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests change the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# In-memory version control
# =============================================================================


class FakeVersionControl(VersionControl):
    """
    Tracks file contents in memory, like a tiny git.

    ``stage`` records content that differs from the last commit, so staging an
    unchanged file leaves nothing to commit. Operations named in ``fail_on``
    raise the given exception.
    """

    def __init__(self, repo_dir: str | Path, initialized: bool = True):
        super().__init__(repo_dir)
        self.initialized = initialized
        self.tracked: dict[str, bytes] = {}
        self.staged: dict[str, bytes | None] = {}
        self.commits: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self.resets = 0
        self.fail_on: dict[str, Exception] = {}

    @property
    def name(self) -> str:
        return "fake"

    def _record(self, op: str, arg: object = "") -> None:
        self.calls.append((op, str(arg)))
        if op in self.fail_on:
            raise self.fail_on[op]

    def _rel(self, path: str | Path) -> str:
        path = Path(path)
        if path.is_absolute():
            path = path.relative_to(self.repo_dir)
        return path.as_posix()

    def _on_disk(self, rel: str) -> dict[str, bytes]:
        full = self.repo_dir / rel
        if full.is_file():
            return {rel: full.read_bytes()}
        if full.is_dir():
            return {
                p.relative_to(self.repo_dir).as_posix(): p.read_bytes()
                for p in full.rglob("*")
                if p.is_file()
            }
        return {}

    def _known(self, rel: str) -> set[str]:
        return {
            key
            for key in (*self.tracked, *self.staged)
            if key == rel or key.startswith(rel + "/")
        }

    def stage(self, path: str | Path) -> None:
        self._record("stage", path)
        rel = self._rel(path)
        on_disk = self._on_disk(rel)
        known = self._known(rel)

        if not on_disk and not known and not (self.repo_dir / rel).is_dir():
            raise VCSError(f"pathspec '{rel}' did not match any files", command="add")

        for key in known - on_disk.keys():
            if key in self.tracked:
                self.staged[key] = None
            else:
                self.staged.pop(key, None)

        for key, content in on_disk.items():
            if self.tracked.get(key) != content:
                self.staged[key] = content
            else:
                self.staged.pop(key, None)

    def remove(self, path: str | Path) -> None:
        self._record("remove", path)
        rel = self._rel(path)
        keys = {key for key in self._known(rel) if key in self.tracked}
        if not keys:
            raise VCSError(f"pathspec '{rel}' did not match any files", command="rm")

        full = self.repo_dir / rel
        if full.is_dir():
            shutil.rmtree(full)
        elif full.exists():
            full.unlink()

        for key in keys:
            self.staged[key] = None

    def unstage_all(self) -> None:
        self._record("unstage_all")
        self.resets += 1
        self.staged.clear()

    def has_changes(self, cached: bool) -> bool:
        self._record("has_changes", cached)
        return bool(self.staged)

    def commit(self, message: str) -> None:
        self._record("commit", message)
        if not self.staged:
            raise VCSError("nothing to commit", command="commit")
        for key, content in self.staged.items():
            if content is None:
                self.tracked.pop(key, None)
            else:
                self.tracked[key] = content
        self.staged.clear()
        self.commits.append(message)

    def init(self) -> None:
        self._record("init")
        self.initialized = True

    def exists(self) -> bool:
        return self.initialized


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with an editor that exits immediately without changes."""
    return Settings(editor="true", default_persons=2)


@pytest.fixture
def fake_vcs_factory() -> Callable[..., FakeVersionControl]:
    return FakeVersionControl


@pytest.fixture
def repo(tmp_path, settings) -> RecipeRepository:
    """An initialized repository backed by FakeVersionControl."""
    repo_dir = tmp_path / "recipes"
    repo_dir.mkdir()

    vcs = FakeVersionControl(repo_dir)
    repository = RecipeRepository(repo_dir, vcs=vcs, settings=settings)
    repository.index.save()
    vcs.stage(repository.index.filename)
    vcs.commit("potluck initialized")
    return repository


@pytest.fixture
def add_recipe(repo) -> Callable[..., Recipe]:
    """Write, index and commit a recipe record directly."""

    def _add(file: str, /, images: dict[str, bytes] | None = None, **fields) -> Recipe:
        recipe = Recipe(**fields)
        for filename, content in (images or {}).items():
            image_path = repo.image_dir(file) / filename
            image_path.parent.mkdir(parents=True, exist_ok=True)
            image_path.write_bytes(content)
            recipe.images.append(repo.relative(image_path))

        recipe.save(repo.recipe_path(file))
        repo.index.add(file)
        repo.index.save()

        repo.vcs.stage(file)
        repo.vcs.stage(repo.index.filename)
        for image in recipe.images:
            repo.vcs.stage(image)
        repo.vcs.commit(f"add {file}")
        return recipe

    return _add


@pytest.fixture
def recipe_file(tmp_path) -> Callable[..., Path]:
    """Write a standalone recipe YAML file outside the repository."""

    def _write(filename: str, data: dict) -> Path:
        source_dir = tmp_path / "incoming"
        source_dir.mkdir(exist_ok=True)
        path = source_dir / filename
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def pasta_data() -> dict:
    """Sample recipe record content."""
    return {
        "name": "Pasta with mushrooms",
        "category": "main",
        "persons": 2,
        "images": [],
        "duration": {"preparation": "15m", "cooking": "20m", "total": "35m"},
        "ingredients": ["250g pasta", "1-2 cups mushrooms", "salt"],
        "spices": ["pepper"],
        "complementaries": ["parmesan"],
        "recipe": ["Boil pasta", "Fry mushrooms", "Mix"],
    }
