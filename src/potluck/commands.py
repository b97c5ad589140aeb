"""Command handlers behind the potluck command line."""

import re
import shutil
import subprocess
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import timedelta
from pathlib import Path

from potluck.config import Settings, get_settings
from potluck.exceptions import (
    PotluckError,
    RecipeExistsError,
    RecipeNotFoundError,
    RepositoryError,
)
from potluck.index import RecipeIndex
from potluck.logging_config import get_logger
from potluck.models import Recipe
from potluck.plan.planner import MealPlanner, dump_plan, load_plan_files, parse_date
from potluck.plan.shopping_list import ShoppingListGenerator, aggregate, to_sorted_list
from potluck.repository import RecipeRepository
from potluck.transaction import Transaction
from potluck.vcs.base import VersionControl
from potluck.vcs.git import GitVersionControl

logger = get_logger(__name__)

Echo = Callable[[str], None]


# =============================================================================
# Helpers
# =============================================================================


def guard_exists(path: Path) -> None:
    """Refuse to overwrite ``path`` unless the caller passed --force."""
    if path.exists():
        raise RecipeExistsError(str(path))


def edit_file(path: Path, editor: str | None = None) -> None:
    """Open ``path`` in the configured editor and wait for it to exit."""
    editor = editor or get_settings().editor
    logger.debug(f"Opening {path} in {editor}")

    try:
        proc = subprocess.run([editor, str(path)], check=False)
    except OSError as e:
        raise PotluckError(f"Running {editor} to edit {path} failed ({e})") from e

    if proc.returncode != 0:
        raise PotluckError(f"Running {editor} to edit {path} failed (exit {proc.returncode})")


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")


def parse_duration(value: str) -> timedelta:
    """
    Parse durations such as "1h30m", "45m", "90s" or "1.5h".

    An empty string means no expected duration.
    """
    value = value.strip()
    if not value:
        return timedelta(0)

    pos = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        amount = float(match.group(1))
        seconds += amount * {"h": 3600, "m": 60, "s": 1}[match.group(2)]
        pos = match.end()

    if pos != len(value):
        raise PotluckError(f"Invalid duration '{value}', expected e.g. 1h30m, 45m or 90s")

    return timedelta(seconds=seconds)


def _clock(elapsed: float, expected: timedelta) -> str:
    elapsed_s = int(elapsed)
    expected_s = int(expected.total_seconds())
    return (
        f"[{elapsed_s // 60:02d}:{elapsed_s % 60:02d}/"
        f"{expected_s // 60:02d}:{expected_s % 60:02d}]"
    )


# =============================================================================
# Managing commands
# =============================================================================


def handle_init(
    repo_dir: str | Path,
    vcs: VersionControl | None = None,
    settings: Settings | None = None,
    echo: Echo = print,
) -> bool:
    """
    Create a new recipe repository.

    Returns:
        True if a repository was created, False if one already existed.
    """
    settings = settings or get_settings()
    repo_dir = Path(repo_dir)

    if not repo_dir.exists():
        repo_dir.mkdir(parents=True, mode=0o700)
    elif not repo_dir.is_dir():
        raise RepositoryError(f"{repo_dir} already exists and is not a directory", str(repo_dir))

    vcs = vcs or GitVersionControl(repo_dir, binary=settings.git_binary)
    index = RecipeIndex(repo_dir, filename=settings.index_filename)

    vcs_exists = vcs.exists()
    index_exists = index.exists()

    if vcs_exists and index_exists:
        echo(f"Info: There is already a potluck repository in '{repo_dir}'. Nothing to do.")
        return False
    if vcs_exists:
        raise RepositoryError(
            f"There is already a {vcs.name} repository in '{repo_dir}'", str(repo_dir)
        )
    if index_exists:
        raise RepositoryError(f"There is already an index file in '{repo_dir}'", str(repo_dir))

    with Transaction(vcs, "potluck initialized", notify=echo) as tx:
        tx.add_step(f"{vcs.name} init", vcs.init)
        tx.add_step("write index", index.save)
        tx.stage(index.filename)

    logger.info(f"Initialized recipe repository in {repo_dir}")
    return True


# =============================================================================
# Single recipes
# =============================================================================


def _create_recipe(
    repo: RecipeRepository,
    name: str,
    source: Path | None,
    force: bool,
    quiet: bool,
) -> Path:
    """Write a new record file and return the directory its images are relative to."""
    path_name = repo.recipe_path(name)
    path_name.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    if not force:
        guard_exists(path_name)

    if source is not None:
        Recipe.parse(source).save(path_name)
        return source.parent

    Recipe().save(path_name)
    if not quiet:
        edit_file(path_name, repo.settings.editor)
    return repo.repo_dir


def _copy_image(repo: RecipeRepository, name: str, source: Path) -> str:
    image_dir = repo.image_dir(name)
    image_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
    destination = image_dir / source.name
    shutil.copyfile(source, destination)
    return repo.relative(destination)


def handle_add(
    repo: RecipeRepository,
    name: str,
    path: str | Path | None = None,
    images: Sequence[str | Path] = (),
    force: bool = False,
    quiet: bool = False,
    echo: Echo = print,
) -> bool:
    """
    Add a new recipe, or attach more images to an existing one.

    A new recipe is either copied from ``path`` (its images are resolved
    relative to that file) or created from the empty template and opened in
    the editor unless ``quiet``.
    """
    recipe_exists = repo.index.contains(name)
    path_name = repo.recipe_path(name)

    if recipe_exists and path is not None:
        raise PotluckError(f"Recipe '{name}' already exists")

    source_dir = repo.repo_dir
    if not recipe_exists:
        source = Path(path).resolve() if path is not None else None
        source_dir = _create_recipe(repo, name, source, force, quiet)

    recipe = Recipe.parse(path_name)

    recorded: list[str] = []
    if recipe_exists:
        recorded.extend(recipe.images)
    else:
        for image in recipe.images:
            recorded.append(_copy_image(repo, name, source_dir / image))

    for image in images:
        rel_path = _copy_image(repo, name, Path(image))
        if rel_path not in recorded:
            recorded.append(rel_path)

    recipe.images = recorded
    repo.index.add(name)

    message = "Image added to recipe" if recipe_exists else "New recipe added"
    with Transaction(
        repo.vcs, message, empty_message="No new things here. Nothing to do.", notify=echo
    ) as tx:
        tx.add_step(f"write {name}", recipe.save, path_name)
        tx.add_step("write index", repo.index.save)
        for image in recorded:
            tx.stage(image)
        tx.stage(repo.index.filename)
        tx.stage(name)

    return tx.committed


def handle_edit(
    repo: RecipeRepository,
    name: str,
    echo: Echo = print,
) -> bool:
    """Open a recipe in the editor and commit the result, dropping removed images."""
    if not repo.index.contains(name):
        raise RecipeNotFoundError(name)

    path_name = repo.recipe_path(name)
    before = Recipe.parse(path_name)

    edit_file(path_name, repo.settings.editor)
    after = Recipe.parse(path_name)

    dropped = [image for image in before.images if image not in after.images]

    with Transaction(repo.vcs, "Recipe changed", notify=echo) as tx:
        for image in dropped:
            tx.remove(image)
        tx.stage(name)

    return tx.committed


def handle_move(
    repo: RecipeRepository,
    name: str,
    new_name: str,
    force: bool = False,
    echo: Echo = print,
) -> bool:
    """Rename a recipe together with its image directory."""
    if not repo.index.contains(name):
        raise RecipeNotFoundError(name)

    old_path = repo.recipe_path(name)
    new_path = repo.recipe_path(new_name)

    if not force:
        guard_exists(new_path)

    recipe = Recipe.parse(old_path)

    old_images = repo.image_dir(name)
    new_images = repo.image_dir(new_name)
    images_moved = old_images.is_dir()

    if recipe.images:
        old_prefix = repo.relative(old_images) + "/"
        recipe.images = [
            repo.relative(new_images) + "/" + image[len(old_prefix):]
            if image.startswith(old_prefix)
            else image
            for image in recipe.images
        ]

    repo.index.remove(name)
    repo.index.add(new_name)

    new_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    if images_moved:
        new_images.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    # Record and index on disk change together.
    with Transaction(repo.vcs, "Recipe moved", notify=echo) as tx:
        tx.add_step(f"rename {name}", old_path.rename, new_path)
        tx.add_step("write index", repo.index.save)
        if images_moved:
            tx.add_step(f"rename images of {name}", old_images.rename, new_images)
        tx.add_step(f"write {new_name}", recipe.save, new_path)
        tx.stage(repo.index.filename)
        tx.stage(name)
        tx.stage(new_name)
        if images_moved and recipe.images:
            tx.stage(repo.relative(old_images))
            tx.stage(repo.relative(new_images))

    return tx.committed


def handle_remove(
    repo: RecipeRepository,
    name: str,
    echo: Echo = print,
) -> bool:
    """Remove a recipe, its images and its index entry."""
    if not repo.index.contains(name):
        raise RecipeNotFoundError(name)

    recipe = Recipe.parse(repo.recipe_path(name))
    repo.index.remove(name)

    # The index drops the name only once the record is gone.
    with Transaction(repo.vcs, "Recipe removed", notify=echo) as tx:
        for image in recipe.images:
            tx.remove(image)
        tx.remove(name)
        tx.add_step("write index", repo.index.save)
        tx.stage(repo.index.filename)

    return tx.committed


# =============================================================================
# Listing and viewing
# =============================================================================


def handle_list(repo: RecipeRepository, show_images: bool = False) -> list[str]:
    """Lines of ``<file> (<recipe name>)``, sorted by file name."""
    lines = []
    for name in repo.index.names():
        recipe = repo.load_recipe(name)
        lines.append(f"{name} ({recipe.name})")
        if show_images:
            lines.extend(f"    {image}" for image in recipe.images)
    return lines


def handle_grocery(
    repo: RecipeRepository,
    names: Iterable[str] = (),
    plans: Iterable[str | Path] = (),
    persons: int | None = None,
) -> list[str]:
    """Merged grocery list for the named recipes and/or plan files."""
    persons = repo.settings.default_persons if persons is None else persons
    all_names = list(names) + load_plan_files(plans)

    generator = ShoppingListGenerator(repo.load_recipe)
    shopping_list = generator.generate(all_names, persons)

    return [f"Persons: {persons}", *shopping_list.items]


def handle_plan(
    repo: RecipeRepository,
    start: str | None = None,
    end: str | None = None,
    planner: MealPlanner | None = None,
) -> str:
    """YAML meal plan covering ``start`` to ``end``."""
    planner = planner or MealPlanner(repo.index.names())
    plan = planner.plan(
        start=parse_date(start) if start else None,
        end=parse_date(end) if end else None,
    )
    return dump_plan(plan)


def handle_cook(
    repo: RecipeRepository,
    name: str,
    persons: int | None = None,
    echo: Echo = print,
    wait: Callable[[], object] = input,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Show the scaled ingredients, then walk through the steps one Enter at a time."""
    recipe = repo.load_recipe(name)

    if persons is None or persons <= 0:
        persons = recipe.persons

    table = aggregate({}, recipe, persons)
    expected = parse_duration(recipe.duration.preparation)

    echo(f"Persons: {persons}")
    for line in to_sorted_list(table):
        echo(line)
    echo("")

    start = clock()
    for step in recipe.recipe:
        echo(f"{_clock(clock() - start, expected)} {step}")
        wait()
    echo(_clock(clock() - start, expected))


def handle_serve(repo: RecipeRepository, host: str | None = None, port: int | None = None) -> None:
    """Serve the read-only gallery and API."""
    import uvicorn

    from potluck.main import create_app

    host = host or repo.settings.serve_host
    port = port or repo.settings.serve_port

    logger.info(f"Serving {repo.repo_dir} on http://{host}:{port}")
    uvicorn.run(create_app(repo), host=host, port=port)
