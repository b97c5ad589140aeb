"""FastAPI application serving a read-only recipe gallery."""

from html import escape
from pathlib import PurePosixPath

from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from potluck.logging_config import get_logger
from potluck.repository import RecipeRepository
from potluck.routers import recipes_router
from potluck.routers.recipes import get_repository

logger = get_logger(__name__)

GALLERY_STYLE = """
div.img { margin: 5px; border: 1px solid #ccc; float: left; width: 180px; }
div.img:hover { border: 1px solid #777; }
div.img img { width: 100%; height: auto; }
div.desc { padding: 15px; text-align: center; }
"""


def image_url(repo: RecipeRepository, image: str) -> str:
    """Map a recorded image path (``.images/<recipe>/<file>``) to its URL."""
    parts = PurePosixPath(image).parts
    if parts and parts[0] == repo.settings.images_dirname:
        parts = parts[1:]
    return "/images/" + "/".join(parts)


def render_gallery(repo: RecipeRepository) -> str:
    tiles = []
    for name in repo.index.names():
        recipe = repo.load_recipe(name)
        title = escape(recipe.name or name)
        if recipe.images:
            src = escape(image_url(repo, recipe.images[0]))
            picture = f'<a target="_blank" href="{src}"><img src="{src}" alt="{title}"></a>'
        else:
            picture = ""
        link = escape(f"/api/v1/recipes/{name}")
        tiles.append(
            f'<div class="img">{picture}<div class="desc"><a href="{link}">{title}</a></div></div>'
        )

    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<title>potluck</title>\n"
        f"<style>{GALLERY_STYLE}</style>\n</head>\n<body>\n"
        + "\n".join(tiles)
        + "\n</body>\n</html>\n"
    )


def create_app(repo: RecipeRepository) -> FastAPI:
    """Build the gallery application for an opened repository."""
    app = FastAPI(
        title="potluck",
        description="Recipe gallery and grocery lists",
        version="0.1.0",
    )
    app.state.repository = repo

    app.include_router(recipes_router)
    app.mount(
        "/images",
        StaticFiles(directory=repo.images_root, check_dir=False),
        name="images",
    )

    @app.get("/health")
    def health_check() -> dict:
        """Basic health check endpoint."""
        return {"status": "ok", "service": "potluck", "recipes": len(repo.index)}

    @app.get("/", response_class=HTMLResponse)
    def gallery(repo: RecipeRepository = Depends(get_repository)) -> str:
        """Gallery of all recipes with their first image."""
        return render_gallery(repo)

    logger.info(f"Created gallery app for {repo.repo_dir}")
    return app
