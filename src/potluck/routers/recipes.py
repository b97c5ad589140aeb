"""Read-only API routes for recipes and grocery lists."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel

from potluck.exceptions import PotluckError, RecipeNotFoundError, ScalingError
from potluck.logging_config import get_logger
from potluck.models import Recipe
from potluck.plan.shopping_list import ShoppingListGenerator
from potluck.repository import RecipeRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["recipes"])


# Request/Response schemas
class RecipeSummary(BaseModel):
    """One entry of the recipe listing."""

    file: str
    name: str
    category: str
    persons: int
    images: list[str]


class RecipeListResponse(BaseModel):
    """List of recipes known to the index."""

    recipes: list[RecipeSummary]
    total: int


class RecipeResponse(BaseModel):
    """Single recipe response."""

    file: str
    recipe: Recipe


class GroceryResponse(BaseModel):
    """Scaled ingredient list."""

    persons: int
    recipes: list[str]
    items: list[str]


def get_repository(request: Request) -> RecipeRepository:
    """Repository with a freshly loaded index, so edits show up without restart."""
    repo: RecipeRepository = request.app.state.repository
    repo.index.load()
    return repo


def _load(repo: RecipeRepository, name: str) -> Recipe:
    try:
        return repo.load_recipe(name)
    except RecipeNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {name} not found",
        )
    except (OSError, PotluckError) as e:
        logger.error(f"Failed to load recipe {name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load recipe {name}",
        )


# =============================================================================
# Recipe Endpoints
# =============================================================================


@router.get("/recipes", response_model=RecipeListResponse)
def list_recipes(
    category: Annotated[str | None, Query(description="Filter by category")] = None,
    repo: RecipeRepository = Depends(get_repository),
) -> RecipeListResponse:
    """List recipes sorted by file name, optionally filtered by category."""
    summaries = []
    for name in repo.index.names():
        recipe = _load(repo, name)
        if category and recipe.category != category:
            continue
        summaries.append(
            RecipeSummary(
                file=name,
                name=recipe.name,
                category=recipe.category,
                persons=recipe.persons,
                images=recipe.images,
            )
        )

    return RecipeListResponse(recipes=summaries, total=len(summaries))


@router.get("/recipes/{name:path}/grocery", response_model=GroceryResponse)
def recipe_grocery(
    name: str,
    persons: Annotated[
        int, Query(description="Persons to cook for; 0 uses the recipe's own count")
    ] = 0,
    repo: RecipeRepository = Depends(get_repository),
) -> GroceryResponse:
    """Ingredient list for one recipe scaled to ``persons``."""
    recipe = _load(repo, name)
    generator = ShoppingListGenerator(lambda _name: recipe)

    try:
        shopping_list = generator.generate([name], persons)
    except ScalingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return GroceryResponse(
        persons=persons if persons > 0 else recipe.persons,
        recipes=shopping_list.recipe_names,
        items=shopping_list.items,
    )


@router.get("/recipes/{name:path}", response_model=RecipeResponse)
def get_recipe(
    name: str,
    repo: RecipeRepository = Depends(get_repository),
) -> RecipeResponse:
    """Get a single recipe record."""
    logger.info(f"Fetching recipe: {name}")
    return RecipeResponse(file=name, recipe=_load(repo, name))
