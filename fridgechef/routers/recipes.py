"""Recipes API router.

Endpoints:
- POST /api/recipes - Generate a recipe from an uploaded fridge photo
- GET /api/recipes - List the caller's recipes, newest first
- GET /api/recipes/{id} - Get one of the caller's recipes
- DELETE /api/recipes/{id} - Delete one of the caller's recipes

Every route resolves the session first; reads and deletes are scoped by
(id, user id).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from ..deps import get_current_user, get_pipeline, get_recipe_repository
from ..errors import AppError, InvalidInput, NotFound, UpstreamFailure
from ..infra.idempotency import (
    idempotency_clear_key,
    idempotency_precheck,
    idempotency_store_result,
)
from ..infra.rate_limit import limiter
from ..models import User
from ..schemas import (
    DeleteRecipeResponse,
    GenerateRecipeRequest,
    GenerateRecipeResponse,
    RecipeListResponse,
    RecipeOut,
    RecipeResponse,
)
from ..services.recipe_pipeline import PipelineAborted, RecipePipeline
from ..services.recipe_repository import RecipeRepository
from ..settings import settings

router = APIRouter()
logger = logging.getLogger("fridgechef.recipes")


def parse_recipe_id(raw: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid recipe ID")


@router.post("/recipes", response_model=GenerateRecipeResponse)
@limiter.limit(settings.rate_limit_generate)
async def create_recipe(
    request: Request,
    payload: Optional[GenerateRecipeRequest] = Body(None),
    user: User = Depends(get_current_user),
    pipeline: RecipePipeline = Depends(get_pipeline),
):
    """Run the fridge-photo pipeline and store the resulting recipe."""
    if payload is None or not payload.image_url or not payload.image_url.strip():
        raise InvalidInput("Image URL is required")

    redis_key = None
    try:
        pre = await idempotency_precheck(
            request, user_id=user.id, route_key="recipe_generate"
        )
        if isinstance(pre, JSONResponse):
            return pre
        if pre:
            redis_key, req_hash = pre

        result = await pipeline.run(
            user_id=user.id,
            image_url=payload.image_url.strip(),
            cuisine=payload.cuisine or None,
            cooking_time=payload.cooking_time or None,
        )

        body = GenerateRecipeResponse(
            success=True,
            recipe=RecipeOut.model_validate(result.recipe),
            generated_data=result.generated,
        ).model_dump(mode="json", by_alias=True)

        if redis_key:
            await idempotency_store_result(redis_key, req_hash, status=200, body=body)
        return body

    except AppError:
        await idempotency_clear_key(redis_key)
        raise
    except PipelineAborted as e:
        logger.error(f"Recipe generation aborted at {e.outcome.step}: {e.outcome.error}")
        await idempotency_clear_key(redis_key)
        raise UpstreamFailure("Failed to generate recipe. Please try again.")
    except Exception as e:
        logger.exception(f"Recipe generation error: {e}")
        await idempotency_clear_key(redis_key)
        raise UpstreamFailure("Failed to generate recipe. Please try again.")


@router.get("/recipes", response_model=RecipeListResponse)
def list_recipes(
    user: User = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    try:
        recipes = repository.list_for_user(user.id)
    except Exception as e:
        logger.error(f"Error fetching recipes: {e}")
        raise UpstreamFailure("Failed to fetch recipes")

    return RecipeListResponse(recipes=[RecipeOut.model_validate(r) for r in recipes])


@router.get("/recipes/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: str,
    user: User = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    rid = parse_recipe_id(recipe_id)
    try:
        recipe = repository.get_for_user(rid, user.id)
    except Exception as e:
        logger.error(f"Error fetching recipe {rid}: {e}")
        raise UpstreamFailure("Failed to fetch recipe")

    if recipe is None:
        raise NotFound("Recipe not found")
    return RecipeResponse(recipe=RecipeOut.model_validate(recipe))


@router.delete("/recipes/{recipe_id}", response_model=DeleteRecipeResponse)
def delete_recipe(
    recipe_id: str,
    user: User = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_recipe_repository),
):
    """Delete a recipe owned by the caller. Stored images are left in the bucket."""
    rid = parse_recipe_id(recipe_id)
    try:
        deleted = repository.delete_for_user(rid, user.id)
    except Exception as e:
        logger.error(f"Error deleting recipe {rid}: {e}")
        raise UpstreamFailure("Failed to delete recipe")

    if not deleted:
        raise NotFound("Recipe not found")

    logger.info(f"Deleted recipe {rid} for user {user.id}")
    return DeleteRecipeResponse(success=True, message="Recipe deleted successfully")
