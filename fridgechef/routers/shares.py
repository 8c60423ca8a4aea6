"""Public share links.

- POST /api/recipes/{id}/shares - owner creates a link (optionally expiring)
- GET /api/shares/{share_id} - anyone with the link reads the recipe
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_user, get_recipe_repository
from ..errors import NotFound, UpstreamFailure
from ..models import RecipeShare, User
from ..schemas import CreateShareRequest, RecipeOut, RecipeResponse, ShareOut
from ..services.recipe_repository import RecipeRepository
from ..settings import settings
from .recipes import parse_recipe_id

logger = logging.getLogger("fridgechef.shares")

router = APIRouter()


def _is_expired(share: RecipeShare, now: datetime) -> bool:
    if share.expires_at is None:
        return False
    expires_at = share.expires_at
    if expires_at.tzinfo is None:
        # SQLite hands back naive values; they are stored as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


@router.post("/recipes/{recipe_id}/shares", response_model=ShareOut, status_code=201)
def create_share(
    recipe_id: str,
    payload: Optional[CreateShareRequest] = Body(None),
    user: User = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_recipe_repository),
    db: Session = Depends(get_db),
):
    rid = parse_recipe_id(recipe_id)
    recipe = repository.get_for_user(rid, user.id)
    if recipe is None:
        raise NotFound("Recipe not found")

    days = payload.expires_in_days if payload and payload.expires_in_days else settings.share_ttl_days_default
    expires_at = datetime.now(timezone.utc) + timedelta(days=days) if days else None

    share = RecipeShare(id=secrets.token_urlsafe(16), recipe_id=recipe.id, expires_at=expires_at)
    try:
        db.add(share)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error sharing recipe {rid}: {e}")
        raise UpstreamFailure("Failed to create share link")
    logger.info(f"Shared recipe {recipe.id} as {share.id}")
    return ShareOut(share_id=share.id, recipe_id=recipe.id, expires_at=expires_at)


@router.get("/shares/{share_id}", response_model=RecipeResponse)
def read_share(share_id: str, db: Session = Depends(get_db)):
    try:
        share = db.get(RecipeShare, share_id)
        recipe = RecipeOut.model_validate(share.recipe) if share is not None else None
    except Exception as e:
        logger.error(f"Error fetching share {share_id}: {e}")
        raise UpstreamFailure("Failed to fetch shared recipe")

    if share is None or _is_expired(share, datetime.now(timezone.utc)):
        raise NotFound("Shared recipe not found")
    return RecipeResponse(recipe=recipe)
