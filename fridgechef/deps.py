"""FastAPI dependencies for the FridgeChef API.

Provides:
- Session gate (cookie or bearer token -> user)
- Object store, recipe repository and generation pipeline
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .db import get_db
from .errors import AuthenticationRequired
from .models import AuthSession, User
from .services.ai_service import ai_service
from .services.auth import SessionResolver, extract_token
from .services.recipe_pipeline import RecipePipeline
from .services.recipe_repository import RecipeRepository
from .storage.s3_compat import S3CompatStore, get_store


def get_session_resolver(db: Session = Depends(get_db)) -> SessionResolver:
    return SessionResolver(db)


def get_current_session(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> AuthSession:
    """Resolve credentials before any other work; 401 when there is no live session."""
    resolved = resolver.resolve(extract_token(request))
    if resolved is None:
        raise AuthenticationRequired()
    session, _ = resolved
    return session


def get_current_user(session: AuthSession = Depends(get_current_session)) -> User:
    return session.user


def get_object_store() -> S3CompatStore:
    return get_store()


def get_recipe_repository(db: Session = Depends(get_db)) -> RecipeRepository:
    return RecipeRepository(db)


def get_pipeline(
    repository: RecipeRepository = Depends(get_recipe_repository),
    store: S3CompatStore = Depends(get_object_store),
) -> RecipePipeline:
    return RecipePipeline(ai=ai_service, store=store, repository=repository)


def requires_session(route) -> bool:
    """True when the matched route sits behind the session gate."""
    dependant = getattr(route, "dependant", None)
    return dependant is not None and _depends_on(dependant, get_current_session)


def _depends_on(dependant, call) -> bool:
    return any(d.call is call or _depends_on(d, call) for d in dependant.dependencies)


def has_live_session(request: Request) -> bool:
    """Resolve the session outside normal dependency solving (error handlers).

    Honours ``dependency_overrides`` for ``get_db`` so tests see the same database.
    """
    provider = request.app.dependency_overrides.get(get_db, get_db)
    db_iter = provider()
    db = next(db_iter)
    try:
        return SessionResolver(db).resolve(extract_token(request)) is not None
    finally:
        db_iter.close()
