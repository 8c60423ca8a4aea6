"""Auth endpoints: email sign-up / sign-in, sign-out and session lookup.

Sessions are returned both as a cookie and as a bearer token in the body.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_session
from ..errors import AuthenticationRequired
from ..models import AuthSession
from ..schemas import AuthResponse, SessionOut, SessionResponse, SignInRequest, SignUpRequest, UserOut
from ..services.auth import authenticate, create_session, extract_token, register_user, revoke_session
from ..settings import settings

logger = logging.getLogger("fridgechef.auth")

router = APIRouter()


def _set_session_cookie(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def _client_meta(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/sign-up/email", response_model=AuthResponse)
def sign_up(
    payload: SignUpRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    user = register_user(db, name=payload.name, email=payload.email, password=payload.password)
    session = create_session(db, user, **_client_meta(request))
    _set_session_cookie(response, session)
    return AuthResponse(token=session.token, user=UserOut.model_validate(user))


@router.post("/sign-in/email", response_model=AuthResponse)
def sign_in(
    payload: SignInRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    user = authenticate(db, email=payload.email, password=payload.password)
    if user is None:
        logger.info("Rejected sign-in attempt")
        raise AuthenticationRequired("Invalid email or password")
    session = create_session(db, user, **_client_meta(request))
    _set_session_cookie(response, session)
    return AuthResponse(token=session.token, user=UserOut.model_validate(user))


@router.post("/sign-out")
def sign_out(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    token = extract_token(request)
    if token:
        revoke_session(db, token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}


@router.get("/get-session", response_model=SessionResponse)
def get_session(session: AuthSession = Depends(get_current_session)):
    return SessionResponse(
        session=SessionOut.model_validate(session),
        user=UserOut.model_validate(session.user),
    )
