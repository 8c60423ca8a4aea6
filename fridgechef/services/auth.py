"""Built-in session provider.

Users sign up with email + password (credential account), and every sign-in
issues an opaque session token stored in the ``session`` table. Protected
routes only ever talk to ``SessionResolver``.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import Conflict
from ..models import Account, AuthSession, User
from ..settings import settings

logger = logging.getLogger("fridgechef.auth")

CREDENTIAL_PROVIDER = "credential"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def extract_token(request: Request) -> Optional[str]:
    """Session token from the cookie, else from an ``Authorization: Bearer`` header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    scheme, _, value = auth_header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


class SessionResolver:
    """Resolve a token to a live (session, user) pair."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, token: Optional[str]) -> Optional[tuple[AuthSession, User]]:
        if not token:
            return None
        session = (
            self.db.query(AuthSession)
            .filter(AuthSession.token == token, AuthSession.expires_at > utcnow())
            .first()
        )
        if session is None:
            return None
        return session, session.user


def create_session(
    db: Session,
    user: User,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuthSession:
    session = AuthSession(
        token=secrets.token_urlsafe(32),
        expires_at=utcnow() + timedelta(days=settings.session_ttl_days),
        ip_address=ip_address,
        user_agent=user_agent,
        user_id=user.id,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    """Create a user with a credential account.

    The unique index on ``user.email`` is the only duplicate check, so two
    concurrent sign-ups for one address cannot both succeed.
    """
    user = User(name=name.strip(), email=normalize_email(email), email_verified=False)
    try:
        db.add(user)
        db.flush()
        db.add(Account(
            account_id=user.id,
            provider_id=CREDENTIAL_PROVIDER,
            user_id=user.id,
            password=generate_password_hash(password),
        ))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("An account with this email already exists")
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate(db: Session, *, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if user is None:
        return None
    account = (
        db.query(Account)
        .filter(Account.user_id == user.id, Account.provider_id == CREDENTIAL_PROVIDER)
        .first()
    )
    if account is None or not account.password:
        return None
    if not check_password_hash(account.password, password):
        return None
    return user


def revoke_session(db: Session, token: str) -> bool:
    deleted = db.query(AuthSession).filter(AuthSession.token == token).delete()
    db.commit()
    return deleted > 0
