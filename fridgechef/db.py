"""Engine and session management.

The engine is built lazily from ``settings.database_url`` so tests (and the
``scripts/init_db.py`` helper) can point it somewhere else first.
"""

from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .settings import settings

logger = logging.getLogger("fridgechef.db")


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def init_engine(database_url: str | None = None) -> Engine:
    global _engine, _session_factory
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    _engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args)
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info(f"Database engine initialised for dialect={_engine.dialect.name}")
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        init_engine()
    return _engine


def session_factory() -> sessionmaker:
    if _session_factory is None:
        init_engine()
    return _session_factory


def create_all() -> None:
    """Create every table directly (dev only; production runs Alembic)."""
    from . import models  # noqa: F401  registers the mappers

    Base.metadata.create_all(bind=get_engine())


def get_db() -> Iterator[Session]:
    db = session_factory()()
    try:
        yield db
    finally:
        db.close()
