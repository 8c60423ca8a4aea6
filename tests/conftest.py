import os

os.environ.setdefault("AI_MODE", "mock")

import secrets
from datetime import datetime, timedelta, timezone

import pytest
import fakeredis
import fakeredis.aioredis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fridgechef.main import app
from fridgechef.db import Base, get_db
from fridgechef.deps import get_object_store
from fridgechef.infra import redis_client
from fridgechef.infra.rate_limit import limiter
from fridgechef.models import AuthSession, Recipe, User
from fridgechef.storage.s3_compat import PutResult, S3CompatStore


# --- Test Database Setup ---

@compiles(JSONB, 'sqlite')
def compile_jsonb(element, compiler, **kw):
    return "JSON"


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_sqlite_fks(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- Fakes ---

class FakeStore:
    """In-memory stand-in for the S3 bucket."""

    public_base_url = "https://bucket.test/fridgechef"

    def __init__(self):
        self.objects: dict[str, tuple[str, bytes]] = {}
        self.deleted: list[str] = []
        self.fail_puts = False

    def healthcheck(self) -> bool:
        return not self.fail_puts

    def put_bytes(self, *, key: str, content_type: str, data: bytes) -> PutResult:
        if self.fail_puts:
            raise RuntimeError("bucket unavailable")
        self.objects[key] = (content_type, data)
        return PutResult(key=key, public_url=f"{self.public_base_url}/{key}")

    def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)

    key_for_url = S3CompatStore.key_for_url


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def mock_redis():
    server = fakeredis.FakeServer()
    redis_client._redis_async = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    yield redis_client._redis_async
    redis_client._redis_async = None


@pytest.fixture(autouse=True)
def _disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def client(fake_store):
    """Test client with DB and bucket overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: fake_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


def _make_user(db, name: str, email: str) -> User:
    user = User(name=name, email=email, email_verified=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _make_session(db, user: User, expires_in: timedelta = timedelta(days=7)) -> AuthSession:
    session = AuthSession(
        token=secrets.token_urlsafe(16),
        expires_at=datetime.now(timezone.utc) + expires_in,
        user_id=user.id,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@pytest.fixture
def user(db_session):
    return _make_user(db_session, "Ada", "ada@example.com")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "Grace", "grace@example.com")


@pytest.fixture
def auth_headers(db_session, user):
    session = _make_session(db_session, user)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def other_auth_headers(db_session, other_user):
    session = _make_session(db_session, other_user)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def make_session(db_session):
    return lambda user, **kw: _make_session(db_session, user, **kw)


@pytest.fixture
def make_recipe(db_session):
    """Insert a stored recipe directly, bypassing generation."""

    def _make(owner: User, title: str = "Leftover Fried Rice", **overrides) -> Recipe:
        fields = dict(
            user_id=owner.id,
            title=title,
            description="Quick fried rice from whatever is in the fridge.",
            ingredients=[{"name": "Cooked rice", "amount": "2 cups"}],
            instructions=["Heat oil.", "Fry the rice."],
            nutritional_info={
                "calories": 410, "protein": "12g", "carbs": "60g",
                "fat": "14g", "fiber": "3g", "servings": 2,
            },
            cooking_time="20 minutes",
            difficulty="Easy",
            cuisine="Chinese",
            original_image_url="https://x/fridge.jpg",
            finished_dish_image_url=None,
        )
        fields.update(overrides)
        recipe = Recipe(**fields)
        db_session.add(recipe)
        db_session.commit()
        db_session.refresh(recipe)
        return recipe

    return _make
