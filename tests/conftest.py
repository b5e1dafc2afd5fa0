import os
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Keep the app from creating a schema on its own database during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["DB_INIT_ON_STARTUP"] = "false"

from app.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Genre, Movie, Rating  # noqa: E402,F401
from app.schemas.movie import MovieRecord  # noqa: E402
from app.utils.cache import output_cache  # noqa: E402
from app.utils.security import create_access_token  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def database_url(tmp_path):
    """A fresh SQLite file per test, with the schema already created."""
    path = tmp_path / "movies.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(bind=sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_factory(database_url):
    engine = create_async_engine(database_url, poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    """Provide a database session for coroutine tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def client(session_factory):
    """FastAPI test client with the database dependency overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    output_cache.clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)
    output_cache.clear()


def make_movie(title="The Matrix", year_of_release=1999, genres=("Action", "Sci-Fi"), movie_id=None):
    return MovieRecord(
        id=movie_id or uuid.uuid4(),
        title=title,
        year_of_release=year_of_release,
        genres=list(genres),
    )


def auth_headers(user_id=None, admin=False, trusted_member=False):
    """Bearer header for a token carrying the given capabilities"""
    claims = {"userid": str(user_id or uuid.uuid4())}
    if admin:
        claims["admin"] = True
    if trusted_member:
        claims["trusted_member"] = True
    return {"Authorization": f"Bearer {create_access_token(claims)}"}
