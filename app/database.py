from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
import os
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./movies.db")


def _engine_options(url: str) -> dict:
    """Pool settings only apply to server databases; SQLite uses its own pool."""
    options = {
        "echo": os.getenv("DB_ECHO", "false").lower() == "true",  # Set to true for SQL debugging
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=int(os.getenv("DB_POOL_SIZE", 5)),  # Number of connections to keep open
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),  # Max connections beyond pool_size
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", 30)),  # Seconds to wait for connection
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", 3600)),  # Recycle connections after 1 hour
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Rating upserts rely on INSERT ... ON CONFLICT DO UPDATE
SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def ensure_supported_dialect(dialect_name: str) -> None:
    """Refuse to start against a database the repositories cannot write to"""
    if dialect_name not in SUPPORTED_DIALECTS:
        raise ValueError(
            f"DATABASE_URL uses '{dialect_name}'; supported databases are {', '.join(SUPPORTED_DIALECTS)}"
        )


ensure_supported_dialect(engine.dialect.name)


def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores REFERENCES clauses unless asked per connection"""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if engine.dialect.name == "sqlite":
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)


@event.listens_for(engine.sync_engine, "checkout")
def receive_checkout(dbapi_conn, connection_record, connection_proxy):
    """Log when a connection is checked out from the pool"""
    logger.debug("Connection checked out from pool")


AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
Base = declarative_base()


# Dependency for FastAPI routes
async def get_db():
    """
    Database session dependency for FastAPI.
    One session per request; it is closed (and any open transaction rolled
    back) on every exit path, including cancellation of the request task.

    Usage:
        @router.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            # Use db here
    """
    async with AsyncSessionLocal() as db:
        yield db


def get_db_session() -> AsyncSession:
    """
    Get a database session for manual management (scripts, consoles).

    Usage:
        async with get_db_session() as db:
            ...
    """
    return AsyncSessionLocal()


async def init_db() -> None:
    """Create the movies, genres and ratings tables if they do not exist."""
    import app.models  # noqa: F401  registers the tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
