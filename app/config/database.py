"""Database configuration and connection setup"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from app.config.settings import get_settings
from app.core.exceptions import PersistenceUnavailableError

settings = get_settings()
logger = logging.getLogger(__name__)

# Raised by the driver or the pool when the store is down or too slow
PERSISTENCE_ERRORS = (OperationalError, PoolTimeoutError)


def build_engine(database_url: str):
    """Create an engine with bounded pool and statement timeouts"""
    if database_url.startswith("sqlite"):
        # SQLite is used for local development and tests
        return create_engine(
            database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.DB_STATEMENT_TIMEOUT_MS / 1000,
            },
            echo=False,
        )

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        connect_args={"options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"},
        echo=False,
    )


# Create database engine with connection pooling
engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def persistence_guard(db: Session):
    """Turn store timeouts / outages into a typed retryable error"""
    try:
        yield
    except PERSISTENCE_ERRORS as e:
        db.rollback()
        logger.error(f"Persistence unavailable: {e}")
        raise PersistenceUnavailableError() from e


def create_tables():
    """Create all database tables (development only, production uses alembic)"""
    from app.models import Base

    logger.info("Creating all tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


if __name__ == "__main__":
    create_tables()
