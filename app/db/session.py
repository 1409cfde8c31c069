from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base
from contextlib import contextmanager
import logging

from app.config.settings import settings

# Set up logging
logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are shared with the request threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before usage
        "pool_recycle": 3600,   # Recycle connections after 1 hour
        "pool_size": 10,
        "max_overflow": 20,
    }


# Create SQLAlchemy engine
engine = create_engine(
    DATABASE_URL,
    echo=settings.SQL_ECHO,
    **_engine_options(DATABASE_URL)
)

# Create a thread-local session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ScopedSession = scoped_session(SessionLocal)

# Base class for models
Base = declarative_base()

@contextmanager
def get_db_session():
    """Provide a transactional scope around a series of operations."""
    session = ScopedSession()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database transaction error: {str(e)}")
        raise
    finally:
        session.close()
        ScopedSession.remove()

def init_db():
    """Create any missing tables."""
    # Register the models on Base.metadata
    from app.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables verified")

def check_database_connection() -> bool:
    """
    Check if database connection works

    Returns:
        bool: True if connection is working
    """
    try:
        # Execute a simple query
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {str(e)}")
        return False
