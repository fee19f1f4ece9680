from typing import Callable

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from app.core.config import settings

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)
elif DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
    # One shared connection, otherwise every session sees a fresh empty database
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
else:
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_session_factory() -> Callable[[], Session]:
    """
    Session factory for work that outlives the request (background analysis).
    Overridden in tests so background tasks share the test transaction.
    """
    return SessionLocal

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from app.models import (  # noqa: F401
        profile, resume, analysis, job_recommendation, skill_gap, interview_question
    )
    # Perform schema emission
    Base.metadata.create_all(bind=engine)
