"""SQLAlchemy engine and session management.

Everything LinguaGen persists lives in one SQLite table of named slots.  Set
DATABASE_URL in .env to move the file:
  - sqlite:///./linguagen.db
  - sqlite:////home/me/.linguagen/data.db
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from linguagen.config import settings

# Sessions are opened from FastAPI's worker threads
engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """Create the storage tables if they do not exist yet."""
    # Registers the models on Base.metadata
    import linguagen.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
