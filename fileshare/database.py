from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

# Base class for database models
Base = declarative_base()


def database_url(db_path: Path) -> str:
    return f"sqlite:///{db_path}"


def init_db(db_path: Path) -> None:
    """Create the database file and the files table if they don't exist."""
    # Register the table on Base.metadata
    from . import models  # noqa: F401

    db_path.parent.mkdir(parents=True, exist_ok=True)
    # connect_args is only for SQLite
    engine = create_engine(database_url(db_path), connect_args={"check_same_thread": False})
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
