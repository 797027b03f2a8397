from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from shallwewalk.core.config import settings

# SQLAlchemy Base class for models to inherit
Base = declarative_base()

# Create SQLAlchemy engine (defaults to a local SQLite file)
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,   # helps avoid stale connections
)

# Factory that creates DB sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create tables (kv_entries) if they do not exist yet."""
    from shallwewalk.models.kv_entry import KeyValueEntry  # noqa: F401  (registers the table)

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def session_scope(factory=None):
    """Yield a DB session, committing on success and rolling back on error."""
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
