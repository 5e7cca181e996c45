# database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from housekeeping import config


def build_engine(url: str = config.DATABASE_URL) -> Engine:
    kwargs = {"echo": config.SQL_ECHO, "future": True}
    if "sqlite" in url:
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases must share one connection across sessions
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


# Create engine
engine = build_engine()


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def init_db(bind: Engine = None) -> None:
    """Create the collections table if it does not exist yet."""
    # models registers its tables on Base when imported
    from housekeeping import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
