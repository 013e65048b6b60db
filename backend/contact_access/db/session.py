from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from contact_access.core.config import settings


def build_engine(database_url: str):
    """Create an engine for the given URL.

    SQLite connections are shared across threads (FastAPI runs sync work in a
    threadpool) and an in-memory database must live on a single connection.
    """
    engine_kwargs = {"pool_pre_ping": True, "echo": False}
    db_url_lower = database_url.lower()

    if db_url_lower.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if db_url_lower in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    elif "postgresql" in db_url_lower or "postgres" in db_url_lower:
        engine_kwargs["connect_args"] = {"client_encoding": "UTF8"}

    return create_engine(database_url, **engine_kwargs)


def build_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = build_session_factory(engine)

Base = declarative_base()
