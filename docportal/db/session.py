from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from docportal.core.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # TestClient / Celery eager mode touch the connection from other threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# Sync engine; request handlers and Celery tasks each open their own session
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
