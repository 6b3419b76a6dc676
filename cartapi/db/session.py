import logging
from pathlib import Path
from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from cartapi.core.config import settings
from cartapi.models import Cart, Item

logger = logging.getLogger(__name__)


def build_engine(database_url: str, **kwargs) -> Engine:
    # check_same_thread is needed for SQLite, remove for PostgreSQL
    connect_args = {"check_same_thread": False} if "sqlite" in database_url else {}
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        Path(database_url.split("sqlite:///")[-1]).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args, **kwargs)


engine = build_engine(settings.DATABASE_URL)


def configure_engine(database_url: str) -> Engine:
    """Point the module engine at another database, used by the bootstrap --data flag."""
    global engine
    engine.dispose()
    engine = build_engine(database_url)
    return engine


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind: Engine = None):
    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    logger.info("Database schema ready on %s", bind.url)


def truncate_all_tables(bind: Engine = None):
    """Remove every cart and item, meant for integration tests."""
    with Session(bind or engine) as session:
        session.exec(delete(Item))
        session.exec(delete(Cart))
        session.commit()
