from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shopkeep.core.db.tables.base import Base
from shopkeep.core.db.tables.user import UserAccount  # noqa: F401  registers the table


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine and make sure all tables exist.

    In-memory SQLite gets a StaticPool so every session sees the same database.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            # Ensure the directory holding the database file exists
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(url, echo=False)
        else:
            engine = create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
    else:
        engine = create_engine(url, echo=False, pool_pre_ping=True, pool_recycle=3600)

    Base.metadata.create_all(engine)
    return engine


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autoflush=False, bind=engine)
