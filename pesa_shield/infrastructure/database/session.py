"""Database session management"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from pesa_shield.infrastructure.database.models import Base


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared across API worker threads"""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        connect_args=connect_args,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet"""
    Base.metadata.create_all(bind=engine)
