"""Engine construction and schema creation"""

from sqlmodel import SQLModel, create_engine

# registers the tables on SQLModel.metadata
from blockpress.crud import models  # noqa: F401


def make_engine(db_url: str):
    """Create an engine; SQLite connections may be shared with the web server's threads."""
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, echo=False, connect_args=connect_args)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)
