from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
from .config import settings


def make_engine(url: str, echo: bool = False):
    """Build an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)


def init_db(bind=None):
    # Import the models so every table is registered on the metadata
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
