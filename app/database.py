"""
SQLAlchemy engine and session factory for the persisted store.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Build a session factory bound to a fresh engine."""
    # SQLite 사용 시 check_same_thread=False 필요
    connect_args = {}
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        # In-memory databases must share a single connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(
        database_url,
        connect_args=connect_args,
        echo=echo,
        **engine_kwargs,
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(session_factory: sessionmaker) -> None:
    # Import models so Base.metadata knows about them
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=session_factory.kw["bind"])
