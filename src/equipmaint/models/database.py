from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from equipmaint.config.settings import get_settings
from equipmaint.models.orm import Base


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """Let SQLAlchemy drive BEGIN/SAVEPOINT itself instead of pysqlite.

    pysqlite defers BEGIN until the first DML statement, which breaks
    ``Session.begin_nested()``.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def get_engine(url: str | None = None, **kwargs) -> Engine:
    """Create a SQLAlchemy engine from settings or the provided url."""
    db_url = url or get_settings().database_url
    connect_args = dict(kwargs.pop("connect_args", {}))
    if db_url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    engine = create_engine(db_url, connect_args=connect_args, echo=False, **kwargs)
    if db_url.startswith("sqlite"):
        enable_sqlite_savepoints(engine)
    return engine


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Return a sessionmaker bound to the given engine."""
    if engine is None:
        engine = get_engine()
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def get_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Yield a database session that auto-commits or rolls back."""
    factory = get_session_factory(engine)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables defined on Base."""
    if engine is None:
        engine = get_engine()
    Base.metadata.create_all(engine)
