from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from planner import config

# For SQLite we must add connect_args
connect_args = {}
if config.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    config.DATABASE_URL,
    connect_args=connect_args,
    echo=config.SQL_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def enable_sqlite_foreign_keys(bind):
    """SQLite ignores ON DELETE clauses unless the pragma is set per connection."""
    if not str(bind.url).startswith("sqlite"):
        return

    @event.listens_for(bind, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


def init_db(bind=engine):
    # import models so they are registered in metadata before create_all
    from planner.models import profile, project, task, task_dependency, user  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_session_factory():
    """For long-lived connections (websockets) that open a session per fetch."""
    return SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
