"""SQLAlchemy engine, session factory and declarative base."""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from fastbreak.config import settings


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_conn, connection_record=None):
    """Replace SQLite's ASCII-only lower() with Unicode case folding."""
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", register_sqlite_functions)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a request-scoped database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
