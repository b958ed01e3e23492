"""SQLAlchemy engine, session factory and declarative base."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings


def engine_options(url: str, timeout: float) -> dict:
    """Per-dialect keyword arguments that bound every store call by ``timeout`` seconds."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    options = {"pool_timeout": timeout, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        millis = int(timeout * 1000)
        options["connect_args"] = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={millis} -c lock_timeout={millis}",
        }
    return options


def configure_sqlite(engine: Engine) -> Engine:
    """Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs nest inside the real transaction."""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL, settings.STORE_TIMEOUT_SECONDS))
if settings.DATABASE_URL.startswith("sqlite"):
    configure_sqlite(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
