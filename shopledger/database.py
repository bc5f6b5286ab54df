# shopledger/database.py

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from shopledger.core.config import settings


_SQLITE_BUSY_TIMEOUT_SECONDS = 30


def is_sqlite_url(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def enable_sqlite_pragmas(dbapi_connection, _connection_record):
    # ON DELETE SET NULL on ledger entries depends on foreign key enforcement
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_SECONDS * 1000}")
    finally:
        cursor.close()


def build_engine(database_url: str):
    if not is_sqlite_url(database_url):
        return create_engine(database_url, pool_pre_ping=True)

    url = make_url(database_url)
    engine_kwargs = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS,
        },
    }
    if url.database in (None, "", ":memory:"):
        engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)
    event.listen(engine, "connect", enable_sqlite_pragmas)
    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
