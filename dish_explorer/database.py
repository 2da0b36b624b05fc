from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker

from dish_explorer.config import settings
from dish_explorer.models import Base

DATABASE_URL = settings.database_url
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, connect_args=_connect_args)


def unicode_lower(s):
    return s.lower() if s is not None else None


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, _):
        # SQLite's built-in lower() only folds ASCII; match Python's str.lower().
        dbapi_conn.create_function("lower", 1, unicode_lower, deterministic=True)
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.execute("PRAGMA temp_store=MEMORY;")
        cur.close()

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def ping() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
