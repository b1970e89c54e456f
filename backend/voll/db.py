# backend/voll/db.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from urllib.parse import urlparse, parse_qs
from .config import settings

DATABASE_URL = settings.DATABASE_URL

HOSTED_POSTGRES_MARKERS = ("supabase.co", "supabase.com", "neon.tech", "neon.aws", "railway")


def _should_use_ssl(url: str) -> bool:
    parsed = urlparse(url)
    if not parsed.scheme.startswith("postgresql"):
        return False
    q = parse_qs(parsed.query or "")
    if any(v and v[0].lower() == "require" for k, v in q.items() if k == "sslmode"):
        return True
    host = (parsed.hostname or "").lower()
    return any(marker in host for marker in HOSTED_POSTGRES_MARKERS)


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    # SQLite ignores ON DELETE rules unless asked per connection
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False):
    connect_args = {}
    if _should_use_ssl(url):
        connect_args = {"sslmode": "require"}
    elif url.startswith("sqlite"):
        # chat tools read from worker threads
        connect_args = {"check_same_thread": False}

    # ALWAYS pass a dict (empty or with options) — do NOT pass None
    eng = create_engine(url, echo=echo, future=True, connect_args=connect_args)
    if url.startswith("sqlite"):
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = build_engine(DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Factory for sessions that outlive the request or run on other threads."""
    return SessionLocal
