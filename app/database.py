from contextlib import contextmanager
import json
import os
import re

from dotenv import load_dotenv
from sqlalchemy import create_engine, pool, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

load_dotenv()
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://localhost/moviereviews")

# Upper bound for a single round trip to the store, in seconds
QUERY_TIMEOUT = float(os.getenv("DB_QUERY_TIMEOUT", 3))

# The default timeout is set per connection so it costs no extra round trip
connect_args = {}
if make_url(DATABASE_URL).get_backend_name() == "postgresql":
    connect_args["options"] = f"-c statement_timeout={int(QUERY_TIMEOUT * 1000)}"

# Connection pooling configuration
# QueuePool maintains a pool of connections shared by every repository
engine = create_engine(
    DATABASE_URL,
    poolclass=pool.QueuePool,
    pool_size=int(os.getenv("DB_POOL_SIZE", 5)),  # Number of connections to keep open
    max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),  # Max connections beyond pool_size
    pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", 30)),  # Seconds to wait for connection
    pool_recycle=int(os.getenv("DB_POOL_RECYCLE", 3600)),  # Recycle connections after 1 hour
    pool_pre_ping=True,  # Test connections before using them
    echo=os.getenv("DB_ECHO", "false").lower() == "true",  # Set to true for SQL debugging
    connect_args=connect_args,
)

# Log pool statistics for monitoring
@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Log when a new connection is created"""
    logger.debug("Database connection established")

@event.listens_for(engine, "checkout")
def receive_checkout(dbapi_conn, connection_record, connection_proxy):
    """Log when a connection is checked out from the pool"""
    logger.debug(f"Connection checked out from pool. Pool size: {engine.pool.size()}")

# Records returned by a repository outlive the session that loaded them
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
Base = declarative_base()


# ============================================
# SQLite support (test suite)
# ============================================

_WORD = re.compile(r"\w+")


def _title_matches(title, query):
    terms = _WORD.findall((query or "").lower())
    words = set(_WORD.findall((title or "").lower()))
    # plainto_tsquery with no lexemes matches nothing
    return bool(terms) and all(term in words for term in terms)


def _contains_all(haystack, needles):
    return set(json.loads(needles or "[]")) <= set(json.loads(haystack or "[]"))


def register_sqlite_functions(dbapi_conn, connection_record):
    """
    Register Python versions of the PostgreSQL text-search and array
    containment operators on a SQLite connection.

    Usage:
        event.listen(sqlite_engine, "connect", register_sqlite_functions)
    """
    dbapi_conn.create_function("title_matches", 2, _title_matches, deterministic=True)
    dbapi_conn.create_function("contains_all", 2, _contains_all, deterministic=True)


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", register_sqlite_functions)


# ============================================
# Session scopes
# ============================================

def apply_statement_timeout(db, seconds: float) -> None:
    """
    Bound every statement in the current transaction to `seconds`.

    Connections already carry QUERY_TIMEOUT, so only other values cost a
    round trip.
    """
    if db.get_bind().dialect.name != "postgresql" or seconds == QUERY_TIMEOUT:
        return
    db.execute(
        text("SELECT set_config('statement_timeout', :ms, true)"),
        {"ms": str(int(seconds * 1000))},
    )


@contextmanager
def bounded_session(session_factory=SessionLocal, timeout: float = QUERY_TIMEOUT):
    """
    Open a session for one repository operation.

    Commits on success, rolls back and re-raises on any error, and always
    returns the connection to the pool.

    Usage:
        with bounded_session(SessionLocal) as db:
            db.execute(...)
    """
    db = session_factory()
    try:
        apply_statement_timeout(db, timeout)
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

