# storedb/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from storedb.config import settings


def _normalize_url(url: str) -> str:
    # SQLAlchemy only understands the postgresql:// scheme
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _enable_sqlite_fk(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, **kwargs):
    """Build a pooled engine for ``url``.

    SQLite connections are shared across threads and get foreign key
    enforcement switched on; other backends use the driver defaults.
    """
    url = _normalize_url(url)
    if "sqlite" in url:
        connect_args = {"check_same_thread": False}
    else:
        connect_args = {}

    eng = create_engine(url, connect_args=connect_args, echo=settings.DB_ECHO, **kwargs)
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_fk)
    return eng


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextmanager
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Models must be imported so their tables are registered on Base.metadata
    import storedb.models.person  # noqa: F401
    import storedb.models.product  # noqa: F401
    import storedb.models.purchase  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
