from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import settings


class Base(DeclarativeBase):
    pass


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite://")


def sqlite_connect_args(url: str) -> dict:
    if not is_sqlite_url(url):
        return {}
    return {"check_same_thread": False, "timeout": 30}


def apply_sqlite_pragmas(dbapi_connection, connection_record=None) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = create_engine(
    settings.database_url,
    connect_args=sqlite_connect_args(settings.database_url),
    echo=settings.debug,
)

if is_sqlite_url(settings.database_url):
    event.listen(engine, "connect", apply_sqlite_pragmas)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
