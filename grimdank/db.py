import logging
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .config import DB_URL

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}
engine = create_engine(DB_URL, connect_args=connect_args, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    from . import models  # noqa: F401  registers the tables

    db_path = Path(DB_URL.split("///")[-1]) if DB_URL.startswith("sqlite") else None
    if db_path is not None and str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    first_start = db_path is not None and not db_path.exists()

    Base.metadata.create_all(bind=engine)

    if first_start:
        logger.info("Database initialized at %s", DB_URL)
