# pyright: reportMissingTypeStubs=false
"""
Engine, session factory and declarative base.

Request handlers receive a session through ``get_db``. Timestamps are written
in UTC by mapper events so services never have to remember them.
"""

import logging
from typing import Generator

from fastapi import HTTPException
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from core.config import DATABASE_URL
from core.constants import DB_POOL_RECYCLE_SECONDS
from core.exceptions import SchedulingError

logger = logging.getLogger(__name__)

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=DB_POOL_RECYCLE_SECONDS,
    future=True,
)

# Services keep using rows after commit to build responses
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base shared by every scheduling table."""
    pass


@event.listens_for(Base, "before_insert", propagate=True)  # type: ignore
def stamp_new_row(mapper, connection, target):  # type: ignore
    """Fill created_at/updated_at with the current UTC instant when left empty."""
    from utils.datetime_utils import utc_now  # circular at module level
    now = utc_now()
    for column_name in ("created_at", "updated_at"):
        if column_name in mapper.columns and getattr(target, column_name, None) is None:  # type: ignore
            setattr(target, column_name, now)


@event.listens_for(Base, "before_update", propagate=True)  # type: ignore
def stamp_updated_row(mapper, connection, target):  # type: ignore
    # Bulk query.update() calls bypass this and set updated_at themselves
    from utils.datetime_utils import utc_now
    if "updated_at" in mapper.columns:  # type: ignore
        setattr(target, "updated_at", utc_now())


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session per request.

    Anything the handler left uncommitted is rolled back when it raises.
    Scheduling errors are expected outcomes and are not logged here; the
    services already logged what mattered.
    """
    db = SessionLocal()
    try:
        yield db
    except (HTTPException, SchedulingError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.exception(f"Database error: {e}")
        db.rollback()
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in database session: {e}")
        db.rollback()
        raise
    finally:
        db.close()
