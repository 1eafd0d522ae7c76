import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from marketplace.core.config import settings
from marketplace.core.exceptions import FeeServiceError, PersistenceError

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=settings.DB_POOL_PRE_PING,
    echo=settings.DB_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextmanager
def transaction(db: Session, operation: str) -> Generator[Session, None, None]:
    """
    Run a multi-step write as one unit: commit on success, roll back on any error.

    Database errors are re-raised as PersistenceError so callers only deal
    with FeeServiceError subclasses.
    """
    try:
        yield db
        db.commit()
    except FeeServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error during %s", operation)
        raise PersistenceError(f"Error in {operation}", detail=str(e)) from e
    except Exception:
        db.rollback()
        raise
