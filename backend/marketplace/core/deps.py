from typing import Generator

from sqlalchemy.orm import Session

from marketplace.core.database import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; closed when the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
