from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.deps import get_db

router = APIRouter()


@router.get("")
def health_check(db: Session = Depends(get_db)):
    """Health check; includes DB connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    return {
        "status": "ok",
        "database": "connected" if db_ok else "disconnected",
    }
