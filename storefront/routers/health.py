import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.dependencies import get_db
from storefront.schemas import SystemHealth

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=list[SystemHealth])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        database_ok = False
    return [
        {
            "name": "Database",
            "status": "healthy" if database_ok else "down",
            "message": "DB reachable" if database_ok else "Connection failed",
        }
    ]
