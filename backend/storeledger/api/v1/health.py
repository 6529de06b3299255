import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.orm import Session

from storeledger.core.config import settings
from storeledger.deps import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Service and database liveness")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("Health check failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {"status": "ok", "environment": settings.ENVIRONMENT}
