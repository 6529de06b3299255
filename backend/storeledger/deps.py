from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from storeledger.core.config import settings
from storeledger.core.database import SessionLocal
from storeledger.core.errors import LedgerError
from storeledger.models.store import Store


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store_id(
    store_header: Optional[str] = Header(default=None, alias=settings.STORE_HEADER),
    db: Session = Depends(get_db),
) -> int:
    """Resolve the caller's store tenant from the header set by the auth layer."""
    if not store_header:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Store context required")
    try:
        store_id = int(store_header)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid store id")
    if not db.get(Store, store_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
    return store_id


def http_error(exc: LedgerError) -> HTTPException:
    """Translate a service-layer error into the HTTP response the client sees."""
    detail = exc.message if not exc.extra else {"message": exc.message, **exc.extra}
    return HTTPException(status_code=exc.status_code, detail=detail)
