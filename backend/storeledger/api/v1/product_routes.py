import logging
from io import BytesIO
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.schemas.catalog import ProductCreate, ProductOut, ProductUpdate
from storeledger.services import catalog_service

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_ROWS = 25000
MAX_COLUMNS = 60
ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".xlsm", ".csv")


def _load_df(content: bytes, filename: str) -> pd.DataFrame:
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only Excel/CSV files are allowed.",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )

    try:
        if filename.lower().endswith(".csv"):
            df = pd.read_csv(BytesIO(content), dtype=str)
        else:
            df = pd.read_excel(BytesIO(content), dtype=str)
        df = df.apply(lambda col: col.str.strip() if col.dtype == "object" else col)
    except Exception as exc:
        logger.error("Unable to read product file %s: %s", filename, exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unable to read file: {exc}",
        )

    if df.empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file has no data rows.",
        )
    if len(df) > MAX_ROWS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded file exceeds row limit ({MAX_ROWS}).",
        )
    if len(df.columns) > MAX_COLUMNS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded file exceeds column limit ({MAX_COLUMNS}).",
        )
    return df


@router.post(
    "/upload-excel",
    summary="Upload a product Excel/CSV sheet",
)
async def upload_products(
    file: UploadFile = File(...),
    warehouse_id: Optional[int] = None,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    content = await file.read()
    df = _load_df(content, file.filename)
    try:
        stats = catalog_service.import_products_from_excel(db, df, store_id, warehouse_id=warehouse_id)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.error("Error processing product file %s: %s", file.filename, exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        )
    return {
        "status": "success",
        "message": "Products ingested.",
        **stats,
    }


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product with optional opening stock",
)
def create_product(
    payload: ProductCreate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> ProductOut:
    try:
        return catalog_service.create_product(db, store_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.get("", response_model=List[ProductOut], summary="List or search products")
def list_products(
    q: Optional[str] = None,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[ProductOut]:
    return catalog_service.list_products(db, store_id, q=q)


@router.get("/{product_id}", response_model=ProductOut, summary="Get a product")
def get_product(
    product_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> ProductOut:
    try:
        return catalog_service.get_product(db, store_id, product_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{product_id}", response_model=ProductOut, summary="Update catalog fields")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> ProductOut:
    try:
        return catalog_service.update_product(db, store_id, product_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product that was never sold or purchased",
)
def delete_product(
    product_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    try:
        catalog_service.delete_product(db, store_id, product_id)
    except LedgerError as exc:
        raise http_error(exc)
    return None
