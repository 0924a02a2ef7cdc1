# backend/servicedesk/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from servicedesk.core.api import ok
from servicedesk.core.capabilities import Caller, CapabilityCheck
from servicedesk.core.db import get_db
from servicedesk.core.security import get_caller, get_capability_check
from servicedesk.schemas.laundry import ProductCreate, ProductOut, ProductUpdate
from servicedesk.services import product_service as svc

router = APIRouter(prefix="/products", tags=["Laundry Products"])


@router.get("", response_model=List[ProductOut])
def list_products(
    category: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.list_products(db, caller, category=category, include_inactive=include_inactive, check=check)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.create_product(db, caller, payload.model_dump(exclude_none=True), check=check)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.get_product(db, caller, product_id, check=check)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    payload: ProductUpdate,
    product_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    return svc.update_product(db, caller, product_id, payload.model_dump(exclude_unset=True), check=check)


@router.delete("/{product_id}")
def delete_product(
    product_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
    check: CapabilityCheck = Depends(get_capability_check),
):
    product = svc.delete_product(db, caller, product_id, check=check)
    return ok(ProductOut.model_validate(product).model_dump(mode="json"))
