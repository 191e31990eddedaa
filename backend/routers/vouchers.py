from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from models.voucher import VoucherStatus, VoucherType
from schemas.voucher import Voucher, VoucherBatchCreate, VoucherBatchResult, VoucherCreate, VoucherVoid
from crud import voucher as voucher_crud
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/vouchers",
    tags=["Vouchers"],
)

@router.post("/", response_model=Voucher, status_code=status.HTTP_201_CREATED)
def create_voucher(
    voucher: VoucherCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Post a voucher from raw `entries`, or from `amount` plus ledger ids for the
    simple two-leg Receipt, Payment and Journal cases.
    """
    return voucher_crud.create_voucher_from_request(db, tenant_id, voucher, user_id=user_id)

@router.post("/batch", response_model=VoucherBatchResult)
def create_vouchers_batch(
    batch: VoucherBatchCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Post several vouchers. Each row stands alone; failures are reported per row.
    """
    return voucher_crud.create_vouchers_batch(db, tenant_id, batch.vouchers, user_id=user_id)

@router.get("/", response_model=List[Voucher])
def get_vouchers(
    voucher_type: Optional[VoucherType] = None,
    voucher_status: Optional[VoucherStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return voucher_crud.get_vouchers(
        db=db,
        tenant_id=tenant_id,
        voucher_type=voucher_type,
        status=voucher_status,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit
    )

@router.get("/{voucher_id}", response_model=Voucher)
def get_voucher(
    voucher_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return voucher_crud.require_voucher(db, voucher_id, tenant_id)

@router.delete("/{voucher_id}", response_model=Voucher)
def delete_voucher(
    voucher_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Void a voucher. Its ledger effects are reversed; the voucher stays on record as Void.
    """
    return voucher_crud.delete_voucher(db, voucher_id, tenant_id, reason=reason, user_id=user_id)

@router.post("/{voucher_id}/void", response_model=Voucher)
def void_voucher(
    voucher_id: int,
    payload: VoucherVoid,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    return voucher_crud.delete_voucher(db, voucher_id, tenant_id, reason=payload.reason, user_id=user_id)
