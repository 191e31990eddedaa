from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from models.ledger_account import AccountType, LedgerStatus
from schemas.ledger_account import (
    LedgerAccount,
    LedgerAccountCreate,
    LedgerAccountUpdate,
    LedgerDeactivate,
    OutstandingLedger,
)
from schemas.ledger_statement import LedgerStatement
from crud import ledger_account as ledger_crud
from crud import ledger_statement as statement_crud
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/ledgers",
    tags=["Ledgers"],
)

@router.post("/", response_model=LedgerAccount, status_code=status.HTTP_201_CREATED)
def create_ledger(
    ledger: LedgerAccountCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    return ledger_crud.create_ledger(
        db=db,
        tenant_id=tenant_id,
        name=ledger.name,
        account_type=ledger.account_type,
        opening_balance=ledger.opening_balance,
        opening_balance_side=ledger.opening_balance_side,
        parent_group=ledger.parent_group,
        user_id=user_id,
    )

@router.get("/", response_model=List[LedgerAccount])
def get_ledgers(
    account_type: Optional[AccountType] = None,
    status: Optional[LedgerStatus] = LedgerStatus.ACTIVE,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    List ledgers. Only Active ledgers are returned unless `status` says otherwise.
    """
    return ledger_crud.get_ledgers(
        db=db,
        tenant_id=tenant_id,
        account_type=account_type,
        status=status,
        search=search,
        skip=skip,
        limit=limit
    )

@router.get("/outstanding", response_model=List[OutstandingLedger])
def get_outstanding(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Sundry debtors and creditors that still carry a balance."""
    return [
        OutstandingLedger(
            ledger_id=ledger.id,
            ledger_name=ledger.name,
            account_type=ledger.account_type,
            balance=ledger.current_balance,
            balance_side=ledger.current_balance_side,
        )
        for ledger in ledger_crud.get_outstanding_ledgers(db, tenant_id)
    ]

@router.get("/{ledger_id}", response_model=LedgerAccount)
def get_ledger(
    ledger_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return ledger_crud.require_ledger(db, ledger_id, tenant_id)

@router.patch("/{ledger_id}", response_model=LedgerAccount)
def update_ledger(
    ledger_id: int,
    ledger: LedgerAccountUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    return ledger_crud.update_ledger(db, ledger_id, tenant_id, ledger, user_id=user_id)

@router.post("/{ledger_id}/deactivate", response_model=LedgerAccount)
def deactivate_ledger(
    ledger_id: int,
    payload: Optional[LedgerDeactivate] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Retire a ledger. A ledger with a balance is refused unless `force` is set;
    forced deactivations are logged and audited separately.
    """
    payload = payload or LedgerDeactivate()
    return ledger_crud.deactivate_ledger(
        db, ledger_id, tenant_id, force=payload.force, reason=payload.reason, user_id=user_id
    )

@router.post("/{ledger_id}/reactivate", response_model=LedgerAccount)
def reactivate_ledger(
    ledger_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    return ledger_crud.reactivate_ledger(db, ledger_id, tenant_id, user_id=user_id)

@router.get("/{ledger_id}/statement", response_model=LedgerStatement)
def get_ledger_statement(
    ledger_id: int,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return statement_crud.get_statement(db, ledger_id, tenant_id, from_date=from_date, to_date=to_date)
