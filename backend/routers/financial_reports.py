from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from schemas.financial_reports import BalanceSheet, BalanceSheetRequest, ProfitAndLoss, TrialBalance
from crud import financial_reports as crud_financial_reports
from datetime import date
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/financial-reports",
    tags=["Financial Reports"],
)

@router.get("/profit-and-loss", response_model=ProfitAndLoss)
def get_profit_and_loss(
    as_on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_financial_reports.get_profit_and_loss(db=db, tenant_id=tenant_id, as_on_date=as_on_date)

@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    as_on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud_financial_reports.get_trial_balance(db=db, tenant_id=tenant_id, as_on_date=as_on_date)

@router.get("/balance-sheet", response_model=BalanceSheet)
def get_balance_sheet(
    as_on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Balance sheet grouped with the tenant's stored keyword table (or the defaults).
    """
    return crud_financial_reports.get_balance_sheet(db=db, tenant_id=tenant_id, as_on_date=as_on_date)

@router.post("/balance-sheet", response_model=BalanceSheet)
def build_balance_sheet(
    request: BalanceSheetRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Balance sheet grouped with a keyword table sent in the request body.
    """
    return crud_financial_reports.get_balance_sheet(
        db=db, tenant_id=tenant_id, as_on_date=request.as_on_date, config=request.config
    )
