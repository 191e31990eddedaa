from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.app_config import AppConfigCreate, AppConfigUpdate, AppConfigOut
from schemas.financial_reports import BalanceSheetConfig
from schemas.ledger_account import LedgerAccount
from crud import app_config as crud_app_config
from crud import ledger_account as ledger_crud
from models.ledger_account import LedgerAccount as LedgerAccountModel
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/configurations/", response_model=AppConfigOut, status_code=status.HTTP_201_CREATED)
def create_config(config: AppConfigCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id), user_id: str = Depends(get_user_id)):
    return crud_app_config.create_config(db, config, tenant_id, user_id=user_id)


@router.get("/configurations/", response_model=List[AppConfigOut])
def get_configs(name: Optional[str] = None, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    configs = crud_app_config.get_config(db, tenant_id, name=name)
    # Always return a list, even if empty
    return [configs] if name and configs else configs or []

@router.patch("/configurations/{name}/", response_model=AppConfigOut)
def update_config(name: str, config: AppConfigUpdate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id), user_id: str = Depends(get_user_id)):
    return crud_app_config.update_config_by_name(db, name, config, tenant_id, user_id=user_id)


@router.get("/configurations/balance-sheet-groups", response_model=BalanceSheetConfig, tags=["Financial Reports"])
def get_balance_sheet_groups(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud_app_config.get_balance_sheet_config(db, tenant_id)


@router.put("/configurations/balance-sheet-groups", response_model=BalanceSheetConfig, tags=["Financial Reports"])
def set_balance_sheet_groups(
    config: BalanceSheetConfig,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Replace the tenant's keyword table. Group order is match precedence: the first group with a matching keyword wins.
    """
    return crud_app_config.set_balance_sheet_config(db, tenant_id, config, user_id=user_id)


@router.get("/tenants/ledgers-initialized", tags=["Tenants"])
def are_tenant_ledgers_initialized(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Checks if the default ledgers exist for a tenant.
    """
    default_names = {ledger["name"] for ledger in ledger_crud.DEFAULT_LEDGERS}

    existing_query = db.query(LedgerAccountModel.name).filter(
        LedgerAccountModel.tenant_id == tenant_id,
        LedgerAccountModel.name.in_(default_names)
    )
    existing_names = {name for (name,) in existing_query}

    return {"ledgers_initialized": default_names.issubset(existing_names)}


@router.post("/tenants/initialize-ledgers", response_model=List[LedgerAccount], status_code=status.HTTP_201_CREATED, tags=["Tenants"])
def initialize_tenant_ledgers(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: str = Depends(get_user_id)
):
    """
    Creates the default ledgers for a tenant. Idempotent; returns only the ledgers created by this call.
    """
    created = ledger_crud.initialize_default_ledgers(db, tenant_id, user_id=user_id)
    logger.info(f"Initialized default ledgers for tenant '{tenant_id}' by {user_id}. New ledgers: {[l.name for l in created]}")
    return created
