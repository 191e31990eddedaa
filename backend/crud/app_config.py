import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from models.app_config import AppConfig
from schemas.app_config import AppConfigCreate, AppConfigUpdate
from schemas.audit_log import AuditLogCreate
from schemas.financial_reports import BalanceSheetConfig
from utils import sqlalchemy_to_dict
from utils.balance_sheet import DEFAULT_BALANCE_SHEET_CONFIG
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.tenancy import SYSTEM_USER

logger = logging.getLogger("app_config")

BALANCE_SHEET_GROUPS = "balance_sheet_groups"


def _audit(db: Session, db_config: AppConfig, action: str, user_id: str, old_values: Optional[dict] = None):
    create_audit_log(db, AuditLogCreate(
        table_name='app_config',
        record_id=str(db_config.id),
        changed_by=user_id,
        action=action,
        tenant_id=db_config.tenant_id,
        old_values=old_values or {},
        new_values=sqlalchemy_to_dict(db_config),
    ))


# Create a new config entry
def create_config(db: Session, config: AppConfigCreate, tenant_id: str, user_id: str = SYSTEM_USER):
    if get_config(db, tenant_id, name=config.name):
        raise ConflictError(f"Configuration '{config.name}' already exists", details={"name": config.name})
    db_config = AppConfig(name=config.name, value=config.value, tenant_id=tenant_id, created_by=user_id)
    db.add(db_config)
    db.flush()
    _audit(db, db_config, 'CREATE', user_id)
    db.commit()
    db.refresh(db_config)
    return db_config


# Get config by name (or all configs)
def get_config(db: Session, tenant_id: str, name: str = None):
    if name:
        return db.query(AppConfig).filter(AppConfig.name == name, AppConfig.tenant_id == tenant_id).first()
    return db.query(AppConfig).filter(AppConfig.tenant_id == tenant_id).order_by(AppConfig.name).all()


# Update config by name
def update_config_by_name(db: Session, name: str, config: AppConfigUpdate, tenant_id: str, user_id: str = SYSTEM_USER):
    db_config = get_config(db, tenant_id, name=name)
    if not db_config:
        raise NotFoundError("Configuration", name)

    old_values = sqlalchemy_to_dict(db_config)
    for field, value in config.model_dump(exclude_unset=True).items():
        setattr(db_config, field, value)
    db_config.updated_by = user_id
    _audit(db, db_config, 'UPDATE', user_id, old_values)
    db.commit()
    db.refresh(db_config)
    return db_config


def get_balance_sheet_config(db: Session, tenant_id: str) -> BalanceSheetConfig:
    """The tenant's keyword table, or the built-in society defaults when none is stored."""
    db_config = get_config(db, tenant_id, name=BALANCE_SHEET_GROUPS)
    if not db_config:
        return DEFAULT_BALANCE_SHEET_CONFIG
    try:
        return BalanceSheetConfig.model_validate_json(db_config.value)
    except PydanticValidationError as e:
        logger.error(f"Stored {BALANCE_SHEET_GROUPS} for tenant {tenant_id} is invalid: {e}")
        raise ValidationError(
            f"Stored configuration '{BALANCE_SHEET_GROUPS}' is invalid",
            details={"name": BALANCE_SHEET_GROUPS},
        )


def set_balance_sheet_config(
    db: Session, tenant_id: str, config: BalanceSheetConfig, user_id: str = SYSTEM_USER
) -> BalanceSheetConfig:
    value = json.dumps(config.model_dump())
    db_config = get_config(db, tenant_id, name=BALANCE_SHEET_GROUPS)
    if db_config:
        update_config_by_name(db, BALANCE_SHEET_GROUPS, AppConfigUpdate(value=value), tenant_id, user_id)
    else:
        create_config(db, AppConfigCreate(name=BALANCE_SHEET_GROUPS, value=value), tenant_id, user_id)
    logger.info(f"Balance sheet groups updated for tenant {tenant_id} by {user_id}")
    return config
