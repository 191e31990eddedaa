import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from crud.audit_log import create_audit_log
from models.ledger_account import AccountType, BalanceSide, LedgerAccount, LedgerStatus
from models.voucher_entry import VoucherEntry
from schemas.audit_log import AuditLogCreate
from schemas.ledger_account import LedgerAccountUpdate
from utils import sqlalchemy_to_dict
from utils.exceptions import ConcurrentUpdateError, ConflictError, NotFoundError, ValidationError
from utils.money import from_signed, to_paise, to_signed
from utils.tenancy import SYSTEM_USER

logger = logging.getLogger("ledgers")

DEFAULT_LEDGERS = [
    {"name": "Cash", "account_type": AccountType.CASH, "parent_group": "Cash in Hand"},
    {"name": "Bank", "account_type": AccountType.BANK, "parent_group": "Bank Accounts"},
    {"name": "Sales", "account_type": AccountType.SALES, "parent_group": "Revenue"},
    {"name": "Purchase", "account_type": AccountType.PURCHASES, "parent_group": "Direct Expenses"},
    {"name": "Profit & Loss A/c", "account_type": AccountType.PROFIT_AND_LOSS, "parent_group": "Reserves"},
]


def _parse_account_type(value: Union[AccountType, str]) -> AccountType:
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown account type '{value}'",
            details={"allowed": [t.value for t in AccountType]},
        )


def _parse_side(value: Union[BalanceSide, str, None], account_type: AccountType) -> BalanceSide:
    if value is None:
        return account_type.natural_side
    if isinstance(value, BalanceSide):
        return value
    try:
        return BalanceSide(value)
    except ValueError:
        raise ValidationError(f"Balance side must be 'Dr' or 'Cr', got '{value}'")


def _audit(db: Session, ledger: LedgerAccount, action: str, user_id: str, old_values: Optional[dict] = None):
    create_audit_log(db, AuditLogCreate(
        table_name='ledger_accounts',
        record_id=str(ledger.id),
        changed_by=user_id,
        action=action,
        tenant_id=ledger.tenant_id,
        old_values=old_values or {},
        new_values=sqlalchemy_to_dict(ledger),
    ))


def _active_name_taken(db: Session, tenant_id: str, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(LedgerAccount.id).filter(
        LedgerAccount.tenant_id == tenant_id,
        LedgerAccount.status == LedgerStatus.ACTIVE,
        func.lower(LedgerAccount.name) == name.lower(),
    )
    if exclude_id is not None:
        query = query.filter(LedgerAccount.id != exclude_id)
    return query.first() is not None


def get_ledger(db: Session, ledger_id: int, tenant_id: str) -> Optional[LedgerAccount]:
    return db.query(LedgerAccount).filter(
        LedgerAccount.id == ledger_id,
        LedgerAccount.tenant_id == tenant_id
    ).first()


def require_ledger(db: Session, ledger_id: int, tenant_id: str) -> LedgerAccount:
    ledger = get_ledger(db, ledger_id, tenant_id)
    if ledger is None:
        raise NotFoundError("Ledger", ledger_id)
    return ledger


def get_ledgers(
    db: Session,
    tenant_id: str,
    account_type: Optional[AccountType] = None,
    status: Optional[LedgerStatus] = LedgerStatus.ACTIVE,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100
) -> List[LedgerAccount]:
    query = db.query(LedgerAccount).filter(LedgerAccount.tenant_id == tenant_id)

    if status:
        query = query.filter(LedgerAccount.status == status)
    if account_type:
        query = query.filter(LedgerAccount.account_type == account_type)
    if search:
        query = query.filter(LedgerAccount.name.ilike(f"%{search.strip()}%"))

    return query.order_by(LedgerAccount.name.asc(), LedgerAccount.id.asc()).offset(skip).limit(limit).all()


def has_posted_entries(db: Session, ledger_id: int) -> bool:
    return db.query(VoucherEntry.id).filter(VoucherEntry.ledger_id == ledger_id).first() is not None


def create_ledger(
    db: Session,
    tenant_id: str,
    name: str,
    account_type: Union[AccountType, str],
    opening_balance: Union[Decimal, int, str] = Decimal("0.00"),
    opening_balance_side: Union[BalanceSide, str, None] = None,
    parent_group: Optional[str] = None,
    user_id: str = SYSTEM_USER,
) -> LedgerAccount:
    """Create an Active ledger whose current balance starts at its opening balance."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Ledger name must not be blank", details={"field": "name"})
    account_type = _parse_account_type(account_type)
    side = _parse_side(opening_balance_side, account_type)
    opening_paise = to_paise(opening_balance, field="opening_balance")
    if opening_paise < 0:
        raise ValidationError("Opening balance must not be negative", details={"field": "opening_balance"})

    if _active_name_taken(db, tenant_id, name):
        raise ValidationError(f"An active ledger named '{name}' already exists", details={"field": "name"})

    db_ledger = LedgerAccount(
        tenant_id=tenant_id,
        name=name,
        account_type=account_type,
        parent_group=parent_group.strip() if parent_group else None,
        opening_balance_paise=opening_paise,
        opening_balance_side=side,
        current_balance_paise=opening_paise,
        current_balance_side=side,
        status=LedgerStatus.ACTIVE,
        created_by=user_id,
    )
    db.add(db_ledger)
    try:
        db.flush()
        _audit(db, db_ledger, 'CREATE', user_id)
        db.commit()
    except IntegrityError:
        # Lost a race with another request creating the same name
        db.rollback()
        raise ValidationError(f"An active ledger named '{name}' already exists", details={"field": "name"})
    db.refresh(db_ledger)

    logger.info(f"Ledger '{name}' ({account_type.value}) created with id {db_ledger.id} for tenant {tenant_id}")
    return db_ledger


def concurrent_update_error(db: Session, what: str) -> ConcurrentUpdateError:
    """Roll back after a version check failed and build the error for the caller."""
    db.rollback()
    logger.warning(f"Concurrent ledger update detected while {what}")
    return ConcurrentUpdateError(
        "A ledger was changed by another transaction. Retry the request.",
        details={"operation": what},
    )


def _lock_ledger(db: Session, ledger_id: int, tenant_id: str) -> LedgerAccount:
    ledger = lock_ledgers(db, tenant_id, [ledger_id]).get(ledger_id)
    if ledger is None:
        raise NotFoundError("Ledger", ledger_id)
    return ledger


def _save(db: Session, db_ledger: LedgerAccount, action: str, user_id: str, old_values: dict) -> None:
    db_ledger.updated_by = user_id
    _audit(db, db_ledger, action, user_id, old_values)
    db.commit()


def update_ledger(
    db: Session,
    ledger_id: int,
    tenant_id: str,
    ledger_update: LedgerAccountUpdate,
    user_id: str = SYSTEM_USER,
) -> LedgerAccount:
    """Rename, regroup or retype a ledger. Past voucher entries keep their name snapshot."""
    update_data = ledger_update.model_dump(exclude_unset=True)
    try:
        db_ledger = _lock_ledger(db, ledger_id, tenant_id)
        old_values = sqlalchemy_to_dict(db_ledger)

        if 'name' in update_data:
            new_name = (update_data['name'] or "").strip()
            if not new_name:
                raise ValidationError("Ledger name must not be blank", details={"field": "name"})
            if db_ledger.is_active and _active_name_taken(db, tenant_id, new_name, exclude_id=db_ledger.id):
                raise ValidationError(f"An active ledger named '{new_name}' already exists", details={"field": "name"})
            db_ledger.name = new_name

        if update_data.get('account_type') is not None:
            new_type = _parse_account_type(update_data['account_type'])
            if new_type != db_ledger.account_type:
                if has_posted_entries(db, db_ledger.id):
                    raise ConflictError(
                        "Cannot change account type for a ledger that has posted vouchers.",
                        details={"ledger_id": db_ledger.id},
                    )
                db_ledger.account_type = new_type

        if 'parent_group' in update_data:
            parent_group = update_data['parent_group']
            db_ledger.parent_group = parent_group.strip() if parent_group else None

        _save(db, db_ledger, 'UPDATE', user_id, old_values)
    except StaleDataError:
        raise concurrent_update_error(db, f"updating ledger {ledger_id}")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_ledger)
    return db_ledger


def deactivate_ledger(
    db: Session,
    ledger_id: int,
    tenant_id: str,
    force: bool = False,
    reason: Optional[str] = None,
    user_id: str = SYSTEM_USER,
) -> LedgerAccount:
    """Retire a ledger. History stays; the ledger just stops taking new vouchers.

    The row is locked first, so the zero-balance check sees any voucher
    committed before it and blocks any voucher posted after it.
    """
    try:
        db_ledger = _lock_ledger(db, ledger_id, tenant_id)
        if not db_ledger.is_active:
            db.rollback()
            return db_ledger

        old_values = sqlalchemy_to_dict(db_ledger)
        action = 'DEACTIVATE'
        if db_ledger.current_balance_paise != 0:
            if not force:
                raise ConflictError(
                    f"Ledger '{db_ledger.name}' has an outstanding balance of "
                    f"{db_ledger.current_balance} {db_ledger.current_balance_side.value}",
                    details={
                        "ledger_id": db_ledger.id,
                        "current_balance": str(db_ledger.current_balance),
                        "current_balance_side": db_ledger.current_balance_side.value,
                    },
                )
            action = 'FORCE_DEACTIVATE'
            logger.warning(
                f"Force-deactivating ledger {db_ledger.id} '{db_ledger.name}' with balance "
                f"{db_ledger.current_balance} {db_ledger.current_balance_side.value} "
                f"by {user_id} for tenant {tenant_id}. Reason: {reason or 'not given'}"
            )

        db_ledger.status = LedgerStatus.INACTIVE
        _save(db, db_ledger, action, user_id, old_values)
    except StaleDataError:
        raise concurrent_update_error(db, f"deactivating ledger {ledger_id}")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_ledger)

    logger.info(f"Ledger {db_ledger.id} '{db_ledger.name}' deactivated by {user_id} for tenant {tenant_id}")
    return db_ledger


def reactivate_ledger(db: Session, ledger_id: int, tenant_id: str, user_id: str = SYSTEM_USER) -> LedgerAccount:
    try:
        db_ledger = _lock_ledger(db, ledger_id, tenant_id)
        if db_ledger.is_active:
            db.rollback()
            return db_ledger
        if _active_name_taken(db, tenant_id, db_ledger.name, exclude_id=db_ledger.id):
            raise ConflictError(
                f"Another active ledger is already named '{db_ledger.name}'",
                details={"ledger_id": db_ledger.id},
            )

        old_values = sqlalchemy_to_dict(db_ledger)
        db_ledger.status = LedgerStatus.ACTIVE
        _save(db, db_ledger, 'REACTIVATE', user_id, old_values)
    except StaleDataError:
        raise concurrent_update_error(db, f"reactivating ledger {ledger_id}")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_ledger)
    return db_ledger


def lock_ledgers(db: Session, tenant_id: str, ledger_ids: Iterable[int]) -> Dict[int, LedgerAccount]:
    """Load ledgers with row locks, always in id order so concurrent postings cannot deadlock."""
    ids = sorted(set(ledger_ids))
    if not ids:
        return {}
    rows = (
        db.query(LedgerAccount)
        .filter(LedgerAccount.tenant_id == tenant_id, LedgerAccount.id.in_(ids))
        .order_by(LedgerAccount.id)
        .with_for_update()
        .populate_existing()
        .all()
    )
    return {row.id: row for row in rows}


def apply_entry(ledger: LedgerAccount, debit_paise: int, credit_paise: int) -> None:
    """Move a ledger's running balance by one debit or credit.

    Only the voucher posting path calls this, inside its transaction. The new
    magnitude and side are computed before either attribute is touched.
    """
    if debit_paise < 0 or credit_paise < 0:
        raise ValidationError("Entry amounts must not be negative")
    signed = to_signed(ledger.current_balance_paise, ledger.current_balance_side.value)
    signed += debit_paise - credit_paise
    magnitude, side = from_signed(signed, ledger.account_type.natural_side.value)

    ledger.current_balance_paise = magnitude
    ledger.current_balance_side = BalanceSide(side)


def find_default_cash_ledger(db: Session, tenant_id: str) -> Optional[LedgerAccount]:
    return db.query(LedgerAccount).filter(
        LedgerAccount.tenant_id == tenant_id,
        LedgerAccount.account_type == AccountType.CASH,
        LedgerAccount.status == LedgerStatus.ACTIVE
    ).order_by(LedgerAccount.id.asc()).first()


def get_outstanding_ledgers(db: Session, tenant_id: str) -> List[LedgerAccount]:
    """Active party ledgers that still carry a balance."""
    return db.query(LedgerAccount).filter(
        LedgerAccount.tenant_id == tenant_id,
        LedgerAccount.status == LedgerStatus.ACTIVE,
        LedgerAccount.account_type.in_([AccountType.SUNDRY_DEBTORS, AccountType.SUNDRY_CREDITORS]),
        LedgerAccount.current_balance_paise != 0
    ).order_by(LedgerAccount.name.asc()).all()


def initialize_default_ledgers(db: Session, tenant_id: str, user_id: str = SYSTEM_USER) -> List[LedgerAccount]:
    """Create the standard ledgers a new society needs. Safe to run repeatedly."""
    created = []
    for ledger_data in DEFAULT_LEDGERS:
        if _active_name_taken(db, tenant_id, ledger_data["name"]):
            continue
        created.append(create_ledger(db, tenant_id, user_id=user_id, **ledger_data))
    return created
